"""Extractors turning business cards into company and person names."""

from card_mailer.extractor.base import Extractor
from card_mailer.extractor.factory import create_extractor
from card_mailer.extractor.gemini import GeminiExtractor
from card_mailer.extractor.openrouter import OpenRouterExtractor

__all__ = ["Extractor", "GeminiExtractor", "OpenRouterExtractor", "create_extractor"]
