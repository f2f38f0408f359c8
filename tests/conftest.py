"""Shared fixtures."""

import pytest

from card_mailer.config import Settings
from card_mailer.models.email import ExtractedInfo


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's .env file."""
    return Settings(
        _env_file=None,
        openrouter_api_key="test-openrouter-key",
        gemini_api_key="test-gemini-key",
        extractor="openrouter:google/gemini-2.5-flash",
        sender_names=["田中康太郎", "アーウィン海"],
        default_sender="田中康太郎",
        default_event="異業種交流会",
    )


@pytest.fixture
def sample_info() -> ExtractedInfo:
    return ExtractedInfo(company_name="株式会社サンプル", person_name="鈴木一郎")
