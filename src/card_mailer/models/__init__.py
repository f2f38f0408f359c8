"""Data models flowing through the card mailer."""

from card_mailer.models.email import (
    PERSON_NAME_FALLBACK,
    CardInput,
    EmailTemplateData,
    ExtractedInfo,
    GeneratedEmail,
    InputMode,
)

__all__ = [
    "PERSON_NAME_FALLBACK",
    "CardInput",
    "EmailTemplateData",
    "ExtractedInfo",
    "GeneratedEmail",
    "InputMode",
]
