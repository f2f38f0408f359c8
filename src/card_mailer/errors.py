"""Exception hierarchy for the card mailer."""

from typing import Optional


class CardMailerError(ValueError):
    """Base exception for all card mailer errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputValidationError(CardMailerError):
    """Raised when user input is rejected before any network call."""


class ConfigurationError(CardMailerError):
    """Raised when a required setting is missing or invalid."""

    def __init__(self, config_name: str, message: Optional[str] = None):
        super().__init__(
            message or f"Configuration missing: {config_name}",
            {"config_name": config_name},
        )
        self.config_name = config_name


class ExtractionError(CardMailerError):
    """User-facing failure of a business card extraction request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        diagnostic: Optional[str] = None,
    ):
        super().__init__(
            message,
            {"status_code": status_code, "diagnostic": diagnostic},
        )
        self.status_code = status_code
        self.diagnostic = diagnostic


class ProviderError(Exception):
    """Raised by extractor backends when the provider rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(ValueError):
    """Raised when the provider response cannot be normalized."""
