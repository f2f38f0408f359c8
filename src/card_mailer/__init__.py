"""Business card to thank-you email assistant."""

from card_mailer.composer import EmailComposer
from card_mailer.models.email import ExtractedInfo, GeneratedEmail
from card_mailer.template import render_email

__version__ = "0.1.0"
__all__ = ["EmailComposer", "ExtractedInfo", "GeneratedEmail", "render_email"]
