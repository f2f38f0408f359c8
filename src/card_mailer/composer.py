"""Main controller: extract names from a card, then render the email."""

import logging
import time

from card_mailer.extractor.base import Extractor
from card_mailer.models.email import CardInput, EmailTemplateData, GeneratedEmail
from card_mailer.template import render_email

logger = logging.getLogger(__name__)


class EmailComposer:
    """Compose thank-you emails from business cards."""

    def __init__(self, extractor: Extractor):
        """
        Initialize the composer with an extractor backend.

        Args:
            extractor: Backend used to read names from the card.
        """
        self._extractor = extractor

    @property
    def extractor_name(self) -> str:
        return self._extractor.name

    def compose(self, card: CardInput, sender_name: str, event_name: str) -> GeneratedEmail:
        """
        Extract names from a business card and render the email.

        Args:
            card: Image or text of the business card.
            sender_name: Employee sending the email.
            event_name: Event where the card was exchanged.

        Returns:
            GeneratedEmail with subject and body.

        Raises:
            ExtractionError: If the extraction request fails.
        """
        start_time = time.perf_counter()

        info = self._extractor.extract(card)
        email = render_email(
            EmailTemplateData(
                sender_name=sender_name,
                event_name=event_name,
                extracted_info=info,
            )
        )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Composed email via %s in %.0fms (company=%r, person=%r)",
            self._extractor.name,
            elapsed_ms,
            info.company_name,
            info.person_name,
        )
        return email
