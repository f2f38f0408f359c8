"""Interactive session state: sender roster, input, result and copy marks."""

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import pyperclip

from card_mailer.capture import read_image_as_data_uri
from card_mailer.composer import EmailComposer
from card_mailer.config import Settings
from card_mailer.errors import ExtractionError, InputValidationError
from card_mailer.models.email import CardInput, GeneratedEmail, InputMode

logger = logging.getLogger(__name__)

COPIED_INDICATOR_SECONDS = 2.0

MSG_IMAGE_REQUIRED = "名刺の画像をアップロードしてください。"
MSG_TEXT_REQUIRED = "名刺のテキスト情報を入力してください。"
MSG_BUSY = "解析中です。しばらくお待ちください。"
MSG_UNEXPECTED = "予期せぬエラーが発生しました。"

CopyField = Literal["subject", "body"]


class Session:
    """
    In-memory state of one interactive session.

    Nothing is persisted. A successful generation replaces the previous result;
    selecting a new image clears it.
    """

    def __init__(
        self,
        composer: EmailComposer,
        settings: Settings,
        copier: Callable[[str], None] = pyperclip.copy,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._composer = composer
        self._copier = copier
        self._clock = clock
        self._max_image_bytes = settings.max_image_bytes

        self.senders: list[str] = list(settings.sender_names)
        if settings.default_sender not in self.senders:
            self.senders.insert(0, settings.default_sender)
        self.sender_name = settings.default_sender
        self.event_name = settings.default_event

        self.mode = InputMode.IMAGE
        self.image_data_uri: str | None = None
        self.image_path: Path | None = None
        self.text = ""

        self.result: GeneratedEmail | None = None
        self.error: str | None = None
        self.busy = False
        self._copied_at: dict[str, float] = {}

    def add_sender(self, name: str) -> bool:
        """Append a sender to the roster and make it current. Blank names are ignored."""
        name = name.strip()
        if not name:
            return False
        self.senders.append(name)
        self.sender_name = name
        return True

    def select_sender(self, name: str) -> None:
        if name not in self.senders:
            raise ValueError(f"Unknown sender: {name}")
        self.sender_name = name

    def set_mode(self, mode: InputMode) -> None:
        self.mode = InputMode(mode)

    def set_text(self, text: str) -> None:
        self.text = text

    def select_image(self, image_path: str | Path) -> bool:
        """
        Load an image for the next extraction.

        On rejection the error is recorded and the current result is kept.

        Returns:
            True if the image was accepted.
        """
        try:
            data_uri = read_image_as_data_uri(image_path, self._max_image_bytes)
        except (InputValidationError, FileNotFoundError, OSError) as e:
            self.error = getattr(e, "message", None) or str(e)
            logger.info("Image rejected: %s", self.error)
            return False

        self.image_data_uri = data_uri
        self.image_path = Path(image_path)
        self.error = None
        self.result = None
        return True

    @property
    def can_generate(self) -> bool:
        if self.busy:
            return False
        if self.mode is InputMode.IMAGE:
            return self.image_data_uri is not None
        return bool(self.text.strip())

    def _current_input(self) -> CardInput:
        if self.mode is InputMode.IMAGE:
            if self.image_data_uri is None:
                raise InputValidationError(MSG_IMAGE_REQUIRED)
            return CardInput.from_image(self.image_data_uri)

        if not self.text.strip():
            raise InputValidationError(MSG_TEXT_REQUIRED)
        return CardInput.from_text(self.text)

    def generate(self) -> GeneratedEmail | None:
        """
        Run one extraction and render the email.

        Returns:
            The new result, or None when the request was refused or failed
            (see ``error``).
        """
        if self.busy:
            self.error = MSG_BUSY
            return None

        try:
            card = self._current_input()
        except InputValidationError as e:
            self.error = e.message
            return None

        self.busy = True
        self.error = None
        self.result = None
        try:
            self.result = self._composer.compose(card, self.sender_name, self.event_name)
        except ExtractionError as e:
            self.error = e.message
        except Exception:
            logger.exception("Email generation failed")
            self.error = MSG_UNEXPECTED
        finally:
            self.busy = False

        return self.result

    def copy(self, field: CopyField) -> str:
        """Copy the subject or body of the current result to the clipboard."""
        if self.result is None:
            raise ValueError("Nothing to copy yet")
        if field not in ("subject", "body"):
            raise ValueError(f"Unknown field: {field}")

        text = getattr(self.result, field)
        self._copier(text)
        self._copied_at[field] = self._clock()
        return text

    def is_copied(self, field: CopyField) -> bool:
        """True while the transient copied mark for ``field`` should be shown."""
        copied_at = self._copied_at.get(field)
        if copied_at is None:
            return False
        return self._clock() - copied_at < COPIED_INDICATOR_SECONDS
