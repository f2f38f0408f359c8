"""Input capture: turning image files into data URIs."""

import base64
import logging
import mimetypes
import re
from pathlib import Path

from card_mailer.config import MAX_IMAGE_BYTES
from card_mailer.errors import InputValidationError

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"

_DATA_URI_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)


def size_limit_message(max_bytes: int) -> str:
    """Localized message for an oversized image."""
    megabytes = max_bytes / (1024 * 1024)
    return f"画像サイズは{megabytes:g}MB以下にしてください。"


def read_image_as_data_uri(image_path: str | Path, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """
    Read an image file and encode it as a base64 data URI.

    The size check happens before the file is read.

    Args:
        image_path: Path to the business card image.
        max_bytes: Largest accepted file size.

    Returns:
        ``data:<mime>;base64,<payload>`` string.

    Raises:
        FileNotFoundError: If the image file does not exist.
        InputValidationError: If the file is too large or not an image.
    """
    path = Path(image_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")

    size = path.stat().st_size
    if size > max_bytes:
        logger.debug("Rejected %s: %d bytes exceeds %d", path, size, max_bytes)
        raise InputValidationError(
            size_limit_message(max_bytes),
            {"size": size, "max_bytes": max_bytes},
        )

    media_type, _ = mimetypes.guess_type(path.name)
    media_type = media_type or DEFAULT_MEDIA_TYPE
    if not media_type.startswith("image/"):
        raise InputValidationError(
            "画像ファイルを選択してください。", {"media_type": media_type}
        )

    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def parse_data_uri(data_uri: str) -> tuple[str, str]:
    """
    Split a data URI into media type and base64 payload.

    Falls back to ``image/png`` and the text after the first comma when the
    prefix is not a well-formed base64 data URI.
    """
    match = _DATA_URI_RE.match(data_uri)
    if match:
        return match.group(1), match.group(2)

    payload = data_uri.split(",", 1)[1] if "," in data_uri else data_uri
    return DEFAULT_MEDIA_TYPE, payload
