"""Google Gemini extractor implementation."""

import logging
from typing import Any

import httpx

from card_mailer.capture import parse_data_uri
from card_mailer.errors import ProviderError, ResponseFormatError
from card_mailer.extractor.base import SYSTEM_PROMPT, TEXT_INPUT_TEMPLATE, Extractor
from card_mailer.models.email import CardInput

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "companyName": {
            "type": "STRING",
            "description": (
                "The official name of the company on the card, including legal "
                "entity status (e.g., Co., Ltd., 株式会社)."
            ),
        },
        "personName": {
            "type": "STRING",
            "description": "The full name of the individual on the card.",
        },
    },
    "required": ["companyName", "personName"],
}


class GeminiExtractor(Extractor):
    """Extractor using the Gemini generateContent API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    def build_payload(self, card: CardInput) -> dict[str, Any]:
        """Build the generateContent request body with a JSON response schema."""
        parts: list[dict[str, Any]] = [{"text": SYSTEM_PROMPT}]
        if card.image_data_uri is not None:
            media_type, data = parse_data_uri(card.image_data_uri)
            parts.append({"inlineData": {"mimeType": media_type, "data": data}})
        else:
            parts.append({"text": TEXT_INPUT_TEMPLATE.format(text=card.text)})

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def _complete(self, card: CardInput) -> str:
        """Call Gemini and return the concatenated candidate text."""
        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = self.build_payload(card)
        logger.debug("POST %s mode=%s", url, card.mode.value)

        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            resp = client.post(url, json=payload, headers={"x-goog-api-key": self._api_key})

        if resp.is_error:
            raise ProviderError(*_classify_error(resp))

        data = resp.json()
        if not isinstance(data, dict):
            raise ResponseFormatError(f"Unexpected response body: {type(data).__name__}")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return ""

        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
        )


def _classify_error(resp: httpx.Response) -> tuple[str, int]:
    """Return a short message and status, reporting a bad key as 401."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {}

    status_code = resp.status_code
    if "API_KEY_INVALID" in resp.text:
        status_code = 401

    message = error.get("message")
    return (f"HTTP {resp.status_code}: {message}" if message else f"HTTP {resp.status_code}"), status_code
