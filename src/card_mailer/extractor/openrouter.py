"""OpenRouter chat-completions extractor implementation."""

import json
import logging
from collections.abc import Iterable
from typing import Any

import httpx

from card_mailer.capture import parse_data_uri
from card_mailer.errors import ProviderError, ResponseFormatError
from card_mailer.extractor.base import SYSTEM_PROMPT, TEXT_INPUT_TEMPLATE, Extractor
from card_mailer.models.email import CardInput

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterExtractor(Extractor):
    """Extractor using a multimodal model hosted on OpenRouter."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize OpenRouter extractor.

        Args:
            api_key: OpenRouter API key.
            model: Model identifier (e.g., "google/gemini-2.5-flash").
            base_url: OpenRouter API base URL.
            timeout: Request timeout in seconds, None to wait indefinitely.
            transport: Optional httpx transport, used by tests.
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return f"openrouter:{self._model}"

    def build_payload(self, card: CardInput) -> dict[str, Any]:
        """Build the chat-completions request body."""
        parts: list[dict[str, Any]] = []
        if card.image_data_uri is not None:
            media_type, data = parse_data_uri(card.image_data_uri)
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{media_type};base64,{data}"},
                }
            )
        else:
            parts.append({"type": "text", "text": TEXT_INPUT_TEMPLATE.format(text=card.text)})

        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": parts},
            ],
            "response_format": {"type": "json_object"},
            "stream": True,
        }

    def _complete(self, card: CardInput) -> str:
        """Call OpenRouter and assemble the streamed response."""
        url = f"{self._base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "X-Title": "card-mailer",
        }
        payload = self.build_payload(card)
        logger.debug("POST %s model=%s mode=%s", url, self._model, card.mode.value)

        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            with client.stream("POST", url, json=payload, headers=headers) as resp:
                if resp.is_error:
                    resp.read()
                    raise ProviderError(_error_message(resp), resp.status_code)

                content_type = resp.headers.get("content-type", "")
                if "text/event-stream" in content_type:
                    return self._read_stream(resp.iter_lines())

                resp.read()
                return self._read_message(resp.json())

    def _read_stream(self, lines: Iterable[str]) -> str:
        """Concatenate the delta content of a server-sent event stream."""
        chunks: list[str] = []
        for line in lines:
            # Blank separators and ": OPENROUTER PROCESSING" keep-alives
            if not line.startswith("data:"):
                continue
            data = line[len("data:"):].strip()
            if data == "[DONE]":
                break

            event = json.loads(data)
            if not isinstance(event, dict):
                raise ResponseFormatError(
                    f"Unexpected stream chunk: {type(event).__name__}"
                )
            if "error" in event:
                raise _provider_error(event["error"], "stream error")

            delta = _first_choice(event).get("delta")
            if isinstance(delta, dict):
                text = delta.get("content")
                if isinstance(text, str):
                    chunks.append(text)

        logger.debug("Assembled %d stream chunks", len(chunks))
        return "".join(chunks)

    def _read_message(self, data: Any) -> str:
        """Read the content of a non-streamed completion."""
        if not isinstance(data, dict):
            raise ResponseFormatError(
                f"Unexpected completion body: {type(data).__name__}"
            )
        if "error" in data:
            raise _provider_error(data["error"], "provider error")

        message = _first_choice(data).get("message")
        if not isinstance(message, dict):
            return ""

        content = message.get("content")
        if isinstance(content, list):
            return "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return content if isinstance(content, str) else ""


def _first_choice(data: dict[str, Any]) -> dict[str, Any]:
    """First entry of ``choices``, or an empty dict when absent or malformed."""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return {}


def _provider_error(error: Any, default: str) -> ProviderError:
    """Build a ProviderError from an ``error`` value that may be an object or a string."""
    if isinstance(error, dict):
        return ProviderError(str(error.get("message") or default), _as_int(error.get("code")))
    return ProviderError(str(error) if error else default)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _error_message(resp: httpx.Response) -> str:
    """Short provider error description without the raw body."""
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    return f"HTTP {resp.status_code}: {message}" if message else f"HTTP {resp.status_code}"
