"""Abstract base class for business card extractors."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from card_mailer.errors import ExtractionError, ProviderError, ResponseFormatError
from card_mailer.models.email import PERSON_NAME_FALLBACK, CardInput, ExtractedInfo

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are an expert secretary AI.
Analyze the provided business card information.
Extract the official Company Name (Corporate Entity) and the Person's Name.

Rules:
1. Extract the full company name (e.g., "Google Inc." not just "Google", keep legal entity such as 株式会社).
2. Extract the full person name.
3. If the company name is missing, return an empty string.
4. If the person name is missing or unclear, infer strictly from context or return "{PERSON_NAME_FALLBACK}".
5. Return ONLY a valid JSON object with the structure: {{"companyName": "...", "personName": "..."}}"""

TEXT_INPUT_TEMPLATE = "Business Card Text Content:\n{text}"

MSG_INVALID_API_KEY = "APIキーが無効です。設定を確認してください。"
MSG_MODEL_NOT_FOUND = "指定されたモデルが見つかりません。モデルIDを確認してください。"
MSG_EXTRACTION_FAILED = "名刺情報の読み取りに失敗しました: {diagnostic}"
MSG_UNEXPECTED = "予期せぬエラー"

_FIELD_KEYS = {
    "company_name": ("companyName", "company_name"),
    "person_name": ("personName", "person_name"),
}


class Extractor(ABC):
    """
    Capability interface: turn a business card into an ExtractedInfo.

    Subclasses only talk to their provider; prompt, response normalization and
    error mapping live here.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this extractor."""
        ...

    @abstractmethod
    def _complete(self, card: CardInput) -> str:
        """
        Send the card to the provider and return the complete response text.

        Raises:
            ProviderError: If the provider rejects the request.
            httpx.HTTPError: On transport failures.
        """
        ...

    def extract(self, card: CardInput) -> ExtractedInfo:
        """
        Extract company and person names from a business card.

        Args:
            card: Image or text input, exactly one of them set.

        Returns:
            Normalized ExtractedInfo.

        Raises:
            ExtractionError: On any network, provider or response-shape failure.
        """
        try:
            text = self._complete(card)
            logger.debug("%s response: %s", self.name, text)
            if not text.strip():
                raise ResponseFormatError("No response content generated")
            return self._parse_response(text)
        except ProviderError as e:
            logger.warning("%s rejected the request: %s", self.name, e)
            raise self._to_extraction_error(str(e), e.status_code) from e
        except httpx.HTTPStatusError as e:
            logger.warning("%s returned HTTP %d", self.name, e.response.status_code)
            raise self._to_extraction_error(
                f"HTTP {e.response.status_code}", e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %r", self.name, e)
            raise self._to_extraction_error(str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.warning("%s returned an unusable response: %s", self.name, e)
            raise self._to_extraction_error(str(e)) from e
        except (TypeError, AttributeError, KeyError, IndexError) as e:
            logger.exception("%s response had an unexpected shape", self.name)
            raise self._to_extraction_error(f"Unexpected response shape: {type(e).__name__}") from e

    @staticmethod
    def _to_extraction_error(diagnostic: str, status_code: int | None = None) -> ExtractionError:
        """Map a failure to the localized user-facing error."""
        if status_code == 401:
            message = MSG_INVALID_API_KEY
        elif status_code == 404:
            message = MSG_MODEL_NOT_FOUND
        else:
            message = MSG_EXTRACTION_FAILED.format(diagnostic=diagnostic or MSG_UNEXPECTED)
        return ExtractionError(message, status_code=status_code, diagnostic=diagnostic)

    def _parse_response(self, response: str) -> ExtractedInfo:
        """Parse model output into ExtractedInfo, accepting snake_case keys."""
        json_str = self._extract_json(response)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ResponseFormatError(f"Invalid JSON response from LLM: {e}") from e

        if not isinstance(data, dict):
            raise ResponseFormatError(
                f"Invalid response format: expected an object, got {type(data).__name__}"
            )

        values: dict[str, Any] = {}
        for field, keys in _FIELD_KEYS.items():
            key = next((k for k in keys if k in data), None)
            if key is None:
                raise ResponseFormatError(
                    "Invalid response format: missing fields. "
                    f"Received keys: {', '.join(data.keys())}"
                )
            values[field] = self._to_str(data[key])

        return ExtractedInfo(
            company_name=values["company_name"] or "",
            person_name=values["person_name"] or PERSON_NAME_FALLBACK,
        )

    def _to_str(self, value: Any) -> str | None:
        """Convert value to a stripped string, handling lists by taking first element."""
        if value is None:
            return None
        if isinstance(value, list):
            return self._to_str(value[0]) if value else None
        return str(value).strip()

    def _extract_json(self, text: str) -> str:
        """Extract JSON from text, handling potential markdown code blocks."""
        code_block_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
        if code_block_match:
            return code_block_match.group(1).strip()

        json_match = re.search(r"\{[\s\S]*\}", text)
        if json_match:
            return json_match.group(0)

        return text.strip()
