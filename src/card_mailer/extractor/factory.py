"""Build the configured extractor backend."""

from card_mailer.config import Settings
from card_mailer.errors import ConfigurationError
from card_mailer.extractor import gemini, openrouter
from card_mailer.extractor.base import Extractor

BACKENDS = ("openrouter", "gemini")


def create_extractor(settings: Settings, extractor_spec: str | None = None) -> Extractor:
    """
    Create extractor instance from a ``<backend>:<model>`` spec string.

    Args:
        settings: Application settings with credentials and endpoints.
        extractor_spec: Overrides ``settings.extractor`` when given.

    Raises:
        ConfigurationError: If the backend is unknown or its API key is missing.
    """
    spec = extractor_spec or settings.extractor
    if ":" in spec:
        backend, model = spec.split(":", 1)
    else:
        backend, model = spec, ""

    if backend == "openrouter":
        if not settings.openrouter_api_key:
            raise ConfigurationError(
                "OPENROUTER_API_KEY",
                "OpenRouter APIキーが設定されていません。"
                "環境変数または .env に OPENROUTER_API_KEY を設定してください。",
            )
        return openrouter.OpenRouterExtractor(
            api_key=settings.openrouter_api_key,
            model=model or openrouter.DEFAULT_MODEL,
            base_url=settings.openrouter_base_url,
            timeout=settings.request_timeout,
        )

    if backend == "gemini":
        if not settings.gemini_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY",
                "Gemini APIキーが設定されていません。"
                "環境変数または .env に GEMINI_API_KEY を設定してください。",
            )
        return gemini.GeminiExtractor(
            api_key=settings.gemini_api_key,
            model=model or gemini.DEFAULT_MODEL,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
        )

    raise ConfigurationError(
        "extractor",
        f"Unknown extractor backend: {backend}. Use one of: "
        + ", ".join(f"'{b}:<model>'" for b in BACKENDS),
    )
