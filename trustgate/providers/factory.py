"""
Provider Factory

STAGE-4.F: Builds the provider for a service name from settings, taking API
keys from SecretConfig (decrypted) when one is supplied and falling back to
the environment-backed settings otherwise.
"""

from trustgate.core.config.constants import LLMProvider
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import ProviderNotConfiguredError
from trustgate.core.logging.logger import get_logger
from trustgate.providers.base_provider import BaseProvider, ProviderConfig
from trustgate.providers.gemini_provider import GeminiProvider
from trustgate.providers.gwdg_provider import GWDGProvider
from trustgate.providers.openai_provider import OpenAIProvider
from trustgate.security.certificate_pinner import CertificatePinner
from trustgate.security.secret_config import SecretConfig

logger = get_logger(__name__)

PROVIDER_CLASSES: dict[LLMProvider, type[BaseProvider]] = {
    LLMProvider.OPENAI: OpenAIProvider,
    LLMProvider.GWDG: GWDGProvider,
    LLMProvider.GOOGLE: GeminiProvider,
}


def _settings_for(service: LLMProvider, settings: Settings) -> tuple[str | None, str, str]:
    llm = settings.llm
    if service == LLMProvider.OPENAI:
        return llm.OPENAI_API_KEY, llm.OPENAI_BASE_URL, llm.OPENAI_MODEL
    if service == LLMProvider.GWDG:
        return llm.GWDG_API_KEY, llm.GWDG_BASE_URL, llm.GWDG_MODEL
    return llm.GOOGLE_API_KEY, llm.GEMINI_BASE_URL, llm.GEMINI_MODEL


def create_provider(
    name: str | LLMProvider,
    settings: Settings | None = None,
    secrets: SecretConfig | None = None,
    pinner: CertificatePinner | None = None,
) -> BaseProvider:
    """
    Build a configured provider.

    Raises:
        ProviderNotConfiguredError: Unknown service, or API key / model missing
    """
    settings = settings or get_settings()
    try:
        service = LLMProvider(str(getattr(name, "value", name)).lower())
    except ValueError as e:
        raise ProviderNotConfiguredError(
            f"Unknown service '{name}'",
            details={"available": [p.value for p in LLMProvider]},
        ) from e

    api_key, base_url, model = _settings_for(service, settings)
    if secrets is not None:
        api_key = secrets.get(f"{service.value}_api_key") or api_key

    if not api_key or not model:
        logger.warning("Provider not configured", provider=service.value)
        raise ProviderNotConfiguredError(
            f"{service.value} configuration is incomplete (API key and model are required)",
            details={"provider": service.value},
        ).with_suggestion(f"Set {service.value}_api_key in the secret configuration")

    config = ProviderConfig(
        name=service.value,
        api_key=api_key,
        base_url=base_url,
        model=model,
        timeout=settings.llm.PROVIDER_TIMEOUT,
        max_attempts=settings.llm.PROVIDER_MAX_ATTEMPTS,
    )
    return PROVIDER_CLASSES[service](
        config,
        system_prompt=settings.llm.SYSTEM_PROMPT,
        pinner=pinner or CertificatePinner(settings),
        settings=settings,
    )
