"""
Remote AI Service Providers

Vendor-specific request/response shaping behind one interface. The guard
sequence is applied around any provider by GuardedGenerationService.
"""

from trustgate.providers.base_provider import BaseProvider, ProviderConfig
from trustgate.providers.factory import PROVIDER_CLASSES, create_provider
from trustgate.providers.gemini_provider import GeminiProvider
from trustgate.providers.gwdg_provider import GWDGProvider
from trustgate.providers.openai_provider import OpenAIProvider
from trustgate.providers.prompts import DEFAULT_SYSTEM_PROMPT, FORMAT_RULES, build_prompt

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "OpenAIProvider",
    "GWDGProvider",
    "GeminiProvider",
    "create_provider",
    "PROVIDER_CLASSES",
    "build_prompt",
    "FORMAT_RULES",
    "DEFAULT_SYSTEM_PROMPT",
]
