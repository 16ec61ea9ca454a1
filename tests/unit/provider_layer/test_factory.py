"""
Unit Tests for the Provider Factory
"""

import pytest

from tests.test_fixtures.response_factory import ResponseTestFactory
from tests.test_fixtures.settings_factory import make_settings
from trustgate.core.config.constants import LLMProvider
from trustgate.core.exceptions import ProviderNotConfiguredError, UnsafeContentError
from trustgate.infrastructure.config.memory_store import InMemoryConfigStore
from trustgate.providers import GeminiProvider, GWDGProvider, OpenAIProvider, create_provider
from trustgate.security.secret_config import SecretConfig


@pytest.mark.unit
class TestCreateProvider:
    @pytest.mark.parametrize(
        "name, provider_class",
        [("openai", OpenAIProvider), ("gwdg", GWDGProvider), ("google", GeminiProvider)],
    )
    def test_known_services(self, settings, name, provider_class):
        provider = create_provider(name, settings)

        assert isinstance(provider, provider_class)
        assert provider.name == name

    def test_accepts_enum_and_any_case(self, settings):
        assert create_provider(LLMProvider.GOOGLE, settings).name == "google"
        assert create_provider("OpenAI", settings).name == "openai"

    def test_settings_flow_into_config(self):
        settings = make_settings(
            OPENAI_MODEL="gpt-4o-mini",
            PROVIDER_TIMEOUT=12.5,
            PROVIDER_MAX_ATTEMPTS=4,
            SYSTEM_PROMPT="## Title ## Content",
        )

        provider = create_provider("openai", settings)

        assert provider.config.model == "gpt-4o-mini"
        assert provider.config.timeout == 12.5
        assert provider.config.max_attempts == 4
        assert provider.config.api_key == "sk-test-openai"
        assert provider.system_prompt == "## Title ## Content"

    def test_content_limit_flows_into_response_validation(self):
        provider = create_provider("openai", make_settings(CONTENT_MAX_LENGTH=50))
        data = ResponseTestFactory.openai("## Title\nA\n## Content\n" + "x" * 220)

        with pytest.raises(UnsafeContentError) as exc_info:
            provider.parse_response(data)

        assert exc_info.value.category == "oversized"
        assert "(50 characters)" in exc_info.value.message

    def test_unknown_service(self, settings):
        with pytest.raises(ProviderNotConfiguredError) as exc_info:
            create_provider("anthropic", settings)

        assert exc_info.value.details["available"] == ["openai", "gwdg", "google"]

    def test_missing_key(self):
        settings = make_settings(GWDG_API_KEY=None)

        with pytest.raises(ProviderNotConfiguredError) as exc_info:
            create_provider("gwdg", settings)

        assert "gwdg configuration is incomplete" in exc_info.value.message
        assert "suggestion" in exc_info.value.details

    def test_missing_model(self):
        with pytest.raises(ProviderNotConfiguredError):
            create_provider("openai", make_settings(OPENAI_MODEL=""))

    def test_secret_config_key_preferred(self, settings, encryption):
        secrets = SecretConfig(InMemoryConfigStore(), encryption=encryption)
        secrets.set("openai_api_key", "sk-from-admin-config")

        provider = create_provider("openai", settings, secrets=secrets)

        assert provider.config.api_key == "sk-from-admin-config"

    def test_secret_config_without_key_falls_back(self, settings, encryption):
        secrets = SecretConfig(InMemoryConfigStore(), encryption=encryption)

        assert create_provider("google", settings, secrets=secrets).config.api_key == "AIza-test-google"
