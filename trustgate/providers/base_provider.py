#!/usr/bin/env python3
"""
Base Provider Abstract Class

This module defines the abstract base class for all remote AI services.
Concrete implementations (OpenAI, GWDG, Gemini) inherit from this class and
only describe their request/response shape; the guard sequence around the call
(rate limiting, circuit breaking, signing, pinning, validation) is applied
generically by GuardedGenerationService.

Architectural Decision: Abstract base class for consistent patterns
- Common interface for all providers (build_prompt, build_payload, call, parse_response)
- One transport path: JSON POST over a pinned httpx client
- Retry on connection errors only (tenacity)
- Structured error mapping to provider exceptions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import httpx
import orjson

from trustgate.core.config.constants import LLMProvider, Stage
from trustgate.core.config.settings import Settings
from trustgate.core.exceptions import ProviderAPIError, ProviderTimeoutError
from trustgate.core.logging.logger import get_logger
from trustgate.core.resilience.retry import create_retry_decorator
from trustgate.providers.prompts import build_prompt
from trustgate.security.certificate_pinner import CertificatePinner
from trustgate.validators.response_validator import ResponseValidator, strip_code_fences

logger = get_logger(__name__)


@dataclass
class ProviderConfig:
    """
    Configuration for a remote AI service.

    Attributes:
        name: Service name (openai, gwdg, google)
        api_key: API key for authentication
        base_url: Base URL for API
        model: Model identifier
        timeout: Request timeout in seconds
        max_attempts: Attempts on connection errors
    """
    name: str
    api_key: str
    base_url: str
    model: str
    timeout: float = 30.0
    max_attempts: int = 2
    temperature: float = 0.7
    max_tokens: int = 2000


class BaseProvider(ABC):
    """
    Abstract base class for remote AI services.

    STAGE-6: Remote call

    Subclasses must implement:
    - endpoint: Full URL of the generation endpoint
    - build_payload(): Vendor request body

    Usage:
        provider = OpenAIProvider(config)
        payload = provider.build_payload(provider.build_prompt("Photosynthesis"))
        async with pinner.build_client(provider.host, provider.config.timeout) as client:
            data = await provider.call(client, payload, provider.auth_headers())
        text = provider.parse_response(data)
    """

    def __init__(
        self,
        config: ProviderConfig,
        system_prompt: str | None = None,
        pinner: CertificatePinner | None = None,
        response_validator: ResponseValidator | None = None,
        settings: Settings | None = None,
    ):
        self.config = config
        self.name = config.name
        self.system_prompt = system_prompt
        self._pinner = pinner or CertificatePinner(settings)
        self._response_validator = response_validator or ResponseValidator(settings)

    @property
    def provider_type(self) -> LLMProvider:
        return LLMProvider(self.name.lower())

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Full URL requests are POSTed to."""

    @property
    def host(self) -> str:
        return urlparse(self.endpoint).hostname or ""

    def build_prompt(self, user_prompt: str) -> str:
        return build_prompt(user_prompt, self.system_prompt)

    @abstractmethod
    def build_payload(self, prompt: str) -> dict[str, Any]:
        """Vendor-specific JSON body for one prompt."""

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def parse_response(self, data: Any) -> str:
        """
        Extract the generated text (schema + safety checked) and unwrap fences.

        Raises:
            MalformedResponseError, UnsafeContentError
        """
        text = self._response_validator.validate(self.name, data)
        return strip_code_fences(text)

    async def _post(
        self, client: httpx.AsyncClient, payload: dict[str, Any], headers: dict[str, str]
    ) -> dict[str, Any]:
        async with client.stream(
            "POST",
            self.endpoint,
            content=orjson.dumps(payload),
            headers={"Content-Type": "application/json", **headers},
            timeout=self.config.timeout,
        ) as response:
            # Pin check runs on the live connection, before the body is trusted
            self._pinner.verify_certificate(self.host, self._pinner.peer_certificate(response))
            body = await response.aread()

        if response.status_code != 200:
            raise ProviderAPIError(
                f"{self.name} API returned status code {response.status_code}",
                details={
                    "provider": self.name,
                    "status_code": response.status_code,
                    "error": self._error_message(body),
                },
            )

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ProviderAPIError(
                f"{self.name} API returned a body that is not JSON",
                details={"provider": self.name},
            ) from e

    @staticmethod
    def _error_message(body: bytes) -> str | None:
        try:
            decoded = orjson.loads(body)
        except orjson.JSONDecodeError:
            return None
        if isinstance(decoded, dict) and isinstance(decoded.get("error"), dict):
            return decoded["error"].get("message")
        return None

    async def call(
        self, client: httpx.AsyncClient, payload: dict[str, Any], headers: dict[str, str]
    ) -> dict[str, Any]:
        """
        POST payload and return the decoded JSON body.

        STAGE-6.1: Remote call with retry

        Raises:
            ProviderTimeoutError: Timed out (not retried)
            ProviderAPIError: Non-200 status, undecodable body, transport error
            CertificateMismatchError: Pinned host presented an unknown certificate
        """
        retrying = create_retry_decorator(max_attempts=self.config.max_attempts)

        logger.info(
            "Calling remote service",
            stage=Stage.REMOTE_CALL.value,
            provider=self.name,
            model=self.config.model,
            host=self.host,
        )
        try:
            return await retrying(self._post)(client, payload, headers)
        except httpx.TimeoutException as e:
            logger.error("Remote call timed out", stage=Stage.REMOTE_CALL.value, provider=self.name)
            raise ProviderTimeoutError(
                f"{self.name} did not respond within {self.config.timeout:g} seconds",
                details={"provider": self.name, "timeout": self.config.timeout},
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "Remote call failed",
                stage=Stage.REMOTE_CALL.value,
                provider=self.name,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ProviderAPIError.from_exception(
                e, message=f"{self.name} API call failed", provider=self.name
            ) from e
