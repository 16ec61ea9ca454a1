"""
Guarded Generation Service
==========================

Runs one outbound generation request through the full trust boundary:

    sanitise prompt
      -> cooldown + API-call window (record or reject)
      -> concurrency slot (held until the remote call has finished)
         -> circuit availability check
         -> sign payload
         -> pinned client -> remote call (retry on connection errors only)
         -> record success / failure on the circuit
      -> schema + content-safety validation, fence stripping
      -> lenient page parse

Ordering guarantees:
- Rate limits are recorded before the remote call is attempted
- The circuit check happens before the call, the outcome is recorded right
  after it on every path, including timeouts
- The concurrency slot is released on every exit path
- Response validation failures do not count against the circuit

ARCHITECTURE:
-------------
Caller -> GuardedGenerationService -> ActorContext (RateLimiter, CircuitBreaker)
                                   -> RequestSigner
                                   -> CertificatePinner -> httpx.AsyncClient
                                   -> BaseProvider (vendor shape)
                                   -> validators
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from trustgate.core.config.constants import HEADER_REQUEST_ID, RateLimitKind, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.context import ActorContext
from trustgate.core.logging.logger import clear_actor_id, get_logger, log_stage, set_actor_id
from trustgate.providers.base_provider import BaseProvider
from trustgate.security.certificate_pinner import CertificatePinner
from trustgate.security.request_signer import RequestSigner
from trustgate.validators.content_safety import ContentSafetyValidator, sanitize_user_input
from trustgate.validators.page_parser import PageDiagnostic, ParsedPage, require_pages

logger = get_logger(__name__)

ClientFactory = Callable[[BaseProvider], httpx.AsyncClient]


@dataclass
class GenerationResult:
    service: str
    request_id: str
    pages: list[ParsedPage] = field(default_factory=list)
    diagnostics: list[PageDiagnostic] = field(default_factory=list)
    raw_content: str = ""


class GuardedGenerationService:
    """
    USAGE:
    ------
    service = GuardedGenerationService()
    actor = ActorContext("session-42", store)
    provider = create_provider("openai", secrets=secret_config)
    result = await service.generate(actor, provider, "Photosynthesis for 8th grade")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        signer: RequestSigner | None = None,
        pinner: CertificatePinner | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """
        Args:
            client_factory: Builds the HTTP client for a provider. Defaults to a
                client whose TLS context the pinner hardened for the provider's host.
        """
        self.settings = settings or get_settings()
        self.signer = signer or RequestSigner(self.settings)
        self.pinner = pinner or CertificatePinner(self.settings)
        self.content_safety = ContentSafetyValidator(self.settings)
        self._client_factory = client_factory or self._pinned_client

    def _pinned_client(self, provider: BaseProvider) -> httpx.AsyncClient:
        return self.pinner.build_client(provider.host, timeout=provider.config.timeout)

    async def generate(
        self, actor: ActorContext, provider: BaseProvider, user_prompt: str
    ) -> GenerationResult:
        """
        Raises:
            OversizedInputError, ValidationError, UnsafeContentError: Bad prompt
            CooldownActiveError, RateLimitExceededError, ConcurrencyExceededError: Budget
            CircuitBreakerOpenError: Service failing, retry later
            ProviderError, CertificateMismatchError: Remote call failed
            MalformedResponseError, UnsafeContentError, NoValidPagesError: Bad response
        """
        set_actor_id(actor.actor_id)
        try:
            return await self._generate(actor, provider, user_prompt)
        finally:
            clear_actor_id()

    async def _generate(
        self, actor: ActorContext, provider: BaseProvider, user_prompt: str
    ) -> GenerationResult:
        service = provider.name

        # STAGE-1: Input sanitisation
        prompt = sanitize_user_input(user_prompt, self.settings.content.USER_INPUT_MAX_LENGTH)
        self.content_safety.validate_not_empty(prompt, "Prompt")
        self.content_safety.validate(prompt)
        log_stage(
            logger, Stage.INPUT_SANITIZATION, "Prompt accepted", level="debug", length=len(prompt)
        )

        # STAGE-2: Rate limiting
        limiter = actor.rate_limiter
        await limiter.record_cooldown_event()
        await limiter.record(RateLimitKind.API_CALL)
        log_stage(logger, Stage.RATE_LIMITING, "Generation admitted", service=service)

        async with limiter.concurrent_slot():
            # STAGE-3: Circuit check
            breaker = actor.circuit_breaker
            await breaker.check_availability(service)

            # STAGE-4: Signing
            payload = provider.build_payload(provider.build_prompt(prompt))
            signature_headers = self.signer.signature_headers(service, payload, provider.config.api_key)
            request_id = signature_headers[HEADER_REQUEST_ID]
            headers = {**provider.auth_headers(), **signature_headers}

            # STAGE-5/6: Pinned transport and remote call
            try:
                async with self._client_factory(provider) as client:
                    data = await provider.call(client, payload, headers)
            except BaseException as e:
                # Cancellation and timeouts count against the circuit too.
                await breaker.record_failure(service)
                log_stage(
                    logger,
                    Stage.REMOTE_CALL,
                    "Remote call failed",
                    level="error",
                    service=service,
                    request_id=request_id,
                    error_type=type(e).__name__,
                )
                raise
            await breaker.record_success(service)

        # STAGE-7: Response validation
        text = provider.parse_response(data)

        # STAGE-8: Page parsing
        parsed = require_pages(text)
        log_stage(
            logger,
            Stage.PAGE_PARSING,
            "Generation completed",
            service=service,
            request_id=request_id,
            pages=len(parsed.pages),
            skipped=len(parsed.diagnostics),
        )

        return GenerationResult(
            service=service,
            request_id=request_id,
            pages=parsed.pages,
            diagnostics=parsed.diagnostics,
            raw_content=text,
        )
