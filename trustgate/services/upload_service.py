"""
Upload Screening Service

Charges one file-processing event to the actor, then runs the file security
validator. The validator may spawn a malware scanner, so it runs in a worker
thread to keep the event loop free.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from trustgate.core.config.constants import RateLimitKind, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.context import ActorContext
from trustgate.core.logging.logger import get_logger, log_stage
from trustgate.validators.file_validator import FileSecurityValidator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScreenedUpload:
    file_type: str
    size: int
    malware_scanned: bool


class UploadScreeningService:
    def __init__(
        self, settings: Settings | None = None, validator: FileSecurityValidator | None = None
    ):
        self.settings = settings or get_settings()
        self.validator = validator or FileSecurityValidator(self.settings)

    async def screen(
        self,
        actor: ActorContext,
        content: bytes,
        file_type: str,
        path: str | Path | None = None,
    ) -> ScreenedUpload:
        """
        Raises:
            RateLimitExceededError: File-processing budget exhausted
            OversizedInputError, FileValidationError (and subclasses): Upload rejected
        """
        await actor.rate_limiter.record(RateLimitKind.FILE_PROCESSING)

        await asyncio.to_thread(self.validator.validate, content, file_type, path)

        scanner = self.validator.scanner
        scanned = path is not None and scanner is not None and scanner.is_available()
        log_stage(
            logger,
            Stage.FILE_SECURITY,
            "Upload accepted",
            actor_id=actor.actor_id,
            file_type=file_type,
            size=len(content),
            malware_scanned=scanned,
        )
        return ScreenedUpload(file_type=file_type, size=len(content), malware_scanned=scanned)
