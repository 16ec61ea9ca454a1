"""
File Security Validator

Screens uploaded documents before they reach text extraction.

Checks (in order):
1. Size: content larger than FILE_MAX_SIZE is rejected outright
2. Magic bytes: the leading bytes must match the declared type's signature
   (office formats are zip containers; plain text has no signature)
3. Archive safety: for zip-based types, the declared uncompressed sizes of all
   entries are summed from the central directory, nothing is extracted. Rejected
   above ARCHIVE_MAX_UNCOMPRESSED_SIZE or above ARCHIVE_MAX_COMPRESSION_RATIO
   (uncompressed / archive size)
4. Malware scan: ClamAV (clamdscan, else clamscan) when installed and a file
   path is available. Absence of a scanner is a reduced-assurance pass.

Every failure is terminal for the upload.
"""

import io
import shutil
import subprocess
import zipfile
from pathlib import Path

from trustgate.core.config.constants import MEGABYTE, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import (
    ArchiveUnsafeError,
    FileValidationError,
    MalwareDetectedError,
    OversizedInputError,
    SignatureMismatchError,
)
from trustgate.core.logging.logger import get_logger
from trustgate.validators.base import BaseValidator

logger = get_logger(__name__)

# Declared type -> accepted leading-byte signatures. None means "no signature".
MAGIC_BYTES: dict[str, tuple[bytes, ...] | None] = {
    "pdf": (b"%PDF",),
    "zip": (b"PK\x03\x04", b"PK\x05\x06"),
    "txt": None,
}

# Formats stored as zip containers
TYPE_ALIASES = {
    "docx": "zip",
    "pptx": "zip",
    "xlsx": "zip",
}

SCANNERS = ("clamdscan", "clamscan")


def _mb(size: float) -> float:
    return round(size / MEGABYTE, 2)


class MalwareScanner:
    """
    Optional ClamAV hook.

    Exit codes: 0 clean, 1 infected, anything else is a scanner error and the
    upload is rejected.
    """

    def __init__(self, timeout: int = 60, executable: str | None = None):
        self.timeout = timeout
        self._executable = executable

    @property
    def executable(self) -> str | None:
        if self._executable is None:
            for name in SCANNERS:
                found = shutil.which(name)
                if found:
                    self._executable = found
                    break
        return self._executable

    def is_available(self) -> bool:
        return self.executable is not None

    def scan(self, path: str | Path) -> None:
        """
        Raises:
            MalwareDetectedError: Scanner flagged the file
            FileValidationError: Scanner failed or timed out
        """
        executable = self.executable
        if executable is None:
            return

        try:
            completed = subprocess.run(
                [executable, "--no-summary", str(path)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise FileValidationError(
                "Malware scan timed out", details={"timeout": self.timeout}
            ) from e
        except OSError as e:
            raise FileValidationError.from_exception(e, message="Malware scan could not run") from e

        output = (completed.stdout or completed.stderr).strip()
        if completed.returncode == 0:
            return
        if completed.returncode == 1:
            logger.warning("Malware detected in upload", stage=Stage.FILE_SECURITY.value, result=output)
            raise MalwareDetectedError(f"File failed virus scan: {output}", details={"result": output})

        logger.error(
            "Malware scanner error",
            stage=Stage.FILE_SECURITY.value,
            returncode=completed.returncode,
            result=output,
        )
        raise FileValidationError(
            "Malware scan failed", details={"returncode": completed.returncode, "result": output}
        )


class FileSecurityValidator(BaseValidator):
    """
    Usage:
        validator = FileSecurityValidator()
        validator.validate(content, "docx", path="/tmp/upload-123")
    """

    def __init__(self, settings: Settings | None = None, scanner: MalwareScanner | None = None):
        self.settings = settings or get_settings()
        files = self.settings.files
        self.max_size = files.FILE_MAX_SIZE
        self.max_uncompressed = files.ARCHIVE_MAX_UNCOMPRESSED_SIZE
        self.max_ratio = files.ARCHIVE_MAX_COMPRESSION_RATIO

        if scanner is None and files.MALWARE_SCAN_ENABLED:
            scanner = MalwareScanner(timeout=files.MALWARE_SCAN_TIMEOUT)
        self.scanner = scanner

    @staticmethod
    def signature_type(file_type: str) -> str:
        file_type = file_type.lower().lstrip(".")
        return TYPE_ALIASES.get(file_type, file_type)

    def validate_size(self, content: bytes, limit: int | None = None) -> None:
        """
        Raises:
            OversizedInputError: Content larger than limit
        """
        limit = limit or self.max_size
        size = len(content)
        if size > limit:
            raise OversizedInputError(
                f"File size ({_mb(size)}MB) exceeds maximum allowed size ({_mb(limit)}MB)",
                details={"size": size, "limit": limit},
            )

    def validate_magic_bytes(self, content: bytes, declared_type: str) -> bool:
        """True if content starts with a signature of declared_type (or none is known)."""
        signatures = MAGIC_BYTES.get(self.signature_type(declared_type))
        if signatures is None:
            return True
        return any(content.startswith(signature) for signature in signatures)

    def validate_archive_safety(self, source: str | Path | bytes) -> None:
        """
        Zip-bomb heuristics from the central directory only.

        Args:
            source: Path of the archive on disk, or its raw bytes

        Raises:
            ArchiveUnsafeError: Unreadable, too large or too compressible
        """
        if isinstance(source, (bytes, bytearray)):
            archive_size = len(source)
            opener = io.BytesIO(source)
        else:
            path = Path(source)
            try:
                archive_size = path.stat().st_size
            except OSError as e:
                raise ArchiveUnsafeError.from_exception(
                    e, message="Failed to open archive for validation"
                ) from e
            opener = path

        try:
            with zipfile.ZipFile(opener) as archive:
                uncompressed = 0
                for info in archive.infolist():
                    uncompressed += info.file_size
                    if uncompressed > self.max_uncompressed:
                        raise ArchiveUnsafeError(
                            "Archive uncompressed size exceeds maximum allowed "
                            f"({_mb(self.max_uncompressed):g}MB)",
                            details={"uncompressed_size": uncompressed, "limit": self.max_uncompressed},
                        )
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
            raise ArchiveUnsafeError.from_exception(
                e, message="Failed to open archive for validation"
            ) from e

        if archive_size > 0:
            ratio = uncompressed / archive_size
            if ratio > self.max_ratio:
                raise ArchiveUnsafeError(
                    f"Archive compression ratio ({ratio:.1f}) indicates a potential zip bomb",
                    details={"ratio": round(ratio, 2), "limit": self.max_ratio},
                )

    def validate(self, content: bytes, file_type: str, path: str | Path | None = None) -> None:
        """
        Run every check. The archive check uses path when given, else the bytes.

        Raises:
            OversizedInputError, SignatureMismatchError, ArchiveUnsafeError,
            MalwareDetectedError, FileValidationError
        """
        try:
            self.validate_size(content)

            if not self.validate_magic_bytes(content, file_type):
                raise SignatureMismatchError(
                    f"File signature does not match expected type: {file_type}",
                    details={"file_type": file_type},
                )

            if self.signature_type(file_type) == "zip":
                self.validate_archive_safety(path if path is not None else content)

            if path is not None and self.scanner is not None:
                self.scanner.scan(path)
        except (OversizedInputError, FileValidationError) as e:
            logger.warning(
                "Upload rejected",
                stage=Stage.FILE_SECURITY.value,
                file_type=file_type,
                error_type=e.__class__.__name__,
                reason=e.message,
            )
            raise

        if self.scanner is None or not self.scanner.is_available():
            logger.debug("Upload passed without malware scan", stage=Stage.FILE_SECURITY.value)
