"""
File Security Exceptions

Raised while screening uploaded documents before text extraction. Always
terminal for the upload; no partial processing occurs.
"""

from trustgate.core.exceptions.validation import ValidationError


class FileValidationError(ValidationError):
    """Base exception for upload screening failures."""
    pass


class SignatureMismatchError(FileValidationError):
    """
    Raised when the leading bytes do not match the declared file type.

    Defends against extension spoofing (e.g. an executable renamed to .pdf).
    """
    pass


class ArchiveUnsafeError(FileValidationError):
    """
    Raised when an archive cannot be read or looks like a zip bomb.

    Common causes:
    - Declared uncompressed size above the limit
    - Compression ratio above the limit
    - Corrupt archive directory
    """
    pass


class MalwareDetectedError(FileValidationError):
    """Raised when the malware scanner flags the upload."""
    pass
