"""
Validation Exceptions

Failures raised when content returned by a remote AI service, or free text
supplied by a user, is rejected. These are terminal for the attempt: the remote
service produced the bad data, so retrying automatically is pointless.
"""

from trustgate.core.exceptions.base import TrustGateError


class ValidationError(TrustGateError):
    """
    Raised when validation fails.

    This is the base class for all validation-related errors.
    """
    pass


class MalformedResponseError(ValidationError):
    """
    Raised when a response does not match the expected schema.

    Details include:
    - service: Response shape that was expected
    - path: Field path segment that was absent, wrong-typed or empty
    """
    pass


class UnsafeContentError(ValidationError):
    """
    Raised when content matches an injection pattern or exceeds the size ceiling.

    Details include:
    - category: The matched ContentCategory value
    """

    @property
    def category(self) -> str | None:
        return self.details.get("category")


class NoValidPagesError(ValidationError):
    """
    Raised when not a single page could be parsed from a page-delimited blob.

    Details include:
    - errors: Per-segment structural diagnostics
    """

    @property
    def errors(self) -> list[str]:
        return list(self.details.get("errors", []))


class OversizedInputError(ValidationError):
    """
    Raised when an upload or user input exceeds its size limit.

    Details include:
    - size: Actual size
    - limit: Allowed size
    """
    pass
