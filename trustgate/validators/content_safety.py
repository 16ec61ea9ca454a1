"""
Content Safety Screening

Screens text produced by a remote AI service, or typed by a user, before it
is stored or rendered. Rejection is strict: the first matching category fails
the whole blob.

Categories (checked in this order):
- oversized: longer than CONTENT_MAX_LENGTH characters (checked before any regex)
- script_tag: ``<script ...>``
- server_code: ``<?php``
- sql_statement: statement terminator followed by DROP/DELETE/UPDATE/INSERT
- script_uri: markdown image or link whose target uses javascript:, vbscript:
  or data:text/html
"""

import html
import re
from dataclasses import dataclass

from trustgate.core.config.constants import ContentCategory, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import OversizedInputError, UnsafeContentError
from trustgate.core.logging.logger import get_logger
from trustgate.validators.base import BaseValidator, compile_pattern

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of screening one blob. Never persisted."""

    ok: bool
    category: ContentCategory | None = None
    message: str = ""

    def raise_for_failure(self) -> None:
        """
        Raises:
            UnsafeContentError: If the verdict is a rejection
        """
        if not self.ok:
            raise UnsafeContentError(
                self.message,
                details={"category": self.category.value if self.category else None},
            )


PASSED = ValidationVerdict(ok=True)


class ContentSafetyValidator(BaseValidator):
    """
    Injection-pattern and size screen.

    Usage:
        validator = ContentSafetyValidator()
        verdict = validator.screen(text)
        if not verdict.ok:
            ...
        validator.validate(text)  # raises UnsafeContentError
    """

    SECURITY_PATTERNS = [
        (
            compile_pattern(r"<script\b[^>]*>"),
            ContentCategory.SCRIPT_TAG,
            "Security violation: script tag detected",
        ),
        (
            compile_pattern(r"<\?php"),
            ContentCategory.SERVER_CODE,
            "Security violation: server-side code detected",
        ),
        (
            compile_pattern(r";\s*(DROP|DELETE|UPDATE|INSERT)\s+"),
            ContentCategory.SQL_STATEMENT,
            "Security violation: SQL-like statement detected",
        ),
        (
            compile_pattern(r"!?\[[^\]]*\]\(\s*<?\s*(javascript\s*:|vbscript\s*:|data\s*:\s*text/html)"),
            ContentCategory.SCRIPT_URI,
            "Security violation: script-executing link in markdown",
        ),
    ]

    def __init__(self, settings: Settings | None = None, max_length: int | None = None):
        self.settings = settings or get_settings()
        self.max_length = max_length or self.settings.content.CONTENT_MAX_LENGTH

    def screen(self, content: str) -> ValidationVerdict:
        """Non-raising screen."""
        if len(content) > self.max_length:
            return ValidationVerdict(
                ok=False,
                category=ContentCategory.OVERSIZED,
                message=(
                    f"Security violation: content exceeds maximum length "
                    f"({self.max_length} characters)"
                ),
            )

        match = self.first_match(content, self.SECURITY_PATTERNS)
        if match is None:
            return PASSED

        category, description = match
        return ValidationVerdict(ok=False, category=category, message=description)

    def validate(self, content: str) -> None:
        """
        Raises:
            UnsafeContentError: Content matched a category
        """
        verdict = self.screen(content)
        if not verdict.ok:
            logger.warning(
                "Unsafe content rejected",
                stage=Stage.RESPONSE_VALIDATION.value,
                category=verdict.category.value,
                length=len(content),
            )
        verdict.raise_for_failure()


def screen_content(content: str, settings: Settings | None = None) -> ValidationVerdict:
    return ContentSafetyValidator(settings).screen(content)


def check_content_safety(content: str, settings: Settings | None = None) -> None:
    ContentSafetyValidator(settings).validate(content)


def sanitize_user_input(text: str, max_length: int | None = None) -> str:
    """
    Normalise free text typed by a user.

    Removes NUL bytes, collapses runs of whitespace to one space and trims.

    Raises:
        OversizedInputError: Longer than max_length (USER_INPUT_MAX_LENGTH)
    """
    limit = max_length or get_settings().content.USER_INPUT_MAX_LENGTH
    if len(text) > limit:
        raise OversizedInputError(
            f"Input too long (max {limit} characters)",
            details={"size": len(text), "limit": limit},
        )

    text = text.replace("\0", "")
    return _WHITESPACE.sub(" ", text).strip()


def escape_html(text: str) -> str:
    """Escape text for inclusion in HTML, quotes included."""
    return html.escape(text, quote=True)
