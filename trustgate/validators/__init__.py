"""
Validators Module

Everything returned by a remote AI service or uploaded by a user is hostile
until one of these validators passes it.

Module Structure:
-----------------
- **base.py**: BaseValidator with shared length / emptiness / pattern helpers
- **content_safety.py**: Injection-pattern and size screen, user-input helpers
- **response_validator.py**: Per-service response schemas, fence stripping
- **page_parser.py**: Lenient parse of page-delimited text
- **file_validator.py**: Upload size / signature / zip-bomb / malware checks

Two policies coexist:
- Strict (schema, content safety, files): first violation rejects everything
- Lenient (page parsing): invalid segments become diagnostics, valid pages survive
"""

from trustgate.validators.base import BaseValidator
from trustgate.validators.content_safety import (
    ContentSafetyValidator,
    ValidationVerdict,
    check_content_safety,
    escape_html,
    sanitize_user_input,
    screen_content,
)
from trustgate.validators.file_validator import FileSecurityValidator, MalwareScanner
from trustgate.validators.page_parser import (
    PageDiagnostic,
    PageParseResult,
    ParsedPage,
    parse_pages,
    require_pages,
)
from trustgate.validators.response_validator import (
    RESPONSE_SCHEMAS,
    ResponseValidator,
    strip_code_fences,
    validate_response,
)

__all__ = [
    "BaseValidator",
    # Content safety
    "ContentSafetyValidator",
    "ValidationVerdict",
    "screen_content",
    "check_content_safety",
    "sanitize_user_input",
    "escape_html",
    # Responses
    "ResponseValidator",
    "RESPONSE_SCHEMAS",
    "validate_response",
    "strip_code_fences",
    # Pages
    "ParsedPage",
    "PageDiagnostic",
    "PageParseResult",
    "parse_pages",
    "require_pages",
    # Files
    "FileSecurityValidator",
    "MalwareScanner",
]
