"""
System Constants and Enumerations

System-wide constants and enumerations shared by the guards of the trust boundary.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for state management
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages of one guarded outbound generation request.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    - SEQUENCE: Numeric order (0.0, 1.0, 2.0) or alphabetic prefix (CB, FS)
    - DESCRIPTIVE_NAME: Clear, uppercase description with underscores
    """

    # Main request lifecycle (sequential)
    INITIALIZATION = "0.0_INITIALIZATION"
    INPUT_SANITIZATION = "1.0_INPUT_SANITIZATION"
    RATE_LIMITING = "2.0_RATE_LIMITING"
    CIRCUIT_CHECK = "3.0_CIRCUIT_CHECK"
    REQUEST_SIGNING = "4.0_REQUEST_SIGNING"
    TRANSPORT_PINNING = "5.0_TRANSPORT_PINNING"
    REMOTE_CALL = "6.0_REMOTE_CALL"
    RESPONSE_VALIDATION = "7.0_RESPONSE_VALIDATION"
    PAGE_PARSING = "8.0_PAGE_PARSING"

    # Cross-cutting concerns
    CIRCUIT_BREAKER = "CB_CIRCUIT_BREAKER"
    ENCRYPTION = "E_ENCRYPTION"
    FILE_SECURITY = "FS_FILE_SECURITY"


# ============================================================================
# Circuit Breaker States
# ============================================================================


class CircuitState(str, Enum):
    """
    Circuit breaker states.

    CLOSED: Normal operation, requests allowed
    OPEN: Failing fast, requests blocked
    HALF_OPEN: Testing recovery, outcomes decide the next state
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


# ============================================================================
# Rate Limit Budgets
# ============================================================================


class RateLimitKind(str, Enum):
    """Rolling-window budgets tracked per actor."""

    API_CALL = "api_calls"
    FILE_PROCESSING = "file_processing"


# ============================================================================
# Content Screening Categories
# ============================================================================


class ContentCategory(str, Enum):
    """Reasons a piece of content is rejected by the safety screen."""

    SCRIPT_TAG = "script_tag"
    SERVER_CODE = "server_code"
    SQL_STATEMENT = "sql_statement"
    SCRIPT_URI = "script_uri"
    OVERSIZED = "oversized"


# ============================================================================
# Remote AI Services
# ============================================================================


class LLMProvider(str, Enum):
    """
    Supported remote AI services.
    """

    OPENAI = "openai"
    GWDG = "gwdg"
    GOOGLE = "google"


# ============================================================================
# Limits
# ============================================================================

MEGABYTE = 1024 * 1024

AES_IV_LENGTH = 16  # bytes, one AES block
AES_KEY_LENGTH = 32  # bytes, AES-256

REQUEST_ID_BYTES = 16  # 32 hex characters

DEFAULT_INSTALLATION_SALT = "trustgate_secret_encryption_salt_2026"

# Hosts pinned by default; empty allow-lists until fingerprints are configured
DEFAULT_PINNED_HOSTS = (
    "api.openai.com",
    "generativelanguage.googleapis.com",
    "chat-ai.academiccloud.de",
)

# Configuration keys whose values are stored encrypted
SECRET_CONFIG_KEYS = (
    "gwdg_api_key",
    "google_api_key",
    "openai_api_key",
)

# ============================================================================
# State Store Key Prefixes
# ============================================================================

STATE_KEY_RATE_LIMIT = "ratelimit"
STATE_KEY_COOLDOWN = "cooldown"
STATE_KEY_CONCURRENCY = "concurrency"
STATE_KEY_CIRCUIT = "circuit"

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_REQUEST_SIGNATURE = "X-Request-Signature"
