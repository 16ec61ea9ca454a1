"""
Configuration Module

Centralized, type-safe configuration for the trust boundary.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants, enums, and limits

Usage:
------
```python
from trustgate.core.config import get_settings
from trustgate.core.config.constants import CircuitState, RateLimitKind

settings = get_settings()
threshold = settings.circuit_breaker.CB_FAILURE_THRESHOLD
```

Testing:
-------
```python
from trustgate.core.config.settings import Settings

settings = Settings(RATE_LIMIT_API_CALLS_PER_HOUR=3)
```
"""

from trustgate.core.config.constants import (
    HEADER_REQUEST_ID,
    HEADER_REQUEST_SIGNATURE,
    SECRET_CONFIG_KEYS,
    CircuitState,
    ContentCategory,
    LLMProvider,
    RateLimitKind,
    Stage,
)
from trustgate.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "CircuitState",
    "ContentCategory",
    "LLMProvider",
    "RateLimitKind",
    # Constants
    "SECRET_CONFIG_KEYS",
    "HEADER_REQUEST_ID",
    "HEADER_REQUEST_SIGNATURE",
]
