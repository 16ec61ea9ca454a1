#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for every guard in the trust boundary:
rate limiting, circuit breaking, secret encryption, request signing, certificate
pinning, content screening and upload screening.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Grouped views (settings.rate_limit, settings.files, ...) for each component
- Easy testing: pass overrides as keyword arguments
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trustgate.core.config.constants import (
    DEFAULT_INSTALLATION_SALT,
    DEFAULT_PINNED_HOSTS,
    MEGABYTE,
)


class RateLimitSettings(BaseSettings):
    """
    Per-actor budgets for expensive operations.

    STAGE-3: Rate limiting thresholds
    """

    RATE_LIMIT_API_CALLS_PER_HOUR: int = Field(default=20, description="Remote AI calls per window")
    RATE_LIMIT_FILE_PROCESSING_PER_HOUR: int = Field(default=20, description="File operations per window")
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=3600, description="Rolling window length")
    GENERATION_COOLDOWN_SECONDS: int = Field(default=10, description="Pause between generations")
    MAX_CONCURRENT_GENERATIONS: int = Field(default=3, description="In-flight generations per actor")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CircuitBreakerSettings(BaseSettings):
    """
    Circuit breaker configuration for fault tolerance.

    STAGE-CB: Circuit breaker thresholds
    """

    CB_FAILURE_THRESHOLD: int = Field(default=5, description="Failures before opening circuit")
    CB_RECOVERY_TIMEOUT: int = Field(default=60, description="Seconds before attempting recovery")
    CB_SUCCESS_THRESHOLD: int = Field(default=2, description="Successes to close circuit")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class EncryptionSettings(BaseSettings):
    """Installation identity used to derive the secret-encryption key."""

    INSTALLATION_ID: str = Field(default="trustgate", description="Installation identifier")
    INSTALLATION_SALT: str = Field(default=DEFAULT_INSTALLATION_SALT, description="Installation salt")
    KDF_ITERATIONS: int = Field(default=10_000, description="PBKDF2 iterations")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class SigningSettings(BaseSettings):
    """Outbound request signing."""

    SIGNATURE_MAX_AGE_SECONDS: int = Field(default=300, description="Replay window for signatures")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class PinningSettings(BaseSettings):
    """
    Transport hardening.

    CERTIFICATE_PINS maps host -> list of SHA-256 leaf fingerprints. A host with an
    empty list is verified by standard TLS validation only.
    """

    CERTIFICATE_PINS: dict[str, list[str]] = Field(
        default_factory=lambda: {host: [] for host in DEFAULT_PINNED_HOSTS},
        description="Per-host allow-list of certificate fingerprints",
    )
    TLS_MINIMUM_VERSION: Literal["TLSv1.2", "TLSv1.3"] = Field(
        default="TLSv1.2", description="Lowest TLS version accepted"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ContentSettings(BaseSettings):
    """Content screening limits."""

    CONTENT_MAX_LENGTH: int = Field(default=100_000, description="Max characters of screened content")
    USER_INPUT_MAX_LENGTH: int = Field(default=5_000, description="Max characters of user prompts")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class FileSettings(BaseSettings):
    """Upload screening limits."""

    FILE_MAX_SIZE: int = Field(default=10 * MEGABYTE, description="Max upload size in bytes")
    ARCHIVE_MAX_UNCOMPRESSED_SIZE: int = Field(default=50 * MEGABYTE, description="Max declared archive size")
    ARCHIVE_MAX_COMPRESSION_RATIO: float = Field(default=10.0, description="Zip bomb ratio threshold")
    MALWARE_SCAN_ENABLED: bool = Field(default=True, description="Use ClamAV when installed")
    MALWARE_SCAN_TIMEOUT: int = Field(default=60, description="Scanner timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class StateStoreSettings(BaseSettings):
    """
    Actor-scoped state backend.

    STAGE-0.1: State store configuration
    """

    STATE_BACKEND: Literal["memory", "redis"] = Field(default="memory", description="State backend")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_LOCK_TIMEOUT: int = Field(default=10, description="Per-key lock lease and wait (seconds)")
    ACTOR_STATE_TTL: int = Field(default=86_400, description="Actor state lifetime (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LLMProviderSettings(BaseSettings):
    """
    Remote AI service configuration.

    STAGE-0.2: LLM provider configuration

    Supports: OpenAI, GWDG (OpenAI-compatible), Google Gemini
    """

    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1", description="OpenAI base URL")
    OPENAI_MODEL: str = Field(default="gpt-4o", description="OpenAI model")

    GWDG_API_KEY: str | None = Field(default=None, description="GWDG API key")
    GWDG_BASE_URL: str = Field(default="https://chat-ai.academiccloud.de/v1", description="GWDG base URL")
    GWDG_MODEL: str = Field(default="meta-llama-3.1-8b-instruct", description="GWDG model")

    GOOGLE_API_KEY: str | None = Field(default=None, description="Google Gemini API key")
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1", description="Gemini base URL"
    )
    GEMINI_MODEL: str = Field(default="gemini-1.5-flash", description="Gemini model")

    PROVIDER_TIMEOUT: float = Field(default=30.0, description="Remote call timeout in seconds")
    PROVIDER_MAX_ATTEMPTS: int = Field(default=2, description="Attempts on connection errors")
    SYSTEM_PROMPT: str | None = Field(default=None, description="System prompt prepended to requests")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from trustgate.core.config.settings import get_settings

        settings = get_settings()
        limit = settings.rate_limit.RATE_LIMIT_API_CALLS_PER_HOUR
        pins = settings.pinning.CERTIFICATE_PINS
    """

    # Rate limiting
    RATE_LIMIT_API_CALLS_PER_HOUR: int = Field(default=20, description="Remote AI calls per window")
    RATE_LIMIT_FILE_PROCESSING_PER_HOUR: int = Field(default=20, description="File operations per window")
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=3600, description="Rolling window length")
    GENERATION_COOLDOWN_SECONDS: int = Field(default=10, description="Pause between generations")
    MAX_CONCURRENT_GENERATIONS: int = Field(default=3, description="In-flight generations per actor")

    # Circuit breaker
    CB_FAILURE_THRESHOLD: int = Field(default=5, description="Failures before opening circuit")
    CB_RECOVERY_TIMEOUT: int = Field(default=60, description="Seconds before attempting recovery")
    CB_SUCCESS_THRESHOLD: int = Field(default=2, description="Successes to close circuit")

    # Encryption
    INSTALLATION_ID: str = Field(default="trustgate", description="Installation identifier")
    INSTALLATION_SALT: str = Field(default=DEFAULT_INSTALLATION_SALT, description="Installation salt")
    KDF_ITERATIONS: int = Field(default=10_000, description="PBKDF2 iterations")

    # Signing and pinning
    SIGNATURE_MAX_AGE_SECONDS: int = Field(default=300, description="Replay window for signatures")
    CERTIFICATE_PINS: dict[str, list[str]] = Field(
        default_factory=lambda: {host: [] for host in DEFAULT_PINNED_HOSTS},
        description="Per-host allow-list of certificate fingerprints",
    )
    TLS_MINIMUM_VERSION: Literal["TLSv1.2", "TLSv1.3"] = Field(
        default="TLSv1.2", description="Lowest TLS version accepted"
    )

    # Content and files
    CONTENT_MAX_LENGTH: int = Field(default=100_000, description="Max characters of screened content")
    USER_INPUT_MAX_LENGTH: int = Field(default=5_000, description="Max characters of user prompts")
    FILE_MAX_SIZE: int = Field(default=10 * MEGABYTE, description="Max upload size in bytes")
    ARCHIVE_MAX_UNCOMPRESSED_SIZE: int = Field(default=50 * MEGABYTE, description="Max declared archive size")
    ARCHIVE_MAX_COMPRESSION_RATIO: float = Field(default=10.0, description="Zip bomb ratio threshold")
    MALWARE_SCAN_ENABLED: bool = Field(default=True, description="Use ClamAV when installed")
    MALWARE_SCAN_TIMEOUT: int = Field(default=60, description="Scanner timeout in seconds")

    # State store
    STATE_BACKEND: Literal["memory", "redis"] = Field(default="memory", description="State backend")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_LOCK_TIMEOUT: int = Field(default=10, description="Per-key lock lease and wait (seconds)")
    ACTOR_STATE_TTL: int = Field(default=86_400, description="Actor state lifetime (seconds)")

    # LLM providers
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1", description="OpenAI base URL")
    OPENAI_MODEL: str = Field(default="gpt-4o", description="OpenAI model")
    GWDG_API_KEY: str | None = Field(default=None, description="GWDG API key")
    GWDG_BASE_URL: str = Field(default="https://chat-ai.academiccloud.de/v1", description="GWDG base URL")
    GWDG_MODEL: str = Field(default="meta-llama-3.1-8b-instruct", description="GWDG model")
    GOOGLE_API_KEY: str | None = Field(default=None, description="Google Gemini API key")
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1", description="Gemini base URL"
    )
    GEMINI_MODEL: str = Field(default="gemini-1.5-flash", description="Gemini model")
    PROVIDER_TIMEOUT: float = Field(default=30.0, description="Remote call timeout in seconds")
    PROVIDER_MAX_ATTEMPTS: int = Field(default=2, description="Attempts on connection errors")
    SYSTEM_PROMPT: str | None = Field(default=None, description="System prompt prepended to requests")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator(
        "RATE_LIMIT_API_CALLS_PER_HOUR",
        "RATE_LIMIT_FILE_PROCESSING_PER_HOUR",
        "RATE_LIMIT_WINDOW_SECONDS",
        "MAX_CONCURRENT_GENERATIONS",
        "CB_FAILURE_THRESHOLD",
        "CB_SUCCESS_THRESHOLD",
        "KDF_ITERATIONS",
        "SIGNATURE_MAX_AGE_SECONDS",
        "CONTENT_MAX_LENGTH",
        "FILE_MAX_SIZE",
        "PROVIDER_MAX_ATTEMPTS",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits and thresholds must be at least 1."""
        if v < 1:
            raise ValueError("limit and threshold values must be at least 1")
        return v

    @field_validator("GENERATION_COOLDOWN_SECONDS", "CB_RECOVERY_TIMEOUT")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("durations cannot be negative")
        return v

    @property
    def rate_limit(self) -> 'RateLimitSettings':
        """Get rate limit settings."""
        return RateLimitSettings(
            RATE_LIMIT_API_CALLS_PER_HOUR=self.RATE_LIMIT_API_CALLS_PER_HOUR,
            RATE_LIMIT_FILE_PROCESSING_PER_HOUR=self.RATE_LIMIT_FILE_PROCESSING_PER_HOUR,
            RATE_LIMIT_WINDOW_SECONDS=self.RATE_LIMIT_WINDOW_SECONDS,
            GENERATION_COOLDOWN_SECONDS=self.GENERATION_COOLDOWN_SECONDS,
            MAX_CONCURRENT_GENERATIONS=self.MAX_CONCURRENT_GENERATIONS,
        )

    @property
    def circuit_breaker(self) -> 'CircuitBreakerSettings':
        """Get circuit breaker settings."""
        return CircuitBreakerSettings(
            CB_FAILURE_THRESHOLD=self.CB_FAILURE_THRESHOLD,
            CB_RECOVERY_TIMEOUT=self.CB_RECOVERY_TIMEOUT,
            CB_SUCCESS_THRESHOLD=self.CB_SUCCESS_THRESHOLD,
        )

    @property
    def encryption(self) -> 'EncryptionSettings':
        """Get encryption settings."""
        return EncryptionSettings(
            INSTALLATION_ID=self.INSTALLATION_ID,
            INSTALLATION_SALT=self.INSTALLATION_SALT,
            KDF_ITERATIONS=self.KDF_ITERATIONS,
        )

    @property
    def signing(self) -> 'SigningSettings':
        """Get request signing settings."""
        return SigningSettings(SIGNATURE_MAX_AGE_SECONDS=self.SIGNATURE_MAX_AGE_SECONDS)

    @property
    def pinning(self) -> 'PinningSettings':
        """Get certificate pinning settings."""
        return PinningSettings(
            CERTIFICATE_PINS=self.CERTIFICATE_PINS,
            TLS_MINIMUM_VERSION=self.TLS_MINIMUM_VERSION,
        )

    @property
    def content(self) -> 'ContentSettings':
        """Get content screening settings."""
        return ContentSettings(
            CONTENT_MAX_LENGTH=self.CONTENT_MAX_LENGTH,
            USER_INPUT_MAX_LENGTH=self.USER_INPUT_MAX_LENGTH,
        )

    @property
    def files(self) -> 'FileSettings':
        """Get upload screening settings."""
        return FileSettings(
            FILE_MAX_SIZE=self.FILE_MAX_SIZE,
            ARCHIVE_MAX_UNCOMPRESSED_SIZE=self.ARCHIVE_MAX_UNCOMPRESSED_SIZE,
            ARCHIVE_MAX_COMPRESSION_RATIO=self.ARCHIVE_MAX_COMPRESSION_RATIO,
            MALWARE_SCAN_ENABLED=self.MALWARE_SCAN_ENABLED,
            MALWARE_SCAN_TIMEOUT=self.MALWARE_SCAN_TIMEOUT,
        )

    @property
    def state(self) -> 'StateStoreSettings':
        """Get state store settings."""
        return StateStoreSettings(
            STATE_BACKEND=self.STATE_BACKEND,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_LOCK_TIMEOUT=self.REDIS_LOCK_TIMEOUT,
            ACTOR_STATE_TTL=self.ACTOR_STATE_TTL,
        )

    @property
    def llm(self) -> 'LLMProviderSettings':
        """Get LLM provider settings."""
        return LLMProviderSettings(
            OPENAI_API_KEY=self.OPENAI_API_KEY,
            OPENAI_BASE_URL=self.OPENAI_BASE_URL,
            OPENAI_MODEL=self.OPENAI_MODEL,
            GWDG_API_KEY=self.GWDG_API_KEY,
            GWDG_BASE_URL=self.GWDG_BASE_URL,
            GWDG_MODEL=self.GWDG_MODEL,
            GOOGLE_API_KEY=self.GOOGLE_API_KEY,
            GEMINI_BASE_URL=self.GEMINI_BASE_URL,
            GEMINI_MODEL=self.GEMINI_MODEL,
            PROVIDER_TIMEOUT=self.PROVIDER_TIMEOUT,
            PROVIDER_MAX_ATTEMPTS=self.PROVIDER_MAX_ATTEMPTS,
            SYSTEM_PROMPT=self.SYSTEM_PROMPT,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
