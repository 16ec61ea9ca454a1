#!/usr/bin/env python3
"""
Structured Logging Module using structlog

Production-grade structured logging with:
- Actor ID correlation (every guard decision is attributable to one actor)
- Stage tagging for the guarded request flow
- JSON formatting for log aggregation
- Automatic secret redaction (API keys and bearer tokens never reach the log)
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from trustgate.core.config.settings import get_settings

# Context variable for the actor (session / API key) being served
actor_id_ctx: ContextVar[str | None] = ContextVar("actor_id", default=None)

_SECRET_PATTERNS = (
    re.compile(r"\bsk-[a-zA-Z0-9_-]+\b"),
    re.compile(r"\bAIza[a-zA-Z0-9_-]+\b"),
    re.compile(r"(?i)\bbearer\s+[a-zA-Z0-9._~+/=-]+"),
)


def add_actor_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add actor ID to log event from context variable.

    STAGE-L.1: Actor ID injection
    """
    actor_id = actor_id_ctx.get()
    if actor_id:
        event_dict.setdefault("actor_id", actor_id)
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_text(text: str) -> str:
    """Replace API keys and bearer tokens in text with [REDACTED]."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact credentials from the message and from string fields.

    STAGE-L.3: Secret redaction

    Patterns redacted:
    - OpenAI-style keys (sk-...) → [REDACTED]
    - Google API keys (AIza...) → [REDACTED]
    - Bearer tokens → [REDACTED]
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_text(value)
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Uppercase the level name.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_actor_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="3.0")
    """
    return structlog.get_logger(name)


def set_actor_id(actor_id: str) -> None:
    """
    Set actor ID in context for the current request.

    This should be called at the start of each request so every guard decision
    logged during the request carries the actor.
    """
    actor_id_ctx.set(actor_id)


def get_actor_id() -> str | None:
    """Get current actor ID from context."""
    return actor_id_ctx.get()


def clear_actor_id() -> None:
    """Clear actor ID from context at the end of request processing."""
    actor_id_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Usage:
        log_stage(logger, Stage.CIRCUIT_CHECK, "Circuit closed", service="openai")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=str(getattr(stage, "value", stage)), **kwargs)
