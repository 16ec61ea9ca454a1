from .logger import (
    clear_actor_id,
    get_actor_id,
    get_logger,
    log_stage,
    redact_text,
    set_actor_id,
    setup_logging,
)

__all__ = [
    "clear_actor_id",
    "get_actor_id",
    "get_logger",
    "log_stage",
    "redact_text",
    "set_actor_id",
    "setup_logging",
]
