"""
Core Interfaces

Protocol definitions for the backends the guards depend on.
"""

from trustgate.core.interfaces.config_store import ConfigStore
from trustgate.core.interfaces.state_store import StateStore

__all__ = ["StateStore", "ConfigStore"]
