"""Core module - Settings and cross-cutting concerns"""

from .config import DEFAULT_SESSION_CONFIG, SessionConfig, Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "SessionConfig",
    "DEFAULT_SESSION_CONFIG",
]
