"""Server-side HTTP session management for ASGI applications"""

from .application import SessionManager
from .core.config import SessionConfig
from .domain import Session, Store
from .infrastructure import MemoryStore, SQLAlchemyStore

__all__ = [
    "SessionManager",
    "SessionConfig",
    "Session",
    "Store",
    "MemoryStore",
    "SQLAlchemyStore",
]

__version__ = "0.1.0"
