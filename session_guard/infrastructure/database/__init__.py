from .connection import create_db_engine, create_session_factory
from .models import Base, SessionRecord

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "Base",
    "SessionRecord",
]
