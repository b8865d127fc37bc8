"""Infrastructure layer - Stores, security helpers and background jobs"""

from .stores import MemoryStore, SQLAlchemyStore, create_store

__all__ = ["MemoryStore", "SQLAlchemyStore", "create_store"]
