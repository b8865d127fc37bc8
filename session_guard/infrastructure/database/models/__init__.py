from .base import Base
from .session import SessionRecord

__all__ = ["Base", "SessionRecord"]
