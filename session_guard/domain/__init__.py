"""Domain layer - Session entity, store contract and errors"""

from .exceptions import (
    BadRequestError,
    CSRFMismatchError,
    DomainError,
    SessionExpiredError,
    SessionHijackedError,
    SessionNotFoundError,
    SessionRequiredError,
    StoreError,
    StoreTimeoutError,
    TokenGenerationError,
    UnauthorizedError,
    ValidationError,
)
from .session import CSRF_TOKEN_KEY, Session, utcnow
from .store import Store

__all__ = [
    "Session",
    "Store",
    "CSRF_TOKEN_KEY",
    "utcnow",
    "DomainError",
    "BadRequestError",
    "UnauthorizedError",
    "ValidationError",
    "SessionNotFoundError",
    "SessionExpiredError",
    "SessionHijackedError",
    "CSRFMismatchError",
    "SessionRequiredError",
    "TokenGenerationError",
    "StoreError",
    "StoreTimeoutError",
]
