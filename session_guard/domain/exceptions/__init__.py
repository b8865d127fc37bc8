"""Domain exceptions"""

from .base import (
    BadRequestError,
    DomainError,
    UnauthorizedError,
    ValidationError,
)
from .session import (
    CSRFMismatchError,
    SessionExpiredError,
    SessionHijackedError,
    SessionNotFoundError,
    SessionRequiredError,
    StoreError,
    StoreTimeoutError,
    TokenGenerationError,
)

__all__ = [
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
