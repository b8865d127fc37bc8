"""API schemas"""

from .session import LoginRequest, SessionDataUpdate, SessionSummary
from .system import HealthCheckResponse, StoreStatus

__all__ = [
    "SessionSummary",
    "SessionDataUpdate",
    "LoginRequest",
    "HealthCheckResponse",
    "StoreStatus",
]
