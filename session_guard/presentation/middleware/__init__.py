"""HTTPミドルウェア"""

from .csrf import CSRFMiddleware
from .error_handler import internal_error_response, report_unhandled_error
from .session import SessionMiddleware, SessionResponder

__all__ = [
    "SessionMiddleware",
    "SessionResponder",
    "CSRFMiddleware",
    "internal_error_response",
    "report_unhandled_error",
]
