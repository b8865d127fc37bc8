"""Application layer - セッションのライフサイクル管理"""

from .session_manager import (
    CSRF_COOKIE_NAME,
    CSRF_FORM_FIELD,
    CSRF_HEADER_NAME,
    SessionManager,
)

__all__ = [
    "SessionManager",
    "CSRF_COOKIE_NAME",
    "CSRF_FORM_FIELD",
    "CSRF_HEADER_NAME",
]
