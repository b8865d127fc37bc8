"""
セッション管理の例外クラス

セッションの取得・検証・CSRF検証・ストア操作で発生するエラー。
セッション/CSRF関連のエラーはUnauthorizedErrorとして扱う。
"""

from typing import Any, Optional

from .base import DomainError, UnauthorizedError


class SessionNotFoundError(UnauthorizedError):
    """指定IDのセッションが存在しない"""

    def __init__(
        self,
        message: str = "session not found",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "session_not_found"


class SessionExpiredError(UnauthorizedError):
    """セッションの有効期限切れ（絶対期限またはアイドルタイムアウト）"""

    def __init__(
        self,
        message: str = "session has expired",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "session_expired"


class SessionHijackedError(UnauthorizedError):
    """IP・User-Agent・フィンガープリントの不一致"""

    def __init__(
        self,
        message: str = "session is hijacked",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "session_hijacked"


class CSRFMismatchError(UnauthorizedError):
    """CSRFトークンの不一致"""

    def __init__(
        self,
        message: str = "csrf token mismatch",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "csrf_mismatch"


class SessionRequiredError(UnauthorizedError):
    """リクエストにセッションが紐付いていない"""

    def __init__(
        self,
        message: str = "session required",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "session_required"


class TokenGenerationError(DomainError):
    """乱数源が利用できずトークンを生成できない"""

    def __init__(
        self,
        message: str = "failed to generate random token",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message, code="token_generation_failed", details=details
        )


class StoreError(DomainError):
    """セッションストアの操作エラー"""

    def __init__(
        self,
        message: str = "session store error",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code="store_error", details=details)


class StoreTimeoutError(StoreError):
    """ストア操作がタイムアウトした"""

    def __init__(
        self,
        message: str = "session store operation timed out",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "store_timeout"
