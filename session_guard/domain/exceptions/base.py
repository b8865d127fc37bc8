"""
ドメイン層の例外クラス

セッション管理で発生するエラーを表現する純粋なPython例外。
フレームワークに依存しない。
"""

from typing import Any, Optional


class DomainError(Exception):
    """
    ドメイン層のベース例外

    Attributes:
        message: エラーメッセージ
        code: エラーコード（識別子）
        details: エラーの詳細情報（オプション）
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Any] = None,
    ) -> None:
        """
        Args:
            message: エラーメッセージ
            code: エラーコード
            details: エラーの詳細情報（オプション）
        """
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)


class BadRequestError(DomainError):
    """不正なリクエストエラー"""

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message=message, code="bad_request", details=details)


class UnauthorizedError(DomainError):
    """
    認証エラー

    セッションが無い・無効・CSRFトークン不一致など、
    リクエストを信頼できない場合の基底クラス
    """

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message=message, code="unauthorized", details=details)


class ValidationError(BadRequestError):
    """リクエストボディのバリデーションエラー"""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[dict[str, Any] | list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = "validation_error"
