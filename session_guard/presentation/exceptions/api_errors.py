"""
Presentation層のAPIエラークラス

FastAPI/Pydanticに依存するAPIエラークラス。
ドメインエラーをHTTPレスポンスに変換する。
"""

from typing import Any, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel

from ...domain.exceptions import (
    BadRequestError,
    DomainError,
    StoreTimeoutError,
    UnauthorizedError,
)


class ErrorResponse(BaseModel):
    """
    標準エラーレスポンス

    Attributes:
        status: ステータス（常に"error"）
        code: エラーコード
        message: エラーメッセージ
        details: エラーの詳細情報（オプション）
    """

    status: str = "error"
    code: str
    message: str
    details: Optional[list[dict[str, Any]] | dict[str, Any]] = None


class APIError(HTTPException):
    """
    API エラーの基底クラス

    FastAPIのHTTPExceptionを継承し、ドメインエラーを
    HTTPレスポンスに変換する。

    Attributes:
        status_code: HTTPステータスコード
        error_code: エラーコード
        error_message: エラーメッセージ
        details: エラーの詳細情報
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_server_error"
    error_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]] | dict[str, Any]] = None,
    ) -> None:
        self.error_message = message or self.error_message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.error_message)

    def to_response(self) -> ErrorResponse:
        """標準エラーレスポンス形式に変換"""
        return ErrorResponse(
            code=self.error_code, message=self.error_message, details=self.details
        )


# 具体的なクラスほど先に判定される（MRO順）
STATUS_MAP: dict[type, int] = {
    BadRequestError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    StoreTimeoutError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(domain_error: DomainError) -> int:
    """ドメインエラーに対応するHTTPステータスコード（該当なしは500）"""
    for cls in type(domain_error).__mro__:
        if cls in STATUS_MAP:
            return STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def domain_error_to_api_error(domain_error: DomainError) -> APIError:
    """
    ドメインエラーをAPIエラーに変換

    セッション/CSRF関連のエラーはUnauthorizedErrorのサブクラスなので401になる

    Args:
        domain_error: ドメイン層のエラー

    Returns:
        APIError: API層のエラー

    Examples:
        >>> from session_guard.domain.exceptions import SessionExpiredError
        >>> api_err = domain_error_to_api_error(SessionExpiredError())
        >>> api_err.status_code
        401
    """
    details = domain_error.details
    if details is not None and not isinstance(details, (list, dict)):
        details = {"detail": str(details)}

    api_error = APIError(message=domain_error.message, details=details)
    api_error.status_code = status_code_for(domain_error)
    api_error.error_code = domain_error.code
    api_error.error_message = domain_error.message

    return api_error
