"""
未処理例外の500レスポンス

SessionMiddlewareがセッションの読み込み失敗やハンドラーの未処理例外を
ここで500のJSONに変換する。レスポンスはセッション用のsendを通して送るので、
Vary/Cache-Controlヘッダーはエラー時にも付与される
"""

import json

import sentry_sdk
from starlette.responses import Response
from starlette.types import Scope

from ...core.logging import get_logger
from ..exceptions import ErrorResponse

logger = get_logger(__name__)


def report_unhandled_error(scope: Scope, error: Exception) -> None:
    """Sentryに送信してログに残す"""
    sentry_sdk.capture_exception(error)
    logger.error(
        f"Unhandled exception on {scope.get('method')} {scope.get('path')}: {error}",
        exc_info=error,
    )


def internal_error_response() -> Response:
    """標準エラー形式の500レスポンス"""
    error = ErrorResponse(
        code="internal_server_error",
        message="Internal server error occurred",
    )
    return Response(
        content=json.dumps(error.model_dump()),
        status_code=500,
        media_type="application/json",
    )
