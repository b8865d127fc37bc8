"""FastAPI例外ハンドラー"""

import json
from typing import Awaitable, Callable, cast

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.logging import get_logger
from ...domain.exceptions import DomainError, UnauthorizedError, ValidationError
from ..exceptions import APIError, ErrorResponse, domain_error_to_api_error

logger = get_logger(__name__)


def _json_response(error: ErrorResponse, status_code: int) -> Response:
    return Response(
        content=json.dumps(jsonable_encoder(error)),
        status_code=status_code,
        media_type="application/json",
    )


async def domain_error_handler(request: Request, exc: DomainError) -> Response:
    """DomainError例外ハンドラ"""
    if isinstance(exc, UnauthorizedError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.code}")
    api_error = domain_error_to_api_error(exc)
    return _json_response(api_error.to_response(), api_error.status_code)


async def api_error_handler(request: Request, exc: APIError) -> Response:
    """APIError例外ハンドラ"""
    return _json_response(exc.to_response(), exc.status_code)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """HTTPException例外ハンドラ"""
    error = ErrorResponse(
        code="http_error",
        message=str(exc.detail),
    )
    return _json_response(error, exc.status_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """バリデーションエラーハンドラ（Pydantic）"""
    error = ValidationError(
        message="Invalid request body",
        details=[
            {"loc": err["loc"], "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ],
    )
    api_error = domain_error_to_api_error(error)
    return _json_response(api_error.to_response(), api_error.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """
    FastAPIアプリケーションに例外ハンドラーを登録

    Args:
        app: FastAPIアプリケーションインスタンス
    """
    # Starletteの型定義に合わせるためのキャスト
    handler_type = Callable[[Request, Exception], Awaitable[Response]]

    app.add_exception_handler(DomainError, cast(handler_type, domain_error_handler))
    app.add_exception_handler(APIError, cast(handler_type, api_error_handler))
    app.add_exception_handler(
        StarletteHTTPException, cast(handler_type, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(handler_type, validation_exception_handler)
    )
