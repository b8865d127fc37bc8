"""
CSRF検証ミドルウェア

状態を変更するリクエスト（POST/PUT/PATCH/DELETE）で、
X-XSRF-TOKENヘッダーまたはフォームのcsrf_tokenフィールドをセッションのトークンと照合する。
"""

from typing import Optional

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.status import HTTP_401_UNAUTHORIZED
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ...application.session_manager import (
    CSRF_FORM_FIELD,
    CSRF_HEADER_NAME,
    SessionManager,
)
from ...core.logging import get_logger
from ...domain.exceptions import CSRFMismatchError, SessionRequiredError
from ...utils.session_helper import get_session_from_request
from .session import resolve_manager

logger = get_logger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """読み込み済みのボディを下流のアプリケーションに再送するreceive"""
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class CSRFMiddleware:
    """
    CSRF検証ミドルウェア（ASGI）

    SessionMiddlewareの内側に登録すること。検証に失敗した場合は401のテキストを返す
    """

    def __init__(self, app: ASGIApp, manager: Optional[SessionManager] = None) -> None:
        self.app = app
        self.manager = manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        manager = resolve_manager(scope, self.manager)
        if not manager.requires_csrf(scope["method"]):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        session = get_session_from_request(request)
        if session is None:
            response = PlainTextResponse(
                SessionRequiredError().message, status_code=HTTP_401_UNAUTHORIZED
            )
            await response(scope, receive, send)
            return

        token = request.headers.get(CSRF_HEADER_NAME)
        if not token:
            content_type = request.headers.get("content-type", "")
            if content_type.startswith(FORM_CONTENT_TYPES):
                body = await request.body()
                async with request.form() as form:
                    value = form.get(CSRF_FORM_FIELD)
                token = value if isinstance(value, str) else None
                receive = _replay_receive(body, receive)

        try:
            manager.validate_csrf_token(session, token)
        except CSRFMismatchError as e:
            logger.warning(f"CSRF token mismatch: {request.method} {request.url.path}")
            response = PlainTextResponse(e.message, status_code=HTTP_401_UNAUTHORIZED)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
