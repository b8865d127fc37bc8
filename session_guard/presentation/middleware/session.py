"""
セッション管理ミドルウェア

リクエストごとにセッションを読み込み（無ければ作成）、リクエストスコープに紐付ける。
レスポンス開始時にセッションCookieとXSRF-TOKEN Cookieを付与し、
アプリケーションの処理が終わった後にセッションを保存する。
"""

import threading
from typing import Optional, Sequence

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ...application.session_manager import CSRF_COOKIE_NAME, SessionManager
from ...core.logging import get_logger
from ...domain.session import Session
from ...utils.session_helper import attach_session
from .error_handler import internal_error_response, report_unhandled_error

logger = get_logger(__name__)


def resolve_manager(scope: Scope, manager: Optional[SessionManager]) -> SessionManager:
    """明示的に渡されたマネージャー、無ければapp.stateのマネージャーを返す"""
    if manager is not None:
        return manager
    return scope["app"].state.session_manager


def build_cookie_headers(manager: SessionManager, session: Session) -> list[bytes]:
    """
    セッションCookieとXSRF-TOKEN CookieのSet-Cookieヘッダー値を生成

    XSRF-TOKENはJavaScriptから読めるようにHttpOnlyを付けず、Expiresも付けない
    """
    config = manager.config
    response = Response()
    response.set_cookie(
        key=config.cookie_name,
        value=session.id,
        expires=session.expires_at,
        path="/",
        domain=config.domain,
        secure=config.secure,
        httponly=config.http_only,
        samesite=config.same_site,
    )
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=session.csrf_token,
        path="/",
        domain=config.domain,
        secure=config.secure,
        httponly=False,
        samesite=config.same_site,
    )
    return [value for name, value in response.raw_headers if name == b"set-cookie"]


class SessionResponder:
    """
    sendをラップし、最初のhttp.response.startでセッション関連ヘッダーを付与する

    Vary/Cache-Controlは常に付与する。Cookieはセッションがあり、破棄されていない場合のみ。
    ヘッダーの付与は1回だけ。flush()以降はラップせずにそのまま送る
    """

    def __init__(
        self,
        send: Send,
        manager: SessionManager,
        session: Optional[Session] = None,
    ) -> None:
        self._send = send
        self._manager = manager
        self.session = session
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def _claim(self) -> bool:
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start" and self._claim():
            headers = MutableHeaders(scope=message)
            headers.append("Vary", "Cookie")
            headers.append("Cache-Control", 'no-cache="Set-Cookie"')
            # 破棄済みの場合はdestroy_sessionが期限切れCookieを設定している
            if self.session is not None and not self.session.destroyed:
                for value in build_cookie_headers(self._manager, self.session):
                    headers.append("Set-Cookie", value.decode("latin-1"))
        await self._send(message)

    def flush(self) -> None:
        """レスポンスが開始されていなくても完了扱いにする（2回目以降は何もしない）"""
        self._claim()


class SessionMiddleware:
    """
    セッション管理ミドルウェア（ASGI）

    CSRFMiddlewareより外側に登録すること。
    exclude_pathsで始まるパス（ヘルスチェック等）ではセッションを作成しない。
    レスポンス開始前の未処理例外（ストア障害を含む）は500のJSONに変換する
    """

    def __init__(
        self,
        app: ASGIApp,
        manager: Optional[SessionManager] = None,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.app = app
        self.manager = manager
        self.exclude_paths = tuple(exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        manager = resolve_manager(scope, self.manager)
        responder = SessionResponder(send, manager)
        try:
            if scope["path"].startswith(self.exclude_paths):
                await self.app(scope, receive, responder.send)
            else:
                await self._run_with_session(manager, scope, receive, responder)
        except Exception as e:
            # レスポンス送信後はどうにもできない
            if responder.done:
                raise
            report_unhandled_error(scope, e)
            await internal_error_response()(scope, receive, responder.send)
        finally:
            responder.flush()

    async def _run_with_session(
        self,
        manager: SessionManager,
        scope: Scope,
        receive: Receive,
        responder: SessionResponder,
    ) -> None:
        connection = HTTPConnection(scope)

        session = await run_in_threadpool(manager.start_session, connection)
        attach_session(connection, session)
        responder.session = session

        await self.app(scope, receive, responder.send)
        if not session.destroyed:
            await run_in_threadpool(manager.save_session, session)
