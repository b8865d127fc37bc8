"""
セッションマネージャー

リクエスト単位のセッションライフサイクルを管理する
- 読み込みまたは新規作成（start_session）
- 有効期限・アイドルタイムアウト・ハイジャック検証
- 保存・破棄・ID再生成（セッション固定攻撃対策）
- CSRFトークン検証
- 期限切れセッションの定期削除

ストア操作はブロッキングなので、ASGIからはスレッドプール経由で呼び出す。
"""

import threading
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from starlette.requests import HTTPConnection
from starlette.responses import Response

from ..core.config import DEFAULT_SESSION_CONFIG, SessionConfig
from ..core.logging import get_logger, redact
from ..domain.exceptions import (
    CSRFMismatchError,
    SessionExpiredError,
    SessionHijackedError,
    SessionNotFoundError,
)
from ..domain.session import CSRF_TOKEN_KEY, Clock, Session, utcnow
from ..domain.store import Store
from ..infrastructure.batch import (
    ExpiredSessionCleanupTask,
    create_scheduler,
    start_scheduler,
    stop_scheduler,
)
from ..infrastructure.security.tokens import (
    constant_time_equals,
    generate_csrf_token,
    generate_fingerprint,
    generate_session_id,
)
from ..utils.session_helper import (
    get_client_ip,
    get_session_from_request,
    get_user_agent,
)

logger = get_logger(__name__)

CSRF_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
CSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_HEADER_NAME = "X-XSRF-TOKEN"
CSRF_FORM_FIELD = CSRF_TOKEN_KEY

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SessionManager:
    """
    セッションマネージャー

    cleanup_interval > 0 の場合、構築時にバックグラウンドの削除ジョブを起動する。
    close()でジョブを停止・待機してからストアを閉じる。

    Example:
        >>> with SessionManager(MemoryStore()) as manager:
        ...     session = manager.start_session(request)
        ...     manager.save_session(session)
    """

    def __init__(
        self,
        store: Store,
        config: Optional[SessionConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Args:
            store: セッションストア
            config: 設定（Noneの場合はデフォルト）
            clock: 現在時刻を返す関数（テスト用に差し替え可能）
        """
        self.store = store
        self.config = config or DEFAULT_SESSION_CONFIG
        self._clock = clock or utcnow
        self._close_lock = threading.Lock()
        self._closed = False
        self._scheduler: Optional[BackgroundScheduler] = None

        if self.config.cleanup_interval.total_seconds() > 0:
            self._scheduler = create_scheduler(
                ExpiredSessionCleanupTask(store), self.config.cleanup_interval
            )
            start_scheduler(self._scheduler)

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def now(self) -> datetime:
        return self._clock()

    def client_ip(self, request: HTTPConnection) -> str:
        """設定された信頼境界に従ってクライアントIPを取得"""
        return get_client_ip(request, self.config.trusted_proxies)

    def client_fingerprint(self, request: HTTPConnection) -> str:
        """
        リクエストのフィンガープリントを生成

        fingerprint_headersが未設定の場合は常に空文字列
        """
        headers = self.config.fingerprint_headers
        if not headers:
            return ""
        return generate_fingerprint(request.headers.get(h) for h in headers)

    def start_session(self, request: HTTPConnection) -> Session:
        """
        Cookieのセッションを読み込む。無い・無効な場合は新規作成する

        新規作成したセッションはこの時点ではストアに保存しない（save_sessionで保存）

        Raises:
            TokenGenerationError: トークンを生成できない場合
            StoreError: ストアのエラー（NotFound/Expired以外はそのまま送出）
        """
        session_id = request.cookies.get(self.config.cookie_name)
        if not session_id:
            return self._fresh_session(request)

        try:
            session = self.store.get(session_id)
        except (SessionNotFoundError, SessionExpiredError):
            return self._fresh_session(request)

        try:
            self.validate_session(request, session)
        except (SessionExpiredError, SessionHijackedError) as e:
            # 検証に失敗したセッションは残さない
            self.store.delete(session.id)
            logger.info(f"Discarded session {redact(session.id)}: {e.message}")
            return self._fresh_session(request)

        return session

    def get_session(self, request: HTTPConnection) -> Session:
        """
        Cookieのセッションを取得して検証する（新規作成しない）

        検証に失敗した場合はストアから削除してからエラーを送出する。
        成功した場合はlast_activityを更新して保存する

        Raises:
            SessionNotFoundError: Cookieが無い、またはストアに存在しない場合
            SessionExpiredError: 有効期限切れの場合
            SessionHijackedError: クライアント情報が一致しない場合
        """
        session_id = request.cookies.get(self.config.cookie_name)
        if not session_id:
            raise SessionNotFoundError()

        session = self.store.get(session_id)

        try:
            self.validate_session(request, session)
        except (SessionExpiredError, SessionHijackedError):
            self.store.delete(session.id)
            raise

        self.save_session(session)
        return session

    def validate_session(self, request: HTTPConnection, session: Session) -> None:
        """
        セッションを検証

        Raises:
            SessionExpiredError: 絶対期限またはアイドルタイムアウトを過ぎている場合
            SessionHijackedError: IP・User-Agent・フィンガープリントが一致しない場合
        """
        now = self._clock()
        if session.is_expired(now) or session.is_idle(now, self.config.timeout):
            raise SessionExpiredError()

        if (
            session.ip_address != self.client_ip(request)
            or session.user_agent != get_user_agent(request)
        ):
            logger.warning(f"Session client mismatch: {redact(session.id)}")
            raise SessionHijackedError()

        if not constant_time_equals(
            session.fingerprint, self.client_fingerprint(request)
        ):
            logger.warning(f"Session fingerprint mismatch: {redact(session.id)}")
            raise SessionHijackedError()

    def save_session(self, session: Session) -> None:
        """last_activityを更新してストアに保存"""
        session.touch(self._clock())
        self.store.set(session)

    def destroy_session(self, request: HTTPConnection, response: Response) -> None:
        """
        Cookieのセッションを破棄し、クライアントのCookieを期限切れにする

        Cookieが無い場合は何もしない
        """
        session_id = request.cookies.get(self.config.cookie_name)
        if not session_id:
            return

        self.store.delete(session_id)

        attached = get_session_from_request(request)
        if attached is not None:
            attached.destroyed = True

        response.set_cookie(
            key=self.config.cookie_name,
            value="",
            expires=EPOCH,
            path="/",
            domain=self.config.domain,
            secure=self.config.secure,
            httponly=self.config.http_only,
            samesite=self.config.same_site,
        )
        logger.info(f"Session destroyed: {redact(session_id)}")

    def regenerate_session(
        self, session: Session, request: Optional[HTTPConnection] = None
    ) -> str:
        """
        セッションIDを再生成（セッション固定攻撃対策）

        セッションの排他ロックを保持したまま、古いIDをストアから削除して新しいIDに差し替える。
        ストアへの保存は行わないので、呼び出し側でsave_sessionすること

        Args:
            session: 対象セッション
            request: 指定した場合はフィンガープリントをこのリクエストから再計算する

        Returns:
            新しいセッションID
        """
        new_id = generate_session_id(self.config.token_length)
        fingerprint = self.client_fingerprint(request) if request is not None else ""
        old_id = session.swap_id(
            new_id,
            fingerprint=fingerprint,
            now=self._clock(),
            release=self.store.delete,
        )
        logger.info(f"Session ID regenerated: {redact(old_id)} -> {redact(new_id)}")
        return new_id

    def bind_user(
        self,
        session: Session,
        user_id: str,
        request: Optional[HTTPConnection] = None,
    ) -> None:
        """
        セッションにユーザーIDを紐付ける

        regenerate_on_authが有効な場合は、先にセッションIDを再生成する。
        認証そのものは呼び出し側の責務
        """
        if self.config.regenerate_on_auth:
            self.regenerate_session(session, request)
        session.user_id = user_id

    def reset_csrf_token(self, session: Session) -> str:
        """CSRFトークンを明示的に再生成する"""
        token = generate_csrf_token()
        session.put(CSRF_TOKEN_KEY, token)
        return token

    def requires_csrf(self, method: str) -> bool:
        """CSRF検証が必要なリクエストメソッドか"""
        return self.config.enable_csrf and method.upper() in CSRF_METHODS

    def validate_csrf_token(self, session: Session, submitted: Optional[str]) -> None:
        """
        送信されたCSRFトークンをセッションのトークンと定数時間で比較

        Raises:
            CSRFMismatchError: トークンが無い、または一致しない場合
        """
        if not self.config.enable_csrf:
            return

        expected = session.get(CSRF_TOKEN_KEY)
        if not isinstance(expected, str) or not expected or not submitted:
            raise CSRFMismatchError()
        if not constant_time_equals(expected, submitted):
            raise CSRFMismatchError()

    def close(self) -> None:
        """
        バックグラウンドジョブを停止・待機してからストアを閉じる

        ジョブの停止に失敗してもストアは必ず閉じる。2回目以降の呼び出しは何もしない
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        try:
            if self._scheduler is not None:
                stop_scheduler(self._scheduler)
        finally:
            self.store.close()
            logger.info("Session manager closed")

    def _fresh_session(self, request: HTTPConnection) -> Session:
        now = self._clock()
        session = Session(
            session_id=generate_session_id(self.config.token_length),
            payload={CSRF_TOKEN_KEY: generate_csrf_token()},
            ip_address=self.client_ip(request),
            user_agent=get_user_agent(request),
            created_at=now,
            expires_at=now + self.config.max_age,
            last_activity=now,
            fingerprint=self.client_fingerprint(request),
        )
        logger.debug(f"Session created: {redact(session.id)}")
        return session
