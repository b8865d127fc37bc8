"""
インメモリセッションストア

単一の読み書きロックで保護したdict。
小規模・単一プロセス向けのリファレンス実装。
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from ...core.logging import get_logger, redact
from ...domain.exceptions import (
    SessionExpiredError,
    SessionNotFoundError,
    StoreTimeoutError,
)
from ...domain.session import Clock, Session, utcnow
from ...domain.store import Store
from ...utils.locks import LockTimeoutError, ReadWriteLock

logger = get_logger(__name__)


class MemoryStore(Store):
    """
    インメモリセッションストア

    setでスナップショットを保存し、getではコピーを返す。
    ストアが正となるインスタンスを持ち、リクエスト間でSessionオブジェクトを共有しない
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """
        Args:
            clock: 現在時刻を返す関数（テスト用に差し替え可能）
        """
        self._clock = clock or utcnow
        self._lock = ReadWriteLock()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._sessions)

    @contextmanager
    def _reading(self, timeout: Optional[float]) -> Iterator[None]:
        try:
            self._lock.acquire_read(timeout)
        except LockTimeoutError as e:
            raise StoreTimeoutError() from e
        try:
            yield
        finally:
            self._lock.release_read()

    @contextmanager
    def _writing(self, timeout: Optional[float]) -> Iterator[None]:
        try:
            self._lock.acquire_write(timeout)
        except LockTimeoutError as e:
            raise StoreTimeoutError() from e
        try:
            yield
        finally:
            self._lock.release_write()

    def get(self, session_id: str, *, timeout: Optional[float] = None) -> Session:
        with self._reading(timeout):
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError()
            if session.expires_at > self._clock():
                return session.copy()

        # 期限切れ: 排他ロックを取り直して再確認してから削除
        with self._writing(timeout):
            current = self._sessions.get(session_id)
            if current is not None and current.expires_at <= self._clock():
                del self._sessions[session_id]
                logger.debug(f"Expired session evicted on read: {redact(session_id)}")
        raise SessionExpiredError()

    def set(self, session: Session, *, timeout: Optional[float] = None) -> None:
        snapshot = session.copy()
        with self._writing(timeout):
            self._sessions[snapshot.id] = snapshot

    def delete(self, session_id: str, *, timeout: Optional[float] = None) -> None:
        with self._writing(timeout):
            self._sessions.pop(session_id, None)

    def delete_expired(self, *, timeout: Optional[float] = None) -> int:
        with self._writing(timeout):
            now = self._clock()
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.expires_at <= now
            ]
            for session_id in expired:
                del self._sessions[session_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return len(expired)

    def close(self) -> None:
        with self._lock.write_lock():
            self._sessions.clear()
