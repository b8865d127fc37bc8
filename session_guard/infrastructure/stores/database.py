"""
RDBセッションストア

SQLAlchemyでsessionsテーブルに永続化する。
- ペイロードはJSONで保存し、キーが設定されていればFernetで暗号化
- 復号化できないペイロードは改ざんとみなし、レコードを削除する
- SQLAlchemyのエラーはロールバックした上でそのまま送出する
- timeoutはPostgreSQLではトランザクション内のstatement_timeoutとして適用し、
  タイムアウト系のエラーはStoreTimeoutErrorに変換する
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, cast

from sqlalchemy import delete, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.orm import sessionmaker

from ...core.logging import get_logger, redact
from ...domain.exceptions import (
    SessionExpiredError,
    SessionHijackedError,
    SessionNotFoundError,
    StoreTimeoutError,
)
from ...domain.session import Clock, Session, utcnow
from ...domain.store import Store
from ..database.models import SessionRecord
from ..security.encryption import SessionEncryption

logger = get_logger(__name__)

# PostgreSQLのquery_canceled（statement_timeout）とlock_not_available
TIMEOUT_PGCODES = frozenset({"57014", "55P03"})


def _as_utc(value: datetime) -> datetime:
    # SQLiteはタイムゾーン情報を保持しないので、UTCとして読み直す
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_timeout(error: OperationalError) -> bool:
    if getattr(error.orig, "pgcode", None) in TIMEOUT_PGCODES:
        return True
    # SQLiteのビジータイムアウト
    return "database is locked" in str(error.orig)


class SQLAlchemyStore(Store):
    """
    SQLAlchemyによるセッションストア

    コネクションプールの待ち時間はEngineのpool_timeoutで制限される
    """

    def __init__(
        self,
        session_factory: sessionmaker[DBSession],
        encryption: Optional[SessionEncryption] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Args:
            session_factory: DBセッションファクトリ
            encryption: ペイロード暗号化（Noneの場合は平文JSON）
            clock: 現在時刻を返す関数
        """
        self._session_factory = session_factory
        self._encryption = encryption or SessionEncryption(encryption_key="")
        self._clock = clock or utcnow

    @contextmanager
    def _db(self, timeout: Optional[float] = None) -> Iterator[DBSession]:
        db = self._session_factory()
        try:
            if timeout is not None:
                self._apply_timeout(db, timeout)
            yield db
        except PoolTimeoutError as e:
            db.rollback()
            raise StoreTimeoutError() from e
        except OperationalError as e:
            db.rollback()
            if _is_timeout(e):
                raise StoreTimeoutError() from e
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _apply_timeout(self, db: DBSession, timeout: float) -> None:
        # set_configの第3引数trueでトランザクション内だけ有効にする
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(
            text("SELECT set_config('statement_timeout', :ms, true)"),
            {"ms": str(max(1, int(timeout * 1000)))},
        )

    def _to_session(self, record: SessionRecord) -> Session:
        return Session(
            session_id=record.session_id,
            payload=self._encryption.decrypt(record.payload),
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            created_at=_as_utc(record.created_at),
            expires_at=_as_utc(record.expires_at),
            last_activity=_as_utc(record.last_activity),
            user_id=record.user_id,
            fingerprint=record.fingerprint,
        )

    def get(self, session_id: str, *, timeout: Optional[float] = None) -> Session:
        with self._db(timeout) as db:
            record = db.get(SessionRecord, session_id)
            if record is None:
                logger.debug(f"Session not found: {redact(session_id)}")
                raise SessionNotFoundError()

            if _as_utc(record.expires_at) <= self._clock():
                db.delete(record)
                db.commit()
                logger.info(f"Session expired: {redact(session_id)}")
                raise SessionExpiredError()

            try:
                return self._to_session(record)
            except ValueError as e:
                logger.warning(
                    f"Failed to restore session payload for {redact(session_id)}: {e}"
                )
                db.delete(record)
                db.commit()
                raise SessionHijackedError() from e

    def set(self, session: Session, *, timeout: Optional[float] = None) -> None:
        record = SessionRecord(
            session_id=session.id,
            user_id=session.user_id,
            payload=self._encryption.encrypt(session.payload()),
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            fingerprint=session.fingerprint,
            last_activity=session.last_activity,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )
        with self._db(timeout) as db:
            db.merge(record)
            db.commit()

    def delete(self, session_id: str, *, timeout: Optional[float] = None) -> None:
        with self._db(timeout) as db:
            db.execute(delete(SessionRecord).where(SessionRecord.session_id == session_id))
            db.commit()

    def delete_expired(self, *, timeout: Optional[float] = None) -> int:
        with self._db(timeout) as db:
            result = db.execute(
                delete(SessionRecord).where(SessionRecord.expires_at <= self._clock())
            )
            db.commit()
            count = cast(int, getattr(result, "rowcount", 0))
        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count

    def close(self) -> None:
        bind = self._session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()

    def ping(self) -> None:
        """接続確認（ヘルスチェック用）"""
        with self._db() as db:
            db.execute(text("SELECT 1"))
