"""
セッションエンティティ

サーバー側で保持するセッション状態。
ペイロード・ID・フィンガープリントは読み書きロックで保護する。
"""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, ItemsView, Optional

from ..utils.locks import ReadWriteLock

CSRF_TOKEN_KEY = "csrf_token"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """現在時刻（UTC、タイムゾーン付き）"""
    return datetime.now(timezone.utc)


class Session:
    """
    セッション

    Attributes:
        user_id: 紐付けられたユーザーID（匿名セッションは空文字列）
        ip_address: 作成時のクライアントIP
        user_agent: 作成時のUser-Agent
        created_at: 作成時刻
        expires_at: 絶対有効期限（created_at + max_age、延長しない）
        last_activity: 最終アクティビティ時刻（アイドルタイムアウト判定用）
        destroyed: 破棄済みフラグ
    """

    def __init__(
        self,
        session_id: str,
        payload: dict[str, Any],
        ip_address: str,
        user_agent: str,
        created_at: datetime,
        expires_at: datetime,
        last_activity: datetime,
        user_id: str = "",
        fingerprint: str = "",
    ) -> None:
        if not session_id:
            raise ValueError("session id must not be empty")
        if not payload.get(CSRF_TOKEN_KEY):
            raise ValueError("payload must contain a csrf_token")

        self._id = session_id
        self._payload = dict(payload)
        self._fingerprint = fingerprint
        self._lock = ReadWriteLock()

        self.user_id = user_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.created_at = created_at
        self.expires_at = expires_at
        self.last_activity = last_activity
        self.destroyed = False

    def __repr__(self) -> str:
        return f"<Session(id={self.id[:8]}, expires_at={self.expires_at})>"

    @property
    def id(self) -> str:
        with self._lock.read_lock():
            return self._id

    @property
    def fingerprint(self) -> str:
        with self._lock.read_lock():
            return self._fingerprint

    @property
    def csrf_token(self) -> str:
        return self.get(CSRF_TOKEN_KEY)

    def get(self, key: str, default: Any = None) -> Any:
        """ペイロードの値を取得"""
        with self._lock.read_lock():
            return self._payload.get(key, default)

    def put(self, key: str, value: Any) -> None:
        """
        ペイロードに値を設定

        Raises:
            ValueError: csrf_tokenを空にしようとした場合
        """
        if key == CSRF_TOKEN_KEY and not value:
            raise ValueError("csrf_token must not be empty")
        with self._lock.write_lock():
            self._payload[key] = value

    def has(self, key: str) -> bool:
        """ペイロードにキーが存在するか"""
        with self._lock.read_lock():
            return key in self._payload

    def delete(self, key: str) -> None:
        """
        ペイロードからキーを削除（存在しない場合は何もしない）

        Raises:
            ValueError: csrf_tokenを削除しようとした場合
        """
        if key == CSRF_TOKEN_KEY:
            raise ValueError("csrf_token cannot be removed")
        with self._lock.write_lock():
            self._payload.pop(key, None)

    def items(self) -> ItemsView[str, Any]:
        """ペイロードのスナップショット"""
        with self._lock.read_lock():
            return dict(self._payload).items()

    def payload(self) -> dict[str, Any]:
        """ペイロードのコピー"""
        with self._lock.read_lock():
            return dict(self._payload)

    def swap_id(
        self,
        new_id: str,
        fingerprint: str,
        now: datetime,
        release: Optional[Callable[[str], None]] = None,
    ) -> str:
        """
        排他ロックを保持したままIDを差し替える

        Args:
            new_id: 新しいセッションID
            fingerprint: 新しいフィンガープリント
            now: 現在時刻（last_activityに設定）
            release: 差し替え前に古いIDで呼ばれるコールバック（ストアからの削除用）

        Returns:
            古いセッションID
        """
        if not new_id:
            raise ValueError("session id must not be empty")
        with self._lock.write_lock():
            old_id = self._id
            if release is not None:
                release(old_id)
            self._id = new_id
            self._fingerprint = fingerprint
            self.last_activity = now
            return old_id

    def touch(self, now: datetime) -> None:
        """最終アクティビティ時刻を更新"""
        self.last_activity = now

    def is_expired(self, now: datetime) -> bool:
        """絶対有効期限を過ぎているか"""
        return now > self.expires_at

    def is_idle(self, now: datetime, timeout: timedelta) -> bool:
        """アイドルタイムアウトを過ぎているか"""
        return now > self.last_activity + timeout

    def copy(self) -> "Session":
        """
        スナップショットを作成

        ペイロードはdeepcopyする。ロックは新しく作られる
        """
        with self._lock.read_lock():
            snapshot = Session(
                session_id=self._id,
                payload=copy.deepcopy(self._payload),
                ip_address=self.ip_address,
                user_agent=self.user_agent,
                created_at=self.created_at,
                expires_at=self.expires_at,
                last_activity=self.last_activity,
                user_id=self.user_id,
                fingerprint=self._fingerprint,
            )
        snapshot.destroyed = self.destroyed
        return snapshot
