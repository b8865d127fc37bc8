"""期限切れセッションの削除タスク"""

from ....domain.store import Store
from ..base import BatchTask

# ストア操作1回あたりの上限（秒）
CLEANUP_TIMEOUT = 5 * 60


class ExpiredSessionCleanupTask(BatchTask):
    """
    期限切れセッションの削除タスク。

    ストアのdelete_expired()をタイムアウト付きで呼び出す。
    ベストエフォートで、失敗しても次の周期で再実行される。
    """

    def __init__(self, store: Store, timeout: float = CLEANUP_TIMEOUT) -> None:
        """
        Args:
            store: 対象のセッションストア
            timeout: ストア操作の上限（秒）
        """
        super().__init__()
        self.store = store
        self.timeout = timeout
        self.last_deleted = 0

    def execute(self) -> None:
        self.last_deleted = self.store.delete_expired(timeout=self.timeout)
