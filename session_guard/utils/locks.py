"""
読み書きロック

標準ライブラリには読み書きロックが無いため、threading.Conditionで実装する。
書き込み待ちがある間は新しい読み込みを待たせる（ライター優先）。
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class LockTimeoutError(TimeoutError):
    """ロック取得がタイムアウトした場合のエラー"""


class ReadWriteLock:
    """
    ライター優先の読み書きロック

    読み込みは共有、書き込みは排他。再入不可。

    Example:
        >>> lock = ReadWriteLock()
        >>> with lock.read_lock():
        ...     pass
        >>> with lock.write_lock(timeout=1.0):
        ...     pass
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self, timeout: Optional[float] = None) -> None:
        """
        共有ロックを取得する

        Args:
            timeout: 待機上限（秒）。Noneの場合は無期限

        Raises:
            LockTimeoutError: 待機上限を超えた場合
        """
        with self._cond:
            acquired = self._cond.wait_for(
                lambda: not self._writer and self._waiting_writers == 0, timeout
            )
            if not acquired:
                raise LockTimeoutError("Timed out waiting for read lock")
            self._readers += 1

    def release_read(self) -> None:
        """共有ロックを解放する"""
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: Optional[float] = None) -> None:
        """
        排他ロックを取得する

        Args:
            timeout: 待機上限（秒）。Noneの場合は無期限

        Raises:
            LockTimeoutError: 待機上限を超えた場合
        """
        with self._cond:
            self._waiting_writers += 1
            try:
                acquired = self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0, timeout
                )
            finally:
                self._waiting_writers -= 1
            if not acquired:
                # 待機中のライターが抜けたので読み込み側を起こす
                self._cond.notify_all()
                raise LockTimeoutError("Timed out waiting for write lock")
            self._writer = True

    def release_write(self) -> None:
        """排他ロックを解放する"""
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_lock(self, timeout: Optional[float] = None) -> Iterator[None]:
        """共有ロックのコンテキストマネージャ"""
        self.acquire_read(timeout)
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self, timeout: Optional[float] = None) -> Iterator[None]:
        """排他ロックのコンテキストマネージャ"""
        self.acquire_write(timeout)
        try:
            yield
        finally:
            self.release_write()
