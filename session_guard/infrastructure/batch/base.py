"""バッチタスクの基底クラス"""

from abc import ABC, abstractmethod
from datetime import datetime

import sentry_sdk

from ...core.logging import get_logger


class BatchTask(ABC):
    """
    バッチタスクの基底クラス。

    すべてのバッチタスクはこのクラスを継承し、
    execute()メソッドを実装する必要がある。

    バックグラウンドで繰り返し実行される前提のため、run()は例外を送出しない。
    失敗はログとSentryに記録し、次回の実行に任せる。

    Example:
        >>> class MyTask(BatchTask):
        ...     def execute(self) -> None:
        ...         print("Task executed")
        ...
        >>> task = MyTask()
        >>> task.run()
        True
    """

    def __init__(self) -> None:
        """バッチタスクを初期化する。"""
        self.logger = get_logger(__name__)

    @abstractmethod
    def execute(self) -> None:
        """
        タスクの実行処理。

        サブクラスで実装必須。
        """

    def on_success(self) -> None:
        """タスク成功時のフック。"""

    def on_failure(self, error: Exception) -> None:
        """
        タスク失敗時のフック。

        デフォルトではエラーログを出力する。

        Args:
            error: 発生した例外
        """
        self.logger.error(f"Task failed: {error}", exc_info=True)

    def run(self) -> bool:
        """
        タスク実行のラッパー。

        - 実行開始/終了のログ出力
        - 実行時間の計測
        - 失敗時のログ出力とSentryへのエラー送信

        Returns:
            成功した場合True
        """
        start_time = datetime.now()
        task_name = self.__class__.__name__

        try:
            self.logger.debug(f"[BATCH] {task_name} start")
            self.execute()
            self.on_success()
        except Exception as e:
            self.on_failure(e)
            sentry_sdk.capture_exception(e)
            return False

        elapsed = datetime.now() - start_time
        self.logger.debug(f"[BATCH] {task_name} completed ({elapsed})")
        return True
