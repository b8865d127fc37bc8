"""バッチ処理フレームワーク"""

from .base import BatchTask
from .scheduler import create_scheduler, start_scheduler, stop_scheduler
from .tasks import CLEANUP_TIMEOUT, ExpiredSessionCleanupTask

__all__ = [
    "BatchTask",
    "ExpiredSessionCleanupTask",
    "CLEANUP_TIMEOUT",
    "create_scheduler",
    "start_scheduler",
    "stop_scheduler",
]
