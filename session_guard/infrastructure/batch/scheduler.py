"""バッチスケジューラー管理"""

from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ...core.logging import get_logger
from .base import BatchTask

logger = get_logger(__name__)


def create_scheduler(task: BatchTask, interval: timedelta) -> BackgroundScheduler:
    """
    タスクを一定間隔で実行するスケジューラーを作成する。

    同じタスクが重なって実行されないよう、max_instances=1・coalesce=Trueで登録する。

    Args:
        task: 実行するタスク
        interval: 実行間隔

    Returns:
        BackgroundScheduler: タスクが登録されたスケジューラー（未起動）

    Example:
        >>> scheduler = create_scheduler(task, timedelta(hours=1))
        >>> start_scheduler(scheduler)
    """
    scheduler = BackgroundScheduler(
        job_defaults={"coalesce": True, "max_instances": 1},
    )

    task_id = task.__class__.__name__
    scheduler.add_job(
        task.run,
        trigger=IntervalTrigger(seconds=interval.total_seconds()),
        id=task_id,
        name=task_id,
    )
    logger.info(f"[SCHEDULER] Registered task: {task_id} (every {interval})")

    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    """
    スケジューラーを起動し、次回実行時刻をログに出力する。

    Args:
        scheduler: 起動するスケジューラー
    """
    scheduler.start()
    logger.info("[SCHEDULER] Started")

    for job in scheduler.get_jobs():
        logger.info(f"[SCHEDULER] {job.id} next run: {job.next_run_time}")


def stop_scheduler(scheduler: BackgroundScheduler) -> None:
    """
    スケジューラーを停止する。

    実行中のタスクが終わるまで待ってから戻る。

    Args:
        scheduler: 停止するスケジューラー
    """
    if scheduler.running:
        scheduler.shutdown(wait=True)
    logger.info("[SCHEDULER] Stopped")
