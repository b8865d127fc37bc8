"""アプリケーションライフサイクル管理"""

import contextlib
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from ..application.session_manager import SessionManager
from ..infrastructure.stores import create_store
from .config import Settings, get_settings
from .logging import get_logger

logger = get_logger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    アプリケーションのライフサイクル管理

    起動時:
    - 起動時刻の記録
    - セッションマネージャーの作成（create_appで渡されていない場合）
      - create_appに渡された設定（app.state.settings）を使う
      - SESSION_STORE=databaseの場合はマイグレーションを実行
      - 期限切れセッション削除ジョブの起動

    シャットダウン時:
    - 削除ジョブの停止・待機とストアのクローズ

    Args:
        app: FastAPIアプリケーションインスタンス

    Yields:
        None
    """
    # 起動時刻を記録（healthcheckのuptime計算用）
    app.state.start_time = datetime.now(timezone.utc)

    manager: SessionManager | None = getattr(app.state, "session_manager", None)
    if manager is None:
        settings: Settings = getattr(app.state, "settings", None) or get_settings()
        store = await run_in_threadpool(create_store, settings)
        manager = SessionManager(store, settings.session_config)
        app.state.session_manager = manager
        logger.info(
            f"Session manager started (store: {type(store).__name__}, "
            f"cleanup interval: {manager.config.cleanup_interval})"
        )

    try:
        yield
    finally:
        # シャットダウン
        await run_in_threadpool(manager.close)
