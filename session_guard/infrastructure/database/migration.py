"""
セッションテーブルのマイグレーション実行モジュール

SESSION_STORE=database で起動した場合に、lifespanから
Alembicマイグレーションをプログラム的に実行します。
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from ...core.config import Settings, get_settings
from ...core.logging import get_logger

SCRIPT_LOCATION = (Path(__file__).parent / "alembic").resolve()


def _configure_migration_logging(settings: Settings) -> None:
    """
    Alembicのロガーをuvicornロガーに統合する。

    Args:
        settings: アプリケーション設定
    """
    uvicorn_logger = logging.getLogger("uvicorn")
    alembic_logger = logging.getLogger("alembic")
    for handler in uvicorn_logger.handlers:
        alembic_logger.addHandler(handler)

    if settings.is_development:
        alembic_logger.setLevel(logging.DEBUG)
    else:
        alembic_logger.setLevel(logging.INFO)


def create_alembic_config(database_uri: str) -> Config:
    """
    Alembic設定オブジェクトを作成する。

    Args:
        database_uri: 対象データベースのURL

    Returns:
        Config: Alembic設定オブジェクト
    """
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    alembic_cfg.set_main_option("sqlalchemy.url", database_uri)
    return alembic_cfg


def run_migrations(
    settings: Settings | None = None, logger_key: str | None = None
) -> None:
    """
    セッションテーブルを最新のスキーマに更新する

    settingsを省略した場合は環境変数の設定を使う

    マイグレーションが失敗した場合は例外をraiseし、
    アプリケーション起動を停止します。

    Raises:
        RuntimeError: マイグレーション実行に失敗した場合
    """
    logger = get_logger(logger_key or __name__)
    settings = settings or get_settings()
    try:
        _configure_migration_logging(settings)
        logger.info("Starting session table migrations...")
        logger.info(
            f"Database: {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
        )

        command.upgrade(create_alembic_config(settings.database_uri), "head")

        logger.info("Session table migrations completed successfully")
    except Exception as e:
        logger.error(f"Database migration failed: {e}", exc_info=True)
        raise RuntimeError(f"Database migration failed: {e}") from e
