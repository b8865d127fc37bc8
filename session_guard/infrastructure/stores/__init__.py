"""Session store implementations"""

from typing import Optional

from ...core.config import Settings
from ...domain.session import Clock
from ...domain.store import Store
from .database import SQLAlchemyStore
from .memory import MemoryStore

__all__ = ["MemoryStore", "SQLAlchemyStore", "create_store"]


def create_store(settings: Settings, clock: Optional[Clock] = None) -> Store:
    """
    設定に応じてセッションストアを作成

    SESSION_STORE=database の場合はマイグレーションを実行してからRDBストアを返す

    Args:
        settings: アプリケーション設定
        clock: 現在時刻を返す関数

    Returns:
        Store: セッションストア
    """
    if not settings.has_database:
        return MemoryStore(clock=clock)

    from ..database import create_session_factory
    from ..database.migration import run_migrations
    from ..security.encryption import SessionEncryption

    run_migrations(settings, logger_key="uvicorn")
    encryption_key = (
        settings.SESSION_ENCRYPTION_KEY
        if settings.session_config.encrypt_session
        else ""
    )
    return SQLAlchemyStore(
        create_session_factory(settings),
        encryption=SessionEncryption(encryption_key=encryption_key),
        clock=clock,
    )
