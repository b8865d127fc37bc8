from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ...core.config import Settings
from ...core.logging import get_logger

logger = get_logger(__name__)


def create_db_engine(database_uri: str) -> Engine:
    """
    セッションストア用のEngineを作成

    Args:
        database_uri: 接続URL

    Returns:
        SQLAlchemy Engine
    """
    return create_engine(
        database_uri,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
    )


def create_session_factory(settings: Settings) -> sessionmaker[Session]:
    """
    設定のPOSTGRES_*からDBセッションファクトリを作成

    Raises:
        RuntimeError: SESSION_STORE=database でない、または接続情報が不足している場合
    """
    if not settings.has_database:
        raise RuntimeError(
            "Database not configured. Set SESSION_STORE=database and POSTGRES_* variables."
        )

    engine = create_db_engine(settings.database_uri)
    logger.info(
        f"Database connection configured: {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}"
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
