"""
pytest設定と共通フィクスチャ

セッションストアはインメモリ、RDBストアはSQLite（インメモリ）で検証する
"""

import os
from datetime import timedelta
from typing import Generator

import pytest
from cryptography.fernet import Fernet
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# 設定はモジュールインポート時に読み込まれるため、インポート前に環境変数を設定する
os.environ["ENV_MODE"] = "test"
os.environ["SESSION_STORE"] = "memory"
os.environ["SESSION_ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ.pop("SENTRY_DSN", None)

from session_guard.application import SessionManager  # noqa: E402
from session_guard.core.app_factory import create_app  # noqa: E402
from session_guard.core.config import SessionConfig, Settings  # noqa: E402
from session_guard.infrastructure.database.models import Base  # noqa: E402
from session_guard.infrastructure.security.encryption import (  # noqa: E402
    SessionEncryption,
)
from session_guard.infrastructure.stores import (  # noqa: E402
    MemoryStore,
    SQLAlchemyStore,
)
from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """進められる時計（現在時刻から開始）"""
    return FakeClock()


@pytest.fixture
def session_config() -> SessionConfig:
    """
    テスト用のセッション設定

    バックグラウンドの削除ジョブは起動しない
    """
    return SessionConfig(cleanup_interval=timedelta(0))


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture
def manager(
    memory_store: MemoryStore, session_config: SessionConfig, clock: FakeClock
) -> Generator[SessionManager, None, None]:
    """インメモリストアのセッションマネージャー"""
    session_manager = SessionManager(memory_store, session_config, clock=clock)
    yield session_manager
    session_manager.close()


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """
    テスト用SQLAlchemy Engine（SQLiteインメモリ）

    StaticPoolで全セッションが同じコネクションを共有する
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: Engine) -> sessionmaker[DBSession]:
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def encryption() -> SessionEncryption:
    return SessionEncryption(encryption_key=Fernet.generate_key().decode())


@pytest.fixture
def sql_store(
    db_session_factory: sessionmaker[DBSession],
    encryption: SessionEncryption,
    clock: FakeClock,
) -> SQLAlchemyStore:
    """暗号化を有効にしたRDBストア"""
    return SQLAlchemyStore(db_session_factory, encryption=encryption, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ENV_MODE="test")  # type: ignore[call-arg]


@pytest.fixture
def app(settings: Settings, manager: SessionManager) -> FastAPI:
    """テスト用マネージャーを組み込んだアプリケーション"""
    return create_app(settings=settings, manager=manager)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """
    テスト用FastAPIクライアント

    Yields:
        FastAPI TestClient
    """
    with TestClient(app) as test_client:
        yield test_client
