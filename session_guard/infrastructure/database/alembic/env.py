"""
Alembic環境設定

プログラム的実行（run_migrations）とCLI実行の両方をサポートします。
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from session_guard.core.config import get_settings
from session_guard.infrastructure.database.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """
    データベースURLを取得

    プログラム的実行時は set_main_option で設定された値を使用、
    CLI実行時は環境変数から構築
    """
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    return get_settings().database_uri


def run_migrations_offline() -> None:
    """SQLスクリプトを生成する 'offline' モード"""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """データベースに接続して実行する 'online' モード"""
    # テストなどで外部から接続が渡される場合はそれを使う
    connectable = config.attributes.get("connection", None)

    if connectable is None:
        configuration = config.get_section(config.config_ini_section) or {}
        configuration["sqlalchemy.url"] = get_url()
        connectable = engine_from_config(
            configuration,
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
        )
        with connectable.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata)
            with context.begin_transaction():
                context.run_migrations()
    else:
        context.configure(connection=connectable, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
