"""FastAPIアプリケーションファクトリー"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware

from ..application.session_manager import SessionManager
from ..presentation import api_router
from ..presentation.exception_handlers import register_exception_handlers
from ..presentation.middleware import CSRFMiddleware, SessionMiddleware
from .config import Settings, get_settings
from .lifespan import lifespan
from .logging import get_logger
from .monitoring import init_monitoring

logger = get_logger(__name__)

HEALTHCHECK_PATH = "/api/system/healthcheck"


class HealthCheckFilter(logging.Filter):
    """ヘルスチェックログを除外するフィルター"""

    def filter(self, record: logging.LogRecord) -> bool:
        return HEALTHCHECK_PATH not in record.getMessage()


def create_app(
    settings: Optional[Settings] = None,
    manager: Optional[SessionManager] = None,
) -> FastAPI:
    """
    FastAPIアプリケーションを生成

    ミドルウェアは外側から CORS → セッション（未処理例外の500変換を含む） → CSRF の順

    Args:
        settings: アプリケーション設定（Noneの場合は環境変数から）
        manager: セッションマネージャー（Noneの場合はlifespanで設定から作成）

    Returns:
        FastAPIアプリケーションインスタンス
    """
    settings = settings or get_settings()

    app_params: dict[str, Any] = {
        "title": "Session Guard",
        "description": "サーバーサイドセッション管理",
        "version": "0.1.0",
        "lifespan": lifespan,
    }

    # 本番環境ではドキュメントを無効化
    if settings.is_production:
        app_params["docs_url"] = None
        app_params["redoc_url"] = None
        app_params["openapi_url"] = None

    app = FastAPI(**app_params)

    app.state.settings = settings
    if manager is not None:
        app.state.session_manager = manager

    init_monitoring(settings)

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())

    register_exception_handlers(app)

    # 後に登録したものほど外側
    app.add_middleware(CSRFMiddleware, manager=manager)
    app.add_middleware(
        SessionMiddleware, manager=manager, exclude_paths=(HEALTHCHECK_PATH,)
    )

    if len(settings.BACKEND_CORS_ORIGINS) > 0:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix="/api")

    @app.get("/", status_code=status.HTTP_204_NO_CONTENT)
    async def root() -> Response:
        """ルート（セッションの発行のみ）"""
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
