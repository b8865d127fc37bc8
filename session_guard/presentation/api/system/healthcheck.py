from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status

from ....core.logging import get_logger
from ....infrastructure.stores import MemoryStore, SQLAlchemyStore
from ...schemas.system import HealthCheckResponse, StoreStatus

router = APIRouter()
logger = get_logger(__name__)


def check_store(store: object) -> StoreStatus:
    """
    セッションストアの状態を確認

    RDBストアの場合は軽量なクエリで接続を確認する
    """
    if isinstance(store, SQLAlchemyStore):
        try:
            store.ping()
        except Exception as e:
            logger.error(f"Session store health check failed: {e}", exc_info=True)
            return StoreStatus(backend="database", status="unhealthy", error=str(e))
        return StoreStatus(backend="database", status="healthy")

    sessions = len(store) if isinstance(store, MemoryStore) else None
    return StoreStatus(backend="memory", status="healthy", sessions=sessions)


@router.get("/", response_model=HealthCheckResponse)
async def healthcheck(request: Request, response: Response) -> HealthCheckResponse:
    """
    ヘルスチェックエンドポイント

    - セッションストアの状態
    - アプリケーションuptime
    - 環境情報を返す

    ストアに接続できない場合は503 Service Unavailableを返す
    """
    start_time = getattr(request.app.state, "start_time", None)
    uptime_seconds = 0.0
    if start_time:
        uptime_seconds = (datetime.now(timezone.utc) - start_time).total_seconds()

    manager = request.app.state.session_manager
    store_status = check_store(manager.store)

    overall_status = "ok"
    if store_status.status == "unhealthy":
        overall_status = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=uptime_seconds,
        store=store_status,
        environment=request.app.state.settings.ENV_MODE,
    )
