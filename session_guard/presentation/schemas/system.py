"""システム関連のスキーマ定義"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class StoreStatus(BaseModel):
    """
    セッションストアの状態

    Attributes:
        backend: ストアの種類（memory/database）
        status: ストアの状態（healthy/unhealthy）
        sessions: 保持しているセッション数（memoryのみ）
        error: エラーメッセージ（エラー時のみ）
    """

    backend: Literal["memory", "database"]
    status: Literal["healthy", "unhealthy"]
    sessions: Optional[int] = None
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """
    ヘルスチェックレスポンス

    Attributes:
        status: 全体的なヘルス状態（ok/unhealthy）
        timestamp: レスポンス生成時刻
        uptime_seconds: アプリケーション起動からの経過秒数
        store: セッションストアの状態
        environment: 実行環境（development/production/test）
    """

    status: Literal["ok", "unhealthy"]
    timestamp: datetime
    uptime_seconds: float
    store: StoreStatus
    environment: str
