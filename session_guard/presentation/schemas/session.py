"""セッション関連のスキーマ定義"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ...domain.session import CSRF_TOKEN_KEY, Session


class SessionSummary(BaseModel):
    """
    セッションの概要

    セッションIDとCSRFトークンはCookieで渡しているので含めない

    Attributes:
        authenticated: ユーザーが紐付いているか
        user_id: ユーザーID（匿名の場合は空文字列）
        data: ペイロード（csrf_tokenを除く）
    """

    authenticated: bool
    user_id: str
    ip_address: str
    user_agent: str
    created_at: datetime
    expires_at: datetime
    last_activity: datetime
    data: dict[str, Any]

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            authenticated=bool(session.user_id),
            user_id=session.user_id,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            created_at=session.created_at,
            expires_at=session.expires_at,
            last_activity=session.last_activity,
            data={k: v for k, v in session.items() if k != CSRF_TOKEN_KEY},
        )


class SessionDataUpdate(BaseModel):
    """ペイロードに設定する値（JSONシリアライズ可能な値）"""

    value: Any


class LoginRequest(BaseModel):
    """ログインリクエスト（認証自体は行わず、ユーザーIDを紐付けるだけ）"""

    user_id: str = Field(min_length=1, max_length=255)
