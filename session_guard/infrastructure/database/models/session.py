from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class SessionRecord(Base):
    """
    セッションモデル

    Attributes:
        session_id: セッションID（主キー）
        user_id: 紐付けられたユーザーID（匿名は空文字列）
        payload: ペイロード（暗号化されたJSON、暗号化無効時は平文JSON）
        ip_address: 作成時のクライアントIP
        user_agent: 作成時のUser-Agent
        fingerprint: フィンガープリント（SHA256ハッシュまたは空文字列）
        last_activity: 最終アクティビティ時刻
        created_at: 作成時刻
        expires_at: 絶対有効期限
    """

    __tablename__ = "sessions"

    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    user_agent: Mapped[str] = mapped_column(Text, nullable=False, default="")
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<SessionRecord(session_id={self.session_id[:8]}, expires_at={self.expires_at})>"
