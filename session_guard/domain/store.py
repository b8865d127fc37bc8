"""
セッションストアのインターフェース

セッションIDからSessionへのキーバリューインデックス。
ストアが唯一の正とし、マネージャーはリクエストをまたいでSessionをキャッシュしない。

全ての操作はキーワード引数timeout（秒）を受け取る。
ブロックする実装はこの上限を超えたらStoreTimeoutErrorを送出すること。
"""

from abc import ABC, abstractmethod
from typing import Optional

from .session import Session


class Store(ABC):
    """セッションストアの基底クラス"""

    @abstractmethod
    def get(self, session_id: str, *, timeout: Optional[float] = None) -> Session:
        """
        セッションを取得

        有効期限（expires_at）を過ぎている場合はエントリを削除した上で
        SessionExpiredErrorを送出する（読み込み時の遅延期限チェック）

        Raises:
            SessionNotFoundError: 存在しない場合
            SessionExpiredError: 有効期限切れの場合
        """

    @abstractmethod
    def set(self, session: Session, *, timeout: Optional[float] = None) -> None:
        """セッションをIDでupsert"""

    @abstractmethod
    def delete(self, session_id: str, *, timeout: Optional[float] = None) -> None:
        """セッションを削除（存在しなくてもエラーにしない）"""

    @abstractmethod
    def delete_expired(self, *, timeout: Optional[float] = None) -> int:
        """
        有効期限切れのセッションを一括削除

        リクエスト処理からは呼ばず、定期クリーンアップからのみ呼ぶ

        Returns:
            削除したセッション数
        """

    @abstractmethod
    def close(self) -> None:
        """リソースを解放する。クローズ後の操作は未定義"""
