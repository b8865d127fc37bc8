"""
セッションペイロードの暗号化

永続ストアに保存するペイロードをFernet（対称暗号）で暗号化する
"""

import json
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken

from ...core.config import get_settings
from ...core.logging import get_logger

logger = get_logger(__name__)


class SessionEncryption:
    """
    セッションペイロードの暗号化/復号化

    キーが無い場合は平文のJSONとして扱う（非推奨）
    """

    def __init__(self, encryption_key: Optional[str] = None):
        """
        Args:
            encryption_key: 暗号化キー（Noneの場合は設定から取得）
        """
        # 依存性注入: テスト時は明示的にキーを渡せる
        if encryption_key is None:
            encryption_key = get_settings().SESSION_ENCRYPTION_KEY

        self.cipher: Optional[Fernet] = None
        if encryption_key:
            # 不正なキーは設定ミスなので起動時に失敗させる
            self.cipher = Fernet(encryption_key.encode())
            logger.info("Session encryption enabled")
        else:
            logger.warning(
                "Session encryption disabled (SESSION_ENCRYPTION_KEY not set)"
            )

    @property
    def enabled(self) -> bool:
        return self.cipher is not None

    def encrypt(self, data: dict[str, Any]) -> str:
        """
        ペイロードをシリアライズして暗号化

        Args:
            data: ペイロード（JSONシリアライズ可能であること）

        Returns:
            暗号化された文字列（暗号化無効時はJSON文字列）

        Raises:
            ValueError: JSONシリアライズできない場合
        """
        try:
            json_str = json.dumps(data, ensure_ascii=False)
        except TypeError as e:
            raise ValueError(f"Session payload is not JSON serializable: {e}") from e

        if self.cipher is None:
            return json_str
        return self.cipher.encrypt(json_str.encode("utf-8")).decode("utf-8")

    def decrypt(self, encrypted_data: str) -> dict[str, Any]:
        """
        暗号化されたペイロードを復号化

        Args:
            encrypted_data: encrypt()の戻り値

        Returns:
            ペイロード

        Raises:
            ValueError: 改ざん・破損・キー不一致で復号化できない場合
        """
        if self.cipher is None:
            json_str = encrypted_data
        else:
            try:
                json_str = self.cipher.decrypt(encrypted_data.encode("utf-8")).decode(
                    "utf-8"
                )
            except InvalidToken:
                raise ValueError("Invalid or corrupted session data")

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid session data: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Invalid session data: payload must be an object")
        return data

