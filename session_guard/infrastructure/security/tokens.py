"""
トークン生成ヘルパー

セッションID・CSRFトークン・フィンガープリントの生成と定数時間比較
"""

import hashlib
import secrets
from typing import Iterable, Optional

from ...domain.exceptions import TokenGenerationError

CSRF_TOKEN_BYTES = 32


def random_string(length: int) -> str:
    """
    暗号論的に安全なランダム文字列を生成

    lengthバイトの乱数をURLセーフなBase64（パディングなし）で表現する

    Args:
        length: 乱数のバイト数

    Returns:
        URLセーフなトークン文字列

    Raises:
        TokenGenerationError: 乱数源が利用できない場合
    """
    if length < 1:
        raise ValueError("length must be positive")
    try:
        return secrets.token_urlsafe(length)
    except (NotImplementedError, OSError) as e:
        raise TokenGenerationError(details={"reason": str(e)}) from e


def generate_session_id(length: int = 32) -> str:
    """セッションIDを生成"""
    return random_string(length)


def generate_csrf_token() -> str:
    """CSRFトークンを生成（32バイト固定）"""
    return random_string(CSRF_TOKEN_BYTES)


def constant_time_equals(a: Optional[str], b: Optional[str]) -> bool:
    """
    文字列を定数時間で比較

    Noneは空文字列として扱う
    """
    return secrets.compare_digest((a or "").encode("utf-8"), (b or "").encode("utf-8"))


def generate_fingerprint(values: Iterable[Optional[str]]) -> str:
    """
    フィンガープリントを生成

    与えられた値をつなげたSHA256ハッシュを返す。値が一つも無い場合は空文字列

    Args:
        values: ハッシュ対象の値（ヘッダー値など）

    Returns:
        SHA256ハッシュ（64文字のHEX文字列）または空文字列
    """
    parts = [value or "" for value in values]
    if not parts:
        return ""
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
