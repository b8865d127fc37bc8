"""
テスト用ヘルパー
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from starlette.requests import Request


class FakeClock:
    """
    手動で進める時計

    SessionManager/Storeのclock引数に渡す
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_request(
    headers: Optional[dict[str, str]] = None,
    cookies: Optional[dict[str, str]] = None,
    client: Optional[tuple[str, int]] = ("10.0.0.1", 50000),
    method: str = "GET",
    path: str = "/",
) -> Request:
    """
    ASGIスコープからRequestを作成

    Args:
        headers: リクエストヘッダー（User-Agentのデフォルトは"pytest-agent"）
        cookies: Cookie
        client: 接続元アドレス（Noneで接続元なし）
    """
    merged = {"user-agent": "pytest-agent"}
    merged.update({k.lower(): v for k, v in (headers or {}).items()})
    if cookies:
        merged["cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [
            (k.encode("latin-1"), v.encode("latin-1")) for k, v in merged.items()
        ],
        "client": client,
        "state": {},
    }
    return Request(scope)
