"""
セッション管理ヘルパー

Starletteのリクエストからクライアント情報を取り出し、
リクエストスコープにセッションを紐付けるための関数
"""

import ipaddress
from typing import Iterable, Optional

from starlette.requests import HTTPConnection

from ..domain.session import Session

# 優先順（最初に見つかったものを使う）
CLIENT_IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP")


class _SessionKey:
    """scope["state"]でセッションを保持するための非公開キー"""


def get_peer_address(request: HTTPConnection) -> str:
    """トランスポート層の接続元アドレス"""
    return request.client.host if request.client else ""


def is_trusted_proxy(peer: str, trusted_proxies: Iterable[str]) -> bool:
    """
    接続元が信頼済みプロキシかどうか

    trusted_proxiesが空の場合は常にTrue（転送ヘッダーを無条件に信頼）

    Args:
        peer: 接続元アドレス
        trusted_proxies: 信頼するネットワーク（CIDR）
    """
    networks = [ipaddress.ip_network(n, strict=False) for n in trusted_proxies]
    if not networks:
        return True
    try:
        address = ipaddress.ip_address(peer)
    except ValueError:
        return False
    return any(address in network for network in networks)


def get_client_ip(
    request: HTTPConnection, trusted_proxies: Iterable[str] = ()
) -> str:
    """
    クライアントIPアドレスを取得

    CF-Connecting-IP → X-Forwarded-Forの先頭 → X-Real-IP → 接続元アドレスの順。
    転送ヘッダーは接続元が信頼済みプロキシの場合のみ使う

    Args:
        request: リクエスト
        trusted_proxies: 信頼するプロキシのCIDR（空なら全て信頼）

    Returns:
        クライアントIPアドレス（取得できない場合は空文字列）
    """
    peer = get_peer_address(request)
    if is_trusted_proxy(peer, trusted_proxies):
        for header in CLIENT_IP_HEADERS:
            value = request.headers.get(header)
            if value and value.strip():
                # X-Forwarded-Forには複数のIPが含まれる可能性があるため、最初のものを使用
                return value.split(",")[0].strip()
    return peer


def get_user_agent(request: HTTPConnection) -> str:
    """User-Agentヘッダーを取得（無い場合は空文字列）"""
    return request.headers.get("User-Agent", "")


def attach_session(request: HTTPConnection, session: Session) -> None:
    """リクエストスコープにセッションを紐付ける"""
    request.scope.setdefault("state", {})[_SessionKey] = session


def get_session_from_request(request: HTTPConnection) -> Optional[Session]:
    """
    リクエストスコープに紐付いたセッションを取得

    Returns:
        セッション、紐付いていない場合はNone
    """
    state = request.scope.get("state") or {}
    session = state.get(_SessionKey)
    return session if isinstance(session, Session) else None
