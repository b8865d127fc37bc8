"""
セッションのライフサイクルの結合テスト
"""

import pytest
from fastapi.testclient import TestClient

from session_guard.domain.exceptions import SessionNotFoundError
from session_guard.infrastructure.stores import MemoryStore
from tests.helpers import FakeClock

pytestmark = pytest.mark.integration


def csrf_headers(client: TestClient) -> dict[str, str]:
    return {"X-XSRF-TOKEN": client.cookies["XSRF-TOKEN"]}


class TestSessionCookies:
    """レスポンスに付与されるCookie・ヘッダーのテスト"""

    def test_first_request_issues_cookies(self, client: TestClient) -> None:
        """初回リクエストでセッションCookieとXSRF-TOKEN Cookieが発行されること"""
        response = client.get("/")

        assert response.status_code == 204
        cookies = response.headers.get_list("set-cookie")
        session_cookie = next(c for c in cookies if c.startswith("go_session="))
        csrf_cookie = next(c for c in cookies if c.startswith("XSRF-TOKEN="))

        assert "HttpOnly" in session_cookie
        assert "Path=/" in session_cookie
        assert "HttpOnly" not in csrf_cookie
        assert response.headers["vary"] == "Cookie"
        assert response.headers["cache-control"] == 'no-cache="Set-Cookie"'

    def test_session_is_persisted(
        self, client: TestClient, memory_store: MemoryStore
    ) -> None:
        """レスポンス後にセッションがストアに保存されること"""
        client.get("/")

        session = memory_store.get(client.cookies["go_session"])
        assert session.user_agent == "testclient"
        assert session.csrf_token == client.cookies["XSRF-TOKEN"]

    def test_session_id_is_stable(self, client: TestClient) -> None:
        """有効なセッションのIDはリクエスト間で変わらないこと"""
        client.get("/")
        first = client.cookies["go_session"]

        response = client.get("/")

        assert response.cookies["go_session"] == first


class TestSessionData:
    """セッションデータAPIのテスト"""

    def test_read_session(self, client: TestClient) -> None:
        response = client.get("/api/v1/session")

        assert response.status_code == 200
        body = response.json()
        assert body["authenticated"] is False
        assert body["user_id"] == ""
        assert body["ip_address"] == "testclient"
        assert body["user_agent"] == "testclient"
        assert body["data"] == {}

    def test_put_and_read_data(self, client: TestClient) -> None:
        """設定した値が次のリクエストでも読めること"""
        client.get("/")
        response = client.put(
            "/api/v1/session/data/cart",
            json={"value": [1, 2, 3]},
            headers=csrf_headers(client),
        )
        assert response.status_code == 200

        response = client.get("/api/v1/session")

        assert response.json()["data"] == {"cart": [1, 2, 3]}

    def test_delete_data(self, client: TestClient) -> None:
        client.get("/")
        client.put(
            "/api/v1/session/data/theme",
            json={"value": "dark"},
            headers=csrf_headers(client),
        )

        response = client.delete(
            "/api/v1/session/data/theme", headers=csrf_headers(client)
        )

        assert response.status_code == 200
        assert response.json()["data"] == {}


class TestAuthentication:
    """ログイン・ログアウトのテスト"""

    def test_login_regenerates_session_id(
        self, client: TestClient, memory_store: MemoryStore
    ) -> None:
        """ログインでセッションIDが再生成され、古いIDは削除されること"""
        client.get("/")
        old_id = client.cookies["go_session"]

        response = client.post(
            "/api/v1/auth/login",
            json={"user_id": "alice"},
            headers=csrf_headers(client),
        )

        assert response.status_code == 200
        assert response.json()["authenticated"] is True
        new_id = response.cookies["go_session"]
        assert new_id != old_id
        assert memory_store.get(new_id).user_id == "alice"
        with pytest.raises(SessionNotFoundError):
            memory_store.get(old_id)

    def test_explicit_regenerate(
        self, client: TestClient, memory_store: MemoryStore
    ) -> None:
        client.get("/")
        old_id = client.cookies["go_session"]

        response = client.post(
            "/api/v1/session/regenerate", headers=csrf_headers(client)
        )

        assert response.status_code == 200
        assert response.cookies["go_session"] != old_id
        assert len(memory_store) == 1

    def test_login_rejects_empty_user_id(self, client: TestClient) -> None:
        client.get("/")

        response = client.post(
            "/api/v1/auth/login", json={"user_id": ""}, headers=csrf_headers(client)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_logout_expires_cookie(
        self, client: TestClient, memory_store: MemoryStore
    ) -> None:
        """ログアウトでセッションが削除され、Cookieが期限切れになること"""
        client.get("/")

        response = client.post("/api/v1/auth/logout", headers=csrf_headers(client))

        assert response.status_code == 204
        cookies = response.headers.get_list("set-cookie")
        assert len(cookies) == 1
        assert cookies[0].startswith('go_session="";')
        assert "01 Jan 1970 00:00:00 GMT" in cookies[0]
        assert "HttpOnly" in cookies[0]
        assert len(memory_store) == 0


class TestSessionValidation:
    """無効なセッションが新しいセッションに置き換わることのテスト"""

    def test_user_agent_change(
        self, client: TestClient, memory_store: MemoryStore
    ) -> None:
        """User-Agentが変わった場合は新しいセッションになること"""
        client.get("/")
        old_id = client.cookies["go_session"]

        response = client.get("/", headers={"User-Agent": "other-agent"})

        new_id = response.cookies["go_session"]
        assert new_id != old_id
        with pytest.raises(SessionNotFoundError):
            memory_store.get(old_id)

    def test_idle_timeout(self, client: TestClient, clock: FakeClock) -> None:
        """アイドルタイムアウトを過ぎると新しいセッションになること"""
        client.get("/")
        old_id = client.cookies["go_session"]

        clock.advance(hours=2)
        response = client.get("/")

        assert response.cookies["go_session"] != old_id

    def test_activity_extends_idle_window(
        self, client: TestClient, clock: FakeClock
    ) -> None:
        """アクセスがあればアイドルタイムアウトが延長されること"""
        client.get("/")
        old_id = client.cookies["go_session"]

        clock.advance(minutes=45)
        client.get("/")
        clock.advance(minutes=45)
        response = client.get("/")

        assert response.cookies["go_session"] == old_id

    def test_unknown_cookie(self, client: TestClient) -> None:
        """ストアに無いセッションIDは新しいセッションに置き換わること"""
        client.cookies.set("go_session", "unknown-session-id")

        response = client.get("/")

        assert response.cookies["go_session"] != "unknown-session-id"
