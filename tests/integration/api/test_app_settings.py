"""
create_appに渡した設定の結合テスト
"""

import pytest
from fastapi.testclient import TestClient

from session_guard.core.app_factory import create_app
from session_guard.core.config import Settings

pytestmark = pytest.mark.integration


@pytest.fixture
def custom_settings() -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        ENV_MODE="test",
        SESSION_STORE="memory",
        SESSION_COOKIE_NAME="custom_sid",
        SESSION_ENABLE_CSRF=False,
        SESSION_CLEANUP_INTERVAL=0,
    )


class TestCreateAppSettings:
    """マネージャーを渡さない場合に、渡した設定からマネージャーが作られること"""

    def test_cookie_name(self, custom_settings: Settings) -> None:
        with TestClient(create_app(settings=custom_settings)) as client:
            response = client.get("/")

        assert "custom_sid" in response.cookies
        assert "go_session" not in response.cookies

    def test_manager_uses_settings(self, custom_settings: Settings) -> None:
        app = create_app(settings=custom_settings)

        with TestClient(app) as client:
            manager = app.state.session_manager
            assert manager.config.cookie_name == "custom_sid"
            assert manager.config.enable_csrf is False

            client.get("/")
            response = client.post("/api/v1/auth/login", json={"user_id": "alice"})

        assert response.status_code == 200
        assert manager.closed is True

    def test_healthcheck_environment(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None, ENV_MODE="development", SESSION_CLEANUP_INTERVAL=0
        )

        with TestClient(create_app(settings=settings)) as client:
            response = client.get("/api/system/healthcheck/")

        assert response.json()["environment"] == "development"
