from fastapi import Request

from ...application.session_manager import SessionManager
from ...domain.exceptions import SessionRequiredError
from ...domain.session import Session
from ...utils.session_helper import get_session_from_request


def get_session_manager(request: Request) -> SessionManager:
    """
    アプリケーションのセッションマネージャーを取得するdependency
    """
    return request.app.state.session_manager


def get_session(request: Request) -> Session:
    """
    リクエストに紐付いたセッションを取得するdependency

    SessionMiddlewareが登録されていない場合はSessionRequiredError（401）
    """
    session = get_session_from_request(request)
    if session is None:
        raise SessionRequiredError()
    return session
