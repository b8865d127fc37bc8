from fastapi import APIRouter, Depends, Request, Response, status

from ....application.session_manager import SessionManager
from ....core.logging import get_logger
from ....domain.session import Session
from ...schemas.session import LoginRequest, SessionSummary
from ..deps import get_session, get_session_manager

router = APIRouter()
logger = get_logger(__name__)


@router.post("/login", response_model=SessionSummary)
def login(
    request: Request,
    body: LoginRequest,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """
    セッションにユーザーを紐付ける

    認証自体は行わない。SESSION_REGENERATE_ON_AUTHが有効な場合はセッションIDも再生成する
    """
    manager.bind_user(session, body.user_id, request)
    logger.info(f"User bound to session: {body.user_id}")
    return SessionSummary.from_session(session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    """
    セッションを破棄し、セッションCookieを期限切れにする
    """
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    manager.destroy_session(request, response)
    return response
