from fastapi import APIRouter, Depends, Request

from ....application.session_manager import SessionManager
from ....domain.exceptions import ValidationError
from ....domain.session import CSRF_TOKEN_KEY, Session
from ...schemas.session import SessionDataUpdate, SessionSummary
from ..deps import get_session, get_session_manager

router = APIRouter()


@router.get("", response_model=SessionSummary)
async def read_session(session: Session = Depends(get_session)) -> SessionSummary:
    """
    現在のセッションの概要
    """
    return SessionSummary.from_session(session)


@router.put("/data/{key}", response_model=SessionSummary)
async def put_session_data(
    key: str,
    body: SessionDataUpdate,
    session: Session = Depends(get_session),
) -> SessionSummary:
    """
    セッションのペイロードに値を設定

    保存はSessionMiddlewareがレスポンス後に行う
    """
    if key == CSRF_TOKEN_KEY:
        raise ValidationError(message=f"'{CSRF_TOKEN_KEY}' cannot be modified")
    session.put(key, body.value)
    return SessionSummary.from_session(session)


@router.delete("/data/{key}", response_model=SessionSummary)
async def delete_session_data(
    key: str,
    session: Session = Depends(get_session),
) -> SessionSummary:
    """
    セッションのペイロードから値を削除
    """
    if key == CSRF_TOKEN_KEY:
        raise ValidationError(message=f"'{CSRF_TOKEN_KEY}' cannot be modified")
    session.delete(key)
    return SessionSummary.from_session(session)


@router.post("/regenerate", response_model=SessionSummary)
def regenerate_session(
    request: Request,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """
    セッションIDを再生成

    新しいIDはレスポンスのSet-Cookieで渡される
    """
    manager.regenerate_session(session, request)
    return SessionSummary.from_session(session)
