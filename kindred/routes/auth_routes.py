from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from kindred.auth import sessions
from kindred.auth.dependencies import session_cookie
from kindred.core import config
from kindred.database import get_db
from kindred.schemas.auth import LoginRequest, LoginResponse, SessionResponse, SessionUser
from kindred.schemas.common import SuccessResponse
from kindred.services import user_directory

router = APIRouter(tags=['auth'])


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_TTL_MINUTES * 60,
        httponly=True,
        samesite='lax',
        secure=config.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        httponly=True,
        samesite='lax',
        secure=config.SESSION_COOKIE_SECURE,
    )


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user, token = user_directory.login(db, data.email, data.password)
    set_session_cookie(response, token)
    return LoginResponse(
        user=SessionUser(id=user.id, name=user.name, email=user.email, role=user.role.value),
    )


@router.post('/logout', response_model=SuccessResponse)
def logout(
    response: Response,
    token: str | None = Depends(session_cookie),
    db: Session = Depends(get_db),
):
    sessions.destroy_session(db, token)
    clear_session_cookie(response)
    return SuccessResponse()


@router.get('/session', response_model=SessionResponse)
def current_session(
    token: str | None = Depends(session_cookie),
    db: Session = Depends(get_db),
):
    session = sessions.resolve_session(db, token)
    if session is None:
        return SessionResponse(session=None)
    return SessionResponse(session=SessionUser(**session.as_dict()))
