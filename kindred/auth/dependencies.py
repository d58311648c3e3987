from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from kindred.auth.sessions import SessionInfo, resolve_session
from kindred.core import config
from kindred.core.errors import Forbidden, Unauthenticated
from kindred.database import get_db

session_cookie = APIKeyCookie(name=config.SESSION_COOKIE_NAME, auto_error=False)


def get_current_session(
    token: str | None = Depends(session_cookie),
    db: Session = Depends(get_db),
) -> SessionInfo:
    session = resolve_session(db, token)
    if session is None:
        raise Unauthenticated()
    return session


def require_admin(session: SessionInfo = Depends(get_current_session)) -> SessionInfo:
    if not session.is_admin:
        raise Forbidden()
    return session
