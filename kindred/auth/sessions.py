"""Server-side session store.

The cookie holds a signed token that wraps a random session id. Only a
SHA-256 digest of the id is persisted, so a leaked sessions table cannot be
replayed as cookies.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.orm import Session

from kindred.core import config
from kindred.models.session import UserSession
from kindred.models.user import Role, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def as_dict(self) -> dict:
        return {'id': self.user_id, 'name': self.name, 'email': self.email, 'role': self.role.value}


def _utcnow() -> datetime:
    # Naive UTC so comparisons work the same on SQLite and Postgres.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _hash_session_id(session_id: str) -> str:
    return hashlib.sha256(session_id.encode('utf-8')).hexdigest()


def _sign_token(session_id: str, issued_at: datetime, expires_at: datetime) -> str:
    # The token and the row expire together.
    payload = {
        'sid': session_id,
        'iat': issued_at.replace(tzinfo=timezone.utc),
        'exp': expires_at.replace(tzinfo=timezone.utc),
    }
    return jwt.encode(payload, config.SESSION_SECRET_KEY, algorithm=config.SESSION_ALGORITHM)


def _decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.SESSION_SECRET_KEY,
        algorithms=[config.SESSION_ALGORITHM],
        options={'require': ['sid', 'exp']},
    )


def _session_id_from_token(token: str | None) -> str | None:
    if not token:
        return None
    try:
        payload = _decode_token(token)
    except jwt.PyJWTError:
        return None
    session_id = payload.get('sid')
    return session_id if isinstance(session_id, str) and session_id else None


def purge_expired_sessions(db: Session) -> int:
    return db.query(UserSession).filter(UserSession.expires_at <= _utcnow()).delete(synchronize_session=False)


def create_session(db: Session, user: User) -> str:
    """Persist a new session for ``user`` and return the cookie token."""
    session_id = secrets.token_urlsafe(32)
    now = _utcnow()
    expires_at = now + timedelta(minutes=config.SESSION_TTL_MINUTES)

    purge_expired_sessions(db)
    db.add(
        UserSession(
            token_hash=_hash_session_id(session_id),
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=now,
            expires_at=expires_at,
        )
    )
    db.commit()

    return _sign_token(session_id, now, expires_at)


def resolve_session(db: Session, token: str | None) -> SessionInfo | None:
    """Return the session bound to ``token``, or None when it is unusable."""
    session_id = _session_id_from_token(token)
    if session_id is None:
        return None

    row = db.query(UserSession).filter(UserSession.token_hash == _hash_session_id(session_id)).first()
    if row is None:
        return None
    if row.expires_at <= _utcnow():
        return None

    return SessionInfo(user_id=row.user_id, name=row.name, email=row.email, role=row.role)


def destroy_session(db: Session, token: str | None) -> None:
    session_id = _session_id_from_token(token)
    if session_id is None:
        return

    db.query(UserSession).filter(UserSession.token_hash == _hash_session_id(session_id)).delete(
        synchronize_session=False
    )
    db.commit()


def revoke_user_sessions(db: Session, user_id: int) -> int:
    """Drop every session of a user. The caller commits."""
    revoked = db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
    if revoked:
        logger.info('Revoked %s session(s) for user %s', revoked, user_id)
    return revoked
