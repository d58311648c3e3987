"""Account management: login, listing, creation, editing and removal.

Emails are compared after trimming and lowercasing. The unique index on
``users.email`` is the authoritative guard; the lookups below only turn the
common collision into a friendly message.
"""

import logging
import secrets

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.auth.passwords import dummy_verify, hash_password, verify_password
from kindred.auth.sessions import create_session, revoke_user_sessions
from kindred.core import config
from kindred.core.errors import (
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NotFound,
    SelfDeletion,
    Unexpected,
    ValidationError,
)
from kindred.core.timestamps import format_date_added
from kindred.models.user import EDITABLE_ROLES, Role, User

logger = logging.getLogger(__name__)

SEED_ADMIN_NAME = 'System Administrator'


def normalize_email(email: str | None) -> str:
    return (email or '').strip().lower()


def parse_role(role: str | Role | None) -> Role | None:
    if isinstance(role, Role):
        return role
    try:
        return Role((role or '').strip().upper())
    except ValueError:
        return None


def _find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Verify credentials and open a session. Returns the user and the cookie token."""
    normalized_email = normalize_email(email)
    if not normalized_email or not password:
        raise ValidationError('Email and password are required.')

    try:
        user = _find_by_email(db, normalized_email)
        if user is None:
            dummy_verify()
            logger.info('Rejected login for unknown account %s', normalized_email)
            raise InvalidCredentials()

        matched, new_hash = verify_password(password, user.password_hash)
        if not matched:
            logger.info('Rejected login for %s: wrong password', normalized_email)
            raise InvalidCredentials()
        if new_hash:
            user.password_hash = new_hash

        token = create_session(db, user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Login failed for %s', normalized_email)
        raise Unexpected('Login failed.') from exc

    logger.info('User %s signed in as %s', user.email, user.role.value)
    return user, token


def list_users(db: Session) -> list[User]:
    try:
        return db.query(User).order_by(User.id.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to load users')
        raise Unexpected('Failed to load users.') from exc


def create_user(db: Session, name: str, email: str, password: str, role: str | Role) -> User:
    name = (name or '').strip()
    email = normalize_email(email)
    if not name or not email or not password or not role:
        raise ValidationError('All user fields are required.')

    parsed_role = parse_role(role)
    if parsed_role is None:
        raise ValidationError('Role must be one of ADMIN, VOLUNTEER or PARTICIPANT.')

    try:
        if _find_by_email(db, email) is not None:
            raise DuplicateEmail(email)

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=parsed_role,
            date_added=format_date_added(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmail(email) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to create user %s', email)
        raise Unexpected('Failed to create user.') from exc

    logger.info('Created %s account %s', parsed_role.value, email)
    return user


def update_user(
    db: Session,
    original_email: str,
    name: str,
    email: str,
    role: str | Role,
    password: str | None = None,
) -> User:
    """Edit a volunteer or guardian account.

    Administrator rows can only be changed directly in the database.
    A blank ``password`` keeps the current one.
    """
    original_email = normalize_email(original_email)
    name = (name or '').strip()
    email = normalize_email(email)
    password = (password or '').strip()
    if not name or not email or not role:
        raise ValidationError('Name, email, and role are required.')

    try:
        user = _find_by_email(db, original_email)
        if user is None:
            raise NotFound('User not found.')

        if user.role is Role.ADMIN:
            raise Forbidden('Administrator accounts cannot be edited here.')

        parsed_role = parse_role(role)
        if parsed_role not in EDITABLE_ROLES:
            raise ValidationError('Only volunteer and participant/guardian roles can be edited here.')

        if email != user.email:
            duplicate = db.query(User.id).filter(User.email == email, User.id != user.id).first()
            if duplicate is not None:
                raise DuplicateEmail(email)

        user.name = name
        user.email = email
        user.role = parsed_role
        if password:
            user.password_hash = hash_password(password)

        # Open sessions carry the old name, email and role.
        revoke_user_sessions(db, user.id)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmail(email) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update user %s', original_email)
        raise Unexpected('Failed to update user.') from exc

    logger.info('Updated account %s (now %s, %s)', original_email, email, parsed_role.value)
    return user


def remove_user(db: Session, email: str, acting_email: str) -> None:
    email = normalize_email(email)
    if email == normalize_email(acting_email):
        raise SelfDeletion()

    try:
        user = _find_by_email(db, email)
        if user is None:
            raise NotFound('User not found.')

        revoke_user_sessions(db, user.id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to remove user %s', email)
        raise Unexpected('Failed to remove user.') from exc

    logger.info('Removed account %s', email)


def ensure_admin_account(db: Session) -> User | None:
    """Seed the first administrator when the users table is empty."""
    if db.query(User.id).first() is not None:
        return None

    email = normalize_email(config.ADMIN_EMAIL)
    password = config.ADMIN_PASSWORD or secrets.token_hex(8)

    admin = User(
        name=SEED_ADMIN_NAME,
        email=email,
        password_hash=hash_password(password),
        role=Role.ADMIN,
        date_added=format_date_added(),
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.warning('Seeded initial admin account %s', email)
    if not config.ADMIN_PASSWORD:
        logger.warning('Generated password for %s: %s (rotate it after first login)', email, password)
    return admin
