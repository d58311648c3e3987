"""Participant records: admin CRUD plus the guardian self-service profile.

A participant is identified by the case-insensitive tuple
(first name, last name, guardian, contact email). The unique functional
index ``uq_participants_identity`` enforces it; ``_has_duplicate`` only
produces the friendly 409 before the insert is attempted.
"""

import logging
import math
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.core.errors import DuplicateParticipant, NotFound, Unexpected, ValidationError
from kindred.core.timestamps import current_millis, format_date_added
from kindred.models.participant import Participant
from kindred.schemas.participant import ParticipantRequest

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ('first_name', 'last_name', 'guardian', 'contact_email', 'contact_phone', 'special_needs')
MISSING_FIELDS_MESSAGE = 'All required participant fields must be provided.'
MIN_AGE = 0
MAX_AGE = 150


def coerce_age(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ''


def validate_participant(payload: ParticipantRequest) -> dict:
    fields = {name: _text(getattr(payload, name)) for name in REQUIRED_TEXT_FIELDS}
    fields['contact_email'] = fields['contact_email'].lower()
    fields['notes'] = _text(payload.notes)
    fields['age'] = coerce_age(payload.age)

    if fields['age'] is None or not all(fields[name] for name in REQUIRED_TEXT_FIELDS):
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    if not MIN_AGE <= fields['age'] <= MAX_AGE:
        raise ValidationError(f'Age must be between {MIN_AGE} and {MAX_AGE}.')
    return fields


def _has_duplicate(db: Session, fields: dict, exclude_id: int | None = None) -> bool:
    query = db.query(Participant.id).filter(
        func.lower(Participant.first_name) == func.lower(fields['first_name']),
        func.lower(Participant.last_name) == func.lower(fields['last_name']),
        func.lower(Participant.guardian) == func.lower(fields['guardian']),
        func.lower(Participant.contact_email) == func.lower(fields['contact_email']),
    )
    if exclude_id is not None:
        query = query.filter(Participant.id != exclude_id)
    return query.first() is not None


def list_participants(db: Session) -> list[Participant]:
    try:
        return db.query(Participant).order_by(
            Participant.created_at_ms.desc(),
            Participant.id.desc(),
        ).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to load participant records')
        raise Unexpected('Failed to load participant records.') from exc


def create_participant(db: Session, payload: ParticipantRequest) -> Participant:
    fields = validate_participant(payload)

    try:
        if _has_duplicate(db, fields):
            raise DuplicateParticipant()

        participant = Participant(
            **fields,
            interests='',
            capabilities='',
            health_concerns='',
            created_at_ms=current_millis(),
            date_added=format_date_added(),
        )
        db.add(participant)
        db.commit()
        db.refresh(participant)
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateParticipant() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to create participant record')
        raise Unexpected('Failed to create participant record.') from exc

    logger.info('Created participant record %s', participant.id)
    return participant


def update_participant(db: Session, participant_id: int, payload: ParticipantRequest) -> Participant:
    """Replace the admin-managed fields of a record.

    Guardian-maintained fields (interests, capabilities, health concerns)
    are left as they are.
    """
    fields = validate_participant(payload)

    try:
        participant = db.query(Participant).filter(Participant.id == participant_id).first()
        if participant is None:
            raise NotFound('Participant record not found.')

        if _has_duplicate(db, fields, exclude_id=participant_id):
            raise DuplicateParticipant()

        for name, value in fields.items():
            setattr(participant, name, value)
        db.commit()
        db.refresh(participant)
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateParticipant() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update participant record %s', participant_id)
        raise Unexpected('Failed to update participant record.') from exc

    logger.info('Updated participant record %s', participant_id)
    return participant


def remove_participant(db: Session, participant_id: int) -> None:
    try:
        deleted = db.query(Participant).filter(Participant.id == participant_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to remove participant record %s', participant_id)
        raise Unexpected('Failed to remove participant record.') from exc

    if not deleted:
        raise NotFound('Participant record not found.')
    logger.info('Removed participant record %s', participant_id)


def get_own_profile(db: Session, caller_email: str) -> Participant | None:
    """Return the record whose contact email is the caller's, if any."""
    email = (caller_email or '').strip().lower()
    if not email:
        return None

    try:
        return db.query(Participant).filter(
            Participant.contact_email == email,
        ).order_by(Participant.id.asc()).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to load participant profile for %s', email)
        raise Unexpected('Failed to load participant profile.') from exc


def update_own_profile(
    db: Session,
    caller_email: str,
    interests: str,
    capabilities: str,
    health_concerns: str,
) -> Participant:
    participant = get_own_profile(db, caller_email)
    if participant is None:
        raise NotFound('No participant record found for this account.')

    participant_id = participant.id
    try:
        participant.interests = _text(interests)
        participant.capabilities = _text(capabilities)
        participant.health_concerns = _text(health_concerns)
        db.commit()
        db.refresh(participant)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update participant profile %s', participant_id)
        raise Unexpected('Failed to update participant profile.') from exc

    logger.info('Guardian %s updated participant profile %s', caller_email, participant_id)
    return participant
