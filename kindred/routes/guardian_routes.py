from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kindred.auth.dependencies import get_current_session
from kindred.auth.sessions import SessionInfo
from kindred.database import get_db
from kindred.schemas.common import SuccessResponse
from kindred.schemas.participant import (
    GuardianParticipantResponse,
    GuardianProfileRequest,
    GuardianProfileResponse,
)
from kindred.services import participant_registry

router = APIRouter(tags=['guardian'])


@router.get('/participant', response_model=GuardianProfileResponse)
def get_own_participant(
    session: SessionInfo = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    participant = participant_registry.get_own_profile(db, session.email)
    if participant is None:
        return GuardianProfileResponse(participant=None)
    return GuardianProfileResponse(participant=GuardianParticipantResponse.model_validate(participant))


@router.put('/participant', response_model=SuccessResponse)
def update_own_participant(
    data: GuardianProfileRequest,
    session: SessionInfo = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    participant_registry.update_own_profile(
        db,
        session.email,
        interests=data.interests,
        capabilities=data.capabilities,
        health_concerns=data.health_concerns,
    )
    return SuccessResponse()
