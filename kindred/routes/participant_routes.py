from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kindred.auth.dependencies import require_admin
from kindred.database import get_db
from kindred.schemas.common import SuccessResponse
from kindred.schemas.participant import ParticipantListResponse, ParticipantRequest, ParticipantResponse
from kindred.services import participant_registry

router = APIRouter(tags=['participants'], dependencies=[Depends(require_admin)])


@router.get('', response_model=ParticipantListResponse)
def list_participants(db: Session = Depends(get_db)):
    participants = participant_registry.list_participants(db)
    return ParticipantListResponse(
        participants=[ParticipantResponse.model_validate(participant) for participant in participants],
    )


@router.post('', response_model=SuccessResponse)
def create_participant(data: ParticipantRequest, db: Session = Depends(get_db)):
    participant_registry.create_participant(db, data)
    return SuccessResponse()


@router.put('/{participant_id}', response_model=SuccessResponse)
def update_participant(participant_id: int, data: ParticipantRequest, db: Session = Depends(get_db)):
    participant_registry.update_participant(db, participant_id, data)
    return SuccessResponse()


@router.delete('/{participant_id}', response_model=SuccessResponse)
def remove_participant(participant_id: int, db: Session = Depends(get_db)):
    participant_registry.remove_participant(db, participant_id)
    return SuccessResponse()
