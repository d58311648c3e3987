from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kindred.auth.dependencies import require_admin
from kindred.auth.sessions import SessionInfo
from kindred.database import get_db
from kindred.schemas.common import SuccessResponse
from kindred.schemas.user import CreateUserRequest, UpdateUserRequest, UserListResponse, UserSummaryResponse
from kindred.services import user_directory

router = APIRouter(tags=['users'], dependencies=[Depends(require_admin)])


@router.get('', response_model=UserListResponse)
def list_users(db: Session = Depends(get_db)):
    users = user_directory.list_users(db)
    return UserListResponse(users=[UserSummaryResponse.model_validate(user) for user in users])


@router.post('', response_model=SuccessResponse)
def create_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    user_directory.create_user(db, name=data.name, email=data.email, password=data.password, role=data.role)
    return SuccessResponse()


@router.put('/{email}', response_model=SuccessResponse)
def update_user(email: str, data: UpdateUserRequest, db: Session = Depends(get_db)):
    user_directory.update_user(
        db,
        original_email=email,
        name=data.name,
        email=data.email,
        role=data.role,
        password=data.password,
    )
    return SuccessResponse()


@router.delete('/{email}', response_model=SuccessResponse)
def remove_user(
    email: str,
    session: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user_directory.remove_user(db, email=email, acting_email=session.email)
    return SuccessResponse()
