from pydantic import field_validator

from kindred.models.user import Role
from kindred.schemas.common import CamelModel, clean_text


class CreateUserRequest(CamelModel):
    name: str = ''
    email: str = ''
    password: str = ''
    role: str = ''

    @field_validator('name', 'role', mode='before')
    @classmethod
    def strip_text(cls, value):
        return clean_text(value)

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        value = clean_text(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator('password', mode='before')
    @classmethod
    def default_password(cls, value):
        return '' if value is None else value


class UpdateUserRequest(CamelModel):
    name: str = ''
    email: str = ''
    role: str = ''
    password: str = ''

    @field_validator('name', 'role', 'password', mode='before')
    @classmethod
    def strip_text(cls, value):
        return clean_text(value)

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        value = clean_text(value)
        return value.lower() if isinstance(value, str) else value


class UserSummaryResponse(CamelModel):
    name: str
    email: str
    role: Role
    date_added: str


class UserListResponse(CamelModel):
    users: list[UserSummaryResponse]
