from pydantic import BaseModel, field_validator

from kindred.schemas.common import clean_text


class LoginRequest(BaseModel):
    email: str = ''
    password: str = ''

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        value = clean_text(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator('password', mode='before')
    @classmethod
    def default_password(cls, value):
        return '' if value is None else value


class SessionUser(BaseModel):
    id: int
    name: str
    email: str
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    user: SessionUser


class SessionResponse(BaseModel):
    session: SessionUser | None = None
