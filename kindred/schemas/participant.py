from typing import Any

from pydantic import field_validator

from kindred.schemas.common import CamelModel, clean_text


class ParticipantRequest(CamelModel):
    first_name: str = ''
    last_name: str = ''
    age: Any = None
    guardian: str = ''
    contact_email: str = ''
    contact_phone: str = ''
    special_needs: str = ''
    notes: str = ''

    @field_validator(
        'first_name', 'last_name', 'guardian', 'contact_phone', 'special_needs', 'notes',
        mode='before',
    )
    @classmethod
    def strip_text(cls, value):
        return clean_text(value)

    @field_validator('contact_email', mode='before')
    @classmethod
    def normalize_contact_email(cls, value):
        value = clean_text(value)
        return value.lower() if isinstance(value, str) else value


class GuardianProfileRequest(CamelModel):
    interests: str = ''
    capabilities: str = ''
    health_concerns: str = ''

    @field_validator('interests', 'capabilities', 'health_concerns', mode='before')
    @classmethod
    def strip_text(cls, value):
        return clean_text(value)


class ParticipantResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    age: int
    guardian: str
    contact_email: str
    contact_phone: str
    special_needs: str
    notes: str | None = ''
    date_added: str


class ParticipantListResponse(CamelModel):
    participants: list[ParticipantResponse]


class GuardianParticipantResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    age: int
    guardian: str
    contact_email: str
    contact_phone: str
    special_needs: str
    notes: str | None = ''
    interests: str | None = ''
    capabilities: str | None = ''
    health_concerns: str | None = ''


class GuardianProfileResponse(CamelModel):
    participant: GuardianParticipantResponse | None = None
