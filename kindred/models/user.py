"""User model definitions."""

import enum

from sqlalchemy import Column, Enum, Integer, String
from kindred.database import Base


class Role(str, enum.Enum):
    """Account roles. PARTICIPANT accounts belong to guardians."""

    ADMIN = "ADMIN"
    VOLUNTEER = "VOLUNTEER"
    PARTICIPANT = "PARTICIPANT"


EDITABLE_ROLES = frozenset({Role.VOLUNTEER, Role.PARTICIPANT})


class User(Base):
    """Represents a staff, volunteer or guardian account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # stored trimmed and lowercased
    password_hash = Column(String, nullable=False)
    role = Column(Enum(Role, native_enum=False, length=20), nullable=False)
    date_added = Column(String, nullable=False)
