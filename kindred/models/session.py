"""Server-side session model definitions."""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from kindred.database import Base
from kindred.models.user import Role


class UserSession(Base):
    """Represents an authenticated browser session."""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    token_hash = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(Enum(Role, native_enum=False, length=20), nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
