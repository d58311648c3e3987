"""Participant model definitions."""

from sqlalchemy import BigInteger, Column, Index, Integer, String, func
from kindred.database import Base


class Participant(Base):
    """Represents a participant record managed by an administrator."""
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    guardian = Column(String, nullable=False)
    contact_email = Column(String, nullable=False, index=True)
    contact_phone = Column(String, nullable=False)
    special_needs = Column(String, nullable=False)
    notes = Column(String, default='')
    interests = Column(String, default='')
    capabilities = Column(String, default='')
    health_concerns = Column(String, default='')
    created_at_ms = Column(BigInteger, nullable=False)
    date_added = Column(String, nullable=False)

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()


Index(
    'uq_participants_identity',
    func.lower(Participant.__table__.c.first_name),
    func.lower(Participant.__table__.c.last_name),
    func.lower(Participant.__table__.c.guardian),
    func.lower(Participant.__table__.c.contact_email),
    unique=True,
)
