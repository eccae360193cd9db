"""SaveResumeToken SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Column, Text, Integer, Index
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, utcnow


class SaveResumeToken(Base):
    """One-time code letting an applicant resume an in-progress application.

    The attempt counter is shared by every verification against the token,
    right or wrong.
    """
    __tablename__ = "save_resume_token"
    __table_args__ = (
        Index("ix_save_resume_token_lookup", "application_id", "email"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_type = Column(Text, nullable=False)
    application_id = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    code = Column(Text, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    consumed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
