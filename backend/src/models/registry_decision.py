"""RegistryDecision SQLAlchemy model"""

import enum
from uuid import uuid4

from sqlalchemy import Column, Text, Index
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, PortableJSONB, utcnow


class Decision(str, enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RegistryDecision(Base):
    """Registry judgment on an application.

    Each decision call adds a row; later decisions never replace earlier ones.
    """
    __tablename__ = "registry_decision"
    __table_args__ = (
        Index("ix_registry_decision_application", "application_type", "application_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_type = Column(Text, nullable=False)
    application_id = Column(Text, nullable=False)
    decision = Column(Text, nullable=False)
    reasons = Column(PortableJSONB, nullable=True)  # list of strings
    decided_by = Column(Text, nullable=True)
    decided_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        """Convert decision to dictionary representation"""
        return {
            "id": str(self.id),
            "applicationType": self.application_type,
            "applicationId": self.application_id,
            "decision": self.decision,
            "reasons": self.reasons or [],
            "decidedBy": self.decided_by,
            "decidedAt": self.decided_at.isoformat() if self.decided_at else None,
        }
