"""StatusHistory SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Column, Text, Index
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, utcnow


class StatusHistory(Base):
    """Append-only ledger of application status changes.

    Rows are never updated or deleted. Fee events that leave the status
    unchanged are recorded with from_status == to_status.
    """
    __tablename__ = "status_history"
    __table_args__ = (
        Index("ix_status_history_application", "application_type", "application_id", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_type = Column(Text, nullable=False)
    application_id = Column(Text, nullable=False)
    from_status = Column(Text, nullable=True)  # None for creation
    to_status = Column(Text, nullable=False)
    actor_id = Column(Text, nullable=True)  # None for applicant/system actions
    comment = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        """Convert history entry to dictionary representation"""
        return {
            "id": str(self.id),
            "applicationType": self.application_type,
            "applicationId": self.application_id,
            "fromStatus": self.from_status,
            "toStatus": self.to_status,
            "actorId": self.actor_id,
            "comment": self.comment,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
