"""Member SQLAlchemy model

Read model of registered members. The application engine only consults it
to confirm that a declared PREA is an active individual member.
"""

import enum
from uuid import uuid4

from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, utcnow


class MembershipStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


class Member(Base):
    __tablename__ = "member"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    member_number = Column(Text, nullable=True, unique=True)  # EAC-MBR-2025-0001
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    member_type = Column(Text, nullable=False, default="individual")
    membership_status = Column(Text, nullable=False, default=MembershipStatus.PENDING.value)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    @property
    def is_active_individual(self) -> bool:
        return (
            self.member_type == "individual"
            and self.membership_status == MembershipStatus.ACTIVE.value
        )
