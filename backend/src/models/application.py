"""Application models for individual and organization registrations

Both variants share the same lifecycle columns (status, fee posture, member
number) and differ only in their payload. Payload sub-records are stored as
JSON and validated into typed models at the API boundary.
"""

import enum
from uuid import uuid4

from sqlalchemy import Column, Text, Boolean, Numeric, Index
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, PortableJSONB, utcnow


class ApplicationType(str, enum.Enum):
    """Applicant kind; selects the payload schema and naming series."""
    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"


class FeeStatus(str, enum.Enum):
    """Application fee posture consumed by the submission guard."""
    PENDING = "pending"
    PROOF_UPLOADED = "proof_uploaded"
    SETTLED = "settled"
    FAILED = "failed"


class ApplicationMixin:
    """Columns shared by every application variant."""

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_id = Column(Text, nullable=False, unique=True)  # IND-APP-2025-0001
    status = Column(Text, nullable=False, default="draft")

    fee_required = Column(Boolean, nullable=False, default=True)
    fee_amount = Column(Numeric(10, 2), nullable=True)
    fee_currency = Column(Text, nullable=False, default="USD")
    fee_status = Column(Text, nullable=False, default=FeeStatus.PENDING.value)
    fee_proof_document_id = Column(UUID(as_uuid=True), nullable=True)
    fee_payment_reference = Column(Text, nullable=True)  # gateway poll reference

    member_id = Column(Text, nullable=True)  # Minted once on acceptance

    submitted_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def base_dict(self):
        return {
            "applicationId": self.application_id,
            "applicationType": self.application_type.value,
            "status": self.status,
            "feeRequired": self.fee_required,
            "feeAmount": float(self.fee_amount) if self.fee_amount is not None else None,
            "feeCurrency": self.fee_currency,
            "feeStatus": self.fee_status,
            "feeProofDocumentId": str(self.fee_proof_document_id) if self.fee_proof_document_id else None,
            "memberId": self.member_id,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class IndividualApplication(ApplicationMixin, Base):
    """Individual estate agent application.

    ``mature_entry`` is derived from the date of birth when the record is
    created and is never recomputed afterwards.
    """
    __tablename__ = "individual_application"
    __table_args__ = (
        Index("ix_individual_application_status", "status"),
    )

    application_type = ApplicationType.INDIVIDUAL

    personal = Column(PortableJSONB, nullable=False)
    o_level = Column(PortableJSONB, nullable=False)
    a_level = Column(PortableJSONB, nullable=True)
    equivalent_qualification = Column(PortableJSONB, nullable=True)
    mature_entry = Column(Boolean, nullable=False, default=False)

    @property
    def contact_email(self) -> str | None:
        return (self.personal or {}).get("email")

    @property
    def display_name(self) -> str:
        personal = self.personal or {}
        return f"{personal.get('firstName', '')} {personal.get('lastName', '')}".strip()

    def to_dict(self, include_payload: bool = False):
        """Convert application to dictionary representation"""
        data = self.base_dict()
        data["matureEntry"] = self.mature_entry
        if include_payload:
            data.update({
                "personal": self.personal,
                "oLevel": self.o_level,
                "aLevel": self.a_level,
                "equivalentQualification": self.equivalent_qualification,
            })
        return data


class OrganizationApplication(ApplicationMixin, Base):
    """Estate agency firm application with PREA and director declarations."""
    __tablename__ = "organization_application"
    __table_args__ = (
        Index("ix_organization_application_status", "status"),
    )

    application_type = ApplicationType.ORGANIZATION

    org_profile = Column(PortableJSONB, nullable=False)
    trust_account = Column(PortableJSONB, nullable=False)
    prea_member_id = Column(Text, nullable=False)
    directors = Column(PortableJSONB, nullable=False, default=list)

    @property
    def contact_email(self) -> str | None:
        emails = (self.org_profile or {}).get("emails") or []
        return emails[0] if emails else None

    @property
    def display_name(self) -> str:
        return (self.org_profile or {}).get("legalName", "")

    @property
    def director_count(self) -> int:
        return len(self.directors or [])

    def to_dict(self, include_payload: bool = False):
        """Convert application to dictionary representation"""
        data = self.base_dict()
        data["directorCount"] = self.director_count
        if include_payload:
            data.update({
                "orgProfile": self.org_profile,
                "trustAccount": self.trust_account,
                "preaMemberId": self.prea_member_id,
                "directors": self.directors,
            })
        return data
