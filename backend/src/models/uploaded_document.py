"""UploadedDocument SQLAlchemy model

An applicant-supplied supporting document. The SHA-256 content hash is
unique across the whole table: identical bytes may only exist once in the
registry, regardless of which application uploaded them.
"""

import enum
from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from .base import Base, utcnow


class UploadedDocumentStatus(str, enum.Enum):
    """Review status of an uploaded document.

    Only staff verification moves a document out of UPLOADED.
    """
    UPLOADED = "uploaded"
    VERIFIED = "verified"
    REJECTED = "rejected"


class UploadedDocument(Base):
    """Document attached to an individual or organization application."""
    __tablename__ = "uploaded_document"
    __table_args__ = (
        UniqueConstraint("content_hash", name="uq_uploaded_document_content_hash"),
        Index("ix_uploaded_document_application", "application_type", "application_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_type = Column(Text, nullable=False)
    application_id = Column(Text, nullable=False)
    doc_type = Column(Text, nullable=False)  # e.g. o_level_cert, police_clearance_director_2
    file_key = Column(Text, nullable=False)  # Blob store key
    file_name = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    content_hash = Column(Text, nullable=False)  # SHA-256 hex
    status = Column(Text, nullable=False, default=UploadedDocumentStatus.UPLOADED.value)
    verifier_id = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Convert document to dictionary representation"""
        return {
            "id": str(self.id),
            "applicationType": self.application_type,
            "applicationId": self.application_id,
            "docType": self.doc_type,
            "fileKey": self.file_key,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "contentHash": self.content_hash,
            "status": self.status,
            "verifierId": self.verifier_id,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
