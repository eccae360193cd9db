"""Document service - upload, list, delete and staff verification.

Upload Flow:
1. Application must exist and be applicant-editable (draft / needs_applicant_action)
2. Doc type must be in the catalogue (police clearance needs its director index)
3. Bytes are fetched from the blob store by key and validated in full
4. SHA-256 of the bytes must not exist anywhere in the registry
5. Singleton types replace the existing row in place; others accumulate

The unique constraint on ``content_hash`` is the last line of the duplicate
check: two concurrent uploads of the same bytes both pass step 4, one of
them fails at flush, and that failure is reported as the same conflict.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from audit.service import record_status_change
from domain.applications import APPLICANT_EDITABLE_STATUSES, ApplicationStatus
from domain.documents import (
    DocumentType,
    FileValidationResult,
    get_policy,
    is_singleton,
    resolve_document_type,
    validate_file,
)
from domain.documents.ports import BlobStoreError, BlobStorePort
from models.application import FeeStatus
from models.base import utcnow
from models.uploaded_document import UploadedDocument, UploadedDocumentStatus

from .errors import DocumentError, DuplicateContentError
from .service import find_application

logger = logging.getLogger(__name__)

PROOF_VERIFIED_COMMENT = "Proof of payment verified - application fee settled"
PROOF_REJECTED_COMMENT = "Proof of payment rejected - application fee outstanding"


@dataclass
class UploadOutcome:
    document: UploadedDocument
    replaced: bool
    validation: FileValidationResult

    def to_dict(self):
        policy = get_policy(self.document.doc_type)
        label = policy.label if policy else self.document.doc_type
        action = "updated" if self.replaced else "uploaded"
        return {
            "documentId": str(self.document.id),
            "docType": self.document.doc_type,
            "fileName": self.document.file_name,
            "status": self.document.status,
            "fileSize": self.document.size_bytes,
            "mimeType": self.document.mime_type,
            "fileHash": self.document.content_hash,
            "uploadedAt": (self.document.updated_at or utcnow()).isoformat(),
            "category": policy.category.value if policy else None,
            "replaced": self.replaced,
            "validationWarnings": list(self.validation.warnings),
            "message": f"{label} {action} successfully after security validation",
        }


def _find_by_hash(db: Session, content_hash: str) -> Optional[UploadedDocument]:
    return db.query(UploadedDocument).filter(UploadedDocument.content_hash == content_hash).first()


def _find_singleton(db: Session, application, doc_type: str) -> Optional[UploadedDocument]:
    return (
        db.query(UploadedDocument)
        .filter(
            UploadedDocument.application_type == application.application_type.value,
            UploadedDocument.application_id == application.application_id,
            UploadedDocument.doc_type == doc_type,
        )
        .first()
    )


def upload_document(
    db: Session,
    blob_store: BlobStorePort,
    application_id: str,
    doc_type: str,
    file_key: str,
    file_name: str,
    mime_type: str,
) -> UploadOutcome:
    """Validate and register an uploaded file.

    Args:
        db: Database session
        blob_store: Store holding the uploaded bytes
        application_id: Human-readable application id
        doc_type: Document type tag
        file_key: Blob store key the client uploaded to
        file_name: Client file name
        mime_type: Client-declared content type

    Returns:
        UploadOutcome; ``replaced`` is True when a singleton row was overwritten

    Raises:
        ApplicationNotFoundError: Unknown application
        DocumentError: INVALID_APPLICATION_STATUS, INVALID_DOCUMENT_TYPE,
            FILE_ACCESS_ERROR or FILE_SECURITY_VALIDATION_FAILED
        DuplicateContentError: Identical bytes already stored
    """
    application = find_application(db, application_id, lock=True)
    if ApplicationStatus(application.status) not in APPLICANT_EDITABLE_STATUSES:
        raise DocumentError(
            code="INVALID_APPLICATION_STATUS",
            title="Bad Request",
            detail=f"Cannot upload documents for application in {application.status} status",
            status_code=400,
        )

    if resolve_document_type(doc_type) is None:
        raise DocumentError(
            code="INVALID_DOCUMENT_TYPE",
            title="Bad Request",
            detail="Invalid document type",
            status_code=400,
        )

    try:
        content = blob_store.fetch(file_key)
    except BlobStoreError as e:
        logger.warning(f"Could not fetch upload {file_key} for {application_id}: {e}")
        raise DocumentError(
            code="FILE_ACCESS_ERROR",
            title="Bad Request",
            detail="Failed to access uploaded file for server-side validation",
            status_code=400,
        )

    validation = validate_file(content, file_name, mime_type, doc_type)
    if not validation.is_valid:
        logger.info(
            f"Upload rejected for {application_id}: {validation.errors}",
            extra={"application_id": application_id, "doc_type": doc_type},
        )
        raise DocumentError(
            code="FILE_SECURITY_VALIDATION_FAILED",
            title="File Security Validation Failed",
            detail=f"File failed security validation: {'; '.join(validation.errors)}",
            status_code=400,
            extra={"errors": list(validation.errors), "warnings": list(validation.warnings)},
        )

    content_hash = validation.file_info.hash
    existing = _find_singleton(db, application, doc_type) if is_singleton(doc_type) else None

    duplicate = _find_by_hash(db, content_hash)
    # Re-uploading a singleton's own bytes is a plain refresh
    if duplicate is not None and (existing is None or duplicate.id != existing.id):
        raise DuplicateContentError(duplicate)

    if existing is not None:
        document = existing
        document.file_key = file_key
        document.file_name = file_name
        document.mime_type = (mime_type or "").lower()
        document.size_bytes = len(content)
        document.content_hash = content_hash
        document.status = UploadedDocumentStatus.UPLOADED.value
        document.verifier_id = None
        document.notes = None
        document.updated_at = utcnow()
    else:
        document = UploadedDocument(
            application_type=application.application_type.value,
            application_id=application.application_id,
            doc_type=doc_type,
            file_key=file_key,
            file_name=file_name,
            mime_type=(mime_type or "").lower(),
            size_bytes=len(content),
            content_hash=content_hash,
            status=UploadedDocumentStatus.UPLOADED.value,
        )
        db.add(document)

    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        duplicate = _find_by_hash(db, content_hash)
        if duplicate is None:
            raise
        raise DuplicateContentError(duplicate)

    logger.info(
        f"{'Replaced' if existing is not None else 'Stored'} {doc_type} for {application_id}",
        extra={"application_id": application_id, "doc_type": doc_type},
    )
    return UploadOutcome(document=document, replaced=existing is not None, validation=validation)


def _get_document(db: Session, application_id: str, document_id: UUID) -> UploadedDocument:
    document = (
        db.query(UploadedDocument)
        .filter(
            UploadedDocument.id == document_id,
            UploadedDocument.application_id == application_id,
        )
        .first()
    )
    if document is None:
        raise DocumentError(
            code="DOCUMENT_NOT_FOUND",
            title="Not Found",
            detail="Document not found",
            status_code=404,
        )
    return document


def delete_document(db: Session, application_id: str, document_id: UUID) -> None:
    """Delete a document staff have not processed yet.

    Deleting the proof of payment withdraws it from the fee posture.

    Raises:
        ApplicationNotFoundError: Unknown application
        DocumentError: DOCUMENT_NOT_FOUND (404) or DOCUMENT_PROCESSED (409)
    """
    application = find_application(db, application_id, lock=True)
    document = _get_document(db, application_id, document_id)

    if document.status != UploadedDocumentStatus.UPLOADED.value:
        raise DocumentError(
            code="DOCUMENT_PROCESSED",
            title="Document Cannot Be Deleted",
            detail="Document has already been processed and cannot be deleted",
            status_code=409,
        )

    if application.fee_proof_document_id == document.id:
        application.fee_proof_document_id = None
        if application.fee_status == FeeStatus.PROOF_UPLOADED.value:
            application.fee_status = FeeStatus.PENDING.value

    db.delete(document)
    db.flush()
    logger.info(
        f"Deleted {document.doc_type} from {application_id}",
        extra={"application_id": application_id, "doc_type": document.doc_type},
    )


def verify_document(
    db: Session,
    application_id: str,
    document_id: UUID,
    status: UploadedDocumentStatus,
    verifier_id: str,
    notes: Optional[str] = None,
) -> UploadedDocument:
    """Record a staff verdict on a document.

    Verifying the application's proof of payment settles the fee; rejecting
    the attached proof detaches it and puts the fee back to pending.

    Raises:
        ApplicationNotFoundError: Unknown application
        DocumentError: DOCUMENT_NOT_FOUND
    """
    application = find_application(db, application_id, lock=True)
    document = _get_document(db, application_id, document_id)
    status = UploadedDocumentStatus(status)

    document.status = status.value
    document.verifier_id = verifier_id
    document.notes = notes
    document.updated_at = utcnow()

    if (
        status == UploadedDocumentStatus.VERIFIED
        and document.doc_type == DocumentType.APPLICATION_FEE_POP.value
        and application.fee_status != FeeStatus.SETTLED.value
    ):
        application.fee_status = FeeStatus.SETTLED.value
        application.fee_proof_document_id = document.id
        record_status_change(
            db,
            application.application_type,
            application.application_id,
            from_status=application.status,
            to_status=application.status,
            actor_id=verifier_id,
            comment=PROOF_VERIFIED_COMMENT,
        )
    elif (
        status == UploadedDocumentStatus.REJECTED
        and application.fee_proof_document_id == document.id
    ):
        application.fee_proof_document_id = None
        if application.fee_status == FeeStatus.PROOF_UPLOADED.value:
            application.fee_status = FeeStatus.PENDING.value
        record_status_change(
            db,
            application.application_type,
            application.application_id,
            from_status=application.status,
            to_status=application.status,
            actor_id=verifier_id,
            comment=PROOF_REJECTED_COMMENT,
        )

    db.flush()
    logger.info(
        f"Document {document_id} of {application_id} marked {status.value} by {verifier_id}",
        extra={"application_id": application_id, "staff_id": verifier_id},
    )
    return document
