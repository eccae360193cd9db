"""Status history service.

Every status change of an application, and every fee event that leaves the
status unchanged, is appended here. Rows are never updated or deleted; the
ledger is the system of record for "when did X happen".

History Events:
- creation (from_status None -> draft)
- submission, staff status changes, registry decisions
- proof of payment uploaded, payment confirmed (from_status == to_status)
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from models.status_history import StatusHistory


def record_status_change(
    db: Session,
    application_type: str,
    application_id: str,
    from_status: Optional[str],
    to_status: str,
    actor_id: Optional[str] = None,
    comment: Optional[str] = None,
) -> StatusHistory:
    """Append a history row.

    The row joins the caller's transaction, so it commits or rolls back
    together with the status write it describes.

    Args:
        db: Database session
        application_type: "individual" or "organization"
        application_id: Human-readable application id
        from_status: Previous status (None for creation)
        to_status: New status (equal to from_status for fee events)
        actor_id: Staff user id (None for applicant/system actions)
        comment: Free-text comment

    Returns:
        StatusHistory: The created history row

    Example:
        record_status_change(
            db=db,
            application_type="individual",
            application_id="IND-APP-2025-0001",
            from_status="draft",
            to_status="eligibility_review",
            comment="Application submitted for review",
        )
    """
    entry = StatusHistory(
        application_type=getattr(application_type, "value", application_type),
        application_id=application_id,
        from_status=from_status,
        to_status=to_status,
        actor_id=actor_id,
        comment=comment,
    )

    db.add(entry)
    db.flush()  # Get ID without committing transaction

    return entry


def list_status_history(db: Session, application_type: str, application_id: str) -> List[StatusHistory]:
    """History rows of one application, oldest first."""
    return (
        db.query(StatusHistory)
        .filter(
            StatusHistory.application_type == getattr(application_type, "value", application_type),
            StatusHistory.application_id == application_id,
        )
        .order_by(StatusHistory.created_at.asc(), StatusHistory.id.asc())
        .all()
    )
