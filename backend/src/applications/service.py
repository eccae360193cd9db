"""Application service - lookup, creation and read views.

Applications live in two tables (individual / organization) but share one
human-readable id space, so every lookup goes through ``find_application``.
Creation runs the eligibility gate, mints the id from the naming series,
prices the fee and writes the ``None -> draft`` history row, all inside the
caller's transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from audit.service import list_status_history, record_status_change
from config import settings
from domain.applications import ApplicationStatus
from domain.eligibility import (
    ALevelResults,
    Director,
    EligibilityResult,
    EquivalentQualification,
    OLevelResults,
    OrgProfile,
    PersonalInfo,
    TrustAccount,
    check_individual_eligibility,
    check_organization_eligibility,
)
from models.application import ApplicationType, IndividualApplication, OrganizationApplication
from models.base import as_utc
from models.member import Member
from models.registry_decision import RegistryDecision
from models.uploaded_document import UploadedDocument
from naming_series.service import APPLICATION_SERIES, next_application_id

from .errors import ApplicationNotFoundError, EligibilityFailedError

logger = logging.getLogger(__name__)

Application = Union[IndividualApplication, OrganizationApplication]

APPLICATION_MODELS = {
    ApplicationType.INDIVIDUAL: IndividualApplication,
    ApplicationType.ORGANIZATION: OrganizationApplication,
}

CREATED_COMMENT = "Application created"


@dataclass
class StartedApplication:
    application: Application
    eligibility: EligibilityResult


def _candidate_models(application_id: str):
    """Models to search, the one matching the id prefix first."""
    for kind, series in APPLICATION_SERIES.items():
        if application_id.startswith(f"{series}-"):
            return [APPLICATION_MODELS[kind]]
    return list(APPLICATION_MODELS.values())


def find_application(db: Session, application_id: str, lock: bool = False) -> Application:
    """Load an application of either kind by its human-readable id.

    Args:
        db: Database session
        application_id: e.g. "IND-APP-2025-0001"
        lock: Take a row lock (SELECT ... FOR UPDATE) for a state or fee mutation

    Raises:
        ApplicationNotFoundError: If no application has that id
    """
    for model in _candidate_models(application_id):
        query = db.query(model).filter(model.application_id == application_id)
        if lock:
            query = query.with_for_update()
        application = query.first()
        if application is not None:
            return application
    raise ApplicationNotFoundError(application_id)


def fee_for(application_type: ApplicationType, mature_entry: Optional[bool] = None) -> Decimal:
    """Application fee in FEE_CURRENCY.

    Example:
        >>> fee_for(ApplicationType.INDIVIDUAL, mature_entry=True)
        Decimal('75')
    """
    if ApplicationType(application_type) == ApplicationType.ORGANIZATION:
        return settings.ORGANIZATION_FEE
    if mature_entry:
        return settings.MATURE_INDIVIDUAL_FEE
    return settings.INDIVIDUAL_FEE


def _dump(value):
    return value.to_json() if value is not None else None


def start_individual_application(
    db: Session,
    personal: PersonalInfo,
    o_level: OLevelResults,
    a_level: Optional[ALevelResults] = None,
    equivalent_qualification: Optional[EquivalentQualification] = None,
    today: Optional[date] = None,
) -> StartedApplication:
    """Run the individual eligibility gate and create the draft.

    ``mature_entry`` is fixed here from the date of birth and never
    recomputed, so the fee and document checklist stay stable.

    Raises:
        EligibilityFailedError: If the applicant does not qualify
    """
    result = check_individual_eligibility(personal, o_level, a_level, equivalent_qualification, today=today)
    if not result.ok:
        logger.info(f"Individual eligibility rejected: {result.reason}")
        raise EligibilityFailedError(result.reason, result.requirements, result.warnings)

    application = IndividualApplication(
        application_id=next_application_id(db, ApplicationType.INDIVIDUAL),
        status=ApplicationStatus.DRAFT.value,
        personal=_dump(personal),
        o_level=_dump(o_level),
        a_level=_dump(a_level),
        equivalent_qualification=_dump(equivalent_qualification),
        mature_entry=bool(result.mature),
        fee_required=True,
        fee_amount=fee_for(ApplicationType.INDIVIDUAL, result.mature),
        fee_currency=settings.FEE_CURRENCY,
    )
    return StartedApplication(application=_create(db, application), eligibility=result)


def is_active_individual_member(db: Session, member_number: Optional[str]) -> bool:
    if not member_number:
        return False
    member = db.query(Member).filter(Member.member_number == member_number).first()
    return member is not None and member.is_active_individual


def start_organization_application(
    db: Session,
    org_profile: OrgProfile,
    trust_account: TrustAccount,
    prea_member_id: str,
    directors: List[Director],
) -> StartedApplication:
    """Run the organization eligibility gate and create the draft.

    The structural rules (name, email, trust bank, PREA, directors) block
    creation. A new firm has no documents yet, so an incomplete document
    checklist does not: it is returned as the applicant's to-do list.

    Raises:
        EligibilityFailedError: If a structural rule fails
    """
    result = check_organization_eligibility(
        org_profile,
        trust_account,
        prea_member_id,
        directors,
        doc_presence={},
        prea_is_active_member=is_active_individual_member(db, prea_member_id),
        # CR6 has not been uploaded, let alone verified, at this point
        prea_is_listed_director=False,
    )
    if not result.ok and not result.missing_documents:
        logger.info(f"Organization eligibility rejected: {result.reason}")
        raise EligibilityFailedError(result.reason, result.requirements, result.warnings)

    application = OrganizationApplication(
        application_id=next_application_id(db, ApplicationType.ORGANIZATION),
        status=ApplicationStatus.DRAFT.value,
        org_profile=_dump(org_profile),
        trust_account=_dump(trust_account),
        prea_member_id=prea_member_id,
        directors=[_dump(d) for d in directors],
        fee_required=True,
        fee_amount=fee_for(ApplicationType.ORGANIZATION),
        fee_currency=settings.FEE_CURRENCY,
    )
    return StartedApplication(application=_create(db, application), eligibility=result)


def _create(db: Session, application: Application) -> Application:
    db.add(application)
    db.flush()
    record_status_change(
        db,
        application.application_type,
        application.application_id,
        from_status=None,
        to_status=ApplicationStatus.DRAFT.value,
        comment=CREATED_COMMENT,
    )
    logger.info(
        f"Created {application.application_type.value} application {application.application_id}",
        extra={"application_id": application.application_id},
    )
    return application


def list_documents(db: Session, application_id: str) -> List[UploadedDocument]:
    """Documents of one application, newest first."""
    return (
        db.query(UploadedDocument)
        .filter(UploadedDocument.application_id == application_id)
        .order_by(UploadedDocument.created_at.desc())
        .all()
    )


def list_decisions(db: Session, application: Application) -> List[RegistryDecision]:
    return (
        db.query(RegistryDecision)
        .filter(
            RegistryDecision.application_type == application.application_type.value,
            RegistryDecision.application_id == application.application_id,
        )
        .order_by(RegistryDecision.decided_at.asc())
        .all()
    )


def application_summary(db: Session, application: Application) -> dict:
    """Status view for the public status page: no payload, no decisions."""
    data = application.to_dict()
    data["documents"] = [d.to_dict() for d in list_documents(db, application.application_id)]
    data["statusHistory"] = [
        h.to_dict()
        for h in list_status_history(db, application.application_type, application.application_id)
    ]
    return data


def application_detail(db: Session, application: Application) -> dict:
    """Full view used by the resume endpoint and staff review."""
    data = application.to_dict(include_payload=True)
    data["documents"] = [d.to_dict() for d in list_documents(db, application.application_id)]
    data["statusHistory"] = [
        h.to_dict()
        for h in list_status_history(db, application.application_type, application.application_id)
    ]
    data["decisions"] = [d.to_dict() for d in list_decisions(db, application)]
    return data


def list_applications(
    db: Session,
    status: Optional[str] = None,
    application_type: Optional[ApplicationType] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Application], int]:
    """Staff listing across both tables, newest first.

    Returns:
        Tuple of (page of applications, total matching count)
    """
    models = (
        [APPLICATION_MODELS[ApplicationType(application_type)]]
        if application_type
        else list(APPLICATION_MODELS.values())
    )

    rows: List[Application] = []
    for model in models:
        query = db.query(model)
        if status:
            query = query.filter(model.status == status)
        rows.extend(query.all())

    rows.sort(key=lambda a: as_utc(a.created_at), reverse=True)
    return rows[offset:offset + limit], len(rows)
