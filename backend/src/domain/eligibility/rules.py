"""Eligibility rules for individual and organization applicants

Both checks are pure: everything they need, including facts looked up from
the member register, is passed in. A malformed payload never raises; it
collapses into a single generic rejection so parser details are not echoed
back to applicants.
"""

from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from domain.documents.checklist import ChecklistPhase, build_checklist, missing_items
from models.application import ApplicationType

from .age import MATURE_ENTRY_AGE, calculate_age
from .schemas import (
    ALevelResults,
    Director,
    EligibilityResult,
    EquivalentQualification,
    OLevelResults,
    OrgProfile,
    PersonalInfo,
    TrustAccount,
)


INVALID_INDIVIDUAL_DATA = "Invalid application data provided"
INVALID_ORGANIZATION_DATA = "Invalid organization data provided"

MIN_O_LEVEL_PASSES = 5
MIN_A_LEVEL_PASSES = 2

BASELINE_INDIVIDUAL_REQUIREMENTS = (
    "Upload certified O-Level certificate",
    "Upload valid ID or Passport",
    "Upload birth certificate",
)

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], value: Union[M, Mapping[str, Any]]) -> M:
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def _coerce_optional(model: Type[M], value) -> Optional[M]:
    return None if value is None else _coerce(model, value)


def check_individual_eligibility(
    personal,
    o_level,
    a_level=None,
    equivalent_qualification=None,
    today: Optional[date] = None,
) -> EligibilityResult:
    """Decide whether an individual may apply, and on which entry path.

    Args:
        personal: PersonalInfo or its camelCase dict
        o_level: OLevelResults or dict
        a_level: Optional ALevelResults or dict
        equivalent_qualification: Optional EquivalentQualification or dict
        today: Evaluation date (defaults to today)

    Returns:
        EligibilityResult; when ok, ``mature`` is set and ``requirements``
        always ends with the three baseline document instructions

    Example:
        >>> result = check_individual_eligibility(
        ...     personal={..., "dob": "1995-01-01"},
        ...     o_level={"subjects": [], "hasEnglish": True, "hasMath": True, "passesCount": 6},
        ... )
        >>> result.ok, result.mature
        (True, True)
    """
    try:
        personal = _coerce(PersonalInfo, personal)
        o_level = _coerce(OLevelResults, o_level)
        a_level = _coerce_optional(ALevelResults, a_level)
        equivalent_qualification = _coerce_optional(EquivalentQualification, equivalent_qualification)
    except ValidationError:
        return EligibilityResult.rejected(INVALID_INDIVIDUAL_DATA)

    if o_level.passes_count < MIN_O_LEVEL_PASSES:
        return EligibilityResult.rejected("Must have at least 5 O-Level passes")
    if not o_level.has_english:
        return EligibilityResult.rejected("Must have O-Level English pass")
    if not o_level.has_math:
        return EligibilityResult.rejected("Must have O-Level Mathematics pass")

    mature = calculate_age(personal.dob, today) >= MATURE_ENTRY_AGE
    requirements: List[str] = []
    warnings: List[str] = []

    has_a_level = a_level is not None and a_level.passes_count >= MIN_A_LEVEL_PASSES

    if not mature:
        has_equivalent = bool(equivalent_qualification and equivalent_qualification.evidence_doc_id)

        if not has_a_level and not has_equivalent:
            return EligibilityResult.rejected(
                f"Applicants under {MATURE_ENTRY_AGE} must have either 2+ A-Level passes "
                "or certified equivalent qualification"
            )

        if has_a_level:
            requirements.append("Provide certified A-Level certificate")
        else:
            requirements.append("Provide certified evidence of equivalent qualification")
    elif has_a_level:
        warnings.append("A-Level qualifications will strengthen your application")

    requirements.extend(BASELINE_INDIVIDUAL_REQUIREMENTS)

    return EligibilityResult(
        ok=True,
        mature=mature,
        requirements=requirements,
        warnings=warnings,
    )


def check_organization_eligibility(
    org_profile,
    trust_account,
    prea_member_id: Optional[str],
    directors: Iterable,
    doc_presence: Optional[Mapping[str, bool]] = None,
    prea_is_active_member: bool = False,
    prea_is_listed_director: bool = False,
) -> EligibilityResult:
    """Decide whether an estate agency firm may apply.

    Structural rules short-circuit in a fixed order (legal name, email,
    trust bank, PREA declared, PREA active, directors). Past those, the
    firm is eligible only once every checklist document is present.

    Args:
        org_profile: OrgProfile or dict
        trust_account: TrustAccount or dict
        prea_member_id: Declared Principal Registered Estate Agent
        directors: Director records or dicts
        doc_presence: doc-type tag -> present
        prea_is_active_member: PREA found in the register as an active individual
        prea_is_listed_director: PREA confirmed as a director on the CR6 form

    Returns:
        EligibilityResult; ``missing_documents`` lists unmet checklist labels
    """
    try:
        org_profile = _coerce(OrgProfile, org_profile)
        trust_account = _coerce(TrustAccount, trust_account)
        directors = [_coerce(Director, d) for d in (directors or [])]
    except (ValidationError, TypeError):
        return EligibilityResult.rejected(INVALID_ORGANIZATION_DATA)

    doc_presence = doc_presence or {}
    warnings: List[str] = []

    if len((org_profile.legal_name or "").strip()) < 2:
        return EligibilityResult.rejected("Valid organization legal name is required")

    if not org_profile.emails:
        return EligibilityResult.rejected("At least one email address is required")

    if len((trust_account.bank_name or "").strip()) < 2:
        return EligibilityResult.rejected("Trust account bank name is required")

    if not prea_member_id:
        return EligibilityResult.rejected("Principal Registered Estate Agent (PREA) must be declared")

    if not prea_is_active_member:
        return EligibilityResult.rejected(
            "Principal Registered Estate Agent must be an active individual member"
        )

    if not prea_is_listed_director:
        warnings.append("Verify that the PREA is listed as a director in CR6 form")

    if not directors:
        return EligibilityResult.rejected("At least one director must be listed")

    checklist = build_checklist(
        ApplicationType.ORGANIZATION,
        ChecklistPhase.ELIGIBILITY,
        director_names=[d.name for d in directors],
    )
    present = [tag for tag, is_present in doc_presence.items() if is_present]
    missing = [item.label for item in missing_items(checklist, present)]

    requirements: List[str] = []
    if missing:
        requirements.append("Upload all required documents:")
        requirements.extend(f"- {label}" for label in missing)

    if not any(d.member_id == prea_member_id for d in directors):
        warnings.append("Ensure the PREA is listed among the directors")

    return EligibilityResult(
        ok=not requirements,
        reason="Missing required documents or information" if requirements else None,
        requirements=requirements,
        warnings=warnings,
        missing_documents=missing,
    )
