"""Eligibility domain module - applicant qualification rules"""

from .age import MATURE_ENTRY_AGE, calculate_age, is_mature_entry
from .rules import (
    check_individual_eligibility,
    check_organization_eligibility,
    INVALID_INDIVIDUAL_DATA,
    INVALID_ORGANIZATION_DATA,
)
from .schemas import (
    PayloadModel,
    Phone,
    PersonalInfo,
    OLevelResults,
    ALevelResults,
    EquivalentQualification,
    OrgProfile,
    TrustAccount,
    Director,
    EligibilityResult,
)

__all__ = [
    "MATURE_ENTRY_AGE",
    "calculate_age",
    "is_mature_entry",
    "check_individual_eligibility",
    "check_organization_eligibility",
    "INVALID_INDIVIDUAL_DATA",
    "INVALID_ORGANIZATION_DATA",
    "PayloadModel",
    "Phone",
    "PersonalInfo",
    "OLevelResults",
    "ALevelResults",
    "EquivalentQualification",
    "OrgProfile",
    "TrustAccount",
    "Director",
    "EligibilityResult",
]
