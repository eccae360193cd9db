"""Pydantic schemas for the applications API

Request bodies are camelCase on the wire. The start requests reuse the
typed payload records and add the registration-form rules that belong at
the HTTP boundary; rules with their own rejection wording (O-Level passes,
legal name, PREA) stay in the eligibility gate.
"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from domain.applications import ApplicationStatus
from domain.eligibility import (
    ALevelResults,
    Director,
    EquivalentQualification,
    OLevelResults,
    OrgProfile,
    PayloadModel,
    PersonalInfo,
    TrustAccount,
    calculate_age,
)
from models.registry_decision import Decision


MIN_APPLICANT_AGE = 18


# ============================================================================
# Start application
# ============================================================================

class StartPersonalInfo(PersonalInfo):
    """Personal details as submitted on the registration form"""

    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    country_of_residence: str = Field(..., min_length=2)

    @field_validator("dob")
    @classmethod
    def applicant_must_be_adult(cls, value: date) -> date:
        if calculate_age(value) < MIN_APPLICANT_AGE:
            raise ValueError(f"Applicant must be at least {MIN_APPLICANT_AGE} years old")
        return value


class StartOrgProfile(OrgProfile):
    emails: List[EmailStr] = Field(default_factory=list)


class IndividualStartRequest(PayloadModel):
    """POST /individual/start"""
    personal: StartPersonalInfo
    o_level: OLevelResults
    a_level: Optional[ALevelResults] = None
    equivalent_qualification: Optional[EquivalentQualification] = None


class OrganizationStartRequest(PayloadModel):
    """POST /organization/start"""
    org_profile: StartOrgProfile
    trust_account: TrustAccount
    prea_member_id: str = Field(..., min_length=1)
    directors: List[Director] = Field(default_factory=list)


# ============================================================================
# Save & resume
# ============================================================================

class GenerateOtpRequest(PayloadModel):
    email: EmailStr


class VerifyOtpRequest(PayloadModel):
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=12)


# ============================================================================
# Documents & fees
# ============================================================================

class DocumentUploadRequest(PayloadModel):
    """Registers bytes the client already put in the blob store under ``fileKey``"""
    doc_type: str = Field(..., min_length=1)
    file_key: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)


class FeeProofRequest(PayloadModel):
    file_key: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)


class FeeInitiateRequest(PayloadModel):
    amount: Decimal = Field(..., gt=0)
    email: Optional[EmailStr] = None


# ============================================================================
# Staff
# ============================================================================

class StatusChangeRequest(PayloadModel):
    status: ApplicationStatus
    comment: Optional[str] = None


class DocumentVerifyRequest(PayloadModel):
    status: Literal["verified", "rejected"]
    notes: Optional[str] = None


class DecisionRequest(PayloadModel):
    decision: Decision
    reasons: List[str] = Field(default_factory=list)
