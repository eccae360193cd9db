"""Typed application payloads

Sub-records of an application (personal details, school results, trust
account, directors) arrive as camelCase JSON and are validated once into
these models. Field names are snake_case; ``model_dump(by_alias=True)``
restores the camelCase wire shape for storage.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class PayloadModel(BaseModel):
    """Base for camelCase payload records"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Phone(PayloadModel):
    country_code: str
    number: str


class PersonalInfo(PayloadModel):
    first_name: str
    last_name: str
    dob: date
    national_id: Optional[str] = None
    email: EmailStr
    phone: Optional[Phone] = None
    address: Optional[str] = None
    country_of_residence: str
    current_employer: Optional[str] = None


class OLevelResults(PayloadModel):
    subjects: List[str] = Field(default_factory=list)
    has_english: bool
    has_math: bool
    passes_count: int


class ALevelResults(PayloadModel):
    subjects: List[str] = Field(default_factory=list)
    passes_count: int


class EquivalentQualification(PayloadModel):
    qualification_type: str = Field(alias="type")
    institution: str
    level_map: str  # How it maps to the A-Level standard
    evidence_doc_id: Optional[str] = None


class OrgProfile(PayloadModel):
    legal_name: str
    trading_name: Optional[str] = None
    reg_no: Optional[str] = None
    tax_no: Optional[str] = None
    address: Optional[str] = None
    emails: List[str] = Field(default_factory=list)
    phones: Optional[List[str]] = None


class TrustAccount(PayloadModel):
    bank_name: str
    branch: Optional[str] = None
    account_no_masked: Optional[str] = None


class Director(PayloadModel):
    name: str
    national_id: Optional[str] = None
    member_id: Optional[str] = None


@dataclass
class EligibilityResult:
    """Outcome of an eligibility check.

    Attributes:
        ok: Applicant may proceed
        mature: Mature-entry classification (individuals that passed)
        reason: Rejection reason when not ok
        requirements: Instructions the applicant still has to act on
        warnings: Non-blocking findings for staff and applicant
        missing_documents: Labels of checklist documents not yet present
    """
    ok: bool
    mature: Optional[bool] = None
    reason: Optional[str] = None
    requirements: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    missing_documents: List[str] = field(default_factory=list)

    @classmethod
    def rejected(cls, reason: str) -> "EligibilityResult":
        return cls(ok=False, reason=reason)

    def to_dict(self):
        data = {"ok": self.ok}
        if self.mature is not None:
            data["mature"] = self.mature
        if self.reason:
            data["reason"] = self.reason
        if self.requirements:
            data["requirements"] = list(self.requirements)
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data
