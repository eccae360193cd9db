"""SQLAlchemy models for the estate agents registry"""

from .base import Base
from .application import (
    ApplicationType,
    FeeStatus,
    IndividualApplication,
    OrganizationApplication,
)
from .uploaded_document import UploadedDocument, UploadedDocumentStatus
from .status_history import StatusHistory
from .registry_decision import RegistryDecision, Decision
from .save_resume_token import SaveResumeToken
from .naming_series import NamingSeriesCounter
from .member import Member, MembershipStatus

__all__ = [
    "Base",
    "ApplicationType",
    "FeeStatus",
    "IndividualApplication",
    "OrganizationApplication",
    "UploadedDocument",
    "UploadedDocumentStatus",
    "StatusHistory",
    "RegistryDecision",
    "Decision",
    "SaveResumeToken",
    "NamingSeriesCounter",
    "Member",
    "MembershipStatus",
]
