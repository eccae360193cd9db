"""Submission-time document requirement check"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from models.application import ApplicationType

from .checklist import ChecklistPhase, build_checklist, missing_items


MISSING_DOCUMENTS_REASON = "Missing required documents"


@dataclass
class RequirementContext:
    """Application facts the checklist depends on.

    Attributes:
        mature_entry: Individual mature-entry flag frozen at creation
        director_count: Number of declared directors (organization)
    """
    mature_entry: Optional[bool] = None
    director_count: Optional[int] = None


@dataclass
class RequirementCheck:
    ok: bool
    reason: Optional[str] = None
    requirements: List[str] = field(default_factory=list)

    def to_dict(self):
        data = {"ok": self.ok}
        if not self.ok:
            data["reason"] = self.reason
            data["requirements"] = list(self.requirements)
        return data


def validate_document_requirements(
    application_type: ApplicationType,
    uploaded_doc_types: Iterable[str],
    context: Optional[RequirementContext] = None,
) -> RequirementCheck:
    """List the required documents still missing from an application.

    Args:
        application_type: Individual or organization
        uploaded_doc_types: Doc-type tags of every uploaded document
        context: Mature-entry flag / director count

    Returns:
        RequirementCheck with ``ok`` true iff nothing is missing; otherwise
        ``requirements`` holds the missing display names in checklist order

    Example:
        >>> validate_document_requirements(
        ...     ApplicationType.INDIVIDUAL,
        ...     ["o_level_cert", "id_or_passport", "birth_certificate"],
        ...     RequirementContext(mature_entry=True),
        ... ).ok
        True
    """
    context = context or RequirementContext()
    checklist = build_checklist(
        application_type,
        ChecklistPhase.SUBMISSION,
        mature_entry=context.mature_entry,
        director_count=context.director_count,
    )
    missing = missing_items(checklist, uploaded_doc_types)

    if not missing:
        return RequirementCheck(ok=True)

    return RequirementCheck(
        ok=False,
        reason=MISSING_DOCUMENTS_REASON,
        requirements=[item.label for item in missing],
    )
