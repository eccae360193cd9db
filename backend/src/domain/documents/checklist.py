"""Required-document checklist generator

One generator serves both moments an application's documents are checked:
at application start (eligibility phase, organizations only) and at
submission. The two phases differ only in labels and ordering; the doc-type
tags each entry is satisfied by are identical, so an organization whose
eligibility checklist is complete also passes the submission checklist.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from models.application import ApplicationType

from .document_types import DocumentType, police_clearance_tag


class ChecklistPhase(str, Enum):
    ELIGIBILITY = "eligibility"
    SUBMISSION = "submission"


@dataclass(frozen=True)
class ChecklistItem:
    """One required entry; satisfied when any of ``doc_types`` is present."""
    doc_types: Tuple[str, ...]
    label: str

    def is_satisfied(self, present: Iterable[str]) -> bool:
        present = set(present)
        return any(doc_type in present for doc_type in self.doc_types)


def _item(label: str, *doc_types) -> ChecklistItem:
    return ChecklistItem(
        doc_types=tuple(getattr(t, "value", t) for t in doc_types),
        label=label,
    )


_INCORPORATION_OR_PARTNERSHIP = (
    DocumentType.CERTIFICATE_INCORPORATION,
    DocumentType.PARTNERSHIP_AGREEMENT,
)
_ANNUAL_RETURNS = (
    DocumentType.ANNUAL_RETURN_1,
    DocumentType.ANNUAL_RETURN_2,
    DocumentType.ANNUAL_RETURN_3,
)


def _individual_items(mature_entry: Optional[bool]) -> List[ChecklistItem]:
    items = []
    # Only an explicit False adds the qualification entry
    if mature_entry is False:
        items.append(_item(
            "A-Level certificate OR equivalent qualification evidence",
            DocumentType.A_LEVEL_CERT,
            DocumentType.EQUIVALENT_CERT,
        ))
    items.extend([
        _item("O-Level Certificate", DocumentType.O_LEVEL_CERT),
        _item("ID or Passport", DocumentType.ID_OR_PASSPORT),
        _item("Birth Certificate", DocumentType.BIRTH_CERTIFICATE),
    ])
    return items


def _organization_eligibility_items(director_names: Sequence[str]) -> List[ChecklistItem]:
    items = [
        _item("Trust Account letter from Commercial Bank", DocumentType.BANK_TRUST_LETTER),
        _item("Certificate of Incorporation OR Partnership Agreement", *_INCORPORATION_OR_PARTNERSHIP),
    ]
    items.extend(
        _item(f"Annual Return Form {year}", doc_type)
        for year, doc_type in enumerate(_ANNUAL_RETURNS, start=1)
    )
    items.extend([
        _item("CR6 Form (Director Proof)", DocumentType.CR6),
        _item("Certified CR11 Forms", DocumentType.CR11),
        _item("Tax Clearance Certificate", DocumentType.TAX_CLEARANCE),
    ])
    items.extend(
        _item(f"Police Clearance letter for {name}", police_clearance_tag(index))
        for index, name in enumerate(director_names, start=1)
    )
    return items


def _organization_submission_items(director_count: int) -> List[ChecklistItem]:
    items = [
        _item("Certificate of Incorporation OR Partnership Agreement", *_INCORPORATION_OR_PARTNERSHIP),
        _item("Bank Trust Account Letter", DocumentType.BANK_TRUST_LETTER),
        _item("CR6 Form", DocumentType.CR6),
        _item("CR11 Form", DocumentType.CR11),
        _item("Tax Clearance Certificate", DocumentType.TAX_CLEARANCE),
    ]
    items.extend(
        _item(f"Annual Return Form {year}", doc_type)
        for year, doc_type in enumerate(_ANNUAL_RETURNS, start=1)
    )
    items.extend(
        _item(f"Police Clearance for Director {index}", police_clearance_tag(index))
        for index in range(1, director_count + 1)
    )
    return items


def build_checklist(
    application_type: ApplicationType,
    phase: ChecklistPhase,
    mature_entry: Optional[bool] = None,
    director_names: Optional[Sequence[str]] = None,
    director_count: Optional[int] = None,
) -> List[ChecklistItem]:
    """Build the ordered list of required documents.

    Args:
        application_type: Individual or organization
        phase: ELIGIBILITY labels entries for the start form (per-director
            police clearance named after the director), SUBMISSION labels
            them for the submit check (per-director by index)
        mature_entry: Individual only; False adds the A-Level/equivalent entry
        director_names: Organization eligibility phase only
        director_count: Organization submission phase only; defaults to 1

    Returns:
        Ordered checklist items

    Example:
        >>> [i.label for i in build_checklist(
        ...     ApplicationType.INDIVIDUAL, ChecklistPhase.SUBMISSION, mature_entry=True)]
        ['O-Level Certificate', 'ID or Passport', 'Birth Certificate']
    """
    if application_type == ApplicationType.INDIVIDUAL:
        return _individual_items(mature_entry)

    if phase == ChecklistPhase.ELIGIBILITY:
        return _organization_eligibility_items(director_names or [])

    if not director_count or director_count < 1:
        director_count = 1
    return _organization_submission_items(director_count)


def missing_items(checklist: Iterable[ChecklistItem], present: Iterable[str]) -> List[ChecklistItem]:
    """Checklist entries not satisfied by the present doc-type tags, in order."""
    present = set(present)
    return [item for item in checklist if not item.is_satisfied(present)]
