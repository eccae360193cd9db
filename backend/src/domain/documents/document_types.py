"""Document type catalogue and per-type upload policy

Every supporting document belongs to a closed set of type tags. Each tag
maps to a category and a validation policy (allowed MIME types, extensions,
maximum size). Police clearance is collected once per director, so its
stored tag carries the director index: ``police_clearance_director_2``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class DocumentType(str, Enum):
    """Closed set of supporting document tags."""
    # Individual documents
    O_LEVEL_CERT = "o_level_cert"
    A_LEVEL_CERT = "a_level_cert"
    EQUIVALENT_CERT = "equivalent_cert"
    ID_OR_PASSPORT = "id_or_passport"
    BIRTH_CERTIFICATE = "birth_certificate"
    # Organization documents
    BANK_TRUST_LETTER = "bank_trust_letter"
    CERTIFICATE_INCORPORATION = "certificate_incorporation"
    PARTNERSHIP_AGREEMENT = "partnership_agreement"
    CR6 = "cr6"
    CR11 = "cr11"
    TAX_CLEARANCE = "tax_clearance"
    ANNUAL_RETURN_1 = "annual_return_1"
    ANNUAL_RETURN_2 = "annual_return_2"
    ANNUAL_RETURN_3 = "annual_return_3"
    POLICE_CLEARANCE_DIRECTOR = "police_clearance_director"
    # Payment documents
    APPLICATION_FEE_POP = "application_fee_pop"


class DocumentCategory(str, Enum):
    EDUCATION = "education"
    IDENTITY = "identity"
    LEGAL = "legal"
    FINANCIAL = "financial"


MB = 1024 * 1024

STANDARD_MIME_TYPES: FrozenSet[str] = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/svg+xml",
})

STANDARD_EXTENSIONS: Tuple[str, ...] = (".pdf", ".jpg", ".jpeg", ".png", ".svg")


@dataclass(frozen=True)
class DocumentPolicy:
    """Upload policy for one document type.

    Attributes:
        label: Human-readable name used in upload messages
        category: Document category
        allowed_mime_types: Declared or sniffed MIME types accepted
        allowed_extensions: File name extensions accepted (with leading dot)
        max_size_bytes: Upper size bound, inclusive
    """
    label: str
    category: DocumentCategory
    allowed_mime_types: FrozenSet[str] = STANDARD_MIME_TYPES
    allowed_extensions: Tuple[str, ...] = STANDARD_EXTENSIONS
    max_size_bytes: int = 20 * MB


DOCUMENT_POLICIES: Dict[DocumentType, DocumentPolicy] = {
    DocumentType.O_LEVEL_CERT: DocumentPolicy("O-Level Certificate", DocumentCategory.EDUCATION),
    DocumentType.A_LEVEL_CERT: DocumentPolicy("A-Level Certificate", DocumentCategory.EDUCATION),
    DocumentType.EQUIVALENT_CERT: DocumentPolicy("Equivalent Certificate", DocumentCategory.EDUCATION),
    DocumentType.ID_OR_PASSPORT: DocumentPolicy("ID or Passport", DocumentCategory.IDENTITY),
    DocumentType.BIRTH_CERTIFICATE: DocumentPolicy("Birth Certificate", DocumentCategory.IDENTITY),
    DocumentType.BANK_TRUST_LETTER: DocumentPolicy("Bank Trust Letter", DocumentCategory.FINANCIAL),
    DocumentType.CERTIFICATE_INCORPORATION: DocumentPolicy("Certificate of Incorporation", DocumentCategory.LEGAL),
    DocumentType.PARTNERSHIP_AGREEMENT: DocumentPolicy("Partnership Agreement", DocumentCategory.LEGAL),
    DocumentType.CR6: DocumentPolicy("CR6 Form", DocumentCategory.LEGAL),
    DocumentType.CR11: DocumentPolicy("CR11 Form", DocumentCategory.LEGAL),
    DocumentType.TAX_CLEARANCE: DocumentPolicy("Tax Clearance", DocumentCategory.FINANCIAL),
    DocumentType.ANNUAL_RETURN_1: DocumentPolicy("Annual Return (Year 1)", DocumentCategory.FINANCIAL),
    DocumentType.ANNUAL_RETURN_2: DocumentPolicy("Annual Return (Year 2)", DocumentCategory.FINANCIAL),
    DocumentType.ANNUAL_RETURN_3: DocumentPolicy("Annual Return (Year 3)", DocumentCategory.FINANCIAL),
    DocumentType.POLICE_CLEARANCE_DIRECTOR: DocumentPolicy("Police Clearance (Director)", DocumentCategory.IDENTITY),
    DocumentType.APPLICATION_FEE_POP: DocumentPolicy("Application Fee Proof of Payment", DocumentCategory.FINANCIAL),
}

# A second upload of these types replaces the existing row instead of adding one
SINGLETON_DOCUMENT_TYPES: FrozenSet[DocumentType] = frozenset({
    DocumentType.ID_OR_PASSPORT,
    DocumentType.BIRTH_CERTIFICATE,
    DocumentType.CERTIFICATE_INCORPORATION,
})

_POLICE_CLEARANCE_TAG = re.compile(r"^police_clearance_director_([1-9]\d*)$")


def police_clearance_tag(director_index: int) -> str:
    """Stored doc-type tag for the police clearance of a director (1-based).

    Example:
        >>> police_clearance_tag(2)
        'police_clearance_director_2'
    """
    return f"{DocumentType.POLICE_CLEARANCE_DIRECTOR.value}_{director_index}"


def resolve_document_type(tag: str) -> Optional[DocumentType]:
    """Map a stored or submitted doc-type tag to its DocumentType.

    Per-director police clearance tags resolve to POLICE_CLEARANCE_DIRECTOR;
    the bare tag without an index is not accepted.

    Returns:
        The DocumentType, or None when the tag is not part of the catalogue

    Example:
        >>> resolve_document_type("cr6")
        <DocumentType.CR6: 'cr6'>
        >>> resolve_document_type("police_clearance_director_3")
        <DocumentType.POLICE_CLEARANCE_DIRECTOR: 'police_clearance_director'>
        >>> resolve_document_type("selfie") is None
        True
    """
    if _POLICE_CLEARANCE_TAG.match(tag or ""):
        return DocumentType.POLICE_CLEARANCE_DIRECTOR
    if tag == DocumentType.POLICE_CLEARANCE_DIRECTOR.value:
        return None  # must carry a director index
    try:
        return DocumentType(tag)
    except ValueError:
        return None


def get_policy(tag: str) -> Optional[DocumentPolicy]:
    doc_type = resolve_document_type(tag)
    return DOCUMENT_POLICIES.get(doc_type) if doc_type else None


def is_singleton(tag: str) -> bool:
    return resolve_document_type(tag) in SINGLETON_DOCUMENT_TYPES


def document_catalogue() -> Dict[str, list]:
    """Upload policy table grouped by category, for clients building forms.

    Example:
        >>> document_catalogue()["legal"][0]["docType"]
        'certificate_incorporation'
    """
    catalogue: Dict[str, list] = {}
    for doc_type, policy in DOCUMENT_POLICIES.items():
        catalogue.setdefault(policy.category.value, []).append({
            "docType": doc_type.value,
            "label": policy.label,
            "allowedMimeTypes": sorted(policy.allowed_mime_types),
            "allowedExtensions": list(policy.allowed_extensions),
            "maxSizeBytes": policy.max_size_bytes,
            "singleton": doc_type in SINGLETON_DOCUMENT_TYPES,
        })
    return catalogue
