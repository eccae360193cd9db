"""Documents domain module - document catalogue, upload integrity, required checklists"""

from .document_types import (
    DocumentType,
    DocumentCategory,
    DocumentPolicy,
    DOCUMENT_POLICIES,
    SINGLETON_DOCUMENT_TYPES,
    police_clearance_tag,
    resolve_document_type,
    get_policy,
    is_singleton,
    document_catalogue,
)
from .checklist import ChecklistItem, ChecklistPhase, build_checklist, missing_items
from .requirements import (
    RequirementCheck,
    RequirementContext,
    validate_document_requirements,
    MISSING_DOCUMENTS_REASON,
)
from .file_integrity import (
    FileValidationResult,
    FileInfo,
    validate_file,
    detect_content_type,
    compute_content_hash,
)
from .validation import get_file_extension, validate_filename

__all__ = [
    "DocumentType",
    "DocumentCategory",
    "DocumentPolicy",
    "DOCUMENT_POLICIES",
    "SINGLETON_DOCUMENT_TYPES",
    "police_clearance_tag",
    "resolve_document_type",
    "get_policy",
    "is_singleton",
    "document_catalogue",
    "ChecklistItem",
    "ChecklistPhase",
    "build_checklist",
    "missing_items",
    "RequirementCheck",
    "RequirementContext",
    "validate_document_requirements",
    "MISSING_DOCUMENTS_REASON",
    "FileValidationResult",
    "FileInfo",
    "validate_file",
    "detect_content_type",
    "compute_content_hash",
    "get_file_extension",
    "validate_filename",
]
