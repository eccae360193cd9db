"""Content-level validation of uploaded documents

Determines the true media type of an upload from its leading bytes, applies
the per-document-type policy, checks the structure of PDF/JPEG/PNG files and
computes the SHA-256 content hash used for system-wide deduplication.

The validator is pure: callers fetch the bytes and persist the outcome.
Every failing check is reported, not only the first.
"""

import hashlib
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .document_types import get_policy
from .validation import get_file_extension, validate_filename


MIN_FILE_SIZE = 100
LARGE_FILE_WARNING_BYTES = 5 * 1024 * 1024

PDF_MAGIC = b"%PDF"
JPEG_MAGIC = b"\xff\xd8\xff"
JPEG_END_MARKER = b"\xff\xd9"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGIC = b"PK\x03\x04"

MIME_PDF = "application/pdf"
MIME_JPEG = "image/jpeg"
MIME_PNG = "image/png"
MIME_SVG = "image/svg+xml"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Declared types accepted as naming the same content as a sniffed type
_EQUIVALENT_DECLARED_TYPES = {
    MIME_PDF: {MIME_PDF},
    MIME_JPEG: {MIME_JPEG, "image/jpg"},
    MIME_PNG: {MIME_PNG},
    MIME_SVG: {MIME_SVG},
    MIME_DOC: {MIME_DOC},
    MIME_DOCX: {MIME_DOCX},
}

_SVG_ROOT = re.compile(rb"<svg[\s>]", re.IGNORECASE)
_PDF_VERSION = re.compile(rb"%PDF-(\d+\.\d+)")


@dataclass
class FileInfo:
    hash: str
    size: int
    extension: str
    detected_type: Optional[str] = None

    def to_dict(self):
        return {
            "hash": self.hash,
            "detectedType": self.detected_type,
            "size": self.size,
            "extension": self.extension,
        }


@dataclass
class FileValidationResult:
    """Outcome of validating one upload.

    Attributes:
        is_valid: True when ``errors`` is empty
        errors: Every failed check, in evaluation order
        warnings: Non-blocking findings
        file_info: Hash, sniffed type, size and extension of the bytes
    """
    file_info: FileInfo
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self):
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "fileInfo": self.file_info.to_dict(),
        }


def compute_content_hash(content: bytes) -> str:
    """SHA-256 hex digest of the exact bytes."""
    return hashlib.sha256(content).hexdigest()


def _looks_like_svg(content: bytes) -> bool:
    head = content[:2048].lstrip(b"\xef\xbb\xbf \t\r\n")
    if not head.startswith(b"<"):
        return False
    # Root element must be <svg>, optionally after an XML declaration/doctype/comments
    if not (head.startswith(b"<?xml") or head.startswith(b"<!") or head[:4].lower() == b"<svg"):
        return False
    return bool(_SVG_ROOT.search(head))


def detect_content_type(content: bytes) -> Optional[str]:
    """Sniff the media type from magic numbers

    Returns:
        MIME type string, or None when the content is not recognised

    Example:
        >>> detect_content_type(b"%PDF-1.7 ...")
        'application/pdf'
        >>> detect_content_type(b"plain text") is None
        True
    """
    if content.startswith(PDF_MAGIC):
        return MIME_PDF
    if content.startswith(JPEG_MAGIC):
        return MIME_JPEG
    if content.startswith(PNG_MAGIC):
        return MIME_PNG
    if content.startswith(OLE2_MAGIC):
        return MIME_DOC
    if content.startswith(ZIP_MAGIC):
        return MIME_DOCX
    if _looks_like_svg(content):
        return MIME_SVG
    return None


def declared_type_matches(declared_mime_type: str, detected_type: str) -> bool:
    return declared_mime_type in _EQUIVALENT_DECLARED_TYPES.get(detected_type, {detected_type})


def _check_size(content: bytes, max_size: Optional[int], result: FileValidationResult) -> None:
    size = len(content)
    if max_size is not None and size > max_size:
        result.errors.append(
            f"File size ({size / 1024 / 1024:.1f}MB) exceeds maximum allowed size "
            f"of {max_size / 1024 / 1024:.1f}MB"
        )
    if size < MIN_FILE_SIZE:
        result.errors.append("File is too small or appears to be empty")
    if size > LARGE_FILE_WARNING_BYTES:
        result.warnings.append("Large file detected - upload may take longer")


def _check_pdf_structure(content: bytes, result: FileValidationResult) -> None:
    if not content.startswith(PDF_MAGIC):
        result.errors.append("Invalid PDF file structure")
        return

    if b"%%EOF" not in content[-32:]:
        result.warnings.append("PDF file may be corrupted - missing EOF marker")

    match = _PDF_VERSION.match(content[:20])
    if match:
        version = float(match.group(1))
        if version > 2.0:
            result.warnings.append(f"PDF version {version} may not be compatible with all viewers")


def _check_image_structure(content: bytes, declared_mime_type: str, result: FileValidationResult) -> None:
    if declared_mime_type in ("image/jpeg", "image/jpg"):
        if not content.startswith(JPEG_MAGIC):
            result.errors.append("Invalid JPEG file structure")
        if not content.endswith(JPEG_END_MARKER):
            result.warnings.append("JPEG file may be corrupted - missing end marker")
    elif declared_mime_type == MIME_PNG:
        if not content.startswith(PNG_MAGIC):
            result.errors.append("Invalid PNG file structure")


def validate_file(
    content: bytes,
    file_name: str,
    declared_mime_type: str,
    doc_type: str,
) -> FileValidationResult:
    """Validate an uploaded file against the policy for its document type.

    Args:
        content: Exact uploaded bytes
        file_name: Client-supplied file name
        declared_mime_type: Client-supplied content type
        doc_type: Target document type tag

    Returns:
        FileValidationResult with all errors and warnings accumulated and
        ``file_info.hash`` set to the SHA-256 hex of ``content``

    Example:
        >>> result = validate_file(pdf_bytes, "id.pdf", "application/pdf", "id_or_passport")
        >>> result.is_valid, result.file_info.detected_type
        (True, 'application/pdf')
    """
    declared_mime_type = (declared_mime_type or "").lower()
    extension = get_file_extension(file_name)
    detected_type = detect_content_type(content)

    result = FileValidationResult(
        file_info=FileInfo(
            hash=compute_content_hash(content),
            size=len(content),
            extension=extension,
            detected_type=detected_type,
        )
    )

    policy = get_policy(doc_type)
    if policy is None:
        result.errors.append(f"Unknown document type '{doc_type}'")

    _check_size(content, policy.max_size_bytes if policy else None, result)

    if policy is not None:
        if f".{extension}" not in policy.allowed_extensions:
            result.errors.append(
                f"File extension '{extension}' not allowed. "
                f"Allowed: {', '.join(policy.allowed_extensions)}"
            )
        allowed_mime_types = sorted(policy.allowed_mime_types)
        if declared_mime_type not in policy.allowed_mime_types:
            result.errors.append(
                f"File type '{declared_mime_type}' not allowed. "
                f"Allowed: {', '.join(allowed_mime_types)}"
            )

    if detected_type is None:
        result.errors.append("Could not determine file type from content")
    else:
        if policy is not None and detected_type not in policy.allowed_mime_types:
            result.errors.append(
                f"Detected file type '{detected_type}' is not allowed for {policy.label}"
            )
        if not declared_type_matches(declared_mime_type, detected_type):
            result.errors.append(
                f"File content doesn't match declared type. "
                f"Detected: {detected_type}, Declared: {declared_mime_type}"
            )

    if declared_mime_type == MIME_PDF:
        _check_pdf_structure(content, result)
    elif declared_mime_type.startswith("image/"):
        _check_image_structure(content, declared_mime_type, result)

    filename_ok, filename_error = validate_filename(file_name)
    if not filename_ok:
        result.errors.append(filename_error)

    return result
