"""File name validation utilities for document uploads"""

import os
import re
from typing import Optional, Tuple


# Executables and scripts never belong in a document upload
_EXECUTABLE_EXTENSION = re.compile(r"\.(bat|cmd|com|exe|scr|vbs|js|jar|php|asp|jsp|sh|ps1)$", re.IGNORECASE)
_PATH_TRAVERSAL = re.compile(r"\.\.+")


def get_file_extension(filename: str) -> str:
    """Lower-case extension without the dot, '' when there is none

    Example:
        >>> get_file_extension('Scan.PDF')
        'pdf'
        >>> get_file_extension('README')
        ''
    """
    _, ext = os.path.splitext(filename or "")
    return ext[1:].lower()


def validate_filename(filename: str) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded file name

    Args:
        filename: Original filename

    Returns:
        Tuple of (is_valid, error_message)

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal or directory separators
    - No executable or script extension
    - No null bytes or control characters

    Example:
        >>> validate_filename('id.pdf')
        (True, None)
        >>> validate_filename('../../etc/passwd')
        (False, 'Filename contains suspicious patterns')
        >>> validate_filename('')
        (False, 'Filename cannot be empty')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if (
        _PATH_TRAVERSAL.search(filename)
        or _EXECUTABLE_EXTENSION.search(filename)
        or '/' in filename
        or '\\' in filename
    ):
        return False, "Filename contains suspicious patterns"

    # Check for null bytes
    if '\x00' in filename:
        return False, "Filename contains null bytes"

    # Check for control characters
    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None

