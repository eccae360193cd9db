"""Unit tests for upload file name validation"""

import pytest

from domain.documents import get_file_extension, validate_filename


class TestFilenameValidation:
    """Test filename validation"""

    def test_valid_filename(self):
        assert validate_filename("o-level certificate (2009).pdf") == (True, None)

    def test_empty_filename(self):
        assert validate_filename("") == (False, "Filename cannot be empty")
        assert validate_filename("   ") == (False, "Filename cannot be empty")

    def test_too_long(self):
        is_valid, error = validate_filename("a" * 252 + ".pdf")
        assert is_valid is False
        assert error == "Filename exceeds 255 characters (got 256)"

    @pytest.mark.parametrize("name", [
        "../../etc/passwd",
        "folder/id.pdf",
        "folder\\id.pdf",
        "payload.exe",
        "script.JS",
        "run.sh",
    ])
    def test_suspicious_patterns(self, name):
        assert validate_filename(name) == (False, "Filename contains suspicious patterns")

    def test_null_byte(self):
        assert validate_filename("id\x00.pdf") == (False, "Filename contains null bytes")

    def test_control_characters(self):
        assert validate_filename("id\x07.pdf") == (False, "Filename contains control characters")


class TestFileExtension:
    @pytest.mark.parametrize("name,extension", [
        ("Scan.PDF", "pdf"),
        ("archive.tar.gz", "gz"),
        ("README", ""),
        ("", ""),
    ])
    def test_extension(self, name, extension):
        assert get_file_extension(name) == extension
