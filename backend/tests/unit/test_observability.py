"""Unit tests for request correlation and structured logging"""

import json
import logging

from observability.logging_config import JSONFormatter
from observability.request_id import generate_request_id, resolve_request_id


class TestResolveRequestId:
    def test_reuses_well_formed_header(self):
        assert resolve_request_id("gateway-7f3a2c1d") == "gateway-7f3a2c1d"

    def test_rejects_short_or_unsafe_values(self):
        for value in ("abc", "bad id with spaces", "line\nbreak-injected", "x" * 200):
            assert resolve_request_id(value) != value

    def test_generates_uuid_when_missing(self):
        assert len(resolve_request_id(None)) == 36

    def test_generated_ids_are_unique(self):
        assert generate_request_id() != generate_request_id()


class TestJSONFormatter:
    def make_record(self, **extra):
        record = logging.LogRecord(
            name="applications.documents",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Stored %s",
            args=("o_level_cert",),
            exc_info=None,
        )
        record.request_id = "req-12345678"
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_core_fields(self):
        data = json.loads(JSONFormatter().format(self.make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "applications.documents"
        assert data["request_id"] == "req-12345678"
        assert data["message"] == "Stored o_level_cert"
        assert data["timestamp"].endswith("Z")

    def test_context_fields_copied(self):
        data = json.loads(JSONFormatter().format(self.make_record(
            application_id="IND-APP-2025-0001", doc_type="o_level_cert", unrelated="dropped",
        )))

        assert data["application_id"] == "IND-APP-2025-0001"
        assert data["doc_type"] == "o_level_cert"
        assert "unrelated" not in data
