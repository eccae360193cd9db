"""Tests for save-and-resume code issue and verification"""

from datetime import datetime, timedelta, timezone

import pytest

from applications.errors import OtpError
from auth.jwt import decode_token
from models import SaveResumeToken
from resume_tokens.service import generate_code, verify_code


APPLICATION_ID = "IND-APP-2025-0001"
EMAIL = "tendai.moyo@example.com"
ISSUED_AT = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _wrong(code: str) -> str:
    return f"{(int(code) + 1) % 1000000:06d}"


class TestGenerateCode:
    def test_six_digit_code_with_expiry(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)

        assert len(issued.code) == 6
        assert issued.code.isdigit()
        assert issued.expires_at == ISSUED_AT + timedelta(minutes=30)


class TestVerifyCode:
    def test_success(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)

        session = verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT + timedelta(minutes=5))

        assert session.application_id == APPLICATION_ID
        assert session.application_type == "individual"
        assert session.session_token

    def test_email_is_normalized(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, " Tendai.Moyo@Example.com ", now=ISSUED_AT)

        session = verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT)

        assert session.email == EMAIL

    def test_expired(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)

        with pytest.raises(OtpError) as exc_info:
            verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT + timedelta(minutes=31))

        assert exc_info.value.code == "EXPIRED"
        assert exc_info.value.status_code == 401

    def test_expired_attempt_is_counted(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)

        with pytest.raises(OtpError):
            verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT + timedelta(minutes=31))

        token = db_session.query(SaveResumeToken).filter_by(application_id=APPLICATION_ID).one()
        assert token.attempts == 1

    def test_new_code_retires_earlier_codes(self, db_session):
        first = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)
        second = generate_code(
            db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT + timedelta(minutes=1)
        )
        verify_code(db_session, APPLICATION_ID, EMAIL, second.code, now=ISSUED_AT + timedelta(minutes=2))

        with pytest.raises(OtpError) as exc_info:
            verify_code(db_session, APPLICATION_ID, EMAIL, first.code, now=ISSUED_AT + timedelta(minutes=3))

        assert exc_info.value.code == "INVALID"
        tokens = db_session.query(SaveResumeToken).filter_by(application_id=APPLICATION_ID).all()
        assert all(token.consumed_at is not None for token in tokens)

    def test_wrong_email(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)

        with pytest.raises(OtpError) as exc_info:
            verify_code(db_session, APPLICATION_ID, "other@example.com", issued.code, now=ISSUED_AT)

        assert exc_info.value.code == "INVALID"

    def test_attempt_budget_includes_the_successful_attempt(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)
        for _ in range(2):
            with pytest.raises(OtpError):
                verify_code(db_session, APPLICATION_ID, EMAIL, _wrong(issued.code), now=ISSUED_AT)

        session = verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT)

        assert session.application_id == APPLICATION_ID

    def test_lockout_after_max_attempts(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL, now=ISSUED_AT)
        for _ in range(3):
            with pytest.raises(OtpError):
                verify_code(db_session, APPLICATION_ID, EMAIL, _wrong(issued.code), now=ISSUED_AT)

        with pytest.raises(OtpError) as exc_info:
            verify_code(db_session, APPLICATION_ID, EMAIL, issued.code, now=ISSUED_AT)

        assert exc_info.value.code == "TOO_MANY_ATTEMPTS"
        assert exc_info.value.status_code == 429

    def test_session_token_claims(self, db_session):
        issued = generate_code(db_session, "individual", APPLICATION_ID, EMAIL)

        session = verify_code(db_session, APPLICATION_ID, EMAIL, issued.code)
        claims = decode_token(session.session_token)

        assert claims["sub"] == APPLICATION_ID
        assert claims["email"] == EMAIL
