"""Save-and-resume code service.

An applicant who leaves an application part-way asks for a 6-digit code
sent to their email, and exchanges it for a short-lived session token.

Verification rules:
- The most recent unconsumed code for (application, email) is the active one;
  issuing a code retires earlier ones
- No active code, or a wrong code          -> INVALID
- Active code past its expiry              -> EXPIRED
- Attempt counter already at the maximum   -> TOO_MANY_ATTEMPTS (checked
  before incrementing, so three wrong codes lock out a fourth correct one)
- Every attempt that reaches the active code increments the counter, expired or not
- Success consumes the code and returns a stateless session token
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from applications.errors import OtpError
from auth.jwt import create_resume_session_token
from config import settings
from models.base import as_utc, utcnow
from models.save_resume_token import SaveResumeToken
from observability.metrics import otp_verifications_total

logger = logging.getLogger(__name__)

CODE_DIGITS = 6


@dataclass
class IssuedCode:
    code: str
    expires_at: datetime


@dataclass
class VerifiedSession:
    session_token: str
    application_id: str
    application_type: str
    email: str


def _new_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}"


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def generate_code(
    db: Session,
    application_type: str,
    application_id: str,
    email: str,
    now: Optional[datetime] = None,
) -> IssuedCode:
    """Issue a new 6-digit code valid for OTP_TTL_MINUTES.

    Earlier unconsumed codes for the same application and email are retired,
    so only the newest code can ever be exchanged. The caller commits and
    dispatches the email.
    """
    now = now or utcnow()
    email = _normalize_email(email)
    (
        db.query(SaveResumeToken)
        .filter(
            SaveResumeToken.application_id == application_id,
            SaveResumeToken.email == email,
            SaveResumeToken.consumed_at.is_(None),
        )
        .update({SaveResumeToken.consumed_at: now})
    )

    token = SaveResumeToken(
        application_type=getattr(application_type, "value", application_type),
        application_id=application_id,
        email=email,
        code=_new_code(),
        attempts=0,
        expires_at=now + timedelta(minutes=settings.OTP_TTL_MINUTES),
        created_at=now,
    )
    db.add(token)
    db.flush()

    logger.info(f"Issued resume code for application {application_id}")
    return IssuedCode(code=token.code, expires_at=token.expires_at)


def _active_token(db: Session, application_id: str, email: str) -> Optional[SaveResumeToken]:
    return (
        db.query(SaveResumeToken)
        .filter(
            SaveResumeToken.application_id == application_id,
            SaveResumeToken.email == email,
            SaveResumeToken.consumed_at.is_(None),
        )
        .order_by(SaveResumeToken.created_at.desc())
        .with_for_update()
        .first()
    )


def verify_code(
    db: Session,
    application_id: str,
    email: str,
    code: str,
    now: Optional[datetime] = None,
) -> VerifiedSession:
    """Check a code and exchange it for a resume session token.

    Failed attempts still increment the counter, so the caller must commit
    even when OtpError is raised.

    Raises:
        OtpError: INVALID, EXPIRED or TOO_MANY_ATTEMPTS
    """
    now = now or utcnow()
    email = _normalize_email(email)

    token = _active_token(db, application_id, email)
    if token is None:
        otp_verifications_total.labels(outcome="invalid").inc()
        raise OtpError("INVALID")

    if now > as_utc(token.expires_at):
        token.attempts += 1
        db.flush()
        otp_verifications_total.labels(outcome="expired").inc()
        raise OtpError("EXPIRED")

    if token.attempts >= settings.OTP_MAX_ATTEMPTS:
        otp_verifications_total.labels(outcome="too_many_attempts").inc()
        raise OtpError("TOO_MANY_ATTEMPTS")

    token.attempts += 1

    if not secrets.compare_digest(token.code.encode(), (code or "").strip().encode()):
        db.flush()
        otp_verifications_total.labels(outcome="invalid").inc()
        logger.info(
            f"Wrong resume code for application {application_id} "
            f"(attempt {token.attempts}/{settings.OTP_MAX_ATTEMPTS})"
        )
        raise OtpError("INVALID")

    token.consumed_at = now
    db.flush()

    otp_verifications_total.labels(outcome="verified").inc()
    return VerifiedSession(
        session_token=create_resume_session_token(
            application_id, email, token.application_type, issued_at=now
        ),
        application_id=application_id,
        application_type=token.application_type,
        email=email,
    )
