"""JWT token generation and validation

Two kinds of bearer token share one signing key and are told apart by the
``type`` claim:

Staff Access Token:
- sub: Staff user id
- email: Staff email address
- role: Staff role ("admin" | "super_admin" | "member_manager" | "staff")
- type: "staff"
- iat / exp: Issued-at and expiry (STAFF_TOKEN_EXPIRE_MINUTES)

Resume Session Token (issued after a save-and-resume code is verified):
- sub: Human-readable application id, e.g. "IND-APP-2025-0001"
- email: Email address the code was sent to
- application_type: "individual" | "organization"
- type: "resume_session"
- iat / exp: Issued-at and expiry (RESUME_SESSION_EXPIRE_MINUTES)

Security Properties:
- Algorithm: HS256 (HMAC-SHA256 symmetric signing)
- Secret: JWT_SECRET setting
- Stateless validation (no database lookup required)
- Resume sessions cannot be revoked before expiry; keep the TTL short
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from config import settings


STAFF_TOKEN_TYPE = "staff"
RESUME_SESSION_TOKEN_TYPE = "resume_session"


def _encode(claims: Dict[str, Any], expire_minutes: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        **claims,
        'iat': int(now.timestamp()),  # Issued at
        'exp': int((now + timedelta(minutes=expire_minutes)).timestamp()),  # Expiration
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_staff_token(user_id: str, email: str, role: str) -> str:
    """Create a JWT access token for a staff user.

    Args:
        user_id: Staff user id
        email: Staff email address
        role: Staff role

    Returns:
        str: Signed JWT token
    """
    return _encode(
        {'sub': str(user_id), 'email': email, 'role': role, 'type': STAFF_TOKEN_TYPE},
        settings.STAFF_TOKEN_EXPIRE_MINUTES,
    )


def create_resume_session_token(
    application_id: str,
    email: str,
    application_type: str,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create the stateless session token returned by a successful code check.

    Args:
        application_id: Human-readable application id
        email: Email address the code was delivered to
        application_type: "individual" or "organization"
        issued_at: Issue time (defaults to now)

    Returns:
        str: Signed JWT token
    """
    return _encode(
        {
            'sub': application_id,
            'email': email,
            'application_type': application_type,
            'type': RESUME_SESSION_TOKEN_TYPE,
        },
        settings.RESUME_SESSION_EXPIRE_MINUTES,
        now=issued_at,
    )


def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string
        expected_type: Required value of the ``type`` claim, if any

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, tampered or of the wrong type
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")

    if expected_type and payload.get('type') != expected_type:
        raise jwt.InvalidTokenError(f"Invalid token: expected {expected_type} token")

    return payload
