"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating staff JWT tokens from requests
- Enforcing role-based access control on staff routes
- Validating the resume session token on the applicant resume endpoint

Usage:
    @router.get("/applications")
    def list_applications(staff: StaffPrincipal = Depends(get_current_staff)):
        ...

    @router.post("/applications/{application_id}/decide")
    def decide(staff: StaffPrincipal = Depends(require_roles(ADMIN_ROLES))):
        ...
"""

from dataclasses import dataclass
from typing import Annotated, Callable, Dict, Any, Iterable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .jwt import decode_token, RESUME_SESSION_TOKEN_TYPE, STAFF_TOKEN_TYPE
from .roles import STAFF_ROLES, has_any_role


# HTTP Bearer token security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class StaffPrincipal:
    """Authenticated staff user, built from token claims."""
    id: str
    email: str
    role: str


@dataclass(frozen=True)
class ResumeSession:
    """Applicant session unlocked by a verified save-and-resume code."""
    application_id: str
    email: str
    application_type: str


def _decode_bearer(token: str, expected_type: str) -> Dict[str, Any]:
    try:
        return decode_token(token, expected_type=expected_type)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_staff(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> StaffPrincipal:
    """Extract and validate a staff JWT token.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Validates token signature, expiration and token type
    3. Checks the role claim is a staff role

    Raises:
        HTTPException 401: If token is missing, invalid, expired or lacks a subject
        HTTPException 403: If the role claim is not a staff role
    """
    payload = _decode_bearer(credentials.credentials, STAFF_TOKEN_TYPE)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    role = payload.get("role", "")
    if not has_any_role(role, STAFF_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )

    return StaffPrincipal(id=user_id, email=payload.get("email", ""), role=role)


def require_roles(allowed_roles: Iterable) -> Callable:
    """Create a dependency that restricts a route to the given roles.

    Args:
        allowed_roles: Roles allowed access

    Returns:
        Callable: FastAPI dependency returning the StaffPrincipal

    Example:
        @router.post("/applications/{application_id}/decide")
        def decide(staff: StaffPrincipal = Depends(require_roles(ADMIN_ROLES))):
            ...
    """
    allowed_roles = frozenset(allowed_roles)

    def role_dependency(staff: StaffPrincipal = Depends(get_current_staff)) -> StaffPrincipal:
        if not has_any_role(staff.role, allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    "Insufficient permissions. Required role: "
                    f"{', '.join(sorted(r.value for r in allowed_roles))}"
                ),
            )
        return staff

    return role_dependency


def require_resume_session(
    application_id: str,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> ResumeSession:
    """Validate a resume session token for the application in the path.

    Raises:
        HTTPException 401: If the token is invalid or expired
        HTTPException 403: If the token was issued for another application
    """
    payload = _decode_bearer(credentials.credentials, RESUME_SESSION_TOKEN_TYPE)

    if payload.get("sub") != application_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Session token does not grant access to this application",
        )

    return ResumeSession(
        application_id=application_id,
        email=payload.get("email", ""),
        application_type=payload.get("application_type", ""),
    )


# Type alias for dependency injection
CurrentStaff = Annotated[StaffPrincipal, Depends(get_current_staff)]
