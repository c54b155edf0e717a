"""Session token verification for FastAPI.

Sessions are issued by the identity provider and arrive as a signed JWT in
the session cookie (``__session``) or as a bearer token. This module only
verifies them and turns them into a ``Principal``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from statesync.core.config import get_settings

logger = structlog.get_logger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated user on whose behalf storage operations run."""

    principal_id: str
    display_name: str | None = None
    claims: dict = field(default_factory=dict)


def decode_session_token(token: str) -> Principal:
    """Verify a session JWT and return its principal.

    Raises ``pyjwt.InvalidTokenError`` (or a subclass) on any validation
    failure, including a missing ``sub`` claim.
    """
    settings = get_settings()
    payload = pyjwt.decode(
        token,
        settings.session_secret,
        algorithms=[settings.session_algorithm],
        options={"require": ["sub", "exp", "iat"]},
    )

    sub = payload.get("sub")
    if not sub:
        raise pyjwt.InvalidTokenError("Token missing sub claim")

    return Principal(principal_id=sub, display_name=payload.get("name"), claims=payload)


def issue_session_token(
    principal_id: str,
    display_name: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Sign a session token. Used by tests and local development only."""
    settings = get_settings()
    now = datetime.now(UTC)
    claims = {"sub": principal_id, "iat": now, "exp": now + expires_in}
    if display_name:
        claims["name"] = display_name
    return pyjwt.encode(claims, settings.session_secret, algorithm=settings.session_algorithm)


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name)


async def get_optional_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Principal | None:
    """FastAPI dependency returning the session principal, or None.

    Actions use this variant: a missing principal is reported inside the
    action result ("User not found"), not as an HTTP error.
    """
    token = _extract_token(request, credentials)
    if not token:
        return None

    try:
        principal = decode_session_token(token)
    except pyjwt.InvalidTokenError as exc:
        logger.info("session_token_rejected", reason=str(exc), error_type=type(exc).__name__)
        return None

    request.state.user_id = principal.principal_id
    return principal


async def require_principal(
    principal: Principal | None = Depends(get_optional_principal),
) -> Principal:
    """FastAPI dependency that rejects unauthenticated requests with 401.

    Usage::

        @router.get("/protected")
        async def protected(principal: Principal = Depends(require_principal)):
            ...
    """
    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal
