from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .session import GUEST_COOKIE, GUEST_COOKIE_MAX_AGE, SessionProvider
from .settings import get_settings

_security = HTTPBasic(auto_error=False)

USER_HEADER = "X-User-Id"


def _basic_auth_user(creds: Optional[HTTPBasicCredentials]) -> Optional[str]:
    """
    Enforce HTTP Basic authentication when enabled.

    Returns:
        The authenticated username, or None when basic auth is disabled.

    Raises:
        HTTPException(401) if credentials are missing or invalid.
    """
    settings = get_settings()
    if not settings.enable_basic_auth:
        return None

    if creds is None or not creds.username or creds.password is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    expected_user = settings.basic_auth_username
    expected_pass = settings.basic_auth_password
    if expected_user is None or expected_pass is None:
        # Misconfiguration: auth enabled but username/password not provided
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Server authentication not configured",
            headers={"WWW-Authenticate": "Basic"},
        )

    user_ok = secrets.compare_digest(creds.username.encode(), expected_user.encode())
    pass_ok = secrets.compare_digest(creds.password.encode(), expected_pass.encode())
    if not (user_ok and pass_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return creds.username


# PUBLIC_INTERFACE
def get_session(
    request: Request,
    response: Response,
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
) -> SessionProvider:
    """
    Build the SessionProvider for a request.

    Owner resolution:
    - Basic auth enabled: the verified username (401 otherwise).
    - Otherwise an upstream-authenticated X-User-Id header, if present.
    - Otherwise the guest id cookie, minting and setting a new one when absent.
    """
    authenticated = _basic_auth_user(creds)
    if authenticated is None:
        header = request.headers.get(USER_HEADER, "").strip()
        authenticated = header or None

    def _persist(guest_id: str) -> None:
        response.set_cookie(
            GUEST_COOKIE,
            guest_id,
            max_age=GUEST_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )

    return SessionProvider(authenticated, request.cookies.get(GUEST_COOKIE), _persist)


# PUBLIC_INTERFACE
def get_owner_id(session: SessionProvider = Depends(get_session)) -> str:
    """FastAPI dependency returning the owner id every todo/folder operation is scoped to."""
    return session.ensure_owner_id()
