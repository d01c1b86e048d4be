# app/auth/middleware.py
"""
FastAPI authentication dependencies using bearer API keys.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from dataclasses import dataclass

from . import config

security = HTTPBearer(auto_error=False)


@dataclass
class AuthResult:
    """Result of authentication check."""
    authenticated: bool
    error: Optional[str] = None


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthResult:
    """
    Dependency that requires a valid API key.

    With no keys configured every request is let through.

    Raises:
        HTTPException 401: If the key is missing or unknown
    """
    if not config.is_auth_configured():
        return AuthResult(authenticated=False, error="Authentication disabled")

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if config.validate_api_key(credentials.credentials):
        return AuthResult(authenticated=True)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
        headers={"WWW-Authenticate": "Bearer"}
    )


async def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthResult:
    """
    Dependency that checks auth without requiring it.
    Returns AuthResult with authenticated=True/False.
    """
    if not credentials:
        return AuthResult(authenticated=False, error="No credentials provided")
    if config.validate_api_key(credentials.credentials):
        return AuthResult(authenticated=True)
    return AuthResult(authenticated=False, error="Invalid API key")
