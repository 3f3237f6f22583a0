"""
API authentication.

A single shared bearer token, configured with DAYBOOK_API_TOKEN (or passed to
create_app). When no token is configured every request is allowed and a
warning is logged.

Token extraction order:
1. Authorization: Bearer <token> header
2. X-API-Token header

Usage:
    from daybook.api.auth import require_auth

    @router.get("/protected", dependencies=[Depends(require_auth)])
    def protected_endpoint(): ...
"""

import logging
import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


def _get_token_from_request(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]

    x_token = request.headers.get("X-API-Token")
    if x_token:
        return x_token

    return None


async def require_auth(
    request: Request, credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> str:
    """
    Dependency that requires the configured bearer token.

    Returns the validated token, or "auth_disabled" when no token is
    configured. Raises HTTPException 401 on a missing or wrong token.
    """
    expected_token = getattr(request.app.state, "api_token", None)
    if not expected_token:
        logger.warning("DAYBOOK_API_TOKEN not set - authentication disabled")
        return "auth_disabled"

    provided_token = _get_token_from_request(request)
    if not provided_token:
        logger.warning(f"Auth failed: no token provided for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Bearer token in Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(provided_token, expected_token):
        logger.warning(f"Auth failed: invalid token for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return provided_token
