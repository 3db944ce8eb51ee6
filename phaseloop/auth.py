"""
Optional API key check for the write endpoints.

When AUTH_API_KEY is unset every request is allowed, which is how the
editor runs on a local machine. When it is set, curation, preview, share
and manual refresh require a matching X-API-Key header.
"""

import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from .config import config

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(api_key: str | None = Security(API_KEY_HEADER)) -> str:
    """
    Verify the X-API-Key header against AUTH_API_KEY.

    Returns:
        The accepted key, or "" when authentication is disabled

    Raises:
        HTTPException: 401 if a key is required and missing or wrong
    """
    configured_key = config.AUTH_API_KEY
    if not configured_key:
        return ""

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    if not secrets.compare_digest(api_key.encode(), configured_key.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return api_key
