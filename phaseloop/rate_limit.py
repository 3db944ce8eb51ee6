"""
Per-IP rate limits for the endpoints that spend money or CPU.

Curation calls the LLM and the image search API; previews download and
re-encode images. Both are limited with slowapi. RATE_LIMIT_PER_MINUTE=0
disables the limit.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import config


def get_rate_limit() -> str:
    limit = config.RATE_LIMIT_PER_MINUTE
    if limit <= 0:
        return "1000000/minute"
    return f"{limit}/minute"


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
)

# Applied per route so that reads and static files stay unlimited
expensive_limit = limiter.shared_limit(get_rate_limit, scope="expensive")


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = getattr(exc, "retry_after", 60)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}", "retry_after": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


def setup_rate_limiting(app):
    """Attach the limiter and its 429 handler to the app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
