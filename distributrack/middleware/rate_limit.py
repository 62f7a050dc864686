from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..logging import ServiceLogger
from ..settings import Settings

_log = ServiceLogger("rate_limit")


def client_key(request: Request) -> str:
    """Bucket callers by bearer token when present, otherwise by client address."""
    from slowapi.util import get_remote_address

    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or get_remote_address(request)
    return get_remote_address(request)


def configure_rate_limiting(app: FastAPI, settings: Settings) -> None:
    if not settings.rate_limit_enabled:
        return

    from slowapi import Limiter
    from slowapi.errors import RateLimitExceeded
    from slowapi.middleware import SlowAPIMiddleware

    limiter = Limiter(key_func=client_key, default_limits=[settings.rate_limit_default])
    app.state.limiter = limiter

    # slowapi calls this handler synchronously from its middleware
    def handle_rate_limited(request: Request, exc: RateLimitExceeded):
        _log.warning("Rate limit exceeded", path=request.url.path, limit=exc.detail)
        return JSONResponse(status_code=429, content={"success": False, "error": "rate_limited"})

    app.add_exception_handler(RateLimitExceeded, handle_rate_limited)
    app.add_middleware(SlowAPIMiddleware)
