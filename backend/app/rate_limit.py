import os

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from .config import EVENT_RATE_LIMIT


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        parts = [ip.strip() for ip in forwarded.split(",") if ip.strip()]
        if parts:
            return parts[-1]
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def _rate_limits_disabled() -> bool:
    return (os.getenv("DISABLE_RATE_LIMITS") or "").lower() == "true"


def event_rate_limit() -> str:
    if _rate_limits_disabled():
        return "1000/second"
    return EVENT_RATE_LIMIT


limiter = Limiter(key_func=_client_ip)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    detail = exc.detail if isinstance(exc.detail, str) else ""
    if detail:
        message = f"rate limit exceeded: {detail}"
    else:
        message = "rate limit exceeded: please wait before recording another event."
    return JSONResponse(
        status_code=429,
        content={
            "detail": message,
            "code": "rate_limit_exceeded",
        },
    )
