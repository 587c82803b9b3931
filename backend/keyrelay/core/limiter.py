# keyrelay/core/limiter.py

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from keyrelay import config

limiter = Limiter(key_func=get_remote_address)

PUBLIC_KEY_LIMIT = config.PUBLIC_KEY_RATE_LIMIT


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"error": "rate limit exceeded"})
