from fastapi import Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from app.config import settings

_limiter = RateLimiter(times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS)


async def rate_limit(request: Request, response: Response):
    # Redis is optional; without it the limiter was never initialised
    if FastAPILimiter.redis is None:
        return
    await _limiter(request, response)
