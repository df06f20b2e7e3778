from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.routers import recommendation
from app.core.logging import setup_logging
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from structlog import get_logger
from app.config import settings
from sqlalchemy import text
from app.database import AsyncSessionFactory

logger = get_logger()

app = FastAPI(title="EasyStay Room Recommendation Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(recommendation.router)

@app.on_event("startup")
async def startup_event():
    setup_logging()
    # Initialize rate limiter only if Redis is available; skip gracefully on failure
    try:
        if settings.REDIS_URL:
            redis = Redis.from_url(settings.REDIS_URL)
            await FastAPILimiter.init(redis)
    except Exception as e:
        logger.warning("Rate limiter disabled", error=str(e))
    logger.info("Service started", store_backend=settings.STORE_BACKEND)


@app.get("/health", tags=["health"])
async def health():
    details = {"status": "ok", "store": settings.STORE_BACKEND}
    # Check DB connectivity
    if settings.STORE_BACKEND == "database":
        try:
            async with AsyncSessionFactory() as session:
                await session.execute(text("SELECT 1"))
            details["database"] = "up"
        except Exception as e:
            details["status"] = "degraded"
            details["database"] = f"down: {str(e)}"
    # Config presence checks (no secrets exposed)
    details["config"] = {
        "db_url_set": bool(settings.DATABASE_URL),
        "redis_url_set": bool(settings.REDIS_URL),
        "property_api_url_set": bool(settings.PROPERTY_API_URL),
        "rate_limiter_enabled": FastAPILimiter.redis is not None,
    }
    return details
