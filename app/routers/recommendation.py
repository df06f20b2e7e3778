from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from structlog import get_logger

from app.config import settings
from app.core.errors import StoreError
from app.dependencies.rate_limit import rate_limit
from app.dependencies.store import get_room_store
from app.schemas.recommendation import (
    PersonalizedRecommendationRequest,
    RecommendationRequest,
    RecommendationResponse,
    RecommendationScore,
    TenantPreferences,
    TenantProfile,
)
from app.services.room_recommendation import RoomRecommendationEngine
from app.services.store import RoomStore

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["recommendation"])


def _build_response(engine: RoomRecommendationEngine, recommendations: List[RecommendationScore]) -> RecommendationResponse:
    return RecommendationResponse(
        recommendations=recommendations,
        explanation=engine.generate_recommendation_explanation(recommendations),
        total_found=len(recommendations),
    )


async def _recommend(
    store: RoomStore,
    preferences: TenantPreferences,
    tenant_profile: Optional[TenantProfile],
    limit: Optional[int],
) -> RecommendationResponse:
    engine = RoomRecommendationEngine(store)
    if limit is None:
        limit = settings.RECOMMENDATION_DEFAULT_LIMIT
    limit = min(limit, settings.RECOMMENDATION_MAX_LIMIT)
    try:
        if tenant_profile is not None:
            recommendations = await engine.get_personalized_recommendations(preferences, tenant_profile, limit)
        else:
            recommendations = await engine.get_recommendations(preferences, limit)
    except StoreError as e:
        logger.error("Room store unavailable", error=e.message, status_code=e.status_code)
        raise HTTPException(status_code=e.status_code, detail="Room data unavailable")
    except Exception as e:
        logger.error("Recommendation failed", error=str(e))
        raise HTTPException(status_code=500, detail="Recommendation failed")

    logger.info(
        "Recommendations generated",
        personalized=tenant_profile is not None,
        count=len(recommendations),
        top_room_id=recommendations[0].room_id if recommendations else None,
    )
    return _build_response(engine, recommendations)


@router.post("/recommendations", response_model=RecommendationResponse, dependencies=[Depends(rate_limit)])
async def get_recommendations(request: RecommendationRequest, store: RoomStore = Depends(get_room_store)):
    preferences = TenantPreferences.model_validate(request.model_dump(exclude={"tenant_profile", "limit"}))
    return await _recommend(store, preferences, request.tenant_profile, request.limit)


@router.post("/personalized-recommendations", response_model=RecommendationResponse, dependencies=[Depends(rate_limit)])
async def get_personalized_recommendations(request: PersonalizedRecommendationRequest, store: RoomStore = Depends(get_room_store)):
    return await _recommend(store, request.preferences, request.tenant_profile, request.limit)
