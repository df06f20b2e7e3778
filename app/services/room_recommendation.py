import asyncio
from typing import Dict, List, Optional, Sequence, Set, Tuple

from structlog import get_logger

from app.schemas.recommendation import RecommendationScore, TenantPreferences, TenantProfile
from app.schemas.room import GuestProfileRecord, OccupancyHistory, RoomFeatures, RoomRecord, TenantRecord
from app.services.room_features import build_room_features, is_available_by
from app.services.store import RoomStore

logger = get_logger()

CANDIDATE_STATUSES = ("available", "cleaning")
DEFAULT_LIMIT = 5

SIMILARITY_THRESHOLD = 0.6
MAX_SIMILAR_TENANTS = 10
RENT_SIMILARITY_SCALE = 1000.0  # dollars
STAY_SIMILARITY_SCALE = 12.0  # months
COLLABORATIVE_BOOST = 10


def _money(amount: float) -> str:
    """Render a dollar amount without a trailing .0 for whole numbers."""
    amount = round(float(amount), 2)
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"


def _percent(score: float) -> str:
    score = round(float(score), 1)
    return str(int(score)) if score.is_integer() else str(score)


def _ranking_key(rec: RecommendationScore) -> Tuple[float, int]:
    # Highest score first; equal scores fall back to the lower room id
    return (-rec.score, rec.room_id)


def maintenance_score(features: RoomFeatures) -> int:
    recent_issues = len(features.maintenance_history)
    if recent_issues == 0:
        return 10
    if recent_issues <= 2:
        return 7
    if recent_issues <= 4:
        return 4
    return 2


def history_score(occupancy: OccupancyHistory, preferences: TenantPreferences) -> float:
    score = (occupancy.satisfaction_rating / 5) * 4

    if preferences.stay_duration:
        duration_diff = abs(occupancy.average_stay_duration - preferences.stay_duration)
        if duration_diff <= 1:
            score += 3
        elif duration_diff <= 3:
            score += 1

    return score


def score_room(
    preferences: TenantPreferences,
    features: RoomFeatures,
    guest_history: Sequence[GuestProfileRecord] = (),
) -> RecommendationScore:
    """
    Score one room against the tenant's preferences.

    The score is a plain weighted sum of independent criteria, clamped to
    [0, 100]. Each criterion that fires appends a reason (and usually a
    matching-feature tag) or a concern.
    """
    score = 0.0
    reasons: List[str] = []
    concerns: List[str] = []
    matching_features: List[str] = []

    budget = preferences.budget_range
    if budget is not None:
        if budget.min <= features.rent <= budget.max:
            score += 30
            reasons.append(f"Within budget range (${_money(budget.min)}-${_money(budget.max)})")
            matching_features.append("Budget-friendly")
        elif features.rent < budget.min:
            score += 25
            reasons.append("Below budget - excellent value")
            matching_features.append("Great value")
        else:
            score -= 20
            concerns.append(f"Above budget by ${_money(features.rent - budget.max)}")

    if preferences.preferred_floor and features.floor == preferences.preferred_floor:
        score += 10
        reasons.append(f"On preferred floor {preferences.preferred_floor}")
        matching_features.append(f"Floor {preferences.preferred_floor}")

    if preferences.quiet_room:
        score += (features.quiet_level / 5) * 15
        if features.quiet_level >= 4:
            reasons.append("Very quiet location")
            matching_features.append("Quiet environment")
        elif features.quiet_level <= 2:
            concerns.append("May be noisy location")

    if preferences.ocean_view and features.has_ocean_view:
        score += 10
        reasons.append("Beautiful ocean view")
        matching_features.append("Ocean view")

    if preferences.balcony and features.has_balcony:
        score += 8
        reasons.append("Private balcony available")
        matching_features.append("Private balcony")

    if preferences.accessibility:
        if features.is_accessible:
            score += 20
            reasons.append("Fully accessible room")
            matching_features.append("Wheelchair accessible")
        else:
            score -= 25
            concerns.append("Not wheelchair accessible")

    if preferences.pet_friendly:
        if features.is_pet_friendly:
            score += 12
            reasons.append("Pets welcome")
            matching_features.append("Pet-friendly")
        else:
            score -= 15
            concerns.append("Pets not allowed")

    if preferences.smoking_allowed:
        if features.is_smoking_allowed:
            score += 8
            reasons.append("Smoking permitted")
            matching_features.append("Smoking allowed")
        else:
            concerns.append("No-smoking room")

    upkeep = maintenance_score(features)
    score += upkeep
    if upkeep >= 8:
        reasons.append("Excellent maintenance record")
        matching_features.append("Well-maintained")
    elif upkeep <= 4:
        concerns.append("Recent maintenance issues")

    history = history_score(features.occupancy_history, preferences)
    score += history
    if history >= 5:
        reasons.append("High tenant satisfaction history")
        matching_features.append("Popular choice")

    if preferences.move_in_date:
        if is_available_by(guest_history, preferences.move_in_date):
            score += 5
            reasons.append("Available for your move-in date")
        else:
            score -= 10
            concerns.append("May not be available for your preferred date")

    return RecommendationScore(
        room_id=features.id,
        score=max(0.0, min(100.0, score)),
        reasons=reasons,
        concerns=concerns,
        matching_features=matching_features,
    )


def tenant_similarity(profile: TenantProfile, tenant: TenantRecord) -> float:
    similarity = 0.0
    factors = 0

    if profile.monthly_rent and tenant.monthly_rent:
        budget_diff = abs(profile.monthly_rent - tenant.monthly_rent)
        similarity += max(0.0, 1 - budget_diff / RENT_SIMILARITY_SCALE)
        factors += 1

    if profile.stay_duration and tenant.stay_duration:
        duration_diff = abs(profile.stay_duration - tenant.stay_duration)
        similarity += max(0.0, 1 - duration_diff / STAY_SIMILARITY_SCALE)
        factors += 1

    return similarity / factors if factors > 0 else 0.0


def find_similar_tenants(profile: TenantProfile, tenants: Sequence[TenantRecord]) -> List[Tuple[TenantRecord, float]]:
    scored = [
        (tenant, tenant_similarity(profile, tenant))
        for tenant in tenants
        if tenant.status == "active"
    ]
    similar = [pair for pair in scored if pair[1] > SIMILARITY_THRESHOLD]
    similar.sort(key=lambda pair: pair[1], reverse=True)
    return similar[:MAX_SIMILAR_TENANTS]


def generate_recommendation_explanation(recommendations: Sequence[RecommendationScore]) -> str:
    if not recommendations:
        return "No suitable rooms found matching your criteria. Please adjust your preferences."

    top = recommendations[0]
    lines = [
        f"Based on your preferences, Room {top.room_id} is your best match "
        f"with a {_percent(top.score)}% compatibility score.",
        "",
        "Why this room is recommended:",
    ]
    lines.extend(f"• {reason}" for reason in top.reasons)

    if top.concerns:
        lines.append("")
        lines.append("Please consider:")
        lines.extend(f"• {concern}" for concern in top.concerns)

    explanation = "\n".join(lines) + "\n"
    if len(recommendations) > 1:
        explanation += f"\nWe've also found {len(recommendations) - 1} other suitable options for you to consider."
    return explanation


class RoomRecommendationEngine:
    """Ranks candidate rooms from a RoomStore against tenant preferences."""

    def __init__(self, store: RoomStore):
        self.store = store

    async def _load_room(self, room: RoomRecord) -> Tuple[RoomFeatures, List[GuestProfileRecord]]:
        maintenance_requests, guest_history = await asyncio.gather(
            self.store.get_maintenance_requests(room.id),
            self.store.get_guest_profiles_by_room(room.id),
        )
        return build_room_features(room, maintenance_requests, guest_history), guest_history

    async def get_recommendations(
        self,
        preferences: TenantPreferences,
        limit: int = DEFAULT_LIMIT,
    ) -> List[RecommendationScore]:
        rooms = await self.store.get_rooms()
        candidates = [room for room in rooms if room.status in CANDIDATE_STATUSES]
        if not candidates:
            logger.info("No candidate rooms available", total_rooms=len(rooms))
            return []

        loaded = await asyncio.gather(*(self._load_room(room) for room in candidates))
        scored = [score_room(preferences, features, guests) for features, guests in loaded]
        scored.sort(key=_ranking_key)

        logger.debug(
            "Rooms scored",
            candidates=len(candidates),
            top_room_id=scored[0].room_id,
            top_score=scored[0].score,
        )
        return scored[:max(limit, 0)]

    async def _collaborative_room_ids(self, tenant_profile: TenantProfile) -> Set[int]:
        tenants = await self.store.get_tenants()
        similar = find_similar_tenants(tenant_profile, tenants)
        if not similar:
            return set()

        rooms = await self.store.get_rooms()
        room_ids_by_number: Dict[str, int] = {}
        for room in rooms:
            room_ids_by_number.setdefault(room.number, room.id)

        room_ids = set()
        for tenant, _ in similar:
            if tenant.room_number and tenant.room_number in room_ids_by_number:
                room_ids.add(room_ids_by_number[tenant.room_number])
        return room_ids

    async def get_personalized_recommendations(
        self,
        preferences: TenantPreferences,
        tenant_profile: TenantProfile,
        limit: int = DEFAULT_LIMIT,
    ) -> List[RecommendationScore]:
        """
        Preference-based recommendations, boosted for rooms that tenants with a
        similar budget and stay length are living in.
        """
        collaborative_rooms = await self._collaborative_room_ids(tenant_profile)
        recommendations = await self.get_recommendations(preferences, limit)

        merged = []
        for rec in recommendations:
            if rec.room_id in collaborative_rooms:
                rec = rec.model_copy(update={
                    "score": min(100.0, rec.score + COLLABORATIVE_BOOST),
                    "reasons": rec.reasons + ["Recommended by similar tenants"],
                    "matching_features": rec.matching_features + ["Tenant favorite"],
                })
            merged.append(rec)

        merged.sort(key=_ranking_key)
        logger.debug("Personalized boost applied", boosted_rooms=sorted(collaborative_rooms))
        return merged

    def generate_recommendation_explanation(self, recommendations: Sequence[RecommendationScore]) -> str:
        return generate_recommendation_explanation(recommendations)
