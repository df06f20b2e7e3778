from datetime import date
from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BudgetRange(CamelModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min > self.max:
            raise ValueError("budgetRange.min must not exceed budgetRange.max")
        return self


class TenantPreferences(CamelModel):
    budget_range: Optional[BudgetRange] = None
    preferred_floor: Optional[str] = None
    quiet_room: Optional[bool] = None
    ocean_view: Optional[bool] = None
    balcony: Optional[bool] = None
    accessibility: Optional[bool] = None
    pet_friendly: Optional[bool] = None
    smoking_allowed: Optional[bool] = None
    stay_duration: Optional[float] = Field(default=None, ge=0)  # months
    move_in_date: Optional[date] = None
    special_requests: Optional[List[str]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "budgetRange": {"min": 800, "max": 1200},
                "preferredFloor": "3",
                "quietRoom": True,
                "oceanView": True,
                "stayDuration": 6,
                "moveInDate": "2025-03-01",
            }
        }


class TenantProfile(CamelModel):
    monthly_rent: Optional[float] = None
    stay_duration: Optional[float] = None  # months


class RecommendationRequest(TenantPreferences):
    tenant_profile: Optional[TenantProfile] = None
    limit: Optional[int] = Field(default=None, ge=0, le=50)


class PersonalizedRecommendationRequest(CamelModel):
    preferences: TenantPreferences = Field(default_factory=TenantPreferences)
    tenant_profile: TenantProfile
    limit: Optional[int] = Field(default=None, ge=0, le=50)


class RecommendationScore(CamelModel):
    room_id: int
    score: float
    reasons: List[str] = []
    concerns: List[str] = []
    matching_features: List[str] = []


class RecommendationResponse(CamelModel):
    recommendations: List[RecommendationScore]
    explanation: str
    total_found: int
