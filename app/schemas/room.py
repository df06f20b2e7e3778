from datetime import date
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union


def _date_part(v):
    # The property-management API serialises dates as full ISO timestamps
    if isinstance(v, str) and len(v) > 10:
        return v[:10]
    return v


class StoreRecord(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RoomRecord(StoreRecord):
    id: int
    number: str
    status: str
    floor: Optional[Union[int, str]] = None
    description: Optional[str] = None
    rental_rate: Optional[float] = None
    size: Optional[str] = None
    amenities: Optional[Union[List[str], str]] = None
    last_cleaned: Optional[date] = None

    @field_validator("last_cleaned", mode="before")
    def coerce_last_cleaned(cls, v):
        return _date_part(v)

    @field_validator("number", mode="before")
    def coerce_number(cls, v):
        return str(v)


class MaintenanceRequestRecord(StoreRecord):
    description: str = ""
    id: Optional[int] = None
    room_id: Optional[int] = None
    title: Optional[str] = None
    status: Optional[str] = None


class GuestProfileRecord(StoreRecord):
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    is_active: bool = True
    has_moved_out: bool = False
    id: Optional[int] = None
    room_id: Optional[int] = None
    guest_name: Optional[str] = None

    @field_validator("check_in_date", "check_out_date", mode="before")
    def coerce_dates(cls, v):
        return _date_part(v)


class TenantRecord(StoreRecord):
    status: str
    monthly_rent: Optional[float] = None
    room_number: Optional[str] = None
    stay_duration: Optional[float] = None
    id: Optional[int] = None
    name: Optional[str] = None

    @field_validator("room_number", mode="before")
    def coerce_room_number(cls, v):
        return None if v is None else str(v)


class OccupancyHistory(StoreRecord):
    average_stay_duration: float = 0
    satisfaction_rating: float = 3.5
    maintenance_frequency: float = 0


class RoomFeatures(StoreRecord):
    id: int
    number: str
    size: str
    floor: str
    rent: float
    amenities: List[str]
    quiet_level: float
    has_ocean_view: bool
    has_balcony: bool
    is_accessible: bool
    is_pet_friendly: bool
    is_smoking_allowed: bool
    last_cleaned: Optional[date] = None
    maintenance_history: List[str]
    occupancy_history: OccupancyHistory
