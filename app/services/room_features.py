"""
Per-room feature derivation for the recommender.

Everything here is a pure function of the store records. Feature detection
is plain case-insensitive substring matching against the room description,
so the keyword lists below must not change without re-checking scores.
"""
from datetime import date
from typing import List, Optional, Sequence

from app.schemas.room import (
    GuestProfileRecord,
    MaintenanceRequestRecord,
    OccupancyHistory,
    RoomFeatures,
    RoomRecord,
)

AMENITY_KEYWORDS = [
    "wifi", "air conditioning", "heating", "kitchen", "bathroom",
    "parking", "laundry", "gym", "pool", "elevator", "balcony",
    "ocean view", "mountain view", "furnished", "utilities included",
]

DEFAULT_SIZE = "standard"
DEFAULT_FLOOR = "1"
DEFAULT_RENT = 1200.0

# Days per month when converting stays to months
DAYS_PER_MONTH = 30
# Assumed stay for a guest without both check-in and check-out dates
DEFAULT_STAY_MONTHS = 3


def extract_amenities(description: str) -> List[str]:
    text = (description or "").lower()
    return [keyword for keyword in AMENITY_KEYWORDS if keyword in text]


def _amenities_text(amenities) -> str:
    if not amenities:
        return ""
    if isinstance(amenities, str):
        return amenities
    return " ".join(amenities)


def has_feature(room: RoomRecord, feature: str) -> bool:
    search_text = f"{room.description or ''} {_amenities_text(room.amenities)}".lower()
    return feature.lower() in search_text


def _floor_number(floor) -> Optional[int]:
    # A missing or zero floor is treated as the ground floor
    try:
        return int(floor or 1)
    except (TypeError, ValueError):
        return None


def calculate_quiet_level(room: RoomRecord) -> float:
    """Estimate how quiet a room is on a 1-5 scale."""
    quiet_level = 3.0

    floor = _floor_number(room.floor)
    if floor is not None:
        if floor >= 3:
            quiet_level += 1  # higher floors are quieter
        if floor == 1:
            quiet_level -= 1  # ground floor is noisier

    description = (room.description or "").lower()
    if "street facing" in description:
        quiet_level -= 1
    if "courtyard" in description or "back" in description:
        quiet_level += 1
    if "corner" in description:
        quiet_level += 0.5

    return max(1.0, min(5.0, quiet_level))


def calculate_occupancy_stats(guest_history: Sequence[GuestProfileRecord]) -> OccupancyHistory:
    if not guest_history:
        return OccupancyHistory(
            average_stay_duration=0,
            satisfaction_rating=3.5,
            maintenance_frequency=0,
        )

    total_months = 0.0
    for guest in guest_history:
        if guest.check_in_date and guest.check_out_date:
            total_months += (guest.check_out_date - guest.check_in_date).days / DAYS_PER_MONTH
        else:
            total_months += DEFAULT_STAY_MONTHS

    # No feedback data is collected yet, so rooms with history get fixed ratings
    return OccupancyHistory(
        average_stay_duration=total_months / len(guest_history),
        satisfaction_rating=4.0,
        maintenance_frequency=0.5,
    )


def find_active_occupant(guest_history: Sequence[GuestProfileRecord]) -> Optional[GuestProfileRecord]:
    for guest in guest_history:
        if guest.is_active and not guest.has_moved_out:
            return guest
    return None


def is_available_by(guest_history: Sequence[GuestProfileRecord], move_in_date: date) -> bool:
    """True when the room has no current occupant, or they check out on or before move_in_date."""
    occupant = find_active_occupant(guest_history)
    if occupant is None:
        return True
    if occupant.check_out_date:
        return occupant.check_out_date <= move_in_date
    # No checkout date, assume occupied
    return False


def build_room_features(
    room: RoomRecord,
    maintenance_requests: Sequence[MaintenanceRequestRecord],
    guest_history: Sequence[GuestProfileRecord],
) -> RoomFeatures:
    return RoomFeatures(
        id=room.id,
        number=room.number,
        size=room.size or DEFAULT_SIZE,
        floor=str(room.floor) if room.floor is not None else DEFAULT_FLOOR,
        rent=room.rental_rate if room.rental_rate is not None else DEFAULT_RENT,
        amenities=extract_amenities(room.description or ""),
        quiet_level=calculate_quiet_level(room),
        has_ocean_view=has_feature(room, "ocean view"),
        has_balcony=has_feature(room, "balcony"),
        is_accessible=has_feature(room, "accessible"),
        is_pet_friendly=has_feature(room, "pet friendly"),
        is_smoking_allowed=has_feature(room, "smoking"),
        last_cleaned=room.last_cleaned,
        maintenance_history=[req.description for req in maintenance_requests],
        occupancy_history=calculate_occupancy_stats(guest_history),
    )
