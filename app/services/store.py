import asyncio
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.models import GuestProfile, MaintenanceRequest, Room, Tenant
from app.schemas.room import (
    GuestProfileRecord,
    MaintenanceRequestRecord,
    RoomRecord,
    TenantRecord,
)

logger = get_logger()


class RoomStore(Protocol):
    """Read-only view of the property-management data the recommender needs."""

    async def get_rooms(self) -> List[RoomRecord]:
        ...

    async def get_maintenance_requests(self, room_id: int) -> List[MaintenanceRequestRecord]:
        ...

    async def get_guest_profiles_by_room(self, room_id: int) -> List[GuestProfileRecord]:
        ...

    async def get_tenants(self) -> List[TenantRecord]:
        ...


class InMemoryRoomStore:
    def __init__(
        self,
        rooms: Optional[Iterable[RoomRecord]] = None,
        maintenance_requests: Optional[Iterable[MaintenanceRequestRecord]] = None,
        guest_profiles: Optional[Iterable[GuestProfileRecord]] = None,
        tenants: Optional[Iterable[TenantRecord]] = None,
    ) -> None:
        self._rooms = list(rooms or [])
        self._maintenance_requests = list(maintenance_requests or [])
        self._guest_profiles = list(guest_profiles or [])
        self._tenants = list(tenants or [])

    async def get_rooms(self) -> List[RoomRecord]:
        return list(self._rooms)

    async def get_maintenance_requests(self, room_id: int) -> List[MaintenanceRequestRecord]:
        return [r for r in self._maintenance_requests if r.room_id == room_id]

    async def get_guest_profiles_by_room(self, room_id: int) -> List[GuestProfileRecord]:
        return [g for g in self._guest_profiles if g.room_id == room_id and g.is_active]

    async def get_tenants(self) -> List[TenantRecord]:
        return list(self._tenants)


class SqlRoomStore:
    """Reads the property-management tables through an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        # An AsyncSession does not allow concurrent operations
        self._lock = asyncio.Lock()

    async def _scalars(self, stmt) -> list:
        async with self._lock:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def get_rooms(self) -> List[RoomRecord]:
        rows = await self._scalars(select(Room).order_by(Room.number.asc()))
        logger.debug("Rooms loaded", count=len(rows))
        return [
            RoomRecord(
                id=row.id,
                number=row.number,
                status=row.status,
                floor=row.floor,
                description=row.description,
                rental_rate=float(row.rental_rate) if row.rental_rate is not None else None,
                size=row.size,
                amenities=row.amenities,
                last_cleaned=row.last_cleaned,
            )
            for row in rows
        ]

    async def get_maintenance_requests(self, room_id: int) -> List[MaintenanceRequestRecord]:
        stmt = select(MaintenanceRequest).where(MaintenanceRequest.room_id == room_id)
        return [
            MaintenanceRequestRecord(
                id=row.id,
                room_id=row.room_id,
                title=row.title,
                description=row.description or "",
                status=row.status,
            )
            for row in await self._scalars(stmt)
        ]

    async def get_guest_profiles_by_room(self, room_id: int) -> List[GuestProfileRecord]:
        stmt = select(GuestProfile).where(
            GuestProfile.room_id == room_id,
            GuestProfile.is_active.is_(True),
        )
        return [
            GuestProfileRecord(
                id=row.id,
                room_id=row.room_id,
                guest_name=row.guest_name,
                check_in_date=row.check_in_date,
                check_out_date=row.check_out_date,
                is_active=bool(row.is_active),
                has_moved_out=bool(row.has_moved_out),
            )
            for row in await self._scalars(stmt)
        ]

    async def get_tenants(self) -> List[TenantRecord]:
        stmt = select(Tenant)
        return [
            TenantRecord(
                id=row.id,
                name=row.name,
                status=row.status,
                monthly_rent=float(row.monthly_rent) if row.monthly_rent is not None else None,
                room_number=row.room_number,
                stay_duration=row.stay_duration,
            )
            for row in await self._scalars(stmt)
        ]
