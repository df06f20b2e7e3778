import asyncio
from typing import Any, List, Optional

import httpx
from pybreaker import CircuitBreaker, CircuitBreakerError
from structlog import get_logger

from app.config import settings
from app.core.errors import StoreError
from app.schemas.room import (
    GuestProfileRecord,
    MaintenanceRequestRecord,
    RoomRecord,
    TenantRecord,
)

logger = get_logger(__name__)
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)


class PropertyApiStore:
    """
    Room store backed by the property-management REST API.

    Reads go through the admin endpoints, so every request carries the
    x-admin-token header. A shared circuit breaker trips after three
    consecutive upstream failures and rejects calls for a minute without
    contacting the upstream.

    An instance lives for one recommendation request: the admin maintenance
    listing is fetched once and reused for every room.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        admin_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or settings.PROPERTY_API_URL).rstrip("/")
        self.admin_token = admin_token or settings.PROPERTY_API_TOKEN
        self.client = client
        self.timeout = timeout
        self._maintenance: Optional[List[MaintenanceRequestRecord]] = None
        self._maintenance_lock = asyncio.Lock()

    async def _get(self, path: str) -> Any:
        try:
            with breaker.calling():
                response = await self._request(path)
                return self._decode(path, response)
        except CircuitBreakerError:
            logger.error("Property API circuit open", path=path)
            raise StoreError("Property API unavailable", status_code=503)
        except httpx.RequestError as exc:
            logger.error("Property API unreachable", path=path, error=str(exc))
            raise StoreError(f"Property API request to {path} failed: {exc}") from exc

    async def _request(self, path: str) -> httpx.Response:
        headers = {"x-admin-token": self.admin_token}
        if self.client is not None:
            return await self.client.get(f"{self.base_url}{path}", headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.get(f"{self.base_url}{path}", headers=headers, timeout=self.timeout)

    @staticmethod
    def _decode(path: str, response: httpx.Response) -> Any:
        if response.status_code != 200:
            logger.error("Property API request failed", path=path, status_code=response.status_code)
            raise StoreError(f"Property API returned {response.status_code} for {path}")
        return response.json()

    async def get_rooms(self) -> List[RoomRecord]:
        data = await self._get("/api/rooms")
        return [RoomRecord.model_validate(item) for item in data]

    async def _maintenance_listing(self) -> List[MaintenanceRequestRecord]:
        async with self._maintenance_lock:
            if self._maintenance is None:
                data = await self._get("/api/admin/maintenance")
                # The admin listing joins each request with its room and building
                self._maintenance = [
                    MaintenanceRequestRecord.model_validate(
                        item.get("request", item) if isinstance(item, dict) else item
                    )
                    for item in data
                ]
            return self._maintenance

    async def get_maintenance_requests(self, room_id: int) -> List[MaintenanceRequestRecord]:
        return [record for record in await self._maintenance_listing() if record.room_id == room_id]

    async def get_guest_profiles_by_room(self, room_id: int) -> List[GuestProfileRecord]:
        # The upstream route only returns active guests
        data = await self._get(f"/api/admin/guests/room/{room_id}")
        return [GuestProfileRecord.model_validate(item) for item in data]

    async def get_tenants(self) -> List[TenantRecord]:
        data = await self._get("/api/admin/tenants")
        return [TenantRecord.model_validate(item) for item in data]
