import os

# Keep the app off PostgreSQL and Redis while testing
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("STORE_BACKEND", "database")

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.dependencies.store import get_room_store
from app.main import app
from app.schemas.room import (
    GuestProfileRecord,
    MaintenanceRequestRecord,
    TenantRecord,
)
from app.services.store import InMemoryRoomStore
from factories import make_room


@pytest.fixture
def sample_rooms():
    return [
        make_room(1, number="101", floor=1, description="Street facing room with wifi", rental_rate=900.0),
        make_room(
            2,
            number="305",
            floor=3,
            description="Quiet courtyard unit with ocean view and balcony, pet friendly",
            rental_rate=1100.0,
        ),
        make_room(3, number="202", status="occupied", description="Courtyard suite", rental_rate=950.0),
        make_room(4, number="204", status="cleaning", description="Corner room, accessible, furnished", rental_rate=1500.0),
    ]


@pytest.fixture
def sample_store(sample_rooms):
    return InMemoryRoomStore(
        rooms=sample_rooms,
        maintenance_requests=[
            MaintenanceRequestRecord(room_id=4, description="Leaking faucet"),
        ],
        guest_profiles=[
            GuestProfileRecord(
                room_id=4,
                guest_name="Kai",
                check_in_date=date(2024, 9, 1),
                check_out_date=date(2025, 2, 15),
                is_active=True,
                has_moved_out=False,
            ),
        ],
        tenants=[
            TenantRecord(status="active", monthly_rent=1100.0, stay_duration=6, room_number="305"),
            TenantRecord(status="inactive", monthly_rent=900.0, stay_duration=6, room_number="101"),
        ],
    )


@pytest.fixture
def override_store():
    def _override(store):
        app.dependency_overrides[get_room_store] = lambda: store
    yield _override
    app.dependency_overrides.pop(get_room_store, None)


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
