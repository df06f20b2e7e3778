from datetime import date
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.errors import StoreError
from app.models import Base, GuestProfile, MaintenanceRequest, Room, Tenant
from app.schemas.recommendation import BudgetRange, TenantPreferences
from app.services.property_api import PropertyApiStore, breaker
from app.services.room_recommendation import RoomRecommendationEngine
from app.services.store import SqlRoomStore


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        session.add_all([
            Room(id=1, number="305", status="available", floor=3, description="Courtyard view", rental_rate=Decimal("1100.00")),
            Room(id=2, number="101", status="cleaning", floor=1, description="Street facing", rental_rate=Decimal("900.00")),
            Room(id=3, number="202", status="occupied", floor=2, rental_rate=None),
        ])
        await session.flush()
        session.add_all([
            MaintenanceRequest(room_id=2, title="Sink", description="Leaking sink"),
            MaintenanceRequest(room_id=2, title="Door", description="Sticky door"),
            GuestProfile(
                room_id=1,
                guest_name="Malia",
                check_in_date=date(2024, 1, 1),
                check_out_date=date(2024, 3, 31),
                is_active=True,
                has_moved_out=True,
            ),
            GuestProfile(
                room_id=1,
                guest_name="Ikaika",
                check_in_date=date(2022, 1, 1),
                check_out_date=date(2023, 1, 1),
                is_active=False,
                has_moved_out=True,
            ),
            GuestProfile(
                room_id=2,
                guest_name="Pua",
                check_in_date=date(2023, 1, 1),
                check_out_date=date(2024, 2, 5),
                is_active=False,
                has_moved_out=True,
            ),
            Tenant(name="Keoni", room_number="305", status="active", monthly_rent=Decimal("1100.00"), stay_duration=6),
        ])
        await session.commit()
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_sql_store_reads_rooms_ordered_by_number(db_session):
    store = SqlRoomStore(db_session)
    rooms = await store.get_rooms()

    assert [room.number for room in rooms] == ["101", "202", "305"]
    assert rooms[0].rental_rate == 900.0
    assert rooms[1].rental_rate is None


@pytest.mark.asyncio
async def test_sql_store_reads_related_records(db_session):
    store = SqlRoomStore(db_session)

    maintenance = await store.get_maintenance_requests(2)
    guests = await store.get_guest_profiles_by_room(1)
    tenants = await store.get_tenants()

    assert sorted(req.description for req in maintenance) == ["Leaking sink", "Sticky door"]
    assert await store.get_maintenance_requests(1) == []
    assert guests[0].check_out_date == date(2024, 3, 31)
    assert guests[0].has_moved_out is True
    assert tenants[0].room_number == "305"
    assert tenants[0].monthly_rent == 1100.0


@pytest.mark.asyncio
async def test_sql_store_skips_inactive_guests(db_session):
    store = SqlRoomStore(db_session)

    guests = await store.get_guest_profiles_by_room(1)

    assert [guest.guest_name for guest in guests] == ["Malia"]
    assert await store.get_guest_profiles_by_room(2) == []


@pytest.mark.asyncio
async def test_room_with_only_inactive_guests_has_neutral_history(db_session):
    engine = RoomRecommendationEngine(SqlRoomStore(db_session))

    recs = await engine.get_recommendations(TenantPreferences())
    by_room = {rec.room_id: rec for rec in recs}

    # maintenance 7 (two requests) + history 3.5 / 5 * 4
    assert by_room[2].score == pytest.approx(7 + 2.8)
    # maintenance 10 + history 4.0 / 5 * 4 from the active guest
    assert by_room[1].score == pytest.approx(10 + 3.2)


@pytest.mark.asyncio
async def test_engine_runs_on_sql_store(db_session):
    engine = RoomRecommendationEngine(SqlRoomStore(db_session))
    prefs = TenantPreferences(budget_range=BudgetRange(min=800, max=1200), quiet_room=True)

    recs = await engine.get_recommendations(prefs)

    assert [rec.room_id for rec in recs] == [1, 2]
    assert "Recent maintenance issues" not in recs[1].concerns
    assert "May be noisy location" in recs[1].concerns


ROOMS_JSON = [
    {
        "id": 7,
        "number": "305",
        "buildingId": 1,
        "status": "available",
        "size": "large",
        "floor": 3,
        "description": "Ocean view with balcony",
        "rentalRate": "1200.00",
        "lastCleaned": "2025-01-10",
    },
    {"id": 8, "number": 101, "status": "occupied", "floor": None, "rentalRate": None},
]

MAINTENANCE_JSON = [
    {"request": {"id": 1, "roomId": 7, "title": "AC", "description": "AC rattles"}, "room": {"id": 7}, "building": None},
    {"request": {"id": 2, "roomId": 8, "title": "Tap", "description": "Dripping tap"}, "room": {"id": 8}, "building": None},
]

GUESTS_JSON = [
    {
        "id": 3,
        "roomId": 7,
        "guestName": "Noelani",
        "checkInDate": "2024-10-01T00:00:00.000Z",
        "checkOutDate": "2025-03-01T00:00:00.000Z",
        "isActive": True,
        "hasMovedOut": False,
    }
]

TENANTS_JSON = [{"id": 1, "name": "Keoni", "status": "active", "monthlyRent": 1150, "roomNumber": 305}]


@pytest.fixture(autouse=True)
def reset_breaker():
    breaker.close()
    yield
    breaker.close()


def _api_store(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PropertyApiStore(base_url="http://easystay.test/", admin_token="secret", client=client)


def _routes(request):
    assert request.headers["x-admin-token"] == "secret"
    payloads = {
        "/api/rooms": ROOMS_JSON,
        "/api/admin/maintenance": MAINTENANCE_JSON,
        "/api/admin/guests/room/7": GUESTS_JSON,
        "/api/admin/tenants": TENANTS_JSON,
    }
    if request.url.path not in payloads:
        return httpx.Response(404, json={"message": "Not found"})
    return httpx.Response(200, json=payloads[request.url.path])


@pytest.mark.asyncio
async def test_api_store_parses_property_api_payloads():
    store = _api_store(_routes)

    rooms = await store.get_rooms()
    maintenance = await store.get_maintenance_requests(7)
    guests = await store.get_guest_profiles_by_room(7)
    tenants = await store.get_tenants()

    assert rooms[0].rental_rate == 1200.0
    assert rooms[0].last_cleaned == date(2025, 1, 10)
    assert rooms[1].number == "101"
    assert [req.description for req in maintenance] == ["AC rattles"]
    assert guests[0].check_out_date == date(2025, 3, 1)
    assert tenants[0].room_number == "305"


@pytest.mark.asyncio
async def test_engine_runs_on_api_store():
    engine = RoomRecommendationEngine(_api_store(_routes))
    prefs = TenantPreferences(ocean_view=True, balcony=True, move_in_date=date(2025, 3, 1))

    [rec] = await engine.get_recommendations(prefs)

    assert rec.room_id == 7
    assert rec.matching_features[:2] == ["Ocean view", "Private balcony"]
    assert "Available for your move-in date" in rec.reasons


@pytest.mark.asyncio
async def test_api_store_raises_store_error_on_upstream_failure():
    store = _api_store(lambda request: httpx.Response(500, json={"message": "Failed to fetch rooms"}))

    with pytest.raises(StoreError) as exc_info:
        await store.get_rooms()
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_api_store_opens_breaker_after_repeated_failures():
    store = _api_store(lambda request: httpx.Response(503))

    for _ in range(3):
        with pytest.raises(StoreError):
            await store.get_rooms()

    with pytest.raises(StoreError) as exc_info:
        await store.get_rooms()
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Property API unavailable"


@pytest.mark.asyncio
async def test_open_breaker_does_not_contact_upstream():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return httpx.Response(503)

    store = _api_store(handler)
    for _ in range(3):
        with pytest.raises(StoreError):
            await store.get_rooms()
    assert breaker.current_state == "open"
    assert len(calls) == 3

    for _ in range(5):
        with pytest.raises(StoreError) as exc_info:
            await store.get_rooms()
        assert exc_info.value.status_code == 503

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_breaker_counts_network_errors():
    calls = []

    def unreachable(request):
        calls.append(request.url.path)
        raise httpx.ConnectError("connection refused", request=request)

    store = _api_store(unreachable)
    for _ in range(3):
        with pytest.raises(StoreError):
            await store.get_tenants()

    with pytest.raises(StoreError) as exc_info:
        await store.get_tenants()
    assert exc_info.value.status_code == 503
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_api_store_fetches_maintenance_listing_once():
    calls = []
    rooms = [
        {"id": room_id, "number": str(100 + room_id), "status": "available", "floor": 2}
        for room_id in range(1, 6)
    ]

    def many_rooms(request):
        calls.append(request.url.path)
        if request.url.path == "/api/rooms":
            return httpx.Response(200, json=rooms)
        if request.url.path.startswith("/api/admin/guests/room/"):
            return httpx.Response(200, json=[])
        return _routes(request)

    engine = RoomRecommendationEngine(_api_store(many_rooms))
    recs = await engine.get_recommendations(TenantPreferences(), limit=10)

    assert len(recs) == 5
    assert calls.count("/api/admin/maintenance") == 1


@pytest.mark.asyncio
async def test_api_store_wraps_network_errors():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StoreError):
        await _api_store(unreachable).get_rooms()
