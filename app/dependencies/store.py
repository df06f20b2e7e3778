from typing import AsyncIterator

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_session
from app.services.property_api import PropertyApiStore
from app.services.store import RoomStore, SqlRoomStore


async def get_room_store(db: AsyncSession = Depends(get_session)) -> AsyncIterator[RoomStore]:
    if settings.STORE_BACKEND == "api":
        # One HTTP client per request, shared by every upstream read
        async with httpx.AsyncClient() as client:
            yield PropertyApiStore(client=client)
        return
    yield SqlRoomStore(db)
