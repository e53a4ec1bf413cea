# osm_api/routes/mechanics.py
import asyncpg
from fastapi import APIRouter, Depends

from ..database import get_db
from ..models.actor import ActorOut, ActorRole, MechanicAvailability, MechanicDetails, MechanicUpdate
from ..models.auth import MessageOut, TokenData
from ..models.service_request import ServiceRequestList
from ..services import credentials, service_requests
from ..utils.auth import authorize, get_current_actor, require_mechanic

mechanics_router = APIRouter(prefix="/mechanics", tags=["Mechanics"])


@mechanics_router.get("/status", response_model=MechanicAvailability)
async def get_status(
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    is_available = await credentials.get_mechanic_status(conn, current.actor_id)
    return MechanicAvailability(is_available=is_available)


@mechanics_router.put("/status", response_model=MechanicAvailability)
async def update_status(
    payload: MechanicAvailability,
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    is_available = await credentials.set_mechanic_status(conn, current.actor_id, payload.is_available)
    return MechanicAvailability(is_available=is_available)


@mechanics_router.get("/details", response_model=MechanicDetails)
async def get_details(
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    return await credentials.get_mechanic_details(conn, current.actor_id)


@mechanics_router.get("/requests", response_model=ServiceRequestList)
async def get_inbox(
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    requests = await service_requests.list_for_mechanic(conn, current.actor_id)
    return ServiceRequestList(service_requests=requests)


@mechanics_router.put("/{mechanic_id}", response_model=ActorOut)
async def update_mechanic(
    mechanic_id: int,
    payload: MechanicUpdate,
    current: TokenData = Depends(get_current_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    authorize(current, role=ActorRole.MECHANIC, owner_id=mechanic_id)
    return await credentials.update_actor(
        conn, ActorRole.MECHANIC, mechanic_id, payload.model_dump(exclude_unset=True)
    )


@mechanics_router.delete("/{mechanic_id}", response_model=MessageOut)
async def delete_mechanic(
    mechanic_id: int,
    current: TokenData = Depends(get_current_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    authorize(current, role=ActorRole.MECHANIC, owner_id=mechanic_id)
    await credentials.delete_actor(conn, ActorRole.MECHANIC, mechanic_id)
    return MessageOut(message="Mechanic profile deleted successfully")


__all__ = ["mechanics_router"]
