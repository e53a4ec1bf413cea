# osm_api/routes/customers.py
import asyncpg
from fastapi import APIRouter, Depends

from ..database import get_db
from ..models.actor import ActorOut, ActorRole, CustomerUpdate
from ..models.auth import MessageOut, TokenData
from ..services import credentials
from ..utils.auth import authorize, get_current_actor

customers_router = APIRouter(prefix="/customers", tags=["Customers"])


@customers_router.put("/{customer_id}", response_model=ActorOut)
async def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    current: TokenData = Depends(get_current_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    authorize(current, role=ActorRole.CUSTOMER, owner_id=customer_id)
    return await credentials.update_actor(
        conn, ActorRole.CUSTOMER, customer_id, payload.model_dump(exclude_unset=True)
    )


@customers_router.delete("/{customer_id}", response_model=MessageOut)
async def delete_customer(
    customer_id: int,
    current: TokenData = Depends(get_current_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    authorize(current, role=ActorRole.CUSTOMER, owner_id=customer_id)
    await credentials.delete_actor(conn, ActorRole.CUSTOMER, customer_id)
    return MessageOut(message="User profile deleted successfully")


__all__ = ["customers_router"]
