# osm_api/routes/service_requests.py
from typing import Optional

import asyncpg
from fastapi import APIRouter, Depends, status

from ..database import get_db
from ..models.actor import ActorRole
from ..models.auth import TokenData
from ..models.service_request import ServiceRequestCreate, ServiceRequestList, ServiceRequestOut
from ..services import service_requests
from ..utils.auth import get_optional_actor, require_customer, require_mechanic

service_requests_router = APIRouter(prefix="/service-requests", tags=["Service Requests"])


@service_requests_router.post("/", response_model=ServiceRequestOut, status_code=status.HTTP_201_CREATED)
async def create_service_request(
    payload: ServiceRequestCreate,
    current: Optional[TokenData] = Depends(get_optional_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    # The body user_id is honoured only for anonymous callers
    user_id = payload.user_id
    if current is not None:
        user_id = current.actor_id if current.role == ActorRole.CUSTOMER else None

    return await service_requests.create_request(
        conn, payload.model_dump(exclude={"user_id"}), user_id
    )


@service_requests_router.get("/mine", response_model=ServiceRequestList)
async def list_my_requests(
    current: TokenData = Depends(require_customer),
    conn: asyncpg.Connection = Depends(get_db)
):
    requests = await service_requests.list_for_customer(conn, current.actor_id)
    return ServiceRequestList(service_requests=requests)


@service_requests_router.put("/{request_id}/approve", response_model=ServiceRequestOut)
async def approve_service_request(
    request_id: int,
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    return await service_requests.approve_request(conn, request_id, current.actor_id)


@service_requests_router.put("/{request_id}/reject", response_model=ServiceRequestOut)
async def reject_service_request(
    request_id: int,
    current: TokenData = Depends(require_mechanic),
    conn: asyncpg.Connection = Depends(get_db)
):
    return await service_requests.reject_request(conn, request_id)


__all__ = ["service_requests_router"]
