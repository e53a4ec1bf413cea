# osm_api/services/service_requests.py
"""
Service request lifecycle.

A request starts Pending and is moved to Approved (with the approving
mechanic recorded) or Rejected. Transitions are single UPDATE statements and
do not look at the current status, so a later approve or reject overwrites an
earlier one.
"""
import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ..errors import NotFound, ValidationError
from ..models.service_request import ServiceRequestOut
from ..queries import service_request_queries

logger = logging.getLogger(__name__)

REQUIRED_REQUEST_FIELDS = ("customer_name", "phone_number", "service_type", "location")


def _to_out(row) -> ServiceRequestOut:
    return ServiceRequestOut(**dict(row))


async def create_request(
    conn: asyncpg.Connection,
    fields: Dict[str, Any],
    user_id: Optional[int] = None
) -> ServiceRequestOut:
    missing = [
        name for name in REQUIRED_REQUEST_FIELDS
        if not isinstance(fields.get(name), str) or not fields[name].strip()
    ]
    if missing:
        raise ValidationError("All fields are required", details=missing)

    try:
        row = await service_request_queries.create_service_request(
            conn,
            fields["customer_name"],
            fields["phone_number"],
            fields["service_type"],
            fields["location"],
            user_id
        )
    except asyncpg.ForeignKeyViolationError as e:
        raise ValidationError("Unknown user_id", details=["user_id"]) from e
    logger.info(f"Service request #{row['id']} created ({fields['service_type']})")
    return _to_out(row)


async def approve_request(
    conn: asyncpg.Connection,
    request_id: int,
    mechanic_id: int
) -> ServiceRequestOut:
    try:
        row = await service_request_queries.mark_approved(conn, request_id, mechanic_id)
    except asyncpg.ForeignKeyViolationError as e:
        # The session token outlives a deleted mechanic
        raise NotFound("Mechanic not found") from e
    if row is None:
        raise NotFound("Service request not found")
    logger.info(f"Service request #{request_id} approved by mechanic #{mechanic_id}")
    return _to_out(row)


async def reject_request(conn: asyncpg.Connection, request_id: int) -> ServiceRequestOut:
    row = await service_request_queries.mark_rejected(conn, request_id)
    if row is None:
        raise NotFound("Service request not found")
    logger.info(f"Service request #{request_id} rejected")
    return _to_out(row)


async def list_for_customer(conn: asyncpg.Connection, user_id: int) -> List[ServiceRequestOut]:
    rows = await service_request_queries.get_customer_requests(conn, user_id)
    return [_to_out(row) for row in rows]


async def list_for_mechanic(conn: asyncpg.Connection, mechanic_id: int) -> List[ServiceRequestOut]:
    rows = await service_request_queries.get_mechanic_inbox(conn, mechanic_id)
    return [_to_out(row) for row in rows]
