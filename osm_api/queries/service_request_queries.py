# osm_api/queries/service_request_queries.py
from typing import Optional, Dict, Any, List
import asyncpg

from ..models.service_request import RequestStatus

REQUEST_COLUMNS = """
    id, customer_name, phone_number, service_type, location,
    user_id, mechanic_id, status, created_at
"""


async def create_service_request(
    conn: asyncpg.Connection,
    customer_name: str,
    phone_number: str,
    service_type: str,
    location: str,
    user_id: Optional[int] = None
) -> Dict[str, Any]:
    """Insert a new request; it always starts Pending"""
    return await conn.fetchrow(
        f"""
        INSERT INTO service_requests (
            customer_name, phone_number, service_type, location, user_id, status
        )
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {REQUEST_COLUMNS}
        """,
        customer_name, phone_number, service_type, location, user_id,
        RequestStatus.PENDING.value
    )


async def mark_approved(
    conn: asyncpg.Connection,
    request_id: int,
    mechanic_id: int
) -> Optional[Dict[str, Any]]:
    """Single-statement transition; the current status is not checked"""
    return await conn.fetchrow(
        f"""
        UPDATE service_requests
        SET status = $1, mechanic_id = $2
        WHERE id = $3
        RETURNING {REQUEST_COLUMNS}
        """,
        RequestStatus.APPROVED.value, mechanic_id, request_id
    )


async def mark_rejected(
    conn: asyncpg.Connection,
    request_id: int
) -> Optional[Dict[str, Any]]:
    """Leaves mechanic_id untouched"""
    return await conn.fetchrow(
        f"""
        UPDATE service_requests
        SET status = $1
        WHERE id = $2
        RETURNING {REQUEST_COLUMNS}
        """,
        RequestStatus.REJECTED.value, request_id
    )


async def get_customer_requests(
    conn: asyncpg.Connection,
    user_id: int
) -> List[Dict[str, Any]]:
    return await conn.fetch(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM service_requests
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        user_id
    )


async def get_mechanic_inbox(
    conn: asyncpg.Connection,
    mechanic_id: int
) -> List[Dict[str, Any]]:
    """Everything unclaimed plus everything this mechanic already claimed"""
    return await conn.fetch(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM service_requests
        WHERE status = $1 OR mechanic_id = $2
        ORDER BY created_at DESC, id DESC
        """,
        RequestStatus.PENDING.value, mechanic_id
    )
