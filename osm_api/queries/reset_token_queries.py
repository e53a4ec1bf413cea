# osm_api/queries/reset_token_queries.py
from datetime import datetime
from typing import Optional, Dict, Any
import asyncpg

from ..models.actor import ActorRole


async def create_reset_token(
    conn: asyncpg.Connection,
    actor_role: ActorRole,
    actor_id: int,
    token: str,
    expires_at: datetime
) -> int:
    return await conn.fetchval(
        """
        INSERT INTO password_reset_tokens (actor_role, actor_id, token, expires_at)
        VALUES ($1, $2, $3, $4)
        RETURNING id
        """,
        actor_role.value, actor_id, token, expires_at
    )


async def consume_reset_token(
    conn: asyncpg.Connection,
    token: str
) -> Optional[Dict[str, Any]]:
    """
    Delete a live token and return who it belongs to.
    Check and delete are one statement, so of two racing callers
    only one gets the row back.
    """
    return await conn.fetchrow(
        """
        DELETE FROM password_reset_tokens
        WHERE token = $1 AND expires_at > now()
        RETURNING id, actor_role, actor_id
        """,
        token
    )


async def purge_expired_tokens(conn: asyncpg.Connection) -> int:
    deleted = await conn.fetch(
        "DELETE FROM password_reset_tokens WHERE expires_at <= now() RETURNING id"
    )
    return len(deleted)
