# osm_api/services/password_reset.py
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import asyncpg

from ..errors import InvalidOrExpiredToken, NotFound
from ..models.actor import ActorRole
from ..queries import actor_queries, reset_token_queries
from ..utils.security import PasswordHasher

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24
MAX_TOKEN_ATTEMPTS = 3


@dataclass
class IssuedResetToken:
    token: str
    actor_role: ActorRole
    actor_id: int
    expires_at: datetime


def generate_reset_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


async def request_reset(
    conn: asyncpg.Connection,
    email: str,
    expire_minutes: int = 30
) -> IssuedResetToken:
    """Issue a single-use reset token for the actor owning ``email``"""
    actor = await actor_queries.find_actor_by_email(conn, email)
    if actor is None:
        raise NotFound("Email not found")

    role = ActorRole(actor["role"])
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)

    for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
        token = generate_reset_token()
        try:
            await reset_token_queries.create_reset_token(conn, role, actor["id"], token, expires_at)
            break
        except asyncpg.UniqueViolationError:
            if attempt == MAX_TOKEN_ATTEMPTS:
                raise
            logger.warning("Reset token collision, regenerating")

    logger.info(f"Password reset token issued for {role.value} #{actor['id']}")
    return IssuedResetToken(token=token, actor_role=role, actor_id=actor["id"], expires_at=expires_at)


async def redeem_reset(
    conn: asyncpg.Connection,
    token: str,
    new_password: str,
    hasher: PasswordHasher
) -> None:
    """
    Replace the actor's password and burn the token.

    Unknown and expired tokens fail the same way.
    """
    async with conn.transaction():
        record = await reset_token_queries.consume_reset_token(conn, token)
        if record is None:
            raise InvalidOrExpiredToken()

        role = ActorRole(record["actor_role"])
        updated = await actor_queries.update_password_hash(
            conn, role, record["actor_id"], hasher.hash(new_password)
        )
        # The actor was deleted after the token was issued
        if not updated:
            raise InvalidOrExpiredToken()

    logger.info(f"Password reset redeemed for {role.value} #{record['actor_id']}")


async def purge_expired_tokens(conn: asyncpg.Connection) -> int:
    purged = await reset_token_queries.purge_expired_tokens(conn)
    if purged:
        logger.info(f"Purged {purged} expired password reset tokens")
    return purged
