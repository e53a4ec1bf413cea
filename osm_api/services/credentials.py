# osm_api/services/credentials.py
import logging
from numbers import Real
from typing import Any, Dict

import asyncpg

from ..errors import DuplicateIdentity, InvalidCredentials, NotFound, ValidationError
from ..models.actor import ActorOut, ActorRole, MechanicDetails, RegisterRequest
from ..models.auth import TokenData
from ..queries import actor_queries
from ..utils.security import PasswordHasher

logger = logging.getLogger(__name__)

REQUIRED_ACTOR_FIELDS = ("name", "username", "mobile", "email", "password_hash")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _not_found(role: ActorRole) -> NotFound:
    return NotFound(f"{role.value} not found")


async def create_actor(conn: asyncpg.Connection, role: ActorRole, fields: Dict[str, Any]) -> int:
    """
    Insert a customer or mechanic and return its id.

    ``fields`` holds an already hashed ``password_hash``. Username and email
    must be free in both actor tables.
    """
    missing = [name for name in REQUIRED_ACTOR_FIELDS if not fields.get(name)]
    if missing:
        raise ValidationError("Missing required fields.", details=missing)

    if role == ActorRole.MECHANIC:
        if not (_is_number(fields.get("latitude")) and _is_number(fields.get("longitude"))):
            raise ValidationError("Mechanic must provide latitude and longitude")

    try:
        async with conn.transaction():
            await actor_queries.lock_identity_namespace(conn)
            if await actor_queries.find_identity_conflict(conn, fields["username"], fields["email"]):
                raise DuplicateIdentity()

            if role == ActorRole.MECHANIC:
                return await actor_queries.insert_mechanic(
                    conn,
                    fields["name"], fields["username"], fields["mobile"],
                    fields["email"], fields["password_hash"],
                    float(fields["latitude"]), float(fields["longitude"])
                )
            return await actor_queries.insert_customer(
                conn,
                fields["name"], fields["username"], fields["mobile"],
                fields["email"], fields["password_hash"]
            )
    except asyncpg.UniqueViolationError as e:
        raise DuplicateIdentity() from e


async def register_actor(
    conn: asyncpg.Connection,
    payload: RegisterRequest,
    hasher: PasswordHasher
) -> int:
    fields = payload.model_dump(exclude={"password", "role"})
    fields["email"] = str(payload.email)
    fields["password_hash"] = hasher.hash(payload.password)

    actor_id = await create_actor(conn, payload.role, fields)
    logger.info(f"Registered {payload.role.value} #{actor_id}")
    return actor_id


async def authenticate(
    conn: asyncpg.Connection,
    role: ActorRole,
    username: str,
    password: str,
    hasher: PasswordHasher
) -> Dict[str, Any]:
    """Return the actor row for valid credentials, else raise InvalidCredentials"""
    actor = await actor_queries.find_actor_by_username(conn, role, username)
    if actor is None:
        hasher.dummy_verify()
        logger.warning(f"Login failed for unknown {role.value} username")
        raise InvalidCredentials()

    if not hasher.verify(password, actor["password_hash"]):
        logger.warning(f"Login failed for {role.value} #{actor['id']}")
        raise InvalidCredentials()

    actor = dict(actor)
    actor.pop("password_hash")
    return actor


async def get_my_info(conn: asyncpg.Connection, identity: TokenData) -> ActorOut:
    actor = await actor_queries.get_actor_by_id(conn, identity.role, identity.actor_id)
    if actor is None:
        raise _not_found(identity.role)
    return ActorOut(**dict(actor), role=identity.role)


async def update_actor(
    conn: asyncpg.Connection,
    role: ActorRole,
    actor_id: int,
    fields: Dict[str, Any]
) -> ActorOut:
    """Partial profile update of the actor's own record"""
    updates = {
        field: value for field, value in fields.items()
        if field in actor_queries.PROFILE_FIELDS[role] and value is not None
    }
    if "email" in updates:
        updates["email"] = str(updates["email"])

    try:
        async with conn.transaction():
            if "email" in updates:
                await actor_queries.lock_identity_namespace(conn)
                taken = await actor_queries.find_identity_conflict(
                    conn, None, updates["email"],
                    exclude_role=role, exclude_id=actor_id
                )
                if taken:
                    raise DuplicateIdentity("Email already exists")
            actor = await actor_queries.update_actor(conn, role, actor_id, updates)
    except asyncpg.UniqueViolationError as e:
        raise DuplicateIdentity("Email already exists") from e

    if actor is None:
        raise _not_found(role)
    logger.info(f"Updated {role.value} #{actor_id} fields {sorted(updates)}")
    return ActorOut(**dict(actor), role=role)


async def delete_actor(conn: asyncpg.Connection, role: ActorRole, actor_id: int) -> None:
    if not await actor_queries.delete_actor(conn, role, actor_id):
        raise _not_found(role)
    logger.info(f"Deleted {role.value} #{actor_id}")


async def get_mechanic_status(conn: asyncpg.Connection, mechanic_id: int) -> bool:
    is_available = await actor_queries.get_mechanic_availability(conn, mechanic_id)
    if is_available is None:
        raise _not_found(ActorRole.MECHANIC)
    return bool(is_available)


async def set_mechanic_status(conn: asyncpg.Connection, mechanic_id: int, is_available: bool) -> bool:
    updated = await actor_queries.set_mechanic_availability(conn, mechanic_id, is_available)
    if updated is None:
        raise _not_found(ActorRole.MECHANIC)
    return bool(updated)


async def get_mechanic_details(conn: asyncpg.Connection, mechanic_id: int) -> MechanicDetails:
    mechanic = await actor_queries.get_mechanic_details(conn, mechanic_id)
    if mechanic is None:
        raise _not_found(ActorRole.MECHANIC)
    return MechanicDetails(**dict(mechanic))
