# osm_api/queries/actor_queries.py
from typing import Optional, Dict, Any
import asyncpg

from ..models.actor import ActorRole

ACTOR_TABLES = {
    ActorRole.CUSTOMER: "customers",
    ActorRole.MECHANIC: "mechanics",
}

# Columns an actor may change on their own profile
PROFILE_FIELDS = {
    ActorRole.CUSTOMER: ("name", "mobile", "email"),
    ActorRole.MECHANIC: ("name", "mobile", "email", "latitude", "longitude"),
}

# Serializes registrations: uniqueness spans two tables, so no single
# unique index can guard it.
IDENTITY_LOCK_KEY = 0x05E1D

ACTOR_COLUMNS = "id, name, username, mobile, email"


async def lock_identity_namespace(conn: asyncpg.Connection) -> None:
    """Hold the registration lock until the surrounding transaction ends"""
    await conn.execute("SELECT pg_advisory_xact_lock($1)", IDENTITY_LOCK_KEY)


async def find_identity_conflict(
    conn: asyncpg.Connection,
    username: Optional[str],
    email: Optional[str],
    exclude_role: Optional[ActorRole] = None,
    exclude_id: Optional[int] = None
) -> bool:
    """True when the username or email is taken by any actor of either role"""
    found = await conn.fetchval(
        """
        SELECT 1 FROM (
            SELECT id, 'Customer' AS role, username, email FROM customers
            UNION ALL
            SELECT id, 'Mechanic' AS role, username, email FROM mechanics
        ) actors
        WHERE (username = $1 OR email = $2)
        AND (role, id) IS DISTINCT FROM ($3::text, $4::int)
        LIMIT 1
        """,
        username, email,
        exclude_role.value if exclude_role else None, exclude_id
    )
    return found is not None


async def find_actor_by_username(
    conn: asyncpg.Connection,
    role: ActorRole,
    username: str
) -> Optional[Dict[str, Any]]:
    """Get an actor of one role with the password hash, for login"""
    table = ACTOR_TABLES[role]
    return await conn.fetchrow(
        f"SELECT {ACTOR_COLUMNS}, password_hash FROM {table} WHERE username = $1",
        username
    )


async def find_actor_by_email(
    conn: asyncpg.Connection,
    email: str
) -> Optional[Dict[str, Any]]:
    """Find the actor owning an email in either table; customers win ties"""
    return await conn.fetchrow(
        """
        SELECT id, role FROM (
            SELECT id, 'Customer' AS role FROM customers WHERE email = $1
            UNION ALL
            SELECT id, 'Mechanic' AS role FROM mechanics WHERE email = $1
        ) actors
        ORDER BY role
        LIMIT 1
        """,
        email
    )


async def get_actor_by_id(
    conn: asyncpg.Connection,
    role: ActorRole,
    actor_id: int
) -> Optional[Dict[str, Any]]:
    table = ACTOR_TABLES[role]
    return await conn.fetchrow(
        f"SELECT {ACTOR_COLUMNS} FROM {table} WHERE id = $1",
        actor_id
    )


async def insert_customer(
    conn: asyncpg.Connection,
    name: str,
    username: str,
    mobile: str,
    email: str,
    password_hash: str
) -> int:
    return await conn.fetchval(
        """
        INSERT INTO customers (name, username, mobile, email, password_hash)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING id
        """,
        name, username, mobile, email, password_hash
    )


async def insert_mechanic(
    conn: asyncpg.Connection,
    name: str,
    username: str,
    mobile: str,
    email: str,
    password_hash: str,
    latitude: float,
    longitude: float
) -> int:
    return await conn.fetchval(
        """
        INSERT INTO mechanics (
            name, username, mobile, email, password_hash, latitude, longitude
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING id
        """,
        name, username, mobile, email, password_hash, latitude, longitude
    )


async def update_actor(
    conn: asyncpg.Connection,
    role: ActorRole,
    actor_id: int,
    updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """Update the supplied profile fields; None when the actor does not exist"""
    table = ACTOR_TABLES[role]
    set_clauses = []
    params = []
    idx = 1

    for field in PROFILE_FIELDS[role]:
        if updates.get(field) is not None:
            set_clauses.append(f"{field} = ${idx}")
            params.append(updates[field])
            idx += 1

    if not set_clauses:
        return await get_actor_by_id(conn, role, actor_id)

    query = f"""
        UPDATE {table}
        SET {', '.join(set_clauses)}
        WHERE id = ${idx}
        RETURNING {ACTOR_COLUMNS}
    """
    params.append(actor_id)

    return await conn.fetchrow(query, *params)


async def update_password_hash(
    conn: asyncpg.Connection,
    role: ActorRole,
    actor_id: int,
    password_hash: str
) -> bool:
    table = ACTOR_TABLES[role]
    updated = await conn.fetchval(
        f"UPDATE {table} SET password_hash = $1 WHERE id = $2 RETURNING id",
        password_hash, actor_id
    )
    return updated is not None


async def delete_actor(
    conn: asyncpg.Connection,
    role: ActorRole,
    actor_id: int
) -> bool:
    table = ACTOR_TABLES[role]
    deleted = await conn.fetchval(
        f"DELETE FROM {table} WHERE id = $1 RETURNING id",
        actor_id
    )
    return deleted is not None


async def get_mechanic_details(
    conn: asyncpg.Connection,
    mechanic_id: int
) -> Optional[Dict[str, Any]]:
    return await conn.fetchrow(
        f"""
        SELECT {ACTOR_COLUMNS}, is_available, latitude, longitude
        FROM mechanics
        WHERE id = $1
        """,
        mechanic_id
    )


async def get_mechanic_availability(
    conn: asyncpg.Connection,
    mechanic_id: int
) -> Optional[bool]:
    """None when the mechanic does not exist"""
    return await conn.fetchval(
        "SELECT is_available FROM mechanics WHERE id = $1",
        mechanic_id
    )


async def set_mechanic_availability(
    conn: asyncpg.Connection,
    mechanic_id: int,
    is_available: bool
) -> Optional[bool]:
    return await conn.fetchval(
        """
        UPDATE mechanics
        SET is_available = $1
        WHERE id = $2
        RETURNING is_available
        """,
        is_available, mechanic_id
    )
