# osm_api/database.py
import asyncio
import logging
from typing import AsyncGenerator

import asyncpg
from fastapi import Depends, Request

from .config import Settings, get_settings
from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS customers (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    username TEXT NOT NULL UNIQUE,
    mobile TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS mechanics (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    username TEXT NOT NULL UNIQUE,
    mobile TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    latitude DOUBLE PRECISION NOT NULL,
    longitude DOUBLE PRECISION NOT NULL,
    is_available BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS service_requests (
    id SERIAL PRIMARY KEY,
    customer_name TEXT NOT NULL,
    phone_number TEXT NOT NULL,
    service_type TEXT NOT NULL,
    location TEXT NOT NULL,
    user_id INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    mechanic_id INTEGER REFERENCES mechanics(id) ON DELETE SET NULL,
    status TEXT NOT NULL DEFAULT 'Pending'
        CHECK (status IN ('Pending', 'Approved', 'Rejected')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS service_requests_user_idx ON service_requests (user_id, created_at DESC);
CREATE INDEX IF NOT EXISTS service_requests_inbox_idx ON service_requests (status, mechanic_id);

CREATE TABLE IF NOT EXISTS password_reset_tokens (
    id SERIAL PRIMARY KEY,
    actor_role TEXT NOT NULL CHECK (actor_role IN ('Customer', 'Mechanic')),
    actor_id INTEGER NOT NULL,
    token TEXT NOT NULL UNIQUE,
    expires_at TIMESTAMPTZ NOT NULL
);
"""


async def create_pool(settings: Settings) -> asyncpg.Pool:
    return await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.store_timeout_seconds,
        command_timeout=settings.store_timeout_seconds,
    )


async def init_db(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("Database schema ensured")


async def get_db(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> AsyncGenerator[asyncpg.Connection, None]:
    """Lend one pooled connection to the request."""
    pool: asyncpg.Pool = request.app.state.pool
    try:
        conn = await pool.acquire(timeout=settings.store_timeout_seconds)
    except (asyncio.TimeoutError, OSError, asyncpg.PostgresConnectionError) as e:
        logger.error(f"Could not acquire a database connection: {e!r}")
        raise StoreUnavailable() from e
    try:
        yield conn
    finally:
        await pool.release(conn)
