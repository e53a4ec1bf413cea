# tests/support.py
"""
Test doubles for the store.

InMemoryStore mirrors every query function (same signature, connection
first) and is patched over the query modules, so services, the access gate
and routes run without PostgreSQL. RecordingConnection captures SQL for the
tests that assert on statements themselves.
"""
import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import asyncpg

from osm_api.config import Settings
from osm_api.models.actor import ActorRole
from osm_api.models.service_request import RequestStatus
from osm_api.queries import actor_queries, reset_token_queries, service_request_queries

PUBLIC_COLUMNS = ("id", "name", "username", "mobile", "email")


def build_test_settings(**overrides) -> Settings:
    values = {
        "secret_key": "test-secret",
        "bcrypt_rounds": 4,
        "expose_reset_token": True,
    }
    values.update(overrides)
    return Settings(**values)


class FakeTransaction:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeConnection:
    def __init__(self):
        self.transactions = 0

    def transaction(self):
        self.transactions += 1
        return FakeTransaction()


class RecordingConnection(FakeConnection):
    """Returns canned results and records every statement."""

    def __init__(self, fetchrow: Any = None, fetchval: Any = None, fetch: Any = None):
        super().__init__()
        self.calls = []
        self._fetchrow = fetchrow
        self._fetchval = fetchval
        self._fetch = fetch if fetch is not None else []

    async def execute(self, query, *args):
        self.calls.append(("execute", query, args))
        return "OK"

    async def fetchrow(self, query, *args):
        self.calls.append(("fetchrow", query, args))
        return self._fetchrow

    async def fetchval(self, query, *args):
        self.calls.append(("fetchval", query, args))
        return self._fetchval

    async def fetch(self, query, *args):
        self.calls.append(("fetch", query, args))
        return self._fetch

    def last_sql(self) -> str:
        return " ".join(self.calls[-1][1].split())


class InMemoryStore:
    def __init__(self):
        self.actors: Dict[ActorRole, Dict[int, Dict[str, Any]]] = {
            ActorRole.CUSTOMER: {},
            ActorRole.MECHANIC: {},
        }
        self.requests: Dict[int, Dict[str, Any]] = {}
        self.reset_tokens: Dict[int, Dict[str, Any]] = {}
        self.lock_calls = 0
        self._actor_ids = {role: itertools.count(1) for role in ActorRole}
        self._request_ids = itertools.count(1)
        self._token_ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def install(self, monkeypatch) -> "InMemoryStore":
        for name in (
            "lock_identity_namespace", "find_identity_conflict", "find_actor_by_username",
            "find_actor_by_email", "get_actor_by_id", "insert_customer", "insert_mechanic",
            "update_actor", "update_password_hash", "delete_actor", "get_mechanic_details",
            "get_mechanic_availability", "set_mechanic_availability",
        ):
            monkeypatch.setattr(actor_queries, name, getattr(self, name))
        for name in (
            "create_service_request", "mark_approved", "mark_rejected",
            "get_customer_requests", "get_mechanic_inbox",
        ):
            monkeypatch.setattr(service_request_queries, name, getattr(self, name))
        for name in ("create_reset_token", "consume_reset_token", "purge_expired_tokens"):
            monkeypatch.setattr(reset_token_queries, name, getattr(self, name))
        return self

    # actors

    def _all_actors(self):
        for role, table in self.actors.items():
            for actor in table.values():
                yield role, actor

    async def lock_identity_namespace(self, conn) -> None:
        self.lock_calls += 1

    async def find_identity_conflict(self, conn, username, email, exclude_role=None, exclude_id=None) -> bool:
        for role, actor in self._all_actors():
            if role == exclude_role and actor["id"] == exclude_id:
                continue
            if actor["username"] == username or actor["email"] == email:
                return True
        return False

    async def find_actor_by_username(self, conn, role, username) -> Optional[Dict[str, Any]]:
        for actor in self.actors[role].values():
            if actor["username"] == username:
                return {key: actor[key] for key in PUBLIC_COLUMNS + ("password_hash",)}
        return None

    async def find_actor_by_email(self, conn, email) -> Optional[Dict[str, Any]]:
        for role in (ActorRole.CUSTOMER, ActorRole.MECHANIC):
            for actor in self.actors[role].values():
                if actor["email"] == email:
                    return {"id": actor["id"], "role": role.value}
        return None

    async def get_actor_by_id(self, conn, role, actor_id) -> Optional[Dict[str, Any]]:
        actor = self.actors[role].get(actor_id)
        if actor is None:
            return None
        return {key: actor[key] for key in PUBLIC_COLUMNS}

    def _insert_actor(self, role, **fields) -> int:
        actor_id = next(self._actor_ids[role])
        self.actors[role][actor_id] = {"id": actor_id, **fields}
        return actor_id

    def add_actor(self, role: ActorRole) -> int:
        """Seed an actor directly, for tests that only need a valid id."""
        name = f"{role.value.lower()}{len(self.actors[role]) + 1}"
        return self._insert_actor(
            role,
            name=name, username=name, mobile="0700000000", email=f"{name}@x.com",
            password_hash="", latitude=0.0, longitude=0.0, is_available=False
        )

    async def insert_customer(self, conn, name, username, mobile, email, password_hash) -> int:
        return self._insert_actor(
            ActorRole.CUSTOMER,
            name=name, username=username, mobile=mobile,
            email=email, password_hash=password_hash
        )

    async def insert_mechanic(self, conn, name, username, mobile, email, password_hash, latitude, longitude) -> int:
        return self._insert_actor(
            ActorRole.MECHANIC,
            name=name, username=username, mobile=mobile, email=email,
            password_hash=password_hash, latitude=latitude, longitude=longitude,
            is_available=False
        )

    async def update_actor(self, conn, role, actor_id, updates) -> Optional[Dict[str, Any]]:
        actor = self.actors[role].get(actor_id)
        if actor is None:
            return None
        for field in actor_queries.PROFILE_FIELDS[role]:
            if updates.get(field) is not None:
                actor[field] = updates[field]
        return {key: actor[key] for key in PUBLIC_COLUMNS}

    async def update_password_hash(self, conn, role, actor_id, password_hash) -> bool:
        actor = self.actors[role].get(actor_id)
        if actor is None:
            return False
        actor["password_hash"] = password_hash
        return True

    async def delete_actor(self, conn, role, actor_id) -> bool:
        return self.actors[role].pop(actor_id, None) is not None

    async def get_mechanic_details(self, conn, mechanic_id) -> Optional[Dict[str, Any]]:
        actor = self.actors[ActorRole.MECHANIC].get(mechanic_id)
        if actor is None:
            return None
        keys = PUBLIC_COLUMNS + ("is_available", "latitude", "longitude")
        return {key: actor[key] for key in keys}

    async def get_mechanic_availability(self, conn, mechanic_id) -> Optional[bool]:
        actor = self.actors[ActorRole.MECHANIC].get(mechanic_id)
        return None if actor is None else actor["is_available"]

    async def set_mechanic_availability(self, conn, mechanic_id, is_available) -> Optional[bool]:
        actor = self.actors[ActorRole.MECHANIC].get(mechanic_id)
        if actor is None:
            return None
        actor["is_available"] = is_available
        return is_available

    # service requests

    async def create_service_request(self, conn, customer_name, phone_number, service_type,
                                     location, user_id=None) -> Dict[str, Any]:
        if user_id is not None and user_id not in self.actors[ActorRole.CUSTOMER]:
            raise asyncpg.ForeignKeyViolationError("service_requests_user_id_fkey")
        request_id = next(self._request_ids)
        # Strictly increasing timestamps keep "newest first" deterministic
        self._clock += timedelta(seconds=1)
        self.requests[request_id] = {
            "id": request_id,
            "customer_name": customer_name,
            "phone_number": phone_number,
            "service_type": service_type,
            "location": location,
            "user_id": user_id,
            "mechanic_id": None,
            "status": RequestStatus.PENDING.value,
            "created_at": self._clock,
        }
        return dict(self.requests[request_id])

    async def mark_approved(self, conn, request_id, mechanic_id) -> Optional[Dict[str, Any]]:
        row = self.requests.get(request_id)
        if row is None:
            return None
        if mechanic_id not in self.actors[ActorRole.MECHANIC]:
            raise asyncpg.ForeignKeyViolationError("service_requests_mechanic_id_fkey")
        row.update(status=RequestStatus.APPROVED.value, mechanic_id=mechanic_id)
        return dict(row)

    async def mark_rejected(self, conn, request_id) -> Optional[Dict[str, Any]]:
        row = self.requests.get(request_id)
        if row is None:
            return None
        row["status"] = RequestStatus.REJECTED.value
        return dict(row)

    def _newest_first(self, rows) -> List[Dict[str, Any]]:
        return [dict(row) for row in sorted(rows, key=lambda r: (r["created_at"], r["id"]), reverse=True)]

    async def get_customer_requests(self, conn, user_id) -> List[Dict[str, Any]]:
        return self._newest_first(r for r in self.requests.values() if r["user_id"] == user_id)

    async def get_mechanic_inbox(self, conn, mechanic_id) -> List[Dict[str, Any]]:
        return self._newest_first(
            r for r in self.requests.values()
            if r["status"] == RequestStatus.PENDING.value or r["mechanic_id"] == mechanic_id
        )

    # reset tokens

    async def create_reset_token(self, conn, actor_role, actor_id, token, expires_at) -> int:
        token_id = next(self._token_ids)
        self.reset_tokens[token_id] = {
            "id": token_id,
            "actor_role": actor_role.value,
            "actor_id": actor_id,
            "token": token,
            "expires_at": expires_at,
        }
        return token_id

    async def consume_reset_token(self, conn, token) -> Optional[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        for token_id, record in list(self.reset_tokens.items()):
            if record["token"] == token and record["expires_at"] > now:
                del self.reset_tokens[token_id]
                return {key: record[key] for key in ("id", "actor_role", "actor_id")}
        return None

    async def purge_expired_tokens(self, conn) -> int:
        now = datetime.now(timezone.utc)
        expired = [tid for tid, record in self.reset_tokens.items() if record["expires_at"] <= now]
        for token_id in expired:
            del self.reset_tokens[token_id]
        return len(expired)

    def expire_token(self, token: str) -> None:
        for record in self.reset_tokens.values():
            if record["token"] == token:
                record["expires_at"] = datetime.now(timezone.utc) - timedelta(seconds=1)
