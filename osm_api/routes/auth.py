# osm_api/routes/auth.py
import logging

import asyncpg
from fastapi import APIRouter, Depends, status

from ..config import Settings, get_settings
from ..database import get_db
from ..models.actor import ActorOut, RegisterOut, RegisterRequest
from ..models.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageOut,
    ResetPasswordRequest,
    ResetTokenIssued,
    Token,
    TokenData
)
from ..services import credentials, password_reset
from ..utils.auth import get_current_actor
from ..utils.security import PasswordHasher, get_password_hasher
from ..utils.tokens import SessionTokenIssuer, get_token_issuer

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


@auth_router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    conn: asyncpg.Connection = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    actor_id = await credentials.register_actor(conn, payload, hasher)
    return RegisterOut(id=actor_id, role=payload.role)


@auth_router.post("/login", response_model=Token)
async def login(
    payload: LoginRequest,
    conn: asyncpg.Connection = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: SessionTokenIssuer = Depends(get_token_issuer)
):
    actor = await credentials.authenticate(
        conn, payload.role, payload.username, payload.password, hasher
    )
    access_token = issuer.issue(actor["id"], payload.role)
    return Token(access_token=access_token, role=payload.role)


@auth_router.get("/me", response_model=ActorOut)
async def me(
    current: TokenData = Depends(get_current_actor),
    conn: asyncpg.Connection = Depends(get_db)
):
    return await credentials.get_my_info(conn, current)


@auth_router.post("/forgot-password", response_model=ResetTokenIssued)
async def forgot_password(
    payload: ForgotPasswordRequest,
    conn: asyncpg.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    issued = await password_reset.request_reset(
        conn, payload.email, expire_minutes=settings.reset_token_expire_minutes
    )
    if settings.expose_reset_token:
        return ResetTokenIssued(reset_token=issued.token)

    # No mail transport here; the token is handed over through the server log
    logger.info(f"[Password Reset] Send this token to {issued.actor_role.value} #{issued.actor_id}: {issued.token}")
    return ResetTokenIssued()


@auth_router.post("/reset-password", response_model=MessageOut)
async def reset_password(
    payload: ResetPasswordRequest,
    conn: asyncpg.Connection = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    await password_reset.redeem_reset(conn, payload.token, payload.new_password, hasher)
    return MessageOut(message="Password updated")


__all__ = ["auth_router"]
