# osm_api/utils/auth.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from ..errors import Forbidden, Unauthorized
from ..models.actor import ActorRole
from ..models.auth import TokenData
from .tokens import SessionTokenIssuer, get_token_issuer

# auto_error is off so a missing header raises our own Unauthorized
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def authorize(
    identity: TokenData,
    role: Optional[ActorRole] = None,
    owner_id: Optional[int] = None
) -> TokenData:
    """Role and ownership check for an already verified identity"""
    if role is not None and identity.role != role:
        raise Forbidden()
    if owner_id is not None and identity.actor_id != owner_id:
        raise Forbidden()
    return identity


async def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme),
    issuer: SessionTokenIssuer = Depends(get_token_issuer)
) -> TokenData:
    """Identity from the bearer token"""
    if not token:
        raise Unauthorized("Access denied. No token provided.")
    return issuer.verify(token)


async def get_optional_actor(
    token: Optional[str] = Depends(oauth2_scheme),
    issuer: SessionTokenIssuer = Depends(get_token_issuer)
) -> Optional[TokenData]:
    """Identity when a token is sent; a bad token is still rejected"""
    if not token:
        return None
    return issuer.verify(token)


def require_role(role: ActorRole):
    async def dependency(current: TokenData = Depends(get_current_actor)) -> TokenData:
        return authorize(current, role=role)
    return dependency


require_customer = require_role(ActorRole.CUSTOMER)
require_mechanic = require_role(ActorRole.MECHANIC)

__all__ = [
    "oauth2_scheme",
    "authorize",
    "get_current_actor",
    "get_optional_actor",
    "require_role",
    "require_customer",
    "require_mechanic"
]
