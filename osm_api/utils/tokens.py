# osm_api/utils/tokens.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from jose import JWTError, jwt

from ..config import Settings, get_settings
from ..errors import InvalidToken
from ..models.actor import ActorRole
from ..models.auth import TokenData


class SessionTokenIssuer:
    """
    Signs and checks stateless bearer tokens.

    Tokens carry the actor id in ``sub`` and the role in ``role``. There is
    no revocation list: a token stays valid until ``exp``.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24 * 7):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expire_minutes)

    def issue(self, actor_id: int, role: ActorRole, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(actor_id),
            "role": ActorRole(role).value,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenData:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidToken() from e

        actor_id = payload.get("sub")
        role = payload.get("role")
        if actor_id is None or role is None:
            raise InvalidToken()
        try:
            return TokenData(actor_id=int(actor_id), role=ActorRole(role))
        except ValueError as e:
            raise InvalidToken() from e


def get_token_issuer(settings: Settings = Depends(get_settings)) -> SessionTokenIssuer:
    return SessionTokenIssuer(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes
    )
