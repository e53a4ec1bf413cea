# osm_api/utils/security.py
from functools import lru_cache

from fastapi import Depends
from passlib.context import CryptContext

from ..config import Settings, get_settings


class PasswordHasher:
    """Salted bcrypt hashing; the cost factor comes from settings."""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, secret: str) -> str:
        return self.pwd_context.hash(secret)

    def verify(self, secret: str, hashed: str) -> bool:
        return self.pwd_context.verify(secret, hashed)

    def dummy_verify(self) -> None:
        # Same cost as a real verify, for unknown usernames
        self.pwd_context.dummy_verify()


@lru_cache()
def _hasher_for(rounds: int) -> PasswordHasher:
    return PasswordHasher(rounds)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return _hasher_for(settings.bcrypt_rounds)
