# osm_api/utils/__init__.py
from .auth import (
    oauth2_scheme,
    authorize,
    get_current_actor,
    get_optional_actor,
    require_role,
    require_customer,
    require_mechanic
)
from .security import PasswordHasher, get_password_hasher
from .tokens import SessionTokenIssuer, get_token_issuer

__all__ = [
    "oauth2_scheme",
    "authorize",
    "get_current_actor",
    "get_optional_actor",
    "require_role",
    "require_customer",
    "require_mechanic",
    "PasswordHasher",
    "get_password_hasher",
    "SessionTokenIssuer",
    "get_token_issuer"
]
