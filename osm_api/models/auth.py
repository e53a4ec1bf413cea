# osm_api/models/auth.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .actor import ActorRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: ActorRole


class TokenData(BaseModel):
    """Identity asserted by a verified session token."""
    actor_id: int
    role: ActorRole


class LoginRequest(BaseModel):
    username: str
    password: str
    role: ActorRole


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class ResetTokenIssued(BaseModel):
    success: bool = True
    message: str = "Reset token generated and will be delivered to the account email."
    # Only populated when the deployment exposes tokens directly
    reset_token: Optional[str] = None


class MessageOut(BaseModel):
    success: bool = True
    message: str
