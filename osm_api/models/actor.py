# osm_api/models/actor.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ActorRole(str, Enum):
    CUSTOMER = "Customer"
    MECHANIC = "Mechanic"


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: ActorRole
    # Required for mechanics only
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RegisterOut(BaseModel):
    success: bool = True
    message: str = "Registered successfully"
    id: int
    role: ActorRole


class ActorOut(BaseModel):
    id: int
    name: str
    username: str
    mobile: str
    email: str
    role: ActorRole


class MechanicDetails(BaseModel):
    id: int
    name: str
    username: str
    mobile: str
    email: str
    is_available: bool
    latitude: float
    longitude: float


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    mobile: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None


class MechanicUpdate(CustomerUpdate):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MechanicAvailability(BaseModel):
    is_available: bool
