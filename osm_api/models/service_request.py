# osm_api/models/service_request.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class RequestStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ServiceRequestCreate(BaseModel):
    customer_name: str
    phone_number: str
    service_type: str
    location: str
    # Honoured only for anonymous submissions
    user_id: Optional[int] = None


class ServiceRequestOut(BaseModel):
    id: int
    customer_name: str
    phone_number: str
    service_type: str
    location: str
    user_id: Optional[int] = None
    mechanic_id: Optional[int] = None
    status: RequestStatus
    created_at: datetime


class ServiceRequestList(BaseModel):
    success: bool = True
    service_requests: List[ServiceRequestOut]
