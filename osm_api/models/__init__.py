# osm_api/models/__init__.py
from .actor import (
    ActorRole,
    RegisterRequest,
    RegisterOut,
    ActorOut,
    MechanicDetails,
    CustomerUpdate,
    MechanicUpdate,
    MechanicAvailability
)
from .auth import (
    Token,
    TokenData,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ResetTokenIssued,
    MessageOut
)
from .service_request import (
    RequestStatus,
    ServiceRequestCreate,
    ServiceRequestOut,
    ServiceRequestList
)

__all__ = [
    'ActorRole', 'RegisterRequest', 'RegisterOut', 'ActorOut', 'MechanicDetails',
    'CustomerUpdate', 'MechanicUpdate', 'MechanicAvailability',
    'Token', 'TokenData', 'LoginRequest', 'ForgotPasswordRequest',
    'ResetPasswordRequest', 'ResetTokenIssued', 'MessageOut',
    'RequestStatus', 'ServiceRequestCreate', 'ServiceRequestOut', 'ServiceRequestList'
]
