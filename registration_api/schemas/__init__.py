from registration_api.schemas.registration import (
    RegistrationRequest, RegistrationResponse, RegistrationListResponse, ErrorResponse,
)
from registration_api.schemas.newsletter import SubscribeRequest, SubscribeResponse

__all__ = [
    "RegistrationRequest", "RegistrationResponse", "RegistrationListResponse", "ErrorResponse",
    "SubscribeRequest", "SubscribeResponse",
]
