"""
Conference registration endpoints.
"""

from fastapi import APIRouter, Depends

from registration_api.api.dependencies import get_admission_service, get_query_service
from registration_api.core.config import Settings, get_settings
from registration_api.schemas.registration import (
    ErrorResponse,
    RegistrationListResponse,
    RegistrationRequest,
    RegistrationResponse,
)
from registration_api.services.admission_service import AdmissionService
from registration_api.services.registration_query import RegistrationQueryService

router = APIRouter(prefix="/conference", tags=["Registrations"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation, duplicate or capacity error"},
    500: {"model": ErrorResponse, "description": "Storage or unexpected server error"},
}


@router.post("/register", response_model=RegistrationResponse, responses=ERROR_RESPONSES)
async def register(
    payload: RegistrationRequest,
    service: AdmissionService = Depends(get_admission_service),
):
    """
    Register an attendee for a conference.

    Duplicate emails and phone numbers are rejected across all conferences.
    The newsletter subscription runs after the registration is saved and
    only reports its outcome in `newsletterResult`.
    """
    result = await service.admit(payload.to_candidate())
    return RegistrationResponse(
        registration_id=result.registration_id,
        newsletter_result=result.newsletter_result.value if result.newsletter_result else None,
    )


@router.get(
    "/{conference_id}/registrations",
    response_model=RegistrationListResponse,
    responses={500: ERROR_RESPONSES[500]},
)
async def list_registrations(
    conference_id: str,
    query: RegistrationQueryService = Depends(get_query_service),
    settings: Settings = Depends(get_settings),
):
    """Current registrations and count. Not cached (the form polls it for live capacity)."""
    count, registrations = await query.summary_for(conference_id)
    return RegistrationListResponse(
        count=count,
        capacity=settings.EVENT_CAPACITY,
        registrations=registrations,
    )
