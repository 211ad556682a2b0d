"""
Pydantic schemas for registration request/response payloads.

Request fields are all optional on purpose: missing or blank values are
rejected by the admission engine with a 400 envelope instead of FastAPI's
422, matching what the registration form expects.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from registration_api.models.registration import Registration, RegistrationCandidate


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegistrationRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    newsletterConsent: Optional[bool] = False
    conferenceId: Optional[str] = None

    def to_candidate(self) -> RegistrationCandidate:
        return RegistrationCandidate(
            event_id=self.conferenceId,
            name=self.name,
            phone=self.phone,
            email=self.email,
            newsletter_consent=bool(self.newsletterConsent),
        )


class RegistrationResponse(CamelModel):
    success: bool = True
    registration_id: str
    newsletter_result: Optional[str] = None
    message: str = "Registration successful! We look forward to seeing you at the event."


class RegistrationListResponse(CamelModel):
    success: bool = True
    count: int
    capacity: int
    registrations: list[Registration]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
