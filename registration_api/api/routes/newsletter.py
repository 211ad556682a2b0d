"""
Standalone newsletter subscription, independent of event registration.
Unlike the registration flow, provider errors are reported to the caller.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from registration_api.api.dependencies import get_mailchimp_client
from registration_api.core.exceptions import (
    DuplicateError,
    NewsletterNotConfiguredError,
    ValidationError,
)
from registration_api.core.logging import get_logger
from registration_api.core.metrics import record_newsletter
from registration_api.infrastructure.mailchimp_client import MailchimpClient, NewsletterOutcome
from registration_api.schemas.registration import ErrorResponse
from registration_api.schemas.newsletter import SubscribeRequest, SubscribeResponse
from registration_api.services.admission_service import EMAIL_PATTERN

logger = get_logger(__name__)
router = APIRouter(tags=["Newsletter"])


@router.post(
    "/mailchimp-subscribe",
    response_model=SubscribeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def subscribe(
    payload: SubscribeRequest,
    client: Optional[MailchimpClient] = Depends(get_mailchimp_client),
):
    email = (payload.email or "").strip()
    if not email:
        raise ValidationError("email address is required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("invalid email address")

    if client is None:
        logger.error("mailchimp_not_configured")
        raise NewsletterNotConfiguredError()

    outcome = await client.subscribe(email)
    record_newsletter(outcome.value)

    if outcome is NewsletterOutcome.ALREADY_SUBSCRIBED:
        raise DuplicateError("this email address is already subscribed to our newsletter")
    return SubscribeResponse()
