"""
Best-effort newsletter forwarding.

Runs after a registration is committed. Whatever happens here is reported
back as a NewsletterOutcome and never turns into a registration failure.
"""

from typing import Optional

from registration_api.core.exceptions import UpstreamError
from registration_api.core.logging import get_logger
from registration_api.core.metrics import record_newsletter
from registration_api.infrastructure.mailchimp_client import MailchimpClient, NewsletterOutcome

logger = get_logger(__name__)


class NewsletterForwarder:
    """Wraps MailchimpClient; a missing client degrades to a no-op."""

    def __init__(self, client: Optional[MailchimpClient] = None):
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def forward(self, email: str) -> NewsletterOutcome:
        """
        Subscribe email, swallowing every failure.

        Returns:
            SUBSCRIBED / ALREADY_SUBSCRIBED from the provider
            SKIPPED when Mailchimp is not configured
            FAILED on any provider or network error
        """
        if self.client is None:
            logger.info("newsletter_skipped", reason="not_configured")
            outcome = NewsletterOutcome.SKIPPED
        else:
            try:
                outcome = await self.client.subscribe(email)
            except UpstreamError as e:
                logger.warning("newsletter_failed", status_code=e.status_code, error=e.message)
                outcome = NewsletterOutcome.FAILED
            except Exception:
                logger.exception("newsletter_failed_unexpectedly")
                outcome = NewsletterOutcome.FAILED

        record_newsletter(outcome.value)
        return outcome
