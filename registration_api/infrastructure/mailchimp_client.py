"""
Mailchimp Marketing API client for newsletter subscriptions.

Only the "add list member" call is used:
  POST https://{server}.api.mailchimp.com/3.0/lists/{audience}/members

Every request runs under a bounded httpx timeout per phase plus an
overall deadline, so a slow provider cannot hold a registration response
hostage.
"""

import asyncio
from enum import Enum
from typing import Optional

import httpx

from registration_api.core.config import Settings
from registration_api.core.exceptions import NewsletterNotConfiguredError, UpstreamError
from registration_api.core.logging import get_logger

logger = get_logger(__name__)

MEMBER_EXISTS_TITLE = "Member Exists"


class NewsletterOutcome(str, Enum):
    SUBSCRIBED = "subscribed"
    ALREADY_SUBSCRIBED = "already_subscribed"
    SKIPPED = "skipped"
    FAILED = "failed"


class MailchimpClient:
    """Thin async wrapper around the Mailchimp list-members endpoint."""

    def __init__(
        self,
        api_key: str,
        server_prefix: str,
        audience_id: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.audience_id = audience_id
        self.base_url = f"https://{server_prefix}.api.mailchimp.com/3.0"
        self._auth = httpx.BasicAuth("any", api_key)
        self._timeout = httpx.Timeout(timeout)
        self._deadline = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "MailchimpClient":
        """Build a client, or raise NewsletterNotConfiguredError if secrets are missing."""
        if not settings.mailchimp_configured:
            raise NewsletterNotConfiguredError()
        return cls(
            api_key=settings.MAILCHIMP_API_KEY,
            server_prefix=settings.MAILCHIMP_SERVER_PREFIX,
            audience_id=settings.MAILCHIMP_AUDIENCE_ID,
            timeout=settings.NEWSLETTER_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def subscribe(self, email: str) -> NewsletterOutcome:
        """
        Add email to the audience.

        Returns:
            SUBSCRIBED on 2xx
            ALREADY_SUBSCRIBED when Mailchimp answers 400 "Member Exists"

        Raises:
            UpstreamError for any other failure (HTTP error, network, timeout)
        """
        url = f"{self.base_url}/lists/{self.audience_id}/members"
        payload = {"email_address": email, "status": "subscribed"}

        try:
            async with httpx.AsyncClient(
                auth=self._auth,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await asyncio.wait_for(client.post(url, json=payload), self._deadline)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning("mailchimp_timeout", error=str(e))
            raise UpstreamError("newsletter provider timed out", status_code=504) from e
        except httpx.HTTPError as e:
            logger.warning("mailchimp_unreachable", error=str(e))
            raise UpstreamError("newsletter provider unreachable", status_code=502) from e

        if response.is_success:
            logger.info("mailchimp_subscribed", email=email)
            return NewsletterOutcome.SUBSCRIBED

        data = _json_or_empty(response)
        if response.status_code == 400 and data.get("title") == MEMBER_EXISTS_TITLE:
            logger.info("mailchimp_member_exists", email=email)
            return NewsletterOutcome.ALREADY_SUBSCRIBED

        detail = data.get("detail") or data.get("title") or "newsletter provider error"
        logger.warning(
            "mailchimp_error",
            status_code=response.status_code,
            title=data.get("title"),
            detail=data.get("detail"),
        )
        raise UpstreamError(detail, status_code=response.status_code)


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
