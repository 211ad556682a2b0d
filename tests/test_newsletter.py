"""
Tests for the Mailchimp client and the best-effort newsletter forwarder.
"""

import asyncio
import json

import httpx
import pytest

from registration_api.core.config import Settings
from registration_api.core.exceptions import NewsletterNotConfiguredError, UpstreamError
from registration_api.infrastructure.mailchimp_client import MailchimpClient, NewsletterOutcome
from registration_api.services.newsletter_service import NewsletterForwarder

from tests.conftest import MAILCHIMP_URL, mailchimp_client


@pytest.mark.asyncio
async def test_subscribe_posts_member(mailchimp_ok, mailchimp_calls):
    outcome = await mailchimp_ok.subscribe("a@b.com")

    assert outcome is NewsletterOutcome.SUBSCRIBED
    request = mailchimp_calls[0]
    assert str(request.url) == MAILCHIMP_URL
    assert request.headers["authorization"].startswith("Basic ")
    assert json.loads(request.content) == {"email_address": "a@b.com", "status": "subscribed"}


@pytest.mark.asyncio
async def test_member_exists_is_not_an_error():
    client = mailchimp_client(lambda request: httpx.Response(
        400, json={"title": "Member Exists", "detail": "a@b.com is already a list member."},
    ))
    assert await client.subscribe("a@b.com") is NewsletterOutcome.ALREADY_SUBSCRIBED


@pytest.mark.asyncio
async def test_other_provider_errors_raise_with_status():
    client = mailchimp_client(lambda request: httpx.Response(
        401, json={"title": "API Key Invalid", "detail": "Your API key may be invalid."},
    ))

    with pytest.raises(UpstreamError) as exc_info:
        await client.subscribe("a@b.com")
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Your API key may be invalid."


@pytest.mark.asyncio
async def test_non_json_error_body():
    client = mailchimp_client(lambda request: httpx.Response(503, text="upstream down"))

    with pytest.raises(UpstreamError) as exc_info:
        await client.subscribe("a@b.com")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_timeout_raises_gateway_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await mailchimp_client(handler).subscribe("a@b.com")
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_slow_provider_hits_overall_deadline():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={})

    with pytest.raises(UpstreamError) as exc_info:
        await mailchimp_client(handler, timeout=0.05).subscribe("a@b.com")
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_network_error_raises_bad_gateway(mailchimp_down):
    with pytest.raises(UpstreamError) as exc_info:
        await mailchimp_down.subscribe("a@b.com")
    assert exc_info.value.status_code == 502


def test_from_settings_requires_all_secrets():
    settings = Settings(MAILCHIMP_API_KEY="key", MAILCHIMP_SERVER_PREFIX="us21", MAILCHIMP_AUDIENCE_ID=None)
    with pytest.raises(NewsletterNotConfiguredError):
        MailchimpClient.from_settings(settings)


def test_from_settings_builds_regional_url():
    settings = Settings(
        MAILCHIMP_API_KEY="key", MAILCHIMP_SERVER_PREFIX="us21", MAILCHIMP_AUDIENCE_ID="aud123",
        NEWSLETTER_TIMEOUT_SECONDS=2.5,
    )
    client = MailchimpClient.from_settings(settings)
    assert client.base_url == "https://us21.api.mailchimp.com/3.0"
    assert client.audience_id == "aud123"


@pytest.mark.asyncio
async def test_forwarder_without_client_skips():
    forwarder = NewsletterForwarder(None)
    assert forwarder.enabled is False
    assert await forwarder.forward("a@b.com") is NewsletterOutcome.SKIPPED


@pytest.mark.asyncio
async def test_forwarder_swallows_provider_failure(mailchimp_down):
    assert await NewsletterForwarder(mailchimp_down).forward("a@b.com") is NewsletterOutcome.FAILED


@pytest.mark.asyncio
async def test_forwarder_swallows_unexpected_errors():
    class BrokenClient:
        async def subscribe(self, email):
            raise RuntimeError("boom")

    assert await NewsletterForwarder(BrokenClient()).forward("a@b.com") is NewsletterOutcome.FAILED


@pytest.mark.asyncio
async def test_forwarder_passes_through_member_exists():
    client = mailchimp_client(lambda request: httpx.Response(400, json={"title": "Member Exists"}))
    assert await NewsletterForwarder(client).forward("a@b.com") is NewsletterOutcome.ALREADY_SUBSCRIBED
