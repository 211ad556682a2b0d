"""
Pytest fixtures for stores, services and the HTTP client.

Tests never touch Redis or Mailchimp: the in-memory store stands in for the
key-value backend and httpx.MockTransport answers Mailchimp calls.
"""

import os

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["ADMISSION_GUARD"] = "none"
os.environ["API_PREFIX"] = ""
for _var in ("MAILCHIMP_API_KEY", "MAILCHIMP_SERVER_PREFIX", "MAILCHIMP_AUDIENCE_ID"):
    os.environ.pop(_var, None)

from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from registration_api.main import app
from registration_api.api.dependencies import get_mailchimp_client, get_store
from registration_api.core.exceptions import StorageError
from registration_api.infrastructure.kv_store import MemoryKeyValueStore
from registration_api.infrastructure.mailchimp_client import MailchimpClient
from registration_api.services.admission_service import AdmissionService, DEFAULT_KEY_PREFIX
from registration_api.services.newsletter_service import NewsletterForwarder

MAILCHIMP_URL = "https://us21.api.mailchimp.com/3.0/lists/aud123/members"


class FlakyStore(MemoryKeyValueStore):
    """Memory store whose scans and writes can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_scan = False
        self.fail_write = False
        self.writes = 0
        self.scans = 0

    async def set(self, key, value):
        if self.fail_write:
            raise StorageError("simulated write failure")
        self.writes += 1
        await super().set(key, value)

    async def get_by_prefix(self, prefix):
        self.scans += 1
        if self.fail_scan:
            raise StorageError("simulated scan failure")
        return await super().get_by_prefix(prefix)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def seed(store: FlakyStore) -> Callable:
    """Write `count` registrations for an event directly into the store."""

    async def _seed(event_id: str, count: int, start: int = 0) -> None:
        for i in range(start, start + count):
            reg_id = f"reg_seed_{event_id}_{i}"
            await MemoryKeyValueStore.set(store, f"{DEFAULT_KEY_PREFIX}{reg_id}", {
                "id": reg_id,
                "conferenceId": event_id,
                "name": f"Attendee {i}",
                "phone": f"0620{event_id}{i:06d}",
                "email": f"attendee{i}.event{event_id}@example.com",
                "newsletterConsent": False,
                "status": "confirmed",
                "registeredAt": datetime.now(timezone.utc).isoformat(),
            })

    return _seed


def mailchimp_client(handler: Callable, timeout: float = 1.0) -> MailchimpClient:
    return MailchimpClient(
        api_key="test-key-us21",
        server_prefix="us21",
        audience_id="aud123",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def mailchimp_calls() -> list:
    return []


@pytest.fixture
def mailchimp_ok(mailchimp_calls: list) -> MailchimpClient:
    def handler(request: httpx.Request) -> httpx.Response:
        mailchimp_calls.append(request)
        return httpx.Response(200, json={"id": "abc", "status": "subscribed"})

    return mailchimp_client(handler)


@pytest.fixture
def mailchimp_down(mailchimp_calls: list) -> MailchimpClient:
    def handler(request: httpx.Request) -> httpx.Response:
        mailchimp_calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    return mailchimp_client(handler)


@pytest.fixture
def service(store: FlakyStore) -> AdmissionService:
    return AdmissionService(store, forwarder=NewsletterForwarder(None))


@pytest.fixture
def override_mailchimp() -> Callable[[Optional[MailchimpClient]], None]:
    def _override(client: Optional[MailchimpClient]) -> None:
        app.dependency_overrides[get_mailchimp_client] = lambda: client

    return _override


@pytest_asyncio.fixture(scope="function")
async def client(store: FlakyStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the store overridden and Mailchimp unconfigured."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_mailchimp_client] = lambda: None

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
