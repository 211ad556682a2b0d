"""
FastAPI dependency providers.

The store is the only long-lived object; services are cheap and built per
request so they never hold registration state between requests. Tests swap
the store and the Mailchimp client through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends

from registration_api.core.config import Settings, get_settings
from registration_api.infrastructure.kv_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
)
from registration_api.infrastructure.mailchimp_client import MailchimpClient
from registration_api.infrastructure.redis_client import get_redis
from registration_api.services.admission_service import AdmissionService
from registration_api.services.interfaces import AdmissionGuard
from registration_api.services.newsletter_service import NewsletterForwarder
from registration_api.services.registration_query import RegistrationQueryService
from registration_api.services.strategy_factory import get_admission_guard

_store: Optional[KeyValueStore] = None


async def get_store() -> KeyValueStore:
    """Get or create the configured registration store."""
    global _store
    if _store is None:
        settings = get_settings()
        backend = settings.STORAGE_BACKEND.lower()
        if backend == "memory":
            _store = MemoryKeyValueStore()
        elif backend == "redis":
            _store = RedisKeyValueStore(await get_redis())
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
    return _store


def reset_store() -> None:
    global _store
    _store = None


async def get_guard(settings: Settings = Depends(get_settings)) -> AdmissionGuard:
    client = await get_redis() if settings.ADMISSION_GUARD.lower() == "redis" else None
    return get_admission_guard(settings, client)


def get_mailchimp_client(settings: Settings = Depends(get_settings)) -> Optional[MailchimpClient]:
    """Mailchimp client, or None when its secrets are not configured."""
    if not settings.mailchimp_configured:
        return None
    return MailchimpClient.from_settings(settings)


def get_newsletter_forwarder(
    client: Optional[MailchimpClient] = Depends(get_mailchimp_client),
) -> NewsletterForwarder:
    return NewsletterForwarder(client)


def get_admission_service(
    store: KeyValueStore = Depends(get_store),
    guard: AdmissionGuard = Depends(get_guard),
    forwarder: NewsletterForwarder = Depends(get_newsletter_forwarder),
    settings: Settings = Depends(get_settings),
) -> AdmissionService:
    return AdmissionService(
        store,
        guard=guard,
        forwarder=forwarder,
        capacity=settings.EVENT_CAPACITY,
        key_prefix=settings.REGISTRATION_KEY_PREFIX,
    )


def get_query_service(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RegistrationQueryService:
    return RegistrationQueryService(store, key_prefix=settings.REGISTRATION_KEY_PREFIX)
