"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .redis_client import get_redis, close_redis
from .kv_store import KeyValueStore, RedisKeyValueStore, MemoryKeyValueStore
from .mailchimp_client import MailchimpClient, NewsletterOutcome

__all__ = [
    'get_redis', 'close_redis',
    'KeyValueStore', 'RedisKeyValueStore', 'MemoryKeyValueStore',
    'MailchimpClient', 'NewsletterOutcome',
]
