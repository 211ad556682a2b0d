"""
Read-only view of registrations per event.

Every call re-reads the store; no process-wide cache is kept, so counts are
always as fresh as the backend. The count here is advisory for the form
(e.g. "87/150 registered"); the authoritative capacity check happens inside
AdmissionService.
"""

from pydantic import ValidationError as PydanticValidationError

from registration_api.core.logging import get_logger
from registration_api.core.metrics import record_storage_error
from registration_api.core.exceptions import StorageError
from registration_api.infrastructure.kv_store import KeyValueStore
from registration_api.models.registration import Registration
from registration_api.services.admission_service import DEFAULT_KEY_PREFIX, record_event_id

logger = get_logger(__name__)


class RegistrationQueryService:
    def __init__(self, store: KeyValueStore, key_prefix: str = DEFAULT_KEY_PREFIX):
        self.store = store
        self.key_prefix = key_prefix

    async def _records_for(self, event_id: str) -> list[dict]:
        try:
            records = await self.store.get_by_prefix(self.key_prefix)
        except StorageError:
            record_storage_error("scan")
            logger.error("registration_query_failed", event_id=event_id)
            raise
        return [r for r in records if isinstance(r, dict) and record_event_id(r) == event_id]

    async def count_for(self, event_id: str) -> int:
        """Number of registrations for event_id, counted the way admission counts them."""
        return len(await self._records_for(event_id))

    async def list_for(self, event_id: str) -> list[Registration]:
        """Registrations for event_id in store scan order."""
        return _parse(await self._records_for(event_id))

    async def summary_for(self, event_id: str) -> tuple[int, list[Registration]]:
        """Count and list from a single scan."""
        records = await self._records_for(event_id)
        return len(records), _parse(records)


def _parse(records: list[dict]) -> list[Registration]:
    registrations = []
    for record in records:
        try:
            registrations.append(Registration.model_validate(record))
        except PydanticValidationError as e:
            logger.warning("registration_record_invalid", record_id=record.get("id"), error=str(e))
    return registrations
