"""
Infrastructure layer: persistence of sampling events.

Events are stored as opaque JSON snapshots keyed by generated IDs. Every
snapshot read back is validated into a ``SamplingEvent`` here, so the rest
of the application only ever sees well-formed trees.
"""
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError

from fishsurvey.config import settings
from fishsurvey.domain.models import SamplingEvent
from fishsurvey.infrastructure.api_constants import DocumentStoreEndpoints
from fishsurvey.infrastructure.http_client import (
    ExternalServiceClient,
    ExternalServiceError,
)

logger = logging.getLogger(__name__)


class EventNotFoundError(LookupError):
    """No event is stored under the requested ID."""

    def __init__(self, event_id: str):
        super().__init__(f"Sampling event '{event_id}' not found")
        self.event_id = event_id


class StoredEvent(BaseModel):
    """An event together with the ID the store generated for it."""
    event_id: str
    event: SamplingEvent


class EventQuery(BaseModel):
    """Filters for listing stored events; unset fields match everything."""
    season: Optional[str] = None
    lake: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def params(self) -> Dict[str, str]:
        return {
            key: str(value)
            for key, value in self.model_dump(exclude_none=True).items()
        }

    def matches(self, event: SamplingEvent) -> bool:
        if self.season is not None and event.season != self.season:
            return False
        if self.lake is not None and event.location.lake != self.lake:
            return False
        if self.date_from is not None and event.location.date < self.date_from:
            return False
        if self.date_to is not None and event.location.date > self.date_to:
            return False
        return True


class EventStore(Protocol):
    """Port for loading, saving and querying sampling events."""

    async def load(self, event_id: str) -> SamplingEvent:
        ...

    async def save(self, event: SamplingEvent, event_id: Optional[str] = None) -> str:
        ...

    async def query(self, filters: EventQuery) -> List[StoredEvent]:
        ...

    async def close(self) -> None:
        ...


def _sort_key(stored: StoredEvent):
    return stored.event.location.lake, stored.event.location.date


def _to_document(event: SamplingEvent) -> Dict[str, Any]:
    return event.model_dump(mode="json")


class InMemoryEventStore:
    """Event store kept in process memory, used when no document store is configured."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}

    async def load(self, event_id: str) -> SamplingEvent:
        document = self._documents.get(event_id)
        if document is None:
            raise EventNotFoundError(event_id)
        return SamplingEvent.model_validate(document)

    async def save(self, event: SamplingEvent, event_id: Optional[str] = None) -> str:
        event_id = event_id or uuid.uuid4().hex
        self._documents[event_id] = _to_document(event)
        return event_id

    async def query(self, filters: EventQuery) -> List[StoredEvent]:
        results = []
        for event_id, document in self._documents.items():
            event = SamplingEvent.model_validate(document)
            if filters.matches(event):
                results.append(StoredEvent(event_id=event_id, event=event))
        return sorted(results, key=_sort_key)

    async def close(self) -> None:
        return None


class HttpEventStore(ExternalServiceClient):
    """
    Client for a document store exposing collections over REST.

    Documents are returned as ``{"id": ..., "data": {...}}``; listings as
    ``{"results": [document, ...]}``.
    """

    service_name = "Document store"

    def __init__(self):
        """Initialize the client with configuration."""
        super().__init__(
            base_url=settings.document_store_url,
            api_key=settings.document_store_api_key,
        )
        self.collection = settings.document_store_collection

    def _parse(self, document: Dict[str, Any]) -> StoredEvent:
        return StoredEvent(
            event_id=str(document["id"]),
            event=SamplingEvent.model_validate(document["data"]),
        )

    async def load(self, event_id: str) -> SamplingEvent:
        """
        Fetch one event.

        Args:
            event_id: Generated document ID

        Returns:
            SamplingEvent instance

        Raises:
            EventNotFoundError: If no such document exists
            ExternalServiceError: If the request fails or the document is malformed
        """
        try:
            data = await self._make_request(
                "GET", DocumentStoreEndpoints.document(self.collection, event_id)
            )
        except ExternalServiceError as e:
            if e.status_code == 404:
                raise EventNotFoundError(event_id) from e
            raise
        try:
            return self._parse(data).event
        except (KeyError, ValidationError) as e:
            raise ExternalServiceError(f"Stored event '{event_id}' is malformed: {e}") from e

    async def save(self, event: SamplingEvent, event_id: Optional[str] = None) -> str:
        """
        Create or replace an event document.

        Args:
            event: Event snapshot to persist
            event_id: Existing document ID to overwrite; a new document when None

        Returns:
            The document ID
        """
        document = _to_document(event)
        if event_id:
            await self._make_request(
                "PUT",
                DocumentStoreEndpoints.document(self.collection, event_id),
                json=document,
            )
            return event_id

        data = await self._make_request(
            "POST", DocumentStoreEndpoints.collection(self.collection), json=document
        )
        new_id = str(data["id"])
        logger.info(f"Stored new event {new_id} ({event.location.lake}, {event.location.date})")
        return new_id

    async def query(self, filters: EventQuery) -> List[StoredEvent]:
        """
        List events matching the filters.

        Malformed documents are skipped with a warning.
        """
        data = await self._make_request(
            "GET",
            DocumentStoreEndpoints.collection(self.collection),
            params=filters.params(),
        )
        results = []
        for document in data.get("results", []):
            try:
                results.append(self._parse(document))
            except (KeyError, ValidationError) as e:
                logger.warning(f"Skipping malformed event document {document.get('id')}: {e}")
        return sorted(results, key=_sort_key)


# Singleton instance
_event_store: Optional[EventStore] = None


def get_event_store() -> EventStore:
    """
    Get or create the singleton event store.

    Returns:
        HttpEventStore when a document store URL is configured, otherwise
        an InMemoryEventStore
    """
    global _event_store
    if _event_store is None:
        if settings.document_store_url:
            _event_store = HttpEventStore()
        else:
            logger.info("No document store configured; keeping events in memory")
            _event_store = InMemoryEventStore()
    return _event_store
