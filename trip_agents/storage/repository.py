"""
In-memory itinerary persistence.

Every lookup is scoped to the owner; another user's itinerary behaves as
if it did not exist. Stored records are copied on the way in and out so
callers never share mutable state with the store.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from trip_agents.shared.contracts.itinerary import Itinerary, utcnow
from trip_agents.shared.errors import PreconditionViolation


logger = logging.getLogger(__name__)


def _set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    """Set a dotted path (e.g. "trip_details.total_budget") inside a nested dict."""
    keys = path.split(".")
    target = document
    for key in keys[:-1]:
        child = target.get(key)
        if not isinstance(child, dict):
            child = {}
            target[key] = child
        target = child
    target[keys[-1]] = value


class ItineraryRepository:
    """Thread-safe in-memory collection of itineraries keyed by id and owner."""

    def __init__(self) -> None:
        self._itineraries: Dict[str, Itinerary] = {}
        self._lock = threading.Lock()

    def create(self, itinerary: Itinerary) -> Itinerary:
        """Store a new itinerary."""
        with self._lock:
            self._itineraries[itinerary.id] = itinerary.model_copy(deep=True)
        logger.info(f"Itinerary stored | id={itinerary.id}, user={itinerary.user_id}")
        return itinerary

    def _owned(self, user_id: str, status: Optional[str] = None) -> List[Itinerary]:
        records = [
            record
            for record in self._itineraries.values()
            if record.user_id == user_id and (status is None or record.status == status)
        ]
        records.sort(key=lambda record: record.created_at, reverse=True)
        return records

    def find(
        self,
        user_id: str,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Itinerary]:
        """
        List a user's itineraries, newest first.

        Args:
            user_id: Owner to filter by
            status: Optional stored status to filter by
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of itinerary copies
        """
        with self._lock:
            records = self._owned(user_id, status)
            end = None if limit is None else skip + limit
            return [record.model_copy(deep=True) for record in records[skip:end]]

    def count(self, user_id: str, status: Optional[str] = None) -> int:
        with self._lock:
            return len(self._owned(user_id, status))

    def find_one(self, itinerary_id: str, user_id: str) -> Optional[Itinerary]:
        with self._lock:
            record = self._itineraries.get(itinerary_id)
            if record is None or record.user_id != user_id:
                return None
            return record.model_copy(deep=True)

    def find_one_and_update(
        self,
        itinerary_id: str,
        user_id: str,
        updates: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Optional[Itinerary]:
        """
        Apply a partial update and return the updated itinerary.

        Keys may be top-level fields (replacing the whole value) or dotted
        paths into nested objects. metadata.last_updated is always set to
        now unless the update sets it explicitly.

        Args:
            itinerary_id: Itinerary to update
            user_id: Owner; updates to another user's itinerary are ignored
            updates: Field or dotted-path assignments
            now: Timestamp for metadata.last_updated; defaults to the system clock

        Returns:
            The updated itinerary, or None if not found for this owner

        Raises:
            PreconditionViolation: If the updated record fails validation
        """
        if now is None:
            now = utcnow()

        with self._lock:
            record = self._itineraries.get(itinerary_id)
            if record is None or record.user_id != user_id:
                return None

            document = record.model_dump()
            for path, value in updates.items():
                _set_path(document, path, value)
            if "metadata.last_updated" not in updates:
                _set_path(document, "metadata.last_updated", now)

            try:
                updated = Itinerary.model_validate(document)
            except ValidationError as e:
                messages = "; ".join(error["msg"] for error in e.errors())
                raise PreconditionViolation(f"Invalid itinerary update: {messages}") from e

            self._itineraries[itinerary_id] = updated
            logger.info(f"Itinerary updated | id={itinerary_id}, fields={sorted(updates)}")
            return updated.model_copy(deep=True)

    def delete(self, itinerary_id: str, user_id: str) -> bool:
        """Delete an itinerary; returns False if not found for this owner."""
        with self._lock:
            record = self._itineraries.get(itinerary_id)
            if record is None or record.user_id != user_id:
                return False
            del self._itineraries[itinerary_id]
        logger.info(f"Itinerary deleted | id={itinerary_id}, user={user_id}")
        return True
