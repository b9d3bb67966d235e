"""
Date-driven itinerary status.

Statuses are derived when itineraries are read or listed; there is no
background job, so a stored status may lag until the next read.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from trip_agents.shared.contracts.itinerary import Itinerary, ItineraryStatus, utcnow
from trip_agents.shared.logging.config import log_itinerary_transition


logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_status(itinerary: Itinerary, now: datetime) -> str:
    """
    Status an itinerary should have at a given time.

    cancelled is absorbing. Any other stored value, including an
    unrecognized one, is re-derived from the trip dates.

    Args:
        itinerary: Itinerary to inspect
        now: Current time

    Returns:
        Status string
    """
    if itinerary.status == ItineraryStatus.CANCELLED.value:
        return ItineraryStatus.CANCELLED.value

    now = _as_utc(now)
    start = _as_utc(itinerary.trip_details.start_date)
    end = _as_utc(itinerary.trip_details.end_date)

    if now < start:
        return ItineraryStatus.CONFIRMED.value
    if now <= end:
        return ItineraryStatus.IN_PROGRESS.value
    return ItineraryStatus.COMPLETED.value


def derive_status(itinerary: Itinerary, now: Optional[datetime] = None) -> Itinerary:
    """
    Apply date-driven status derivation to an itinerary.

    Idempotent: when the stored status is already correct the same
    instance is returned and metadata.last_updated is untouched.

    Args:
        itinerary: Itinerary to update
        now: Current time; defaults to the system clock

    Returns:
        The itinerary, or an updated copy when the status changed
    """
    if now is None:
        now = utcnow()

    new_status = compute_status(itinerary, now)
    if new_status == itinerary.status:
        return itinerary

    previous = itinerary.status
    metadata = itinerary.metadata.model_copy(update={"last_updated": _as_utc(now)})
    updated = itinerary.model_copy(update={"status": new_status, "metadata": metadata})

    log_itinerary_transition(
        "status_derived",
        updated,
        extra={"previous_status": previous, "now": now.isoformat()},
    )
    return updated


def apply_status_updates(
    itineraries: List[Itinerary],
    now: Optional[datetime] = None,
) -> Tuple[List[Itinerary], List[Itinerary]]:
    """
    Derive statuses for a batch of itineraries with a single clock reading.

    Args:
        itineraries: Itineraries to update
        now: Current time; defaults to the system clock

    Returns:
        Tuple of (all itineraries in input order, only the changed ones)
    """
    if now is None:
        now = utcnow()

    results = []
    changed = []
    for itinerary in itineraries:
        derived = derive_status(itinerary, now)
        results.append(derived)
        if derived is not itinerary:
            changed.append(derived)

    if changed:
        logger.info(f"Derived status changes | checked={len(itineraries)}, changed={len(changed)}")
    return results, changed
