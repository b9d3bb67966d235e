"""Itinerary lifecycle: read-time status derivation."""

from trip_agents.lifecycle.status import Clock, apply_status_updates, compute_status, derive_status

__all__ = ["Clock", "apply_status_updates", "compute_status", "derive_status"]
