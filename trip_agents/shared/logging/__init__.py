"""Logging configuration and utilities."""

from trip_agents.shared.logging.config import (
    setup_logging,
    log_itinerary_transition,
    StructuredFormatter,
)

__all__ = [
    "setup_logging",
    "log_itinerary_transition",
    "StructuredFormatter",
]
