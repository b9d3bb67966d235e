"""Itinerary persistence."""

from trip_agents.storage.repository import ItineraryRepository

__all__ = ["ItineraryRepository"]
