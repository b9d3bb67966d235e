"""HTTP surface for itineraries."""

from trip_agents.api.itinerary_api import router

__all__ = ["router"]
