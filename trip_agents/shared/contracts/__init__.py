"""Pipeline contracts: trip parameters in, itinerary out."""

from trip_agents.shared.contracts.trip_parameters import (
    TripParameters,
    TripPreferences,
    validate_trip_parameters,
)
from trip_agents.shared.contracts.itinerary import (
    BUDGET_CATEGORIES,
    BudgetBreakdown,
    GeneratedPlan,
    Itinerary,
    ItineraryMetadata,
    ItineraryStatus,
    TripDetails,
)

__all__ = [
    "TripParameters",
    "TripPreferences",
    "validate_trip_parameters",
    "BUDGET_CATEGORIES",
    "BudgetBreakdown",
    "GeneratedPlan",
    "Itinerary",
    "ItineraryMetadata",
    "ItineraryStatus",
    "TripDetails",
]
