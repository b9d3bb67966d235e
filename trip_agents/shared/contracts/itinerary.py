"""
Itinerary contracts.

Defines the generated plan produced from a generative reply, the budget
breakdown, and the persisted itinerary aggregate. Generated sub-shapes
keep every field optional and allow extra keys, since the generator only
follows a requested contract, not a guaranteed one.
"""

import math
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from trip_agents.shared.contracts.trip_parameters import MAX_TRIP_DAYS, TripPreferences


def utcnow() -> datetime:
    """Timezone-aware current time, the default clock."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class ItineraryStatus(str, Enum):
    """Lifecycle states of an itinerary."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# Generated plan sub-shapes
# =============================================================================


class _Flexible(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class Flight(_Flexible):
    """A single flight leg."""

    type: Optional[str] = None
    departure_city: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_city: Optional[str] = None
    arrival_airport: Optional[str] = None
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    duration: Optional[str] = None
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    price: float = 0
    booking_class: Optional[str] = None
    stops: Optional[int] = None


class Accommodation(_Flexible):
    """A single accommodation stay."""

    name: Optional[str] = None
    type: Optional[str] = None
    location: Optional[Union[Dict[str, Any], str]] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    nights: Optional[int] = None
    room_type: Optional[str] = None
    price_per_night: float = 0
    total_price: float = 0
    rating: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)


class Activity(_Flexible):
    """A bookable activity."""

    day: Optional[int] = None
    time: Optional[str] = None
    activity: Optional[str] = None
    category: Optional[str] = None
    location: Optional[Union[Dict[str, Any], str]] = None
    price: float = 0
    duration: Optional[str] = None
    description: Optional[str] = None
    booking_required: Optional[bool] = None


class TimeSlot(_Flexible):
    """Morning, afternoon or evening block of a day."""

    activity: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = None
    cost: float = 0


class Meal(_Flexible):
    restaurant: Optional[str] = None
    cuisine: Optional[str] = None
    estimated_cost: float = 0
    location: Optional[str] = None


class Meals(_Flexible):
    breakfast: Optional[Union[Meal, str]] = None
    lunch: Optional[Union[Meal, str]] = None
    dinner: Optional[Union[Meal, str]] = None


class Transportation(_Flexible):
    type: Optional[str] = None
    cost: float = 0
    details: Optional[str] = None


class Weather(_Flexible):
    temperature: Optional[float] = None
    condition: Optional[str] = None
    humidity: Optional[float] = None


class DayPlan(_Flexible):
    """One day of the daily schedule."""

    day: Optional[int] = None
    date: Optional[datetime] = None
    weather: Optional[Weather] = None
    budget_allocated: float = 0
    morning: Optional[Union[TimeSlot, str]] = None
    afternoon: Optional[Union[TimeSlot, str]] = None
    evening: Optional[Union[TimeSlot, str]] = None
    meals: Optional[Meals] = None
    transportation: Optional[Transportation] = None


# =============================================================================
# Budget
# =============================================================================


BUDGET_CATEGORIES = (
    "flights",
    "accommodation",
    "activities",
    "food",
    "transportation",
    "shopping",
    "miscellaneous",
)


class BudgetBreakdown(BaseModel):
    """
    Categorized allocation of the total budget.

    total_spent and remaining_budget are derived totals; the
    reconciler keeps total_spent + remaining_budget == total budget
    within rounding.
    """

    flights: float = 0
    accommodation: float = 0
    activities: float = 0
    food: float = 0
    transportation: float = 0
    shopping: float = 0
    miscellaneous: float = 0
    total_spent: float = 0
    remaining_budget: float = 0
    daily_average: Optional[float] = None

    def categories(self) -> Dict[str, float]:
        """Category amounts, without the derived totals."""
        return {name: getattr(self, name) for name in BUDGET_CATEGORIES}

    def category_total(self) -> float:
        return sum(self.categories().values())

    def is_empty(self) -> bool:
        """True when every category is zero."""
        return all(amount == 0 for amount in self.categories().values())


class GeneratedPlan(_Flexible):
    """The AI-produced plan embedded in an itinerary."""

    flights: List[Flight] = Field(default_factory=list)
    accommodations: List[Accommodation] = Field(default_factory=list)
    activities: List[Activity] = Field(default_factory=list)
    daily_itinerary: List[DayPlan] = Field(default_factory=list)
    budget_breakdown: Optional[BudgetBreakdown] = None


# =============================================================================
# Itinerary aggregate
# =============================================================================


class TripDetails(BaseModel):
    """
    Snapshot of the trip parameters stored on the itinerary.

    total_days is always re-derived from the dates, so edits to either
    date keep it in step.
    """

    source: Optional[str] = None
    destination: str
    start_date: datetime
    end_date: datetime
    total_days: int = Field(ge=1)
    total_budget: float
    currency: str = "USD"
    travelers: int = 1
    trip_type: str = "round-trip"

    @model_validator(mode="after")
    def _derive_total_days(self) -> "TripDetails":
        span = _as_utc(self.end_date) - _as_utc(self.start_date)
        if span.total_seconds() <= 0:
            raise ValueError("End date must be after start date")
        days = math.ceil(span.total_seconds() / 86400)
        if days > MAX_TRIP_DAYS:
            raise ValueError(f"Trip cannot exceed {MAX_TRIP_DAYS} days")
        self.total_days = days
        return self


class ItineraryMetadata(BaseModel):
    created_with_ai: bool = True
    generation_time: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)
    ai_confidence_score: Optional[float] = None


class Itinerary(BaseModel):
    """
    Persisted itinerary aggregate.

    status is kept as a plain string so records with an unrecognized
    stored status still load; the status deriver re-derives them.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    trip_details: TripDetails
    preferences: TripPreferences = Field(default_factory=TripPreferences)
    ai_generated_plan: GeneratedPlan = Field(default_factory=GeneratedPlan)
    budget_breakdown: BudgetBreakdown = Field(default_factory=BudgetBreakdown)
    status: str = ItineraryStatus.DRAFT.value
    metadata: ItineraryMetadata = Field(default_factory=ItineraryMetadata)
    created_at: datetime = Field(default_factory=utcnow)
