"""
Trip parameters contract.

Defines the user-supplied inputs for a generation request and the
validation that guards the pipeline before any prompt is composed.
"""

import math
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from trip_agents.shared.errors import PreconditionViolation


MAX_TRIP_DAYS = 365


class TripPreferences(BaseModel):
    """Free-form preference set attached to a trip."""

    budget_range: Optional[Literal["budget", "mid-range", "luxury"]] = Field(
        default=None, description="Budget tier"
    )
    travel_style: Optional[Literal["adventure", "relaxation", "cultural", "business"]] = Field(
        default=None, description="Travel style"
    )
    accommodation_type: Optional[Literal["hotel", "hostel", "apartment", "resort"]] = Field(
        default=None, description="Preferred accommodation type"
    )
    interests: List[str] = Field(default_factory=list)
    dietary_restrictions: List[str] = Field(default_factory=list)
    mobility_requirements: Optional[str] = Field(default=None)


class TripParameters(BaseModel):
    """
    Structured trip parameters for itinerary generation.

    Invariants: end date after start date (total days >= 1), at most
    365 days, budget > 0, travelers in [1, 20].
    """

    source: Optional[str] = Field(default=None, description="Departure city")
    destination: str = Field(min_length=1, description="Trip destination")
    start_date: date = Field(description="Trip start date")
    end_date: date = Field(description="Trip end date")
    total_budget: float = Field(gt=0, description="Total trip budget")
    travelers: int = Field(default=1, ge=1, le=20, description="Number of travelers")
    trip_type: Literal["round-trip", "one-way", "multi-city"] = "round-trip"
    currency: str = Field(default="USD")
    preferences: TripPreferences = Field(default_factory=TripPreferences)

    @field_validator("source", "destination", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @model_validator(mode="after")
    def _check_date_range(self) -> "TripParameters":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        if self.total_days > MAX_TRIP_DAYS:
            raise ValueError(f"Trip cannot exceed {MAX_TRIP_DAYS} days")
        return self

    @property
    def total_days(self) -> int:
        """Number of days between start and end, rounded up."""
        return math.ceil((self.end_date - self.start_date).days)


def validate_trip_parameters(data: Dict[str, Any]) -> TripParameters:
    """
    Validate raw trip data into TripParameters.

    Args:
        data: Raw trip parameter mapping (e.g. from a request body)

    Returns:
        Validated TripParameters

    Raises:
        PreconditionViolation: If any invariant does not hold
    """
    try:
        return TripParameters.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'trip'}: {err['msg']}"
            for err in e.errors()
        )
        raise PreconditionViolation(f"Invalid trip parameters: {details}") from e
