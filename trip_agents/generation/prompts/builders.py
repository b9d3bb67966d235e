"""
Prompt builders for itinerary generation and budget reconciliation.

These functions construct the actual prompts sent to the generative
service. They are pure string construction: identical input always
yields an identical prompt.
"""

import json
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List

from trip_agents.budget.allocation import default_breakdown, round_half_up
from trip_agents.generation.prompts.templates import (
    BudgetPromptConfig,
    ItineraryPromptConfig,
    BUDGET_PROMPT_TEMPLATE,
    ITINERARY_PROMPT_TEMPLATE,
)
from trip_agents.shared.contracts.itinerary import Itinerary
from trip_agents.shared.contracts.trip_parameters import TripParameters


def _iso_timestamp(day: date, hours: int = 0) -> str:
    moment = datetime.combine(day, time(0), tzinfo=timezone.utc) + timedelta(hours=hours)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_flights_skeleton(params: TripParameters) -> List[Dict[str, Any]]:
    """
    Build the flights section of the skeleton.

    Round trips get an outbound and a return leg; other trip types only
    the outbound leg.
    """
    source = params.source or "Departure city"
    legs = [("outbound", source, params.destination, params.start_date, "MA123")]
    if params.trip_type == "round-trip":
        legs.append(("return", params.destination, source, params.end_date, "MA456"))

    leg_price = round_half_up(params.total_budget * 0.35 / len(legs))
    return [
        {
            "type": leg_type,
            "departure_city": origin,
            "departure_airport": "XXX",
            "arrival_city": arrival,
            "arrival_airport": "YYY",
            "departure_time": _iso_timestamp(day),
            "arrival_time": _iso_timestamp(day, hours=8),
            "duration": "8h 00m",
            "airline": "Major Airline",
            "flight_number": number,
            "price": leg_price,
            "booking_class": "Economy",
            "stops": 0,
        }
        for leg_type, origin, arrival, day, number in legs
    ]


def build_accommodations_skeleton(params: TripParameters) -> List[Dict[str, Any]]:
    nights = params.total_days
    total_price = round_half_up(params.total_budget * 0.30)
    return [
        {
            "name": f"Grand Hotel {params.destination}",
            "type": params.preferences.accommodation_type or "hotel",
            "location": {
                "address": f"123 Main Street, {params.destination}",
                "city": params.destination,
            },
            "check_in": _iso_timestamp(params.start_date, hours=15),
            "check_out": _iso_timestamp(params.end_date, hours=11),
            "nights": nights,
            "room_type": "Standard Room",
            "price_per_night": round_half_up(total_price / nights),
            "total_price": total_price,
            "rating": 4.2,
            "amenities": ["WiFi", "Restaurant"],
        }
    ]


def build_activities_skeleton(params: TripParameters) -> List[Dict[str, Any]]:
    return [
        {
            "day": 1,
            "time": "14:00",
            "activity": "City Walking Tour",
            "category": "sightseeing",
            "location": {
                "name": "Historic Center",
                "address": f"Downtown {params.destination}",
            },
            "price": 25,
            "duration": "3 hours",
            "description": "Explore the historic city center with a local guide",
            "booking_required": True,
        }
    ]


def build_day_skeleton(params: TripParameters, day_number: int) -> Dict[str, Any]:
    """
    Build one day of the daily_itinerary skeleton.

    Weather values are placeholders derived from the day number so the
    prompt stays deterministic; nothing downstream relies on them.
    """
    day = params.start_date + timedelta(days=day_number - 1)
    first_day = day_number == 1
    return {
        "day": day_number,
        "date": day.isoformat(),
        "weather": {
            "temperature": 20 + (day_number * 3) % 10,
            "condition": "Partly Cloudy",
            "humidity": 60 + (day_number * 7) % 20,
        },
        "budget_allocated": round_half_up(params.total_budget / params.total_days),
        "morning": {
            "activity": "Arrival and hotel check-in" if first_day else "Morning sightseeing activity",
            "location": "Hotel" if first_day else "Tourist area",
            "duration": "2-3 hours",
            "cost": 0 if first_day else 25,
        },
        "afternoon": {
            "activity": f"Afternoon exploration of {params.destination}",
            "location": "Main attractions",
            "duration": "3-4 hours",
            "cost": 40,
        },
        "evening": {
            "activity": "Evening dining and entertainment",
            "location": "Local restaurant district",
            "duration": "2-3 hours",
            "cost": 50,
        },
        "meals": {
            "breakfast": {"restaurant": "Hotel Restaurant", "cuisine": "Continental", "estimated_cost": 15, "location": "Hotel"},
            "lunch": {"restaurant": "Local Bistro", "cuisine": "Local", "estimated_cost": 25, "location": "City center"},
            "dinner": {"restaurant": "Traditional Restaurant", "cuisine": "Local", "estimated_cost": 50, "location": "Downtown"},
        },
        "transportation": {
            "type": "Public transport + Walking",
            "cost": 10,
            "details": "Metro day pass and walking",
        },
    }


def build_itinerary_skeleton(params: TripParameters) -> Dict[str, Any]:
    """
    Build the JSON skeleton the generative reply must follow.

    Args:
        params: Validated trip parameters

    Returns:
        Dictionary with flights, accommodations, activities,
        daily_itinerary and budget_breakdown sections
    """
    breakdown = default_breakdown(params.total_budget, params.total_days)
    return {
        "flights": build_flights_skeleton(params),
        "accommodations": build_accommodations_skeleton(params),
        "activities": build_activities_skeleton(params),
        "daily_itinerary": [
            build_day_skeleton(params, day_number)
            for day_number in range(1, params.total_days + 1)
        ],
        "budget_breakdown": breakdown.model_dump(),
    }


def build_itinerary_prompt(params: TripParameters) -> str:
    """
    Build the complete generation prompt for a trip.

    Args:
        params: Validated trip parameters

    Returns:
        Prompt string asking for a strict-JSON itinerary
    """
    preferences = params.preferences.model_dump(exclude_none=True)
    config = ItineraryPromptConfig(
        source=params.source,
        destination=params.destination,
        start_date=params.start_date.isoformat(),
        end_date=params.end_date.isoformat(),
        total_days=params.total_days,
        total_budget=params.total_budget,
        currency=params.currency,
        travelers=params.travelers,
        trip_type=params.trip_type,
        preferences=json.dumps(preferences, sort_keys=True),
        skeleton=json.dumps(build_itinerary_skeleton(params), indent=2),
    )
    return config.format_prompt(ITINERARY_PROMPT_TEMPLATE)


def build_budget_prompt(itinerary: Itinerary, new_budget: float) -> str:
    """
    Build the budget reconciliation prompt for an existing itinerary.

    Embeds the current plan (without its own breakdown), the current
    breakdown, and the old and new budgets.

    Args:
        itinerary: Itinerary being re-budgeted
        new_budget: Target budget

    Returns:
        Prompt string asking only for an updated budget_breakdown object
    """
    details = itinerary.trip_details
    plan = itinerary.ai_generated_plan.model_dump(
        mode="json", exclude={"budget_breakdown"}, exclude_none=True
    )
    config = BudgetPromptConfig(
        destination=details.destination,
        total_days=details.total_days,
        currency=details.currency,
        old_budget=details.total_budget,
        new_budget=new_budget,
        current_plan=json.dumps(plan, sort_keys=True),
        current_breakdown=json.dumps(itinerary.budget_breakdown.model_dump(), sort_keys=True),
    )
    return config.format_prompt(BUDGET_PROMPT_TEMPLATE)
