"""
Itinerary assembly.

Merges a normalized generated plan with the originating trip parameters
into a complete itinerary ready to persist.
"""

import logging
from datetime import datetime, time, timezone
from typing import Optional

from trip_agents.budget.allocation import default_breakdown
from trip_agents.generation.response_parser import NormalizedResponse
from trip_agents.shared.contracts.itinerary import (
    Itinerary,
    ItineraryMetadata,
    ItineraryStatus,
    TripDetails,
    utcnow,
)
from trip_agents.shared.contracts.trip_parameters import TripParameters


logger = logging.getLogger(__name__)


DEFAULT_CONFIDENCE_SCORE = 0.95


def build_trip_details(params: TripParameters) -> TripDetails:
    """Snapshot trip parameters, with dates as midnight UTC."""
    return TripDetails(
        source=params.source,
        destination=params.destination,
        start_date=datetime.combine(params.start_date, time(0), tzinfo=timezone.utc),
        end_date=datetime.combine(params.end_date, time(0), tzinfo=timezone.utc),
        total_days=params.total_days,
        total_budget=params.total_budget,
        currency=params.currency,
        travelers=params.travelers,
        trip_type=params.trip_type,
    )


def assemble_itinerary(
    params: TripParameters,
    normalized: NormalizedResponse,
    user_id: str,
    now: Optional[datetime] = None,
    confidence_score: float = DEFAULT_CONFIDENCE_SCORE,
) -> Itinerary:
    """
    Build a draft itinerary from trip parameters and a normalized plan.

    A missing or all-zero breakdown is replaced by the fixed-weight
    allocation of the total budget, so no itinerary is persisted
    without a usable breakdown.

    Args:
        params: Trip parameters the plan was generated for
        normalized: Output of the response normalizer
        user_id: Owner of the itinerary
        now: Creation time (defaults to current UTC time)
        confidence_score: Generation confidence stored in metadata

    Returns:
        Itinerary in draft status
    """
    if now is None:
        now = utcnow()

    breakdown = normalized.budget_breakdown
    if breakdown is None or breakdown.is_empty():
        logger.info(
            "Synthesizing budget breakdown | destination=%s, budget=%s, reason=%s",
            params.destination,
            params.total_budget,
            "missing" if breakdown is None else "all-zero",
        )
        breakdown = default_breakdown(params.total_budget, params.total_days)

    plan = normalized.plan.model_copy(update={"budget_breakdown": breakdown})

    total_spent = breakdown.total_spent or breakdown.category_total()
    if total_spent > params.total_budget:
        logger.warning(
            "Generated plan exceeds budget | destination=%s, spent=%s, budget=%s",
            params.destination,
            total_spent,
            params.total_budget,
        )

    return Itinerary(
        user_id=user_id,
        trip_details=build_trip_details(params),
        preferences=params.preferences,
        ai_generated_plan=plan,
        budget_breakdown=breakdown,
        status=ItineraryStatus.DRAFT.value,
        metadata=ItineraryMetadata(
            created_with_ai=True,
            generation_time=now,
            last_updated=now,
            ai_confidence_score=confidence_score,
        ),
        created_at=now,
    )
