"""
Itinerary generation entry point.

Runs the generation graph for a set of trip parameters and surfaces every
pipeline failure as a single GenerationError.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union

from trip_agents.generation.graph.build import create_generation_graph
from trip_agents.generation.graph.config import GenerationGraphConfig, DEFAULT_CONFIG
from trip_agents.shared.contracts.itinerary import Itinerary
from trip_agents.shared.contracts.trip_parameters import TripParameters, validate_trip_parameters
from trip_agents.shared.errors import GenerationError, ItineraryPipelineError


logger = logging.getLogger(__name__)


def generate_itinerary(
    trip_parameters: Union[TripParameters, Dict[str, Any]],
    user_id: str,
    now: Optional[datetime] = None,
    config: Optional[GenerationGraphConfig] = None,
    session_id: Optional[str] = None,
) -> Itinerary:
    """
    Generate a draft itinerary for a trip.

    Args:
        trip_parameters: Validated parameters, or a raw mapping to validate
        user_id: Owner of the new itinerary
        now: Creation time for the itinerary timestamps; defaults to the system clock
        config: Optional generation configuration
        session_id: Optional tracking id for log correlation

    Returns:
        Draft Itinerary, not yet persisted

    Raises:
        GenerationError: On invalid parameters, service failures, or an
            unusable reply. The original error is available as .cause.
    """
    if config is None:
        config = DEFAULT_CONFIG
    session_id = session_id or str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=generation] [api=generate_itinerary] "

    try:
        if not isinstance(trip_parameters, TripParameters):
            trip_parameters = validate_trip_parameters(trip_parameters)

        logger.info(
            f"{_log}Generation starting | source={trip_parameters.source}, "
            f"destination={trip_parameters.destination}, "
            f"dates={trip_parameters.start_date}..{trip_parameters.end_date}, "
            f"budget={trip_parameters.total_budget}, travelers={trip_parameters.travelers}"
        )

        graph = create_generation_graph(config)
        initial_state = {
            "trip_parameters": trip_parameters.model_dump(),
            "user_id": user_id,
            "now": now,
            "prompt": None,
            "raw_response": None,
            "generated_plan": None,
            "budget_breakdown": None,
            "itinerary": None,
            "messages": [],
            "session_id": session_id,
        }
        final_state = graph.invoke(
            initial_state, {"recursion_limit": config.recursion_limit}
        )

    except ItineraryPipelineError as e:
        logger.error(f"{_log}Generation failed | error={type(e).__name__}: {e}")
        raise GenerationError(f"Failed to generate itinerary: {e}", cause=e) from e

    itinerary = Itinerary.model_validate(final_state["itinerary"])
    logger.info(f"{_log}Generation finished | itinerary={itinerary.id}")
    return itinerary
