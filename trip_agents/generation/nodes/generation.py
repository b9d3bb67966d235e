"""
Generation nodes for the LangGraph workflow.

compose -> generate -> normalize: build the prompt, call the generative
service once, and normalize its reply. Failures are logged and re-raised;
the generation path never recovers from them.
"""

import logging
import time
from typing import Any, Dict

from trip_agents.generation.graph.config import GenerationGraphConfig
from trip_agents.generation.prompts.builders import build_itinerary_prompt
from trip_agents.generation.response_parser import normalize_itinerary_response
from trip_agents.generation.schemas import GenerationState
from trip_agents.shared.contracts.trip_parameters import TripParameters
from trip_agents.shared.errors import ParseError
from trip_agents.shared.llm.client import generate_text


logger = logging.getLogger(__name__)


def _log_prefix(state: GenerationState, node: str) -> str:
    session_id = state.get("session_id") or "unknown"
    return f"[session={session_id}] [graph=generation] [node={node}] "


def compose_node(state: GenerationState) -> Dict[str, Any]:
    """
    Build the generation prompt from the trip parameters.

    Args:
        state: Current generation state

    Returns:
        Dictionary with the composed prompt
    """
    _log = _log_prefix(state, "compose")
    params = TripParameters.model_validate(state["trip_parameters"])

    prompt = build_itinerary_prompt(params)
    logger.info(
        f"{_log}Prompt composed | destination={params.destination}, "
        f"days={params.total_days}, budget={params.total_budget}, chars={len(prompt)}"
    )
    return {"prompt": prompt}


def generate_node(state: GenerationState, config: GenerationGraphConfig) -> Dict[str, Any]:
    """
    Send the composed prompt to the generative service.

    Args:
        state: Current generation state (prompt populated)
        config: Generation configuration (model, sampling, timeout)

    Returns:
        Dictionary with the raw reply text

    Raises:
        ServiceUnavailable: On network errors or timeouts
        ServiceError: On a non-success or empty reply
    """
    _log = _log_prefix(state, "generate")
    logger.info(f"{_log}Calling generative service | model={config.model}, timeout={config.llm_timeout}s")

    start_time = time.perf_counter()
    try:
        raw_response = generate_text(state["prompt"], config.sampling())
    except Exception as e:
        logger.error(f"{_log}Generative service call failed: {e}")
        raise
    duration_ms = (time.perf_counter() - start_time) * 1000

    logger.info(f"{_log}Generative service responded | duration={duration_ms:.0f}ms, chars={len(raw_response)}")
    return {"raw_response": raw_response}


def normalize_node(state: GenerationState) -> Dict[str, Any]:
    """
    Normalize the raw reply into a generated plan and breakdown.

    Args:
        state: Current generation state (raw_response populated)

    Returns:
        Dictionary with generated_plan and budget_breakdown (None if absent)

    Raises:
        MalformedResponse: If the reply has no parseable JSON object
        IncompleteResponse: If mandatory sections are missing
    """
    _log = _log_prefix(state, "normalize")
    params = TripParameters.model_validate(state["trip_parameters"])

    try:
        normalized = normalize_itinerary_response(state["raw_response"], params)
    except ParseError as e:
        logger.error(f"{_log}Parse error: {e}")
        raise

    breakdown = normalized.budget_breakdown
    return {
        "generated_plan": normalized.plan.model_dump(),
        "budget_breakdown": breakdown.model_dump() if breakdown is not None else None,
    }
