"""
Schemas for the generation pipeline.

Defines the state schema that flows through the generation LangGraph.
"""

from datetime import datetime
from typing import TypedDict, List, Optional, Annotated
import operator


class GenerationState(TypedDict):
    """
    State schema for the generation pipeline.

    Each node fills in one slot: prompt -> raw_response ->
    generated_plan/budget_breakdown -> itinerary.
    """

    # Inputs
    trip_parameters: dict
    user_id: str
    now: Optional[datetime]

    # Intermediate results
    prompt: Optional[str]
    raw_response: Optional[str]
    generated_plan: Optional[dict]
    budget_breakdown: Optional[dict]

    # Output (populated by assemble_node)
    itinerary: Optional[dict]

    # Tracking
    messages: Annotated[List[dict], operator.add]
    session_id: Optional[str]
