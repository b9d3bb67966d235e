"""Prompt templates and builders for generation and budget reconciliation."""

from trip_agents.generation.prompts.templates import (
    ItineraryPromptConfig,
    BudgetPromptConfig,
    ITINERARY_PROMPT_TEMPLATE,
    BUDGET_PROMPT_TEMPLATE,
)
from trip_agents.generation.prompts.builders import (
    build_itinerary_skeleton,
    build_itinerary_prompt,
    build_budget_prompt,
)

__all__ = [
    "ItineraryPromptConfig",
    "BudgetPromptConfig",
    "ITINERARY_PROMPT_TEMPLATE",
    "BUDGET_PROMPT_TEMPLATE",
    "build_itinerary_skeleton",
    "build_itinerary_prompt",
    "build_budget_prompt",
]
