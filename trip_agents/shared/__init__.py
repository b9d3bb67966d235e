"""
Shared infrastructure for the itinerary pipelines.

Modules:
- llm: OpenAI client for the generative text service
- logging: Structured JSON logging
- contracts: Trip parameter and itinerary models
- errors: Pipeline error taxonomy
"""

from trip_agents.shared.llm.client import get_cached_client, generate_text
from trip_agents.shared.logging.config import setup_logging, log_itinerary_transition

__all__ = [
    "get_cached_client",
    "generate_text",
    "setup_logging",
    "log_itinerary_transition",
]
