"""
Generation pipeline for AI-built itineraries.

Composes a strict-JSON prompt from trip parameters, calls the generative
service once, normalizes the reply, and assembles a draft itinerary.
"""

from trip_agents.generation.schemas import GenerationState
from trip_agents.generation.graph.build import create_generation_graph

__all__ = ["GenerationState", "create_generation_graph"]
