"""Graph construction and configuration for the generation pipeline."""

from trip_agents.generation.graph.build import create_generation_graph
from trip_agents.generation.graph.config import GenerationGraphConfig

__all__ = ["create_generation_graph", "GenerationGraphConfig"]
