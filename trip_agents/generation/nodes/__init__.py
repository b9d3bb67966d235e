"""LangGraph nodes for the generation pipeline."""

from trip_agents.generation.nodes.generation import compose_node, generate_node, normalize_node
from trip_agents.generation.nodes.assembly import assemble_node

__all__ = ["compose_node", "generate_node", "normalize_node", "assemble_node"]
