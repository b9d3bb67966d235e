"""
Graph construction for the generation pipeline.

Builds and compiles the LangGraph workflow that turns trip parameters
into a draft itinerary.
"""

from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, END

from trip_agents.generation.schemas import GenerationState
from trip_agents.generation.nodes.generation import compose_node, generate_node, normalize_node
from trip_agents.generation.nodes.assembly import assemble_node
from trip_agents.generation.graph.config import GenerationGraphConfig, DEFAULT_CONFIG


def create_generation_graph(
    config: Optional[GenerationGraphConfig] = None,
):
    """
    Create and compile the LangGraph workflow for generation.

    The graph structure is:
        Entry -> compose -> generate -> normalize -> assemble -> END

    Any node failure propagates out of invoke(); there are no error
    edges on this path.

    Args:
        config: Optional configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        Compiled LangGraph application ready for execution.
    """
    if config is None:
        config = DEFAULT_CONFIG

    def _generate(state: GenerationState) -> Dict[str, Any]:
        return generate_node(state, config)

    def _assemble(state: GenerationState) -> Dict[str, Any]:
        return assemble_node(state, config)

    graph = StateGraph(GenerationState)

    # Add nodes
    graph.add_node("compose", compose_node)
    graph.add_node("generate", _generate)
    graph.add_node("normalize", normalize_node)
    graph.add_node("assemble", _assemble)

    # Set entry point and edges
    graph.set_entry_point("compose")
    graph.add_edge("compose", "generate")
    graph.add_edge("generate", "normalize")
    graph.add_edge("normalize", "assemble")
    graph.add_edge("assemble", END)

    # Compile
    app = graph.compile()

    return app
