"""
Graph construction for budget reconciliation.
"""

from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, END

from trip_agents.budget.schemas import BudgetState
from trip_agents.budget.nodes.rebalance import rebalance_node, fallback_node
from trip_agents.budget.graph.router import route_after_rebalance
from trip_agents.budget.graph.config import BudgetGraphConfig, DEFAULT_CONFIG


def create_budget_graph(
    config: Optional[BudgetGraphConfig] = None,
):
    """
    Create and compile the LangGraph workflow for budget reconciliation.

    The graph structure is:
        Entry -> rebalance -> [router] -> fallback -> END
                                       -> END

    Args:
        config: Optional configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        Compiled LangGraph application ready for execution.
    """
    if config is None:
        config = DEFAULT_CONFIG

    def _rebalance(state: BudgetState) -> Dict[str, Any]:
        return rebalance_node(state, config)

    def _fallback(state: BudgetState) -> Dict[str, Any]:
        return fallback_node(state, config)

    graph = StateGraph(BudgetState)

    graph.add_node("rebalance", _rebalance)
    graph.add_node("fallback", _fallback)

    graph.set_entry_point("rebalance")
    graph.add_conditional_edges(
        "rebalance",
        route_after_rebalance,
        {
            "fallback": "fallback",
            "complete": END,
        },
    )
    graph.add_edge("fallback", END)

    return graph.compile()
