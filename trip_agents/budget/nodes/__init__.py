"""Graph nodes for budget reconciliation."""

from trip_agents.budget.nodes.rebalance import rebalance_node, fallback_node

__all__ = ["rebalance_node", "fallback_node"]
