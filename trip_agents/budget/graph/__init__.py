"""Budget graph construction, routing and configuration."""

from trip_agents.budget.graph.build import create_budget_graph
from trip_agents.budget.graph.config import BudgetGraphConfig, DEFAULT_CONFIG, get_config

__all__ = ["create_budget_graph", "BudgetGraphConfig", "DEFAULT_CONFIG", "get_config"]
