"""
Budget reconciliation for existing itineraries.

Import the reconciler from trip_agents.budget.reconciler; this package
only exposes the allocation rules, which the generation prompts and
parser also depend on.
"""

from trip_agents.budget.allocation import (
    DEFAULT_CATEGORY_WEIGHTS,
    default_breakdown,
    round_half_up,
    scale_breakdown,
)

__all__ = ["DEFAULT_CATEGORY_WEIGHTS", "default_breakdown", "round_half_up", "scale_breakdown"]
