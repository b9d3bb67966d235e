"""
Itinerary pipelines for the AI trip planning service.

This package contains:
- shared/: Common infrastructure (LLM client, logging, contracts, errors)
- generation/: Trip parameters -> prompt -> reply -> draft itinerary
- budget/: Budget reconciliation with a proportional fallback
- lifecycle/: Read-time status derivation
- storage/: In-memory itinerary persistence
- api/: FastAPI router over the itinerary service
"""

from trip_agents.generation.pipeline import generate_itinerary
from trip_agents.budget.reconciler import reconcile_budget
from trip_agents.lifecycle.status import derive_status

__all__ = ["generate_itinerary", "reconcile_budget", "derive_status"]
