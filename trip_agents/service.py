"""
Itinerary operations over the persistence layer.

Glues the generation pipeline, the budget reconciler and the status
deriver to an ItineraryRepository. Framework-free; the HTTP router is a
thin layer on top of this module.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from trip_agents.budget.graph.config import BudgetGraphConfig
from trip_agents.budget.reconciler import reconcile_budget
from trip_agents.generation.graph.config import GenerationGraphConfig
from trip_agents.generation.pipeline import generate_itinerary
from trip_agents.lifecycle.status import Clock, apply_status_updates, derive_status
from trip_agents.shared.contracts.itinerary import Itinerary, ItineraryStatus, utcnow
from trip_agents.shared.contracts.trip_parameters import TripParameters
from trip_agents.shared.errors import ItineraryNotFound, PreconditionViolation
from trip_agents.shared.logging.config import log_itinerary_transition
from trip_agents.storage.repository import ItineraryRepository


logger = logging.getLogger(__name__)


# Fields a client may set through update(); nested objects are merged
_MERGED_FIELDS = ("trip_details", "preferences")
_REPLACED_FIELDS = ("ai_generated_plan", "budget_breakdown", "status")
_METADATA_FIELDS = ("created_with_ai", "generation_time", "ai_confidence_score")


@dataclass
class ItineraryPage:
    """One page of a user's itineraries."""

    itineraries: List[Itinerary]
    total_pages: int
    current_page: int
    total: int


class ItineraryService:
    """
    Itinerary use cases for a single store.

    Args:
        repository: Persistence collaborator
        clock: Source of the current time for status derivation
        generation_config: Optional generation pipeline configuration
        budget_config: Optional budget reconciliation configuration
    """

    def __init__(
        self,
        repository: ItineraryRepository,
        clock: Clock = utcnow,
        generation_config: Optional[GenerationGraphConfig] = None,
        budget_config: Optional[BudgetGraphConfig] = None,
    ):
        self.repository = repository
        self.clock = clock
        self.generation_config = generation_config
        self.budget_config = budget_config

    def _persist_status(self, itinerary: Itinerary) -> None:
        self.repository.find_one_and_update(
            itinerary.id,
            itinerary.user_id,
            {"status": itinerary.status, "metadata.last_updated": itinerary.metadata.last_updated},
        )

    def generate(
        self,
        user_id: str,
        trip_parameters: Union[TripParameters, Dict[str, Any]],
    ) -> Itinerary:
        """
        Generate and persist a draft itinerary.

        Raises:
            GenerationError: If generation fails; nothing is persisted
        """
        itinerary = generate_itinerary(
            trip_parameters, user_id, now=self.clock(), config=self.generation_config
        )
        self.repository.create(itinerary)
        log_itinerary_transition("itinerary_created", itinerary)
        return itinerary

    def list(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
    ) -> ItineraryPage:
        """
        List a user's itineraries with derived statuses, newest first.

        The status filter applies to stored statuses; statuses that change
        on derivation are written back.

        Args:
            user_id: Owner
            page: 1-based page number
            limit: Page size
            status: Optional stored status filter; "all" or None for no filter

        Returns:
            ItineraryPage
        """
        if page < 1 or limit < 1:
            raise PreconditionViolation("page and limit must be positive")
        if status == "all":
            status = None

        records = self.repository.find(user_id, status=status, skip=(page - 1) * limit, limit=limit)
        itineraries, changed = apply_status_updates(records, self.clock())
        for itinerary in changed:
            self._persist_status(itinerary)

        total = self.repository.count(user_id, status=status)
        return ItineraryPage(
            itineraries=itineraries,
            total_pages=math.ceil(total / limit),
            current_page=page,
            total=total,
        )

    def get(self, itinerary_id: str, user_id: str) -> Itinerary:
        """
        Fetch one itinerary with its derived status.

        Raises:
            ItineraryNotFound: If no itinerary with this id belongs to the user
        """
        itinerary = self.repository.find_one(itinerary_id, user_id)
        if itinerary is None:
            raise ItineraryNotFound(f"Itinerary not found: {itinerary_id}")

        derived = derive_status(itinerary, self.clock())
        if derived is not itinerary:
            self._persist_status(derived)
        return derived

    def update(self, itinerary_id: str, user_id: str, changes: Dict[str, Any]) -> Itinerary:
        """
        Apply a user edit.

        trip_details and preferences are merged field by field; the plan,
        breakdown and status are replaced. Only created_with_ai,
        generation_time and ai_confidence_score are taken from metadata.
        last_updated is always bumped. Edits never re-derive the status.

        Raises:
            PreconditionViolation: On unknown fields, an unknown status or an
                invalid resulting itinerary
            ItineraryNotFound: If no itinerary with this id belongs to the user
        """
        updates: Dict[str, Any] = {}
        for name, value in changes.items():
            if name in _MERGED_FIELDS and isinstance(value, dict):
                for key, nested in value.items():
                    updates[f"{name}.{key}"] = nested
            elif name in _MERGED_FIELDS or name in _REPLACED_FIELDS:
                updates[name] = value
            elif name == "metadata" and isinstance(value, dict):
                for key in _METADATA_FIELDS:
                    if value.get(key) is not None:
                        updates[f"metadata.{key}"] = value[key]
            else:
                raise PreconditionViolation(f"Field cannot be updated: {name}")

        if "status" in updates and updates["status"] not in {s.value for s in ItineraryStatus}:
            raise PreconditionViolation(f"Unknown status: {updates['status']}")

        updated = self.repository.find_one_and_update(itinerary_id, user_id, updates, now=self.clock())
        if updated is None:
            raise ItineraryNotFound(f"Itinerary not found: {itinerary_id}")
        return updated

    def delete(self, itinerary_id: str, user_id: str) -> None:
        if not self.repository.delete(itinerary_id, user_id):
            raise ItineraryNotFound(f"Itinerary not found: {itinerary_id}")

    def optimize_budget(self, itinerary_id: str, user_id: str, new_budget: float) -> Itinerary:
        """
        Re-fit an itinerary to a new total budget and persist the result.

        Raises:
            PreconditionViolation: If new_budget is not positive
            ItineraryNotFound: If no itinerary with this id belongs to the user
        """
        if new_budget is None or new_budget <= 0:
            raise PreconditionViolation("Invalid budget amount")

        itinerary = self.repository.find_one(itinerary_id, user_id)
        if itinerary is None:
            raise ItineraryNotFound(f"Itinerary not found: {itinerary_id}")

        result = reconcile_budget(itinerary, new_budget, self.budget_config)
        updated = self.repository.find_one_and_update(
            itinerary_id,
            user_id,
            {
                "ai_generated_plan": result.ai_generated_plan.model_dump(),
                "budget_breakdown": result.budget_breakdown.model_dump(),
                "trip_details.total_budget": new_budget,
            },
            now=self.clock(),
        )
        if updated is None:
            raise ItineraryNotFound(f"Itinerary not found: {itinerary_id}")

        logger.info(
            f"[itinerary={itinerary_id}] [api=optimize_budget] Budget optimized | "
            f"strategy={result.strategy}, new_budget={new_budget}"
        )
        return updated
