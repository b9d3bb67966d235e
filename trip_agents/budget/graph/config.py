"""
Graph configuration for budget reconciliation.
"""

from dataclasses import dataclass, field
from typing import Optional

from trip_agents.budget.allocation import FALLBACK_SPENT_RATIO
from trip_agents.shared.llm.client import SamplingConfig, default_model


@dataclass
class BudgetGraphConfig:
    """
    Configuration for the budget graph.

    Attributes:
        recursion_limit: Maximum number of graph steps
        model: LLM model to use for the AI rebalance
        llm_timeout: LLM call timeout in seconds
        temperature: Sampling temperature
        max_output_tokens: Reply length cap
        max_attempts: AI rebalance attempts before falling back
        spent_ratio: Share of the new budget the fallback reports as spent
    """

    recursion_limit: int = 10
    model: str = field(default_factory=default_model)
    llm_timeout: int = 60
    temperature: float = 0.2
    max_output_tokens: int = 1024
    max_attempts: int = 1
    spent_ratio: float = FALLBACK_SPENT_RATIO

    def sampling(self) -> SamplingConfig:
        return SamplingConfig(
            model=self.model,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            timeout=self.llm_timeout,
            max_attempts=self.max_attempts,
        )


# Default configuration instance
DEFAULT_CONFIG = BudgetGraphConfig()


def get_config(
    model: Optional[str] = None,
    llm_timeout: Optional[int] = None,
    max_attempts: Optional[int] = None,
    spent_ratio: Optional[float] = None,
) -> BudgetGraphConfig:
    """
    Create a configuration with optional overrides.

    Args:
        model: Override for LLM model
        llm_timeout: Override for the call timeout
        max_attempts: Override for AI rebalance attempts
        spent_ratio: Override for the fallback spent share

    Returns:
        BudgetGraphConfig with specified overrides applied
    """
    return BudgetGraphConfig(
        model=model or DEFAULT_CONFIG.model,
        llm_timeout=llm_timeout or DEFAULT_CONFIG.llm_timeout,
        max_attempts=max_attempts or DEFAULT_CONFIG.max_attempts,
        spent_ratio=spent_ratio
        if spent_ratio is not None
        else DEFAULT_CONFIG.spent_ratio,
    )
