"""
Graph configuration for the generation pipeline.

Centralizes configuration options for the generation LangGraph workflow.
"""

from dataclasses import dataclass, field
from typing import Optional

from trip_agents.shared.llm.client import SamplingConfig, default_model


@dataclass
class GenerationGraphConfig:
    """
    Configuration for the generation graph.

    Attributes:
        recursion_limit: Maximum number of graph steps
        model: LLM model to use
        llm_timeout: LLM call timeout in seconds (hard failure after)
        temperature: Sampling temperature
        top_p: Nucleus sampling cutoff
        max_output_tokens: Reply length cap
        max_attempts: Generation attempts; 1 means no automatic retry
        confidence_score: Confidence stored on generated itineraries
    """

    recursion_limit: int = 10
    model: str = field(default_factory=default_model)
    llm_timeout: int = 60
    temperature: float = 0.3
    top_p: float = 0.8
    max_output_tokens: int = 8192
    max_attempts: int = 1
    confidence_score: float = 0.95

    def sampling(self) -> SamplingConfig:
        return SamplingConfig(
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            max_output_tokens=self.max_output_tokens,
            timeout=self.llm_timeout,
            max_attempts=self.max_attempts,
        )


# Default configuration instance
DEFAULT_CONFIG = GenerationGraphConfig()


def get_config(
    model: Optional[str] = None,
    llm_timeout: Optional[int] = None,
    temperature: Optional[float] = None,
    max_attempts: Optional[int] = None,
) -> GenerationGraphConfig:
    """
    Create a configuration with optional overrides.

    Args:
        model: Override for LLM model
        llm_timeout: Override for the call timeout
        temperature: Override for sampling temperature
        max_attempts: Override for generation attempts

    Returns:
        GenerationGraphConfig with specified overrides applied
    """
    return GenerationGraphConfig(
        model=model or DEFAULT_CONFIG.model,
        llm_timeout=llm_timeout or DEFAULT_CONFIG.llm_timeout,
        temperature=temperature
        if temperature is not None
        else DEFAULT_CONFIG.temperature,
        max_attempts=max_attempts or DEFAULT_CONFIG.max_attempts,
    )
