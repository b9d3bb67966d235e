"""
Typed prompt templates for itinerary generation and budget reconciliation.

Prompts are structured as Pydantic models for validation, testability,
and easier version management.
"""

from typing import Optional
from pydantic import BaseModel, Field


def format_amount(amount: float) -> str:
    """Render a monetary amount without a trailing .0 for whole numbers."""
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


class ItineraryPromptConfig(BaseModel):
    """
    Configuration for itinerary prompt generation.

    This model validates the inputs needed to construct the generation prompt.
    """

    source: Optional[str] = Field(default=None, description="Departure city")
    destination: str = Field(description="Trip destination")
    start_date: str = Field(description="ISO start date")
    end_date: str = Field(description="ISO end date")
    total_days: int = Field(ge=1, description="Number of days")
    total_budget: float = Field(gt=0, description="Total budget")
    currency: str = Field(default="USD")
    travelers: int = Field(ge=1, description="Number of travelers")
    trip_type: str = Field(default="round-trip")
    preferences: str = Field(default="{}", description="Preferences as JSON")
    skeleton: str = Field(description="JSON skeleton the reply must follow")

    def format_prompt(self, template: str) -> str:
        """
        Format the template with this config's values.

        Args:
            template: The ITINERARY_PROMPT_TEMPLATE string

        Returns:
            Formatted prompt string with all placeholders filled
        """
        return template.format(
            source=self.source or "Not specified",
            destination=self.destination,
            start_date=self.start_date,
            end_date=self.end_date,
            total_days=self.total_days,
            total_budget=format_amount(self.total_budget),
            currency=self.currency,
            travelers=self.travelers,
            trip_type=self.trip_type,
            preferences=self.preferences,
            skeleton=self.skeleton,
        )


class BudgetPromptConfig(BaseModel):
    """Configuration for budget reconciliation prompt generation."""

    destination: str
    total_days: int = Field(ge=1)
    currency: str = Field(default="USD")
    old_budget: float
    new_budget: float = Field(gt=0)
    current_plan: str = Field(description="Existing plan as JSON")
    current_breakdown: str = Field(description="Existing breakdown as JSON")

    def format_prompt(self, template: str) -> str:
        return template.format(
            destination=self.destination,
            total_days=self.total_days,
            currency=self.currency,
            old_budget=format_amount(self.old_budget),
            new_budget=format_amount(self.new_budget),
            current_plan=self.current_plan,
            current_breakdown=self.current_breakdown,
        )


# =============================================================================
# Itinerary Prompt Template
# =============================================================================

ITINERARY_PROMPT_TEMPLATE = """You are a professional travel planner. Create a detailed travel itinerary in STRICT JSON format.

TRIP DETAILS:
- Source: {source}
- Destination: {destination}
- Travel Dates: {start_date} to {end_date} ({total_days} days)
- Budget: {total_budget} {currency}
- Travelers: {travelers}
- Trip Type: {trip_type}
- Preferences: {preferences}

IMPORTANT:
1. Return ONLY a valid JSON object without comments, explanations, markdown formatting, or additional text.
2. All dates must be ISO-8601 strings (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ).
3. All monetary values must be plain numbers, never strings.
4. The budget_breakdown categories must not add up to more than the total budget of {total_budget} {currency}.
5. The JSON object must contain the keys flights, accommodations, activities, daily_itinerary and budget_breakdown.

Follow this structure, replacing placeholder values with a realistic plan:
{skeleton}

Remember: reply with the JSON object only.
"""


# =============================================================================
# Budget Reconciliation Prompt Template
# =============================================================================

BUDGET_PROMPT_TEMPLATE = """You are a professional travel planner. A traveler changed the budget of an existing {total_days}-day trip to {destination}.

Previous budget: {old_budget} {currency}
New budget: {new_budget} {currency}

Current itinerary:
{current_plan}

Current budget breakdown:
{current_breakdown}

Re-allocate the budget so the trip fits the new budget of {new_budget} {currency} while keeping the trip enjoyable.

IMPORTANT:
1. Return ONLY a valid JSON object of the form {{"budget_breakdown": {{...}}}} without comments or additional text.
2. budget_breakdown must contain the numeric keys flights, accommodation, activities, food, transportation, shopping and miscellaneous.
3. All monetary values must be plain numbers, never strings.
4. The categories must not add up to more than {new_budget} {currency}.
"""
