"""
Recommendation-related data models.

This module contains the recommendation type enumeration and the Pydantic
models for recommendation requests and results.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecommendationType(str, Enum):
    """Kinds of recommendation the engine can produce.

    Declaration order is the order in which generators run.
    """

    PARAMETER_VALUE = "parameter-value"
    PARAMETER_COMBINATION = "parameter-combination"
    MATERIAL_SELECTION = "material-selection"
    CALCULATOR_WORKFLOW = "calculator-workflow"
    OPTIMIZATION_SUGGESTION = "optimization-suggestion"
    CONTEXTUAL_RECOMMENDATION = "contextual-recommendation"

    @classmethod
    def is_valid(cls, recommendation_type: str) -> bool:
        """Check if a recommendation type string is valid."""
        try:
            cls(recommendation_type)
            return True
        except ValueError:
            return False

    @classmethod
    def get_allowed_types(cls) -> set[str]:
        """Get all allowed recommendation type strings."""
        return {t.value for t in cls}


class RequestContext(BaseModel):
    """Situational context supplied by the calling calculator page."""
    time_of_day: Optional[str] = Field(default=None, description="Free-form time of day label")
    recent_activity: List[str] = Field(default_factory=list, description="Recently used calculators")
    task_type: Optional[str] = Field(default=None, description="Task type key into calculator preferences")
    urgency: Optional[Literal["low", "medium", "high"]] = Field(default=None, description="How urgent the task is")


class RecommendationRequest(BaseModel):
    """Input contract for a recommendation pass."""
    user_id: Optional[str] = Field(default=None, description="Whose history to mine; empty means anonymous")
    calculator_type: Optional[str] = Field(default=None, description="Restrict examined history to this calculator")
    current_parameters: Dict[str, Any] = Field(default_factory=dict, description="Parameters currently entered")
    context: Optional[RequestContext] = Field(default=None, description="Situational context")
    recommendation_type: Optional[List[RecommendationType]] = Field(
        default=None, description="Requested recommendation types; all types when omitted"
    )
    limit: Optional[int] = Field(default=None, ge=1, description="Override of max_recommendations")
    min_confidence: Optional[float] = Field(default=None, description="Override of the service threshold")

    def requested_types(self) -> List[RecommendationType]:
        """Distinct requested types in canonical (declaration) order."""
        if self.recommendation_type is None:
            return list(RecommendationType)
        wanted = set(self.recommendation_type)
        return [t for t in RecommendationType if t in wanted]


class Recommendation(BaseModel):
    """A scored recommendation. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Opaque unique identifier")
    type: RecommendationType = Field(description="Recommendation type")
    title: str = Field(min_length=1, description="Short human-readable title")
    description: str = Field(min_length=1, description="One sentence description")
    explanation: str = Field(description="Why the recommendation got its score")
    confidence: float = Field(ge=0.0, le=1.0, description="Probability-like estimate of correctness")
    relevance_score: float = Field(description="Ranking score, not bounded")
    data: Dict[str, Any] = Field(default_factory=dict, description="Type-specific payload")
    actionable: bool = Field(default=True, description="Whether the UI may offer one-click apply")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Creation time"
    )
    user_id: Optional[str] = Field(default=None, description="User the recommendation was built for")
