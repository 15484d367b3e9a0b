"""
Read-only views of the data supplied by the external collaborators.

This module contains Pydantic models for calculation history records,
usage patterns, parameter presets and user preferences.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HistoryRecord(BaseModel):
    """One executed calculation."""
    id: str = Field(description="Record identifier")
    user_id: Optional[str] = Field(default=None, description="Owner of the record")
    calculator_type: str = Field(description="Calculator that produced the record")
    inputs: Dict[str, Any] = Field(default_factory=dict, description="Parameter name to value")
    outputs: Dict[str, Any] = Field(default_factory=dict, description="Calculated results")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Execution time"
    )
    execution_time: Optional[float] = Field(default=None, description="Execution duration in milliseconds")
    error: Optional[str] = Field(default=None, description="Error message when the calculation failed")

    def succeeded(self, slow_execution_ms: float = 5000) -> bool:
        """Whether the execution finished without a recorded error in reasonable time."""
        if self.error or "error" in self.outputs:
            return False
        if self.execution_time is not None and self.execution_time >= slow_execution_ms:
            return False
        return True


class PatternType(str, Enum):
    """Kinds of usage regularity a pattern recognizer reports."""
    PARAMETER_FREQUENCY = "parameter-frequency"
    CALCULATOR_USAGE = "calculator-usage"
    TIME_ACTIVITY = "time-activity"
    PARAMETER_COMBINATION = "parameter-combination"
    BEHAVIOR_SEQUENCE = "behavior-sequence"
    PARAMETER_CORRELATION = "parameter-correlation"
    ANOMALY_DETECTION = "anomaly-detection"


class Pattern(BaseModel):
    """A precomputed usage regularity for one user."""
    id: str = Field(description="Pattern identifier")
    type: PatternType = Field(description="Pattern type")
    confidence: float = Field(default=0.0, description="Recognizer confidence in the pattern")
    description: str = Field(default="", description="Human-readable summary")
    data: Dict[str, Any] = Field(default_factory=dict, description="Type-specific payload")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="When the pattern was computed"
    )
    user_id: Optional[str] = Field(default=None, description="User the pattern belongs to")


class Preset(BaseModel):
    """A saved set of calculator parameters."""
    id: str = Field(description="Preset identifier")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="Preset description")
    calculator_type: str = Field(description="Calculator the preset applies to")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Saved parameter values")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    category: str = Field(default="custom", description="Category such as 'material-specific'")
    quick_access: bool = Field(default=False, description="Pinned for fast access")
    usage_count: int = Field(default=0, description="How often the preset was applied")
    success_rate: Optional[float] = Field(default=None, description="Share of successful applications")
    created_by: Optional[str] = Field(default=None, description="Owner user id")


class UserPreferences(BaseModel):
    """Per-user preference settings."""
    show_recommendations: bool = Field(default=True, description="Whether the user wants suggestions")
    calculator_preferences: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Task type to preferred settings"
    )
