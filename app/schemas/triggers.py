"""
Trigger analysis schemas.
"""
from pydantic import BaseModel, ConfigDict, Field


class TriggerStatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    trigger: str
    frequency: int = Field(description="Events carrying this trigger.")
    average_craving_level: float
    success_rate: float = Field(description="% of those events where the user did not smoke.")


class TriggerStatListResponse(BaseModel):
    total: int
    items: list[TriggerStatResponse]


class BehaviorPatternResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    hour: int
    frequency: int
    avg_craving_level: float
    success_rate: int
    time_of_day: str = Field(description='"morning" | "afternoon" | "evening" | "night"')
    days_of_week: list[int]
    triggers: list[str]


class RiskFactorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    severity: str
    impact_score: int
    occurrences: int
    recommendations: list[str]
