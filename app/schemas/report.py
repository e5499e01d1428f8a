"""
Weekly report and advice schemas.
"""
from pydantic import BaseModel, Field


class TriggerCount(BaseModel):
    trigger: str
    count: int


class MoodCorrelation(BaseModel):
    mood: str
    avg_craving: float


class PeakCravingTime(BaseModel):
    hour: int
    avg_level: float


class InsightResponse(BaseModel):
    id: str
    type: str = Field(description='"positive" | "warning" | "neutral"')
    title: str
    message: str
    timestamp: str


class WeeklyReportResponse(BaseModel):
    period_start: str
    period_end: str
    total_cravings: int
    avg_craving_level: float
    successfully_overcome: int
    failed_attempts: int
    most_common_triggers: list[TriggerCount]
    mood_correlation: list[MoodCorrelation] = Field(description="Highest average craving first.")
    peak_craving_times: list[PeakCravingTime]
    insights: list[InsightResponse]
    recommendations: list[str]


class AdviceResponse(BaseModel):
    advice: list[str]
