"""
Risk schemas.

GET /risk/predict, /risk/current   → RiskPredictionResponse
GET /risk/daily-profile            → DailyRiskProfileResponse
GET /risk/high-risk-hours          → HighRiskHoursResponse
GET /risk/weekly-trend             → WeeklyRiskTrendResponse
"""
from pydantic import BaseModel, Field


class RiskPredictionResponse(BaseModel):
    hour: int = Field(description="Hour of day, 0–23.")
    risk_score: int = Field(description="Heuristic risk, 0–100.", examples=[72])
    risk_level: str = Field(description='"low" | "medium" | "high" | "critical"')
    contributing_triggers: list[str] = Field(
        description="Up to 3 recurring triggers, most severe first."
    )
    recommendation: str


class DailyRiskProfileResponse(BaseModel):
    date: str
    hourly_risks: list[RiskPredictionResponse] = Field(description="24 entries, hour 0 first.")
    overall_risk: int = Field(description="Rounded mean of the 24 scores.")
    peak_hours: list[int] = Field(description="5 riskiest hours.")
    safest_hours: list[int] = Field(description="5 safest hours.")


class HighRiskHoursResponse(BaseModel):
    hours: list[int] = Field(description="Hours predicted high or critical today.")


class DayRiskResponse(BaseModel):
    day: str = Field(examples=["Fri"])
    day_of_week: int = Field(description="0 = Sunday.")
    avg_risk: int


class WeeklyRiskTrendResponse(BaseModel):
    days: list[DayRiskResponse] = Field(description="Sunday first.")
