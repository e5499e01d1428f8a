"""
Risk router.

GET /risk/predict           — risk for a given hour
GET /risk/current           — risk for the current hour (UTC)
GET /risk/daily-profile     — 24-hour risk curve
GET /risk/high-risk-hours   — hours predicted high / critical today
GET /risk/weekly-trend      — per-weekday average risk over the last 7 days

Every endpoint answers 200 even when the event store is down; predictions
then fall back to the static baseline.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_chooser, get_event_store
from app.schemas.risk import (
    DailyRiskProfileResponse,
    DayRiskResponse,
    HighRiskHoursResponse,
    RiskPredictionResponse,
    WeeklyRiskTrendResponse,
)
from app.services import insights
from app.services.daily_profile import DailyRiskProfile
from app.services.event_store import EventStore, Mood
from app.services.risk_model import Chooser, RiskPrediction

router = APIRouter(prefix="/risk", tags=["risk"])

_MOOD_QUERY = Query(default=Mood.neutral, description="Current mood.")
_STRESS_QUERY = Query(default=5, ge=1, le=10, description="Current stress, 1–10.")


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _prediction_to_response(p: RiskPrediction) -> RiskPredictionResponse:
    return RiskPredictionResponse(
        hour=p.hour,
        risk_score=p.risk_score,
        risk_level=p.risk_level.value,
        contributing_triggers=p.contributing_triggers,
        recommendation=p.recommendation,
    )


def _profile_to_response(profile: DailyRiskProfile) -> DailyRiskProfileResponse:
    return DailyRiskProfileResponse(
        date=str(profile.date),
        hourly_risks=[_prediction_to_response(p) for p in profile.hourly_risks],
        overall_risk=profile.overall_risk,
        peak_hours=profile.peak_hours,
        safest_hours=profile.safest_hours,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/predict",
    response_model=RiskPredictionResponse,
    summary="Predict craving risk for an hour",
)
def predict(
    hour: int = Query(ge=0, le=23, description="Hour of day, 0–23."),
    mood: Mood = _MOOD_QUERY,
    stress: int = _STRESS_QUERY,
    store: EventStore = Depends(get_event_store),
    chooser: Chooser = Depends(get_chooser),
):
    """
    ### Score
    baseline (or the user's own average × 10 once the hour has ≥ 3 events)
    × weekday factor × mood factor × (1 + (stress − 5) × 0.1), clamped to 0–100.

    | Level | Score |
    |---|---|
    | low | < 25 |
    | medium | 25 – 49 |
    | high | 50 – 74 |
    | critical | ≥ 75 |
    """
    result = insights.predict_craving_risk(store, hour, mood.value, stress, chooser=chooser)
    return _prediction_to_response(result)


@router.get(
    "/current",
    response_model=RiskPredictionResponse,
    summary="Craving risk right now",
)
def current(
    mood: Mood = _MOOD_QUERY,
    stress: int = _STRESS_QUERY,
    store: EventStore = Depends(get_event_store),
    chooser: Chooser = Depends(get_chooser),
):
    result = insights.get_current_risk(store, mood.value, stress, chooser=chooser)
    return _prediction_to_response(result)


@router.get(
    "/daily-profile",
    response_model=DailyRiskProfileResponse,
    summary="24-hour craving risk curve",
)
def daily_profile(
    mood: Mood = _MOOD_QUERY,
    stress: int = _STRESS_QUERY,
    store: EventStore = Depends(get_event_store),
    chooser: Chooser = Depends(get_chooser),
):
    """Risk for every hour of today, plus the 5 peak and 5 safest hours."""
    profile = insights.generate_daily_risk_profile(store, mood.value, stress, chooser=chooser)
    return _profile_to_response(profile)


@router.get(
    "/high-risk-hours",
    response_model=HighRiskHoursResponse,
    summary="Hours predicted high or critical today",
)
def high_risk_hours(
    store: EventStore = Depends(get_event_store),
    chooser: Chooser = Depends(get_chooser),
):
    """Intended for notification scheduling; uses neutral mood and stress 5."""
    return HighRiskHoursResponse(hours=insights.get_high_risk_hours(store, chooser=chooser))


@router.get(
    "/weekly-trend",
    response_model=WeeklyRiskTrendResponse,
    summary="Average risk per weekday over the last 7 days",
)
def weekly_trend(store: EventStore = Depends(get_event_store)):
    days = insights.get_weekly_risk_trend(store)
    return WeeklyRiskTrendResponse(
        days=[DayRiskResponse(day=d.day, day_of_week=d.day_of_week, avg_risk=d.avg_risk) for d in days]
    )
