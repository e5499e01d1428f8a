"""
Reports router.

GET /reports/weekly   — 7-day behavioral report
GET /reports/advice   — personalized advice strings
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import get_chooser, get_event_store
from app.schemas.report import (
    AdviceResponse,
    InsightResponse,
    MoodCorrelation,
    PeakCravingTime,
    TriggerCount,
    WeeklyReportResponse,
)
from app.services import insights
from app.services.event_store import EventStore
from app.services.risk_model import Chooser
from app.services.weekly_report import WeeklyBehaviorReport

router = APIRouter(prefix="/reports", tags=["reports"])


def _report_to_response(r: WeeklyBehaviorReport) -> WeeklyReportResponse:
    return WeeklyReportResponse(
        period_start=str(r.period_start),
        period_end=str(r.period_end),
        total_cravings=r.total_cravings,
        avg_craving_level=r.avg_craving_level,
        successfully_overcome=r.successfully_overcome,
        failed_attempts=r.failed_attempts,
        most_common_triggers=[TriggerCount(**row) for row in r.most_common_triggers],
        mood_correlation=[MoodCorrelation(**row) for row in r.mood_correlation],
        peak_craving_times=[PeakCravingTime(**row) for row in r.peak_craving_times],
        insights=[
            InsightResponse(
                id=i.id,
                type=i.type,
                title=i.title,
                message=i.message,
                timestamp=i.timestamp.isoformat(),
            )
            for i in r.insights
        ],
        recommendations=r.recommendations,
    )


@router.get(
    "/weekly",
    response_model=WeeklyReportResponse,
    summary="Weekly behavioral report",
)
def weekly(store: EventStore = Depends(get_event_store)):
    """
    Summarize the last 7 days: totals, outcome split, top triggers, mood
    correlation, peak hours, rule-based insights and recommendations.

    ### Insights
    | id | type | fires when |
    |---|---|---|
    | `success-rate` | positive | more cravings overcome than failed |
    | `low-craving`  | positive | average craving < 5 |
    | `mood-trigger` | warning  | the worst mood averages > 7 |
    """
    return _report_to_response(insights.generate_weekly_report(store))


@router.get("/advice", response_model=AdviceResponse, summary="Personalized advice")
def advice(
    store: EventStore = Depends(get_event_store),
    chooser: Chooser = Depends(get_chooser),
):
    return AdviceResponse(advice=insights.get_personalized_advice(store, chooser=chooser))
