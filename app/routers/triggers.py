"""
Triggers router.

GET /triggers/analysis       — per-trigger statistics (most frequent first)
GET /triggers/dangerous      — highest average craving first
GET /triggers/successful     — best success rate (triggers seen ≥ 3 times)
GET /triggers/patterns       — busiest craving hours
GET /triggers/risk-factors   — severe triggers and hours
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_event_store
from app.schemas.triggers import (
    BehaviorPatternResponse,
    RiskFactorResponse,
    TriggerStatListResponse,
    TriggerStatResponse,
)
from app.services import insights
from app.services.event_store import EventStore
from app.services.trigger_analyzer import TriggerStat

router = APIRouter(prefix="/triggers", tags=["triggers"])


def _stats_to_response(stats: list[TriggerStat]) -> TriggerStatListResponse:
    return TriggerStatListResponse(
        total=len(stats),
        items=[TriggerStatResponse.model_validate(s) for s in stats],
    )


@router.get("/analysis", response_model=TriggerStatListResponse, summary="Trigger statistics")
def analysis(store: EventStore = Depends(get_event_store)):
    """
    Frequency, average craving level and success rate for every trigger in
    the retained log. Unknown trigger ids are reported as-is.
    """
    return _stats_to_response(insights.get_trigger_analysis(store))


@router.get("/dangerous", response_model=TriggerStatListResponse, summary="Most severe triggers")
def dangerous(
    limit: int = Query(default=5, ge=1, le=50, description="Max triggers returned."),
    store: EventStore = Depends(get_event_store),
):
    return _stats_to_response(insights.get_dangerous_triggers(store, limit))


@router.get("/successful", response_model=TriggerStatListResponse, summary="Best-handled triggers")
def successful(store: EventStore = Depends(get_event_store)):
    return _stats_to_response(insights.get_successful_triggers(store))


@router.get(
    "/patterns",
    response_model=list[BehaviorPatternResponse],
    summary="Hour-of-day craving patterns",
)
def patterns(store: EventStore = Depends(get_event_store)):
    """Empty until at least 7 events are logged."""
    return [BehaviorPatternResponse.model_validate(p) for p in insights.get_behavior_patterns(store)]


@router.get(
    "/risk-factors",
    response_model=list[RiskFactorResponse],
    summary="Risk factors, highest impact first",
)
def risk_factors(store: EventStore = Depends(get_event_store)):
    return [RiskFactorResponse.model_validate(f) for f in insights.get_risk_factors(store)]
