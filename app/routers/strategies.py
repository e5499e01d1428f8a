"""
Strategies router.

GET  /strategies                  — coping strategies, most effective first
POST /strategies/{id}/usage       — record that a strategy was tried
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status

from app.core.deps import get_event_store, get_usage_log
from app.schemas.common import STORE_UNAVAILABLE, ErrorResponse
from app.schemas.strategy import (
    StrategyListResponse,
    StrategyResponse,
    StrategyUsageRequest,
    StrategyUsageResponse,
)
from app.services import insights
from app.services.event_store import EventStore
from app.services.strategy_recommender import StrategyUsageLog

router = APIRouter(prefix="/strategies", tags=["strategies"])


@router.get("", response_model=StrategyListResponse, summary="Ranked coping strategies")
def list_strategies(
    store: EventStore = Depends(get_event_store),
    usage_log: StrategyUsageLog = Depends(get_usage_log),
):
    """
    Effectiveness starts at 50 and gains a category bonus when the user
    overcomes a matching trigger group at least 70% of the time:
    mindfulness/emotional +20, physical/routine +15, social/social +25
    (capped at 95).
    """
    strategies = insights.get_strategies(store, usage_log)
    return StrategyListResponse(items=[StrategyResponse.model_validate(s) for s in strategies])


@router.post(
    "/{strategy_id}/usage",
    response_model=StrategyUsageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a strategy attempt",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown strategy id."},
        503: STORE_UNAVAILABLE,
    },
)
def record_usage(
    payload: StrategyUsageRequest,
    strategy_id: str = Path(description="Strategy id from GET /strategies."),
    usage_log: StrategyUsageLog = Depends(get_usage_log),
):
    usage = insights.record_strategy_usage(usage_log, strategy_id, payload.succeeded)
    return StrategyUsageResponse(
        strategy_id=usage.strategy_id,
        timestamp=usage.timestamp.isoformat(),
        succeeded=usage.succeeded,
    )
