"""
Events router.

POST /events   — log a craving event
GET  /events   — list the user's retained events (newest first)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.core.deps import get_event_store
from app.schemas.common import STORE_UNAVAILABLE, VALIDATION_FAILED
from app.schemas.events import (
    CravingEventListResponse,
    CravingEventRequest,
    CravingEventResponse,
)
from app.services import insights
from app.services.event_store import BehaviorEvent, EventStore, new_event

router = APIRouter(prefix="/events", tags=["events"])


# ---------------------------------------------------------------------------
# Serialization helper
# ---------------------------------------------------------------------------

def _event_to_response(ev: BehaviorEvent) -> CravingEventResponse:
    return CravingEventResponse(
        id=ev.id,
        timestamp=ev.timestamp.isoformat(),
        hour=ev.hour,
        day_of_week=ev.day_of_week,
        mood=ev.mood,
        stress_level=ev.stress_level,
        craving_level=ev.craving_level,
        did_smoke=ev.did_smoke,
        activity=ev.activity,
        triggers=list(ev.triggers),
        location=ev.location,
        weather=ev.weather,
    )


# ---------------------------------------------------------------------------
# POST /events
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=CravingEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a craving event",
    responses={422: VALIDATION_FAILED, 503: STORE_UNAVAILABLE},
)
def log_event(
    payload: CravingEventRequest,
    store: EventStore = Depends(get_event_store),
):
    """
    Append a craving event to the user's log.

    Numeric fields are clamped to their ranges before storage. Events older
    than the retention window (90 days by default) are evicted as part of
    the same write; a new event that is itself that old is rejected with 422.
    """
    event = new_event(
        mood=payload.mood,
        stress_level=payload.stress_level,
        craving_level=payload.craving_level,
        did_smoke=payload.did_smoke,
        triggers=payload.triggers,
        activity=payload.activity,
        timestamp=payload.timestamp,
        hour=payload.hour,
        day_of_week=payload.day_of_week,
        location=payload.location,
        weather=payload.weather,
    )
    return _event_to_response(insights.log_craving(store, event))


# ---------------------------------------------------------------------------
# GET /events
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=CravingEventListResponse,
    summary="List logged craving events (newest first)",
)
def list_events(
    limit: int = Query(default=50, ge=1, le=500, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    store: EventStore = Depends(get_event_store),
):
    """Return the retained events. An unreadable store yields an empty list."""
    events = list(reversed(insights.read_events(store)))
    return CravingEventListResponse(
        total=len(events),
        items=[_event_to_response(ev) for ev in events[offset:offset + limit]],
    )
