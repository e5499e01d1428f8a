"""
FastAPI dependencies shared by the routers.

The acting user is taken from the `X-User-Id` header; the recommendation
chooser is a process-wide `random.Random`, overridable in tests.
"""
import random

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.base import get_db
from app.services.event_store import DEFAULT_USER, EventStore
from app.services.risk_model import Chooser
from app.services.strategy_recommender import StrategyUsageLog

_chooser = random.Random(settings.RECOMMENDATION_SEED)


def get_user_id(
    x_user_id: str = Header(
        default=DEFAULT_USER,
        min_length=1,
        max_length=128,
        description="Logical user whose log is read / written.",
    ),
) -> str:
    return x_user_id.strip() or DEFAULT_USER


def get_event_store(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> EventStore:
    return EventStore(db, user_id)


def get_usage_log(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> StrategyUsageLog:
    return StrategyUsageLog(db, user_id)


def get_chooser() -> Chooser:
    return _chooser
