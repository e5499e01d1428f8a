"""
Public operations consumed by the routers (and any other collaborator).

Every read operation here takes one snapshot of the event log and hands it
to the pure calculators. When the store cannot be read the operation logs a
warning and returns its documented default instead of raising:

  predict_craving_risk / get_current_risk   baseline-only prediction
  generate_daily_risk_profile               curve from baselines only
  get_high_risk_hours                       from the baseline curve
  trigger / pattern / factor queries        []
  generate_weekly_report                    zeroed report (recommendations kept)
  get_personalized_advice                   UNAVAILABLE_ADVICE
  get_strategies                            catalog at base effectiveness

Writes (log_craving, record_strategy_usage) raise StoreWriteError.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.errors import StoreReadError
from app.services import (
    advice,
    behavior_patterns,
    daily_profile,
    risk_model,
    strategy_recommender,
    trigger_analyzer,
    weekly_report,
)
from app.services.event_store import BehaviorEvent, EventStore, sunday_based_weekday
from app.services.risk_model import Chooser, RiskLevel, RiskPrediction
from app.services.strategy_recommender import Strategy, StrategyUsage, StrategyUsageLog, UsageCounts
from app.services.trigger_analyzer import TriggerStat

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _snapshot(store: EventStore) -> Optional[list[BehaviorEvent]]:
    """All events, or None when the log is unreadable."""
    try:
        return store.read_all_events()
    except StoreReadError as exc:
        logger.warning("Event log unavailable for user %s: %s", store.user_id, exc.message)
        return None


def _stats(store: EventStore) -> dict[str, TriggerStat]:
    events = _snapshot(store)
    return trigger_analyzer.recompute(events or ())


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def log_craving(store: EventStore, event: BehaviorEvent) -> BehaviorEvent:
    """Persist a new event. Raises StoreWriteError."""
    stored = store.append_event(event)
    logger.info(
        "Logged craving for user %s at hour %d (craving=%d, smoked=%s)",
        store.user_id, event.hour, event.craving_level, event.did_smoke,
    )
    return stored


def read_events(store: EventStore) -> list[BehaviorEvent]:
    return _snapshot(store) or []


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------

def predict_craving_risk(
    store: EventStore,
    hour: int,
    mood: str = "neutral",
    stress: int = 5,
    *,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> RiskPrediction:
    now = now or _now()
    return risk_model.predict(
        hour, mood, stress,
        events=_snapshot(store),
        day_of_week=sunday_based_weekday(now),
        chooser=chooser,
    )


def get_current_risk(
    store: EventStore,
    mood: str = "neutral",
    stress: int = 5,
    *,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> RiskPrediction:
    now = now or _now()
    return predict_craving_risk(store, now.hour, mood, stress, now=now, chooser=chooser)


def generate_daily_risk_profile(
    store: EventStore,
    mood: str = "neutral",
    stress: int = 5,
    *,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> daily_profile.DailyRiskProfile:
    return daily_profile.build(
        mood, stress,
        events=_snapshot(store),
        now=now or _now(),
        chooser=chooser,
    )


def get_high_risk_hours(
    store: EventStore,
    *,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> list[int]:
    profile = generate_daily_risk_profile(store, now=now, chooser=chooser)
    return [
        p.hour for p in profile.hourly_risks
        if p.risk_level in (RiskLevel.high, RiskLevel.critical)
    ]


def get_weekly_risk_trend(
    store: EventStore,
    *,
    now: Optional[datetime] = None,
) -> list[advice.DayRisk]:
    return advice.weekly_risk_trend(_snapshot(store) or (), now or _now())


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

def get_trigger_analysis(store: EventStore) -> list[TriggerStat]:
    """All trigger stats, most frequent first."""
    stats = _stats(store)
    return sorted(stats.values(), key=lambda s: (-s.frequency, s.trigger))


def get_dangerous_triggers(store: EventStore, limit: int = 5) -> list[TriggerStat]:
    return trigger_analyzer.rank_dangerous(_stats(store), limit)


def get_successful_triggers(store: EventStore) -> list[TriggerStat]:
    return trigger_analyzer.rank_successful(_stats(store))


def get_behavior_patterns(store: EventStore) -> list[behavior_patterns.BehaviorPattern]:
    return behavior_patterns.analyze_patterns(_snapshot(store) or [])


def get_risk_factors(store: EventStore) -> list[behavior_patterns.RiskFactor]:
    events = _snapshot(store) or []
    return behavior_patterns.identify_risk_factors(events, trigger_analyzer.recompute(events))


# ---------------------------------------------------------------------------
# Reports & advice
# ---------------------------------------------------------------------------

def generate_weekly_report(
    store: EventStore,
    *,
    now: Optional[datetime] = None,
) -> weekly_report.WeeklyBehaviorReport:
    return weekly_report.generate(_snapshot(store) or (), now or _now())


def get_personalized_advice(
    store: EventStore,
    *,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> list[str]:
    events = _snapshot(store)
    if events is None:
        return list(advice.UNAVAILABLE_ADVICE)

    now = now or _now()
    stats = trigger_analyzer.recompute(events)
    current = risk_model.predict(
        now.hour,
        events=events,
        trigger_stats=stats,
        day_of_week=sunday_based_weekday(now),
        chooser=chooser,
    )
    return advice.personalized_advice(stats, current, advice.weekly_risk_trend(events, now))


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def get_strategies(store: EventStore, usage_log: StrategyUsageLog) -> list[Strategy]:
    try:
        usage = strategy_recommender.count_usage(usage_log.read_all())
    except StoreReadError as exc:
        logger.warning("Strategy usage unavailable for user %s: %s", usage_log.user_id, exc.message)
        usage = UsageCounts()
    return strategy_recommender.recommend(_stats(store), usage)


def record_strategy_usage(
    usage_log: StrategyUsageLog,
    strategy_id: str,
    succeeded: bool,
) -> StrategyUsage:
    """Raises UnknownStrategyError / StoreWriteError."""
    usage = usage_log.record(strategy_id, succeeded)
    logger.info(
        "Recorded strategy %s for user %s (succeeded=%s)",
        strategy_id, usage_log.user_id, succeeded,
    )
    return usage
