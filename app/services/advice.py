"""
Weekday risk trend and personalized advice.

Advice rules (in output order)
------------------------------
  1. Name the trigger with the highest average craving.
  2. Current risk: high/critical → caution message, low → encouragement.
  3. Weekdays whose 7-day trend exceeds 60.
  4. Any trigger beaten more than 70% of the time → praise.
When no rule fires the two onboarding messages are returned.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Sequence

from app.services.event_store import BehaviorEvent
from app.services.risk_model import (
    DAY_MULTIPLIERS,
    HOURLY_BASELINE,
    RiskLevel,
    RiskPrediction,
    round_half_up,
)
from app.services.trigger_analyzer import TriggerStat, rank_dangerous, trigger_display_name

WEEKDAY_LABELS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
TREND_WINDOW_DAYS = 7
HIGH_RISK_DAY_THRESHOLD = 60
PRAISE_SUCCESS_THRESHOLD = 70
# Midday baseline stands in for weekdays without data.
_FALLBACK_HOUR = 12

ONBOARDING_ADVICE: tuple[str, ...] = (
    "Keep logging your cravings and we'll tailor advice to you.",
    "Use the journal to record your mood and cravings each day.",
)
UNAVAILABLE_ADVICE: tuple[str, ...] = (
    "We're analyzing your data; personalized advice is coming soon.",
)


@dataclass
class DayRisk:
    day: str
    day_of_week: int
    avg_risk: int


def weekly_risk_trend(events: Iterable[BehaviorEvent], now: datetime) -> list[DayRisk]:
    """Average craving × 10 per weekday over the last 7 days, Sunday first."""
    start = now - timedelta(days=TREND_WINDOW_DAYS)
    by_day: dict[int, list[int]] = defaultdict(list)
    for e in events:
        if e.timestamp > start:
            by_day[e.day_of_week].append(e.craving_level * 10)

    trend = []
    for dow, label in enumerate(WEEKDAY_LABELS):
        values = by_day.get(dow)
        if values:
            avg = round_half_up(sum(values) / len(values))
        else:
            avg = round_half_up(HOURLY_BASELINE[_FALLBACK_HOUR] * DAY_MULTIPLIERS[dow])
        trend.append(DayRisk(day=label, day_of_week=dow, avg_risk=avg))
    return trend


def personalized_advice(
    stats: Mapping[str, TriggerStat],
    current: RiskPrediction,
    trend: Sequence[DayRisk],
) -> list[str]:
    advice: list[str] = []

    top = rank_dangerous(stats, limit=1)
    if top:
        name = trigger_display_name(top[0].trigger)
        advice.append(f'"{name}" is your biggest trigger. Plan ahead for these moments.')

    if current.risk_level in (RiskLevel.high, RiskLevel.critical):
        advice.append("You're in a high-risk hour right now. Keep SOS mode on and drink some water.")
    elif current.risk_level == RiskLevel.low:
        advice.append("You're in a low-risk stretch. Use this energy to build motivation!")

    hard_days = [d.day for d in trend if d.avg_risk > HIGH_RISK_DAY_THRESHOLD]
    if hard_days:
        advice.append(f"{', '.join(hard_days)} are harder for you. Be extra careful on those days.")

    if any(s.success_rate > PRAISE_SUCCESS_THRESHOLD for s in stats.values()):
        advice.append("Great! You're beating several triggers more than 70% of the time. Keep going!")

    return advice or list(ONBOARDING_ADVICE)
