"""
Daily Risk Profile Builder — the 24-hour risk curve.

All 24 predictions are scored against one snapshot of the log, so the curve
is internally consistent even if an append lands mid-build.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from app.services.event_store import BehaviorEvent, sunday_based_weekday
from app.services.risk_model import Chooser, RiskPrediction, predict, round_half_up
from app.services.trigger_analyzer import recompute

HOURS_IN_DAY = 24
HIGHLIGHT_HOURS = 5


@dataclass
class DailyRiskProfile:
    date: date
    hourly_risks: list[RiskPrediction]
    overall_risk: int
    peak_hours: list[int]        # 5 riskiest, ties by ascending hour
    safest_hours: list[int]      # 5 safest, ties by ascending hour


def build(
    mood: str = "neutral",
    stress: int = 5,
    *,
    events: Optional[Sequence[BehaviorEvent]] = None,
    now: Optional[datetime] = None,
    chooser: Optional[Chooser] = None,
) -> DailyRiskProfile:
    now = now or datetime.now(tz=timezone.utc)
    day_of_week = sunday_based_weekday(now)
    stats = recompute(events or ())

    hourly = [
        predict(
            hour, mood, stress,
            events=events,
            trigger_stats=stats,
            day_of_week=day_of_week,
            chooser=chooser,
        )
        for hour in range(HOURS_IN_DAY)
    ]

    overall = round_half_up(sum(p.risk_score for p in hourly) / HOURS_IN_DAY)
    peak = sorted(hourly, key=lambda p: (-p.risk_score, p.hour))[:HIGHLIGHT_HOURS]
    safest = sorted(hourly, key=lambda p: (p.risk_score, p.hour))[:HIGHLIGHT_HOURS]

    return DailyRiskProfile(
        date=now.date(),
        hourly_risks=hourly,
        overall_risk=overall,
        peak_hours=[p.hour for p in peak],
        safest_hours=[p.hour for p in safest],
    )
