"""
Weekly Report Generator — 7-day behavioral summary.

Window
------
Events with timestamp > now - 7 days. The report reads raw events directly
(no risk model involvement).

Insight rules (each independent, any subset may fire)
-----------------------------------------------------
  1. SUCCESS_RATE   positive  overcome > failed; message carries the % overcome
  2. LOW_CRAVING    positive  average craving < 5
  3. MOOD_TRIGGER   warning   the highest-craving mood averages > 7

Recommendations are a fixed list and are returned even for an empty window.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from app.services.event_store import BehaviorEvent
from app.services.risk_model import round_half_up

WINDOW_DAYS = 7
TOP_N = 5
LOW_CRAVING_THRESHOLD = 5
MOOD_WARNING_THRESHOLD = 7

RECOMMENDATIONS: tuple[str, ...] = (
    "Do a breathing exercise before your peak hours.",
    "Learn your triggers and be ready for them.",
    "Keep logging your cravings every day.",
    "Lean on the community when things get hard.",
)


class InsightType:
    POSITIVE = "positive"
    WARNING = "warning"
    NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class BehaviorInsight:
    id: str
    type: str
    title: str
    message: str
    timestamp: datetime


@dataclass
class WeeklyBehaviorReport:
    period_start: date
    period_end: date
    total_cravings: int = 0
    avg_craving_level: float = 0.0
    successfully_overcome: int = 0
    failed_attempts: int = 0
    most_common_triggers: list[dict] = field(default_factory=list)  # {trigger, count}
    mood_correlation: list[dict] = field(default_factory=list)      # {mood, avg_craving}
    peak_craving_times: list[dict] = field(default_factory=list)    # {hour, avg_level}
    insights: list[BehaviorInsight] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=lambda: list(RECOMMENDATIONS))


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def _mean(values: list[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def _window(events: Iterable[BehaviorEvent], now: datetime) -> list[BehaviorEvent]:
    start = now - timedelta(days=WINDOW_DAYS)
    return [e for e in events if e.timestamp > start]


def _trigger_counts(events: list[BehaviorEvent]) -> list[dict]:
    counts = Counter(t for e in events for t in e.triggers)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_N]
    return [{"trigger": t, "count": c} for t, c in ranked]


def _mood_correlation(events: list[BehaviorEvent]) -> list[dict]:
    by_mood: dict[str, list[int]] = defaultdict(list)
    for e in events:
        by_mood[e.mood].append(e.craving_level)
    rows = [{"mood": m, "avg_craving": _mean(v)} for m, v in by_mood.items()]
    return sorted(rows, key=lambda r: (-r["avg_craving"], r["mood"]))


def _peak_times(events: list[BehaviorEvent]) -> list[dict]:
    by_hour: dict[int, list[int]] = defaultdict(list)
    for e in events:
        by_hour[e.hour].append(e.craving_level)
    rows = [{"hour": h, "avg_level": _mean(v)} for h, v in by_hour.items()]
    return sorted(rows, key=lambda r: (-r["avg_level"], r["hour"]))[:TOP_N]


# ---------------------------------------------------------------------------
# Insight rules
# ---------------------------------------------------------------------------

def _derive_insights(
    total: int,
    overcome: int,
    failed: int,
    avg_craving: float,
    mood_correlation: list[dict],
    now: datetime,
) -> list[BehaviorInsight]:
    insights: list[BehaviorInsight] = []

    if overcome > failed:
        pct = round_half_up(overcome / total * 100)
        insights.append(BehaviorInsight(
            id="success-rate",
            type=InsightType.POSITIVE,
            title="High success rate!",
            message=f"You got through {pct}% of your cravings this week.",
            timestamp=now,
        ))

    if total and avg_craving < LOW_CRAVING_THRESHOLD:
        insights.append(BehaviorInsight(
            id="low-craving",
            type=InsightType.POSITIVE,
            title="Cravings under control",
            message="Your average craving level is under control. Great work!",
            timestamp=now,
        ))

    if mood_correlation and mood_correlation[0]["avg_craving"] > MOOD_WARNING_THRESHOLD:
        mood = mood_correlation[0]["mood"]
        insights.append(BehaviorInsight(
            id="mood-trigger",
            type=InsightType.WARNING,
            title="Mood effect",
            message=f'Your cravings climb when you feel "{mood}". Be extra careful then!',
            timestamp=now,
        ))

    return insights


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def generate(
    events: Iterable[BehaviorEvent],
    now: Optional[datetime] = None,
) -> WeeklyBehaviorReport:
    now = now or datetime.now(tz=timezone.utc)
    week = _window(events, now)
    period_start = (now - timedelta(days=WINDOW_DAYS)).date()

    if not week:
        return WeeklyBehaviorReport(period_start=period_start, period_end=now.date())

    total = len(week)
    avg_craving = _mean([e.craving_level for e in week])
    overcome = sum(1 for e in week if not e.did_smoke)
    failed = total - overcome
    moods = _mood_correlation(week)

    return WeeklyBehaviorReport(
        period_start=period_start,
        period_end=now.date(),
        total_cravings=total,
        avg_craving_level=round(avg_craving, 1),
        successfully_overcome=overcome,
        failed_attempts=failed,
        most_common_triggers=_trigger_counts(week),
        mood_correlation=moods,
        peak_craving_times=_peak_times(week),
        insights=_derive_insights(total, overcome, failed, avg_craving, moods, now),
        recommendations=list(RECOMMENDATIONS),
    )
