"""
Risk Model — heuristic craving risk for a single hour.

Score pipeline
--------------
  1. base      = HOURLY_BASELINE[hour]
  2. override  = mean craving_level * 10, when the log holds >= 3 events
                 for that exact hour
  3. × DAY_MULTIPLIERS[day_of_week]      (0 = Sunday)
  4. × MOOD_FACTORS[mood]                (unknown mood → 1.0)
  5. × 1 + (stress - 5) * 0.1
  6. clamp to [0, 100], round half up   → risk_score
  7. RiskLevel from 25 / 50 / 75 thresholds
  8. contributing triggers (Trigger Analyzer, top 3, frequency >= 2)
  9. recommendation picked from the level's canned list via an injectable
     chooser (anything with `random.Random.choice`'s signature)

`predict` is pure: it receives the event snapshot (or None when the log
could not be read, in which case step 2 is skipped) and never raises.
"""
from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Sequence, TypeVar

from app.services.event_store import BehaviorEvent, sunday_based_weekday
from app.services.trigger_analyzer import contributing_triggers, recompute

T = TypeVar("T")


class Chooser(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


class RiskLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


# ---------------------------------------------------------------------------
# Static tables
# ---------------------------------------------------------------------------

# Diurnal curve: quiet overnight, morning rise, evening peak at 19:00.
HOURLY_BASELINE: tuple[int, ...] = (
    15, 10, 5, 5, 5, 10,        # 00 – 05
    25, 45, 60, 55, 50, 45,     # 06 – 11
    55, 50, 45, 50, 55, 60,     # 12 – 17
    65, 70, 65, 55, 40, 25,     # 18 – 23
)

DAY_MULTIPLIERS: tuple[float, ...] = (
    0.9,   # Sunday
    1.1,   # Monday
    1.0,   # Tuesday
    1.0,   # Wednesday
    1.0,   # Thursday
    1.2,   # Friday
    1.1,   # Saturday
)

MOOD_FACTORS: Mapping[str, float] = MappingProxyType({
    "great": 0.7,
    "good": 0.85,
    "neutral": 1.0,
    "bad": 1.3,
    "terrible": 1.5,
})

RECOMMENDATIONS: Mapping[RiskLevel, tuple[str, ...]] = MappingProxyType({
    RiskLevel.critical: (
        "Keep SOS mode ready and start a breathing exercise now.",
        "Drink a glass of water right away and start an activity.",
        "Call a friend or post in the community.",
        "Prepare with a short meditation or breathing exercise.",
    ),
    RiskLevel.high: (
        "Plan a distracting activity for this hour.",
        "Keep healthy snacks within reach.",
        "Consider going out for a walk.",
        "Watch one of your motivation videos.",
    ),
    RiskLevel.medium: (
        "Keep your water bottle with you.",
        "Have gum or a mint ready.",
        "Review your goals.",
        "Remind yourself of what you have achieved so far.",
    ),
    RiskLevel.low: (
        "You're doing great, keep going!",
        "Celebrate today's progress.",
        "Add a note to your journal.",
        "Check your progress stats.",
    ),
})

MIN_HOURLY_SAMPLE = 3
NEUTRAL_STRESS = 5
STRESS_STEP = 0.1

_default_chooser = random.Random()


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class RiskPrediction:
    hour: int
    risk_score: int              # 0 – 100
    risk_level: RiskLevel
    contributing_triggers: list[str] = field(default_factory=list)
    recommendation: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def risk_level_for(score: int) -> RiskLevel:
    if score < 25:
        return RiskLevel.low
    if score < 50:
        return RiskLevel.medium
    if score < 75:
        return RiskLevel.high
    return RiskLevel.critical


def stress_factor(stress: int) -> float:
    return 1 + (stress - NEUTRAL_STRESS) * STRESS_STEP


def base_risk(hour: int, events: Optional[Sequence[BehaviorEvent]]) -> float:
    """Static baseline, replaced by the user's own average once the hour has history."""
    if events:
        levels = [e.craving_level for e in events if e.hour == hour]
        if len(levels) >= MIN_HOURLY_SAMPLE:
            return sum(levels) / len(levels) * 10
    return float(HOURLY_BASELINE[hour])


def pick_recommendation(level: RiskLevel, chooser: Optional[Chooser] = None) -> str:
    return (chooser or _default_chooser).choice(RECOMMENDATIONS[level])


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def predict(
    hour: int,
    mood: str = "neutral",
    stress: int = NEUTRAL_STRESS,
    *,
    events: Optional[Sequence[BehaviorEvent]] = None,
    trigger_stats: Optional[Mapping] = None,
    day_of_week: Optional[int] = None,
    chooser: Optional[Chooser] = None,
) -> RiskPrediction:
    """
    Score one hour. `events=None` means the log was unavailable: the static
    baseline is used. `trigger_stats` is recomputed from `events` when omitted.
    `day_of_week` defaults to today (UTC).
    """
    hour = max(0, min(23, int(hour)))
    stress = max(1, min(10, int(stress)))
    if day_of_week is None:
        day_of_week = sunday_based_weekday(datetime.now(tz=timezone.utc))
    mood_key = mood.value if isinstance(mood, enum.Enum) else str(mood)

    raw = base_risk(hour, events)
    raw *= DAY_MULTIPLIERS[day_of_week % 7]
    raw *= MOOD_FACTORS.get(mood_key, 1.0)
    raw *= stress_factor(stress)

    score = max(0, min(100, round_half_up(raw)))
    level = risk_level_for(score)

    if trigger_stats is None:
        trigger_stats = recompute(events or ())

    return RiskPrediction(
        hour=hour,
        risk_score=score,
        risk_level=level,
        contributing_triggers=contributing_triggers(trigger_stats),
        recommendation=pick_recommendation(level, chooser),
    )
