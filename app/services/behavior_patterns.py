"""
Behavior patterns and risk factors derived from the craving log.

analyze_patterns(events)              -> list[BehaviorPattern]
identify_risk_factors(events, stats)  -> list[RiskFactor]
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from app.services.event_store import BehaviorEvent
from app.services.risk_model import round_half_up
from app.services.trigger_analyzer import TriggerStat, trigger_display_name

MIN_EVENTS_FOR_PATTERNS = 7
MIN_HOURLY_SAMPLE = 3
MAX_PATTERNS = 5

TRIGGER_FACTOR_THRESHOLD = 6
TIME_FACTOR_THRESHOLD = 7

TRIGGER_TIPS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "stress": (
        "Do a breathing exercise",
        "Go out for a short walk",
        "Try a relaxation technique",
    ),
    "morning_coffee": (
        "Drink your coffee somewhere else",
        "Try tea instead of coffee",
        "Change your coffee ritual",
    ),
    "after_meal": (
        "Brush your teeth right after eating",
        "Take a short walk",
        "Chew gum",
    ),
    "social": (
        "Spend time with friends who don't smoke",
        "Pick smoke-free venues",
        "Tell your friends in advance",
    ),
    "alcohol": (
        "Stay away from drinking settings",
        "Cut down on alcohol",
        "Try alcohol-free drinks",
    ),
    "boredom": (
        "Pick up a hobby",
        "Exercise",
        "Learn something new",
    ),
})

DEFAULT_TIPS: tuple[str, ...] = (
    "Try a distracting activity",
    "Drink a glass of water",
    "Use SOS mode",
)

TIME_TIPS: tuple[str, ...] = (
    "Plan an activity for this hour",
    "Do a breathing exercise beforehand",
    "Keep SOS mode ready",
)


@dataclass
class BehaviorPattern:
    id: str
    hour: int
    frequency: int
    avg_craving_level: float
    success_rate: int
    time_of_day: str
    days_of_week: list[int] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)


@dataclass
class RiskFactor:
    id: str
    name: str
    description: str
    severity: str
    impact_score: int
    occurrences: int
    recommendations: list[str] = field(default_factory=list)


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def _by_hour(events: Sequence[BehaviorEvent]) -> dict[int, list[BehaviorEvent]]:
    grouped: dict[int, list[BehaviorEvent]] = defaultdict(list)
    for e in events:
        grouped[e.hour].append(e)
    return grouped


def analyze_patterns(events: Sequence[BehaviorEvent]) -> list[BehaviorPattern]:
    """Busiest hours (>= 3 events each), once the log holds at least a week's worth."""
    if len(events) < MIN_EVENTS_FOR_PATTERNS:
        return []

    significant = [
        (hour, group) for hour, group in _by_hour(events).items()
        if len(group) >= MIN_HOURLY_SAMPLE
    ]
    significant.sort(key=lambda hg: (-len(hg[1]), hg[0]))

    patterns = []
    for hour, group in significant[:MAX_PATTERNS]:
        avg = sum(e.craving_level for e in group) / len(group)
        successes = sum(1 for e in group if not e.did_smoke)
        triggers = sorted({t for e in group for t in e.triggers})
        patterns.append(BehaviorPattern(
            id=f"hour-{hour}",
            hour=hour,
            frequency=len(group),
            avg_craving_level=round(avg, 1),
            success_rate=round_half_up(successes / len(group) * 100),
            time_of_day=time_of_day(hour),
            days_of_week=sorted({e.day_of_week for e in group}),
            triggers=triggers[:3],
        ))
    return patterns


def _trigger_severity(avg: float) -> str:
    if avg >= 9:
        return "critical"
    if avg >= 7:
        return "high"
    return "medium"


def identify_risk_factors(
    events: Sequence[BehaviorEvent],
    stats: Mapping[str, TriggerStat],
) -> list[RiskFactor]:
    factors: list[RiskFactor] = []

    for stat in stats.values():
        if stat.average_craving_level < TRIGGER_FACTOR_THRESHOLD:
            continue
        factors.append(RiskFactor(
            id=f"trigger-{stat.trigger}",
            name=trigger_display_name(stat.trigger),
            description=(
                f"This trigger causes cravings of "
                f"{stat.average_craving_level:.1f}/10 on average"
            ),
            severity=_trigger_severity(stat.average_craving_level),
            impact_score=round_half_up(stat.average_craving_level * 10),
            occurrences=stat.frequency,
            recommendations=list(TRIGGER_TIPS.get(stat.trigger, DEFAULT_TIPS)),
        ))

    for hour, group in sorted(_by_hour(events).items()):
        if len(group) < MIN_HOURLY_SAMPLE:
            continue
        avg = sum(e.craving_level for e in group) / len(group)
        if avg < TIME_FACTOR_THRESHOLD:
            continue
        factors.append(RiskFactor(
            id=f"time-{hour}",
            name=f"{hour:02d}:00",
            description="This hour is high risk",
            severity="critical" if avg >= 8 else "high",
            impact_score=round_half_up(avg * 10),
            occurrences=len(group),
            recommendations=list(TIME_TIPS),
        ))

    return sorted(factors, key=lambda f: (-f.impact_score, f.id))
