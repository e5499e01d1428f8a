"""
Trigger Analyzer — per-trigger statistics over the craving log.

Statistics are recomputed from the full event list on every call; they
depend only on the multiset of events, never on insertion order. The 90-day
retention window bounds the cost.

Public API
----------
recompute(events)                 -> dict[str, TriggerStat]
rank_dangerous(stats, limit=5)    -> list[TriggerStat]
rank_successful(stats)            -> list[TriggerStat]
contributing_triggers(stats)      -> list[str]
trigger_display_name(trigger_id)  -> str
triggers_in_category(category)    -> frozenset[str]
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from app.services.event_store import BehaviorEvent


# ---------------------------------------------------------------------------
# Static catalog
# ---------------------------------------------------------------------------

TRIGGER_NAMES: Mapping[str, str] = MappingProxyType({
    "morning_coffee": "Morning coffee",
    "after_meal":     "After a meal",
    "stress":         "Stress",
    "boredom":        "Boredom",
    "social":         "Social setting",
    "alcohol":        "Alcohol",
    "driving":        "Driving",
    "work_break":     "Work break",
    "phone_call":     "Phone call",
    "anxiety":        "Anxiety",
    "anger":          "Anger",
    "celebration":    "Celebration",
    "waking_up":      "Waking up",
    "before_sleep":   "Before sleep",
    "waiting":        "Waiting",
})

# Taxonomy used by the strategy recommender. Independent of the catalog
# above: some ids here are never offered in the UI and vice versa.
TRIGGER_CATEGORIES: Mapping[str, frozenset[str]] = MappingProxyType({
    "emotional": frozenset({"stress", "anxiety", "anger", "boredom", "sadness", "loneliness"}),
    "routine": frozenset({
        "morning_coffee", "after_meal", "driving", "work_break",
        "phone_call", "waking_up", "before_sleep",
    }),
    "social": frozenset({"social", "alcohol", "celebration", "friends", "party"}),
    "physical": frozenset({"fatigue", "hunger", "pain", "illness"}),
})

MIN_CONTRIBUTING_FREQUENCY = 2
MIN_SUCCESS_SAMPLE = 3
TOP_SUCCESSFUL = 5


def trigger_display_name(trigger_id: str) -> str:
    """Human label; unknown ids are returned unchanged."""
    return TRIGGER_NAMES.get(trigger_id, trigger_id)


def triggers_in_category(category: str) -> frozenset[str]:
    return TRIGGER_CATEGORIES.get(category, frozenset())


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TriggerStat:
    trigger: str
    frequency: int               # events carrying this trigger
    average_craving_level: float
    success_rate: float          # % of those events with did_smoke = False


# ---------------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------------

def recompute(events: Iterable[BehaviorEvent]) -> dict[str, TriggerStat]:
    totals: dict[str, list[int]] = {}   # trigger -> [count, craving_sum, success]
    for event in events:
        for trigger in set(event.triggers):
            acc = totals.setdefault(trigger, [0, 0, 0])
            acc[0] += 1
            acc[1] += event.craving_level
            if not event.did_smoke:
                acc[2] += 1

    return {
        trigger: TriggerStat(
            trigger=trigger,
            frequency=count,
            average_craving_level=craving_sum / count,
            success_rate=success / count * 100,
        )
        for trigger, (count, craving_sum, success) in sorted(totals.items())
    }


def _by_severity(stat: TriggerStat) -> tuple[float, str]:
    return (-stat.average_craving_level, stat.trigger)


def rank_dangerous(stats: Mapping[str, TriggerStat], limit: int = 5) -> list[TriggerStat]:
    """Highest average craving first; ties broken by trigger id."""
    return sorted(stats.values(), key=_by_severity)[:max(limit, 0)]


def rank_successful(stats: Mapping[str, TriggerStat]) -> list[TriggerStat]:
    """Triggers seen at least 3 times, best success rate first, top 5."""
    eligible = [s for s in stats.values() if s.frequency >= MIN_SUCCESS_SAMPLE]
    eligible.sort(key=lambda s: (-s.success_rate, s.trigger))
    return eligible[:TOP_SUCCESSFUL]


def contributing_triggers(stats: Mapping[str, TriggerStat], limit: int = 3) -> list[str]:
    """Trigger ids seen at least twice, most severe first."""
    recurring = [s for s in stats.values() if s.frequency >= MIN_CONTRIBUTING_FREQUENCY]
    return [s.trigger for s in sorted(recurring, key=_by_severity)[:limit]]
