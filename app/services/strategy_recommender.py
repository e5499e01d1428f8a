"""
Strategy Recommender — coping techniques ranked against trigger outcomes.

Effectiveness
-------------
Every strategy starts at 50. A category bonus applies when the user beats
(success rate >= 70%) at least one trigger of the matching taxonomy group:

  mindfulness  ← emotional   +20
  physical     ← routine     +15
  social       ← social      +25

Capped at 95. Output is sorted by effectiveness, ties in catalog order.

Usage counters are counted from a per-user usage log (one record per
`record_usage` call), not estimated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import StoreReadError, StoreWriteError, UnknownStrategyError
from app.services.kv_store import KeyValueStore, exclusive
from app.services.trigger_analyzer import TriggerStat, triggers_in_category

logger = logging.getLogger(__name__)

BASE_EFFECTIVENESS = 50
MAX_EFFECTIVENESS = 95
SUCCESS_THRESHOLD = 70

# strategy category -> (trigger taxonomy group, bonus)
CATEGORY_BONUSES: Mapping[str, tuple[str, int]] = MappingProxyType({
    "mindfulness": ("emotional", 20),
    "physical": ("routine", 15),
    "social": ("social", 25),
})


@dataclass(frozen=True)
class CopingTechnique:
    id: str
    title: str
    description: str
    category: str
    steps: tuple[str, ...]


CATALOG: tuple[CopingTechnique, ...] = (
    CopingTechnique(
        "deep-breathing", "Deep breathing", "Calm down with 4-7-8 breathing",
        "mindfulness",
        ("Breathe in for 4 seconds", "Hold for 7 seconds",
         "Breathe out slowly for 8 seconds", "Repeat 4-5 times"),
    ),
    CopingTechnique(
        "physical-activity", "Physical activity", "A short walk or some exercise",
        "physical",
        ("Stand up", "Walk for 5-10 minutes", "Or do 10 push-ups", "Keep moving!"),
    ),
    CopingTechnique(
        "drink-water", "Drink water", "Have a glass of cold water",
        "quick",
        ("Get a glass of water", "Sip it slowly", "Ice makes it work better"),
    ),
    CopingTechnique(
        "distraction", "Distraction", "Focus on a different activity",
        "distraction",
        ("Play a phone game", "Solve a puzzle", "Listen to music", "Draw something"),
    ),
    CopingTechnique(
        "social-support", "Social support", "Talk to a friend",
        "social",
        ("Call a friend", "Tell them how you feel", "Ask for support"),
    ),
    CopingTechnique(
        "motivation-reminder", "Motivation reminder", "Remember why you quit",
        "cognitive",
        ("Think about your reasons for quitting", "Review your goals",
         "Recall what you have gained"),
    ),
    CopingTechnique(
        "busy-hands", "Busy hands", "Keep your hands occupied",
        "physical",
        ("Squeeze a stress ball", "Spin a pen", "Chew gum", "Write something"),
    ),
    CopingTechnique(
        "buy-time", "Buy time", "Wait 5 minutes, the urge will pass",
        "cognitive",
        ("Set a 5-minute timer", "Keep yourself busy",
         "Cravings usually fade within 3-5 minutes"),
    ),
)

_CATALOG_BY_ID: Mapping[str, CopingTechnique] = MappingProxyType({s.id: s for s in CATALOG})


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Strategy:
    id: str
    title: str
    description: str
    category: str
    steps: list[str]
    effectiveness: int
    usage_count: int = 0
    success_count: int = 0


@dataclass(frozen=True)
class StrategyUsage:
    strategy_id: str
    timestamp: datetime
    succeeded: bool

    def to_record(self) -> dict:
        return {
            "strategy_id": self.strategy_id,
            "timestamp": self.timestamp.isoformat(),
            "succeeded": self.succeeded,
        }

    @classmethod
    def from_record(cls, rec: dict) -> "StrategyUsage":
        ts = datetime.fromisoformat(str(rec["timestamp"]))
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return cls(
            strategy_id=str(rec["strategy_id"]),
            timestamp=ts,
            succeeded=bool(rec["succeeded"]),
        )


@dataclass
class UsageCounts:
    used: dict[str, int] = field(default_factory=dict)
    succeeded: dict[str, int] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def effectiveness_for(category: str, stats: Iterable[TriggerStat]) -> int:
    score = BASE_EFFECTIVENESS
    bonus = CATEGORY_BONUSES.get(category)
    if bonus is not None:
        group, points = bonus
        members = triggers_in_category(group)
        if any(s.success_rate >= SUCCESS_THRESHOLD and s.trigger in members for s in stats):
            score += points
    return min(MAX_EFFECTIVENESS, score)


def count_usage(usages: Iterable[StrategyUsage]) -> UsageCounts:
    counts = UsageCounts()
    for u in usages:
        counts.used[u.strategy_id] = counts.used.get(u.strategy_id, 0) + 1
        if u.succeeded:
            counts.succeeded[u.strategy_id] = counts.succeeded.get(u.strategy_id, 0) + 1
    return counts


def recommend(
    stats: Mapping[str, TriggerStat],
    usage: Optional[UsageCounts] = None,
) -> list[Strategy]:
    usage = usage or UsageCounts()
    values = list(stats.values())
    strategies = [
        Strategy(
            id=t.id,
            title=t.title,
            description=t.description,
            category=t.category,
            steps=list(t.steps),
            effectiveness=effectiveness_for(t.category, values),
            usage_count=usage.used.get(t.id, 0),
            success_count=usage.succeeded.get(t.id, 0),
        )
        for t in CATALOG
    ]
    # sorted() is stable: ties keep catalog order
    return sorted(strategies, key=lambda s: -s.effectiveness)


# ---------------------------------------------------------------------------
# Usage log
# ---------------------------------------------------------------------------

class StrategyUsageLog:
    """Per-user append-only record of strategy attempts."""

    def __init__(self, db: Session, user_id: str, retention_days: Optional[int] = None):
        self.kv = KeyValueStore(db)
        self.user_id = user_id
        self.retention_days = retention_days or settings.RETENTION_DAYS

    @property
    def key(self) -> str:
        return f"strategy_usage:{self.user_id}"

    def read_all(self, for_update: bool = False) -> list[StrategyUsage]:
        usages = []
        for rec in self.kv.read(self.key, for_update=for_update):
            try:
                usages.append(StrategyUsage.from_record(rec))
            except (KeyError, ValueError, TypeError):
                logger.warning("Skipping malformed record in %s: %r", self.key, rec)
        return usages

    def record(self, strategy_id: str, succeeded: bool, now: Optional[datetime] = None) -> StrategyUsage:
        if strategy_id not in _CATALOG_BY_ID:
            raise UnknownStrategyError(strategy_id)
        now = now or datetime.now(tz=timezone.utc)
        usage = StrategyUsage(strategy_id=strategy_id, timestamp=now, succeeded=succeeded)
        cutoff = now - timedelta(days=self.retention_days)

        with exclusive(self.key, settings.STORE_TIMEOUT_SECONDS):
            try:
                current = self.read_all(for_update=True)
            except StoreReadError as exc:
                raise StoreWriteError(self.key, reason=exc.message) from exc
            kept = [u for u in current if u.timestamp >= cutoff] + [usage]
            self.kv.write(self.key, [u.to_record() for u in kept])
        return usage
