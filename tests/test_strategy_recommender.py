"""
Tests for the Strategy Recommender and the per-user strategy usage log.
"""
from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.errors import UnknownStrategyError
from app.services.strategy_recommender import (
    CATALOG,
    StrategyUsage,
    StrategyUsageLog,
    count_usage,
    effectiveness_for,
    recommend,
)
from app.services.trigger_analyzer import TriggerStat

from tests.conftest import MONDAY_NOON, TUESDAY_NOON


def _stat(trigger, success_rate, frequency=3, avg=5.0):
    return TriggerStat(trigger, frequency, avg, success_rate)


class TestEffectiveness:

    def test_no_history_everything_at_base(self):
        strategies = recommend({})
        assert [s.id for s in strategies] == [t.id for t in CATALOG]
        assert {s.effectiveness for s in strategies} == {50}

    def test_emotional_success_boosts_mindfulness(self):
        strategies = recommend({"stress": _stat("stress", 80.0)})
        assert strategies[0].id == "deep-breathing"
        assert strategies[0].effectiveness == 70

    def test_threshold_is_inclusive(self):
        assert effectiveness_for("mindfulness", [_stat("stress", 70.0)]) == 70
        assert effectiveness_for("mindfulness", [_stat("stress", 69.9)]) == 50

    def test_bonus_requires_matching_group(self):
        assert effectiveness_for("mindfulness", [_stat("alcohol", 100.0)]) == 50
        assert effectiveness_for("social", [_stat("alcohol", 100.0)]) == 75

    def test_uncategorised_strategies_stay_at_base(self):
        stats = [_stat("stress", 100.0), _stat("alcohol", 100.0), _stat("after_meal", 100.0)]
        assert effectiveness_for("cognitive", stats) == 50
        assert effectiveness_for("quick", stats) == 50

    def test_ordering_with_all_bonuses(self):
        stats = {
            "stress": _stat("stress", 90.0),
            "after_meal": _stat("after_meal", 90.0),
            "alcohol": _stat("alcohol", 90.0),
        }
        ranked = recommend(stats)
        assert [s.id for s in ranked[:4]] == [
            "social-support", "deep-breathing", "physical-activity", "busy-hands",
        ]
        assert [s.effectiveness for s in ranked[:4]] == [75, 70, 65, 65]
        # remaining keep catalog order
        assert [s.id for s in ranked[4:]] == [
            "drink-water", "distraction", "motivation-reminder", "buy-time",
        ]
        assert all(s.effectiveness <= 95 for s in ranked)


class TestUsageCounts:

    def test_count_usage(self):
        usages = [
            StrategyUsage("buy-time", TUESDAY_NOON, True),
            StrategyUsage("buy-time", TUESDAY_NOON, False),
            StrategyUsage("drink-water", TUESDAY_NOON, True),
        ]
        counts = count_usage(usages)
        assert counts.used == {"buy-time": 2, "drink-water": 1}
        assert counts.succeeded == {"buy-time": 1, "drink-water": 1}

    def test_recommend_carries_counts(self):
        counts = count_usage([StrategyUsage("buy-time", TUESDAY_NOON, True)])
        by_id = {s.id: s for s in recommend({}, counts)}
        assert by_id["buy-time"].usage_count == 1
        assert by_id["buy-time"].success_count == 1
        assert by_id["drink-water"].usage_count == 0


class TestUsageLog:

    def test_record_and_read(self, db, user_id):
        log = StrategyUsageLog(db, user_id)
        log.record("deep-breathing", True, now=MONDAY_NOON)
        log.record("deep-breathing", False, now=TUESDAY_NOON)
        usages = log.read_all()
        assert [u.succeeded for u in usages] == [True, False]
        assert usages[0].timestamp == MONDAY_NOON

    def test_unknown_strategy_rejected(self, db, user_id):
        log = StrategyUsageLog(db, user_id)
        with pytest.raises(UnknownStrategyError) as exc:
            log.record("yoga-on-the-moon", True)
        assert exc.value.code == "UNKNOWN_STRATEGY"
        assert log.read_all() == []

    def test_old_usage_pruned(self, db, user_id):
        log = StrategyUsageLog(db, user_id, retention_days=30)
        log.record("buy-time", True, now=TUESDAY_NOON - timedelta(days=31))
        log.record("buy-time", True, now=TUESDAY_NOON)
        assert len(log.read_all()) == 1
