"""
Tests for the weekday risk trend and personalized advice.
"""
from __future__ import annotations

from datetime import timedelta

from app.services.advice import (
    ONBOARDING_ADVICE,
    WEEKDAY_LABELS,
    DayRisk,
    personalized_advice,
    weekly_risk_trend,
)
from app.services.risk_model import RiskLevel, RiskPrediction
from app.services.trigger_analyzer import TriggerStat

from tests.conftest import MONDAY_NOON, TUESDAY_NOON


def _prediction(level: RiskLevel) -> RiskPrediction:
    return RiskPrediction(hour=12, risk_score=0, risk_level=level)


def _flat_trend(value: int = 40) -> list[DayRisk]:
    return [DayRisk(day=d, day_of_week=i, avg_risk=value) for i, d in enumerate(WEEKDAY_LABELS)]


class TestWeeklyTrend:

    def test_fallback_without_events(self):
        trend = weekly_risk_trend([], TUESDAY_NOON)
        assert [d.day for d in trend] == list(WEEKDAY_LABELS)
        assert [d.avg_risk for d in trend] == [50, 61, 55, 55, 55, 66, 61]

    def test_average_per_weekday(self, make_event):
        events = [
            make_event(craving_level=8, timestamp=MONDAY_NOON),
            make_event(craving_level=5, timestamp=MONDAY_NOON),
        ]
        trend = weekly_risk_trend(events, TUESDAY_NOON)
        assert trend[1].avg_risk == 65  # 6.5 * 10

    def test_ignores_events_outside_window(self, make_event):
        stale = make_event(craving_level=1, timestamp=MONDAY_NOON - timedelta(days=7))
        trend = weekly_risk_trend([stale], TUESDAY_NOON)
        assert trend[1].avg_risk == 61


class TestPersonalizedAdvice:

    def test_onboarding_when_nothing_fires(self):
        advice = personalized_advice({}, _prediction(RiskLevel.medium), _flat_trend())
        assert advice == list(ONBOARDING_ADVICE)

    def test_top_trigger_named(self):
        stats = {
            "alcohol": TriggerStat("alcohol", 2, 9.0, 0.0),
            "stress": TriggerStat("stress", 5, 6.0, 20.0),
        }
        advice = personalized_advice(stats, _prediction(RiskLevel.medium), _flat_trend())
        assert advice == ['"Alcohol" is your biggest trigger. Plan ahead for these moments.']

    def test_rules_in_order(self):
        stats = {"stress": TriggerStat("stress", 4, 6.0, 75.0)}
        trend = _flat_trend()
        trend[5] = DayRisk(day="Fri", day_of_week=5, avg_risk=66)
        trend[6] = DayRisk(day="Sat", day_of_week=6, avg_risk=61)

        advice = personalized_advice(stats, _prediction(RiskLevel.critical), trend)
        assert len(advice) == 4
        assert advice[0].startswith('"Stress"')
        assert "high-risk hour" in advice[1]
        assert advice[2].startswith("Fri, Sat")
        assert "70%" in advice[3]

    def test_low_risk_encouragement(self):
        advice = personalized_advice({}, _prediction(RiskLevel.low), _flat_trend())
        assert advice == ["You're in a low-risk stretch. Use this energy to build motivation!"]

    def test_sixty_is_not_a_hard_day(self):
        advice = personalized_advice({}, _prediction(RiskLevel.medium), _flat_trend(60))
        assert advice == list(ONBOARDING_ADVICE)
