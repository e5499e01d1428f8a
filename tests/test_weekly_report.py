"""
Tests for the Weekly Report Generator.
"""
from __future__ import annotations

from datetime import timedelta

from app.services.weekly_report import RECOMMENDATIONS, InsightType, generate

from tests.conftest import TUESDAY_NOON


def _ids(report):
    return [i.id for i in report.insights]


class TestWeeklyReport:

    def test_empty_window(self):
        report = generate([], now=TUESDAY_NOON)
        assert report.total_cravings == 0
        assert report.avg_craving_level == 0.0
        assert report.successfully_overcome == 0
        assert report.failed_attempts == 0
        assert report.most_common_triggers == []
        assert report.mood_correlation == []
        assert report.peak_craving_times == []
        assert report.insights == []
        assert report.recommendations == list(RECOMMENDATIONS)
        assert report.period_end == TUESDAY_NOON.date()
        assert report.period_start == (TUESDAY_NOON - timedelta(days=7)).date()

    def test_window_excludes_exact_boundary(self, make_event):
        boundary = make_event(timestamp=TUESDAY_NOON - timedelta(days=7))
        inside = make_event(timestamp=TUESDAY_NOON - timedelta(days=6, hours=23))
        report = generate([boundary, inside], now=TUESDAY_NOON)
        assert report.total_cravings == 1

    def test_totals_and_insights(self, make_event):
        day = timedelta(days=1)
        events = [
            make_event(craving_level=3, mood="good", triggers=["stress"],
                       timestamp=TUESDAY_NOON - day),
            make_event(craving_level=4, mood="good", triggers=["stress", "boredom"],
                       timestamp=TUESDAY_NOON - 2 * day),
            make_event(craving_level=8, mood="terrible", did_smoke=True, triggers=["alcohol"],
                       timestamp=TUESDAY_NOON - 3 * day),
            make_event(craving_level=9, mood="terrible", triggers=["stress"],
                       timestamp=TUESDAY_NOON - 4 * day),
        ]
        report = generate(events, now=TUESDAY_NOON)

        assert report.total_cravings == 4
        assert report.avg_craving_level == 6.0
        assert report.successfully_overcome == 3
        assert report.failed_attempts == 1
        assert report.most_common_triggers[0] == {"trigger": "stress", "count": 3}
        assert report.mood_correlation[0] == {"mood": "terrible", "avg_craving": 8.5}
        assert _ids(report) == ["success-rate", "mood-trigger"]
        assert "75%" in report.insights[0].message
        assert report.insights[1].type == InsightType.WARNING
        assert '"terrible"' in report.insights[1].message

    def test_low_craving_insight(self, make_event):
        events = [make_event(craving_level=2, did_smoke=True) for _ in range(3)]
        report = generate(events, now=TUESDAY_NOON)
        assert _ids(report) == ["low-craving"]
        assert report.insights[0].type == InsightType.POSITIVE

    def test_peak_times_top_five(self, make_event):
        events = [make_event(hour=h, craving_level=h % 10 + 1) for h in range(10)]
        report = generate(events, now=TUESDAY_NOON)
        assert len(report.peak_craving_times) == 5
        assert report.peak_craving_times[0] == {"hour": 9, "avg_level": 10.0}
        levels = [row["avg_level"] for row in report.peak_craving_times]
        assert levels == sorted(levels, reverse=True)

    def test_average_rounded_to_one_decimal(self, make_event):
        events = [make_event(craving_level=c) for c in (1, 2, 2)]
        assert generate(events, now=TUESDAY_NOON).avg_craving_level == 1.7
