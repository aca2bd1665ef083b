"""Unit tests for the analytics functions."""

import pytest
from datetime import date, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from omnitask.data.models import GameScore, GameType, Meeting, Task, TaskStatus
from omnitask.services import analytics
from omnitask.services.analytics import TaskMetrics

# A Wednesday
TODAY = date(2024, 6, 5)


def _tasks(*statuses, day=TODAY, location=""):
    return [Task(title=f"t{i}", date=day, status=s, location=location)
            for i, s in enumerate(statuses)]


class TestPeriods:
    def test_week_starts_monday(self):
        start, prev_start, prev_end = analytics.period_bounds("WEEK", TODAY)
        assert start == date(2024, 6, 3)
        assert prev_start == date(2024, 5, 27)
        assert prev_end == date(2024, 6, 2)

    def test_month_in_january_wraps_year(self):
        start, prev_start, prev_end = analytics.period_bounds("MONTH", date(2024, 1, 15))
        assert start == date(2024, 1, 1)
        assert prev_start == date(2023, 12, 1)
        assert prev_end == date(2023, 12, 31)

    def test_year(self):
        start, prev_start, prev_end = analytics.period_bounds("YEAR", TODAY)
        assert (start, prev_start, prev_end) == (
            date(2024, 1, 1), date(2023, 1, 1), date(2023, 12, 31))

    def test_unknown_timeframe(self):
        with pytest.raises(ValueError):
            analytics.period_bounds("DECADE", TODAY)

    def test_split_periods_keeps_future_in_current(self):
        tasks = [
            Task(title="future", date=TODAY + timedelta(days=30)),
            Task(title="monday", date=date(2024, 6, 3)),
            Task(title="last week", date=date(2024, 5, 29)),
            Task(title="older", date=date(2024, 5, 1)),
        ]
        current, previous = analytics.split_periods(tasks, "WEEK", TODAY)
        assert [t.title for t in current] == ["future", "monday"]
        assert [t.title for t in previous] == ["last week"]


class TestMetrics:
    def test_empty(self):
        assert analytics.compute_metrics([]) == TaskMetrics()

    def test_counts_and_rates(self):
        tasks = _tasks(TaskStatus.DONE, TaskStatus.DONE, TaskStatus.ON_GOING,
                       TaskStatus.PENDING, TaskStatus.CANCELED)
        m = analytics.compute_metrics(tasks)
        assert (m.total, m.completed, m.in_progress, m.pending, m.canceled, m.rescheduled) == (
            5, 2, 1, 1, 1, 0)
        assert m.rate == 40
        assert m.efficiency == 50

    def test_trend(self):
        current = TaskMetrics(total=4, rate=75)
        assert analytics.trend(current, TaskMetrics(total=2, rate=50)) == 25
        assert analytics.trend(current, TaskMetrics(total=3, rate=100)) == -25
        assert analytics.trend(current, TaskMetrics()) is None

    @pytest.mark.parametrize("efficiency,level", [
        (95, "Grandmaster"), (75, "Expert"), (50, "Achiever"), (10, "Apprentice"),
    ])
    def test_productivity_level(self, efficiency, level):
        assert analytics.productivity_level(TaskMetrics(total=1, efficiency=efficiency)) == level

    def test_productivity_level_without_tasks(self):
        assert analytics.productivity_level(TaskMetrics()) == "Newcomer"


class TestDistribution:
    def test_best_day_tie_goes_to_earliest(self):
        tasks = (_tasks(TaskStatus.DONE, day=date(2024, 6, 7))       # Friday
                 + _tasks(TaskStatus.DONE, day=date(2024, 6, 4))     # Tuesday
                 + _tasks(TaskStatus.PENDING, TaskStatus.PENDING, day=date(2024, 6, 3)))
        assert analytics.best_day(tasks) == ("Tuesday", 1)

    def test_best_day_none_done(self):
        assert analytics.best_day(_tasks(TaskStatus.PENDING)) == ("N/A", 0)

    def test_top_location_ignores_blank(self):
        tasks = (_tasks(TaskStatus.DONE, TaskStatus.DONE, location=" Office ")
                 + _tasks(TaskStatus.DONE, TaskStatus.DONE, TaskStatus.DONE, location="  "))
        assert analytics.top_location(tasks) == ("Office", 2)
        assert analytics.top_location([]) == ("N/A", 0)

    def test_weekly_distribution(self):
        tasks = [
            Task(title="mon", date=date(2024, 6, 3)),
            Task(title="wed", date=TODAY),
            Task(title="wed2", date=TODAY),
            Task(title="sun", date=date(2024, 6, 9)),
            Task(title="next mon", date=date(2024, 6, 10)),
        ]
        assert analytics.weekly_distribution(tasks, TODAY) == [1, 0, 2, 0, 0, 0, 1]
        assert analytics.weekly_distribution([], TODAY) == [0] * 7


class TestSuggestions:
    def _titles(self, metrics):
        return [s.title for s in analytics.suggestions(metrics)]

    def test_no_tasks(self):
        assert self._titles(TaskMetrics()) == ["Plan Your Week"]

    def test_low_rate_busy_and_cancellations(self):
        m = TaskMetrics(total=10, completed=2, in_progress=4, canceled=3, rate=20)
        assert self._titles(m) == [
            "Boost Completion Rate", "Too Many Active Tasks", "High Cancellation Rate",
        ]

    def test_low_rate_needs_more_than_three_tasks(self):
        assert self._titles(TaskMetrics(total=3, rate=0)) == []

    def test_excellent_momentum(self):
        m = TaskMetrics(total=10, completed=9, rate=90)
        suggestions = analytics.suggestions(m)
        assert [s.kind for s in suggestions] == ["success"]


class TestOverviewAndScores:
    def test_today_overview(self):
        tasks = _tasks(TaskStatus.DONE, TaskStatus.PENDING, TaskStatus.ON_GOING)
        tasks.append(Task(title="tomorrow", date=TODAY + timedelta(days=1)))
        meetings = [Meeting(title="Standup", date=TODAY), Meeting(title="Later", date=date(2024, 7, 1))]
        assert analytics.today_overview(tasks, meetings, TODAY) == {
            "tasks_today": 3, "open_today": 2, "meetings_today": 1,
        }

    def test_score_stats(self):
        scores = [
            GameScore(type=GameType.MATH, score=200),
            GameScore(type=GameType.MATH, score=300),
            GameScore(type=GameType.BREATHING, score=50),
        ]
        stats = analytics.score_stats(scores)
        assert stats[GameType.MATH] == {"plays": 2, "mean": 250.0, "best": 300.0}
        assert stats[GameType.BREATHING]["plays"] == 1
        assert GameType.REFLEX not in stats

    def test_score_stats_empty(self):
        assert analytics.score_stats([]) == {}
