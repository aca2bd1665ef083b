"""
Analytics — task KPIs, period comparison and brain-game score statistics.

Everything here is a pure function over snapshots of the app state, so the
Analytics tab can recompute on every refresh.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from omnitask.data.models import GameScore, GameType, Meeting, Task, TaskStatus

DAYS_OF_WEEK = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
TIMEFRAMES = ("WEEK", "MONTH", "YEAR")


@dataclass
class TaskMetrics:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    canceled: int = 0
    rescheduled: int = 0
    rate: int = 0            # % completed
    efficiency: int = 0      # % completed, counting in-progress as half


@dataclass
class Suggestion:
    title: str
    text: str
    kind: str                # 'info', 'warning', 'alert', 'success'


# ── Periods ─────────────────────────────────────────────────────────────────

def period_bounds(timeframe: str, today: date) -> Tuple[date, date, date]:
    """
    Return (start_of_current, start_of_previous, end_of_previous).

    Weeks start on Monday; the current period runs open-ended from its start.
    """
    if timeframe == "WEEK":
        start = today - timedelta(days=today.weekday())
        return start, start - timedelta(days=7), start - timedelta(days=1)
    if timeframe == "MONTH":
        start = today.replace(day=1)
        prev_end = start - timedelta(days=1)
        return start, prev_end.replace(day=1), prev_end
    if timeframe == "YEAR":
        start = today.replace(month=1, day=1)
        return start, start.replace(year=start.year - 1), start - timedelta(days=1)
    raise ValueError(f"Unknown timeframe {timeframe!r}; expected one of {TIMEFRAMES}")


def split_periods(
    tasks: Iterable[Task], timeframe: str, today: date
) -> Tuple[List[Task], List[Task]]:
    start, prev_start, prev_end = period_bounds(timeframe, today)
    tasks = list(tasks)
    current = [t for t in tasks if t.date >= start]
    previous = [t for t in tasks if prev_start <= t.date <= prev_end]
    return current, previous


# ── KPIs ────────────────────────────────────────────────────────────────────

def compute_metrics(tasks: Sequence[Task]) -> TaskMetrics:
    if not tasks:
        return TaskMetrics()
    statuses = np.array([t.status.value for t in tasks])
    total = len(statuses)

    def count(status: TaskStatus) -> int:
        return int(np.count_nonzero(statuses == status.value))

    completed = count(TaskStatus.DONE)
    in_progress = count(TaskStatus.ON_GOING)
    return TaskMetrics(
        total=total,
        completed=completed,
        in_progress=in_progress,
        pending=count(TaskStatus.PENDING),
        canceled=count(TaskStatus.CANCELED),
        rescheduled=count(TaskStatus.TO_RESCHEDULE),
        rate=int(round(completed / total * 100)),
        efficiency=int(round((completed + in_progress * 0.5) / total * 100)),
    )


def trend(current: TaskMetrics, previous: TaskMetrics) -> Optional[int]:
    """Percentage-point change in completion rate, None without a baseline."""
    if previous.total == 0:
        return None
    return current.rate - previous.rate


def best_day(tasks: Sequence[Task]) -> Tuple[str, int]:
    """Weekday with the most completed tasks, ('N/A', 0) if none."""
    done = [t.date.weekday() for t in tasks if t.status is TaskStatus.DONE]
    if not done:
        return "N/A", 0
    counts = np.bincount(np.array(done), minlength=7)
    idx = int(np.argmax(counts))
    return DAYS_OF_WEEK[idx], int(counts[idx])


def top_location(tasks: Sequence[Task]) -> Tuple[str, int]:
    locs = Counter(t.location.strip() for t in tasks if t.location and t.location.strip())
    if not locs:
        return "N/A", 0
    return locs.most_common(1)[0]


def weekly_distribution(tasks: Sequence[Task], today: date) -> List[int]:
    """Tasks per weekday (Mon..Sun) for the week containing `today`."""
    start = today - timedelta(days=today.weekday())
    days = [t.date.weekday() for t in tasks if start <= t.date < start + timedelta(days=7)]
    if not days:
        return [0] * 7
    return np.bincount(np.array(days), minlength=7).tolist()


def productivity_level(metrics: TaskMetrics) -> str:
    if metrics.total == 0:
        return "Newcomer"
    if metrics.efficiency >= 90:
        return "Grandmaster"
    if metrics.efficiency >= 75:
        return "Expert"
    if metrics.efficiency >= 50:
        return "Achiever"
    return "Apprentice"


def suggestions(metrics: TaskMetrics) -> List[Suggestion]:
    out: List[Suggestion] = []
    if metrics.rate < 40 and metrics.total > 3:
        out.append(Suggestion(
            "Boost Completion Rate",
            "Your completion rate is below 40%. Try breaking down large tasks into smaller sub-tasks.",
            "warning",
        ))
    if metrics.in_progress > 3:
        out.append(Suggestion(
            "Too Many Active Tasks",
            "You have multiple tasks 'On-Going'. Focusing on one at a time increases efficiency.",
            "info",
        ))
    if metrics.total and metrics.canceled > metrics.total * 0.2:
        out.append(Suggestion(
            "High Cancellation Rate",
            "Review your planning process. You are cancelling more than 20% of tasks.",
            "alert",
        ))
    if metrics.total == 0:
        out.append(Suggestion(
            "Plan Your Week",
            "No tasks found for this period. Start by adding your key priorities.",
            "info",
        ))
    elif metrics.rate > 80:
        out.append(Suggestion(
            "Excellent Momentum",
            "You are crushing it! Consider taking on a more challenging project.",
            "success",
        ))
    return out


def today_overview(tasks: Iterable[Task], meetings: Iterable[Meeting], today: date) -> Dict[str, int]:
    todays = [t for t in tasks if t.date == today]
    return {
        "tasks_today": len(todays),
        "open_today": sum(1 for t in todays if t.is_open),
        "meetings_today": sum(1 for m in meetings if m.date == today),
    }


# ── Brain-game scores ───────────────────────────────────────────────────────

def score_stats(scores: Sequence[GameScore]) -> Dict[GameType, Dict[str, float]]:
    """Per game type: number of plays, mean and best score."""
    by_type: Dict[GameType, List[int]] = {}
    for s in scores:
        by_type.setdefault(s.type, []).append(s.score)
    stats = {}
    for game_type, values in by_type.items():
        arr = np.array(values, dtype=float)
        stats[game_type] = {
            "plays": int(arr.size),
            "mean": float(np.mean(arr)),
            "best": float(np.max(arr)),
        }
    return stats


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Computes the numbers on the Analytics tab: completion rate, an
#   "efficiency" score that gives half credit to in-progress work, the
#   change versus the previous week/month/year, the most productive weekday,
#   the most common location and a few rule-based suggestions.
#
# Key design decisions:
#   - Pure functions over task snapshots: trivially testable, no Qt needed.
#   - numpy for the counting (count_nonzero, bincount, argmax). Overkill for
#     a few hundred tasks, but it keeps the aggregation code short.
#
# Interviewer-friendly talking points:
#   1. The previous period has an upper bound but the current one doesn't:
#      future-dated tasks count toward "this week", which is what users
#      expect when they plan ahead.
#   2. Ties in best_day go to the earliest weekday (np.argmax returns the
#      first maximum).
