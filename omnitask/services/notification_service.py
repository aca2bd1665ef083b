"""
Notification Service — turns due, reminder-flagged tasks into notifications.

The scan itself is a pure function of (tasks, existing notifications, now)
so it can be tested without timers. The service wraps it with state access
and a best-effort system alert.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from omnitask.data.models import AppNotification, Task
from omnitask.services.app_state import AppState

logger = logging.getLogger(__name__)

ALERT_TITLE = "OmniTask Reminder"

# Signature: alert(title, message)
AlertFn = Callable[[str, str], None]


def reminder_title(task: Task) -> str:
    return f"Reminder: {task.title}"


def due_tasks(tasks: Iterable[Task], now: datetime) -> List[Task]:
    """Reminder-flagged, still-open tasks dated today."""
    today = now.date()
    return [t for t in tasks if t.date == today and t.reminder and t.is_open]


def find_due_reminders(
    tasks: Iterable[Task],
    notifications: Iterable[AppNotification],
    now: datetime,
) -> List[AppNotification]:
    """
    Return the notifications that should be added at `now`.

    A task gets at most one "Reminder: {title}" notification per calendar
    day; titles already notified today are skipped.
    """
    today = now.date()
    notified_today = {n.title for n in notifications if n.time.date() == today}

    new: List[AppNotification] = []
    for task in due_tasks(tasks, now):
        title = reminder_title(task)
        if title in notified_today:
            continue
        notified_today.add(title)
        new.append(AppNotification(
            title=title,
            message=f"This task is due today. Status: {task.status.value}",
            time=now,
            read=False,
        ))
    return new


class NotificationService:
    """Runs reminder scans against the shared app state."""

    def __init__(self, state: AppState, alert: Optional[AlertFn] = None) -> None:
        self.state = state
        self.alert = alert

    def check_reminders(self, now: Optional[datetime] = None) -> List[AppNotification]:
        """Scan once. Returns the notifications that were created."""
        now = now or datetime.now()
        tasks = self.state.tasks
        new = find_due_reminders(tasks, self.state.notifications, now)
        if not new:
            return []

        self.state.add_notifications(new)
        logger.info("Created %d reminder notification(s).", len(new))

        pending = len(due_tasks(tasks, now))
        self._request_alert(f"Check your dashboard. {pending} tasks pending.")
        return new

    def _request_alert(self, message: str) -> None:
        if self.alert is None:
            return
        try:
            self.alert(ALERT_TITLE, message)
        except Exception as e:
            logger.debug("System alert failed, ignoring: %s", e)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Looks for tasks that are due today, flagged for a reminder and still
#   PENDING or ON-GOING, and creates one in-app notification per task per
#   day. When something new was created it also pops a system alert.
#
# Key design decisions:
#   - Idempotence is keyed on (title, calendar day) of existing notifications,
#     so running the scan every hour never duplicates a reminder.
#   - The system alert is injected as a callable. In the app it is the tray
#     icon's showMessage(); in tests it is a plain function or nothing.
#   - Alert failures are swallowed: the in-app notification is the part that
#     matters and it is already saved by the time we alert.
#
# Data flow:
#   SchedulerService timer → check_reminders() → AppState snapshot →
#   find_due_reminders() → AppState.add_notifications() → tray alert.
