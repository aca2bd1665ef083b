"""
Scheduler Service — the background timers of a signed-in user session.

Runs the reminder scan (once shortly after sign-in, then hourly) and the
brain-break trigger tick (every 30 seconds). All timers belong to the user
session: start() arms them, stop() cancels every one of them.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QTimer

from omnitask.data.models import AppNotification, BrainGame
from omnitask.services.notification_service import NotificationService
from omnitask.services.popup_trigger import PopupTriggerScheduler

logger = logging.getLogger(__name__)

# Defaults — overridden by config/omnitask.json
DEFAULT_REMINDER_INITIAL_DELAY_S = 3
DEFAULT_REMINDER_INTERVAL_MIN = 60
DEFAULT_GAME_TICK_S = 30


class SchedulerService:
    """
    Owns the reminder and game-trigger QTimers.

    Uses QTimers so callbacks run on the Qt event loop (safe for UI updates)
    and never overlap each other.
    """

    def __init__(
        self,
        notifications: NotificationService,
        trigger: PopupTriggerScheduler,
        on_popup: Optional[Callable[[BrainGame], None]] = None,
        on_notifications: Optional[Callable[[List[AppNotification]], None]] = None,
        reminder_initial_delay_s: float = DEFAULT_REMINDER_INITIAL_DELAY_S,
        reminder_interval_min: float = DEFAULT_REMINDER_INTERVAL_MIN,
        game_tick_s: float = DEFAULT_GAME_TICK_S,
    ) -> None:
        self.notifications = notifications
        self.trigger = trigger

        # Callbacks the UI will set
        self.on_popup = on_popup
        self.on_notifications = on_notifications

        self.reminder_initial_delay_s = reminder_initial_delay_s
        self.reminder_interval_min = reminder_interval_min
        self.game_tick_s = game_tick_s

        # QTimers
        self._initial_reminder_timer = QTimer()
        self._initial_reminder_timer.setSingleShot(True)
        self._initial_reminder_timer.timeout.connect(self.run_reminder_scan)

        self._reminder_timer = QTimer()
        self._reminder_timer.timeout.connect(self.run_reminder_scan)

        self._game_timer = QTimer()
        self._game_timer.timeout.connect(self.run_game_tick)

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._reminder_timer.isActive() or self._game_timer.isActive()

    def start(self) -> None:
        """Arm every timer for a new user session."""
        self.stop()
        self.trigger.reset()
        self._initial_reminder_timer.start(int(self.reminder_initial_delay_s * 1000))
        self._reminder_timer.start(int(self.reminder_interval_min * 60 * 1000))
        self._game_timer.start(int(self.game_tick_s * 1000))
        logger.info(
            "Scheduler started: reminders every %.0f min, game tick every %.0f s.",
            self.reminder_interval_min, self.game_tick_s,
        )

    def stop(self) -> None:
        """Cancel every pending timer. Called on sign-out and quit."""
        was_running = self.is_running or self._initial_reminder_timer.isActive()
        self._initial_reminder_timer.stop()
        self._reminder_timer.stop()
        self._game_timer.stop()
        if was_running:
            logger.info("Scheduler stopped.")

    # ── Timer callbacks ─────────────────────────────────────────────────────

    def run_reminder_scan(self) -> List[AppNotification]:
        created = self.notifications.check_reminders()
        if created and self.on_notifications:
            self.on_notifications(created)
        return created

    def run_game_tick(self) -> Optional[BrainGame]:
        game = self.trigger.tick()
        if game is not None and self.on_popup:
            self.on_popup(game)
        return game


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Hosts the three background timers of a signed-in session: a one-shot
#   reminder scan a few seconds after sign-in, an hourly reminder scan, and
#   the 30-second brain-break trigger tick.
#
# Key design decisions:
#   - QTimer (PySide6) rather than threading.Timer: callbacks run on the main
#     thread, one at a time, so reminder scans and game ticks are naturally
#     serialized with user edits.
#   - start() calls stop() first, so signing in twice can't leave a second
#     set of timers running, and stop() cancels the initial one-shot too.
#   - The decision logic lives in NotificationService and
#     PopupTriggerScheduler; this class only decides WHEN to call them.
#
# Data flow:
#   Sign-in → start() → QTimer fires → run_game_tick() → trigger.tick() →
#   on_popup(game) → MainWindow opens the GamePopupDialog.
