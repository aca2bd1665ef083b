"""
Popup Trigger Scheduler — decides when a brain-break game pops up.

Each tick draws a random number and opens a random eligible game if the
draw falls under the trigger probability. The configured interval bounds
and daily cap in GameSettings gate automatic triggers on top of that.
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Optional

from omnitask.data.models import BrainGame
from omnitask.errors import NoEligibleGamesError, PopupAlreadyOpenError
from omnitask.services.app_state import AppState

logger = logging.getLogger(__name__)

DEFAULT_TRIGGER_PROBABILITY = 0.02


class PopupTriggerScheduler:
    """Probabilistic popup trigger sharing the popup slot with AppState."""

    def __init__(
        self,
        state: AppState,
        rng: Optional[random.Random] = None,
        probability: float = DEFAULT_TRIGGER_PROBABILITY,
    ) -> None:
        if not 0.0 <= probability <= 1.0:
            raise ValueError("Trigger probability must be within [0, 1].")
        self.state = state
        self.rng = rng or random.Random()
        self.probability = probability

        self._last_popup_at: Optional[datetime] = None
        self._count_day: Optional[date] = None
        self._auto_count = 0

    def reset(self, now: Optional[datetime] = None) -> None:
        """Start the interval clock afresh (called when a user session starts)."""
        self._last_popup_at = now or datetime.now()
        self._count_day = None
        self._auto_count = 0

    # ── Periodic tick ───────────────────────────────────────────────────────

    def tick(self, now: Optional[datetime] = None) -> Optional[BrainGame]:
        """One scheduler tick. Returns the game opened, if any."""
        now = now or datetime.now()
        settings = self.state.settings
        if not settings.enabled or self.state.active_popup is not None:
            return None
        games = self.state.eligible_games()
        if not games:
            return None

        if self._count_day != now.date():
            self._count_day = now.date()
            self._auto_count = 0
        if settings.games_per_day and self._auto_count >= settings.games_per_day:
            return None

        since = now - self._last_popup_at if self._last_popup_at else None
        if since is not None and since < timedelta(minutes=settings.min_interval_minutes):
            return None
        overdue = (
            since is not None
            and settings.max_interval_minutes > 0
            and since >= timedelta(minutes=settings.max_interval_minutes)
        )
        if not overdue and self.rng.random() >= self.probability:
            return None

        game = self.rng.choice(games)
        if not self.state.open_popup(game):
            return None
        self._last_popup_at = now
        self._auto_count += 1
        logger.info("Scheduler triggered '%s'%s.", game.title, " (max interval reached)" if overdue else "")
        return game

    # ── Manual trigger ──────────────────────────────────────────────────────

    def trigger_now(self, now: Optional[datetime] = None) -> BrainGame:
        """Open a random eligible game immediately, ignoring chance and intervals."""
        games = self.state.eligible_games()
        if not games:
            raise NoEligibleGamesError()
        game = self.rng.choice(games)
        if not self.state.open_popup(game):
            raise PopupAlreadyOpenError()
        self._last_popup_at = now or datetime.now()
        logger.info("Manually triggered '%s'.", game.title)
        return game


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Every 30 seconds (driven by SchedulerService) it asks: are games enabled,
#   is no popup open, is there anything active to play? If so it rolls the
#   dice and maybe opens one.
#
# Key design decisions:
#   - "Popup already open" is re-checked on every tick AND the slot is
#     claimed through AppState.open_popup(), so a race can't open two.
#   - The random source is injected: tests pass random.Random(seed) or a
#     stub that always returns 0.0 / 0.99.
#   - The interval settings only ever delay or cap automatic popups, except
#     max_interval which guarantees one once it has elapsed. Manual
#     triggers ignore them but still reset the interval clock.
#
# Interviewer-friendly talking points:
#   1. With a 2% chance every 30 s the expected wait is ~25 minutes, which
#      lines up with the default 30-120 minute window.
#   2. The daily cap counter resets lazily on the first tick of a new day,
#      so no midnight timer is needed.
