"""
App State — the explicit container for every persisted collection.

All collections are read from the repository once, at construction. Reads
return snapshots of the latest value; every mutation is written straight
back to the repository. The container also owns the single "active popup"
slot that the trigger scheduler and the game popup share.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Iterable, List, Optional, Tuple

from omnitask.data.models import (
    AppNotification, BrainGame, GameScore, GameSettings, Meeting, Note,
    NoteFolder, Task, TaskStatus, User,
)
from omnitask.data.repository import Repository

logger = logging.getLogger(__name__)


class AppState:
    """
    Owns tasks, notifications, games, settings, scores, notes, meetings,
    theme and user. Safe to share between timers: mutations are serialized
    with a re-entrant lock and readers get immutable tuples.
    """

    def __init__(self, repo: Repository) -> None:
        self.repo = repo
        self._lock = threading.RLock()
        self._active_popup: Optional[BrainGame] = None
        self.reload()

    def reload(self) -> None:
        """Re-read every collection from the repository (after a data reset)."""
        repo = self.repo
        with self._lock:
            self._tasks: List[Task] = repo.load_tasks()
            self._notifications: List[AppNotification] = repo.load_notifications()
            self._games: List[BrainGame] = repo.load_games()
            self._settings: GameSettings = repo.load_game_settings()
            self._scores: List[GameScore] = repo.load_scores()
            self._notes: List[Note] = repo.load_notes()
            self._folders: List[NoteFolder] = repo.load_folders()
            self._meetings: List[Meeting] = repo.load_meetings()
            self._theme: str = repo.load_theme()
            self._user: Optional[User] = repo.load_user()
        logger.info(
            "State loaded: %d tasks, %d games, %d scores, %d notifications.",
            len(self._tasks), len(self._games), len(self._scores), len(self._notifications),
        )

    # ── Read accessors (always the latest value) ────────────────────────────

    @property
    def tasks(self) -> Tuple[Task, ...]:
        with self._lock:
            return tuple(dataclasses.replace(t) for t in self._tasks)

    @property
    def notifications(self) -> Tuple[AppNotification, ...]:
        with self._lock:
            return tuple(dataclasses.replace(n) for n in self._notifications)

    @property
    def games(self) -> Tuple[BrainGame, ...]:
        with self._lock:
            return tuple(dataclasses.replace(g) for g in self._games)

    @property
    def settings(self) -> GameSettings:
        with self._lock:
            return dataclasses.replace(self._settings)

    @property
    def scores(self) -> Tuple[GameScore, ...]:
        with self._lock:
            return tuple(self._scores)

    @property
    def notes(self) -> Tuple[Note, ...]:
        with self._lock:
            return tuple(dataclasses.replace(n) for n in self._notes)

    @property
    def folders(self) -> Tuple[NoteFolder, ...]:
        with self._lock:
            return tuple(self._folders)

    @property
    def meetings(self) -> Tuple[Meeting, ...]:
        with self._lock:
            return tuple(self._meetings)

    @property
    def theme(self) -> str:
        return self._theme

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def active_popup(self) -> Optional[BrainGame]:
        with self._lock:
            return self._active_popup

    def eligible_games(self) -> List[BrainGame]:
        """Catalog entries that may be opened as a popup."""
        with self._lock:
            return [dataclasses.replace(g) for g in self._games if g.active]

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._notifications if not n.read)

    # ── Tasks ───────────────────────────────────────────────────────────────

    def add_task(self, task: Task) -> Task:
        with self._lock:
            if any(t.id == task.id for t in self._tasks):
                raise ValueError(f"Task id {task.id!r} already exists.")
            self._tasks.append(task)
            self.repo.save_tasks(self._tasks)
        logger.info("Task added: %s (%s)", task.title, task.date)
        return task

    def update_task(self, task: Task) -> Task:
        with self._lock:
            idx = self._index_of(self._tasks, task.id)
            self._tasks[idx] = task
            self.repo.save_tasks(self._tasks)
        return task

    def set_task_status(self, task_id: str, status: TaskStatus) -> Task:
        with self._lock:
            idx = self._index_of(self._tasks, task_id)
            self._tasks[idx] = dataclasses.replace(self._tasks[idx], status=status)
            self.repo.save_tasks(self._tasks)
            return dataclasses.replace(self._tasks[idx])

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            idx = self._index_of(self._tasks, task_id)
            del self._tasks[idx]
            self.repo.save_tasks(self._tasks)

    # ── Notifications ───────────────────────────────────────────────────────

    def add_notifications(self, new: Iterable[AppNotification]) -> None:
        new = list(new)
        if not new:
            return
        with self._lock:
            self._notifications.extend(new)
            self.repo.save_notifications(self._notifications)

    def mark_notifications_read(self) -> int:
        """Mark everything read. Returns how many were unread."""
        with self._lock:
            changed = 0
            for i, n in enumerate(self._notifications):
                if not n.read:
                    self._notifications[i] = dataclasses.replace(n, read=True)
                    changed += 1
            if changed:
                self.repo.save_notifications(self._notifications)
            return changed

    # ── Game catalog / settings / scores ────────────────────────────────────

    def add_game(self, game: BrainGame) -> BrainGame:
        if game.duration_seconds <= 0:
            raise ValueError("Game duration must be positive.")
        with self._lock:
            self._games.append(game)
            self.repo.save_games(self._games)
        return game

    def update_game(self, game: BrainGame) -> BrainGame:
        if game.duration_seconds <= 0:
            raise ValueError("Game duration must be positive.")
        with self._lock:
            idx = self._index_of(self._games, game.id)
            self._games[idx] = game
            self.repo.save_games(self._games)
        return game

    def toggle_game(self, game_id: str) -> bool:
        """Flip a game's `active` flag. Returns the new value."""
        with self._lock:
            idx = self._index_of(self._games, game_id)
            game = self._games[idx]
            self._games[idx] = dataclasses.replace(game, active=not game.active)
            self.repo.save_games(self._games)
            return self._games[idx].active

    def delete_game(self, game_id: str) -> None:
        with self._lock:
            idx = self._index_of(self._games, game_id)
            del self._games[idx]
            self.repo.save_games(self._games)

    def update_settings(self, **changes) -> GameSettings:
        with self._lock:
            updated = dataclasses.replace(self._settings, **changes)
            _validate_settings(updated)
            self._settings = updated
            self.repo.save_game_settings(updated)
        logger.info("Game settings updated: %s", changes)
        return dataclasses.replace(updated)

    def append_score(self, score: GameScore) -> None:
        with self._lock:
            self._scores.append(score)
            self.repo.save_scores(self._scores)

    # ── Notes / folders / meetings ──────────────────────────────────────────

    def set_notes(self, notes: Iterable[Note]) -> None:
        with self._lock:
            self._notes = list(notes)
            self.repo.save_notes(self._notes)

    def set_folders(self, folders: Iterable[NoteFolder]) -> None:
        with self._lock:
            self._folders = list(folders)
            self.repo.save_folders(self._folders)

    def set_meetings(self, meetings: Iterable[Meeting]) -> None:
        with self._lock:
            self._meetings = list(meetings)
            self.repo.save_meetings(self._meetings)

    # ── Theme / user ────────────────────────────────────────────────────────

    def set_theme(self, theme: str) -> None:
        self.repo.save_theme(theme)
        self._theme = theme

    def set_user(self, user: Optional[User]) -> None:
        with self._lock:
            self.repo.save_user(user)
            self._user = user

    # ── Active popup slot ───────────────────────────────────────────────────

    def open_popup(self, game: BrainGame) -> bool:
        """Claim the popup slot for `game`. False if one is already open."""
        with self._lock:
            if self._active_popup is not None:
                return False
            self._active_popup = game
        logger.info("Popup opened: %s (%s)", game.title, game.type.value)
        return True

    def close_popup(self) -> Optional[BrainGame]:
        """Release the popup slot, returning the game that held it."""
        with self._lock:
            game, self._active_popup = self._active_popup, None
        if game is not None:
            logger.info("Popup closed: %s", game.title)
        return game

    # ── Helpers ─────────────────────────────────────────────────────────────

    @staticmethod
    def _index_of(items: list, item_id: str) -> int:
        for i, item in enumerate(items):
            if item.id == item_id:
                return i
        raise KeyError(item_id)


def _validate_settings(s: GameSettings) -> None:
    if s.min_interval_minutes < 0 or s.max_interval_minutes < 0:
        raise ValueError("Intervals cannot be negative.")
    if s.max_interval_minutes and s.min_interval_minutes > s.max_interval_minutes:
        raise ValueError("Minimum interval cannot exceed the maximum interval.")
    if s.games_per_day < 0:
        raise ValueError("Games per day cannot be negative.")
    if not 0.0 <= s.volume <= 1.0:
        raise ValueError("Volume must be between 0 and 1.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Holds the whole application state in one object that every service gets
#   a reference to. Timers never capture a stale copy of the task list; they
#   ask the container for the current one each time they fire.
#
# Key design decisions:
#   - Write-through: every mutation saves the full collection via the
#     repository immediately. Nothing is "dirty" in memory.
#   - Snapshots: readers get tuples of copied dataclasses, so a reminder
#     scan can never see a half-applied edit from the task view.
#   - The popup slot is claimed and released under the same lock, which is
#     what stops the trigger scheduler from ever opening a second popup.
#
# Interviewer-friendly talking points:
#   1. The RLock costs nothing on the Qt main thread but keeps the contract
#      if a worker thread ever drives the scheduler.
#   2. Unknown ids raise KeyError: CRUD mistakes are programming errors at
#      the shell level, not something the core has to recover from.
