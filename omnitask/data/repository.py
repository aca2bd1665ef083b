"""
Repository — the single place where persisted state is read and written.

Every collection is stored as one JSON document in the app_state table.
Reads fall back to a default when the key is missing or the stored value
does not parse; writes replace the whole document (last write wins).
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Callable, List, Optional, TypeVar

from . import defaults
from .models import (
    AppNotification, BrainGame, GameScore, GameSettings, Meeting, Note,
    NoteFolder, Task, User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Persisted keys
KEY_TASKS = "tasks"
KEY_NOTES = "notes"
KEY_NOTE_FOLDERS = "note_folders"
KEY_MEETINGS = "meetings"
KEY_GAMES = "brain_games"
KEY_GAME_SETTINGS = "game_settings"
KEY_GAME_SCORES = "game_scores"
KEY_NOTIFICATIONS = "notifications"
KEY_THEME = "theme"
KEY_CURRENT_USER = "current_user"

THEMES = ("light", "dark", "system")

# Anything a malformed document can raise while being turned into models
_PARSE_ERRORS = (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)


class Repository:
    """Data-access layer wrapping a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ── Generic key-value access ────────────────────────────────────────────

    def load(self, key: str, default: Callable[[], T], parse: Callable[[Any], T]) -> T:
        """Read `key` and parse it; return default() if absent or unreadable."""
        row = self.conn.execute(
            "SELECT value FROM app_state WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return default()
        try:
            return parse(json.loads(row["value"]))
        except _PARSE_ERRORS as e:
            logger.warning("Stored value for '%s' is unreadable (%s); using default.", key, e)
            return default()

    def save(self, key: str, value: Any) -> None:
        """Upsert the JSON-serialized value for `key`."""
        self.conn.execute(
            "INSERT INTO app_state (key, value, updated_at) VALUES (?, ?, datetime('now')) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
            "updated_at = excluded.updated_at",
            (key, json.dumps(value)),
        )
        self.conn.commit()

    def delete(self, key: str) -> None:
        self.conn.execute("DELETE FROM app_state WHERE key = ?", (key,))
        self.conn.commit()

    # ── Tasks ───────────────────────────────────────────────────────────────

    def load_tasks(self) -> List[Task]:
        return self.load(KEY_TASKS, defaults.default_tasks, _list_of(Task))

    def save_tasks(self, tasks: List[Task]) -> None:
        self.save(KEY_TASKS, [t.to_dict() for t in tasks])

    # ── Notes / folders / meetings ──────────────────────────────────────────

    def load_notes(self) -> List[Note]:
        return self.load(KEY_NOTES, defaults.default_notes, _list_of(Note))

    def save_notes(self, notes: List[Note]) -> None:
        self.save(KEY_NOTES, [n.to_dict() for n in notes])

    def load_folders(self) -> List[NoteFolder]:
        return self.load(KEY_NOTE_FOLDERS, defaults.default_folders, _list_of(NoteFolder))

    def save_folders(self, folders: List[NoteFolder]) -> None:
        self.save(KEY_NOTE_FOLDERS, [f.to_dict() for f in folders])

    def load_meetings(self) -> List[Meeting]:
        return self.load(KEY_MEETINGS, defaults.default_meetings, _list_of(Meeting))

    def save_meetings(self, meetings: List[Meeting]) -> None:
        self.save(KEY_MEETINGS, [m.to_dict() for m in meetings])

    # ── Brain games ─────────────────────────────────────────────────────────

    def load_games(self) -> List[BrainGame]:
        return self.load(KEY_GAMES, defaults.default_games, _list_of(BrainGame))

    def save_games(self, games: List[BrainGame]) -> None:
        self.save(KEY_GAMES, [g.to_dict() for g in games])

    def load_game_settings(self) -> GameSettings:
        return self.load(KEY_GAME_SETTINGS, defaults.default_settings, GameSettings.from_dict)

    def save_game_settings(self, settings: GameSettings) -> None:
        self.save(KEY_GAME_SETTINGS, settings.to_dict())

    def load_scores(self) -> List[GameScore]:
        return self.load(KEY_GAME_SCORES, list, _list_of(GameScore))

    def save_scores(self, scores: List[GameScore]) -> None:
        self.save(KEY_GAME_SCORES, [s.to_dict() for s in scores])

    # ── Notifications ───────────────────────────────────────────────────────

    def load_notifications(self) -> List[AppNotification]:
        return self.load(KEY_NOTIFICATIONS, list, _list_of(AppNotification))

    def save_notifications(self, notifications: List[AppNotification]) -> None:
        self.save(KEY_NOTIFICATIONS, [n.to_dict() for n in notifications])

    # ── Theme / user ────────────────────────────────────────────────────────

    def load_theme(self) -> str:
        return self.load(KEY_THEME, lambda: "system", _parse_theme)

    def save_theme(self, theme: str) -> None:
        self.save(KEY_THEME, _parse_theme(theme))

    def load_user(self) -> Optional[User]:
        return self.load(KEY_CURRENT_USER, lambda: None, User.from_dict)

    def save_user(self, user: Optional[User]) -> None:
        if user is None:
            self.delete(KEY_CURRENT_USER)
        else:
            self.save(KEY_CURRENT_USER, user.to_dict())

    # ── Data export / reset ─────────────────────────────────────────────────

    def export_tasks_csv(self) -> str:
        """Return all tasks as CSV text (empty string if there are none)."""
        tasks = self.load_tasks()
        if not tasks:
            return ""
        headers = ["id", "title", "date", "status", "location", "reminder", "remarks"]
        lines = [",".join(headers)]
        for t in tasks:
            d = t.to_dict()
            lines.append(",".join(_csv_cell(d[h]) for h in headers))
        return "\n".join(lines)

    def reset_all_data(self) -> None:
        """Delete every stored collection. Defaults apply on next load."""
        self.conn.execute("DELETE FROM app_state")
        self.conn.commit()
        logger.warning("All data has been reset.")


# ── Parsers ─────────────────────────────────────────────────────────────────

def _list_of(model) -> Callable[[Any], list]:
    def parse(raw: Any) -> list:
        if not isinstance(raw, list):
            raise TypeError(f"expected a list, got {type(raw).__name__}")
        return [model.from_dict(item) for item in raw]
    return parse


def _parse_theme(raw: Any) -> str:
    if raw not in THEMES:
        raise ValueError(f"unknown theme {raw!r}")
    return raw


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if any(c in text for c in ',"\n'):
        text = '"' + text.replace('"', '""') + '"'
    return text


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Wraps the app_state key-value table with typed load_*/save_* pairs, one
#   per collection (tasks, notes, games, settings, scores, notifications...).
#
# Key design decisions:
#   - load() never raises on bad data. A corrupt row logs a warning and the
#     documented default is used, so a broken save can't stop the app from
#     starting.
#   - Parsers are plain callables, so each collection chooses its own
#     validation (list of models, single settings object, theme string).
#   - save_user(None) deletes the key: "no user" is represented by absence.
#
# Data flow:
#   App start → AppState loads every collection once → user edits →
#   AppState calls save_* with the whole new collection → row upserted.
#
# Interviewer-friendly talking points:
#   1. Whole-document writes are O(n) per change, which is fine for a
#      personal dashboard holding hundreds of records, and make the
#      "read-modify-write, last write wins" contract trivially true.
#   2. Default factories (not default values) avoid sharing mutable lists
#      between callers.
