"""
Data models for OmniTask.

Plain dataclasses for every persisted record. Each one knows how to turn
itself into a JSON-friendly dict and back, so the repository can store whole
collections under a single key.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


def new_id() -> str:
    return uuid.uuid4().hex


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    ON_GOING = "ON-GOING"
    DONE = "DONE"
    CANCELED = "CANCELED"
    TO_RESCHEDULE = "TO RESCHEDULE"


# Statuses that still count as "open" for reminders
OPEN_STATUSES = (TaskStatus.PENDING, TaskStatus.ON_GOING)


class GameType(str, Enum):
    EXERCISE = "EXERCISE"
    MATH = "MATH"
    BREATHING = "BREATHING"
    REFLEX = "REFLEX"
    MEMORY = "MEMORY"
    PUZZLE = "PUZZLE"


# Passive games resolve as a success when their timer runs out
PASSIVE_GAME_TYPES = (GameType.EXERCISE, GameType.BREATHING)


@dataclass
class Task:
    """A dated to-do item. `date` is a calendar day with no time of day."""
    id: str = field(default_factory=new_id)
    title: str = ""
    description: str = ""
    date: date = field(default_factory=date.today)
    status: TaskStatus = TaskStatus.PENDING
    remarks: str = ""
    reminder: bool = False
    location: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        d["status"] = self.status.value
        d["created_at"] = self.created_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Task":
        return cls(
            id=str(d["id"]),
            title=d["title"],
            description=d.get("description", ""),
            date=date.fromisoformat(d["date"]),
            status=TaskStatus(d.get("status", TaskStatus.PENDING.value)),
            remarks=d.get("remarks", ""),
            reminder=bool(d.get("reminder", False)),
            location=d.get("location"),
            created_at=_parse_dt(d.get("created_at")) or datetime.now(),
        )


@dataclass
class AppNotification:
    """An in-app notification shown in the notification panel."""
    id: str = field(default_factory=new_id)
    title: str = ""
    message: str = ""
    time: datetime = field(default_factory=datetime.now)
    read: bool = False

    def to_dict(self) -> dict:
        d = asdict(self)
        d["time"] = self.time.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "AppNotification":
        return cls(
            id=str(d["id"]),
            title=d["title"],
            message=d.get("message", ""),
            time=_require_dt(d.get("time"), "time"),
            read=bool(d.get("read", False)),
        )


@dataclass
class BrainGame:
    """A catalog entry for a brain-break activity."""
    id: str = field(default_factory=new_id)
    title: str = ""
    type: GameType = GameType.EXERCISE
    duration_seconds: int = 60
    instructions: str = ""
    active: bool = True
    frequency: str = "RANDOM"           # 'RANDOM' or 'SCHEDULED'
    scheduled_time: Optional[str] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "BrainGame":
        return cls(
            id=str(d["id"]),
            title=d["title"],
            type=GameType(d["type"]),
            duration_seconds=int(d["duration_seconds"]),
            instructions=d.get("instructions", ""),
            active=bool(d.get("active", True)),
            frequency=d.get("frequency", "RANDOM"),
            scheduled_time=d.get("scheduled_time"),
        )


@dataclass
class GameSettings:
    """User preferences for the brain-break popups."""
    enabled: bool = True
    min_interval_minutes: int = 30
    max_interval_minutes: int = 120
    games_per_day: int = 2
    volume: float = 1.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "GameSettings":
        defaults = cls()
        return cls(
            enabled=bool(d.get("enabled", defaults.enabled)),
            min_interval_minutes=int(d.get("min_interval_minutes", defaults.min_interval_minutes)),
            max_interval_minutes=int(d.get("max_interval_minutes", defaults.max_interval_minutes)),
            games_per_day=int(d.get("games_per_day", defaults.games_per_day)),
            volume=float(d.get("volume", defaults.volume)),
        )


@dataclass
class GameScore:
    """One completed game. Append-only."""
    id: str = field(default_factory=new_id)
    game_title: str = ""
    type: GameType = GameType.EXERCISE
    score: int = 0
    date: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["type"] = self.type.value
        d["date"] = self.date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "GameScore":
        return cls(
            id=str(d["id"]),
            game_title=d["game_title"],
            type=GameType(d["type"]),
            score=int(d["score"]),
            date=_require_dt(d.get("date"), "date"),
        )


@dataclass
class NoteFolder:
    id: str = field(default_factory=new_id)
    name: str = ""
    color: str = "#89b4fa"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "NoteFolder":
        return cls(id=str(d["id"]), name=d["name"], color=d.get("color", "#89b4fa"))


@dataclass
class Note:
    id: str = field(default_factory=new_id)
    title: str = ""
    content: str = ""
    updated_at: datetime = field(default_factory=datetime.now)
    folder_id: Optional[str] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["updated_at"] = self.updated_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Note":
        return cls(
            id=str(d["id"]),
            title=d["title"],
            content=d.get("content", ""),
            updated_at=_parse_dt(d.get("updated_at")) or datetime.now(),
            folder_id=d.get("folder_id"),
        )


@dataclass
class Meeting:
    id: str = field(default_factory=new_id)
    title: str = ""
    date: date = field(default_factory=date.today)
    time: str = "09:00"                 # HH:MM, local
    description: str = ""
    platform: str = ""

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Meeting":
        return cls(
            id=str(d["id"]),
            title=d["title"],
            date=date.fromisoformat(d["date"]),
            time=d.get("time", "09:00"),
            description=d.get("description", ""),
            platform=d.get("platform", ""),
        )


@dataclass
class User:
    """The locally signed-in user. No credentials are stored."""
    id: str = field(default_factory=new_id)
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "User":
        return cls(
            id=str(d["id"]),
            name=d["name"],
            email=d.get("email"),
            phone=d.get("phone"),
            avatar=d.get("avatar"),
        )


def _parse_dt(s: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(s) if s else None


def _require_dt(s: Optional[str], name: str) -> datetime:
    """Like _parse_dt, but a missing timestamp is malformed data."""
    if not s:
        raise ValueError(f"missing required timestamp '{name}'")
    return datetime.fromisoformat(s)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the shape of every persisted record: tasks, notifications, the
#   brain-game catalog, game settings, scores, notes, meetings and the user.
#
# Key points:
#   - str-valued Enums (TaskStatus, GameType) serialize straight to JSON and
#     keep human-readable wire values ("ON-GOING", "TO RESCHEDULE").
#   - to_dict()/from_dict() pairs keep JSON concerns in one place. from_dict
#     raises KeyError/ValueError on malformed data; the repository catches
#     those and falls back to defaults.
#   - Task.date is a plain `date`: reminders are day-granular.
#
# Interviewer-friendly talking points:
#   1. Ids are uuid4 hex strings rather than autoincrement ints because whole
#      collections are stored as JSON blobs, not as SQL rows.
#   2. OPEN_STATUSES / PASSIVE_GAME_TYPES live next to the enums so the
#      business rules that depend on them read naturally elsewhere.
