"""
Starter content used when a collection has never been saved (or fails to load).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List

from .models import (
    BrainGame, GameSettings, GameType, Meeting, Note, NoteFolder, Task, TaskStatus,
)


def default_tasks() -> List[Task]:
    today = date.today()
    return [
        Task(id="1", title="Project Kickoff", description="Initial meeting with stakeholders",
             location="Conference Room A", date=today, status=TaskStatus.DONE,
             remarks="Went well", reminder=False),
        Task(id="2", title="Submit Budget", description="Q4 Financial planning",
             location="Finance Dept", date=today + timedelta(days=1),
             status=TaskStatus.ON_GOING, remarks="Waiting for approval", reminder=True),
        Task(id="3", title="Client Review", description="Review designs with client",
             location="Online / Zoom", date=today + timedelta(days=2),
             status=TaskStatus.PENDING, remarks="", reminder=False),
    ]


def default_folders() -> List[NoteFolder]:
    return [
        NoteFolder(id="1", name="Personal", color="#f43f5e"),
        NoteFolder(id="2", name="Work", color="#3b82f6"),
        NoteFolder(id="3", name="Ideas", color="#f59e0b"),
    ]


def default_notes() -> List[Note]:
    return [
        Note(id="1", title="Meeting Ideas",
             content="Discuss timeline extension and budget constraints.",
             updated_at=datetime.now(), folder_id="2"),
    ]


def default_meetings() -> List[Meeting]:
    return [
        Meeting(id="1", title="Team Standup", date=date.today(), time="10:00",
                description="Daily sync", platform="Google Meet"),
    ]


def default_games() -> List[BrainGame]:
    return [
        BrainGame(id="1", title="Quick Stretch", type=GameType.EXERCISE, duration_seconds=60,
                  instructions="Stand up and touch your toes. Hold for 10 seconds, repeat."),
        BrainGame(id="2", title="Box Breathing", type=GameType.BREATHING, duration_seconds=45,
                  instructions="Inhale for 4s, hold for 4s, exhale for 4s, hold for 4s."),
        BrainGame(id="3", title="Mental Math", type=GameType.MATH, duration_seconds=30,
                  instructions="Solve the problem as fast as you can."),
        BrainGame(id="4", title="Reflex Test", type=GameType.REFLEX, duration_seconds=20,
                  instructions="Click the red button 5 times as it moves around."),
        BrainGame(id="5", title="Digit Span", type=GameType.MEMORY, duration_seconds=30,
                  instructions="Memorize the 6-digit number shown, then type it in."),
        BrainGame(id="6", title="Word Scramble", type=GameType.PUZZLE, duration_seconds=45,
                  instructions="Unscramble the productivity-related word."),
    ]


def default_settings() -> GameSettings:
    return GameSettings(enabled=True, min_interval_minutes=30, max_interval_minutes=120,
                        games_per_day=2, volume=1.0)
