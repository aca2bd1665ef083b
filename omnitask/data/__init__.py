from .database import Database
from .models import (
    AppNotification, BrainGame, GameScore, GameSettings, GameType,
    Meeting, Note, NoteFolder, Task, TaskStatus, User,
)
from .repository import Repository

__all__ = [
    "Database", "Repository",
    "AppNotification", "BrainGame", "GameScore", "GameSettings", "GameType",
    "Meeting", "Note", "NoteFolder", "Task", "TaskStatus", "User",
]
