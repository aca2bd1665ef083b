"""
Seed Data Generator — fills the database with a month of fake tasks,
meetings, notes and brain-break scores for development and demos.

Run: python scripts/seed_data.py [days]
"""

import random
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from omnitask.data.database import Database
from omnitask.data.models import GameScore, Meeting, Note, NoteFolder, Task, TaskStatus
from omnitask.data.repository import Repository
from omnitask.games.session import PASSIVE_SCORE, SCORING
from omnitask.services.app_state import AppState

TASK_TITLES = {
    "Office": ["Budget Review", "Quarterly Report", "Team Sync Prep", "Inbox Zero"],
    "Online / Zoom": ["Client Call", "Design Review", "Vendor Demo"],
    "Home": ["Pay Bills", "Plan Groceries", "Read Chapter"],
    "Library": ["Research Notes", "Draft Proposal"],
}

MEETING_TITLES = [
    ("Team Standup", "Google Meet"),
    ("1:1 with Manager", "Zoom"),
    ("Sprint Planning", "Teams"),
]

# Weights roughly match a productive-but-human month
STATUS_WEIGHTS = {
    TaskStatus.DONE: 55,
    TaskStatus.ON_GOING: 15,
    TaskStatus.PENDING: 15,
    TaskStatus.CANCELED: 8,
    TaskStatus.TO_RESCHEDULE: 7,
}


def _random_score(game) -> int:
    if game.type not in SCORING:
        return PASSIVE_SCORE
    base, per_second = SCORING[game.type]
    return base + random.randint(0, game.duration_seconds - 1) * per_second


def seed(days: int = 30) -> None:
    db = Database()
    db.connect()
    state = AppState(Repository(db.conn))
    today = date.today()

    # ── Tasks ───────────────────────────────────────────────────────────
    statuses = list(STATUS_WEIGHTS)
    weights = list(STATUS_WEIGHTS.values())
    added = 0
    for offset in range(-days, 4):
        day = today + timedelta(days=offset)
        for _ in range(random.randint(0, 3)):
            location = random.choice(list(TASK_TITLES))
            status = random.choices(statuses, weights)[0] if offset < 0 else TaskStatus.PENDING
            state.add_task(Task(
                title=random.choice(TASK_TITLES[location]),
                description="Seeded task",
                date=day,
                status=status,
                location=location,
                reminder=offset >= 0 and random.random() < 0.5,
            ))
            added += 1

    # ── Meetings for the coming week ────────────────────────────────────
    meetings = list(state.meetings)
    for offset in range(7):
        title, platform = random.choice(MEETING_TITLES)
        meetings.append(Meeting(
            title=title, date=today + timedelta(days=offset),
            time=f"{random.randint(9, 16):02d}:{random.choice(['00', '30'])}",
            platform=platform,
        ))
    state.set_meetings(meetings)

    # ── Notes ───────────────────────────────────────────────────────────
    folder = NoteFolder(name="Seeded", color="#a855f7")
    state.set_folders(list(state.folders) + [folder])
    state.set_notes(list(state.notes) + [
        Note(title="Demo data", content=f"Generated {added} tasks over {days} days.",
             folder_id=folder.id),
    ])

    # ── Brain-break scores ──────────────────────────────────────────────
    games = state.games
    for _ in range(days):
        game = random.choice(games)
        played_at = datetime.now() - timedelta(
            days=random.randint(0, days - 1), hours=random.randint(0, 8),
        )
        state.append_score(GameScore(
            game_title=game.title, type=game.type,
            score=_random_score(game), date=played_at,
        ))

    db.close()
    print(f"Seeded {added} tasks, 7 meetings and {days} scores over {days} days.")


if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 30
    seed(count)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this script does:
#   Generates fake data so the Analytics tab and leaderboard have something
#   to show without using the app for a month first.
#
# Key points:
#   - Past tasks get a weighted random status; today and the next few days
#     stay PENDING and some are flagged for reminders, so the first
#     reminder scan after sign-in has work to do.
#   - A week of meetings feeds the "Meetings today" card.
#   - Scores are computed with the real SCORING table, so the leaderboard
#     looks like actual play.
#   - Goes through AppState like the app does, so every write uses the
#     same write-through path; no raw SQL.
