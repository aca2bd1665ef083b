"""Unit tests for the data layer."""

import json
import sqlite3
import pytest
from datetime import date, datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from omnitask.config import DEFAULT_CONFIG, load_config
from omnitask.data.database import SCHEMA_SQL, Database
from omnitask.data.models import (
    AppNotification, BrainGame, GameScore, GameSettings, GameType, Task,
    TaskStatus, User,
)
from omnitask.data.repository import (
    KEY_CURRENT_USER, KEY_GAME_SETTINGS, KEY_GAMES, KEY_GAME_SCORES, KEY_NOTIFICATIONS,
    KEY_TASKS, Repository,
)


@pytest.fixture
def repo():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return Repository(conn)


def _write_raw(repo: Repository, key: str, raw: str) -> None:
    repo.conn.execute(
        "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)", (key, raw)
    )
    repo.conn.commit()


def _stored_keys(repo: Repository) -> list:
    return [r["key"] for r in repo.conn.execute("SELECT key FROM app_state ORDER BY key")]


class TestDefaults:
    def test_missing_keys_give_defaults(self, repo: Repository):
        tasks = repo.load_tasks()
        assert [t.id for t in tasks] == ["1", "2", "3"]
        assert [g.id for g in repo.load_games()] == ["1", "2", "3", "4", "5", "6"]
        assert repo.load_game_settings() == GameSettings()
        assert repo.load_scores() == []
        assert repo.load_notifications() == []
        assert repo.load_theme() == "system"
        assert repo.load_user() is None

    def test_default_tasks_are_relative_to_today(self, repo: Repository):
        tasks = repo.load_tasks()
        today = date.today()
        assert tasks[0].date == today
        assert tasks[1].date == today + timedelta(days=1)
        assert tasks[1].status is TaskStatus.ON_GOING

    def test_default_games_cover_every_type(self, repo: Repository):
        assert {g.type for g in repo.load_games()} == set(GameType)


class TestRoundTrip:
    def test_save_and_load_tasks(self, repo: Repository):
        task = Task(title="Write report", date=date(2024, 3, 4),
                    status=TaskStatus.TO_RESCHEDULE, reminder=True, location="Office")
        repo.save_tasks([task])
        loaded = repo.load_tasks()
        assert loaded == [task]

    def test_status_wire_values(self, repo: Repository):
        repo.save_tasks([Task(title="x", status=TaskStatus.ON_GOING)])
        row = repo.conn.execute("SELECT value FROM app_state WHERE key = ?", (KEY_TASKS,)).fetchone()
        assert json.loads(row["value"])[0]["status"] == "ON-GOING"

    def test_save_overwrites(self, repo: Repository):
        repo.save_tasks([Task(title="first")])
        repo.save_tasks([Task(title="second")])
        assert [t.title for t in repo.load_tasks()] == ["second"]
        count = repo.conn.execute("SELECT COUNT(*) FROM app_state").fetchone()[0]
        assert count == 1

    def test_empty_list_is_not_replaced_by_defaults(self, repo: Repository):
        repo.save_tasks([])
        assert repo.load_tasks() == []

    def test_scores_and_notifications(self, repo: Repository):
        score = GameScore(game_title="Mental Math", type=GameType.MATH, score=250,
                          date=datetime(2024, 1, 2, 9, 30))
        note = AppNotification(title="Reminder: A", message="m", time=datetime(2024, 1, 2, 8, 0))
        repo.save_scores([score])
        repo.save_notifications([note])
        assert repo.load_scores() == [score]
        assert repo.load_notifications() == [note]

    def test_game_settings(self, repo: Repository):
        settings = GameSettings(enabled=False, min_interval_minutes=5,
                                max_interval_minutes=0, games_per_day=0, volume=0.25)
        repo.save_game_settings(settings)
        assert repo.load_game_settings() == settings


class TestCorruptData:
    def test_invalid_json_falls_back(self, repo: Repository):
        _write_raw(repo, KEY_TASKS, "{not json")
        assert [t.id for t in repo.load_tasks()] == ["1", "2", "3"]

    def test_wrong_shape_falls_back(self, repo: Repository):
        _write_raw(repo, KEY_GAMES, json.dumps({"oops": 1}))
        assert len(repo.load_games()) == 6

    def test_unknown_enum_falls_back(self, repo: Repository):
        _write_raw(repo, KEY_GAMES, json.dumps([{"id": "9", "title": "?", "type": "CHESS",
                                                 "duration_seconds": 10}]))
        assert len(repo.load_games()) == 6

    def test_null_notification_time_falls_back(self, repo: Repository):
        _write_raw(repo, KEY_NOTIFICATIONS, json.dumps([{"id": "1", "title": "x", "time": None}]))
        assert repo.load_notifications() == []

    def test_missing_score_date_falls_back(self, repo: Repository):
        _write_raw(repo, KEY_GAME_SCORES, json.dumps([{"id": "1", "game_title": "Mental Math",
                                                  "type": "MATH", "score": 100, "date": ""}]))
        assert repo.load_scores() == []

    def test_partial_settings_fill_defaults(self, repo: Repository):
        _write_raw(repo, KEY_GAME_SETTINGS, json.dumps({"enabled": False}))
        settings = repo.load_game_settings()
        assert settings.enabled is False
        assert settings.max_interval_minutes == 120

    def test_unknown_theme_falls_back(self, repo: Repository):
        _write_raw(repo, "theme", json.dumps("neon"))
        assert repo.load_theme() == "system"


class TestUserAndTheme:
    def test_save_user_none_deletes_key(self, repo: Repository):
        repo.save_user(User(name="Ada"))
        assert _stored_keys(repo) == [KEY_CURRENT_USER]
        repo.save_user(None)
        assert _stored_keys(repo) == []
        assert repo.load_user() is None

    def test_theme(self, repo: Repository):
        repo.save_theme("dark")
        assert repo.load_theme() == "dark"
        with pytest.raises(ValueError):
            repo.save_theme("neon")


class TestExportAndReset:
    def test_export_empty(self, repo: Repository):
        repo.save_tasks([])
        assert repo.export_tasks_csv() == ""

    def test_export_quotes_commas(self, repo: Repository):
        repo.save_tasks([Task(id="a", title="Call Bob, then Alice", date=date(2024, 5, 6))])
        lines = repo.export_tasks_csv().splitlines()
        assert lines[0] == "id,title,date,status,location,reminder,remarks"
        assert lines[1].startswith('a,"Call Bob, then Alice",2024-05-06,PENDING')

    def test_reset_all_data(self, repo: Repository):
        repo.save_tasks([])
        repo.save_theme("dark")
        repo.reset_all_data()
        assert repo.load_theme() == "system"
        assert len(repo.load_tasks()) == 3


class TestDatabaseAndConfig:
    def test_database_connect_creates_schema(self, tmp_path):
        db = Database(tmp_path / "test.db")
        conn = db.connect()
        assert db.connect() is conn
        Repository(conn).save_theme("light")
        db.close()
        assert db.conn is None

        db2 = Database(tmp_path / "test.db")
        assert Repository(db2.connect()).load_theme() == "light"
        db2.close()

    def test_config_defaults_when_missing(self, tmp_path):
        assert load_config(tmp_path / "nope.json") == DEFAULT_CONFIG

    def test_config_override_and_unknown_keys(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"game_tick_s": 5, "bogus": 1}), encoding="utf-8")
        cfg = load_config(path)
        assert cfg["game_tick_s"] == 5
        assert "bogus" not in cfg
        assert cfg["reminder_interval_min"] == DEFAULT_CONFIG["reminder_interval_min"]

    def test_bad_config_uses_defaults(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert load_config(path) == DEFAULT_CONFIG
