"""Unit tests for the service layer."""

import sqlite3
import pytest
from datetime import date, datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from omnitask.data.database import SCHEMA_SQL
from omnitask.data.models import (
    AppNotification, BrainGame, GameScore, GameType, Meeting, Note, NoteFolder,
    Task, TaskStatus,
)
from omnitask.data.repository import Repository
from omnitask.errors import NoEligibleGamesError, PopupAlreadyOpenError
from omnitask.games.session import GameResult
from omnitask.services.app_state import AppState
from omnitask.services.auth_service import AuthService
from omnitask.services.notification_service import (
    ALERT_TITLE, NotificationService, find_due_reminders,
)
from omnitask.services.popup_trigger import PopupTriggerScheduler
from omnitask.services.score_ledger import ScoreLedger

T0 = datetime(2024, 6, 3, 9, 0)


class StubRng:
    """Deterministic stand-in for random.Random."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def repo():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return Repository(conn)


@pytest.fixture
def state(repo):
    return AppState(repo)


def _due_task(title: str = "Pay rent", day: date = T0.date(), **kw) -> Task:
    return Task(title=title, date=day, reminder=True, status=TaskStatus.PENDING, **kw)


class TestAppState:
    def test_loads_defaults(self, state):
        assert len(state.tasks) == 3
        assert len(state.games) == 6
        assert state.active_popup is None

    def test_write_through(self, repo, state):
        state.add_task(Task(id="x", title="New"))
        state.set_task_status("x", TaskStatus.DONE)
        reloaded = AppState(repo)
        assert next(t for t in reloaded.tasks if t.id == "x").status is TaskStatus.DONE

    def test_snapshots_are_detached(self, state):
        snapshot = state.tasks
        snapshot[0].title = "mutated"
        assert state.tasks[0].title != "mutated"

    def test_duplicate_and_unknown_ids(self, state):
        with pytest.raises(ValueError):
            state.add_task(Task(id="1", title="dupe"))
        with pytest.raises(KeyError):
            state.delete_task("missing")
        with pytest.raises(KeyError):
            state.toggle_game("missing")

    def test_delete_task(self, state):
        state.delete_task("1")
        assert [t.id for t in state.tasks] == ["2", "3"]

    def test_game_catalog(self, state):
        assert state.toggle_game("1") is False
        assert "1" not in [g.id for g in state.eligible_games()]
        state.add_game(BrainGame(id="7", title="Neck Rolls", duration_seconds=20))
        assert state.games[-1].title == "Neck Rolls"
        with pytest.raises(ValueError):
            state.add_game(BrainGame(title="Zero", duration_seconds=0))
        state.delete_game("7")
        assert len(state.games) == 6

    def test_update_game(self, repo, state):
        game = state.games[0]
        game.duration_seconds = 45
        state.update_game(game)
        assert repo.load_games()[0].duration_seconds == 45
        game.duration_seconds = -1
        with pytest.raises(ValueError):
            state.update_game(game)

    def test_notes_folders_meetings(self, repo, state):
        state.set_folders([NoteFolder(id="f", name="Work")])
        state.set_notes([Note(title="Plan", content="Q3", folder_id="f")])
        state.set_meetings([Meeting(title="Standup", date=T0.date())])
        reloaded = AppState(repo)
        assert [f.name for f in reloaded.folders] == ["Work"]
        assert reloaded.notes[0].folder_id == "f"
        assert [m.title for m in reloaded.meetings] == ["Standup"]

    def test_settings_validation(self, state):
        with pytest.raises(ValueError):
            state.update_settings(min_interval_minutes=200, max_interval_minutes=100)
        with pytest.raises(ValueError):
            state.update_settings(volume=1.5)
        assert state.settings.min_interval_minutes == 30
        assert state.update_settings(games_per_day=0).games_per_day == 0

    def test_popup_slot(self, state):
        game = state.games[0]
        assert state.open_popup(game) is True
        assert state.open_popup(state.games[1]) is False
        assert state.active_popup.id == game.id
        assert state.close_popup().id == game.id
        assert state.close_popup() is None

    def test_mark_notifications_read(self, state):
        state.add_notifications([AppNotification(title="a"), AppNotification(title="b")])
        assert state.unread_count() == 2
        assert state.mark_notifications_read() == 2
        assert state.mark_notifications_read() == 0
        assert state.unread_count() == 0

    def test_reload_after_reset(self, repo, state):
        state.add_task(Task(id="x", title="temp"))
        repo.reset_all_data()
        state.reload()
        assert [t.id for t in state.tasks] == ["1", "2", "3"]


class TestNotifications:
    def test_due_task_notified_once_per_day(self, state):
        state.add_task(_due_task())
        alerts = []
        svc = NotificationService(state, alert=lambda title, msg: alerts.append((title, msg)))

        created = svc.check_reminders(now=T0)
        assert [n.title for n in created] == ["Reminder: Pay rent"]
        assert created[0].message == "This task is due today. Status: PENDING"
        assert alerts == [(ALERT_TITLE, "Check your dashboard. 1 tasks pending.")]

        assert svc.check_reminders(now=T0 + timedelta(hours=1)) == []
        assert len(alerts) == 1
        assert len(state.notifications) == 1

    def test_next_day_scan_ignores_yesterdays_task(self, state):
        state.add_task(_due_task())
        svc = NotificationService(state)
        svc.check_reminders(now=T0)
        assert svc.check_reminders(now=T0 + timedelta(days=1)) == []

    def test_only_open_flagged_tasks_for_today(self):
        tasks = [
            Task(title="done", date=T0.date(), reminder=True, status=TaskStatus.DONE),
            Task(title="no flag", date=T0.date(), reminder=False),
            _due_task("tomorrow", day=T0.date() + timedelta(days=1)),
            Task(title="ongoing", date=T0.date(), reminder=True, status=TaskStatus.ON_GOING),
        ]
        new = find_due_reminders(tasks, [], T0)
        assert [n.title for n in new] == ["Reminder: ongoing"]
        assert new[0].message.endswith("ON-GOING")

    def test_same_title_deduplicated_within_scan(self):
        new = find_due_reminders([_due_task("Gym"), _due_task("Gym")], [], T0)
        assert len(new) == 1

    def test_old_notification_does_not_block_today(self):
        old = AppNotification(title="Reminder: Gym", time=T0 - timedelta(days=1))
        assert len(find_due_reminders([_due_task("Gym")], [old], T0)) == 1

    def test_alert_failure_is_swallowed(self, state):
        state.add_task(_due_task())

        def broken(title, msg):
            raise OSError("no tray")

        created = NotificationService(state, alert=broken).check_reminders(now=T0)
        assert len(created) == 1
        assert len(state.notifications) == 1

    def test_scan_survives_corrupt_stored_notifications(self, repo):
        repo.conn.execute(
            "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)",
            ("notifications", '[{"id": "1", "title": "x", "time": null}]'),
        )
        repo.conn.commit()
        state = AppState(repo)
        assert state.notifications == ()
        state.add_task(_due_task())
        assert len(NotificationService(state).check_reminders(now=T0)) == 1

    def test_persisted(self, repo, state):
        state.add_task(_due_task())
        NotificationService(state).check_reminders(now=T0)
        assert [n.title for n in repo.load_notifications()] == ["Reminder: Pay rent"]


class TestPopupTrigger:
    def test_disabled_never_opens(self, state):
        state.update_settings(enabled=False)
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        assert all(trigger.tick(now=T0 + timedelta(hours=i)) is None for i in range(100))
        assert state.active_popup is None

    def test_probability_gate(self, state):
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.5), probability=0.02)
        assert trigger.tick(now=T0) is None
        trigger.rng = StubRng(0.0)
        game = trigger.tick(now=T0)
        assert game is not None
        assert state.active_popup.id == game.id

    def test_no_second_popup_while_open(self, state):
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        state.open_popup(state.games[0])
        rng = trigger.rng
        assert trigger.tick(now=T0) is None
        assert rng.draws == 0

    def test_no_eligible_games(self, state):
        for g in state.games:
            state.toggle_game(g.id)
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        assert trigger.tick(now=T0) is None
        with pytest.raises(NoEligibleGamesError, match="No active games enabled"):
            trigger.trigger_now(now=T0)

    def test_min_interval(self, state):
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        trigger.reset(now=T0)
        assert trigger.tick(now=T0 + timedelta(minutes=10)) is None
        assert trigger.tick(now=T0 + timedelta(minutes=31)) is not None

    def test_max_interval_forces_popup(self, state):
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.99))
        trigger.reset(now=T0)
        assert trigger.tick(now=T0 + timedelta(minutes=60)) is None
        assert trigger.tick(now=T0 + timedelta(minutes=120)) is not None

    def test_daily_cap(self, state):
        state.update_settings(min_interval_minutes=0, games_per_day=2)
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        for i in range(2):
            assert trigger.tick(now=T0 + timedelta(minutes=i)) is not None
            state.close_popup()
        assert trigger.tick(now=T0 + timedelta(minutes=5)) is None
        assert trigger.tick(now=T0 + timedelta(days=1)) is not None

    def test_trigger_now_bypasses_gates(self, state):
        state.update_settings(enabled=False)
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.99))
        game = trigger.trigger_now(now=T0)
        assert state.active_popup.id == game.id
        with pytest.raises(PopupAlreadyOpenError):
            trigger.trigger_now(now=T0)

    def test_trigger_now_resets_interval_clock(self, state):
        trigger = PopupTriggerScheduler(state, rng=StubRng(0.0))
        trigger.trigger_now(now=T0)
        state.close_popup()
        assert trigger.tick(now=T0 + timedelta(minutes=20)) is None
        assert trigger.tick(now=T0 + timedelta(minutes=30)) is not None

    def test_invalid_probability(self, state):
        with pytest.raises(ValueError):
            PopupTriggerScheduler(state, probability=1.5)


class TestScoreLedger:
    def test_incomplete_results_are_not_recorded(self, state):
        ledger = ScoreLedger(state)
        game = state.games[2]
        assert ledger.record(game, GameResult(completed=False, score=0)) is None
        assert state.scores == ()

    def test_record(self, repo, state):
        ledger = ScoreLedger(state)
        game = BrainGame(title="Mental Math", type=GameType.MATH, duration_seconds=30)
        score = ledger.record(game, GameResult(completed=True, score=360), now=T0)
        assert (score.game_title, score.type, score.score, score.date) == (
            "Mental Math", GameType.MATH, 360, T0)
        assert repo.load_scores() == [score]

    def test_top_n_sorted_and_stable(self, state):
        for i, value in enumerate([10, 90, 30, 90, 50, 70]):
            state.append_score(GameScore(game_title=f"g{i}", type=GameType.MATH, score=value))
        top = ScoreLedger(state).top_n(5)
        assert [s.score for s in top] == [90, 90, 70, 50, 30]
        assert [s.game_title for s in top[:2]] == ["g1", "g3"]

    def test_best_by_type_and_total(self, state):
        state.append_score(GameScore(type=GameType.MATH, score=200))
        state.append_score(GameScore(type=GameType.MATH, score=300))
        state.append_score(GameScore(type=GameType.EXERCISE, score=50))
        ledger = ScoreLedger(state)
        assert ledger.best_by_type() == {GameType.MATH: 300, GameType.EXERCISE: 50}
        assert ledger.total_points() == 550


class TestAuthService:
    def test_login_logout(self, repo, state):
        auth = AuthService(state)
        assert not auth.is_logged_in
        user = auth.login("  Ada ", "ada@example.com")
        assert user.name == "Ada"
        assert repo.load_user() == user
        with pytest.raises(RuntimeError):
            auth.login("Bob")
        auth.logout()
        assert auth.current_user is None
        assert repo.load_user() is None

    def test_empty_name_rejected(self, state):
        with pytest.raises(ValueError):
            AuthService(state).login("   ")

    def test_update_profile(self, state):
        auth = AuthService(state)
        auth.login("Ada")
        assert auth.update_profile(phone="555").phone == "555"
        with pytest.raises(ValueError):
            auth.update_profile(password="x")


@pytest.fixture(scope="module")
def qapp():
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class TestSchedulerService:
    def _make(self, state, rng):
        from omnitask.services.scheduler_service import SchedulerService
        popups, batches = [], []
        svc = SchedulerService(
            NotificationService(state),
            PopupTriggerScheduler(state, rng=rng),
            on_popup=popups.append,
            on_notifications=batches.append,
        )
        return svc, popups, batches

    def test_start_and_stop(self, qapp, state):
        svc, _, _ = self._make(state, StubRng(0.0))
        assert not svc.is_running
        svc.start()
        assert svc.is_running
        svc.start()  # restarting must not leave a second set of timers
        assert svc.is_running
        svc.stop()
        assert not svc.is_running

    def test_game_tick_invokes_popup_callback(self, qapp, state):
        svc, popups, _ = self._make(state, StubRng(0.0))
        game = svc.run_game_tick()
        assert popups == [game]
        assert svc.run_game_tick() is None  # slot is taken
        assert len(popups) == 1

    def test_reminder_scan_invokes_callback(self, qapp, state):
        state.add_task(_due_task(day=date.today()))
        svc, _, batches = self._make(state, StubRng(0.99))
        created = svc.run_reminder_scan()
        assert batches == [created]
        assert svc.run_reminder_scan() == []
        assert len(batches) == 1
