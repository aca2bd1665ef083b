"""
Main Window — the central hub of OmniTask.

Contains:
  - Tasks, Brain Breaks, Notifications and Analytics tabs
  - Sign-in / sign-out, which start and stop the background scheduler
  - Tray icon, used as the system alert channel
  - Routing of brain-break popups into the score ledger
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import Qt, QTimer, Slot
from PySide6.QtGui import QCloseEvent, QFont, QGuiApplication
from PySide6.QtWidgets import (
    QApplication, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout,
    QLabel, QLineEdit, QListWidget, QListWidgetItem, QMainWindow, QMenu,
    QMessageBox, QPushButton, QStyle, QSystemTrayIcon, QTabWidget,
    QVBoxLayout, QWidget,
)

from omnitask.config import load_config
from omnitask.data.database import Database
from omnitask.data.models import AppNotification, BrainGame
from omnitask.data.repository import Repository
from omnitask.errors import OmniTaskError
from omnitask.games.session import GameResult
from omnitask.services.app_state import AppState
from omnitask.services.auth_service import AuthService
from omnitask.services.notification_service import NotificationService
from omnitask.services.popup_trigger import PopupTriggerScheduler
from omnitask.services.scheduler_service import SchedulerService
from omnitask.services.score_ledger import ScoreLedger
from omnitask.ui.analytics_widget import AnalyticsWidget
from omnitask.ui.game_popup import GamePopupDialog
from omnitask.ui.games_widget import GamesWidget
from omnitask.ui.styles import stylesheet_for
from omnitask.ui.tasks_widget import TasksWidget

logger = logging.getLogger(__name__)

TAB_TASKS, TAB_GAMES, TAB_NOTIFICATIONS, TAB_ANALYTICS = range(4)
TRAY_MESSAGE_MS = 5000


class MainWindow(QMainWindow):
    """The main application window."""

    def __init__(self, config: Optional[dict] = None) -> None:
        super().__init__()
        self.setWindowTitle("OmniTask")
        self.setMinimumSize(900, 650)
        self.resize(1100, 760)

        cfg = config or load_config()

        # ── Initialize core systems ─────────────────────────────────────
        self.db = Database(Path(cfg["db_path"]))
        self.db.connect()
        self.repo = Repository(self.db.conn)
        self.state = AppState(self.repo)
        self.auth = AuthService(self.state)
        self.ledger = ScoreLedger(self.state)

        self.notification_svc = NotificationService(self.state, alert=self._system_alert)
        self.trigger = PopupTriggerScheduler(
            self.state, probability=cfg["game_trigger_probability"]
        )
        self.scheduler = SchedulerService(
            self.notification_svc, self.trigger,
            on_popup=self._open_popup,
            on_notifications=self._on_new_notifications,
            reminder_initial_delay_s=cfg["reminder_initial_delay_s"],
            reminder_interval_min=cfg["reminder_interval_min"],
            game_tick_s=cfg["game_tick_s"],
        )

        self._popup: Optional[GamePopupDialog] = None

        # ── Build UI ────────────────────────────────────────────────────
        self._build_ui()
        self._setup_tray()
        self._apply_theme(self.state.theme)

        # Sign-in happens once the event loop is running
        QTimer.singleShot(0, self._ensure_signed_in)

    # ── UI Construction ─────────────────────────────────────────────────

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)

        # User bar
        bar = QHBoxLayout()
        bar.setContentsMargins(20, 10, 20, 6)
        brand = QLabel("OmniTask")
        brand.setObjectName("title")
        bar.addWidget(brand)
        bar.addStretch()
        self.user_label = QLabel("")
        self.user_label.setObjectName("subtitle")
        bar.addWidget(self.user_label)
        self.btn_logout = QPushButton("Sign out")
        self.btn_logout.clicked.connect(self._on_logout)
        bar.addWidget(self.btn_logout)
        main_layout.addLayout(bar)

        self.tabs = QTabWidget()
        main_layout.addWidget(self.tabs)

        self.tasks_widget = TasksWidget(self.state)
        self.tasks_widget.tasks_changed.connect(self._on_tasks_changed)
        self.tabs.addTab(self.tasks_widget, "Tasks")

        self.games_widget = GamesWidget(self.state, self.ledger)
        self.games_widget.trigger_requested.connect(self._on_trigger_now)
        self.games_widget.theme_changed.connect(self._apply_theme)
        self.games_widget.data_reset.connect(self._on_data_reset)
        self.tabs.addTab(self.games_widget, "Brain Breaks")

        self.notifications_widget = NotificationsWidget(self.state)
        self.notifications_widget.btn_mark_read.clicked.connect(self._on_mark_read)
        self.tabs.addTab(self.notifications_widget, "Notifications")

        self.analytics_widget = AnalyticsWidget(self.state, self.ledger)
        self.tabs.addTab(self.analytics_widget, "Analytics")

        self.tabs.currentChanged.connect(self._on_tab_changed)
        self._update_notification_badge()

    def _setup_tray(self) -> None:
        """Tray icon: minimize target and system alert channel."""
        self.tray = QSystemTrayIcon(self)
        self.tray.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogInfoView))
        self.tray.setToolTip("OmniTask")

        tray_menu = QMenu(self)
        show_action = tray_menu.addAction("Show")
        show_action.triggered.connect(self._show_window)
        quit_action = tray_menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)
        self.tray.setContextMenu(tray_menu)
        self.tray.activated.connect(self._on_tray_activated)
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()

    # ── User session ────────────────────────────────────────────────────

    @Slot()
    def _ensure_signed_in(self) -> None:
        if self.auth.is_logged_in:
            self._start_user_session()
            return
        dialog = LoginDialog(self.auth, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            logger.info("Sign-in cancelled, quitting.")
            self._quit_app()
            return
        self._start_user_session()

    def _start_user_session(self) -> None:
        user = self.auth.current_user
        self.user_label.setText(f"Signed in as {user.name}")
        self.scheduler.start()
        self._refresh_all()
        self._show_window()

    @Slot()
    def _on_logout(self) -> None:
        self._end_user_session()
        self.auth.logout()
        self.user_label.setText("")
        self.hide()
        self._ensure_signed_in()

    def _end_user_session(self) -> None:
        """Stop every timer and tear down an open popup."""
        self.scheduler.stop()
        if self._popup is not None:
            self._popup.shutdown()

    # ── Brain-break popups ──────────────────────────────────────────────

    def _open_popup(self, game: BrainGame) -> None:
        """Show the popup for a game whose slot has already been claimed."""
        try:
            popup = GamePopupDialog(game, self.state.settings, self)
        except Exception:
            self.state.close_popup()
            raise
        popup.game_finished.connect(self._on_game_finished)
        self._popup = popup
        popup.open()
        popup.raise_()
        popup.activateWindow()

    @Slot()
    def _on_trigger_now(self) -> None:
        try:
            game = self.trigger.trigger_now()
        except OmniTaskError as e:
            QMessageBox.information(self, "Brain Break", str(e))
            return
        self._open_popup(game)

    @Slot(object, object)
    def _on_game_finished(self, game: BrainGame, result: GameResult) -> None:
        try:
            self.ledger.record(game, result)
        finally:
            self.state.close_popup()
            if self._popup is not None:
                self._popup.deleteLater()
            self._popup = None
        self.games_widget.refresh()
        if self.tabs.currentIndex() == TAB_ANALYTICS:
            self.analytics_widget.refresh_data()

    # ── Notifications ───────────────────────────────────────────────────

    def _system_alert(self, title: str, message: str) -> None:
        if self.tray.isVisible() and QSystemTrayIcon.supportsMessages():
            self.tray.showMessage(title, message, QSystemTrayIcon.MessageIcon.Information, TRAY_MESSAGE_MS)

    def _on_new_notifications(self, created: List[AppNotification]) -> None:
        self.notifications_widget.refresh()
        self._update_notification_badge()

    @Slot()
    def _on_mark_read(self) -> None:
        self.state.mark_notifications_read()
        self.notifications_widget.refresh()
        self._update_notification_badge()

    def _update_notification_badge(self) -> None:
        unread = self.state.unread_count()
        label = f"Notifications ({unread})" if unread else "Notifications"
        self.tabs.setTabText(TAB_NOTIFICATIONS, label)

    # ── Misc ────────────────────────────────────────────────────────────

    @Slot()
    def _on_tasks_changed(self) -> None:
        # Rescan now so a task flagged for today doesn't wait for the hourly timer
        if self.auth.is_logged_in:
            self.scheduler.run_reminder_scan()

    @Slot(str)
    def _apply_theme(self, theme: str) -> None:
        hints = QGuiApplication.styleHints()
        system_dark = hints.colorScheme() == Qt.ColorScheme.Dark
        QApplication.instance().setStyleSheet(stylesheet_for(theme, system_dark))

    @Slot()
    def _on_data_reset(self) -> None:
        user = self.state.user
        self.repo.reset_all_data()
        self.state.reload()
        self.state.set_user(user)
        self._apply_theme(self.state.theme)
        self._refresh_all()
        QMessageBox.information(self, "Reset", "All data has been reset.")

    def _refresh_all(self) -> None:
        self.tasks_widget.refresh()
        self.games_widget.refresh()
        self.notifications_widget.refresh()
        self._update_notification_badge()
        if self.tabs.currentIndex() == TAB_ANALYTICS:
            self.analytics_widget.refresh_data()

    @Slot(int)
    def _on_tab_changed(self, index: int) -> None:
        if index == TAB_ANALYTICS:
            self.analytics_widget.refresh_data()
        elif index == TAB_GAMES:
            self.games_widget.refresh()
        elif index == TAB_NOTIFICATIONS:
            self.notifications_widget.refresh()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _on_tray_activated(self, reason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.DoubleClick:
            self._show_window()

    def _quit_app(self) -> None:
        self._end_user_session()
        self.tray.hide()
        self.db.close()
        QApplication.quit()

    def closeEvent(self, event: QCloseEvent) -> None:
        # Minimize to tray so reminders and brain breaks keep running
        if self.tray.isVisible():
            event.ignore()
            self.hide()
        else:
            self._quit_app()
            event.accept()


class NotificationsWidget(QWidget):
    """Newest-first notification list; unread entries in bold."""

    def __init__(self, state: AppState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 16, 20, 20)
        header = QHBoxLayout()
        title = QLabel("Notifications")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()
        self.btn_mark_read = QPushButton("Mark all read")
        header.addWidget(self.btn_mark_read)
        layout.addLayout(header)

        self.list = QListWidget()
        layout.addWidget(self.list, 1)
        self.refresh()

    @Slot()
    def refresh(self) -> None:
        self.list.clear()
        items = sorted(self.state.notifications, key=lambda n: n.time, reverse=True)
        if not items:
            self.list.addItem("No notifications yet.")
            return
        for n in items:
            item = QListWidgetItem(f"{n.title}\n{n.message}    {n.time.strftime('%b %d, %H:%M')}")
            if not n.read:
                font = QFont()
                font.setBold(True)
                item.setFont(font)
            self.list.addItem(item)


class LoginDialog(QDialog):
    """Mock sign-in: just a name and an optional e-mail."""

    def __init__(self, auth: AuthService, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.auth = auth
        self.setWindowTitle("Sign in to OmniTask")
        self.setMinimumWidth(360)

        layout = QFormLayout(self)
        self.name_input = QLineEdit()
        self.name_input.setPlaceholderText("Your name")
        layout.addRow("Name:", self.name_input)

        self.email_input = QLineEdit()
        self.email_input.setPlaceholderText("you@example.com (optional)")
        layout.addRow("E-mail:", self.email_input)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.button(QDialogButtonBox.StandardButton.Ok).setText("Sign in")
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    @Slot()
    def _on_accept(self) -> None:
        try:
            self.auth.login(self.name_input.text(), self.email_input.text())
        except ValueError as e:
            QMessageBox.warning(self, "Missing Info", str(e))
            return
        self.accept()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The "control center" of the app. It creates all services, wires them
#   together and hosts the tabs.
#
# Key classes:
#   - MainWindow: QMainWindow subclass. Creates Database, Repository,
#     AppState, AuthService, NotificationService, PopupTriggerScheduler,
#     SchedulerService, ScoreLedger and all UI tabs.
#   - NotificationsWidget: the notification list.
#   - LoginDialog: mock sign-in.
#
# Data flow:
#   Sign-in → scheduler.start() → game tick claims the popup slot →
#   _open_popup() → GamePopupDialog → game_finished → ledger.record() →
#   state.close_popup(). Sign-out or quit → scheduler.stop() and the open
#   popup is aborted, so nothing outlives the user session.
#
# Interviewer-friendly talking points:
#   1. The popup is opened with open(), not exec(): the event loop keeps
#      running, so reminders still fire while a game is on screen.
#   2. close_popup() sits in a finally block, so a failure while recording
#      a score can never leave the slot stuck and block all future popups.
#   3. Minimize-to-tray: closing the window hides it; Quit in the tray menu
#      is the real exit.
