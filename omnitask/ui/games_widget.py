"""
Games Panel — brain-break catalog, trigger settings, leaderboard and
data management.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QAbstractItemView, QCheckBox, QComboBox, QDialog, QDialogButtonBox,
    QFileDialog, QFormLayout, QGridLayout, QGroupBox, QHBoxLayout,
    QHeaderView, QLabel, QLineEdit, QMessageBox, QPushButton, QScrollArea,
    QSlider, QSpinBox, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from omnitask.data.models import BrainGame, GameType
from omnitask.data.repository import THEMES
from omnitask.services.app_state import AppState
from omnitask.services.score_ledger import ScoreLedger

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 5


class GamesWidget(QWidget):
    """Catalog table, settings group and top-5 leaderboard."""

    settings_changed = Signal()
    trigger_requested = Signal()
    theme_changed = Signal(str)
    data_reset = Signal()

    def __init__(self, state: AppState, ledger: ScoreLedger, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state
        self.ledger = ledger
        self._loading = False
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        outer.addWidget(scroll)

        content = QWidget()
        layout = QVBoxLayout(content)
        layout.setSpacing(12)
        layout.setContentsMargins(20, 16, 20, 20)

        header = QHBoxLayout()
        title = QLabel("Brain Breaks")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()
        trigger_btn = QPushButton("Trigger Now")
        trigger_btn.setObjectName("primary")
        trigger_btn.clicked.connect(self.trigger_requested.emit)
        header.addWidget(trigger_btn)
        layout.addLayout(header)

        # ── Settings + leaderboard (side by side) ───────────────────────
        top_row = QHBoxLayout()
        top_row.setSpacing(12)

        settings_group = QGroupBox("Popup Settings")
        grid = QGridLayout(settings_group)
        grid.setSpacing(6)

        self.cb_enabled = QCheckBox("Random brain breaks")
        self.cb_enabled.toggled.connect(lambda v: self._update_setting(enabled=v))
        grid.addWidget(self.cb_enabled, 0, 0, 1, 2)

        grid.addWidget(QLabel("Min interval (min):"), 1, 0)
        self.min_spin = QSpinBox()
        self.min_spin.setRange(0, 600)
        self.min_spin.valueChanged.connect(lambda v: self._update_setting(min_interval_minutes=v))
        grid.addWidget(self.min_spin, 1, 1)

        grid.addWidget(QLabel("Max interval (min):"), 2, 0)
        self.max_spin = QSpinBox()
        self.max_spin.setRange(0, 1440)
        self.max_spin.setSpecialValueText("no limit")
        self.max_spin.valueChanged.connect(lambda v: self._update_setting(max_interval_minutes=v))
        grid.addWidget(self.max_spin, 2, 1)

        grid.addWidget(QLabel("Games per day:"), 3, 0)
        self.per_day_spin = QSpinBox()
        self.per_day_spin.setRange(0, 50)
        self.per_day_spin.setSpecialValueText("unlimited")
        self.per_day_spin.valueChanged.connect(lambda v: self._update_setting(games_per_day=v))
        grid.addWidget(self.per_day_spin, 3, 1)

        grid.addWidget(QLabel("Volume:"), 4, 0)
        vol_row = QHBoxLayout()
        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.valueChanged.connect(self._on_volume_changed)
        vol_row.addWidget(self.volume_slider)
        self.vol_label = QLabel("")
        vol_row.addWidget(self.vol_label)
        grid.addLayout(vol_row, 4, 1)

        top_row.addWidget(settings_group, 1)

        board_group = QGroupBox("Leaderboard")
        board_layout = QVBoxLayout(board_group)
        self.board_table = self._make_table(["Game", "Type", "Score", "Date"])
        board_layout.addWidget(self.board_table)
        self.bests_label = QLabel("")
        self.bests_label.setObjectName("subtitle")
        self.bests_label.setWordWrap(True)
        board_layout.addWidget(self.bests_label)
        top_row.addWidget(board_group, 1)
        layout.addLayout(top_row)

        # ── Catalog ─────────────────────────────────────────────────────
        catalog_group = QGroupBox("Game Catalog")
        catalog_layout = QVBoxLayout(catalog_group)
        add_row = QHBoxLayout()
        add_row.addStretch()
        add_btn = QPushButton("Add Game")
        add_btn.clicked.connect(self._on_add_game)
        add_row.addWidget(add_btn)
        catalog_layout.addLayout(add_row)

        self.catalog_table = self._make_table(["Active", "Title", "Type", "Duration", ""])
        header = self.catalog_table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Fixed)
        header.setSectionResizeMode(4, QHeaderView.ResizeMode.Fixed)
        self.catalog_table.setColumnWidth(0, 60)
        self.catalog_table.setColumnWidth(4, 60)
        catalog_layout.addWidget(self.catalog_table)
        layout.addWidget(catalog_group, 1)

        # ── Appearance & data ───────────────────────────────────────────
        data_group = QGroupBox("Appearance & Data")
        data_row = QHBoxLayout(data_group)
        data_row.addWidget(QLabel("Theme:"))
        self.theme_combo = QComboBox()
        for theme in THEMES:
            self.theme_combo.addItem(theme.title(), theme)
        self.theme_combo.currentIndexChanged.connect(self._on_theme_changed)
        data_row.addWidget(self.theme_combo)
        data_row.addStretch()

        export_btn = QPushButton("Export Tasks CSV")
        export_btn.clicked.connect(self._export_csv)
        data_row.addWidget(export_btn)

        reset_btn = QPushButton("Reset All Data")
        reset_btn.setObjectName("danger")
        reset_btn.clicked.connect(self._reset_data)
        data_row.addWidget(reset_btn)
        layout.addWidget(data_group)

        scroll.setWidget(content)

    @staticmethod
    def _make_table(headers) -> QTableWidget:
        table = QTableWidget()
        table.setColumnCount(len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        table.verticalHeader().setVisible(False)
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        return table

    # ── Refresh ─────────────────────────────────────────────────────────

    @Slot()
    def refresh(self) -> None:
        self._loading = True
        try:
            s = self.state.settings
            self.cb_enabled.setChecked(s.enabled)
            self.min_spin.setValue(s.min_interval_minutes)
            self.max_spin.setValue(s.max_interval_minutes)
            self.per_day_spin.setValue(s.games_per_day)
            self.volume_slider.setValue(int(round(s.volume * 100)))
            self.vol_label.setText(f"{int(round(s.volume * 100))}%")
            idx = self.theme_combo.findData(self.state.theme)
            if idx >= 0:
                self.theme_combo.setCurrentIndex(idx)
        finally:
            self._loading = False
        self._refresh_catalog()
        self._refresh_leaderboard()

    def _refresh_catalog(self) -> None:
        games = self.state.games
        self.catalog_table.setRowCount(len(games))
        for row, g in enumerate(games):
            cb = QCheckBox()
            cb.setChecked(g.active)
            cb.toggled.connect(lambda checked, gid=g.id: self._toggle_game(gid))
            cell = QWidget()
            cell_layout = QHBoxLayout(cell)
            cell_layout.setContentsMargins(0, 0, 0, 0)
            cell_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)
            cell_layout.addWidget(cb)
            self.catalog_table.setCellWidget(row, 0, cell)

            self.catalog_table.setItem(row, 1, QTableWidgetItem(g.title))
            self.catalog_table.setItem(row, 2, QTableWidgetItem(g.type.value.title()))
            dur = QTableWidgetItem(f"{g.duration_seconds}s")
            dur.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            self.catalog_table.setItem(row, 3, dur)

            del_btn = QPushButton("Del")
            del_btn.setToolTip(f"Delete '{g.title}'")
            del_btn.clicked.connect(lambda checked, gid=g.id, title=g.title: self._delete_game(gid, title))
            self.catalog_table.setCellWidget(row, 4, del_btn)

    def _refresh_leaderboard(self) -> None:
        top = self.ledger.top_n(LEADERBOARD_SIZE)
        self.board_table.setRowCount(len(top))
        for row, s in enumerate(top):
            self.board_table.setItem(row, 0, QTableWidgetItem(s.game_title))
            self.board_table.setItem(row, 1, QTableWidgetItem(s.type.value.title()))
            score = QTableWidgetItem(str(s.score))
            score.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            self.board_table.setItem(row, 2, score)
            self.board_table.setItem(row, 3, QTableWidgetItem(s.date.strftime("%b %d, %H:%M")))

        bests = self.ledger.best_by_type()
        self.bests_label.setText(
            "Personal bests: " + ", ".join(f"{t.value.title()} {v}" for t, v in bests.items())
            if bests else "Play a game to set a personal best."
        )

    # ── Slots ───────────────────────────────────────────────────────────

    def _update_setting(self, **changes) -> None:
        if self._loading:
            return
        try:
            self.state.update_settings(**changes)
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Setting", str(e))
            self.refresh()
            return
        self.settings_changed.emit()

    @Slot(int)
    def _on_volume_changed(self, value: int) -> None:
        self.vol_label.setText(f"{value}%")
        self._update_setting(volume=value / 100.0)

    def _toggle_game(self, game_id: str) -> None:
        active = self.state.toggle_game(game_id)
        logger.info("Game %s is now %s.", game_id, "active" if active else "inactive")

    def _delete_game(self, game_id: str, title: str) -> None:
        reply = QMessageBox.warning(
            self, "Delete Game", f"Remove '{title}' from the catalog?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.state.delete_game(game_id)
            self._refresh_catalog()

    @Slot()
    def _on_add_game(self) -> None:
        dialog = GameEditDialog(self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        try:
            self.state.add_game(dialog.game())
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Game", str(e))
            return
        self._refresh_catalog()

    @Slot(int)
    def _on_theme_changed(self, index: int) -> None:
        if self._loading:
            return
        theme = self.theme_combo.itemData(index)
        self.state.set_theme(theme)
        self.theme_changed.emit(theme)

    @Slot()
    def _export_csv(self) -> None:
        csv_text = self.state.repo.export_tasks_csv()
        if not csv_text:
            QMessageBox.information(self, "Export", "No tasks to export.")
            return
        path, _ = QFileDialog.getSaveFileName(
            self, "Save CSV", "omnitask_tasks.csv", "CSV files (*.csv)"
        )
        if path:
            Path(path).write_text(csv_text, encoding="utf-8")
            QMessageBox.information(self, "Export", f"Tasks exported to {path}")

    @Slot()
    def _reset_data(self) -> None:
        reply = QMessageBox.warning(
            self, "Reset All Data",
            "This will permanently delete ALL tasks, notes, games, scores and settings.\n"
            "This action cannot be undone.\n\nAre you sure?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.data_reset.emit()


class GameEditDialog(QDialog):
    """Collects the fields of a new catalog entry."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("New Brain Break")
        self.setMinimumWidth(380)

        layout = QFormLayout(self)
        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("e.g. Neck Rolls")
        layout.addRow("Title:", self.title_input)

        self.type_combo = QComboBox()
        for t in GameType:
            self.type_combo.addItem(t.value.title(), t)
        layout.addRow("Type:", self.type_combo)

        self.duration_spin = QSpinBox()
        self.duration_spin.setRange(5, 600)
        self.duration_spin.setValue(30)
        self.duration_spin.setSuffix(" s")
        layout.addRow("Duration:", self.duration_spin)

        self.instructions_input = QLineEdit()
        layout.addRow("Instructions:", self.instructions_input)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    @Slot()
    def _on_accept(self) -> None:
        if not self.title_input.text().strip():
            QMessageBox.warning(self, "Missing Info", "Please enter a title.")
            return
        self.accept()

    def game(self) -> BrainGame:
        return BrainGame(
            title=self.title_input.text().strip(),
            type=self.type_combo.currentData(),
            duration_seconds=self.duration_spin.value(),
            instructions=self.instructions_input.text().strip(),
        )
