"""
Tasks Panel — the task table with add / edit / status / delete.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date
from typing import Optional

from PySide6.QtCore import QDate, Qt, Signal, Slot
from PySide6.QtWidgets import (
    QAbstractItemView, QCheckBox, QComboBox, QDateEdit, QDialog,
    QDialogButtonBox, QFormLayout, QHBoxLayout, QHeaderView, QLabel,
    QLineEdit, QMessageBox, QPushButton, QTableWidget, QTableWidgetItem,
    QTextEdit, QVBoxLayout, QWidget,
)

from omnitask.data.models import Task, TaskStatus
from omnitask.services.app_state import AppState

logger = logging.getLogger(__name__)

COLUMNS = ["Date", "Title", "Location", "Status", "Reminder", ""]


class TasksWidget(QWidget):
    """Task list for the signed-in user."""

    tasks_changed = Signal()

    def __init__(self, state: AppState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(20, 16, 20, 20)

        header = QHBoxLayout()
        title = QLabel("Tasks")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()

        self.filter_combo = QComboBox()
        self.filter_combo.addItem("All statuses", None)
        for status in TaskStatus:
            self.filter_combo.addItem(status.value.title(), status)
        self.filter_combo.currentIndexChanged.connect(self.refresh)
        header.addWidget(self.filter_combo)

        add_btn = QPushButton("New Task")
        add_btn.setObjectName("primary")
        add_btn.clicked.connect(self._on_add)
        header.addWidget(add_btn)
        layout.addLayout(header)

        self.table = QTableWidget()
        self.table.setColumnCount(len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        hdr = self.table.horizontalHeader()
        hdr.setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        hdr.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        hdr.setSectionResizeMode(4, QHeaderView.ResizeMode.ResizeToContents)
        hdr.setSectionResizeMode(5, QHeaderView.ResizeMode.Fixed)
        self.table.setColumnWidth(5, 60)
        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.cellDoubleClicked.connect(self._on_edit)
        layout.addWidget(self.table, 1)

        hint = QLabel("Double-click a task to edit it.")
        hint.setObjectName("subtitle")
        layout.addWidget(hint)

    # ── Refresh ─────────────────────────────────────────────────────────

    @Slot()
    def refresh(self) -> None:
        wanted = self.filter_combo.currentData()
        tasks = sorted(
            (t for t in self.state.tasks if wanted is None or t.status is wanted),
            key=lambda t: (t.date, t.created_at),
        )
        self._row_ids = [t.id for t in tasks]
        self.table.setRowCount(len(tasks))
        for row, t in enumerate(tasks):
            date_item = QTableWidgetItem(t.date.strftime("%a %b %d"))
            if t.date == date.today():
                date_item.setText(date_item.text() + "  (today)")
            self.table.setItem(row, 0, date_item)
            self.table.setItem(row, 1, QTableWidgetItem(t.title))
            self.table.setItem(row, 2, QTableWidgetItem(t.location or ""))

            status_combo = QComboBox()
            for status in TaskStatus:
                status_combo.addItem(status.value, status)
            status_combo.setCurrentIndex(list(TaskStatus).index(t.status))
            status_combo.currentIndexChanged.connect(
                lambda idx, tid=t.id, combo=status_combo: self._on_status(tid, combo.itemData(idx))
            )
            self.table.setCellWidget(row, 3, status_combo)

            reminder = QCheckBox()
            reminder.setChecked(t.reminder)
            reminder.toggled.connect(lambda checked, tid=t.id: self._on_reminder(tid, checked))
            self.table.setCellWidget(row, 4, reminder)

            del_btn = QPushButton("Del")
            del_btn.clicked.connect(lambda checked, tid=t.id, title=t.title: self._on_delete(tid, title))
            self.table.setCellWidget(row, 5, del_btn)

    # ── Slots ───────────────────────────────────────────────────────────

    @Slot()
    def _on_add(self) -> None:
        dialog = TaskEditDialog(parent=self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.state.add_task(dialog.task())
            self._changed()

    @Slot(int, int)
    def _on_edit(self, row: int, _column: int) -> None:
        task_id = self._row_ids[row]
        current = next((t for t in self.state.tasks if t.id == task_id), None)
        if current is None:
            return
        dialog = TaskEditDialog(current, parent=self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.state.update_task(dialog.task())
            self._changed()

    def _on_status(self, task_id: str, status: TaskStatus) -> None:
        self.state.set_task_status(task_id, status)
        self.tasks_changed.emit()

    def _on_reminder(self, task_id: str, enabled: bool) -> None:
        task = next((t for t in self.state.tasks if t.id == task_id), None)
        if task is not None:
            self.state.update_task(dataclasses.replace(task, reminder=enabled))
            self.tasks_changed.emit()

    def _on_delete(self, task_id: str, title: str) -> None:
        reply = QMessageBox.warning(
            self, "Delete Task", f"Delete '{title}'? This cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.state.delete_task(task_id)
            self._changed()

    def _changed(self) -> None:
        self.refresh()
        self.tasks_changed.emit()


class TaskEditDialog(QDialog):
    """Create a task, or edit an existing one when `task` is given."""

    def __init__(self, task: Optional[Task] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._original = task
        self.setWindowTitle("Edit Task" if task else "New Task")
        self.setMinimumWidth(420)

        layout = QFormLayout(self)
        self.title_input = QLineEdit(task.title if task else "")
        self.title_input.setPlaceholderText("What needs doing?")
        layout.addRow("Title:", self.title_input)

        self.description_input = QTextEdit(task.description if task else "")
        self.description_input.setFixedHeight(70)
        layout.addRow("Description:", self.description_input)

        self.date_input = QDateEdit()
        self.date_input.setCalendarPopup(True)
        self.date_input.setDate(QDate(task.date) if task else QDate.currentDate())
        layout.addRow("Date:", self.date_input)

        self.location_input = QLineEdit((task.location or "") if task else "")
        layout.addRow("Location:", self.location_input)

        self.status_combo = QComboBox()
        for status in TaskStatus:
            self.status_combo.addItem(status.value, status)
        if task:
            self.status_combo.setCurrentIndex(list(TaskStatus).index(task.status))
        layout.addRow("Status:", self.status_combo)

        self.remarks_input = QLineEdit(task.remarks if task else "")
        layout.addRow("Remarks:", self.remarks_input)

        self.reminder_cb = QCheckBox("Remind me on the day")
        self.reminder_cb.setChecked(task.reminder if task else False)
        layout.addRow("", self.reminder_cb)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    @Slot()
    def _on_accept(self) -> None:
        if not self.title_input.text().strip():
            QMessageBox.warning(self, "Missing Info", "Please enter a task title.")
            return
        self.accept()

    def task(self) -> Task:
        fields = dict(
            title=self.title_input.text().strip(),
            description=self.description_input.toPlainText().strip(),
            date=self.date_input.date().toPython(),
            location=self.location_input.text().strip() or None,
            status=self.status_combo.currentData(),
            remarks=self.remarks_input.text().strip(),
            reminder=self.reminder_cb.isChecked(),
        )
        if self._original is not None:
            return dataclasses.replace(self._original, **fields)
        return Task(**fields)
