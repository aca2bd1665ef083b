"""
Analytics Widget — task KPIs, period comparison, suggestions and
brain-break score charts.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QComboBox, QFrame, QGridLayout, QHBoxLayout, QLabel, QPushButton,
    QScrollArea, QSizePolicy, QVBoxLayout, QWidget,
)
from PySide6.QtCharts import QChartView

from omnitask.services import analytics
from omnitask.services.analytics import Suggestion
from omnitask.services.app_state import AppState
from omnitask.services.score_ledger import ScoreLedger
from omnitask.ui import charts

logger = logging.getLogger(__name__)

SUGGESTION_COLORS = {
    "info": "#3b82f6",
    "warning": "#f59e0b",
    "alert": "#f87171",
    "success": "#22c55e",
}


class MetricCard(QFrame):
    """Big number with a small caption underneath."""

    def __init__(self, label: str, tooltip: str = "", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setMinimumWidth(120)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setFixedHeight(78)
        if tooltip:
            self.setToolTip(tooltip)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 10, 14, 8)
        layout.setSpacing(2)

        self.value_label = QLabel("-")
        self.value_label.setObjectName("metric_value")
        self.name_label = QLabel(label.lower())
        self.name_label.setObjectName("metric_label")
        layout.addWidget(self.value_label)
        layout.addWidget(self.name_label)

    def set_value(self, value, fmt: str = "{}", suffix: str = "") -> None:
        if value is None:
            self.value_label.setText("-")
        else:
            self.value_label.setText(fmt.format(value) + suffix)


class SectionHeader(QLabel):
    def __init__(self, text: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(text, parent)
        self.setObjectName("subtitle")
        self.setContentsMargins(2, 16, 0, 6)


class ChartSlot(QFrame):
    """Container that holds a QChartView widget, swappable on refresh."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(2, 2, 2, 2)
        self._current_view: Optional[QChartView] = None
        self.setMinimumHeight(220)

    def set_chart(self, view: QChartView) -> None:
        if self._current_view is not None:
            self._layout.removeWidget(self._current_view)
            self._current_view.deleteLater()
        self._current_view = view
        self._layout.addWidget(view)


class SuggestionPanel(QFrame):
    """Rule-based advice for the selected period."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(14, 10, 14, 10)
        self._labels: List[QLabel] = []

    def set_suggestions(self, items: List[Suggestion]) -> None:
        for label in self._labels:
            self._layout.removeWidget(label)
            label.deleteLater()
        self._labels = []
        if not items:
            items = [Suggestion("Steady Progress", "Nothing to flag for this period.", "info")]
        for s in items:
            color = SUGGESTION_COLORS.get(s.kind, SUGGESTION_COLORS["info"])
            label = QLabel(f'<b style="color: {color};">{s.title}</b><br>{s.text}')
            label.setWordWrap(True)
            label.setTextFormat(Qt.TextFormat.RichText)
            self._layout.addWidget(label)
            self._labels.append(label)


class AnalyticsWidget(QWidget):
    """The Analytics tab."""

    def __init__(self, state: AppState, ledger: ScoreLedger, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state
        self.ledger = ledger
        self._setup_ui()

    def _setup_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        outer.addWidget(scroll)

        content = QWidget()
        layout = QVBoxLayout(content)
        layout.setSpacing(8)
        layout.setContentsMargins(20, 16, 20, 20)

        # ── Header ────────────────────────────────────────────────────
        header = QHBoxLayout()
        title = QLabel("Analytics")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()
        header.addWidget(QLabel("Timeframe:"))
        self.timeframe_combo = QComboBox()
        for tf in analytics.TIMEFRAMES:
            self.timeframe_combo.addItem(f"This {tf.lower()}", tf)
        self.timeframe_combo.currentIndexChanged.connect(self.refresh_data)
        header.addWidget(self.timeframe_combo)
        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.refresh_data)
        header.addWidget(refresh_btn)
        layout.addLayout(header)

        # ── Today ─────────────────────────────────────────────────────
        layout.addWidget(SectionHeader("Today"))
        today_row = QHBoxLayout()
        self.card_today_tasks = MetricCard("Tasks today")
        self.card_today_open = MetricCard("Still open")
        self.card_today_meetings = MetricCard("Meetings")
        for card in (self.card_today_tasks, self.card_today_open, self.card_today_meetings):
            today_row.addWidget(card)
        layout.addLayout(today_row)

        # ── Period KPIs ───────────────────────────────────────────────
        layout.addWidget(SectionHeader("Selected period"))
        grid = QGridLayout()
        grid.setSpacing(8)
        self.card_total = MetricCard("Total tasks")
        self.card_rate = MetricCard("Completion rate", "Done tasks as a share of all tasks in the period.")
        self.card_efficiency = MetricCard(
            "Efficiency", "Like completion rate, but on-going tasks count as half done.")
        self.card_trend = MetricCard("Vs previous period", "Change in completion rate, in points.")
        self.card_level = MetricCard("Level")
        self.card_best_day = MetricCard("Most productive day")
        self.card_location = MetricCard("Top location")
        self.card_points = MetricCard("Brain-break points")
        cards = [
            self.card_total, self.card_rate, self.card_efficiency, self.card_trend,
            self.card_level, self.card_best_day, self.card_location, self.card_points,
        ]
        for i, card in enumerate(cards):
            grid.addWidget(card, i // 4, i % 4)
        layout.addLayout(grid)

        layout.addWidget(SectionHeader("Suggestions"))
        self.suggestion_panel = SuggestionPanel()
        layout.addWidget(self.suggestion_panel)

        # ── Charts ────────────────────────────────────────────────────
        layout.addWidget(SectionHeader("Charts"))
        chart_row = QHBoxLayout()
        self.chart_week = ChartSlot()
        self.chart_status = ChartSlot()
        chart_row.addWidget(self.chart_week)
        chart_row.addWidget(self.chart_status)
        layout.addLayout(chart_row)
        self.chart_scores = ChartSlot()
        layout.addWidget(self.chart_scores)

        layout.addStretch()
        scroll.setWidget(content)

    @Slot()
    def refresh_data(self) -> None:
        today = date.today()
        tasks = self.state.tasks
        timeframe = self.timeframe_combo.currentData() or analytics.TIMEFRAMES[0]

        overview = analytics.today_overview(tasks, self.state.meetings, today)
        self.card_today_tasks.set_value(overview["tasks_today"])
        self.card_today_open.set_value(overview["open_today"])
        self.card_today_meetings.set_value(overview["meetings_today"])

        current, previous = analytics.split_periods(tasks, timeframe, today)
        metrics = analytics.compute_metrics(current)
        change = analytics.trend(metrics, analytics.compute_metrics(previous))
        day, day_count = analytics.best_day(current)
        location, _ = analytics.top_location(current)

        self.card_total.set_value(metrics.total)
        self.card_rate.set_value(metrics.rate, suffix="%")
        self.card_efficiency.set_value(metrics.efficiency, suffix="%")
        self.card_trend.set_value(change, fmt="{:+d}", suffix=" pts")
        self.card_level.set_value(analytics.productivity_level(metrics))
        self.card_best_day.set_value(day if not day_count else f"{day} ({day_count})")
        self.card_location.set_value(location)
        self.card_points.set_value(self.ledger.total_points())

        self.suggestion_panel.set_suggestions(analytics.suggestions(metrics))

        self.chart_week.set_chart(
            charts.plot_weekly_distribution(analytics.weekly_distribution(tasks, today)))
        self.chart_status.set_chart(charts.plot_status_breakdown(metrics))
        self.chart_scores.set_chart(
            charts.plot_score_by_type(analytics.score_stats(self.state.scores)))

        logger.info("Analytics refreshed: %d tasks in %s", metrics.total, timeframe)
