"""
Chart Backend — QtCharts bar charts for the Analytics tab.

Every public function returns a ready QChartView (a live widget with hover
tooltips, not a static image). Backgrounds are transparent so the charts
sit on whatever theme is active.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from PySide6.QtCore import QMargins, Qt
from PySide6.QtGui import QBrush, QColor, QCursor, QFont, QPainter
from PySide6.QtWidgets import QToolTip
from PySide6.QtCharts import (
    QBarCategoryAxis, QBarSeries, QBarSet, QChart, QChartView,
    QHorizontalBarSeries, QValueAxis,
)

from omnitask.data.models import GameType
from omnitask.services.analytics import DAYS_OF_WEEK, TaskMetrics

logger = logging.getLogger(__name__)

MUTED = QColor("#94a3b8")
GRID_CLR = QColor(148, 163, 184, 50)

PINK = "#ec4899"
PURPLE = "#a855f7"
GREEN = "#22c55e"
BLUE = "#3b82f6"
AMBER = "#f59e0b"
RED = "#f87171"
SLATE = "#64748b"

STATUS_COLORS = [GREEN, BLUE, AMBER, RED, SLATE]


def _base_chart(title: str = "") -> QChart:
    chart = QChart()
    chart.setBackgroundBrush(QBrush(Qt.GlobalColor.transparent))
    chart.setBackgroundRoundness(0)
    chart.setMargins(QMargins(8, 8, 8, 8))
    if title:
        chart.setTitle(title)
        chart.setTitleFont(QFont("Segoe UI", 10))
        chart.setTitleBrush(QBrush(MUTED))
    chart.legend().setVisible(False)
    chart.setAnimationOptions(QChart.AnimationOption.SeriesAnimations)
    chart.setAnimationDuration(400)
    return chart


def _value_axis() -> QValueAxis:
    axis = QValueAxis()
    axis.setLabelsColor(MUTED)
    axis.setLabelsFont(QFont("Segoe UI", 8))
    axis.setLabelFormat("%d")
    axis.setGridLineColor(GRID_CLR)
    axis.setLineVisible(False)
    axis.setMinorGridLineVisible(False)
    return axis


def _cat_axis(categories: List[str]) -> QBarCategoryAxis:
    axis = QBarCategoryAxis()
    axis.append(categories)
    axis.setLabelsColor(MUTED)
    axis.setLabelsFont(QFont("Segoe UI", 8))
    axis.setGridLineVisible(False)
    axis.setLineVisible(False)
    return axis


def make_chart_view(chart: QChart) -> QChartView:
    view = QChartView(chart)
    view.setRenderHint(QPainter.RenderHint.Antialiasing)
    view.setStyleSheet("background: transparent; border: none;")
    view.setMinimumHeight(200)
    return view


# ── Public chart functions ───────────────────────────────────────────────────

def plot_weekly_distribution(counts: Sequence[int]) -> QChartView:
    """Tasks per weekday, Monday first."""
    chart = _base_chart("tasks this week")
    labels = [d[:3] for d in DAYS_OF_WEEK]

    x_axis = _cat_axis(labels)
    y_axis = _value_axis()
    chart.addAxis(x_axis, Qt.AlignmentFlag.AlignBottom)
    chart.addAxis(y_axis, Qt.AlignmentFlag.AlignLeft)

    bar_set = QBarSet("tasks")
    bar_set.setColor(QColor(PINK))
    bar_set.setBorderColor(QColor(0, 0, 0, 0))
    for c in counts:
        bar_set.append(float(c))

    series = QBarSeries()
    series.append(bar_set)
    series.setBarWidth(0.6)

    def _hover(status, idx, barset):
        if status and 0 <= idx < len(labels):
            QToolTip.showText(QCursor.pos(), f"{DAYS_OF_WEEK[idx]}: {int(barset.at(idx))} tasks")

    series.hovered.connect(_hover)
    chart.addSeries(series)
    series.attachAxis(x_axis)
    series.attachAxis(y_axis)

    y_axis.setRange(0, max(counts or [0]) + 1)
    return make_chart_view(chart)


def plot_status_breakdown(metrics: TaskMetrics) -> QChartView:
    chart = _base_chart("status breakdown")

    labels = ["done", "on-going", "pending", "canceled", "to reschedule"]
    values = [
        metrics.completed, metrics.in_progress, metrics.pending,
        metrics.canceled, metrics.rescheduled,
    ]
    if not metrics.total:
        chart.setTitle("status breakdown (no tasks in this period)")

    y_axis = _cat_axis(labels[::-1])
    x_axis = _value_axis()
    chart.addAxis(x_axis, Qt.AlignmentFlag.AlignBottom)
    chart.addAxis(y_axis, Qt.AlignmentFlag.AlignLeft)

    series = QHorizontalBarSeries()
    for label, val, color_hex in zip(labels, values, STATUS_COLORS):
        bar_set = QBarSet(label)
        bar_set.append(float(val))
        bar_set.setColor(QColor(color_hex))
        bar_set.setBorderColor(QColor(0, 0, 0, 0))
        series.append(bar_set)
    series.setBarWidth(0.5)

    def _hover(status, idx, barset):
        if status:
            QToolTip.showText(QCursor.pos(), f"{barset.label()}: {int(barset.at(idx))}")

    series.hovered.connect(_hover)
    chart.addSeries(series)
    series.attachAxis(x_axis)
    series.attachAxis(y_axis)

    x_axis.setRange(0, max(values) + 1)
    return make_chart_view(chart)


def plot_score_by_type(stats: Dict[GameType, Dict[str, float]]) -> QChartView:
    """Mean and best brain-game score per game type."""
    chart = _base_chart("brain-break scores")
    if not stats:
        chart.setTitle("brain-break scores (no games played yet)")
        return make_chart_view(chart)

    types = sorted(stats, key=lambda t: t.value)
    labels = [t.value.title() for t in types]

    x_axis = _cat_axis(labels)
    y_axis = _value_axis()
    chart.addAxis(x_axis, Qt.AlignmentFlag.AlignBottom)
    chart.addAxis(y_axis, Qt.AlignmentFlag.AlignLeft)

    mean_set = QBarSet("mean")
    mean_set.setColor(QColor(PURPLE))
    best_set = QBarSet("best")
    best_set.setColor(QColor(PINK))
    for t in types:
        mean_set.append(stats[t]["mean"])
        best_set.append(stats[t]["best"])

    series = QBarSeries()
    series.append(mean_set)
    series.append(best_set)
    series.setBarWidth(0.7)

    def _hover(status, idx, barset):
        if status and 0 <= idx < len(types):
            plays = int(stats[types[idx]]["plays"])
            QToolTip.showText(
                QCursor.pos(),
                f"{labels[idx]} {barset.label()}: {barset.at(idx):.0f} pts ({plays} plays)",
            )

    series.hovered.connect(_hover)
    chart.addSeries(series)
    series.attachAxis(x_axis)
    series.attachAxis(y_axis)
    chart.legend().setVisible(True)
    chart.legend().setLabelColor(MUTED)

    y_axis.setRange(0, max(s["best"] for s in stats.values()) * 1.15 + 1)
    return make_chart_view(chart)
