"""
Stylesheets for the light and dark themes.

One QSS template filled from a palette dict. The "system" theme follows the
OS colour scheme reported by Qt.
"""

from __future__ import annotations

DARK_PALETTE = {
    "bg": "#0f172a",
    "surface": "#1e293b",
    "raised": "#334155",
    "border": "#475569",
    "text": "#e2e8f0",
    "muted": "#94a3b8",
    "accent": "#ec4899",
    "accent_hover": "#db2777",
    "accent_alt": "#a855f7",
    "success": "#22c55e",
    "danger": "#f87171",
    "on_accent": "#ffffff",
}

LIGHT_PALETTE = {
    "bg": "#f8fafc",
    "surface": "#ffffff",
    "raised": "#f1f5f9",
    "border": "#cbd5e1",
    "text": "#1e293b",
    "muted": "#64748b",
    "accent": "#db2777",
    "accent_hover": "#be185d",
    "accent_alt": "#9333ea",
    "success": "#16a34a",
    "danger": "#dc2626",
    "on_accent": "#ffffff",
}

_TEMPLATE = """
/* ── Base ────────────────────────────────────────────────────────── */
QWidget {
    background-color: %(bg)s;
    color: %(text)s;
    font-family: "Segoe UI", "Inter", sans-serif;
    font-size: 13px;
}

/* ── Buttons ─────────────────────────────────────────────────────── */
QPushButton {
    background-color: %(raised)s;
    color: %(text)s;
    border: 1px solid %(border)s;
    border-radius: 10px;
    padding: 8px 18px;
    font-weight: 600;
}

QPushButton:hover {
    border-color: %(accent)s;
}

QPushButton:disabled {
    color: %(muted)s;
    border-color: %(raised)s;
}

QPushButton#primary {
    background-color: %(accent)s;
    color: %(on_accent)s;
    border: none;
}

QPushButton#primary:hover {
    background-color: %(accent_hover)s;
}

QPushButton#danger {
    background-color: %(danger)s;
    color: %(on_accent)s;
    border: none;
}

QPushButton#reflex_target {
    background-color: %(accent)s;
    border: 4px solid %(on_accent)s;
    border-radius: 28px;
    min-width: 56px;
    max-width: 56px;
    min-height: 56px;
    max-height: 56px;
    padding: 0;
}

/* ── Inputs ──────────────────────────────────────────────────────── */
QLineEdit, QTextEdit, QPlainTextEdit, QSpinBox, QDoubleSpinBox, QDateEdit, QComboBox {
    background-color: %(surface)s;
    color: %(text)s;
    border: 1px solid %(border)s;
    border-radius: 8px;
    padding: 6px 10px;
    selection-background-color: %(accent)s;
}

QLineEdit:focus, QTextEdit:focus {
    border-color: %(accent)s;
}

QLineEdit#answer {
    font-size: 28px;
    font-weight: 700;
    qproperty-alignment: AlignCenter;
}

QLineEdit#answer[error="true"] {
    border: 2px solid %(danger)s;
}

/* ── Labels ──────────────────────────────────────────────────────── */
QLabel {
    background: transparent;
}

QLabel#title {
    font-size: 22px;
    font-weight: 700;
    color: %(accent)s;
}

QLabel#subtitle {
    font-size: 14px;
    color: %(muted)s;
}

QLabel#game_header {
    font-size: 20px;
    font-weight: 700;
    color: %(on_accent)s;
    background-color: %(accent_alt)s;
    border-radius: 12px;
    padding: 14px;
}

QLabel#countdown {
    font-size: 18px;
    font-weight: 700;
    font-family: "Consolas", "Courier New", monospace;
    color: %(accent)s;
}

QLabel#challenge {
    font-size: 44px;
    font-weight: 800;
    font-family: "Consolas", "Courier New", monospace;
    letter-spacing: 6px;
}

QLabel#result_success {
    font-size: 30px;
    font-weight: 800;
    color: %(success)s;
}

QLabel#result_fail {
    font-size: 30px;
    font-weight: 800;
    color: %(danger)s;
}

QLabel#metric_value {
    font-size: 26px;
    font-weight: 700;
    color: %(accent)s;
}

QLabel#metric_label {
    font-size: 11px;
    color: %(muted)s;
}

/* ── Tabs / lists / tables ───────────────────────────────────────── */
QTabWidget::pane {
    border: 1px solid %(raised)s;
    border-radius: 8px;
}

QTabBar::tab {
    background-color: %(surface)s;
    color: %(muted)s;
    padding: 10px 20px;
    margin-right: 2px;
    border-top-left-radius: 8px;
    border-top-right-radius: 8px;
    font-weight: 600;
}

QTabBar::tab:selected {
    color: %(accent)s;
    border-bottom: 2px solid %(accent)s;
}

QListWidget, QTableWidget {
    background-color: %(surface)s;
    border: 1px solid %(raised)s;
    border-radius: 8px;
    gridline-color: %(raised)s;
}

QHeaderView::section {
    background-color: %(raised)s;
    color: %(muted)s;
    border: none;
    padding: 6px;
    font-weight: 600;
}

QGroupBox {
    border: 1px solid %(raised)s;
    border-radius: 8px;
    margin-top: 12px;
    padding-top: 16px;
    font-weight: 600;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 12px;
    padding: 0 6px;
    color: %(accent)s;
}

QCheckBox::indicator:checked {
    background-color: %(accent)s;
    border: 2px solid %(accent)s;
    border-radius: 4px;
}

QSlider::handle:horizontal {
    width: 16px;
    margin: -5px 0;
    background-color: %(accent)s;
    border-radius: 8px;
}
"""


def build_stylesheet(palette: dict) -> str:
    return _TEMPLATE % palette


def stylesheet_for(theme: str, system_is_dark: bool = False) -> str:
    """QSS for 'light', 'dark' or 'system'."""
    dark = theme == "dark" or (theme == "system" and system_is_dark)
    return build_stylesheet(DARK_PALETTE if dark else LIGHT_PALETTE)
