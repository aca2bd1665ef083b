"""
Game Popup — the brain-break dialog.

Wraps one GameSession. A 200 ms QTimer calls session.tick() and the widgets
are re-rendered from the session's state after every tick or user action,
so the dialog itself holds no game logic.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QDialog, QFrame, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QStackedWidget, QVBoxLayout, QWidget,
)

from omnitask.audio.sound_manager import SoundManager
from omnitask.data.models import BrainGame, GameSettings, GameType
from omnitask.games.session import (
    REFLEX_REQUIRED_HITS, GameResult, GameSession, GameState,
)

logger = logging.getLogger(__name__)

TICK_MS = 200
BREATH_PHASE_SECONDS = 4

INSTRUCTIONS = {
    GameType.MATH: "Solve the sum before the timer runs out.",
    GameType.MEMORY: "Memorize the code. It disappears after 3 seconds.",
    GameType.PUZZLE: "Unscramble the word.",
    GameType.REFLEX: f"Hit the moving target {REFLEX_REQUIRED_HITS} times.",
    GameType.EXERCISE: "Follow the exercise until the timer ends.",
    GameType.BREATHING: "Breathe with the prompt until the timer ends.",
}

ANSWER_TYPES = (GameType.MATH, GameType.MEMORY, GameType.PUZZLE)

PAGE_INTRO, PAGE_PLAY, PAGE_RESULT = range(3)


class GamePopupDialog(QDialog):
    """
    One brain-break popup.

    Emits `game_finished(game, result)` exactly once, then closes itself.
    Open it with open() or show(); it never blocks the event loop.
    """

    game_finished = Signal(object, object)   # BrainGame, GameResult

    def __init__(
        self,
        game: BrainGame,
        settings: GameSettings,
        parent: Optional[QWidget] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(parent)
        self.game = game
        self.setWindowTitle("Brain Break")
        self.setMinimumSize(460, 420)
        self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, True)
        self.setWindowFlag(Qt.WindowType.WindowContextHelpButtonHint, False)

        # Audio lives exactly as long as this popup's session
        self.sound = SoundManager(enabled=settings.volume > 0, volume=settings.volume)
        self.session = GameSession(game, self._on_session_complete, rng=rng, sound=self.sound)

        self._timer = QTimer(self)
        self._timer.setInterval(TICK_MS)
        self._timer.timeout.connect(self._on_tick)

        self._build_ui()
        self._render()

    # ── UI Construction ─────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(14)
        layout.setContentsMargins(20, 20, 20, 20)

        header = QLabel(f"{self.game.title}\n{self.game.type.value.title()} break")
        header.setObjectName("game_header")
        header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(header)

        self.countdown_label = QLabel("")
        self.countdown_label.setObjectName("countdown")
        self.countdown_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.countdown_label)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_intro_page())
        self.pages.addWidget(self._build_play_page())
        self.pages.addWidget(self._build_result_page())
        layout.addWidget(self.pages, 1)

    def _build_intro_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        desc = QLabel(self.game.instructions or INSTRUCTIONS[self.game.type])
        desc.setObjectName("subtitle")
        desc.setWordWrap(True)
        desc.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(desc)

        layout.addStretch()

        btn_row = QHBoxLayout()
        self.btn_close = QPushButton("Not now")
        self.btn_close.clicked.connect(self._on_close_clicked)
        btn_row.addWidget(self.btn_close)

        self.btn_start = QPushButton("Start")
        self.btn_start.setObjectName("primary")
        self.btn_start.setMinimumHeight(44)
        self.btn_start.clicked.connect(self._on_start_clicked)
        btn_row.addWidget(self.btn_start)
        layout.addLayout(btn_row)
        return page

    def _build_play_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setSpacing(12)

        self.instruction_label = QLabel(INSTRUCTIONS[self.game.type])
        self.instruction_label.setObjectName("subtitle")
        self.instruction_label.setWordWrap(True)
        self.instruction_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.instruction_label)

        self.challenge_label = QLabel("")
        self.challenge_label.setObjectName("challenge")
        self.challenge_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.challenge_label)

        # Answer row (math / memory / puzzle)
        self.answer_row = QWidget()
        row = QHBoxLayout(self.answer_row)
        row.setContentsMargins(0, 0, 0, 0)
        self.answer_input = QLineEdit()
        self.answer_input.setObjectName("answer")
        self.answer_input.setPlaceholderText("Your answer")
        self.answer_input.textChanged.connect(self._on_answer_changed)
        self.answer_input.returnPressed.connect(self._on_submit)
        row.addWidget(self.answer_input, 1)
        self.btn_submit = QPushButton("Submit")
        self.btn_submit.setObjectName("primary")
        self.btn_submit.clicked.connect(self._on_submit)
        row.addWidget(self.btn_submit)
        layout.addWidget(self.answer_row)

        # Reflex play area: the target is positioned absolutely inside it
        self.play_area = QFrame()
        self.play_area.setFrameShape(QFrame.Shape.StyledPanel)
        self.play_area.setMinimumHeight(220)
        self.reflex_target = QPushButton("", self.play_area)
        self.reflex_target.setObjectName("reflex_target")
        self.reflex_target.setFixedSize(56, 56)
        self.reflex_target.clicked.connect(self._on_target_hit)
        layout.addWidget(self.play_area, 1)

        self.feedback_label = QLabel("")
        self.feedback_label.setObjectName("result_fail")
        self.feedback_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.feedback_label)

        is_answer = self.game.type in ANSWER_TYPES
        self.answer_row.setVisible(is_answer)
        self.play_area.setVisible(self.game.type is GameType.REFLEX)
        layout.addStretch()
        return page

    def _build_result_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.addStretch()
        self.result_label = QLabel("")
        self.result_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.result_label)
        self.score_label = QLabel("")
        self.score_label.setObjectName("metric_value")
        self.score_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.score_label)
        layout.addStretch()
        return page

    # ── User actions ────────────────────────────────────────────────────

    @Slot()
    def _on_start_clicked(self) -> None:
        if self.session.start():
            self._timer.start()
            if self.game.type in ANSWER_TYPES:
                self.answer_input.setFocus()
        self._render()

    @Slot()
    def _on_close_clicked(self) -> None:
        self.session.close()

    @Slot(str)
    def _on_answer_changed(self, text: str) -> None:
        self.session.input_text = text

    @Slot()
    def _on_submit(self) -> None:
        state = self.session.submit(self.answer_input.text())
        if state is GameState.FAIL_TRANSIENT:
            self.answer_input.clear()
        self._render()

    @Slot()
    def _on_target_hit(self) -> None:
        self.session.tap()
        self._render()

    @Slot()
    def _on_tick(self) -> None:
        self.session.tick()
        if not self.session.is_finished:
            self._render()

    # ── Rendering ───────────────────────────────────────────────────────

    def _render(self) -> None:
        s = self.session
        self.countdown_label.setText(f"{s.time_left}s" if s.started else f"{self.game.duration_seconds}s")

        if s.state is GameState.NOT_STARTED:
            self.pages.setCurrentIndex(PAGE_INTRO)
            self.btn_close.setVisible(s.can_close)
            return

        if s.is_terminal:
            self.pages.setCurrentIndex(PAGE_RESULT)
            if s.state is GameState.SUCCESS:
                self.result_label.setObjectName("result_success")
                self.result_label.setText("Well done!")
                self.score_label.setText(f"+{s.final_score} pts")
            else:
                self.result_label.setObjectName("result_fail")
                self.result_label.setText("Time's up!")
                self.score_label.setText("0 pts")
            self._repolish(self.result_label)
            return

        self.pages.setCurrentIndex(PAGE_PLAY)
        failing = s.state is GameState.FAIL_TRANSIENT
        self.feedback_label.setText("Try again!" if failing else "")
        self.answer_input.setProperty("error", failing)
        self._repolish(self.answer_input)

        kind = self.game.type
        if kind is GameType.MATH:
            self.challenge_label.setText(s.math.question)
        elif kind is GameType.MEMORY:
            self.challenge_label.setText(s.memory_code if s.memory_showing else "? ? ? ? ? ?")
            self.answer_input.setEnabled(not s.memory_showing)
            self.btn_submit.setEnabled(not s.memory_showing)
        elif kind is GameType.PUZZLE:
            self.challenge_label.setText(s.puzzle.scrambled)
        elif kind is GameType.REFLEX:
            self.challenge_label.setText(f"{s.reflex_hits} / {REFLEX_REQUIRED_HITS}")
            self._place_target()
        elif kind is GameType.BREATHING:
            elapsed = self.game.duration_seconds - s.time_left
            inhale = (elapsed // BREATH_PHASE_SECONDS) % 2 == 0
            self.challenge_label.setText("Breathe in" if inhale else "Breathe out")
        else:
            self.challenge_label.setText(self.game.instructions or "Keep moving!")

    def _place_target(self) -> None:
        if self.session.reflex_target is None:
            return
        top_pct, left_pct = self.session.reflex_target
        area_w = self.play_area.width() - self.reflex_target.width()
        area_h = self.play_area.height() - self.reflex_target.height()
        self.reflex_target.move(int(area_w * left_pct / 100), int(area_h * top_pct / 100))

    @staticmethod
    def _repolish(widget: QWidget) -> None:
        widget.style().unpolish(widget)
        widget.style().polish(widget)

    # ── Completion / teardown ───────────────────────────────────────────

    def _on_session_complete(self, result: GameResult) -> None:
        self._timer.stop()
        logger.info("Popup for '%s' finished: %s", self.game.title, result)
        try:
            self.game_finished.emit(self.game, result)
        finally:
            self.done(QDialog.DialogCode.Accepted)

    def shutdown(self) -> None:
        """Tear the popup down immediately (logout / quit)."""
        self.session.abort()

    def reject(self) -> None:
        # Escape key: only honoured before the game starts
        if self.session.can_close:
            self.session.close()

    def closeEvent(self, event: QCloseEvent) -> None:
        if self.session.is_finished:
            event.accept()
        elif self.session.can_close:
            self.session.close()
            event.accept()
        else:
            # A running game cannot be dismissed
            event.ignore()
