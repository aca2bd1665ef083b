"""Unit tests for mini-game content and the game session state machine."""

import random
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from omnitask.data.models import BrainGame, GameType
from omnitask.games import content
from omnitask.games.session import (
    PASSIVE_SCORE, RESULT_DISPLAY_SECONDS, GameResult, GameSession, GameState,
)


class FakeSound:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.played = []
        self.releases = 0

    def play(self, cue: str) -> None:
        self.played.append(cue)
        if self.fail:
            raise RuntimeError("no audio device")

    def release(self) -> None:
        self.releases += 1
        if self.fail:
            raise RuntimeError("no audio device")


class NoShuffle(random.Random):
    def shuffle(self, x, *args, **kwargs):
        pass


def _session(game_type: GameType, duration: int = 30, seed: int = 7, sound=None):
    results = []
    game = BrainGame(title=f"Test {game_type.value}", type=game_type, duration_seconds=duration)
    session = GameSession(game, results.append, rng=random.Random(seed), sound=sound,
                          clock=lambda: 0.0)
    return session, results


class TestContent:
    def test_math_problem_range(self):
        rng = random.Random(3)
        for _ in range(200):
            p = content.math_problem(rng)
            assert content.MATH_MIN <= p.a <= content.MATH_MAX
            assert content.MATH_MIN <= p.b <= content.MATH_MAX
            assert p.answer == p.a + p.b
            assert p.question == f"{p.a} + {p.b}"

    def test_seeded_problems_repeat(self):
        assert content.math_problem(random.Random(42)) == content.math_problem(random.Random(42))

    def test_memory_sequence_is_six_digits(self):
        rng = random.Random(5)
        for _ in range(100):
            code = content.memory_sequence(rng)
            assert len(code) == 6 and code.isdigit() and code[0] != "0"

    def test_scramble_always_differs(self):
        rng = random.Random(11)
        for word in content.PUZZLE_WORDS:
            for _ in range(20):
                scrambled = content.scramble(word, rng)
                assert scrambled != word
                assert sorted(scrambled) == sorted(word)

    def test_scramble_fallback_rotates(self):
        assert content.scramble("TASK", NoShuffle(1)) == "ASKT"

    def test_scramble_single_letter_word(self):
        assert content.scramble("AAA", random.Random(1)) == "AAA"

    def test_scramble_word_uses_word_list(self):
        puzzle = content.scramble_word(random.Random(9))
        assert puzzle.original in content.PUZZLE_WORDS
        assert puzzle.scrambled != puzzle.original

    def test_reflex_position_range(self):
        rng = random.Random(2)
        for _ in range(100):
            top, left = content.reflex_position(rng)
            assert content.REFLEX_MIN_PCT <= top <= content.REFLEX_MAX_PCT
            assert content.REFLEX_MIN_PCT <= left <= content.REFLEX_MAX_PCT


class TestMath:
    def test_correct_answer_scores_by_time_left(self):
        s, results = _session(GameType.MATH, duration=30)
        s.start(now=0.0)
        s.tick(now=4.0)
        assert s.time_left == 26
        assert s.submit(str(s.math.answer), now=4.1) is GameState.SUCCESS
        assert s.final_score == 100 + 26 * 10
        assert results == []

        s.tick(now=4.1 + RESULT_DISPLAY_SECONDS)
        assert results == [GameResult(completed=True, score=360)]

    def test_wrong_answer_fails_then_recovers(self):
        s, results = _session(GameType.MATH)
        s.start(now=0.0)
        s.input_text = "0"
        assert s.submit(now=0.5) is GameState.FAIL_TRANSIENT
        assert s.input_text == ""

        # Answers are ignored during the error feedback
        assert s.submit(str(s.math.answer), now=0.7) is GameState.FAIL_TRANSIENT

        s.tick(now=0.9)
        assert s.state is GameState.FAIL_TRANSIENT
        s.tick(now=1.0)
        assert s.state is GameState.RUNNING
        assert s.time_left == 30  # paused while failing
        s.tick(now=2.0)
        assert s.time_left == 29
        assert results == []

    def test_non_numeric_answer_is_wrong(self):
        s, _ = _session(GameType.MATH)
        s.start(now=0.0)
        assert s.submit("forty", now=0.1) is GameState.FAIL_TRANSIENT

    def test_submit_before_start_is_ignored(self):
        s, _ = _session(GameType.MATH)
        assert s.submit(str(s.math.answer), now=0.0) is GameState.NOT_STARTED

    def test_timeout_scores_zero(self):
        s, results = _session(GameType.MATH, duration=30)
        s.start(now=0.0)
        s.tick(now=30.0)
        assert s.state is GameState.TIMEOUT
        s.tick(now=30.0 + RESULT_DISPLAY_SECONDS - 0.1)
        assert results == []
        s.tick(now=30.0 + RESULT_DISPLAY_SECONDS)
        assert results == [GameResult(completed=False, score=0)]

    def test_late_answer_after_timeout_is_ignored(self):
        s, _ = _session(GameType.MATH, duration=10)
        s.start(now=0.0)
        s.tick(now=10.0)
        assert s.submit(str(s.math.answer), now=10.5) is GameState.TIMEOUT
        assert s.final_score == 0

    def test_answer_after_deadline_without_tick_times_out(self):
        s, results = _session(GameType.MATH, duration=30)
        s.start(now=0.0)
        assert s.submit(str(s.math.answer), now=45.0) is GameState.TIMEOUT
        assert s.final_score == 0
        assert results == [GameResult(completed=False, score=0)]

    def test_answer_after_error_feedback_without_tick(self):
        s, _ = _session(GameType.MATH, duration=30)
        s.start(now=0.0)
        s.submit("0", now=0.5)
        assert s.submit(str(s.math.answer), now=1.2) is GameState.SUCCESS
        assert s.final_score == 100 + 30 * 10

    def test_single_large_jump_finishes(self):
        s, results = _session(GameType.MATH, duration=30)
        s.start(now=0.0)
        s.tick(now=1000.0)
        assert s.time_left == 0
        assert results == [GameResult(completed=False, score=0)]


class TestMemory:
    def test_answer_rejected_while_code_showing(self):
        s, _ = _session(GameType.MEMORY)
        s.start(now=0.0)
        assert s.memory_showing
        assert s.submit(s.memory_code, now=1.0) is GameState.RUNNING

    def test_correct_after_hide(self):
        s, results = _session(GameType.MEMORY, duration=30)
        s.start(now=0.0)
        s.tick(now=3.0)
        assert not s.memory_showing
        assert s.time_left == 27
        assert s.submit(s.memory_code, now=3.0) is GameState.SUCCESS
        assert s.final_score == 200 + 27 * 15

    def test_submit_after_reveal_without_tick(self):
        s, _ = _session(GameType.MEMORY, duration=30)
        s.start(now=0.0)
        assert s.submit(s.memory_code, now=3.5) is GameState.SUCCESS
        assert s.final_score == 200 + 27 * 15

    def test_wrong_code_fails(self):
        s, _ = _session(GameType.MEMORY)
        s.start(now=0.0)
        s.tick(now=3.0)
        assert s.submit("000000", now=3.1) is GameState.FAIL_TRANSIENT


class TestPuzzle:
    def test_answer_is_case_insensitive(self):
        s, _ = _session(GameType.PUZZLE)
        s.start(now=0.0)
        assert s.submit(f"  {s.puzzle.original.lower()} ", now=0.5) is GameState.SUCCESS
        assert s.final_score == 150 + 30 * 10

    def test_scrambled_word_is_not_the_answer(self):
        s, _ = _session(GameType.PUZZLE)
        s.start(now=0.0)
        assert s.submit(s.puzzle.scrambled, now=0.5) is GameState.FAIL_TRANSIENT


class TestReflex:
    def test_five_hits_win(self):
        s, _ = _session(GameType.REFLEX, duration=20)
        s.start(now=0.0)
        for i in range(4):
            assert s.tap(now=0.1 * (i + 1)) is GameState.RUNNING
        assert s.reflex_hits == 4
        assert s.tap(now=0.5) is GameState.SUCCESS
        assert s.final_score == 150 + 20 * 20

    def test_four_hits_then_timeout(self):
        s, results = _session(GameType.REFLEX, duration=20)
        s.start(now=0.0)
        for _ in range(4):
            s.tap(now=1.0)
        s.tick(now=20.0)
        assert s.state is GameState.TIMEOUT
        s.tap(now=20.1)
        assert s.reflex_hits == 4
        s.tick(now=20.0 + RESULT_DISPLAY_SECONDS)
        assert results == [GameResult(completed=False, score=0)]

    def test_tap_after_deadline_without_tick(self):
        s, _ = _session(GameType.REFLEX, duration=20)
        s.start(now=0.0)
        assert s.tap(now=25.0) is GameState.TIMEOUT
        assert s.reflex_hits == 0

    def test_tap_before_start_is_ignored(self):
        s, _ = _session(GameType.REFLEX)
        assert s.tap(now=0.0) is GameState.NOT_STARTED
        assert s.reflex_hits == 0

    def test_submit_does_nothing_for_reflex(self):
        s, _ = _session(GameType.REFLEX)
        s.start(now=0.0)
        assert s.submit("anything", now=0.1) is GameState.RUNNING


class TestPassive:
    @pytest.mark.parametrize("game_type", [GameType.EXERCISE, GameType.BREATHING])
    def test_expiry_is_success(self, game_type):
        s, results = _session(game_type, duration=10)
        s.start(now=0.0)
        s.tick(now=10.0)
        assert s.state is GameState.SUCCESS
        assert s.final_score == PASSIVE_SCORE
        s.tick(now=10.0 + RESULT_DISPLAY_SECONDS)
        assert results == [GameResult(completed=True, score=PASSIVE_SCORE)]


class TestLifecycle:
    def test_close_before_start(self):
        sound = FakeSound()
        s, results = _session(GameType.MATH, sound=sound)
        assert s.can_close
        assert s.close() is True
        assert results == [GameResult(completed=False, score=0)]
        assert sound.releases == 1
        assert not s.start(now=0.0)

    def test_close_after_start_refused(self):
        s, results = _session(GameType.MATH)
        s.start(now=0.0)
        assert not s.can_close
        assert s.close() is False
        assert results == []

    def test_callback_fires_at_most_once(self):
        s, results = _session(GameType.EXERCISE, duration=5)
        s.start(now=0.0)
        s.tick(now=100.0)
        s.tick(now=200.0)
        s.abort()
        s.close()
        assert len(results) == 1

    def test_abort_while_running(self):
        sound = FakeSound()
        s, results = _session(GameType.MATH, sound=sound)
        s.start(now=0.0)
        s.abort()
        assert results == [GameResult(completed=False, score=0)]
        assert sound.releases == 1

    def test_abort_keeps_reached_success(self):
        s, results = _session(GameType.PUZZLE)
        s.start(now=0.0)
        s.submit(s.puzzle.original, now=1.0)
        s.abort()
        assert results == [GameResult(completed=True, score=s.final_score)]

    def test_start_plays_cue_and_is_single_use(self):
        sound = FakeSound()
        s, _ = _session(GameType.MATH, sound=sound)
        assert s.start(now=0.0)
        assert not s.start(now=1.0)
        assert sound.played == ["start"]

    def test_sound_errors_never_break_the_game(self):
        sound = FakeSound(fail=True)
        s, results = _session(GameType.PUZZLE, sound=sound)
        s.start(now=0.0)
        s.submit("wrong", now=0.1)
        s.tick(now=0.6)
        s.submit(s.puzzle.original, now=0.7)
        s.tick(now=0.7 + RESULT_DISPLAY_SECONDS)
        assert results[0].completed
        assert sound.releases == 1

    def test_release_happens_even_if_callback_raises(self):
        sound = FakeSound()
        game = BrainGame(title="Boom", type=GameType.MATH, duration_seconds=10)

        def boom(result):
            raise ValueError("callback failed")

        s = GameSession(game, boom, rng=random.Random(1), sound=sound)
        with pytest.raises(ValueError):
            s.close()
        assert sound.releases == 1
        assert s.is_finished

    def test_uses_injected_clock(self):
        now = [0.0]
        results = []
        game = BrainGame(title="Clocked", type=GameType.EXERCISE, duration_seconds=3)
        s = GameSession(game, results.append, rng=random.Random(1), clock=lambda: now[0])
        s.start()
        now[0] = 3.0 + RESULT_DISPLAY_SECONDS
        s.tick()
        assert results == [GameResult(completed=True, score=PASSIVE_SCORE)]
