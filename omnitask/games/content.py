"""
Random content for the mini-games.

Every generator takes a random.Random, so a fixed seed gives a fixed
problem. Production code passes an unseeded instance.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Tuple

MATH_MIN = 10
MATH_MAX = 59
MEMORY_MIN = 100000
MEMORY_MAX = 999999
REFLEX_MIN_PCT = 15.0
REFLEX_MAX_PCT = 85.0
MAX_SCRAMBLE_ATTEMPTS = 20

PUZZLE_WORDS = (
    "FOCUS", "TASK", "GOAL", "TIME", "PLAN", "WORK",
    "MIND", "FAST", "DONE", "IDEA", "SUCCESS", "POWER",
)


@dataclass(frozen=True)
class MathProblem:
    a: int
    b: int

    @property
    def question(self) -> str:
        return f"{self.a} + {self.b}"

    @property
    def answer(self) -> int:
        return self.a + self.b


@dataclass(frozen=True)
class ScrambledWord:
    original: str
    scrambled: str


def math_problem(rng: random.Random) -> MathProblem:
    return MathProblem(rng.randint(MATH_MIN, MATH_MAX), rng.randint(MATH_MIN, MATH_MAX))


def memory_sequence(rng: random.Random) -> str:
    return str(rng.randint(MEMORY_MIN, MEMORY_MAX))


def scramble(word: str, rng: random.Random) -> str:
    """Shuffle the letters of `word` so the result differs from it."""
    if len(set(word)) < 2:
        return word  # nothing to shuffle
    letters = list(word)
    for _ in range(MAX_SCRAMBLE_ATTEMPTS):
        rng.shuffle(letters)
        candidate = "".join(letters)
        if candidate != word:
            return candidate
    # Rotating by one always changes a word with two distinct letters
    return word[1:] + word[0]


def scramble_word(rng: random.Random, words: Tuple[str, ...] = PUZZLE_WORDS) -> ScrambledWord:
    original = rng.choice(words)
    return ScrambledWord(original=original, scrambled=scramble(original, rng))


def reflex_position(rng: random.Random) -> Tuple[float, float]:
    """Target position as (top, left) percentages of the play area."""
    return (
        rng.uniform(REFLEX_MIN_PCT, REFLEX_MAX_PCT),
        rng.uniform(REFLEX_MIN_PCT, REFLEX_MAX_PCT),
    )
