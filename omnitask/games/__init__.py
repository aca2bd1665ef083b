from .content import MathProblem, ScrambledWord
from .session import GameResult, GameSession, GameState

__all__ = ["GameResult", "GameSession", "GameState", "MathProblem", "ScrambledWord"]
