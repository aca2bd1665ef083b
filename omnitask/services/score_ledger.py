"""
Score Ledger — append-only record of completed brain-break games.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from omnitask.data.models import BrainGame, GameScore, GameType
from omnitask.games.session import GameResult
from omnitask.services.app_state import AppState

logger = logging.getLogger(__name__)


class ScoreLedger:
    """Records results and answers leaderboard queries."""

    def __init__(self, state: AppState) -> None:
        self.state = state

    def record(
        self, game: BrainGame, result: GameResult, now: Optional[datetime] = None
    ) -> Optional[GameScore]:
        """Append a score for a completed game; no-op otherwise."""
        if not result.completed:
            return None
        score = GameScore(
            game_title=game.title,
            type=game.type,
            score=int(result.score),
            date=now or datetime.now(),
        )
        self.state.append_score(score)
        logger.info("Score recorded: %s = %d", game.title, score.score)
        return score

    def top_n(self, n: int = 5) -> List[GameScore]:
        """Highest scores first. Equal scores keep insertion order."""
        return sorted(self.state.scores, key=lambda s: s.score, reverse=True)[:n]

    def best_by_type(self) -> Dict[GameType, int]:
        best: Dict[GameType, int] = {}
        for s in self.state.scores:
            if s.score > best.get(s.type, -1):
                best[s.type] = s.score
        return best

    def total_points(self) -> int:
        return sum(s.score for s in self.state.scores)
