"""Folding of score-update events into running totals."""

import logging
from collections.abc import Mapping
from typing import Any

from .models import RoundScore, ScoreBoard
from .types import Speaker

logger = logging.getLogger(__name__)


def read_score(payload: Mapping[str, Any], *keys: str) -> float:
    """Return the first score present under ``keys`` as a float (0.0 if none)."""
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return float(value)
    return 0.0


class ScoreAggregator:
    """Keeps the authoritative totals and the per-round score log.

    Totals are overwritten with the values reported by the server; they are
    never recomputed from the round log.
    """

    def __init__(self) -> None:
        self.board = ScoreBoard()
        self.round_scores: list[RoundScore] = []

    def update_totals(self, affirmative: float, negative: float) -> ScoreBoard:
        """Overwrite both totals with the latest absolute values."""
        affirmative = max(0.0, affirmative)
        negative = max(0.0, negative)
        if affirmative < self.board.affirmative_total or negative < self.board.negative_total:
            logger.warning(
                f"Score totals decreased: affirmative {self.board.affirmative_total} -> {affirmative}, "
                f"negative {self.board.negative_total} -> {negative}"
            )
        self.board.affirmative_total = affirmative
        self.board.negative_total = negative
        return self.board

    def update_side_totals(self, user_side: Speaker, user_total: float, ai_total: float) -> ScoreBoard:
        """Overwrite totals reported as user/AI for a user arguing ``user_side``."""
        if user_side is Speaker.AFFIRMATIVE:
            return self.update_totals(user_total, ai_total)
        return self.update_totals(ai_total, user_total)

    def record_round(self, round_number: int, affirmative: float, negative: float) -> RoundScore:
        """Append one round's per-side score to the log."""
        entry = RoundScore(round=round_number, affirmative=affirmative, negative=negative)
        self.round_scores.append(entry)
        logger.info(f"Round {round_number} scored: affirmative {affirmative}, negative {negative}")
        return entry

    def reset(self) -> None:
        self.board.affirmative_total = 0.0
        self.board.negative_total = 0.0
        self.round_scores.clear()
