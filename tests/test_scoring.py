"""Tests for score aggregation."""

import logging

import pytest

from debate_client.models import RoundScore
from debate_client.scoring import ScoreAggregator, read_score
from debate_client.types import Speaker


def test_read_score_takes_first_present_key() -> None:
    payload = {"affirmativeScore": None, "affirmativeTotal": 0, "negativeScore": "7.5"}

    assert read_score(payload, "affirmativeScore", "affirmativeTotal") == 0.0
    assert read_score(payload, "negativeScore") == 7.5
    assert read_score(payload, "missing") == 0.0


def test_totals_are_overwritten_not_summed() -> None:
    scores = ScoreAggregator()

    scores.update_totals(10.0, 8.0)
    board = scores.update_totals(18.5, 17.0)

    assert (board.affirmative_total, board.negative_total) == (18.5, 17.0)


def test_negative_totals_are_clamped() -> None:
    scores = ScoreAggregator()

    board = scores.update_totals(-3.0, 4.0)

    assert board.affirmative_total == 0.0
    assert board.negative_total == 4.0


def test_decreasing_total_is_accepted_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    scores = ScoreAggregator()
    scores.update_totals(20.0, 20.0)

    with caplog.at_level(logging.WARNING, logger="debate_client.scoring"):
        board = scores.update_totals(15.0, 21.0)

    assert board.affirmative_total == 15.0
    assert "decreased" in caplog.text


def test_side_totals_map_user_and_ai() -> None:
    scores = ScoreAggregator()

    board = scores.update_side_totals(Speaker.NEGATIVE, user_total=12.0, ai_total=9.0)

    assert board.total_for(Speaker.NEGATIVE) == 12.0
    assert board.total_for(Speaker.AFFIRMATIVE) == 9.0
    with pytest.raises(ValueError):
        board.total_for(Speaker.JUDGE)


def test_round_log_does_not_touch_totals() -> None:
    scores = ScoreAggregator()
    scores.update_totals(5.0, 6.0)

    scores.record_round(1, 8.0, 7.0)
    scores.record_round(2, 6.5, 9.0)

    assert scores.round_scores == [RoundScore(1, 8.0, 7.0), RoundScore(2, 6.5, 9.0)]
    assert (scores.board.affirmative_total, scores.board.negative_total) == (5.0, 6.0)


def test_reset_keeps_board_identity() -> None:
    scores = ScoreAggregator()
    board = scores.board
    scores.update_totals(3.0, 4.0)
    scores.record_round(1, 3.0, 4.0)

    scores.reset()

    assert scores.board is board
    assert board.affirmative_total == 0.0
    assert scores.round_scores == []
