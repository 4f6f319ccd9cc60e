"""
Unit tests for the categorization score board.
"""
import pytest

from market_mirror.processing.scoreboard import (FINAL_IMPORT, REMOVED_EXPLICIT,
                                                 REMOVED_NONPOSITIVE, SET_EXPLICIT, ScoreBoard)


class TestScoreBoard:
    """Test suite for ScoreBoard."""

    def test_add_initializes_lazily(self):
        board = ScoreBoard()
        board.add("flower", 3, "keyword")
        board.add("flower", 2, "title")
        assert board.get("flower") == 5
        assert [e.running_total for e in board.trace()] == [3, 5]

    def test_demote_to_nonpositive_removes(self):
        board = ScoreBoard()
        board.add("edibles", 5, "keyword")
        board.demote("edibles", 10, "negative keyword")

        assert "edibles" not in board
        assert board.snapshot() == {}
        trace = board.trace()
        assert [(e.delta, e.running_total, e.reason) for e in trace] == [
            (5, 5, "keyword"),
            (-10, -5, "negative keyword"),
            (0, 0, REMOVED_NONPOSITIVE),
        ]

    def test_demote_to_exactly_zero_removes(self):
        board = ScoreBoard()
        board.add("a", 2)
        board.demote("a", 2)
        assert "a" not in board

    def test_demote_unknown_category(self):
        board = ScoreBoard()
        board.demote("ghost", 1, "r")
        assert len(board) == 0
        assert board.trace()[-1].reason == REMOVED_NONPOSITIVE

    def test_demote_keeps_positive(self):
        board = ScoreBoard()
        board.add("a", 5)
        board.demote("a", 2)
        assert board.get("a") == 3

    def test_set_and_remove(self):
        board = ScoreBoard()
        board.set("a", 7)
        assert board.get("a") == 7
        assert board.trace()[-1].reason == SET_EXPLICIT
        board.remove("a")
        assert board.get("a") is None
        assert board.trace()[-1].reason == REMOVED_EXPLICIT
        board.remove("a")
        assert len(board.trace()) == 2

    def test_import_final_skips_non_numeric(self):
        board = ScoreBoard()
        board.import_final({"a": 1, "b": 2.5, "c": "3", "d": True, "e": None})
        assert board.snapshot() == {"a": 1, "b": 2.5}
        assert {e.reason for e in board.trace()} == {FINAL_IMPORT}

    def test_snapshot_is_a_copy(self):
        board = ScoreBoard()
        board.add("a", 1)
        snap = board.snapshot()
        snap["a"] = 100
        assert board.get("a") == 1

    def test_trace_is_a_copy(self):
        board = ScoreBoard()
        board.add("a", 1)
        board.trace().clear()
        assert len(board.trace()) == 1

    def test_trace_dicts(self):
        board = ScoreBoard()
        board.add("a", 1, "why")
        assert board.trace_dicts() == [
            {"category": "a", "delta": 1, "runningTotal": 1, "reason": "why"}
        ]

    def test_entries_are_immutable(self):
        board = ScoreBoard()
        board.add("a", 1)
        with pytest.raises(Exception):
            board.trace()[0].delta = 5
