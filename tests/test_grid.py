"""Structural tests for the score grid and its generic matrix base."""

from __future__ import annotations

import pytest

from scoreboard.errors import GridIndexError, GridShapeError
from scoreboard.grid import Matrix, ScoreGrid


def test_totals_track_cell_writes_and_structural_edits() -> None:
    grid = ScoreGrid.zeros(2, 2)
    grid.set_cell(0, 0, 5)
    grid.set_cell(1, 1, -3)
    grid.append_round()
    grid.set_cell(2, 0, 4)
    grid.add_player_column()
    grid.set_cell(2, 2, 7)

    assert grid.shape == (3, 3)
    assert grid.totals() == [9, -3, 7]
    for col, total in enumerate(grid.totals()):
        assert total == sum(row[col] for row in grid.rows())


def test_remove_column_splices_every_round_and_keeps_other_totals() -> None:
    grid = ScoreGrid([[1, 2, 3], [4, 5, 6], [7, 8, 9]], width=3)

    grid.remove_player_column(1)

    assert grid.rows() == [[1, 3], [4, 6], [7, 9]]
    assert grid.totals() == [12, 18]


def test_out_of_range_writes_raise() -> None:
    grid = ScoreGrid.zeros(1, 2)

    with pytest.raises(GridIndexError):
        grid.set_cell(1, 0, 3)
    with pytest.raises(GridIndexError):
        grid.set_cell(0, -1, 3)
    with pytest.raises(GridIndexError):
        grid.remove_player_column(2)


def test_ragged_rows_are_rejected() -> None:
    with pytest.raises(GridShapeError):
        ScoreGrid([[1, 2], [3]], width=2)


def test_prune_keeps_only_played_rounds() -> None:
    grid = ScoreGrid([[0, 0], [3, 1], [0, 0]], width=2)

    pruned = grid.prune_empty_rounds()

    assert pruned.rows() == [[3, 1]]
    assert pruned.totals() == [3, 1]
    assert grid.rows() == [[0, 0], [3, 1], [0, 0]]


def test_remap_columns_follows_sources_and_resizes_rounds() -> None:
    grid = ScoreGrid([[1, 2, 3], [4, 5, 6]], width=3)

    remapped = grid.remap_columns([2, None, 0], num_rounds=3)

    assert isinstance(remapped, ScoreGrid)
    assert remapped.rows() == [[3, 0, 1], [6, 0, 4], [0, 0, 0]]
    assert grid.remap_columns([0], num_rounds=1).rows() == [[1]]


def test_nullable_matrix_uses_its_fill_value() -> None:
    predictions: Matrix[int | None] = Matrix.blank(1, 2, None)
    predictions.set(0, 1, 3)
    predictions.append_round()
    predictions.add_player_column()

    assert predictions.rows() == [[None, 3, None], [None, None, None]]
    assert predictions.column(1) == [3, None]
