"""Cursor state machine: write-through entry, commit advancing, and navigation rules."""

from __future__ import annotations

import pytest

from scoreboard.controller import MatchController
from scoreboard.cursor import CellKind
from scoreboard.errors import GridIndexError
from scoreboard.events import HintType
from scoreboard.models import Player
from scoreboard.prediction import CurveKind, ScoringMode


def _players(*names: str) -> list[Player]:
    return [Player.create(name) for name in names]


def _started(names: tuple[str, ...] = ("Ana", "Ben", "Cy"), rounds: int = 2, mode: str = "standard") -> MatchController:
    controller = MatchController()
    for player in _players(*names):
        controller.select_player(player)
    controller.set_num_rounds(rounds)
    controller.set_scoring_mode(mode)
    assert controller.start_game()
    return controller


def _cell(controller: MatchController) -> tuple[int, int, CellKind] | None:
    state = controller.cursor.state
    if state is None:
        return None
    return state.row, state.col, state.kind


def test_move_right_skips_inactive_column() -> None:
    controller = _started()
    controller.set_player_active(controller.selected_players[1].id, False)

    assert controller.open_cell(0, 0)
    assert controller.move("right")
    assert _cell(controller) == (0, 2, CellKind.SCORE)
    assert controller.move("right") is False
    assert _cell(controller) == (0, 2, CellKind.SCORE)
    assert controller.move("left")
    assert _cell(controller) == (0, 0, CellKind.SCORE)


def test_up_down_stay_inside_grid() -> None:
    controller = _started(rounds=2)

    assert controller.open_cell(0, 1)
    assert controller.move("up") is False
    assert controller.move("down")
    assert _cell(controller) == (1, 1, CellKind.SCORE)
    assert controller.move("down") is False


def test_keystrokes_write_through_before_commit() -> None:
    controller = _started()
    assert controller.open_cell(0, 0)

    controller.type_digit(1)
    controller.type_digit("2")
    assert controller.scores.get(0, 0) == 12

    controller.toggle_sign()
    assert controller.scores.get(0, 0) == -12

    controller.backspace()
    assert controller.scores.get(0, 0) == -1

    controller.backspace()
    assert controller.cursor.state.pending_text == "-"
    assert controller.scores.get(0, 0) == -1
    assert controller.commit() is False
    assert _cell(controller) == (0, 0, CellKind.SCORE)

    controller.clear_entry()
    assert controller.scores.get(0, 0) == 0


def test_quick_adjust_builds_on_pending_value() -> None:
    controller = _started()
    controller.open_cell(1, 2)

    controller.quick_adjust(5)
    controller.quick_adjust(-10)

    assert controller.cursor.state.pending_text == "-5"
    assert controller.scores.get(1, 2) == -5


def test_commit_walks_active_cells_then_closes() -> None:
    controller = _started(rounds=2)
    controller.set_player_active(controller.selected_players[1].id, False)

    controller.open_cell(0, 0)
    controller.type_digit(5)
    assert controller.commit()
    assert _cell(controller) == (0, 2, CellKind.SCORE)
    controller.commit()
    assert _cell(controller) == (1, 0, CellKind.SCORE)
    controller.commit()
    assert _cell(controller) == (1, 2, CellKind.SCORE)
    controller.commit()
    assert controller.cursor.state is None
    assert controller.scores.rows() == [[5, 0, 0], [0, 0, 0]]


def test_inactive_and_finished_cells_do_not_open() -> None:
    controller = _started()
    controller.set_player_active(controller.selected_players[0].id, False)

    assert controller.open_cell(0, 0) is False
    assert controller.cursor.state is None

    controller.set_player_active(controller.selected_players[0].id, True)
    controller.finish()
    assert controller.open_cell(0, 1) is False


def test_out_of_range_open_is_a_programming_error() -> None:
    controller = _started(rounds=2)

    with pytest.raises(GridIndexError):
        controller.open_cell(2, 0)


def test_deactivating_cursor_column_closes_cursor() -> None:
    controller = _started()
    controller.open_cell(0, 1)

    controller.set_player_active(controller.selected_players[1].id, False)

    assert controller.cursor.state is None


def test_open_and_move_queue_presentation_hints() -> None:
    controller = _started()
    controller.hints.drain()

    controller.open_cell(1, 2)
    controller.move("left")
    hints = controller.hints.drain()

    assert [hint.hint_type for hint in hints] == [
        HintType.SCROLL_INTO_VIEW,
        HintType.FOCUS_CELL,
        HintType.SCROLL_INTO_VIEW,
        HintType.FOCUS_CELL,
    ]
    assert (hints[2].row, hints[2].col) == (1, 1)
    assert controller.hints.drain() == []


def test_prediction_commit_steers_back_to_missing_bids() -> None:
    controller = _started(mode="prediction")
    assert controller.open_cell(0, 0, "score") is False

    assert controller.open_cell(0, 1, "prediction")
    controller.type_digit(2)
    controller.commit()
    assert _cell(controller) == (0, 2, CellKind.PREDICTION)

    controller.type_digit(0)
    controller.commit()
    assert _cell(controller) == (0, 0, CellKind.PREDICTION)

    controller.type_digit(1)
    controller.commit()
    assert _cell(controller) == (1, 0, CellKind.PREDICTION)
    assert controller.overlay.predictions.row(0) == [1, 2, 0]


def test_result_entry_scores_and_locks_predictions() -> None:
    controller = _started(mode="prediction")
    assert controller.open_cell(0, 0, "result_entry") is False
    for col, bid in enumerate((1, 2, 0)):
        controller.open_cell(0, col, "prediction")
        controller.type_digit(bid)
    controller.close_cell()

    assert controller.open_cell(0, 0, "result_entry")
    assert controller.record_result(True)
    assert _cell(controller) == (0, 1, CellKind.RESULT_ENTRY)
    controller.record_result(False)
    controller.record_result(True)

    assert controller.cursor.state is None
    assert controller.scores.row(0) == [10, 0, 10]
    assert controller.open_cell(0, 0, "prediction") is False


def test_vertical_moves_between_prediction_and_result() -> None:
    controller = _started(mode="prediction")
    controller.open_cell(1, 0, "prediction")

    assert controller.move("down") is False
    controller.type_digit(3)
    assert controller.move("down") is False
    for col in (1, 2):
        controller.open_cell(1, col, "prediction")
        controller.type_digit(1)
    controller.open_cell(1, 0, "prediction")

    assert controller.move("down")
    assert _cell(controller) == (1, 0, CellKind.RESULT_ENTRY)
    assert controller.move("up")
    assert _cell(controller) == (1, 0, CellKind.PREDICTION)
    assert controller.move("up")
    assert _cell(controller) == (0, 0, CellKind.PREDICTION)


def test_results_wait_for_every_active_bid_in_the_round() -> None:
    controller = _started(mode="prediction")
    for col in (0, 1):
        controller.open_cell(0, col, "prediction")
        controller.type_digit(2)
    controller.close_cell()

    assert controller.open_cell(0, 0, "result_entry") is False
    assert controller.record_result(True) is False
    assert controller.scores.row(0) == [0, 0, 0]

    controller.set_player_active(controller.selected_players[2].id, False)
    assert controller.open_cell(0, 0, "result_entry")
    assert controller.record_result(True)
    assert controller.scores.row(0) == [20, 0, 0]
    assert _cell(controller) == (0, 1, CellKind.RESULT_ENTRY)


def test_prediction_quick_adjust_never_goes_negative() -> None:
    controller = _started(mode="prediction")
    controller.open_cell(0, 0, "prediction")

    assert controller.quick_adjust(-1) is False
    assert controller.quick_adjust(2)
    assert controller.overlay.prediction(0, 0) == 2
    assert controller.toggle_sign() is False


def test_curve_table_is_edited_through_the_cursor_during_setup() -> None:
    controller = MatchController()
    controller.set_scoring_mode(ScoringMode.PREDICTION)
    assert controller.open_cell(0, 0, "curve_parameter") is False

    controller.set_curve_kind(CurveKind.CUSTOM)
    assert controller.open_cell(0, 0, "curve_parameter")
    controller.clear_entry()
    controller.type_digit(7)
    assert controller.commit()
    assert _cell(controller) == (0, 1, CellKind.CURVE_PARAMETER)
    assert controller.move("right")
    assert controller.move("up") is False
    assert controller.curve.custom_table[0] == 7


def test_removed_column_shifts_or_closes_cursor() -> None:
    controller = _started(names=("Ana", "Ben", "Cy", "Dee"))
    controller.open_cell(0, 3)

    controller.remove_player(1)
    assert _cell(controller) == (0, 2, CellKind.SCORE)

    controller.remove_player(2)
    assert controller.cursor.state is None
