"""Single-cell cursor and numeric input state machine over the score grid."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Protocol

from .constants import CUSTOM_TABLE_SIZE
from .errors import GridIndexError
from .events import HintQueue
from .logging_config import get_logger

logger = get_logger(__name__)


class CellKind(str, Enum):
    """What the open cell edits."""

    SCORE = "score"
    PREDICTION = "prediction"
    RESULT_ENTRY = "result_entry"
    CURVE_PARAMETER = "curve_parameter"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


NUMERIC_KINDS = frozenset({CellKind.SCORE, CellKind.PREDICTION, CellKind.CURVE_PARAMETER})


class CellBoard(Protocol):
    """What the cursor needs to know about the cells it edits."""

    @property
    def num_rounds(self) -> int: ...

    @property
    def num_columns(self) -> int: ...

    @property
    def read_only(self) -> bool: ...

    @property
    def prediction_mode(self) -> bool: ...

    def is_active(self, col: int) -> bool: ...

    def can_edit_curve(self) -> bool: ...

    def read(self, row: int, col: int, kind: CellKind) -> int | None: ...

    def write(self, row: int, col: int, kind: CellKind, value: int | None) -> bool: ...

    def has_prediction(self, row: int, col: int) -> bool: ...

    def has_result(self, row: int, col: int) -> bool: ...

    def round_bids_complete(self, row: int) -> bool: ...

    def record_result(self, row: int, col: int, success: bool) -> bool: ...


@dataclass(frozen=True)
class CursorState:
    """The open cell and the text typed into it so far."""

    row: int
    col: int
    kind: CellKind
    pending_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "col": self.col, "kind": self.kind.value, "pending_text": self.pending_text}


def parse_pending(text: str, kind: CellKind) -> tuple[bool, int | None]:
    """Parse typed text into the value to store.

    Empty text means 0 for scores and "unset" for bids and table entries. Text such
    as a lone ``-`` is not a value yet.
    """
    if text == "":
        return True, (0 if kind is CellKind.SCORE else None)
    try:
        value = int(text)
    except ValueError:
        return False, None
    if kind is CellKind.PREDICTION and value < 0:
        return False, None
    return True, value


class CellCursor:
    """Tracks the one open cell and writes every keystroke straight through to the board.

    Illegal transitions (inactive columns, locked bids, grid edges) return ``False``
    and leave state untouched. Successful opens and moves queue scroll/focus hints.
    """

    def __init__(self, board: CellBoard, hints: HintQueue | None = None):
        self.board = board
        self.hints = hints if hints is not None else HintQueue()
        self.state: CursorState | None = None

    # -- opening -----------------------------------------------------------------

    def _check_bounds(self, row: int, col: int, kind: CellKind) -> None:
        if kind is CellKind.CURVE_PARAMETER:
            if row != 0 or not 0 <= col < CUSTOM_TABLE_SIZE:
                raise GridIndexError(row, col, (1, CUSTOM_TABLE_SIZE))
            return
        shape = (self.board.num_rounds, self.board.num_columns)
        if not 0 <= row < shape[0] or not 0 <= col < shape[1]:
            raise GridIndexError(row, col, shape)

    def can_open(self, row: int, col: int, kind: CellKind) -> bool:
        board = self.board
        if kind is CellKind.CURVE_PARAMETER:
            return board.can_edit_curve()
        if board.read_only or not board.is_active(col):
            return False
        if kind is CellKind.SCORE:
            return not board.prediction_mode
        if not board.prediction_mode:
            return False
        if kind is CellKind.PREDICTION:
            return not board.has_result(row, col)
        # Results open only after every active player in the round has bid.
        return board.has_prediction(row, col) and board.round_bids_complete(row)

    def open(self, row: int, col: int, kind: CellKind | str = CellKind.SCORE) -> bool:
        """Open a cell for editing; returns ``False`` when the cell may not be opened."""
        kind = CellKind(kind)
        if kind is not CellKind.CURVE_PARAMETER and self.board.read_only:
            logger.debug("Rejected open of %s cell (%d, %d): board is read-only", kind.value, row, col)
            return False
        self._check_bounds(row, col, kind)
        if not self.can_open(row, col, kind):
            logger.debug("Rejected open of %s cell (%d, %d)", kind.value, row, col)
            return False
        self._enter(row, col, kind)
        return True

    def _enter(self, row: int, col: int, kind: CellKind) -> None:
        if kind is CellKind.RESULT_ENTRY:
            text = ""
        else:
            value = self.board.read(row, col, kind)
            text = "" if value is None else str(value)
        self.state = CursorState(row=row, col=col, kind=kind, pending_text=text)
        self.hints.cell_opened(row, col, kind.value)

    def close(self) -> None:
        self.state = None

    # -- typing ------------------------------------------------------------------

    def _set_text(self, text: str) -> bool:
        state = self.state
        if state is None or state.kind not in NUMERIC_KINDS:
            return False
        self.state = replace(state, pending_text=text)
        ok, value = parse_pending(text, state.kind)
        if ok:
            self.board.write(state.row, state.col, state.kind, value)
        return True

    def type_digit(self, digit: int | str) -> bool:
        digit = str(digit)
        if len(digit) != 1 or not digit.isdigit() or self.state is None:
            return False
        current = self.state.pending_text
        return self._set_text(digit if current == "0" else current + digit)

    def backspace(self) -> bool:
        if self.state is None:
            return False
        return self._set_text(self.state.pending_text[:-1])

    def clear(self) -> bool:
        return self._set_text("")

    def toggle_sign(self) -> bool:
        state = self.state
        if state is None or state.kind is not CellKind.SCORE:
            return False
        text = state.pending_text
        if text.startswith("-"):
            return self._set_text(text[1:])
        if text and text != "0":
            return self._set_text("-" + text)
        return False

    def quick_adjust(self, delta: int) -> bool:
        state = self.state
        if state is None or state.kind not in NUMERIC_KINDS:
            return False
        try:
            current = int(state.pending_text or "0")
        except ValueError:
            current = 0
        updated = current + int(delta)
        if updated < 0 and state.kind is CellKind.PREDICTION:
            return False
        return self._set_text(str(updated))

    # -- committing --------------------------------------------------------------

    def commit(self) -> bool:
        """Store the typed value and advance; malformed text stays put."""
        state = self.state
        if state is None or state.kind not in NUMERIC_KINDS:
            return False
        ok, value = parse_pending(state.pending_text, state.kind)
        if not ok:
            logger.debug("Ignoring malformed entry %r at (%d, %d)", state.pending_text, state.row, state.col)
            return False
        self.board.write(state.row, state.col, state.kind, value)

        if state.kind is CellKind.SCORE:
            target = self._next_score_cell(state.row, state.col)
        elif state.kind is CellKind.PREDICTION:
            target = self._next_prediction_cell(state.row, state.col)
        else:
            target = (0, state.col + 1) if state.col + 1 < CUSTOM_TABLE_SIZE else None

        if target is None:
            self.close()
        else:
            self._enter(target[0], target[1], state.kind)
        return True

    def _next_score_cell(self, row: int, col: int) -> tuple[int, int] | None:
        for next_col in range(col + 1, self.board.num_columns):
            if self.can_open(row, next_col, CellKind.SCORE):
                return row, next_col
        for next_row in range(row + 1, self.board.num_rounds):
            for next_col in range(self.board.num_columns):
                if self.can_open(next_row, next_col, CellKind.SCORE):
                    return next_row, next_col
        return None

    def _next_prediction_cell(self, row: int, col: int) -> tuple[int, int] | None:
        kind = CellKind.PREDICTION
        # Bids may arrive out of order; stay in the round until every open bid is in.
        columns = list(range(col + 1, self.board.num_columns)) + list(range(col))
        for next_col in columns:
            if self.can_open(row, next_col, kind) and self.board.read(row, next_col, kind) is None:
                return row, next_col
        for next_row in range(row + 1, self.board.num_rounds):
            for next_col in range(self.board.num_columns):
                if self.can_open(next_row, next_col, kind):
                    return next_row, next_col
        return None

    def record_result(self, success: bool) -> bool:
        """Mark the open bid as made or missed, then move to the next unresolved bid in the round."""
        state = self.state
        if state is None or state.kind is not CellKind.RESULT_ENTRY:
            return False
        if not self.board.record_result(state.row, state.col, bool(success)):
            return False

        columns = list(range(state.col + 1, self.board.num_columns)) + list(range(state.col))
        for next_col in columns:
            if (
                self.board.is_active(next_col)
                and self.board.has_prediction(state.row, next_col)
                and not self.board.has_result(state.row, next_col)
            ):
                self._enter(state.row, next_col, CellKind.RESULT_ENTRY)
                return True
        self.close()
        return True

    # -- navigation --------------------------------------------------------------

    def move(self, direction: Direction | str) -> bool:
        state = self.state
        if state is None:
            return False
        direction = Direction(direction)
        target = self._move_target(state, direction)
        if target is None:
            return False
        row, col, kind = target
        if not self.can_open(row, col, kind):
            logger.debug("Rejected move %s into %s cell (%d, %d)", direction.value, kind.value, row, col)
            return False
        self._enter(row, col, kind)
        return True

    def _move_target(self, state: CursorState, direction: Direction) -> tuple[int, int, CellKind] | None:
        row, col, kind = state.row, state.col, state.kind

        if kind is CellKind.CURVE_PARAMETER:
            if direction is Direction.LEFT and col > 0:
                return row, col - 1, kind
            if direction is Direction.RIGHT and col + 1 < CUSTOM_TABLE_SIZE:
                return row, col + 1, kind
            return None

        if direction is Direction.UP:
            if kind is CellKind.RESULT_ENTRY:
                return row, col, CellKind.PREDICTION
            return (row - 1, col, kind) if row > 0 else None

        if direction is Direction.DOWN:
            if kind is CellKind.PREDICTION:
                return row, col, CellKind.RESULT_ENTRY
            return (row + 1, col, kind) if row + 1 < self.board.num_rounds else None

        step = -1 if direction is Direction.LEFT else 1
        next_col = col + step
        while 0 <= next_col < self.board.num_columns:
            if self.board.is_active(next_col):
                return row, next_col, kind
            next_col += step
        return None

    # -- structural edits --------------------------------------------------------

    def column_removed(self, col: int) -> None:
        """Keep the cursor aligned after a column is spliced out of the grid."""
        state = self.state
        if state is None or state.kind is CellKind.CURVE_PARAMETER:
            return
        if state.col == col:
            self.close()
        elif state.col > col:
            self.state = replace(state, col=state.col - 1)

    def column_deactivated(self, col: int) -> None:
        state = self.state
        if state is not None and state.kind is not CellKind.CURVE_PARAMETER and state.col == col:
            self.close()
