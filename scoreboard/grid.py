"""Rounds x players matrices backing the score grid and prediction overlays."""

from __future__ import annotations

import copy
from typing import Generic, Iterable, Self, Sequence, TypeVar

from .errors import GridIndexError, GridShapeError

T = TypeVar("T")


class Matrix(Generic[T]):
    """Row-major matrix with one row per round and one column per player.

    Structural edits keep every row the same width; rows and columns that survive an
    edit keep their values.
    """

    def __init__(self, rows: Iterable[Sequence[T]], width: int, fill: T):
        self.width = width
        self.fill = fill
        self._rows: list[list[T]] = [list(row) for row in rows]
        for index, row in enumerate(self._rows):
            if len(row) != width:
                raise GridShapeError(f"Row {index} has {len(row)} cells, expected {width}.")

    @classmethod
    def blank(cls, num_rounds: int, width: int, fill: T) -> Self:
        return cls([[fill] * width for _ in range(num_rounds)], width, fill)

    @property
    def num_rounds(self) -> int:
        return len(self._rows)

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self._rows), self.width)

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < len(self._rows)) or not (0 <= col < self.width):
            raise GridIndexError(row, col, self.shape)

    def get(self, row: int, col: int) -> T:
        self._check(row, col)
        return self._rows[row][col]

    def set(self, row: int, col: int, value: T) -> None:
        self._check(row, col)
        self._rows[row][col] = value

    def row(self, row: int) -> list[T]:
        if not 0 <= row < len(self._rows):
            raise GridIndexError(row, None, self.shape)
        return list(self._rows[row])

    def column(self, col: int) -> list[T]:
        if not 0 <= col < self.width:
            raise GridIndexError(None, col, self.shape)
        return [row[col] for row in self._rows]

    def rows(self) -> list[list[T]]:
        return [list(row) for row in self._rows]

    def append_round(self) -> None:
        self._rows.append([self.fill] * self.width)

    def add_player_column(self) -> int:
        for row in self._rows:
            row.append(self.fill)
        self.width += 1
        return self.width - 1

    def remove_player_column(self, col: int) -> None:
        if not 0 <= col < self.width:
            raise GridIndexError(None, col, self.shape)
        for row in self._rows:
            del row[col]
        self.width -= 1

    def select_rounds(self, indices: Sequence[int]) -> Self:
        """Return a new matrix holding only the given rounds, in order."""
        for index in indices:
            if not 0 <= index < len(self._rows):
                raise GridIndexError(index, None, self.shape)
        return type(self)([list(self._rows[index]) for index in indices], self.width, self.fill)

    def remap_columns(self, sources: Sequence[int | None], num_rounds: int) -> Self:
        """Build a matrix whose column ``i`` copies old column ``sources[i]``.

        ``None`` yields a blank column. Rounds past ``num_rounds`` are dropped and
        missing rounds are blank.
        """
        rows: list[list[T]] = []
        for row_index in range(num_rounds):
            row: list[T] = []
            for source in sources:
                if source is not None and row_index < len(self._rows):
                    row.append(self.get(row_index, source))
                else:
                    row.append(self.fill)
            rows.append(row)
        return type(self)(rows, len(sources), self.fill)

    def copy(self) -> Self:
        return type(self)(copy.deepcopy(self._rows), self.width, self.fill)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.width == other.width and self._rows == other._rows

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._rows!r}, width={self.width})"


class ScoreGrid(Matrix[int]):
    """Integer score matrix; unset cells are zero."""

    def __init__(self, rows: Iterable[Sequence[int]], width: int, fill: int = 0):
        super().__init__(rows, width, fill)

    @classmethod
    def zeros(cls, num_rounds: int, width: int) -> Self:
        return cls.blank(num_rounds, width, 0)

    def set_cell(self, row: int, col: int, value: int) -> None:
        self.set(row, col, int(value))

    def totals(self) -> list[int]:
        return [sum(row[col] for row in self._rows) for col in range(self.width)]

    def played_round_indices(self) -> list[int]:
        """Indices of rounds with at least one non-zero score."""
        return [index for index, row in enumerate(self._rows) if any(value != 0 for value in row)]

    def prune_empty_rounds(self) -> ScoreGrid:
        return self.select_rounds(self.played_round_indices())
