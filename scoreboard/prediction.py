"""Prediction-game scoring: bids, results, and point curves."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Self, Sequence

from .constants import CUSTOM_TABLE_SIZE, DEFAULT_CUSTOM_TABLE
from .grid import Matrix, ScoreGrid


class ScoringMode(str, Enum):
    """How round cells are filled in."""

    STANDARD = "standard"
    PREDICTION = "prediction"


class CurveKind(str, Enum):
    """Point curves mapping a bid to its magnitude."""

    STANDARD = "standard"
    PROGRESSIVE = "progressive"
    DYNAMIC = "dynamic"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CurveConfig:
    """Curve selection plus the failure-penalty switch and the custom table."""

    kind: CurveKind = CurveKind.STANDARD
    penalty_enabled: bool = False
    custom_table: tuple[int | None, ...] = field(default=DEFAULT_CUSTOM_TABLE)

    def table_entry(self, index: int) -> int:
        """Custom magnitude for ``index``; missing or unset entries count as 0."""
        if 0 <= index < len(self.custom_table):
            value = self.custom_table[index]
            return int(value) if value is not None else 0
        return 0

    def with_entry(self, index: int, value: int | None) -> Self:
        if not 0 <= index < CUSTOM_TABLE_SIZE:
            raise IndexError(f"Custom table index must be 0-{CUSTOM_TABLE_SIZE - 1}, got {index}.")
        table = list(self.custom_table) + [None] * (CUSTOM_TABLE_SIZE - len(self.custom_table))
        table[index] = value
        return replace(self, custom_table=tuple(table[:CUSTOM_TABLE_SIZE]))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "penalty_enabled": self.penalty_enabled,
            "custom_table": list(self.custom_table),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Self:
        data = data or {}
        table = data.get("custom_table")
        return cls(
            kind=CurveKind(str(data.get("kind", CurveKind.STANDARD.value))),
            penalty_enabled=bool(data.get("penalty_enabled", False)),
            custom_table=DEFAULT_CUSTOM_TABLE
            if table is None
            else tuple(None if value is None else int(value) for value in table),
        )


def _custom_magnitude(prediction: int, curve: CurveConfig) -> int:
    if prediction < CUSTOM_TABLE_SIZE:
        return curve.table_entry(prediction)
    entries = [curve.table_entry(index) for index in range(CUSTOM_TABLE_SIZE)]
    steps = (entries[2] - entries[1], entries[3] - entries[2], entries[4] - entries[3])
    value = entries[4]
    for offset in range(prediction - (CUSTOM_TABLE_SIZE - 1)):
        value += steps[offset % len(steps)]
    return value


def magnitude(prediction: int, curve: CurveConfig) -> int:
    """Points awarded for a successful bid of ``prediction``."""
    if prediction < 0:
        raise ValueError(f"Prediction must be >= 0, got {prediction}.")
    if curve.kind is CurveKind.STANDARD:
        return 10 if prediction == 0 else prediction * 10
    if curve.kind is CurveKind.PROGRESSIVE:
        return 10 + prediction
    if curve.kind is CurveKind.DYNAMIC:
        if prediction <= 2:
            return (10, 15, 20)[prediction]
        return 30 + (prediction - 3) * 10
    return _custom_magnitude(prediction, curve)


def points(prediction: int, success: bool, curve: CurveConfig) -> int:
    """Signed score for one bid; misses cost the same magnitude only with the penalty on."""
    if not success and not curve.penalty_enabled:
        if prediction < 0:
            raise ValueError(f"Prediction must be >= 0, got {prediction}.")
        return 0
    value = magnitude(prediction, curve)
    return value if success else -value


def needs_recompute(old: CurveConfig | None, new: CurveConfig) -> bool:
    """Whether results scored under ``old`` would score differently under ``new``."""
    if old is None:
        return False
    if old.kind is not new.kind or old.penalty_enabled != new.penalty_enabled:
        return True
    if new.kind is CurveKind.CUSTOM:
        return any(old.table_entry(index) != new.table_entry(index) for index in range(CUSTOM_TABLE_SIZE))
    return False


def recompute(
    old: CurveConfig | None,
    new: CurveConfig,
    scores: ScoreGrid,
    predictions: Matrix[int | None],
    results: Matrix[bool | None],
) -> ScoreGrid:
    """Return a copy of ``scores`` with every resolved bid re-scored under ``new``.

    Cells with a bid but no result are left alone.
    """
    updated = scores.copy()
    if not needs_recompute(old, new):
        return updated
    rounds, width = scores.shape
    for row in range(rounds):
        for col in range(width):
            prediction = predictions.get(row, col)
            result = results.get(row, col)
            if prediction is not None and result is not None:
                updated.set_cell(row, col, points(prediction, result, new))
    return updated


class PredictionOverlay:
    """Bid and result matrices that run in parallel with the score grid."""

    def __init__(self, predictions: Matrix[int | None], results: Matrix[bool | None]):
        if predictions.shape != results.shape:
            raise ValueError(f"Overlay shapes differ: {predictions.shape} vs {results.shape}.")
        self.predictions = predictions
        self.results = results

    @classmethod
    def blank(cls, num_rounds: int, width: int) -> Self:
        return cls(Matrix.blank(num_rounds, width, None), Matrix.blank(num_rounds, width, None))

    @property
    def shape(self) -> tuple[int, int]:
        return self.predictions.shape

    def prediction(self, row: int, col: int) -> int | None:
        return self.predictions.get(row, col)

    def has_prediction(self, row: int, col: int) -> bool:
        return self.predictions.get(row, col) is not None

    def is_locked(self, row: int, col: int) -> bool:
        """A bid is frozen once its result has been recorded."""
        return self.results.get(row, col) is not None

    def set_prediction(self, row: int, col: int, value: int | None) -> bool:
        if self.is_locked(row, col):
            return False
        if value is not None and value < 0:
            return False
        self.predictions.set(row, col, value)
        return True

    def set_result(self, row: int, col: int, success: bool, curve: CurveConfig, scores: ScoreGrid) -> bool:
        """Record a result and write its points into ``scores``."""
        prediction = self.predictions.get(row, col)
        if prediction is None:
            return False
        self.results.set(row, col, bool(success))
        scores.set_cell(row, col, points(prediction, bool(success), curve))
        return True

    def round_predictions_complete(self, row: int, active_cols: Sequence[int]) -> bool:
        return all(self.predictions.get(row, col) is not None for col in active_cols)

    def append_round(self) -> None:
        self.predictions.append_round()
        self.results.append_round()

    def add_player_column(self) -> None:
        self.predictions.add_player_column()
        self.results.add_player_column()

    def remove_player_column(self, col: int) -> None:
        self.predictions.remove_player_column(col)
        self.results.remove_player_column(col)

    def select_rounds(self, indices: Sequence[int]) -> PredictionOverlay:
        return PredictionOverlay(self.predictions.select_rounds(indices), self.results.select_rounds(indices))

    def remap_columns(self, sources: Sequence[int | None], num_rounds: int) -> PredictionOverlay:
        return PredictionOverlay(
            self.predictions.remap_columns(sources, num_rounds),
            self.results.remap_columns(sources, num_rounds),
        )

    def copy(self) -> PredictionOverlay:
        return PredictionOverlay(self.predictions.copy(), self.results.copy())

    @classmethod
    def from_rows(
        cls,
        predictions: Sequence[Sequence[int | None]],
        results: Sequence[Sequence[bool | None]],
        width: int,
    ) -> Self:
        return cls(Matrix(predictions, width, None), Matrix(results, width, None))
