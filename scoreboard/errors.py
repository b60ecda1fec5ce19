"""Structured exceptions used across the scoreboard engine."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ScoreboardError(Exception):
    """Base class for engine-level exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class RejectionReason(str, Enum):
    """Reason codes for user-recoverable validation failures."""

    NOT_ENOUGH_PLAYERS = "not_enough_players"
    DUPLICATE_NAME = "duplicate_name"
    INVALID_NAME = "invalid_name"


class ValidationRejected(ScoreboardError):
    """Raised when user input is rejected; engine state is left unchanged."""

    def __init__(self, reason: RejectionReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or reason.value.replace("_", " ").capitalize())

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["reason"] = self.reason.value
        return payload


class GridIndexError(ScoreboardError, IndexError):
    """Raised when a row or column index falls outside the matrix."""

    def __init__(self, row: int | None, col: int | None, shape: tuple[int, int]):
        self.row = row
        self.col = col
        self.shape = shape
        super().__init__(f"Cell ({row}, {col}) is outside a {shape[0]}x{shape[1]} grid")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"row": self.row, "col": self.col, "shape": list(self.shape)})
        return payload


class GridShapeError(ScoreboardError, ValueError):
    """Raised when matrix rows disagree in length or totals disagree with rounds."""
