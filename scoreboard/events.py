"""Presentation hints emitted by the cursor for a rendering layer."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from time import time
from typing import Any

from .constants import HINT_DELAY_MS


class HintType(str, Enum):
    """Rendering requests; none of them affect engine state."""

    SCROLL_INTO_VIEW = "scroll_into_view"
    FOCUS_CELL = "focus_cell"


@dataclass(frozen=True)
class PresentationHint:
    """Single fire-and-forget request for the view layer."""

    hint_type: HintType
    row: int
    col: int
    kind: str
    delay_ms: int
    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "hint_type": self.hint_type.value,
            "row": self.row,
            "col": self.col,
            "kind": self.kind,
            "delay_ms": self.delay_ms,
            "timestamp_ms": self.timestamp_ms,
        }

    @classmethod
    def create(cls, hint_type: HintType, row: int, col: int, kind: str, delay_ms: int = HINT_DELAY_MS) -> "PresentationHint":
        """Construct a hint stamped with the current wall-clock time."""
        return cls(
            hint_type=hint_type,
            row=row,
            col=col,
            kind=kind,
            delay_ms=delay_ms,
            timestamp_ms=int(time() * 1000),
        )


class HintQueue:
    """Bounded FIFO of pending hints; old hints fall off when nobody drains."""

    def __init__(self, maxlen: int = 64):
        self._pending: deque[PresentationHint] = deque(maxlen=maxlen)

    def emit(self, hint: PresentationHint) -> None:
        self._pending.append(hint)

    def cell_opened(self, row: int, col: int, kind: str) -> None:
        self.emit(PresentationHint.create(HintType.SCROLL_INTO_VIEW, row, col, kind))
        self.emit(PresentationHint.create(HintType.FOCUS_CELL, row, col, kind, delay_ms=0))

    def drain(self) -> list[PresentationHint]:
        hints = list(self._pending)
        self._pending.clear()
        return hints

    def __len__(self) -> int:
        return len(self._pending)
