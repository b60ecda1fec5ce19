"""Engine-wide defaults."""

from __future__ import annotations

MIN_ROUNDS = 1
MAX_ROUNDS = 20
DEFAULT_ROUNDS = 5
MIN_PLAYERS = 2

CUSTOM_TABLE_SIZE = 5
DEFAULT_CUSTOM_TABLE: tuple[int, ...] = (10, 20, 30, 40, 50)

# Rendering layers may wait this long before scrolling so the new cell exists.
HINT_DELAY_MS = 50
