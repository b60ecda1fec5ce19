"""Draft snapshots of an unfinished match and where they are kept."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Protocol, Self

from .logging_config import get_logger
from .models import Player, WinnerRule, utc_now_iso
from .prediction import CurveConfig, ScoringMode
from .serialize import write_json_atomic

logger = get_logger(__name__)

DRAFT_VERSION = 1


@dataclass(frozen=True)
class DraftSnapshot:
    """Everything needed to put an unfinished match back on screen."""

    match_name: str | None
    winner_rule: WinnerRule
    num_rounds: int
    scoring_mode: ScoringMode
    curve: CurveConfig
    selected_players: tuple[Player, ...]
    scores: tuple[tuple[int, ...], ...]
    inactive_players: tuple[str, ...] = ()
    predictions: tuple[tuple[int | None, ...], ...] = ()
    results: tuple[tuple[bool | None, ...], ...] = ()
    scored_with: CurveConfig | None = None
    saved_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": DRAFT_VERSION,
            "match_name": self.match_name,
            "winner_rule": self.winner_rule.value,
            "num_rounds": self.num_rounds,
            "scoring_mode": self.scoring_mode.value,
            "curve": self.curve.to_dict(),
            "selected_players": [player.to_dict() for player in self.selected_players],
            "scores": [list(row) for row in self.scores],
            "inactive_players": list(self.inactive_players),
            "predictions": [list(row) for row in self.predictions],
            "results": [list(row) for row in self.results],
            "scored_with": self.scored_with.to_dict() if self.scored_with is not None else None,
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        scored_with = data.get("scored_with")
        return cls(
            match_name=data.get("match_name") or None,
            winner_rule=WinnerRule(str(data.get("winner_rule", WinnerRule.HIGHEST.value))),
            num_rounds=int(data["num_rounds"]),
            scoring_mode=ScoringMode(str(data.get("scoring_mode", ScoringMode.STANDARD.value))),
            curve=CurveConfig.from_dict(data.get("curve")),
            selected_players=tuple(Player.from_dict(item) for item in data.get("selected_players", [])),
            scores=tuple(tuple(int(value) for value in row) for row in data.get("scores", [])),
            inactive_players=tuple(str(item) for item in data.get("inactive_players", [])),
            predictions=tuple(
                tuple(None if value is None else int(value) for value in row) for row in data.get("predictions", [])
            ),
            results=tuple(
                tuple(None if value is None else bool(value) for value in row) for row in data.get("results", [])
            ),
            scored_with=CurveConfig.from_dict(scored_with) if scored_with is not None else None,
            saved_at=str(data.get("saved_at") or utc_now_iso()),
        )

    def summary(self) -> dict[str, Any]:
        return {
            "match_name": self.match_name or "Ongoing Game",
            "player_count": len(self.selected_players),
            "saved_at": self.saved_at,
        }


class DraftStore(Protocol):
    """Holds at most one draft; later saves overwrite earlier ones."""

    def save_draft(self, draft: DraftSnapshot) -> None: ...

    def load_draft(self) -> DraftSnapshot | None: ...

    def clear_draft(self) -> None: ...


class InMemoryDraftStore:
    """Draft store for tests and embedded use."""

    def __init__(self) -> None:
        self.draft: DraftSnapshot | None = None
        self.saves = 0

    def save_draft(self, draft: DraftSnapshot) -> None:
        self.draft = draft
        self.saves += 1

    def load_draft(self) -> DraftSnapshot | None:
        return self.draft

    def clear_draft(self) -> None:
        self.draft = None


@dataclass
class JsonDraftStore:
    """Single-file JSON draft store, replaced atomically on every save."""

    path: Path

    def save_draft(self, draft: DraftSnapshot) -> None:
        write_json_atomic(self.path, draft.to_dict())

    def load_draft(self) -> DraftSnapshot | None:
        if not self.path.exists():
            return None
        try:
            return DraftSnapshot.from_dict(json.loads(self.path.read_text(encoding="utf-8")))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable draft at %s: %s", self.path, exc)
            self.clear_draft()
            return None

    def clear_draft(self) -> None:
        self.path.unlink(missing_ok=True)
