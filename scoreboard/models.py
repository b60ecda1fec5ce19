"""Value objects shared by the engine and the roster store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Mapping, Self, Sequence
from uuid import uuid4

from .errors import GridShapeError


class WinnerRule(str, Enum):
    """Which extreme total is considered best."""

    HIGHEST = "highest"
    LOWEST = "lowest"


def utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def new_id() -> str:
    return uuid4().hex


def format_name(value: str | None) -> str:
    """Trim and capitalize the first letter, lowercasing the rest."""
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    return trimmed[0].upper() + trimmed[1:].lower()


@dataclass(frozen=True)
class Player:
    """Roster entry referenced by a match; immutable during play."""

    id: str
    name: str
    group: str | None = None
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def create(cls, name: str, group: str | None = None) -> Self:
        return cls(id=new_id(), name=format_name(name), group=format_name(group) or None)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "group": self.group, "created_at": self.created_at}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            group=data.get("group") or None,
            created_at=str(data.get("created_at") or utc_now_iso()),
        )


def column_totals(rounds: Sequence[Sequence[int]], width: int) -> list[int]:
    """Sum each column across rounds."""
    return [sum(int(row[index]) for row in rounds) for index in range(width)]


@dataclass(frozen=True)
class MatchRecord:
    """A finished match as persisted in history."""

    id: str
    players: tuple[str, ...]
    rounds: tuple[tuple[int, ...], ...]
    totals: tuple[int, ...]
    winner_rule: WinnerRule
    match_name: str | None = None
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        width = len(self.players)
        for index, row in enumerate(self.rounds):
            if len(row) != width:
                raise GridShapeError(f"Round {index + 1} has {len(row)} scores for {width} players.")
        if len(self.totals) != width:
            raise GridShapeError(f"Expected {width} totals, got {len(self.totals)}.")
        if list(self.totals) != column_totals(self.rounds, width):
            raise GridShapeError("Totals do not match the sum of rounds.")

    @classmethod
    def build(
        cls,
        *,
        players: Sequence[str],
        rounds: Sequence[Sequence[int]],
        winner_rule: WinnerRule,
        match_name: str | None = None,
    ) -> Self:
        """Create a record with a fresh id, deriving totals from rounds."""
        frozen_rounds = tuple(tuple(int(value) for value in row) for row in rounds)
        return cls(
            id=new_id(),
            players=tuple(players),
            rounds=frozen_rounds,
            totals=tuple(column_totals(frozen_rounds, len(players))),
            winner_rule=WinnerRule(winner_rule),
            match_name=match_name or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "players": list(self.players),
            "rounds": [list(row) for row in self.rounds],
            "totals": list(self.totals),
            "winner_rule": self.winner_rule.value,
            "match_name": self.match_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            players=tuple(str(name) for name in data.get("players", [])),
            rounds=tuple(tuple(int(value) for value in row) for row in data.get("rounds", [])),
            totals=tuple(int(value) for value in data.get("totals", [])),
            winner_rule=WinnerRule(str(data.get("winner_rule", WinnerRule.HIGHEST.value))),
            match_name=data.get("match_name") or None,
            created_at=str(data.get("created_at") or utc_now_iso()),
        )
