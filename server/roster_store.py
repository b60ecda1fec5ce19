"""Persistent JSON roster of players and finished matches."""

from __future__ import annotations

from dataclasses import dataclass, replace
import json
from pathlib import Path
from typing import Any

from scoreboard.errors import RejectionReason, ValidationRejected
from scoreboard.logging_config import get_logger
from scoreboard.models import MatchRecord, Player, format_name, utc_now_iso
from scoreboard.serialize import write_json_atomic

logger = get_logger(__name__)

ROSTER_VERSION = 1


def _default_payload() -> dict[str, Any]:
    return {
        "version": ROSTER_VERSION,
        "updated_at": utc_now_iso(),
        "players": [],
        "matches": [],
    }


def _sort_players(players: list[Player]) -> list[Player]:
    return sorted(players, key=lambda player: player.name.lower())


@dataclass
class RosterStore:
    """Simple JSON file-backed player and match database."""

    path: Path

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write(_default_payload())

    def _read(self) -> dict[str, Any]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Roster file %s unreadable, starting empty: %s", self.path, exc)
            raw = _default_payload()
        for key in ("players", "matches"):
            if not isinstance(raw.get(key), list):
                raw[key] = []
        return raw

    def _write(self, payload: dict[str, Any]) -> None:
        payload["updated_at"] = utc_now_iso()
        write_json_atomic(self.path, payload)

    def _players(self, payload: dict[str, Any]) -> list[Player]:
        return [Player.from_dict(item) for item in payload["players"]]

    def _matches(self, payload: dict[str, Any]) -> list[MatchRecord]:
        return [MatchRecord.from_dict(item) for item in payload["matches"]]

    def _validated_name(self, players: list[Player], name: str, exclude_id: str | None = None) -> str:
        formatted = format_name(name)
        if not formatted:
            raise ValidationRejected(RejectionReason.INVALID_NAME, "Player name cannot be empty")
        lowered = formatted.lower()
        if any(player.id != exclude_id and player.name.lower() == lowered for player in players):
            raise ValidationRejected(RejectionReason.DUPLICATE_NAME, f"Player '{formatted}' already exists")
        return formatted

    # -- players -----------------------------------------------------------------

    def list_players(self) -> list[Player]:
        return _sort_players(self._players(self._read()))

    def get_player(self, player_id: str) -> Player:
        for player in self._players(self._read()):
            if player.id == player_id:
                return player
        raise KeyError(player_id)

    def create_player(self, name: str, group: str | None = None) -> Player:
        """Add a player; names are unique ignoring case."""
        payload = self._read()
        players = self._players(payload)
        formatted = self._validated_name(players, name)
        player = Player.create(formatted, group)
        players.append(player)
        payload["players"] = [item.to_dict() for item in _sort_players(players)]
        self._write(payload)
        logger.info("Created player %s", player.name)
        return player

    def update_player(self, player_id: str, name: str, group: str | None = None) -> Player:
        payload = self._read()
        players = self._players(payload)
        index = next((i for i, player in enumerate(players) if player.id == player_id), None)
        if index is None:
            raise KeyError(player_id)
        formatted = self._validated_name(players, name, exclude_id=player_id)
        updated = replace(players[index], name=formatted, group=format_name(group) or None)
        players[index] = updated
        payload["players"] = [item.to_dict() for item in _sort_players(players)]
        self._write(payload)
        logger.info("Updated player %s", updated.name)
        return updated

    def delete_player(self, player_id: str) -> None:
        payload = self._read()
        players = self._players(payload)
        remaining = [player for player in players if player.id != player_id]
        if len(remaining) == len(players):
            raise KeyError(player_id)
        payload["players"] = [item.to_dict() for item in remaining]
        self._write(payload)
        logger.info("Deleted player %s", player_id)

    def players_by_group(self) -> dict[str, list[Player]]:
        """Players bucketed by group label; ungrouped players share one bucket."""
        groups: dict[str, list[Player]] = {}
        for player in self.list_players():
            groups.setdefault(player.group or "Ungrouped", []).append(player)
        return dict(sorted(groups.items(), key=lambda item: item[0].lower()))

    # -- matches -----------------------------------------------------------------

    def list_matches(self) -> list[MatchRecord]:
        return self._matches(self._read())

    def get_match(self, match_id: str) -> MatchRecord:
        for record in self.list_matches():
            if record.id == match_id:
                return record
        raise KeyError(match_id)

    def create_match(self, record: MatchRecord) -> MatchRecord:
        """Store a finished match; newest first."""
        payload = self._read()
        payload["matches"] = [record.to_dict(), *payload["matches"]]
        self._write(payload)
        logger.info("Saved match %s (%s)", record.id, record.match_name or "untitled")
        return record

    def delete_match(self, match_id: str) -> None:
        payload = self._read()
        remaining = [item for item in payload["matches"] if item.get("id") != match_id]
        if len(remaining) == len(payload["matches"]):
            raise KeyError(match_id)
        payload["matches"] = remaining
        self._write(payload)
        logger.info("Deleted match %s", match_id)

    def clear_all(self) -> None:
        self._write(_default_payload())
        logger.info("Cleared all roster data")
