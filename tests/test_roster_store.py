"""Roster persistence: player naming rules and match history."""

from __future__ import annotations

from pathlib import Path

import pytest

from scoreboard.errors import RejectionReason, ValidationRejected
from scoreboard.models import MatchRecord, WinnerRule
from server.roster_store import RosterStore


def _record(name: str, rounds: list[list[int]]) -> MatchRecord:
    return MatchRecord.build(
        players=["Ana", "Ben"],
        rounds=rounds,
        winner_rule=WinnerRule.HIGHEST,
        match_name=name,
    )


def test_player_names_are_formatted_and_sorted(tmp_path: Path) -> None:
    store = RosterStore(tmp_path / "roster.json")
    store.create_player("  zOE ")
    store.create_player("adam", group="thursday crew")

    players = store.list_players()

    assert [player.name for player in players] == ["Adam", "Zoe"]
    assert players[0].group == "Thursday crew"
    assert RosterStore(tmp_path / "roster.json").list_players() == players


def test_duplicate_and_blank_names_are_rejected(tmp_path: Path) -> None:
    store = RosterStore(tmp_path / "roster.json")
    store.create_player("Ana")

    with pytest.raises(ValidationRejected) as duplicate:
        store.create_player("ANA")
    with pytest.raises(ValidationRejected) as blank:
        store.create_player("   ")

    assert duplicate.value.reason is RejectionReason.DUPLICATE_NAME
    assert blank.value.reason is RejectionReason.INVALID_NAME
    assert len(store.list_players()) == 1


def test_update_may_keep_own_name_but_not_take_another(tmp_path: Path) -> None:
    store = RosterStore(tmp_path / "roster.json")
    ana = store.create_player("Ana")
    store.create_player("Ben")

    renamed = store.update_player(ana.id, "ana", group="weekend")
    assert renamed.id == ana.id
    assert renamed.group == "Weekend"

    with pytest.raises(ValidationRejected):
        store.update_player(ana.id, "ben")
    with pytest.raises(KeyError):
        store.update_player("missing", "Cy")


def test_delete_and_group_players(tmp_path: Path) -> None:
    store = RosterStore(tmp_path / "roster.json")
    ana = store.create_player("Ana", group="Family")
    store.create_player("Ben")
    store.create_player("Cy", group="family")

    groups = store.players_by_group()
    assert list(groups) == ["Family", "Ungrouped"]
    assert [player.name for player in groups["Family"]] == ["Ana", "Cy"]

    store.delete_player(ana.id)
    with pytest.raises(KeyError):
        store.delete_player(ana.id)
    with pytest.raises(KeyError):
        store.get_player(ana.id)


def test_matches_are_listed_newest_first(tmp_path: Path) -> None:
    store = RosterStore(tmp_path / "roster.json")
    first = store.create_match(_record("First", [[1, 2]]))
    second = store.create_match(_record("Second", [[3, 4], [5, 6]]))

    matches = store.list_matches()

    assert [record.id for record in matches] == [second.id, first.id]
    assert store.get_match(second.id) == second
    assert matches[0].totals == (8, 10)

    store.delete_match(first.id)
    assert [record.id for record in store.list_matches()] == [second.id]
    with pytest.raises(KeyError):
        store.get_match(first.id)


def test_clear_all_and_corrupt_file_recovery(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    store = RosterStore(path)
    store.create_player("Ana")
    store.create_match(_record("Kept", [[1, 1]]))

    store.clear_all()
    assert store.list_players() == []
    assert store.list_matches() == []

    path.write_text("{not json", encoding="utf-8")
    assert store.list_players() == []
    store.create_player("Ben")
    assert [player.name for player in store.list_players()] == ["Ben"]
