"""CSV export of finished matches and the file-backed draft store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scoreboard.controller import MatchController, Phase
from scoreboard.draft import DraftSnapshot, JsonDraftStore
from scoreboard.errors import GridShapeError
from scoreboard.export import export_filename, match_to_csv
from scoreboard.models import MatchRecord, Player, WinnerRule
from scoreboard.prediction import CurveConfig, CurveKind, ScoringMode


def test_csv_lists_rounds_then_totals() -> None:
    record = MatchRecord.build(
        players=["Ana", "Ben"],
        rounds=[[10, -5], [3, 7]],
        winner_rule=WinnerRule.HIGHEST,
    )

    assert match_to_csv(record) == "Round,Ana,Ben\nR1,10,-5\nR2,3,7\nTotal,13,2"


def test_export_filename_uses_creation_date() -> None:
    record = MatchRecord(
        id="m1",
        players=("Ana", "Ben"),
        rounds=((1, 2),),
        totals=(1, 2),
        winner_rule=WinnerRule.LOWEST,
        created_at="2024-03-09T20:15:00+00:00",
    )

    assert export_filename(record) == "game-2024-03-09.csv"


def test_match_record_rejects_inconsistent_totals() -> None:
    with pytest.raises(GridShapeError):
        MatchRecord(
            id="bad",
            players=("Ana", "Ben"),
            rounds=((1, 2),),
            totals=(1, 3),
            winner_rule=WinnerRule.HIGHEST,
        )


def test_json_draft_store_round_trip_and_clear(tmp_path: Path) -> None:
    store = JsonDraftStore(tmp_path / "drafts" / "current.json")
    assert store.load_draft() is None

    draft = DraftSnapshot(
        match_name=None,
        winner_rule=WinnerRule.LOWEST,
        num_rounds=2,
        scoring_mode=ScoringMode.PREDICTION,
        curve=CurveConfig(kind=CurveKind.CUSTOM, custom_table=(5, None, 15, 20, 25)),
        selected_players=(Player.create("Ana"), Player.create("Ben")),
        scores=((10, 0), (0, 0)),
        predictions=((0, 2), (None, None)),
        results=((True, None), (None, None)),
    )
    store.save_draft(draft)

    loaded = store.load_draft()
    assert loaded == draft
    assert loaded.summary()["match_name"] == "Ongoing Game"
    assert loaded.summary()["player_count"] == 2

    store.clear_draft()
    store.clear_draft()
    assert store.load_draft() is None


def test_unreadable_draft_is_discarded(tmp_path: Path) -> None:
    path = tmp_path / "current.json"
    path.write_text(json.dumps({"scores": [[1]]}), encoding="utf-8")

    assert JsonDraftStore(path).load_draft() is None
    assert not path.exists()


def test_resume_from_corrupt_draft_file_clears_it(tmp_path: Path) -> None:
    path = tmp_path / "current.json"
    path.write_text("{not json", encoding="utf-8")
    controller = MatchController(draft_store=JsonDraftStore(path))

    assert controller.resume_draft() is False
    assert controller.phase is Phase.SETUP
    assert not path.exists()
