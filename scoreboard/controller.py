"""Match session controller: setup, live scoring, mid-match edits, and finishing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .constants import DEFAULT_ROUNDS, MAX_ROUNDS, MIN_PLAYERS, MIN_ROUNDS
from .cursor import CellCursor, CellKind, Direction
from .draft import DraftSnapshot, DraftStore, InMemoryDraftStore
from .errors import GridShapeError, RejectionReason, ValidationRejected
from .events import HintQueue
from .grid import ScoreGrid
from .logging_config import get_logger
from .models import MatchRecord, Player, WinnerRule
from .prediction import CurveConfig, CurveKind, PredictionOverlay, ScoringMode, recompute
from .ranking import RankedEntry, dense_ranks, rank_totals, winner_index
from .serialize import to_serializable

logger = get_logger(__name__)


class Phase(str, Enum):
    """Lifecycle of one match."""

    SETUP = "setup"
    ACTIVE = "active"
    EDITING = "editing"
    FINISHED = "finished"


class MatchSink(Protocol):
    """Receives finished matches (the roster store in production)."""

    def create_match(self, record: MatchRecord) -> Any: ...


@dataclass
class _EditBackup:
    """Live session captured when re-entering setup mid-match."""

    players: list[Player]
    scores: ScoreGrid
    overlay: PredictionOverlay | None
    inactive_players: set[str]
    scored_with: CurveConfig | None
    match_name: str | None
    winner_rule: WinnerRule
    num_rounds: int
    scoring_mode: ScoringMode
    curve: CurveConfig


class _SessionBoard:
    """Adapts the controller's grids to what the cursor edits."""

    def __init__(self, controller: "MatchController"):
        self.controller = controller

    @property
    def num_rounds(self) -> int:
        scores = self.controller.scores
        return scores.num_rounds if scores is not None else 0

    @property
    def num_columns(self) -> int:
        scores = self.controller.scores
        return scores.width if scores is not None else 0

    @property
    def read_only(self) -> bool:
        return self.controller.phase is not Phase.ACTIVE or self.controller.scores is None

    @property
    def prediction_mode(self) -> bool:
        return self.controller.overlay is not None

    def is_active(self, col: int) -> bool:
        players = self.controller.selected_players
        return 0 <= col < len(players) and players[col].id not in self.controller.inactive_players

    def can_edit_curve(self) -> bool:
        controller = self.controller
        return (
            controller.in_setup
            and controller.scoring_mode is ScoringMode.PREDICTION
            and controller.curve.kind is CurveKind.CUSTOM
        )

    def read(self, row: int, col: int, kind: CellKind) -> int | None:
        controller = self.controller
        if kind is CellKind.CURVE_PARAMETER:
            if col < len(controller.curve.custom_table):
                return controller.curve.custom_table[col]
            return None
        if kind is CellKind.PREDICTION:
            return controller.overlay.prediction(row, col) if controller.overlay is not None else None
        return controller.scores.get(row, col) if controller.scores is not None else None

    def write(self, row: int, col: int, kind: CellKind, value: int | None) -> bool:
        controller = self.controller
        if kind is CellKind.CURVE_PARAMETER:
            controller.curve = controller.curve.with_entry(col, value)
            return True
        if kind is CellKind.PREDICTION:
            if controller.overlay is None or not controller.overlay.set_prediction(row, col, value):
                return False
        else:
            controller.scores.set_cell(row, col, 0 if value is None else value)
        controller._autosave()
        return True

    def has_prediction(self, row: int, col: int) -> bool:
        overlay = self.controller.overlay
        return overlay is not None and overlay.has_prediction(row, col)

    def has_result(self, row: int, col: int) -> bool:
        overlay = self.controller.overlay
        return overlay is not None and overlay.is_locked(row, col)

    def round_bids_complete(self, row: int) -> bool:
        controller = self.controller
        overlay = controller.overlay
        return overlay is not None and overlay.round_predictions_complete(row, controller.active_columns())

    def record_result(self, row: int, col: int, success: bool) -> bool:
        controller = self.controller
        if controller.overlay is None or controller.scores is None:
            return False
        if not controller.overlay.set_result(row, col, success, controller.curve, controller.scores):
            return False
        controller._autosave()
        return True


class MatchController:
    """Owns one match from setup to persistence.

    Phases run ``setup -> active -> (editing <-> active) -> finished``. Transitions that
    are not allowed in the current phase are no-ops returning ``False`` (or ``None``);
    the only raised user errors are ``ValidationRejected``. Every data mutation while
    active writes a draft, and draft failures are logged, never raised.
    """

    def __init__(
        self,
        *,
        draft_store: DraftStore | None = None,
        roster: MatchSink | None = None,
        hints: HintQueue | None = None,
    ):
        self.draft_store: DraftStore = draft_store if draft_store is not None else InMemoryDraftStore()
        self.roster = roster
        self.hints = hints if hints is not None else HintQueue()
        self.cursor = CellCursor(_SessionBoard(self), self.hints)
        self._reset_setup()

    def _reset_setup(self) -> None:
        self.phase = Phase.SETUP
        self.match_name: str | None = None
        self.winner_rule = WinnerRule.HIGHEST
        self.num_rounds = DEFAULT_ROUNDS
        self.scoring_mode = ScoringMode.STANDARD
        self.curve = CurveConfig()
        self.selected_players: list[Player] = []
        self.scores: ScoreGrid | None = None
        self.overlay: PredictionOverlay | None = None
        self.inactive_players: set[str] = set()
        self.scored_with: CurveConfig | None = None
        self.finished_record: MatchRecord | None = None
        self._backup: _EditBackup | None = None
        self.cursor.close()

    # -- read-only projections ---------------------------------------------------

    @property
    def in_setup(self) -> bool:
        return self.phase in (Phase.SETUP, Phase.EDITING)

    @property
    def read_only(self) -> bool:
        return self.phase is not Phase.ACTIVE

    @property
    def grid_players(self) -> list[Player]:
        """Players aligned with the grid columns (the pre-edit list while editing)."""
        if self._backup is not None:
            return list(self._backup.players)
        return list(self.selected_players)

    def column_of(self, player_id: str) -> int | None:
        for index, player in enumerate(self.selected_players):
            if player.id == player_id:
                return index
        return None

    def active_columns(self) -> list[int]:
        return [
            index
            for index, player in enumerate(self.selected_players)
            if player.id not in self.inactive_players
        ]

    def totals(self) -> list[int]:
        return self.scores.totals() if self.scores is not None else []

    def rankings(self) -> list[RankedEntry]:
        names = [player.name for player in self.grid_players]
        return rank_totals(self.totals(), self.winner_rule, names=names)

    def winner_index(self) -> int | None:
        return winner_index(self.totals(), self.winner_rule)

    # -- setup -------------------------------------------------------------------

    def select_player(self, player: Player) -> bool:
        if not self.in_setup or self.column_of(player.id) is not None:
            return False
        self.selected_players.append(player)
        return True

    def deselect_player(self, player_id: str) -> bool:
        index = self.column_of(player_id)
        if not self.in_setup or index is None:
            return False
        del self.selected_players[index]
        self.inactive_players.discard(player_id)
        return True

    def toggle_player(self, player: Player) -> bool:
        if self.column_of(player.id) is not None:
            return self.deselect_player(player.id)
        return self.select_player(player)

    def reorder_player(self, from_index: int, to_index: int) -> bool:
        if not self.in_setup:
            return False
        count = len(self.selected_players)
        if not 0 <= from_index < count or not 0 <= to_index < count:
            raise IndexError(f"Player positions must be within 0-{count - 1}.")
        player = self.selected_players.pop(from_index)
        self.selected_players.insert(to_index, player)
        return True

    def set_winner_rule(self, rule: WinnerRule | str) -> bool:
        if not self.in_setup:
            return False
        self.winner_rule = WinnerRule(rule)
        return True

    def set_num_rounds(self, num_rounds: int) -> bool:
        if not self.in_setup:
            return False
        self.num_rounds = max(MIN_ROUNDS, min(MAX_ROUNDS, int(num_rounds)))
        return True

    def set_match_name(self, name: str | None) -> bool:
        if not self.in_setup:
            return False
        self.match_name = (name or "").strip() or None
        return True

    def set_scoring_mode(self, mode: ScoringMode | str) -> bool:
        if not self.in_setup:
            return False
        self.scoring_mode = ScoringMode(mode)
        return True

    def set_curve_kind(self, kind: CurveKind | str) -> bool:
        if not self.in_setup:
            return False
        self.curve = CurveConfig(
            kind=CurveKind(kind),
            penalty_enabled=self.curve.penalty_enabled,
            custom_table=self.curve.custom_table,
        )
        return True

    def set_penalty_enabled(self, enabled: bool) -> bool:
        if not self.in_setup:
            return False
        self.curve = CurveConfig(
            kind=self.curve.kind,
            penalty_enabled=bool(enabled),
            custom_table=self.curve.custom_table,
        )
        return True

    def set_custom_entry(self, index: int, value: int | None) -> bool:
        if not self.in_setup:
            return False
        self.curve = self.curve.with_entry(index, value)
        return True

    def start_game(self) -> bool:
        """Allocate the grid (or remap it after an edit) and begin play.

        Raises:
            ValidationRejected: fewer than two players are selected.
        """
        if not self.in_setup:
            return False
        if len(self.selected_players) < MIN_PLAYERS:
            raise ValidationRejected(
                RejectionReason.NOT_ENOUGH_PLAYERS,
                f"Select at least {MIN_PLAYERS} players",
            )

        self.cursor.close()
        if self.phase is Phase.EDITING:
            self._apply_edit()
            logger.info(
                "Resumed match with %d players and %d rounds after edit",
                len(self.selected_players),
                self.num_rounds,
            )
        else:
            self._clear_draft()
            width = len(self.selected_players)
            self.scores = ScoreGrid.zeros(self.num_rounds, width)
            self.inactive_players = set()
            if self.scoring_mode is ScoringMode.PREDICTION:
                self.overlay = PredictionOverlay.blank(self.num_rounds, width)
                self.scored_with = self.curve
            else:
                self.overlay = None
                self.scored_with = None
            logger.info(
                "Started %s match with %d players and %d rounds",
                self.scoring_mode.value,
                width,
                self.num_rounds,
            )
        self.finished_record = None
        self.phase = Phase.ACTIVE
        self._autosave()
        return True

    def _apply_edit(self) -> None:
        backup = self._backup
        if backup is None:
            raise GridShapeError("No saved session to reconcile.")
        previous_columns = {player.id: index for index, player in enumerate(backup.players)}
        sources = [previous_columns.get(player.id) for player in self.selected_players]

        scores = backup.scores.remap_columns(sources, self.num_rounds)
        if self.scoring_mode is ScoringMode.PREDICTION:
            if backup.overlay is not None:
                overlay = backup.overlay.remap_columns(sources, self.num_rounds)
            else:
                overlay = PredictionOverlay.blank(self.num_rounds, len(sources))
            scores = recompute(backup.scored_with, self.curve, scores, overlay.predictions, overlay.results)
            self.overlay = overlay
            self.scored_with = self.curve
        else:
            self.overlay = None
            self.scored_with = None

        self.scores = scores
        selected_ids = {player.id for player in self.selected_players}
        self.inactive_players = backup.inactive_players & selected_ids
        self._backup = None

    # -- editing -----------------------------------------------------------------

    def edit(self) -> bool:
        """Return to setup with the live session kept aside for reconciliation."""
        if self.phase is not Phase.ACTIVE or self.scores is None:
            return False
        self._backup = _EditBackup(
            players=list(self.selected_players),
            scores=self.scores.copy(),
            overlay=self.overlay.copy() if self.overlay is not None else None,
            inactive_players=set(self.inactive_players),
            scored_with=self.scored_with,
            match_name=self.match_name,
            winner_rule=self.winner_rule,
            num_rounds=self.num_rounds,
            scoring_mode=self.scoring_mode,
            curve=self.curve,
        )
        self.num_rounds = self.scores.num_rounds
        self.cursor.close()
        self.phase = Phase.EDITING
        logger.info("Editing match setup")
        return True

    def cancel_edit(self) -> bool:
        backup = self._backup
        if self.phase is not Phase.EDITING or backup is None:
            return False
        self.selected_players = list(backup.players)
        self.scores = backup.scores
        self.overlay = backup.overlay
        self.inactive_players = set(backup.inactive_players)
        self.scored_with = backup.scored_with
        self.match_name = backup.match_name
        self.winner_rule = backup.winner_rule
        self.num_rounds = backup.num_rounds
        self.scoring_mode = backup.scoring_mode
        self.curve = backup.curve
        self._backup = None
        self.cursor.close()
        self.phase = Phase.ACTIVE
        return True

    # -- live structure ----------------------------------------------------------

    def append_round(self) -> bool:
        if self.phase is not Phase.ACTIVE or self.scores is None:
            return False
        self.scores.append_round()
        if self.overlay is not None:
            self.overlay.append_round()
        self.num_rounds = self.scores.num_rounds
        self._autosave()
        return True

    def add_player(self, player: Player) -> bool:
        if self.phase is not Phase.ACTIVE or self.scores is None or self.column_of(player.id) is not None:
            return False
        self.scores.add_player_column()
        if self.overlay is not None:
            self.overlay.add_player_column()
        self.selected_players.append(player)
        self._autosave()
        return True

    def remove_player(self, index: int) -> bool:
        """Splice a player's column out of every round at once."""
        if self.phase is not Phase.ACTIVE or self.scores is None:
            return False
        self.scores.remove_player_column(index)
        if self.overlay is not None:
            self.overlay.remove_player_column(index)
        removed = self.selected_players.pop(index)
        self.inactive_players.discard(removed.id)
        self.cursor.column_removed(index)
        logger.info("Removed %s from the match", removed.name)
        self._autosave()
        return True

    def set_player_active(self, player_id: str, active: bool) -> bool:
        col = self.column_of(player_id)
        if self.phase is not Phase.ACTIVE or col is None:
            return False
        if active:
            self.inactive_players.discard(player_id)
        else:
            self.inactive_players.add(player_id)
            self.cursor.column_deactivated(col)
        self._autosave()
        return True

    # -- cell entry --------------------------------------------------------------

    def open_cell(self, row: int, col: int, kind: CellKind | str = CellKind.SCORE) -> bool:
        return self.cursor.open(row, col, kind)

    def type_digit(self, digit: int | str) -> bool:
        return self.cursor.type_digit(digit)

    def backspace(self) -> bool:
        return self.cursor.backspace()

    def clear_entry(self) -> bool:
        return self.cursor.clear()

    def toggle_sign(self) -> bool:
        return self.cursor.toggle_sign()

    def quick_adjust(self, delta: int) -> bool:
        return self.cursor.quick_adjust(delta)

    def commit(self) -> bool:
        return self.cursor.commit()

    def record_result(self, success: bool) -> bool:
        return self.cursor.record_result(success)

    def move(self, direction: Direction | str) -> bool:
        return self.cursor.move(direction)

    def close_cell(self) -> None:
        self.cursor.close()

    # -- finishing ---------------------------------------------------------------

    def finish(self) -> MatchRecord | None:
        """Prune untouched rounds, persist the match, and lock the board."""
        if self.phase is not Phase.ACTIVE or self.scores is None:
            return None
        kept = self.scores.played_round_indices()
        pruned = self.scores.select_rounds(kept)
        record = MatchRecord.build(
            players=[player.name for player in self.selected_players],
            rounds=pruned.rows(),
            winner_rule=self.winner_rule,
            match_name=self.match_name,
        )
        if self.roster is not None:
            self.roster.create_match(record)

        self.scores = pruned
        if self.overlay is not None:
            self.overlay = self.overlay.select_rounds(kept)
        self.cursor.close()
        self.phase = Phase.FINISHED
        self.finished_record = record
        self._clear_draft()
        logger.info("Finished match %s with %d played rounds", record.id, len(record.rounds))
        return record

    def restart(self) -> bool:
        """Zero the board for the same players and round count."""
        if self.phase not in (Phase.ACTIVE, Phase.FINISHED):
            return False
        width = len(self.selected_players)
        self.scores = ScoreGrid.zeros(self.num_rounds, width)
        if self.scoring_mode is ScoringMode.PREDICTION:
            self.overlay = PredictionOverlay.blank(self.num_rounds, width)
            self.scored_with = self.curve
        self.finished_record = None
        self.cursor.close()
        self.phase = Phase.ACTIVE
        logger.info("Restarted match with %d players", width)
        self._autosave()
        return True

    def exit(self) -> None:
        """Abandon the match, drop the draft, and return to an empty setup."""
        self._clear_draft()
        self._reset_setup()
        logger.info("Left match; back to setup")

    new_game = exit

    # -- drafts ------------------------------------------------------------------

    def snapshot(self) -> DraftSnapshot:
        if self.scores is None:
            raise GridShapeError("No active grid to snapshot.")
        overlay = self.overlay
        return DraftSnapshot(
            match_name=self.match_name,
            winner_rule=self.winner_rule,
            num_rounds=self.num_rounds,
            scoring_mode=self.scoring_mode,
            curve=self.curve,
            selected_players=tuple(self.selected_players),
            scores=tuple(tuple(row) for row in self.scores.rows()),
            inactive_players=tuple(sorted(self.inactive_players)),
            predictions=tuple(tuple(row) for row in overlay.predictions.rows()) if overlay is not None else (),
            results=tuple(tuple(row) for row in overlay.results.rows()) if overlay is not None else (),
            scored_with=self.scored_with,
        )

    def _autosave(self) -> None:
        if self.phase is not Phase.ACTIVE or self.scores is None:
            return
        try:
            self.draft_store.save_draft(self.snapshot())
        except Exception as exc:
            logger.warning("Draft autosave failed: %s", exc)

    def _clear_draft(self) -> None:
        try:
            self.draft_store.clear_draft()
        except Exception as exc:
            logger.warning("Could not clear draft: %s", exc)

    def resume_draft(self) -> bool:
        """Load the stored draft into an active session, if there is a usable one."""
        if self.phase is not Phase.SETUP:
            return False
        try:
            draft = self.draft_store.load_draft()
        except Exception as exc:
            logger.warning("Could not read draft: %s", exc)
            return False
        if draft is None:
            return False
        try:
            self._load_snapshot(draft)
        except (ValueError, KeyError) as exc:
            logger.warning("Discarding inconsistent draft: %s", exc)
            self._clear_draft()
            self._reset_setup()
            return False
        logger.info("Resumed draft saved at %s", draft.saved_at)
        return True

    def _load_snapshot(self, draft: DraftSnapshot) -> None:
        players = list(draft.selected_players)
        width = len(players)
        scores = ScoreGrid(draft.scores, width)
        overlay: PredictionOverlay | None = None
        if draft.scoring_mode is ScoringMode.PREDICTION:
            if draft.predictions or draft.results:
                overlay = PredictionOverlay.from_rows(draft.predictions, draft.results, width)
            else:
                overlay = PredictionOverlay.blank(scores.num_rounds, width)
            if overlay.shape != scores.shape:
                raise GridShapeError(f"Overlay shape {overlay.shape} does not match scores {scores.shape}.")

        self._reset_setup()
        self.match_name = draft.match_name
        self.winner_rule = draft.winner_rule
        self.scoring_mode = draft.scoring_mode
        self.curve = draft.curve
        self.selected_players = players
        self.scores = scores
        self.overlay = overlay
        self.num_rounds = scores.num_rounds
        self.inactive_players = set(draft.inactive_players) & {player.id for player in players}
        if overlay is not None:
            self.scored_with = draft.scored_with or draft.curve
        self.phase = Phase.ACTIVE

    # -- view --------------------------------------------------------------------

    def view(self) -> dict[str, Any]:
        """Serializable snapshot of everything a scoreboard screen shows."""
        totals = self.totals()
        ranked = self.rankings() if totals else []
        return to_serializable(
            {
                "phase": self.phase,
                "setup": {
                    "match_name": self.match_name,
                    "winner_rule": self.winner_rule,
                    "num_rounds": self.num_rounds,
                    "scoring_mode": self.scoring_mode,
                    "curve": self.curve,
                    "selected_players": self.selected_players,
                },
                "players": self.grid_players,
                "inactive_players": sorted(self.inactive_players),
                "scores": self.scores.rows() if self.scores is not None else [],
                "predictions": self.overlay.predictions.rows() if self.overlay is not None else None,
                "results": self.overlay.results.rows() if self.overlay is not None else None,
                "totals": totals,
                "ranks": dense_ranks(totals, self.winner_rule),
                "rankings": ranked,
                "winner_index": self.winner_index(),
                "cursor": self.cursor.state,
                "finished_match_id": self.finished_record.id if self.finished_record is not None else None,
            }
        )
