"""Holds the one live match controller and wires it to persistent stores."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Any, Iterator

from scoreboard.controller import MatchController
from scoreboard.draft import DraftStore, JsonDraftStore
from scoreboard.logging_config import get_logger
from scoreboard.models import Player
from server.roster_store import RosterStore
from server.schemas import SetupRequest
from server.settings import ServerSettings

logger = get_logger(__name__)


class SessionStore:
    """Single-user session holder; FastAPI runs sync routes on a thread pool, hence the lock."""

    def __init__(
        self,
        roster: RosterStore | None = None,
        draft_store: DraftStore | None = None,
        settings: ServerSettings | None = None,
    ) -> None:
        settings = settings or ServerSettings.from_env()
        self.roster = roster or RosterStore(path=settings.roster_path)
        self.draft_store = draft_store or JsonDraftStore(path=settings.draft_path)
        self.controller = MatchController(draft_store=self.draft_store, roster=self.roster)
        self._lock = Lock()

    @contextmanager
    def locked(self) -> Iterator[MatchController]:
        with self._lock:
            yield self.controller

    def view(self) -> dict[str, Any]:
        payload = self.controller.view()
        payload["hints"] = [hint.to_dict() for hint in self.controller.hints.drain()]
        payload["has_draft"] = self.draft_summary() is not None
        return payload

    def draft_summary(self) -> dict[str, Any] | None:
        try:
            draft = self.draft_store.load_draft()
        except Exception as exc:
            logger.warning("Could not read draft: %s", exc)
            return None
        return draft.summary() if draft is not None else None

    def discard_draft(self) -> None:
        self.draft_store.clear_draft()
        logger.info("Draft discarded")

    def resolve_players(self, player_ids: list[str]) -> list[Player]:
        """Look up roster players in the requested order; unknown ids raise ``KeyError``."""
        return [self.roster.get_player(player_id) for player_id in player_ids]

    def apply_setup(self, request: SetupRequest) -> None:
        """Apply only the fields present in the request."""
        controller = self.controller
        if request.player_ids is not None:
            players = self.resolve_players(request.player_ids)
            for player in list(controller.selected_players):
                controller.deselect_player(player.id)
            for player in players:
                controller.select_player(player)
        if request.match_name is not None:
            controller.set_match_name(request.match_name)
        if request.winner_rule is not None:
            controller.set_winner_rule(request.winner_rule)
        if request.num_rounds is not None:
            controller.set_num_rounds(request.num_rounds)
        if request.scoring_mode is not None:
            controller.set_scoring_mode(request.scoring_mode)
        if request.curve_kind is not None:
            controller.set_curve_kind(request.curve_kind)
        if request.penalty_enabled is not None:
            controller.set_penalty_enabled(request.penalty_enabled)
        if request.custom_table is not None:
            for index, value in enumerate(request.custom_table):
                controller.set_custom_entry(index, value)
