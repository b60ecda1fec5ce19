"""FastAPI server exposing a local scorekeeping API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from scoreboard.controller import MatchController
from scoreboard.errors import ScoreboardError, ValidationRejected
from scoreboard.export import export_filename, match_to_csv
from scoreboard.logging_config import get_logger, setup_logging
from server.schemas import (
    AddPlayerRequest,
    AdjustRequest,
    KeyRequest,
    MoveRequest,
    OpenCellRequest,
    PlayerActiveRequest,
    PlayerRequest,
    ResultRequest,
    SetupRequest,
)
from server.session import SessionStore
from server.settings import ServerSettings

settings = ServerSettings.from_env()
setup_logging(level=settings.log_level, log_dir=settings.log_dir, log_to_file=settings.log_dir is not None)
logger = get_logger(__name__)

app = FastAPI(title="Tabletop Scorekeeper Local API", version="0.1.0")
store = SessionStore(settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

T = TypeVar("T")


def _guard(action: Callable[[], T]) -> T:
    """Run an action, mapping engine errors onto HTTP status codes."""
    try:
        return action()
    except ValidationRejected as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict()) from exc
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown id: {exc.args[0] if exc.args else exc}") from exc
    except (ScoreboardError, IndexError, ValueError) as exc:
        logger.error("Rejected request: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def _session_action(action: Callable[[MatchController], Any]) -> dict[str, Any]:
    """Apply an action to the live controller and return the refreshed view."""

    def run() -> dict[str, Any]:
        with store.locked() as controller:
            accepted = action(controller)
            payload = store.view()
        payload["accepted"] = accepted is not False and accepted is not None
        return payload

    return _guard(run)


@app.get("/api/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


# -- players ---------------------------------------------------------------------


@app.get("/api/players")
def list_players() -> list[dict[str, Any]]:
    return [player.to_dict() for player in store.roster.list_players()]


@app.get("/api/players/groups")
def list_player_groups() -> dict[str, list[dict[str, Any]]]:
    """Roster bucketed by group label for the setup picker."""
    return {
        group: [player.to_dict() for player in players]
        for group, players in store.roster.players_by_group().items()
    }


@app.post("/api/players")
def create_player(request: PlayerRequest) -> dict[str, Any]:
    return _guard(lambda: store.roster.create_player(request.name, request.group)).to_dict()


@app.put("/api/players/{player_id}")
def update_player(player_id: str, request: PlayerRequest) -> dict[str, Any]:
    return _guard(lambda: store.roster.update_player(player_id, request.name, request.group)).to_dict()


@app.delete("/api/players/{player_id}")
def delete_player(player_id: str) -> dict[str, str]:
    _guard(lambda: store.roster.delete_player(player_id))
    return {"status": "deleted"}


# -- match history ---------------------------------------------------------------


@app.get("/api/matches")
def list_matches() -> list[dict[str, Any]]:
    return [record.to_dict() for record in store.roster.list_matches()]


@app.get("/api/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    return _guard(lambda: store.roster.get_match(match_id)).to_dict()


@app.delete("/api/matches/{match_id}")
def delete_match(match_id: str) -> dict[str, str]:
    _guard(lambda: store.roster.delete_match(match_id))
    return {"status": "deleted"}


@app.get("/api/matches/{match_id}/export", response_model=None)
def export_match(match_id: str) -> PlainTextResponse:
    """Return a finished match as CSV."""
    record = _guard(lambda: store.roster.get_match(match_id))
    return PlainTextResponse(
        content=match_to_csv(record),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(record)}"'},
    )


@app.delete("/api/data")
def clear_all_data() -> dict[str, str]:
    store.roster.clear_all()
    return {"status": "cleared"}


# -- drafts ----------------------------------------------------------------------


@app.get("/api/draft")
def get_draft() -> dict[str, Any]:
    with store.locked():
        return {"draft": store.draft_summary()}


@app.delete("/api/draft")
def discard_draft() -> dict[str, str]:
    with store.locked():
        store.discard_draft()
    return {"status": "discarded"}


# -- live session ----------------------------------------------------------------


@app.get("/api/session")
def get_session() -> dict[str, Any]:
    with store.locked():
        return store.view()


@app.post("/api/session/setup")
def update_setup(request: SetupRequest) -> dict[str, Any]:
    """Apply setup fields; ignored outside setup and editing."""

    def apply(controller: MatchController) -> bool:
        if not controller.in_setup:
            return False
        store.apply_setup(request)
        return True

    return _session_action(apply)


@app.post("/api/session/start")
def start_game() -> dict[str, Any]:
    return _session_action(lambda controller: controller.start_game())


@app.post("/api/session/edit")
def edit_game() -> dict[str, Any]:
    return _session_action(lambda controller: controller.edit())


@app.post("/api/session/cancel-edit")
def cancel_edit() -> dict[str, Any]:
    return _session_action(lambda controller: controller.cancel_edit())


@app.post("/api/session/finish")
def finish_game() -> dict[str, Any]:
    return _session_action(lambda controller: controller.finish())


@app.post("/api/session/restart")
def restart_game() -> dict[str, Any]:
    return _session_action(lambda controller: controller.restart())


@app.post("/api/session/exit")
def exit_game() -> dict[str, Any]:
    return _session_action(lambda controller: controller.exit() or True)


@app.post("/api/session/resume")
def resume_draft() -> dict[str, Any]:
    return _session_action(lambda controller: controller.resume_draft())


@app.post("/api/session/rounds")
def append_round() -> dict[str, Any]:
    return _session_action(lambda controller: controller.append_round())


@app.post("/api/session/players")
def add_session_player(request: AddPlayerRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.add_player(store.roster.get_player(request.player_id)))


@app.delete("/api/session/players/{index}")
def remove_session_player(index: int) -> dict[str, Any]:
    return _session_action(lambda controller: controller.remove_player(index))


@app.post("/api/session/players/{player_id}/active")
def set_player_active(player_id: str, request: PlayerActiveRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.set_player_active(player_id, request.active))


# -- cursor ----------------------------------------------------------------------


def _press(controller: MatchController, key: str) -> bool:
    if key.isdigit():
        return controller.type_digit(key)
    if key == "backspace":
        return controller.backspace()
    if key == "clear":
        return controller.clear_entry()
    if key == "toggle_sign":
        return controller.toggle_sign()
    return controller.commit()


@app.post("/api/session/cursor/open")
def open_cell(request: OpenCellRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.open_cell(request.row, request.col, request.kind))


@app.post("/api/session/cursor/key")
def press_key(request: KeyRequest) -> dict[str, Any]:
    return _session_action(lambda controller: _press(controller, request.key))


@app.post("/api/session/cursor/adjust")
def adjust_value(request: AdjustRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.quick_adjust(request.delta))


@app.post("/api/session/cursor/move")
def move_cursor(request: MoveRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.move(request.direction))


@app.post("/api/session/cursor/commit")
def commit_cell() -> dict[str, Any]:
    return _session_action(lambda controller: controller.commit())


@app.post("/api/session/cursor/result")
def record_result(request: ResultRequest) -> dict[str, Any]:
    return _session_action(lambda controller: controller.record_result(request.success))


@app.post("/api/session/cursor/close")
def close_cell() -> dict[str, Any]:
    return _session_action(lambda controller: controller.close_cell() or True)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)
