"""Pydantic request schemas for the scoreboard API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from scoreboard.constants import CUSTOM_TABLE_SIZE, MAX_ROUNDS, MIN_ROUNDS

EntryKey = Literal["0", "1", "2", "3", "4", "5", "6", "7", "8", "9", "backspace", "clear", "toggle_sign", "enter"]


class PlayerRequest(BaseModel):
    """Request body for creating or renaming a player."""

    name: str
    group: str | None = None


class SetupRequest(BaseModel):
    """Partial setup update; omitted fields are left unchanged."""

    match_name: str | None = None
    winner_rule: Literal["highest", "lowest"] | None = None
    num_rounds: int | None = Field(default=None, ge=MIN_ROUNDS, le=MAX_ROUNDS)
    player_ids: list[str] | None = None
    scoring_mode: Literal["standard", "prediction"] | None = None
    curve_kind: Literal["standard", "progressive", "dynamic", "custom"] | None = None
    penalty_enabled: bool | None = None
    custom_table: list[int | None] | None = Field(default=None, max_length=CUSTOM_TABLE_SIZE)


class AddPlayerRequest(BaseModel):
    player_id: str


class PlayerActiveRequest(BaseModel):
    active: bool


class OpenCellRequest(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    kind: Literal["score", "prediction", "result_entry", "curve_parameter"] = "score"


class KeyRequest(BaseModel):
    key: EntryKey


class AdjustRequest(BaseModel):
    delta: int


class MoveRequest(BaseModel):
    direction: Literal["up", "down", "left", "right"]


class ResultRequest(BaseModel):
    success: bool
