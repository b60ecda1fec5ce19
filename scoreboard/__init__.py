"""Scoreboard engine exports: grid, cursor, ranking, prediction scoring, and match control."""

from .controller import MatchController, Phase
from .cursor import CellCursor, CellKind, CursorState, Direction
from .draft import DraftSnapshot, DraftStore, InMemoryDraftStore, JsonDraftStore
from .errors import GridIndexError, GridShapeError, RejectionReason, ScoreboardError, ValidationRejected
from .events import HintQueue, HintType, PresentationHint
from .grid import Matrix, ScoreGrid
from .models import MatchRecord, Player, WinnerRule, format_name
from .prediction import CurveConfig, CurveKind, PredictionOverlay, ScoringMode, points, recompute
from .ranking import RankedEntry, dense_ranks, rank_totals, winner_index

__all__ = [
    "CellCursor",
    "CellKind",
    "CursorState",
    "CurveConfig",
    "CurveKind",
    "Direction",
    "DraftSnapshot",
    "DraftStore",
    "GridIndexError",
    "GridShapeError",
    "HintQueue",
    "HintType",
    "InMemoryDraftStore",
    "JsonDraftStore",
    "MatchController",
    "MatchRecord",
    "Matrix",
    "Phase",
    "Player",
    "PredictionOverlay",
    "PresentationHint",
    "RankedEntry",
    "RejectionReason",
    "ScoreGrid",
    "ScoreboardError",
    "ScoringMode",
    "ValidationRejected",
    "WinnerRule",
    "dense_ranks",
    "format_name",
    "points",
    "rank_totals",
    "recompute",
    "winner_index",
]
