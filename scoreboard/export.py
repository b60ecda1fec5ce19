"""Tabular text export for finished matches."""

from __future__ import annotations

import csv
import io

from .models import MatchRecord


def match_rows(record: MatchRecord) -> list[list[str]]:
    """Header, one ``R<n>`` row per round, then the totals row."""
    rows = [["Round", *record.players]]
    for index, scores in enumerate(record.rounds, start=1):
        rows.append([f"R{index}", *(str(value) for value in scores)])
    rows.append(["Total", *(str(value) for value in record.totals)])
    return rows


def match_to_csv(record: MatchRecord) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(match_rows(record))
    return buffer.getvalue().rstrip("\n")


def export_filename(record: MatchRecord) -> str:
    return f"game-{record.created_at[:10]}.csv"
