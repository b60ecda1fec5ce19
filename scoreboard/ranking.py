"""Totals ordering and dense ranking under a winner rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .models import WinnerRule


@dataclass(frozen=True)
class RankedEntry:
    """One player's place in a ranking; ``index`` is the grid column."""

    index: int
    total: int
    rank: int
    name: str | None = None


def rank_totals(
    totals: Sequence[int],
    rule: WinnerRule | str,
    names: Sequence[str] | None = None,
) -> list[RankedEntry]:
    """Sort best-first and assign dense ranks.

    Equal totals share a rank and the next distinct total is exactly one rank lower.
    The sort is stable, so tied players keep their column order.
    """
    rule = WinnerRule(rule)
    order = sorted(
        range(len(totals)),
        key=lambda index: -totals[index] if rule is WinnerRule.HIGHEST else totals[index],
    )

    ranked: list[RankedEntry] = []
    rank = 0
    previous: int | None = None
    for index in order:
        total = int(totals[index])
        if previous is None or total != previous:
            rank += 1
        previous = total
        ranked.append(
            RankedEntry(
                index=index,
                total=total,
                rank=rank,
                name=names[index] if names is not None else None,
            )
        )
    return ranked


def dense_ranks(totals: Sequence[int], rule: WinnerRule | str) -> list[int]:
    """Return ranks aligned to the input order."""
    ranks = [0] * len(totals)
    for entry in rank_totals(totals, rule):
        ranks[entry.index] = entry.rank
    return ranks


def winner_index(totals: Sequence[int], rule: WinnerRule | str) -> int | None:
    """Column to highlight as the winner.

    On a tie for first this is the leftmost tied column. It is a display choice only;
    every tied player still holds rank 1.
    """
    ranked = rank_totals(totals, rule)
    if not ranked:
        return None
    return ranked[0].index
