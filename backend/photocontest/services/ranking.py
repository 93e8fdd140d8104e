from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable
from uuid import UUID


@dataclass(frozen=True)
class RankInput:
    photo_id: UUID
    total_score: int
    vote_count: int


@dataclass(frozen=True)
class RankedEntry:
    photo_id: UUID
    rank: int | None  # None = unranked (no votes)
    total_score: int
    vote_count: int


def rank(entries: Iterable[RankInput]) -> list[RankedEntry]:
    """
    Competition ranking ("1-2-2-4") by total_score desc, then vote_count desc.

    Entries with equal (total_score, vote_count) share a rank and the next
    distinct entry takes rank = position + 1. photo_id only fixes the output
    order inside a tie so identical input always gives identical output.
    Entries without votes are unranked and come last.
    """
    items = list(entries)
    voted = sorted(
        (e for e in items if e.vote_count > 0),
        key=lambda e: (-int(e.total_score), -int(e.vote_count), str(e.photo_id)),
    )
    unvoted = sorted((e for e in items if e.vote_count <= 0), key=lambda e: str(e.photo_id))

    out: list[RankedEntry] = []
    prev_key: tuple[int, int] | None = None
    prev_rank = 0
    for pos, e in enumerate(voted):
        key = (int(e.total_score), int(e.vote_count))
        current = prev_rank if key == prev_key else pos + 1
        out.append(RankedEntry(photo_id=e.photo_id, rank=current, total_score=int(e.total_score), vote_count=int(e.vote_count)))
        prev_key, prev_rank = key, current

    out.extend(
        RankedEntry(photo_id=e.photo_id, rank=None, total_score=int(e.total_score), vote_count=int(e.vote_count))
        for e in unvoted
    )
    return out
