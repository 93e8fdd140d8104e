from __future__ import annotations
import random
import uuid
from photocontest.services.ranking import RankInput, rank

A = uuid.UUID("00000000-0000-0000-0000-00000000000a")
B = uuid.UUID("00000000-0000-0000-0000-00000000000b")
C = uuid.UUID("00000000-0000-0000-0000-00000000000c")


def _ranks(entries):
    return {e.photo_id: e.rank for e in rank(entries)}


def test_tie_shares_rank_and_skips_next():
    got = _ranks([RankInput(A, 10, 5), RankInput(B, 10, 5), RankInput(C, 9, 9)])
    assert got == {A: 1, B: 1, C: 3}


def test_vote_count_breaks_equal_score():
    got = _ranks([RankInput(A, 10, 2), RankInput(B, 10, 4)])
    assert got == {B: 1, A: 2}


def test_empty_input():
    assert rank([]) == []


def test_unvoted_entries_are_unranked_and_last():
    out = rank([RankInput(C, 0, 0), RankInput(A, 3, 1)])
    assert [(e.photo_id, e.rank) for e in out] == [(A, 1), (C, None)]


def test_order_does_not_depend_on_input_order():
    rng = random.Random(7)
    entries = [RankInput(uuid.UUID(int=i + 1), rng.randint(0, 20), rng.randint(0, 4)) for i in range(40)]
    expected = rank(entries)
    for _ in range(10):
        shuffled = entries[:]
        rng.shuffle(shuffled)
        assert rank(shuffled) == expected


def test_competition_ranking_shape():
    scores = [(30, 6), (25, 5), (25, 5), (25, 5), (20, 4), (20, 4), (5, 1)]
    entries = [RankInput(uuid.UUID(int=i + 1), s, n) for i, (s, n) in enumerate(scores)]
    assert [e.rank for e in rank(entries)] == [1, 2, 2, 2, 5, 5, 7]
