from __future__ import annotations
import asyncio
import random
import uuid
from datetime import timedelta
import pytest
from sqlalchemy import select, func

from photocontest.db import SessionLocal
from photocontest.errors import InvalidVote, InvalidValue, NotFound, PhaseClosed
from photocontest.models.vote import Vote
from photocontest.models.xp import XPTransaction
from photocontest.services.votes import cast_vote, get_aggregate, list_user_votes


async def _vote(user_id, photo, value, now=None):
    async with SessionLocal() as s:
        out = await cast_vote(s, user_id=user_id, photo_id=photo.id, contest_id=photo.contest_id, value=value, now=now)
        await s.commit()
        return out


async def _aggregate(photo_id):
    async with SessionLocal() as s:
        return await get_aggregate(s, photo_id)


@pytest.mark.asyncio
async def test_first_vote_and_revote(db, make):
    c = await make.contest("voting")
    p = await make.photo(c, "alice")

    first = await _vote("bob", p, 4)
    assert first.accepted and first.previous_value is None
    assert (first.vote_count, first.total_score) == (1, 4)

    again = await _vote("bob", p, 2)
    assert again.previous_value == 4
    assert (again.vote_count, again.total_score) == (1, 2)
    assert again.average_rating == 2.0

    agg = await _aggregate(p.id)
    assert (agg.vote_count, agg.total_score) == (1, 2)


@pytest.mark.asyncio
async def test_random_vote_sequence_keeps_aggregate_consistent(db, make):
    c = await make.contest("voting")
    p = await make.photo(c, "owner")
    rng = random.Random(1234)
    current: dict[str, int] = {}
    for _ in range(40):
        voter = f"voter-{rng.randint(1, 6)}"
        value = rng.randint(1, 5)
        await _vote(voter, p, value)
        current[voter] = value

    agg = await _aggregate(p.id)
    assert agg.vote_count == len(current)
    assert agg.total_score == sum(current.values())
    async with SessionLocal() as s:
        rows = await s.scalar(select(func.count()).select_from(Vote).where(Vote.photo_id == p.id))
    assert rows == len(current)


@pytest.mark.asyncio
async def test_concurrent_first_votes_are_all_counted(db, make):
    c = await make.contest("voting")
    p = await make.photo(c, "owner")
    voters = [f"voter-{i}" for i in range(25)]

    await asyncio.gather(*(_vote(v, p, 3) for v in voters))

    agg = await _aggregate(p.id)
    assert agg.vote_count == 25
    assert agg.total_score == 75


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [0, 6, -1, 100])
async def test_out_of_range_value(db, make, value):
    c = await make.contest("voting")
    p = await make.photo(c, "owner")
    with pytest.raises(InvalidValue):
        await _vote("bob", p, value)


@pytest.mark.asyncio
async def test_self_vote_rejected(db, make):
    c = await make.contest("voting")
    p = await make.photo(c, "alice")
    with pytest.raises(InvalidVote) as exc:
        await _vote("alice", p, 5)
    assert type(exc.value) is InvalidVote
    assert (await _aggregate(p.id)).vote_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("phase", ["upcoming", "submission", "processing", "ended"])
async def test_vote_outside_voting_phase(db, make, phase):
    c = await make.contest(phase)
    p = await make.photo(c, "alice")
    with pytest.raises(PhaseClosed):
        await _vote("bob", p, 3)


@pytest.mark.asyncio
async def test_unknown_photo_or_wrong_contest(db, make):
    c1 = await make.contest("voting")
    c2 = await make.contest("voting", title="Other")
    p = await make.photo(c1, "alice")
    async with SessionLocal() as s:
        with pytest.raises(NotFound):
            await cast_vote(s, user_id="bob", photo_id=uuid.uuid4(), contest_id=c1.id, value=3)
    async with SessionLocal() as s:
        with pytest.raises(NotFound):
            await cast_vote(s, user_id="bob", photo_id=p.id, contest_id=c2.id, value=3)


@pytest.mark.asyncio
async def test_vote_xp_granted_once_per_photo(db, make):
    c = await make.contest("voting")
    p = await make.photo(c, "alice")
    await _vote("bob", p, 5)
    await _vote("bob", p, 1)
    await _vote("bob", p, 3)
    async with SessionLocal() as s:
        rows = (await s.execute(select(XPTransaction).where(XPTransaction.user_id == "bob"))).scalars().all()
    assert [(t.action_type, t.xp_amount) for t in rows] == [("VOTE", 5)]


@pytest.mark.asyncio
async def test_explicit_now_inside_voting_window(db, make):
    c = await make.contest("ended")
    p = await make.photo(c, "alice")
    out = await _vote("bob", p, 4, now=c.voting_start_date + timedelta(hours=1))
    assert out.vote_count == 1


@pytest.mark.asyncio
async def test_list_user_votes(db, make):
    c = await make.contest("voting")
    p1 = await make.photo(c, "alice")
    p2 = await make.photo(c, "carol")
    await _vote("bob", p1, 2)
    await _vote("bob", p2, 5)
    async with SessionLocal() as s:
        votes = await list_user_votes(s, "bob", c.id)
        none = await list_user_votes(s, "bob", uuid.uuid4())
    assert {v.photo_id for v in votes} == {p1.id, p2.id}
    assert none == []
