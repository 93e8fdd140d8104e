from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from photocontest.db import utcnow
from photocontest.errors import InvalidVote, InvalidValue, NotFound, PhaseClosed, Conflict, Transient
from photocontest.models.contest import Contest, Submission
from photocontest.models.vote import Vote
from photocontest.models.xp import ActionType
from photocontest.services.phases import Phase, resolve_phase
from photocontest.services.rewards import grant_once
from photocontest.services.time_windows import as_utc

log = structlog.get_logger()

MIN_VOTE = 1
MAX_VOTE = 5


def average_rating(total_score: int, vote_count: int) -> float:
    if vote_count <= 0:
        return 0.0
    return total_score / vote_count


@dataclass(frozen=True)
class PhotoAggregate:
    photo_id: UUID
    vote_count: int
    total_score: int
    average_rating: float


@dataclass(frozen=True)
class VoteOutcome:
    accepted: bool
    previous_value: int | None
    vote_count: int
    total_score: int
    average_rating: float


async def cast_vote(
    session: AsyncSession,
    *,
    user_id: str,
    photo_id: UUID,
    contest_id: UUID,
    value: int,
    now: datetime | None = None,
) -> VoteOutcome:
    """
    Insert or update the caller's vote and move the photo aggregate by the
    difference, all inside the caller's transaction (the caller commits).

    The submission row is locked first (FOR UPDATE; SQLite serializes
    writers with BEGIN IMMEDIATE), and the aggregate is moved by a single
    arithmetic UPDATE, so concurrent voters never overwrite each other.
    """
    if not isinstance(value, int) or isinstance(value, bool) or not (MIN_VOTE <= value <= MAX_VOTE):
        raise InvalidValue(f"vote value must be an integer between {MIN_VOTE} and {MAX_VOTE}")
    now = as_utc(now or utcnow())

    try:
        sub = await session.get(Submission, photo_id, with_for_update=True)
        if sub is None or sub.contest_id != contest_id:
            raise NotFound("photo not found in this contest")
        contest = await session.get(Contest, contest_id)
        if contest is None:
            raise NotFound("contest not found")
        if resolve_phase(contest, now) is not Phase.VOTING:
            raise PhaseClosed("contest is not in the voting phase")
        if sub.user_id == user_id:
            raise InvalidVote("cannot vote on your own photo")

        existing = await session.scalar(
            select(Vote).where(Vote.user_id == user_id, Vote.photo_id == photo_id)
        )
        if existing is None:
            previous = None
            count_delta, score_delta = 1, value
            session.add(Vote(user_id=user_id, photo_id=photo_id, contest_id=contest_id,
                             value=value, created_at=now, updated_at=now))
        else:
            previous = int(existing.value)
            count_delta, score_delta = 0, value - previous
            existing.value = value
            existing.updated_at = now
        await session.flush()

        row = (await session.execute(
            update(Submission)
            .where(Submission.id == photo_id)
            .values(
                vote_count=Submission.vote_count + count_delta,
                total_score=Submission.total_score + score_delta,
            )
            .returning(Submission.vote_count, Submission.total_score)
            .execution_options(synchronize_session=False)
        )).one()
        # keep the already-loaded row in step without marking it dirty
        set_committed_value(sub, "vote_count", int(row[0]))
        set_committed_value(sub, "total_score", int(row[1]))

        if previous is None:
            await grant_once(session, contest=contest, user_id=user_id,
                             action=ActionType.VOTE, photo_id=photo_id, now=now)
    except IntegrityError as exc:
        raise Conflict("vote was changed concurrently, retry") from exc
    except OperationalError as exc:
        raise Transient("vote store unavailable, retry") from exc

    vote_count, total_score = int(row[0]), int(row[1])
    log.info("vote.cast", user_id=user_id, photo_id=str(photo_id), contest_id=str(contest_id),
             value=value, previous_value=previous)
    return VoteOutcome(
        accepted=True,
        previous_value=previous,
        vote_count=vote_count,
        total_score=total_score,
        average_rating=average_rating(total_score, vote_count),
    )


async def get_aggregate(session: AsyncSession, photo_id: UUID) -> PhotoAggregate:
    sub = await session.get(Submission, photo_id, populate_existing=True)
    if sub is None:
        raise NotFound("photo not found")
    return PhotoAggregate(
        photo_id=sub.id,
        vote_count=int(sub.vote_count),
        total_score=int(sub.total_score),
        average_rating=average_rating(int(sub.total_score), int(sub.vote_count)),
    )


async def list_user_votes(session: AsyncSession, user_id: str, contest_id: UUID | None = None) -> list[Vote]:
    q = select(Vote).where(Vote.user_id == user_id)
    if contest_id is not None:
        q = q.where(Vote.contest_id == contest_id)
    return (await session.execute(q.order_by(Vote.updated_at.desc()))).scalars().all()
