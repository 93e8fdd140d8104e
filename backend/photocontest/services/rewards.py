from __future__ import annotations
from datetime import datetime
from math import ceil
from uuid import UUID, uuid4
import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from photocontest.db import insert_for, utcnow
from photocontest.errors import NotFound, PhaseClosed
from photocontest.models.contest import Contest, Submission
from photocontest.models.xp import ActionType, XPTransaction, ContestRewardRecord, ContestFinalization
from photocontest.services.levels import LEVEL_FORMULA
from photocontest.services.phases import Phase, resolve_phase
from photocontest.services.ranking import RankInput, rank
from photocontest.services.time_windows import as_utc

log = structlog.get_logger()

XP_REWARDS: dict[ActionType, int] = {
    ActionType.SUBMIT_PHOTO: 25,
    ActionType.VOTE: 5,
    ActionType.PLACE_1ST: 200,
    ActionType.PLACE_2ND: 150,
    ActionType.PLACE_3RD: 100,
    ActionType.TOP_10_PERCENT: 50,
    ActionType.TOP_25_PERCENT: 25,
}

REASONS: dict[ActionType, str] = {
    ActionType.SUBMIT_PHOTO: "Photo submission",
    ActionType.VOTE: "Vote cast",
    ActionType.PLACE_1ST: "1st place finish",
    ActionType.PLACE_2ND: "2nd place finish",
    ActionType.PLACE_3RD: "3rd place finish",
    ActionType.TOP_10_PERCENT: "Top 10% finish",
    ActionType.TOP_25_PERCENT: "Top 25% finish",
    ActionType.PHOTO_DELETION: "Photo deleted",
}

PLACEMENT_ACTIONS: tuple[ActionType, ...] = (
    ActionType.PLACE_1ST,
    ActionType.PLACE_2ND,
    ActionType.PLACE_3RD,
    ActionType.TOP_10_PERCENT,
    ActionType.TOP_25_PERCENT,
)

# ---------- pure: placement tiers ----------

def placement_award(placement: int | None, total_submissions: int) -> ActionType | None:
    """Highest tier a ranked photo qualifies for; one award per photo."""
    if placement is None or placement < 1 or total_submissions <= 0:
        return None
    if placement == 1:
        return ActionType.PLACE_1ST
    if placement == 2:
        return ActionType.PLACE_2ND
    if placement == 3:
        return ActionType.PLACE_3RD
    if placement <= ceil(0.10 * total_submissions):
        return ActionType.TOP_10_PERCENT
    if placement <= ceil(0.25 * total_submissions):
        return ActionType.TOP_25_PERCENT
    return None


def reward_table() -> dict:
    return {
        "rewards": {a.value: amt for a, amt in XP_REWARDS.items()},
        "level_formula": LEVEL_FORMULA,
        "description": {a.value: REASONS[a] for a in XP_REWARDS},
        "stacking": (
            "Each ranked photo earns only its highest placement tier; "
            "a user with several photos earns one award per qualifying photo."
        ),
    }

# ---------- idempotent grant ----------

async def grant_once(
    session: AsyncSession,
    *,
    contest: Contest,
    user_id: str,
    action: ActionType,
    photo_id: UUID,
    now: datetime,
    amount: int | None = None,
) -> XPTransaction | None:
    """
    Append one XP transaction unless the (contest, user, action, photo) guard
    already exists. Guard and transaction are written in the caller's
    transaction so they commit together or not at all.
    Returns None when the guard was already present (no-op).
    """
    xp_amount = XP_REWARDS[action] if amount is None else int(amount)
    tx_id = uuid4()

    insert = insert_for(session)
    stmt = (
        insert(ContestRewardRecord)
        .values(
            id=uuid4(),
            contest_id=contest.id,
            user_id=user_id,
            action_type=action.value,
            photo_id=photo_id,
            xp_transaction_id=tx_id,
            created_at=now,
        )
        .on_conflict_do_nothing(index_elements=["contest_id", "user_id", "action_type", "photo_id"])
        .returning(ContestRewardRecord.id)
    )
    guard_id = (await session.execute(stmt)).scalar_one_or_none()
    if guard_id is None:
        return None

    tx = XPTransaction(
        id=tx_id,
        user_id=user_id,
        action_type=action.value,
        xp_amount=xp_amount,
        reason=REASONS[action],
        contest_id=contest.id,
        contest_title=contest.title,
        photo_id=photo_id,
        awarded_at=now,
    )
    session.add(tx)
    await session.flush()
    log.info("xp.granted", user_id=user_id, action=action.value, xp=xp_amount,
             contest_id=str(contest.id), photo_id=str(photo_id))
    return tx

# ---------- finalize: placement awards ----------

async def _mark_finalized(session: AsyncSession, contest_id: UUID, granted: int, now: datetime) -> None:
    insert = insert_for(session)
    await session.execute(
        insert(ContestFinalization)
        .values(contest_id=contest_id, finalized_at=now, awards_granted=granted)
        .on_conflict_do_nothing(index_elements=["contest_id"])
    )


async def finalize_contest(session: AsyncSession, contest_id: UUID, *, now: datetime | None = None) -> dict:
    """
    Idempotent reward pass for an ended contest:
      - rank submissions (ties share a rank, unvoted photos are unranked)
      - grant each ranked photo's owner its single highest placement tier
      - skip grants whose guard already exists (earlier or concurrent pass)
      - record the finalization marker
    Safe to call any number of times; the caller commits.
    """
    now = as_utc(now or utcnow())
    contest = await session.get(Contest, contest_id)
    if contest is None:
        raise NotFound(f"contest {contest_id} not found")
    if resolve_phase(contest, now) is not Phase.ENDED:
        raise PhaseClosed("contest voting has not ended yet")
    previously_finalized = await session.get(ContestFinalization, contest.id) is not None

    submissions = (await session.execute(
        select(Submission).where(Submission.contest_id == contest.id).order_by(Submission.id)
        .execution_options(populate_existing=True)
    )).scalars().all()
    owners = {s.id: s.user_id for s in submissions}
    ranking = rank(RankInput(s.id, s.total_score, s.vote_count) for s in submissions)
    total = len(submissions)

    granted = 0
    already = 0
    for entry in ranking:
        action = placement_award(entry.rank, total)
        if action is None:
            continue
        tx = await grant_once(
            session, contest=contest, user_id=owners[entry.photo_id],
            action=action, photo_id=entry.photo_id, now=now,
        )
        if tx is None:
            already += 1
        else:
            granted += 1

    await _mark_finalized(session, contest.id, granted, now)
    ranked = sum(1 for e in ranking if e.rank is not None)
    log.info("contest.finalized", contest_id=str(contest.id), submissions=total,
             ranked=ranked, granted=granted, already_awarded=already)
    return {
        "contest_id": contest.id,
        "status": "already_finalized" if previously_finalized or (already and not granted) else "finalized",
        "submissions": total,
        "ranked": ranked,
        "granted": granted,
        "already_awarded": already,
    }

# ---------- submission / deletion hooks ----------

async def award_submission_xp(session: AsyncSession, photo_id: UUID, *, now: datetime | None = None) -> XPTransaction | None:
    """One-time SUBMIT_PHOTO award, called by the upload side after it stores a submission."""
    now = as_utc(now or utcnow())
    sub = await session.get(Submission, photo_id)
    if sub is None:
        raise NotFound(f"photo {photo_id} not found")
    contest = await session.get(Contest, sub.contest_id)
    if contest is None:
        raise NotFound(f"contest {sub.contest_id} not found")
    return await grant_once(
        session, contest=contest, user_id=sub.user_id,
        action=ActionType.SUBMIT_PHOTO, photo_id=sub.id, now=now,
    )


async def revoke_photo_xp(session: AsyncSession, photo_id: UUID, *, now: datetime | None = None) -> XPTransaction | None:
    """
    Append one compensating PHOTO_DELETION transaction equal to the owner's net
    XP earned through this photo. Must run before the submission row is removed.
    Earlier transactions are left untouched.
    """
    now = as_utc(now or utcnow())
    sub = await session.get(Submission, photo_id)
    if sub is None:
        raise NotFound(f"photo {photo_id} not found")
    contest = await session.get(Contest, sub.contest_id)
    if contest is None:
        raise NotFound(f"contest {sub.contest_id} not found")

    earned = await session.scalar(
        select(func.coalesce(func.sum(XPTransaction.xp_amount), 0))
        .where(XPTransaction.photo_id == sub.id, XPTransaction.user_id == sub.user_id)
    ) or 0
    if int(earned) <= 0:
        return None
    return await grant_once(
        session, contest=contest, user_id=sub.user_id,
        action=ActionType.PHOTO_DELETION, photo_id=sub.id, now=now, amount=-int(earned),
    )
