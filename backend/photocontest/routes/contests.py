from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from photocontest.db import get_session, utcnow
from photocontest.auth_deps import require_admin
from photocontest.errors import PhaseClosed
from photocontest.models.contest import Contest, Submission
from photocontest.schemas.contest import PhaseView, StandingEntry, StandingsView, FinalizeResult
from photocontest.services.phases import Phase, resolve_phase, phase_deadline
from photocontest.services.ranking import RankInput, rank
from photocontest.services.rewards import finalize_contest
from photocontest.services.votes import average_rating

router = APIRouter(prefix="/contests", tags=["contests"])
log = structlog.get_logger()

async def _contest_or_404(session: AsyncSession, contest_id: UUID) -> Contest:
    contest = await session.get(Contest, contest_id)
    if not contest:
        raise HTTPException(status_code=404, detail="Contest not found")
    return contest

@router.get("/{contest_id}/phase", response_model=PhaseView)
async def get_phase(
    contest_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
):
    contest = await _contest_or_404(session, contest_id)
    now = utcnow()
    return PhaseView(
        contest_id=contest.id,
        phase=resolve_phase(contest, now),
        countdown_target=phase_deadline(contest, now),
        now=now,
    )

@router.get("/{contest_id}/standings", response_model=StandingsView)
async def get_standings(
    contest_id: UUID = Path(...),
    hide_ranks: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
):
    """
    Live standings. Available while voting and after the contest ended.
    hide_ranks only applies during voting: aggregates are returned in
    submission order without ranks so the board does not sway voters.
    """
    contest = await _contest_or_404(session, contest_id)
    phase = resolve_phase(contest, utcnow())
    if phase not in (Phase.VOTING, Phase.ENDED):
        raise PhaseClosed(f"standings are not available during the {phase.value} phase")

    subs = (await session.execute(
        select(Submission).where(Submission.contest_id == contest.id).order_by(Submission.created_at.asc(), Submission.id)
    )).scalars().all()
    owners = {s.id: s.user_id for s in subs}
    hidden = hide_ranks and phase is Phase.VOTING

    if hidden:
        entries = [
            StandingEntry(
                photo_id=s.id, user_id=s.user_id, rank=None,
                vote_count=s.vote_count, total_score=s.total_score,
                average_rating=average_rating(s.total_score, s.vote_count),
            ) for s in subs
        ]
    else:
        entries = [
            StandingEntry(
                photo_id=e.photo_id, user_id=owners[e.photo_id], rank=e.rank,
                vote_count=e.vote_count, total_score=e.total_score,
                average_rating=average_rating(e.total_score, e.vote_count),
            ) for e in rank(RankInput(s.id, s.total_score, s.vote_count) for s in subs)
        ]

    return StandingsView(
        contest_id=contest.id,
        phase=phase,
        ranks_hidden=hidden,
        total_submissions=len(subs),
        entries=entries[:limit],
    )

@router.post("/{contest_id}/finalize", response_model=FinalizeResult)
async def finalize(
    contest_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    admin_id: str = Depends(require_admin),
):
    """Run the reward pass now instead of waiting for the scheduler. Safe to repeat."""
    log.info("contest.finalize_requested", contest_id=str(contest_id), admin_id=admin_id)
    result = await finalize_contest(session, contest_id)
    await session.commit()
    return result
