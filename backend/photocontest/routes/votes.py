from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession

from photocontest.db import get_session
from photocontest.auth_deps import get_current_user_id
from photocontest.schemas.vote import VoteCreate, VoteResult, PhotoAggregatePublic, VotePublic
from photocontest.services.votes import cast_vote, get_aggregate, list_user_votes

router = APIRouter(tags=["votes"])

@router.post("/votes", response_model=VoteResult)
async def post_vote(
    body: VoteCreate,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    outcome = await cast_vote(
        session,
        user_id=user_id,
        photo_id=body.photo_id,
        contest_id=body.contest_id,
        value=body.value,
    )
    await session.commit()
    return VoteResult(
        accepted=outcome.accepted,
        previous_value=outcome.previous_value,
        vote_count=outcome.vote_count,
        total_score=outcome.total_score,
        average_rating=outcome.average_rating,
    )

@router.get("/photos/{photo_id}/votes", response_model=PhotoAggregatePublic)
async def photo_votes(
    photo_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
):
    agg = await get_aggregate(session, photo_id)
    return PhotoAggregatePublic(
        photo_id=agg.photo_id,
        vote_count=agg.vote_count,
        total_score=agg.total_score,
        average_rating=agg.average_rating,
    )

@router.get("/users/me/votes", response_model=list[VotePublic])
async def my_votes(
    contest_id: UUID | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    votes = await list_user_votes(session, user_id, contest_id)
    return [
        VotePublic(
            id=v.id,
            photo_id=v.photo_id,
            contest_id=v.contest_id,
            value=int(v.value),
            created_at=v.created_at,
            updated_at=v.updated_at,
        ) for v in votes
    ]
