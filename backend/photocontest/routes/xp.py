from __future__ import annotations
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession

from photocontest.config import settings
from photocontest.db import get_session
from photocontest.auth_deps import get_current_user_id
from photocontest.schemas.xp import (
    Timeframe, XPStats, LeaderboardEntryPublic, LeaderboardView, TimeframeXP,
    XPTransactionPublic, RecentTransactions, RewardsInfo,
)
from photocontest.services.leaderboard import leaderboard, user_timeframe_xp, user_xp_stats, recent_transactions
from photocontest.services.rewards import reward_table

router = APIRouter(prefix="/xp", tags=["xp"])

async def _stats(session: AsyncSession, user_id: str) -> XPStats:
    p = await user_xp_stats(session, user_id)
    return XPStats(
        user_id=user_id,
        level=p.level,
        total_xp=p.total_xp,
        current_level_xp=p.current_level_xp,
        next_level_xp=p.next_level_xp,
        xp_in_current_level=p.xp_in_current_level,
        xp_needed=p.xp_needed,
        progress_percent=p.progress_percent,
    )

@router.get("/stats", response_model=XPStats)
async def my_stats(
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return await _stats(session, user_id)

@router.get("/users/{user_id}/stats", response_model=XPStats)
async def user_stats(
    user_id: str = Path(..., max_length=64),
    session: AsyncSession = Depends(get_session),
):
    return await _stats(session, user_id)

@router.get("/leaderboard", response_model=LeaderboardView)
async def get_leaderboard(
    timeframe: Timeframe = Query(default="all"),
    limit: int = Query(default=10, ge=1, le=settings.leaderboard_max_limit),
    session: AsyncSession = Depends(get_session),
):
    rows = await leaderboard(session, timeframe, limit)
    return LeaderboardView(
        timeframe=timeframe,
        entries=[
            LeaderboardEntryPublic(rank=r.rank, user_id=r.user_id, xp=r.xp, total_xp=r.total_xp, level=r.level)
            for r in rows
        ],
    )

@router.get("/timeframe/{timeframe}", response_model=TimeframeXP)
async def my_timeframe_xp(
    timeframe: Timeframe = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return TimeframeXP(user_id=user_id, timeframe=timeframe, xp=await user_timeframe_xp(session, user_id, timeframe))

@router.get("/users/{user_id}/timeframe/{timeframe}", response_model=TimeframeXP)
async def user_timeframe(
    user_id: str = Path(..., max_length=64),
    timeframe: Timeframe = Path(...),
    session: AsyncSession = Depends(get_session),
):
    return TimeframeXP(user_id=user_id, timeframe=timeframe, xp=await user_timeframe_xp(session, user_id, timeframe))

@router.get("/transactions/recent", response_model=RecentTransactions)
async def recent(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    rows = await recent_transactions(session, user_id, limit, offset)
    return RecentTransactions(
        limit=limit,
        offset=offset,
        transactions=[
            XPTransactionPublic(
                id=t.id,
                action_type=t.action_type,
                xp_amount=int(t.xp_amount),
                reason=t.reason,
                contest_id=t.contest_id,
                contest_title=t.contest_title,
                photo_id=t.photo_id,
                awarded_at=t.awarded_at,
            ) for t in rows
        ],
    )

@router.get("/rewards", response_model=RewardsInfo)
async def rewards():
    """XP per action, the level curve and how placement awards stack."""
    return reward_table()
