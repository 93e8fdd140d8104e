from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from photocontest.db import utcnow
from photocontest.models.xp import XPTransaction
from photocontest.services.levels import LevelProgress, level_for_xp, progress
from photocontest.services.time_windows import as_utc, timeframe_window


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: str
    xp: int        # XP inside the requested window
    total_xp: int  # lifetime XP
    level: int     # from lifetime XP


def _windowed(q, timeframe: str, now: datetime):
    start, end = timeframe_window(timeframe, now)
    if start is not None:
        q = q.where(XPTransaction.awarded_at >= start)
    if end is not None:
        q = q.where(XPTransaction.awarded_at <= end)
    return q


async def _lifetime_totals(session: AsyncSession, user_ids: list[str]) -> dict[str, int]:
    if not user_ids:
        return {}
    rows = (await session.execute(
        select(XPTransaction.user_id, func.coalesce(func.sum(XPTransaction.xp_amount), 0))
        .where(XPTransaction.user_id.in_(user_ids))
        .group_by(XPTransaction.user_id)
    )).all()
    return {uid: int(total) for uid, total in rows}


async def leaderboard(
    session: AsyncSession,
    timeframe: str = "all",
    limit: int = 10,
    now: datetime | None = None,
) -> list[LeaderboardEntry]:
    """
    Top users by XP earned inside the timeframe window.

    Ties on XP are broken by user_id so the order is stable across calls.
    The level column always reflects lifetime XP, also on the monthly and
    yearly boards.
    """
    now = as_utc(now or utcnow())
    xp_sum = func.coalesce(func.sum(XPTransaction.xp_amount), 0).label("xp")
    q = _windowed(select(XPTransaction.user_id, xp_sum), timeframe, now)
    rows = (await session.execute(
        q.group_by(XPTransaction.user_id)
        .order_by(xp_sum.desc(), XPTransaction.user_id.asc())
        .limit(limit)
    )).all()

    lifetime = await _lifetime_totals(session, [uid for uid, _ in rows])
    out: list[LeaderboardEntry] = []
    for pos, (uid, xp) in enumerate(rows):
        total = lifetime.get(uid, 0)
        out.append(LeaderboardEntry(rank=pos + 1, user_id=uid, xp=int(xp), total_xp=total, level=level_for_xp(total)))
    return out


async def user_total_xp(session: AsyncSession, user_id: str) -> int:
    total = await session.scalar(
        select(func.coalesce(func.sum(XPTransaction.xp_amount), 0)).where(XPTransaction.user_id == user_id)
    )
    return int(total or 0)


async def user_timeframe_xp(session: AsyncSession, user_id: str, timeframe: str, now: datetime | None = None) -> int:
    now = as_utc(now or utcnow())
    q = _windowed(
        select(func.coalesce(func.sum(XPTransaction.xp_amount), 0)).where(XPTransaction.user_id == user_id),
        timeframe,
        now,
    )
    return int(await session.scalar(q) or 0)


async def user_xp_stats(session: AsyncSession, user_id: str) -> LevelProgress:
    """Level, lifetime XP and progress toward the next level."""
    return progress(await user_total_xp(session, user_id))


async def recent_transactions(session: AsyncSession, user_id: str, limit: int = 20, offset: int = 0) -> list[XPTransaction]:
    return (await session.execute(
        select(XPTransaction)
        .where(XPTransaction.user_id == user_id)
        .order_by(XPTransaction.awarded_at.desc(), XPTransaction.id.desc())
        .limit(limit)
        .offset(offset)
    )).scalars().all()
