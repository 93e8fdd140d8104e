from __future__ import annotations
import asyncio
from datetime import datetime
from uuid import UUID
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from photocontest.config import settings
from photocontest.db import SessionLocal, utcnow
from photocontest.models.contest import Contest
from photocontest.models.xp import ContestFinalization
from photocontest.services.phases import Phase, resolve_phase
from photocontest.services.rewards import finalize_contest
from photocontest.services.time_windows import as_utc

log = structlog.get_logger()

# Last phase this process logged per contest. In-memory only; a restart
# simply logs each open contest's current phase once more.
_observed_phases: dict[UUID, Phase] = {}


async def _open_contests(session_factory: async_sessionmaker) -> list[Contest]:
    async with session_factory() as session:
        rows = (await session.execute(
            select(Contest)
            .outerjoin(ContestFinalization, ContestFinalization.contest_id == Contest.id)
            .where(ContestFinalization.contest_id.is_(None))
            .order_by(Contest.voting_end_date.asc())
        )).scalars().all()
        return list(rows)


async def _finalize_one(contest_id: UUID, now: datetime, session_factory: async_sessionmaker) -> dict:
    async with session_factory() as session:
        result = await finalize_contest(session, contest_id, now=now)
        await session.commit()
        return result


async def poll_once(
    *,
    now: datetime | None = None,
    session_factory: async_sessionmaker = SessionLocal,
    observed: dict[UUID, Phase] | None = None,
) -> dict:
    """
    One scheduler tick:
      - load contests that have no finalization marker yet
      - log each phase change this process has not seen before
      - finalize every contest whose voting has ended, one transaction each
    A failing contest is logged and left for the next tick.
    """
    now = as_utc(now or utcnow())
    if observed is None:
        observed = _observed_phases

    report = {"checked": 0, "finalized": 0, "failed": 0}
    open_contests = await _open_contests(session_factory)
    for contest in open_contests:
        contest_id = contest.id
        report["checked"] += 1
        phase = resolve_phase(contest, now)
        if observed.get(contest_id) is not phase:
            log.info("contest.phase_observed", contest_id=str(contest_id), title=contest.title,
                     phase=phase.value, previous=getattr(observed.get(contest_id), "value", None))
            observed[contest_id] = phase

        if phase is not Phase.ENDED:
            continue
        try:
            await _finalize_one(contest_id, now, session_factory)
            report["finalized"] += 1
        except Exception:
            report["failed"] += 1
            log.exception("contest.finalize_failed", contest_id=str(contest_id))

    # forget contests that were finalized on an earlier tick
    open_ids = {c.id for c in open_contests}
    for stale in [cid for cid in observed if cid not in open_ids]:
        del observed[stale]
    return report


async def poll_loop(interval_seconds: float | None = None):
    interval = settings.scheduler_interval_seconds if interval_seconds is None else interval_seconds
    log.info("scheduler.start", interval_seconds=interval)
    while True:
        try:
            report = await poll_once()
            if report["finalized"] or report["failed"]:
                log.info("scheduler.tick", **report)
        except Exception:
            log.exception("scheduler.tick_failed")
        await asyncio.sleep(interval)


def start_scheduler(interval_seconds: float | None = None) -> asyncio.Task:
    """Run the poll loop as a background task on the current event loop."""
    return asyncio.create_task(poll_loop(interval_seconds), name="contest-finalizer")
