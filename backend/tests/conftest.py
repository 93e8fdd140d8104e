from __future__ import annotations
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Must be set before photocontest.config is imported anywhere.
_tmpdir = tempfile.mkdtemp(prefix="photocontest-tests-")
os.environ["DATABASE_URL"] = (
    os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{os.path.join(_tmpdir, 'test.db')}"
)
os.environ["SCHEDULER_ENABLED"] = "0"
os.environ["ADMIN_USER_IDS"] = "admin"
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
import pytest
import pytest_asyncio

from photocontest.db import Base, SessionLocal, engine
from photocontest.models.contest import Contest, Submission
from photocontest.models.vote import Vote  # noqa: F401  (registers the table)
from photocontest.models.xp import ActionType, XPTransaction


class Factory:
    """Inserts rows directly; each helper commits in its own session."""

    def timeline(self, phase: str, now: datetime | None = None) -> dict:
        now = now or datetime.now(timezone.utc)
        d = timedelta(days=1)
        if phase == "upcoming":
            return dict(start_date=now + d, end_date=now + 3 * d, voting_start_date=now + 4 * d, voting_end_date=now + 6 * d)
        if phase == "submission":
            return dict(start_date=now - d, end_date=now + 2 * d, voting_start_date=now + 3 * d, voting_end_date=now + 5 * d)
        if phase == "processing":
            return dict(start_date=now - 5 * d, end_date=now - d, voting_start_date=now + d, voting_end_date=now + 3 * d)
        if phase == "voting":
            return dict(start_date=now - 10 * d, end_date=now - 5 * d, voting_start_date=now - 4 * d, voting_end_date=now + 2 * d)
        if phase == "ended":
            return dict(start_date=now - 20 * d, end_date=now - 15 * d, voting_start_date=now - 14 * d, voting_end_date=now - d)
        raise ValueError(phase)

    async def contest(self, phase: str = "voting", title: str = "Golden Hour", **dates) -> Contest:
        values = self.timeline(phase)
        values.update(dates)
        async with SessionLocal() as s:
            c = Contest(title=title, **values)
            s.add(c)
            await s.commit()
            return c

    async def photo(self, contest: Contest, user_id: str | None = None) -> Submission:
        async with SessionLocal() as s:
            sub = Submission(contest_id=contest.id, user_id=user_id or f"owner-{uuid.uuid4().hex[:8]}")
            s.add(sub)
            await s.commit()
            return sub

    async def xp(self, user_id: str, amount: int, awarded_at: datetime, action: ActionType = ActionType.VOTE) -> XPTransaction:
        async with SessionLocal() as s:
            tx = XPTransaction(user_id=user_id, action_type=action.value, xp_amount=amount,
                               reason="seeded", awarded_at=awarded_at)
            s.add(tx)
            await s.commit()
            return tx


@pytest_asyncio.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def make() -> Factory:
    return Factory()
