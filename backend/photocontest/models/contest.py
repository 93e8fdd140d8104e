from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, ForeignKey, CheckConstraint, Uuid
from photocontest.db import Base, UTCDateTime, utcnow


class Contest(Base):
    """
    Owned by contest management; the engine only reads it.
    There is no phase/status column: phase is derived from the
    four timestamps on every read (services.phases.resolve_phase).
    """
    __tablename__ = "contests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    banner_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    voting_start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    voting_end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    max_photos_per_user: Mapped[int | None] = mapped_column(Integer, nullable=True)  # NULL = unlimited
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "start_date < end_date AND end_date <= voting_start_date AND voting_start_date < voting_end_date",
            name="ck_contest_timeline_order",
        ),
    )


class Submission(Base):
    """A photo entered into a contest. id doubles as the photo id."""
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)  # owner
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    # Maintained only by services.votes.cast_vote
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("vote_count >= 0", name="ck_submission_vote_count_nonneg"),
    )
