from __future__ import annotations
import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, Index, Uuid
from photocontest.db import Base, UTCDateTime, utcnow


class ActionType(str, Enum):
    SUBMIT_PHOTO = "SUBMIT_PHOTO"
    VOTE = "VOTE"
    PLACE_1ST = "PLACE_1ST"
    PLACE_2ND = "PLACE_2ND"
    PLACE_3RD = "PLACE_3RD"
    TOP_10_PERCENT = "TOP_10_PERCENT"
    TOP_25_PERCENT = "TOP_25_PERCENT"
    PHOTO_DELETION = "PHOTO_DELETION"


class XPTransaction(Base):
    """
    Append-only XP ledger. Rows are never updated or deleted.
    Sign convention:
      - awards          => positive
      - PHOTO_DELETION  => negative (compensates XP earned through a deleted photo)

    A user's XP is always Σ(xp_amount); there is no stored running total.
    """
    __tablename__ = "xp_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    action_type: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    xp_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    contest_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("contests.id", ondelete="SET NULL"), index=True, nullable=True
    )
    contest_title: Mapped[str | None] = mapped_column(String(100), nullable=True)  # denormalized for display
    # NOTE: no FK so the ledger outlives deleted photos
    photo_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True, nullable=True)

    awarded_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True, nullable=False)

    __table_args__ = (
        Index("ix_xp_transactions_user_awarded", "user_id", "awarded_at"),
    )


class ContestRewardRecord(Base):
    """
    Idempotency guard: one row per granted (contest, user, action, photo).
    Inserted with ON CONFLICT DO NOTHING in the same transaction as the XP row;
    a retried reward pass finds the row and skips the grant.
    """
    __tablename__ = "contest_reward_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False)
    photo_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    xp_transaction_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("contest_id", "user_id", "action_type", "photo_id", name="uq_contest_reward_once"),
    )


class ContestFinalization(Base):
    """Completed reward pass marker. The poller skips contests that have one."""
    __tablename__ = "contest_finalizations"

    contest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contests.id", ondelete="CASCADE"), primary_key=True
    )
    finalized_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    awards_granted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
