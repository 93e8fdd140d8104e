from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261018_0003"
down_revision = "20261018_0002"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "xp_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=False),
        sa.Column("xp_amount", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=255), server_default="", nullable=False),
        sa.Column("contest_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("contests.id", ondelete="SET NULL"), nullable=True),
        sa.Column("contest_title", sa.String(length=100), nullable=True),
        sa.Column("photo_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("awarded_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_xp_transactions_user_id", "xp_transactions", ["user_id"])
    op.create_index("ix_xp_transactions_action_type", "xp_transactions", ["action_type"])
    op.create_index("ix_xp_transactions_contest_id", "xp_transactions", ["contest_id"])
    op.create_index("ix_xp_transactions_photo_id", "xp_transactions", ["photo_id"])
    op.create_index("ix_xp_transactions_awarded_at", "xp_transactions", ["awarded_at"])
    op.create_index("ix_xp_transactions_user_awarded", "xp_transactions", ["user_id", "awarded_at"])

    # Idempotency guard: the unique key is what makes reward passes safe to repeat
    op.create_table(
        "contest_reward_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("contest_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=False),
        sa.Column("photo_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("xp_transaction_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_contest_reward_records_contest_id", "contest_reward_records", ["contest_id"])
    op.create_unique_constraint(
        "uq_contest_reward_once", "contest_reward_records", ["contest_id", "user_id", "action_type", "photo_id"]
    )

    op.create_table(
        "contest_finalizations",
        sa.Column("contest_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("contests.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("finalized_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("awards_granted", sa.Integer(), server_default="0", nullable=False),
    )

def downgrade() -> None:
    op.drop_table("contest_finalizations")
    op.drop_constraint("uq_contest_reward_once", "contest_reward_records", type_="unique")
    op.drop_index("ix_contest_reward_records_contest_id", table_name="contest_reward_records")
    op.drop_table("contest_reward_records")
    op.drop_index("ix_xp_transactions_user_awarded", table_name="xp_transactions")
    op.drop_index("ix_xp_transactions_awarded_at", table_name="xp_transactions")
    op.drop_index("ix_xp_transactions_photo_id", table_name="xp_transactions")
    op.drop_index("ix_xp_transactions_contest_id", table_name="xp_transactions")
    op.drop_index("ix_xp_transactions_action_type", table_name="xp_transactions")
    op.drop_index("ix_xp_transactions_user_id", table_name="xp_transactions")
    op.drop_table("xp_transactions")
