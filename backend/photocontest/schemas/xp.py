from __future__ import annotations
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Literal

Timeframe = Literal["all", "monthly", "yearly"]

class XPStats(BaseModel):
    user_id: str
    level: int
    total_xp: int
    current_level_xp: int
    next_level_xp: int
    xp_in_current_level: int
    xp_needed: int
    progress_percent: float

class LeaderboardEntryPublic(BaseModel):
    rank: int
    user_id: str
    xp: int
    total_xp: int
    level: int

class LeaderboardView(BaseModel):
    timeframe: Timeframe
    entries: list[LeaderboardEntryPublic]

class TimeframeXP(BaseModel):
    user_id: str
    timeframe: Timeframe
    xp: int

class XPTransactionPublic(BaseModel):
    id: UUID
    action_type: str
    xp_amount: int
    reason: str
    contest_id: UUID | None = None
    contest_title: str | None = None
    photo_id: UUID | None = None
    awarded_at: datetime

class RecentTransactions(BaseModel):
    limit: int
    offset: int
    transactions: list[XPTransactionPublic]

class RewardsInfo(BaseModel):
    rewards: dict[str, int]
    level_formula: str
    description: dict[str, str]
    stacking: str
