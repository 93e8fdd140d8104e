from __future__ import annotations
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from photocontest.services.phases import Phase

class PhaseView(BaseModel):
    contest_id: UUID
    phase: Phase
    countdown_target: datetime | None = None  # when the current phase ends
    now: datetime

class StandingEntry(BaseModel):
    photo_id: UUID
    user_id: str
    rank: int | None = None  # None while ranks are hidden or the photo has no votes
    vote_count: int
    total_score: int
    average_rating: float

class StandingsView(BaseModel):
    contest_id: UUID
    phase: Phase
    ranks_hidden: bool = False
    total_submissions: int
    entries: list[StandingEntry]

class FinalizeResult(BaseModel):
    contest_id: UUID
    status: str
    submissions: int
    ranked: int
    granted: int
    already_awarded: int
