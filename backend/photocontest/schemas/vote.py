from __future__ import annotations
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime

class VoteCreate(BaseModel):
    photo_id: UUID
    contest_id: UUID
    value: int  # range is enforced by the vote service (INVALID_VALUE)

class VoteResult(BaseModel):
    accepted: bool
    previous_value: int | None = None
    vote_count: int
    total_score: int
    average_rating: float

class PhotoAggregatePublic(BaseModel):
    photo_id: UUID
    vote_count: int
    total_score: int
    average_rating: float

class VotePublic(BaseModel):
    id: UUID
    photo_id: UUID
    contest_id: UUID
    value: int
    created_at: datetime
    updated_at: datetime
