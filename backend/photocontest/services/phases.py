from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Protocol
from photocontest.services.time_windows import as_utc


class Phase(str, Enum):
    UPCOMING = "upcoming"
    SUBMISSION = "submission"
    PROCESSING = "processing"
    VOTING = "voting"
    ENDED = "ended"


PHASE_ORDER: tuple[Phase, ...] = (
    Phase.UPCOMING,
    Phase.SUBMISSION,
    Phase.PROCESSING,
    Phase.VOTING,
    Phase.ENDED,
)


class ContestTimeline(Protocol):
    start_date: datetime
    end_date: datetime
    voting_start_date: datetime
    voting_end_date: datetime


def phase_index(phase: Phase) -> int:
    return PHASE_ORDER.index(phase)


def resolve_phase(contest: ContestTimeline, now: datetime) -> Phase:
    """
    Map a contest's four timestamps and `now` to its phase.

    Nothing is stored and nothing about earlier phases is remembered; the
    same inputs always give the same phase. Boundaries are half-open:
    a timestamp belongs to the phase it starts. When voting_start_date ==
    end_date the processing phase is empty and never returned.
    """
    now = as_utc(now)
    if now < as_utc(contest.start_date):
        return Phase.UPCOMING
    if now < as_utc(contest.end_date):
        return Phase.SUBMISSION
    if now < as_utc(contest.voting_start_date):
        return Phase.PROCESSING
    if now < as_utc(contest.voting_end_date):
        return Phase.VOTING
    return Phase.ENDED


def phase_deadline(contest: ContestTimeline, now: datetime) -> datetime | None:
    """Countdown target: the instant the current phase ends (None once ended)."""
    phase = resolve_phase(contest, now)
    if phase is Phase.UPCOMING:
        return as_utc(contest.start_date)
    if phase is Phase.SUBMISSION:
        return as_utc(contest.end_date)
    if phase is Phase.PROCESSING:
        return as_utc(contest.voting_start_date)
    if phase is Phase.VOTING:
        return as_utc(contest.voting_end_date)
    return None
