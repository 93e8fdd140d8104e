"""
Error kinds raised by the contest engine.

Vote-casting errors propagate synchronously to the HTTP caller; the
exception handler in main.py renders any ContestError as
{"detail": <message>, "code": <code>} with the class's status code.
Background finalization logs these and retries on the next poll.
"""
from __future__ import annotations


class ContestError(Exception):
    status_code = 400
    code = "CONTEST_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidVote(ContestError):
    """Self-vote or any other user-correctable vote rejection."""
    status_code = 400
    code = "INVALID_VOTE"


class PhaseClosed(InvalidVote):
    """Operation not allowed in the contest's current phase."""
    status_code = 403
    code = "PHASE_CLOSED"


class InvalidValue(ContestError):
    status_code = 422
    code = "INVALID_VALUE"


class NotFound(ContestError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(ContestError):
    status_code = 409
    code = "CONFLICT"


class Transient(ContestError):
    """Lock timeout or storage unavailable. Safe to retry."""
    status_code = 503
    code = "TRANSIENT"
