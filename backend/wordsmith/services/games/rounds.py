"""Round lifecycle: setup -> writing -> judging -> completed.

Pure functions over a round record (ORM row or in-memory record). Nothing
here touches storage or the clock; callers pass `now` in.
"""

import math
from datetime import timedelta, timezone
from enum import Enum
from typing import Optional

from .errors import InvalidTransition, ValidationError


class RoundStatus(str, Enum):
    SETUP = 'setup'
    WRITING = 'writing'
    JUDGING = 'judging'
    COMPLETED = 'completed'


_ORDER = [RoundStatus.SETUP, RoundStatus.WRITING, RoundStatus.JUDGING, RoundStatus.COMPLETED]


def _as_utc(dt):
    # SQLite hands back naive datetimes even for timezone-aware columns
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def can_transition(current, target) -> bool:
    """Only single forward steps are legal."""
    current, target = RoundStatus(current), RoundStatus(target)
    return _ORDER.index(target) == _ORDER.index(current) + 1


def transition(rnd, target) -> None:
    target = RoundStatus(target)
    if not can_transition(rnd.status, target):
        raise InvalidTransition(
            f"Round {rnd.id} cannot move from {RoundStatus(rnd.status).value} to {target.value}"
        )
    rnd.status = target.value


def is_judge(rnd, player_id) -> bool:
    return player_id is not None and rnd.judge_id == player_id


def begin_writing(rnd, now) -> None:
    """setup -> writing; starts the clock."""
    transition(rnd, RoundStatus.WRITING)
    rnd.end_time = now + timedelta(seconds=rnd.time_limit)


def close_writing(rnd) -> None:
    """writing -> judging, whether by the judge, full submission or expiry."""
    transition(rnd, RoundStatus.JUDGING)


def complete(rnd, poem) -> None:
    """judging -> completed with `poem`'s author as winner.

    Scoring is left to the caller so that the award happens exactly once,
    right after this returns.
    """
    if poem.round_id != rnd.id:
        raise ValidationError(f"Poem {poem.id} does not belong to round {rnd.id}")
    if RoundStatus(rnd.status) != RoundStatus.JUDGING:
        raise InvalidTransition(
            f"Round {rnd.id} cannot pick a winner while {RoundStatus(rnd.status).value}"
        )
    if not poem.submitted:
        raise ValidationError(f"Poem {poem.id} was never submitted")
    rnd.winner_id = poem.player_id
    transition(rnd, RoundStatus.COMPLETED)


def writing_expired(rnd, now) -> bool:
    if RoundStatus(rnd.status) != RoundStatus.WRITING or rnd.end_time is None:
        return False
    return _as_utc(now) >= _as_utc(rnd.end_time)


def time_remaining(rnd, now) -> Optional[int]:
    """Whole seconds left in the writing phase, or None outside it."""
    if RoundStatus(rnd.status) != RoundStatus.WRITING or rnd.end_time is None:
        return None
    left = (_as_utc(rnd.end_time) - _as_utc(now)).total_seconds()
    return max(0, math.ceil(left))
