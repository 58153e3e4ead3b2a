import random

from .errors import InvalidTransition, ValidationError
from .rounds import RoundStatus


def _require_open(poem, rnd):
    if RoundStatus(rnd.status) != RoundStatus.WRITING:
        raise InvalidTransition(f"Round {rnd.id} is not accepting poems")
    if poem.submitted:
        raise InvalidTransition(f"Poem {poem.id} has already been submitted")


def update_content(poem, rnd, text: str) -> None:
    """Overwrite a draft. Allowed any number of times until submission."""
    _require_open(poem, rnd)
    poem.content = text


def submit(poem, rnd, now) -> None:
    _require_open(poem, rnd)
    if not (poem.content or '').strip():
        raise ValidationError('Cannot submit empty poem')
    poem.submitted = True
    poem.submitted_at = now


def all_submitted(rnd, poems) -> bool:
    """True iff every non-judge poem of the round is submitted."""
    writers = [p for p in poems if p.round_id == rnd.id and p.player_id != rnd.judge_id]
    return bool(writers) and all(p.submitted for p in writers)


def submission_status(poems) -> list:
    return [(p.player_id, bool(p.submitted)) for p in poems]


def judging_order(rnd, poems) -> list:
    """Submitted poems in a per-round shuffled order, the same on every read."""
    entries = [p for p in poems if p.submitted]
    random.Random(f"{rnd.id}:{' '.join(rnd.words or [])}").shuffle(entries)
    return entries
