from typing import List, Optional, Tuple

from .errors import ValidationError
from .rounds import RoundStatus


def next_judge_index(current_index: int, roster_size: int) -> int:
    if roster_size < 2:
        raise ValidationError(
            f"A game needs a judge and at least one writer, roster has {roster_size}"
        )
    return (current_index + 1) % roster_size


def next_judge(game, roster) -> Tuple[int, object]:
    """Rotate one seat past the game's current judge.

    `roster` must be in roster order (player creation order).
    """
    idx = next_judge_index(game.current_judge_index, len(roster))
    return idx, roster[idx]


def award_point(player) -> int:
    """+1 to the winner. Not deduplicated; call once per completed round."""
    player.score = (player.score or 0) + 1
    return player.score


def standings(roster, rounds) -> List[object]:
    """Players by score, highest first.

    Equal scores go to whoever reached that score first, i.e. whose last
    winning round came earliest; players that never won keep roster order.
    """
    last_win = {}
    for rnd in sorted(rounds, key=lambda r: r.round_number):
        if RoundStatus(rnd.status) == RoundStatus.COMPLETED and rnd.winner_id is not None:
            last_win[rnd.winner_id] = rnd.round_number
    seat = {p.id: i for i, p in enumerate(roster)}
    never = float('inf')
    return sorted(
        roster,
        key=lambda p: (-(p.score or 0), last_win.get(p.id, never), seat[p.id]),
    )


def overall_winner(roster, rounds) -> Optional[object]:
    ranked = standings(roster, rounds)
    if not ranked or not ranked[0].score:
        return None
    return ranked[0]
