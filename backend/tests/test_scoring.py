import pytest

from wordsmith.services.games import scoring, ValidationError
from wordsmith.services.games.repository import GameRecord, PlayerRecord, RoundRecord


def roster_of(n):
    return [PlayerRecord(id=100 + i, game_id=1, user_id=i + 1, is_host=(i == 0)) for i in range(n)]


def test_rotation_cycles_three_players():
    game = GameRecord(id=1, name='g', created_by=1, total_rounds=9)
    roster = roster_of(3)
    seen = []
    for _ in range(6):
        idx, judge = scoring.next_judge(game, roster)
        game.current_judge_index = idx
        seen.append(idx)
        assert judge is roster[idx]
    assert seen == [1, 2, 0, 1, 2, 0]


def test_next_judge_index_wraps():
    assert scoring.next_judge_index(0, 2) == 1
    assert scoring.next_judge_index(1, 2) == 0
    assert scoring.next_judge_index(4, 5) == 0


@pytest.mark.parametrize('size', [0, 1])
def test_roster_too_small(size):
    game = GameRecord(id=1, name='g', created_by=1, total_rounds=3)
    with pytest.raises(ValidationError):
        scoring.next_judge(game, roster_of(size))


def test_award_point_is_plus_one_and_not_deduplicated():
    p = PlayerRecord(id=1, game_id=1, user_id=1)
    assert scoring.award_point(p) == 1
    assert scoring.award_point(p) == 2
    assert p.score == 2


def _won(round_number, winner_id):
    return RoundRecord(id=round_number, game_id=1, round_number=round_number, judge_id=0,
                       words=[], status='completed', winner_id=winner_id)


def test_standings_break_ties_by_who_got_there_first():
    a, b, c = roster_of(3)
    # b wins rounds 1 and 2, c wins rounds 3 and 4: b reached 2 first
    b.score, c.score = 2, 2
    rounds = [_won(1, b.id), _won(2, b.id), _won(3, c.id), _won(4, c.id)]
    assert [p.id for p in scoring.standings([a, b, c], rounds)] == [b.id, c.id, a.id]
    assert scoring.overall_winner([a, b, c], rounds) is b


def test_standings_higher_score_beats_earlier_finish():
    a, b, c = roster_of(3)
    a.score, c.score = 1, 2
    rounds = [_won(1, a.id), _won(2, c.id), _won(3, c.id)]
    assert scoring.standings([a, b, c], rounds)[0] is c


def test_overall_winner_none_without_points():
    assert scoring.overall_winner(roster_of(3), []) is None
