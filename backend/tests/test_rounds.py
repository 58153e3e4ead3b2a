from datetime import datetime, timedelta, timezone
import pytest

from wordsmith.services.games import rounds, InvalidTransition, ValidationError
from wordsmith.services.games.repository import RoundRecord, PoemRecord
from wordsmith.services.games.rounds import RoundStatus

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_round(**kwargs):
    fields = dict(id=1, game_id=1, round_number=1, judge_id=10,
                  words=['moon', 'glass', 'river', 'hollow', 'key'], time_limit=300)
    fields.update(kwargs)
    return RoundRecord(**fields)


def test_new_round_starts_in_setup():
    assert make_round().status == 'setup'


def test_full_forward_path():
    rnd = make_round()
    rounds.begin_writing(rnd, NOW)
    assert rnd.status == 'writing'
    assert rnd.end_time == NOW + timedelta(seconds=300)
    rounds.close_writing(rnd)
    assert rnd.status == 'judging'
    rounds.complete(rnd, PoemRecord(id=5, round_id=1, player_id=11, content='x', submitted=True))
    assert rnd.status == 'completed'
    assert rnd.winner_id == 11


@pytest.mark.parametrize('current,target', [
    ('setup', 'judging'),
    ('setup', 'completed'),
    ('writing', 'completed'),
    ('writing', 'setup'),
    ('judging', 'writing'),
    ('completed', 'setup'),
    ('completed', 'judging'),
    ('judging', 'judging'),
])
def test_out_of_order_transitions_fail(current, target):
    rnd = make_round(status=current)
    with pytest.raises(InvalidTransition):
        rounds.transition(rnd, target)
    assert rnd.status == current


def test_can_transition_only_single_forward_steps():
    order = ['setup', 'writing', 'judging', 'completed']
    for i, current in enumerate(order):
        for j, target in enumerate(order):
            assert rounds.can_transition(current, target) == (j == i + 1)


def test_begin_writing_twice_fails():
    rnd = make_round()
    rounds.begin_writing(rnd, NOW)
    with pytest.raises(InvalidTransition):
        rounds.begin_writing(rnd, NOW + timedelta(seconds=5))
    assert rnd.end_time == NOW + timedelta(seconds=300)


def test_complete_requires_judging():
    rnd = make_round(status='writing')
    with pytest.raises(InvalidTransition):
        rounds.complete(rnd, PoemRecord(id=5, round_id=1, player_id=11))
    assert rnd.winner_id is None


def test_complete_rejects_poem_from_other_round():
    rnd = make_round(status='judging')
    with pytest.raises(ValidationError):
        rounds.complete(rnd, PoemRecord(id=5, round_id=99, player_id=11))
    assert rnd.status == 'judging'


def test_completed_round_cannot_be_completed_again():
    rnd = make_round(status='judging')
    rounds.complete(rnd, PoemRecord(id=5, round_id=1, player_id=11, content='x', submitted=True))
    with pytest.raises(InvalidTransition):
        rounds.complete(rnd, PoemRecord(id=6, round_id=1, player_id=12, content='y', submitted=True))
    assert rnd.winner_id == 11


def test_complete_rejects_unsubmitted_poem():
    rnd = make_round(status='judging')
    with pytest.raises(ValidationError):
        rounds.complete(rnd, PoemRecord(id=5, round_id=1, player_id=11))
    assert rnd.status == 'judging'
    assert rnd.winner_id is None


def test_is_judge():
    rnd = make_round()
    assert rounds.is_judge(rnd, 10)
    assert not rounds.is_judge(rnd, 11)
    assert not rounds.is_judge(rnd, None)


def test_writing_expiry_and_time_remaining():
    rnd = make_round(time_limit=60)
    assert rounds.time_remaining(rnd, NOW) is None
    assert not rounds.writing_expired(rnd, NOW)

    rounds.begin_writing(rnd, NOW)
    assert rounds.time_remaining(rnd, NOW) == 60
    assert rounds.time_remaining(rnd, NOW + timedelta(seconds=45)) == 15
    assert not rounds.writing_expired(rnd, NOW + timedelta(seconds=59))
    assert rounds.writing_expired(rnd, NOW + timedelta(seconds=60))
    assert rounds.time_remaining(rnd, NOW + timedelta(seconds=90)) == 0


def test_expiry_handles_naive_stored_end_time():
    rnd = make_round(status='writing', end_time=datetime(2024, 5, 1, 12, 5))
    assert not rounds.writing_expired(rnd, NOW)
    assert rounds.writing_expired(rnd, NOW + timedelta(minutes=5))


def test_status_enum_values():
    assert [s.value for s in RoundStatus] == ['setup', 'writing', 'judging', 'completed']
    assert RoundStatus('judging') == 'judging'
