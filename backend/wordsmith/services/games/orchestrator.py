"""Game orchestrator: runs a game as a sequence of rounds.

`GameService` is the only place that combines the word pool, the round
state machine, the poem tracker and rotation/scoring with persistence. It
is built per request around an injected repository, so the same code runs
against `MemoryRepository` in tests and `SqlRepository` in production.
"""

import logging
from datetime import datetime, timezone

from . import poems as poem_tracker
from . import rounds as lifecycle
from . import scoring, words
from .errors import InvalidTransition, NotAuthorized, NotFound, ValidationError
from .rounds import RoundStatus

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


class GameService:

    def __init__(self, repository, draw_words=words.draw, clock=utcnow, time_limit=300,
                 words_per_round=5, min_players=2, max_players=5, max_total_rounds=10):
        self.repo = repository
        self.draw_words = draw_words
        self.clock = clock
        self.time_limit = time_limit
        self.words_per_round = words_per_round
        self.min_players = min_players
        self.max_players = max_players
        self.max_total_rounds = max_total_rounds

    @classmethod
    def from_config(cls, repository, config):
        return cls(
            repository,
            time_limit=int(config.get('ROUND_TIME_LIMIT_SEC', 300)),
            words_per_round=int(config.get('WORDS_PER_ROUND', 5)),
            min_players=int(config.get('MIN_PLAYERS', 2)),
            max_players=int(config.get('MAX_PLAYERS', 5)),
            max_total_rounds=int(config.get('MAX_TOTAL_ROUNDS', 10)),
        )

    # ---- lookups ----

    def get_game(self, game_id):
        game = self.repo.get_game(game_id)
        if not game:
            raise NotFound('Game', game_id)
        return game

    def get_round(self, round_id):
        rnd = self.repo.get_round(round_id)
        if not rnd:
            raise NotFound('Round', round_id)
        return self.refresh_round(rnd)

    def get_poem(self, poem_id):
        poem = self.repo.get_poem(poem_id)
        if not poem:
            raise NotFound('Poem', poem_id)
        return poem

    def get_player(self, player_id):
        player = self.repo.get_player(player_id)
        if not player:
            raise NotFound('Player', player_id)
        return player

    def roster(self, game_id):
        return self.repo.list_players(game_id)

    def player_for_user(self, game_id, user_id):
        for player in self.roster(game_id):
            if player.user_id == user_id:
                return player
        raise NotFound('Player for user', user_id)

    def current_round(self, game_id):
        game = self.get_game(game_id)
        if not game.current_round:
            return None
        rnd = self.repo.get_round_by_number(game.id, game.current_round)
        return self.refresh_round(rnd) if rnd else None

    # ---- accounts ----

    def register_user(self, username, password):
        username = (username or '').strip()
        if not username or not password:
            raise ValidationError('Username and password are required')
        if self.repo.get_user_by_username(username):
            raise ValidationError('Username already taken')
        user = self.repo.create_user(username, password)
        logger.info(f"[user-create] user={user.id} username={username}")
        return user

    def authenticate(self, username, password):
        user = self.repo.get_user_by_username(username or '')
        if user and user.check_password(password or ''):
            return user
        return None

    # ---- game setup ----

    def create_game(self, name, total_rounds, user_ids):
        """Create a waiting game; the first user becomes the host."""
        name = (name or '').strip()
        if not 1 <= len(name) <= 100:
            raise ValidationError('Game name must be 1-100 characters')
        if (isinstance(total_rounds, bool) or not isinstance(total_rounds, int)
                or not 1 <= total_rounds <= self.max_total_rounds):
            raise ValidationError(f'Total rounds must be between 1 and {self.max_total_rounds}')
        user_ids = list(user_ids or [])
        if len(set(user_ids)) != len(user_ids):
            raise ValidationError('A user can only join a game once')
        if not self.min_players <= len(user_ids) <= self.max_players:
            raise ValidationError(
                f'A game needs between {self.min_players} and {self.max_players} players'
            )
        for uid in user_ids:
            if not self.repo.get_user(uid):
                raise NotFound('User', uid)

        game = self.repo.create_game(name, user_ids[0], total_rounds)
        for i, uid in enumerate(user_ids):
            self.repo.add_player(game.id, uid, is_host=(i == 0))
        logger.info(f"[game-create] game={game.id} players={len(user_ids)} rounds={total_rounds}")
        return game

    # ---- rounds ----

    def start_round(self, game_id):
        game = self.get_game(game_id)
        if game.current_round >= game.total_rounds:
            raise InvalidTransition(f'Game {game.id} is already completed')
        if game.current_round:
            previous = self.repo.get_round_by_number(game.id, game.current_round)
            if previous and RoundStatus(previous.status) != RoundStatus.COMPLETED:
                raise InvalidTransition(
                    f'Round {previous.round_number} of game {game.id} is still {previous.status}'
                )

        roster = self.roster(game.id)
        if game.current_round == 0:
            # First round: the judge seat is the starting index (the host)
            scoring.next_judge_index(game.current_judge_index, len(roster))
            judge_index, judge = game.current_judge_index, roster[game.current_judge_index]
        else:
            judge_index, judge = scoring.next_judge(game, roster)

        round_number = game.current_round + 1
        rnd = self.repo.create_round(game.id, round_number, judge.id,
                                     self.draw_words(self.words_per_round), self.time_limit)
        for player in roster:
            if player.id != judge.id:
                self.repo.create_poem(rnd.id, player.id)

        game.current_round = round_number
        game.current_judge_index = judge_index
        game.status = 'active'
        self.repo.save(game)
        logger.info(f"[round-start] game={game.id} round={round_number} judge={judge.id}")
        return rnd

    def refresh_round(self, rnd):
        """Apply the writing deadline if it has passed."""
        if lifecycle.writing_expired(rnd, self.clock()):
            lifecycle.close_writing(rnd)
            self.repo.save(rnd)
            logger.info(f"[round-expired] round={rnd.id} -> judging")
        return rnd

    def _require_judge(self, rnd, actor_id):
        if not lifecycle.is_judge(rnd, actor_id):
            raise NotAuthorized(f'Only the judge of round {rnd.id} can do that')

    def begin_writing(self, round_id, actor_id):
        rnd = self.get_round(round_id)
        self._require_judge(rnd, actor_id)
        lifecycle.begin_writing(rnd, self.clock())
        self.repo.save(rnd)
        logger.info(f"[round-writing] round={rnd.id} end_time={rnd.end_time.isoformat()}")
        return rnd

    def close_writing(self, round_id, actor_id):
        rnd = self.get_round(round_id)
        self._require_judge(rnd, actor_id)
        lifecycle.close_writing(rnd)
        self.repo.save(rnd)
        logger.info(f"[round-judging] round={rnd.id} trigger=judge")
        return rnd

    def select_winner(self, round_id, poem_id, actor_id):
        """judging -> completed, +1 to the author. Serialized per round."""
        self.get_round(round_id)
        with self.repo.lock_round(round_id) as rnd:
            self._require_judge(rnd, actor_id)
            poem = self.get_poem(poem_id)
            lifecycle.complete(rnd, poem)
            winner = self.get_player(poem.player_id)
            scoring.award_point(winner)
            game = self.get_game(rnd.game_id)
            if self._last_round_done(game, rnd):
                game.status = 'completed'
            self.repo.save(rnd, winner, game)
        logger.info(f"[round-winner] round={rnd.id} winner={winner.id} score={winner.score}")
        if game.status == 'completed':
            logger.info(f"[game-complete] game={game.id}")
        return rnd

    # ---- poems ----

    def _poem_in_round(self, poem_id, actor_id):
        poem = self.get_poem(poem_id)
        if actor_id is not None and poem.player_id != actor_id:
            raise NotAuthorized(f'Poem {poem.id} belongs to another player')
        return poem, self.get_round(poem.round_id)

    def update_poem(self, poem_id, content, actor_id=None):
        poem, rnd = self._poem_in_round(poem_id, actor_id)
        poem_tracker.update_content(poem, rnd, content)
        self.repo.save(poem)
        return poem

    def submit_poem(self, poem_id, actor_id=None):
        poem, rnd = self._poem_in_round(poem_id, actor_id)
        poem_tracker.submit(poem, rnd, self.clock())
        self.repo.save(poem)
        logger.info(f"[poem-submit] round={rnd.id} poem={poem.id} player={poem.player_id}")
        if poem_tracker.all_submitted(rnd, self.repo.list_poems(rnd.id)):
            lifecycle.close_writing(rnd)
            self.repo.save(rnd)
            logger.info(f"[round-judging] round={rnd.id} trigger=all_submitted")
        return poem

    # ---- completion ----

    def _last_round_done(self, game, rnd):
        return (game.current_round >= game.total_rounds
                and rnd.round_number == game.current_round
                and RoundStatus(rnd.status) == RoundStatus.COMPLETED)

    def is_complete(self, game_id):
        game = self.get_game(game_id)
        if game.current_round < game.total_rounds:
            return False
        last = self.repo.get_round_by_number(game.id, game.current_round)
        return bool(last) and RoundStatus(last.status) == RoundStatus.COMPLETED

    def standings(self, game_id):
        game = self.get_game(game_id)
        return scoring.standings(self.roster(game.id), self.repo.list_rounds(game.id))

    def overall_winner(self, game_id):
        game = self.get_game(game_id)
        return scoring.overall_winner(self.roster(game.id), self.repo.list_rounds(game.id))

    # ---- presentation ----

    def _player_dict(self, player):
        data = player.to_dict()
        user = self.repo.get_user(player.user_id)
        data['username'] = user.username if user else None
        return data

    def round_view(self, round_id, viewer_id=None):
        """Round as the players see it. Authors stay hidden until a winner is picked.

        `viewer_id` adds that player's own poem (draft included) as `my_poem`.
        """
        rnd = self.get_round(round_id)
        status = RoundStatus(rnd.status)
        poems = self.repo.list_poems(rnd.id)
        payload = rnd.to_dict()
        payload['time_remaining'] = lifecycle.time_remaining(rnd, self.clock())
        payload['submissions'] = [
            {'player_id': pid, 'submitted': done}
            for pid, done in poem_tracker.submission_status(poems)
        ]
        revealed = status == RoundStatus.COMPLETED
        if status in (RoundStatus.JUDGING, RoundStatus.COMPLETED):
            payload['poems'] = [
                {
                    'id': p.id,
                    'content': p.content,
                    'player_id': p.player_id if revealed else None,
                }
                for p in poem_tracker.judging_order(rnd, poems)
            ]
        else:
            payload['poems'] = []
        mine = next((p for p in poems if viewer_id is not None and p.player_id == viewer_id), None)
        payload['my_poem'] = mine.to_dict() if mine else None
        payload['winner'] = None
        if revealed and rnd.winner_id is not None:
            winning = next((p for p in poems if p.player_id == rnd.winner_id), None)
            payload['winner'] = {
                'player': self._player_dict(self.get_player(rnd.winner_id)),
                'poem': winning.to_dict() if winning else None,
            }
        return payload

    def game_view(self, game_id, viewer_id=None):
        game = self.get_game(game_id)
        payload = game.to_dict()
        payload['players'] = [self._player_dict(p) for p in self.roster(game.id)]
        current = self.current_round(game.id)
        payload['round'] = self.round_view(current.id, viewer_id) if current else None
        payload['is_complete'] = self.is_complete(game.id)
        if payload['is_complete']:
            winner = self.overall_winner(game.id)
            payload['overall_winner'] = self._player_dict(winner) if winner else None
            payload['standings'] = [self._player_dict(p) for p in self.standings(game.id)]
        return payload
