"""Flask-SQLAlchemy implementation of the game repository.

Must be used inside an application context. Every write commits, matching
the one-request-one-step model of the routes.
"""

from contextlib import contextmanager

from wordsmith import db
from wordsmith.models import User, Game, Player, Round, Poem
from .errors import NotFound


class SqlRepository:

    def __init__(self, session=None):
        self.session = session or db.session

    def _add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    # users
    def get_user(self, user_id):
        return self.session.get(User, user_id)

    def get_user_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def create_user(self, username, password):
        user = User(username=username)
        user.set_password(password)
        return self._add(user)

    def list_users(self):
        return User.query.order_by(User.id).all()

    # games
    def create_game(self, name, created_by, total_rounds):
        return self._add(Game(name=name, created_by=created_by, total_rounds=total_rounds,
                              current_round=0, current_judge_index=0, status='waiting'))

    def get_game(self, game_id):
        return self.session.get(Game, game_id)

    # players
    def add_player(self, game_id, user_id, is_host=False):
        return self._add(Player(game_id=game_id, user_id=user_id, is_host=is_host, score=0))

    def get_player(self, player_id):
        return self.session.get(Player, player_id)

    def list_players(self, game_id):
        return Player.query.filter_by(game_id=game_id).order_by(Player.id).all()

    def games_for_user(self, user_id):
        return (Game.query.join(Player, Player.game_id == Game.id)
                .filter(Player.user_id == user_id)
                .order_by(Game.id).all())

    # rounds
    def create_round(self, game_id, round_number, judge_id, words, time_limit):
        return self._add(Round(game_id=game_id, round_number=round_number, judge_id=judge_id,
                               words=list(words), time_limit=time_limit, status='setup'))

    def get_round(self, round_id):
        return self.session.get(Round, round_id)

    def get_round_by_number(self, game_id, round_number):
        return Round.query.filter_by(game_id=game_id, round_number=round_number).first()

    def list_rounds(self, game_id):
        return Round.query.filter_by(game_id=game_id).order_by(Round.round_number).all()

    # poems
    def create_poem(self, round_id, player_id):
        return self._add(Poem(round_id=round_id, player_id=player_id, content='', submitted=False))

    def get_poem(self, poem_id):
        return self.session.get(Poem, poem_id)

    def list_poems(self, round_id):
        return Poem.query.filter_by(round_id=round_id).order_by(Poem.id).all()

    def save(self, *records):
        try:
            for record in records:
                self.session.add(record)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    @contextmanager
    def lock_round(self, round_id):
        """Row lock on the round for the rest of the transaction (SELECT ... FOR UPDATE)."""
        rnd = (self.session.query(Round)
               .filter(Round.id == round_id)
               .populate_existing()
               .with_for_update(nowait=False)
               .first())
        if rnd is None:
            self.session.rollback()
            raise NotFound('Round', round_id)
        try:
            yield rnd
        except Exception:
            self.session.rollback()
            raise
