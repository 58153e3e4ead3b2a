"""Persistence contract for the game core, plus an in-memory implementation.

The orchestrator only ever talks to a `GameRepository`. Production wires in
`SqlRepository` (see sql_repository.py); tests and `GAME_STORE=memory`
use `MemoryRepository`.
"""

import itertools
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ContextManager, Dict, List, Optional, Protocol

from flask_login import UserMixin

from wordsmith import bcrypt
from .errors import NotFound


class GameRepository(Protocol):
    def get_user(self, user_id: int): ...
    def get_user_by_username(self, username: str): ...
    def create_user(self, username: str, password: str): ...
    def list_users(self) -> list: ...

    def create_game(self, name: str, created_by: int, total_rounds: int): ...
    def get_game(self, game_id: int): ...

    def add_player(self, game_id: int, user_id: int, is_host: bool = False): ...
    def get_player(self, player_id: int): ...
    def list_players(self, game_id: int) -> list: ...
    def games_for_user(self, user_id: int) -> list: ...

    def create_round(self, game_id: int, round_number: int, judge_id: int,
                     words: list, time_limit: int): ...
    def get_round(self, round_id: int): ...
    def get_round_by_number(self, game_id: int, round_number: int): ...
    def list_rounds(self, game_id: int) -> list: ...

    def create_poem(self, round_id: int, player_id: int): ...
    def get_poem(self, poem_id: int): ...
    def list_poems(self, round_id: int) -> list: ...

    def save(self, *records) -> None: ...
    def lock_round(self, round_id: int) -> ContextManager: ...


@dataclass
class UserRecord(UserMixin):
    id: int
    username: str
    password_hash: str = ''

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'username': self.username}


@dataclass
class GameRecord:
    id: int
    name: str
    created_by: int
    total_rounds: int
    current_round: int = 0
    current_judge_index: int = 0
    status: str = 'waiting'
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_by': self.created_by,
            'total_rounds': self.total_rounds,
            'current_round': self.current_round,
            'current_judge_index': self.current_judge_index,
            'status': self.status,
        }


@dataclass
class PlayerRecord:
    id: int
    game_id: int
    user_id: int
    score: int = 0
    is_host: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'user_id': self.user_id,
            'score': self.score,
            'is_host': self.is_host,
        }


@dataclass
class RoundRecord:
    id: int
    game_id: int
    round_number: int
    judge_id: int
    words: List[str]
    time_limit: int = 300
    status: str = 'setup'
    end_time: Optional[datetime] = None
    winner_id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'round_number': self.round_number,
            'judge_id': self.judge_id,
            'words': list(self.words),
            'status': self.status,
            'time_limit': self.time_limit,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'winner_id': self.winner_id,
        }


@dataclass
class PoemRecord:
    id: int
    round_id: int
    player_id: int
    content: str = ''
    submitted: bool = False
    submitted_at: Optional[datetime] = None

    def to_dict(self):
        return {
            'id': self.id,
            'round_id': self.round_id,
            'player_id': self.player_id,
            'content': self.content,
            'submitted': self.submitted,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
        }


class MemoryRepository:
    """Dict-backed store. Records are mutated in place, so `save` only re-indexes."""

    def __init__(self):
        self.users: Dict[int, UserRecord] = {}
        self.games: Dict[int, GameRecord] = {}
        self.players: Dict[int, PlayerRecord] = {}
        self.rounds: Dict[int, RoundRecord] = {}
        self.poems: Dict[int, PoemRecord] = {}
        self._ids = {kind: itertools.count(1) for kind in ('user', 'game', 'player', 'round', 'poem')}
        self._round_locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _next_id(self, kind):
        return next(self._ids[kind])

    # users
    def get_user(self, user_id):
        return self.users.get(user_id)

    def get_user_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    def create_user(self, username, password):
        user = UserRecord(
            id=self._next_id('user'),
            username=username,
            password_hash=bcrypt.generate_password_hash(password).decode('utf-8'),
        )
        self.users[user.id] = user
        return user

    def list_users(self):
        return sorted(self.users.values(), key=lambda u: u.id)

    # games
    def create_game(self, name, created_by, total_rounds):
        game = GameRecord(id=self._next_id('game'), name=name, created_by=created_by,
                          total_rounds=total_rounds)
        self.games[game.id] = game
        return game

    def get_game(self, game_id):
        return self.games.get(game_id)

    # players
    def add_player(self, game_id, user_id, is_host=False):
        player = PlayerRecord(id=self._next_id('player'), game_id=game_id,
                              user_id=user_id, is_host=is_host)
        self.players[player.id] = player
        return player

    def get_player(self, player_id):
        return self.players.get(player_id)

    def list_players(self, game_id):
        return sorted((p for p in self.players.values() if p.game_id == game_id), key=lambda p: p.id)

    def games_for_user(self, user_id):
        game_ids = {p.game_id for p in self.players.values() if p.user_id == user_id}
        return [self.games[gid] for gid in sorted(game_ids)]

    # rounds
    def create_round(self, game_id, round_number, judge_id, words, time_limit):
        rnd = RoundRecord(id=self._next_id('round'), game_id=game_id, round_number=round_number,
                          judge_id=judge_id, words=list(words), time_limit=time_limit)
        self.rounds[rnd.id] = rnd
        return rnd

    def get_round(self, round_id):
        return self.rounds.get(round_id)

    def get_round_by_number(self, game_id, round_number):
        return next(
            (r for r in self.rounds.values() if r.game_id == game_id and r.round_number == round_number),
            None,
        )

    def list_rounds(self, game_id):
        return sorted((r for r in self.rounds.values() if r.game_id == game_id),
                      key=lambda r: r.round_number)

    # poems
    def create_poem(self, round_id, player_id):
        poem = PoemRecord(id=self._next_id('poem'), round_id=round_id, player_id=player_id)
        self.poems[poem.id] = poem
        return poem

    def get_poem(self, poem_id):
        return self.poems.get(poem_id)

    def list_poems(self, round_id):
        return sorted((p for p in self.poems.values() if p.round_id == round_id), key=lambda p: p.id)

    def save(self, *records):
        tables = {
            GameRecord: self.games,
            PlayerRecord: self.players,
            RoundRecord: self.rounds,
            PoemRecord: self.poems,
            UserRecord: self.users,
        }
        for record in records:
            tables[type(record)][record.id] = record

    @contextmanager
    def lock_round(self, round_id):
        with self._locks_guard:
            lock = self._round_locks.setdefault(round_id, threading.Lock())
        with lock:
            rnd = self.rounds.get(round_id)
            if rnd is None:
                raise NotFound('Round', round_id)
            yield rnd
