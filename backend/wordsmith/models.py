from datetime import datetime, timezone
from wordsmith import db, bcrypt
from flask_login import UserMixin


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    total_rounds = db.Column(db.Integer, default=5, nullable=False)
    current_round = db.Column(db.Integer, default=0, nullable=False)
    current_judge_index = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.String(16), default='waiting', nullable=False)  # waiting, active, completed
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    players = db.relationship('Player', back_populates='game', order_by='Player.id')
    rounds = db.relationship('Round', back_populates='game', order_by='Round.round_number')

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


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    is_host = db.Column(db.Boolean, default=False, nullable=False)
    game = db.relationship('Game', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'user_id': self.user_id,
            'score': self.score,
            'is_host': self.is_host,
        }


class Round(db.Model):
    __tablename__ = 'round'
    __table_args__ = (db.UniqueConstraint('game_id', 'round_number', name='uq_round_game_number'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    judge_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    words = db.Column(db.JSON, nullable=False)
    status = db.Column(db.String(16), default='setup', nullable=False)  # setup, writing, judging, completed
    time_limit = db.Column(db.Integer, default=300, nullable=False)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)
    winner_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    game = db.relationship('Game', back_populates='rounds')
    poems = db.relationship('Poem', backref='round', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'round_number': self.round_number,
            'judge_id': self.judge_id,
            'words': list(self.words or []),
            'status': self.status,
            'time_limit': self.time_limit,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'winner_id': self.winner_id,
        }


class Poem(db.Model):
    __tablename__ = 'poem'
    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey('round.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    content = db.Column(db.Text, default='', nullable=False)
    submitted = db.Column(db.Boolean, default=False, nullable=False)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'round_id': self.round_id,
            'player_id': self.player_id,
            'content': self.content,
            'submitted': self.submitted,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
        }
