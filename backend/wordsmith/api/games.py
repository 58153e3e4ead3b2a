from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from wordsmith import socketio
from wordsmith.services.games import GameService, MemoryRepository, WordsmithError, ValidationError
from wordsmith.services.games.sql_repository import SqlRepository
from wordsmith.services.games import words


games = Blueprint('games', __name__)


def current_repository():
    """Repository for this app, chosen by GAME_STORE."""
    app = current_app._get_current_object()
    if app.config.get('GAME_STORE', 'sql') == 'memory':
        return app.extensions.setdefault('wordsmith_memory_store', MemoryRepository())
    return SqlRepository()


def _service() -> GameService:
    return GameService.from_config(current_repository(), current_app.config)


def _notify(game_id: int) -> None:
    socketio.emit('state_update', {'game_id': game_id}, to=f"game:{game_id}", namespace='/ws')


def _actor(service: GameService, game_id: int):
    """The logged-in user's player in this game."""
    return service.player_for_user(game_id, current_user.id)


@games.app_errorhandler(WordsmithError)
def handle_game_error(exc):
    current_app.logger.info(f"[rejected] {type(exc).__name__}: {exc.message}")
    return jsonify({'error': exc.message}), exc.status_code


@games.route('/games', methods=['POST'])
@login_required
def create_game():
    """
    Creates a game for the given users (first one hosts) and starts round 1.
    """
    data = request.get_json(silent=True) or {}
    user_ids = data.get('user_ids') or []
    total_rounds = data.get('total_rounds', current_app.config.get('DEFAULT_TOTAL_ROUNDS', 5))
    if not isinstance(user_ids, list) or not all(isinstance(u, int) and not isinstance(u, bool) for u in user_ids):
        raise ValidationError('user_ids must be a list of user ids')
    if current_user.id not in user_ids:
        return jsonify({'error': 'You must be one of the players'}), 403

    service = _service()
    game = service.create_game(data.get('name'), total_rounds, user_ids)
    service.start_round(game.id)
    current_app.logger.info(f"[create] game={game.id} by user={current_user.id}")
    player = _actor(service, game.id)
    return jsonify(service.game_view(game.id, player.id)), 201


@games.route('/games/active', methods=['GET'])
@login_required
def get_active_games():
    """
    Returns the games the current user is playing in that have not finished.
    """
    service = _service()
    active = [g.to_dict() for g in service.repo.games_for_user(current_user.id)
              if g.status != 'completed']
    return jsonify(active), 200


@games.route('/games/<int:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    service = _service()
    player = _actor(service, game_id)
    return jsonify(service.game_view(game_id, player.id))


@games.route('/games/<int:game_id>/next-round', methods=['POST'])
@login_required
def next_round(game_id):
    service = _service()
    player = _actor(service, game_id)
    rnd = service.start_round(game_id)
    current_app.logger.info(f"[next_round] game={game_id} round={rnd.round_number} judge={rnd.judge_id}")
    _notify(game_id)
    return jsonify(service.game_view(game_id, player.id))


@games.route('/rounds/<int:round_id>', methods=['GET'])
@login_required
def get_round(round_id):
    service = _service()
    rnd = service.get_round(round_id)
    player = _actor(service, rnd.game_id)
    return jsonify(service.round_view(round_id, player.id))


@games.route('/rounds/<int:round_id>/writing', methods=['POST'])
@login_required
def begin_writing(round_id):
    service = _service()
    rnd = service.get_round(round_id)
    player = _actor(service, rnd.game_id)
    service.begin_writing(round_id, player.id)
    _notify(rnd.game_id)
    return jsonify(service.round_view(round_id, player.id))


@games.route('/rounds/<int:round_id>/judging', methods=['POST'])
@login_required
def begin_judging(round_id):
    service = _service()
    rnd = service.get_round(round_id)
    player = _actor(service, rnd.game_id)
    service.close_writing(round_id, player.id)
    _notify(rnd.game_id)
    return jsonify(service.round_view(round_id, player.id))


@games.route('/rounds/<int:round_id>/winner', methods=['POST'])
@login_required
def select_winner(round_id):
    data = request.get_json(silent=True) or {}
    poem_id = data.get('poem_id')
    if isinstance(poem_id, bool) or not isinstance(poem_id, int):
        return jsonify({'error': 'Invalid poem ID'}), 400

    service = _service()
    rnd = service.get_round(round_id)
    player = _actor(service, rnd.game_id)
    service.select_winner(round_id, poem_id, player.id)
    _notify(rnd.game_id)
    return jsonify(service.game_view(rnd.game_id, player.id))


@games.route('/poems/<int:poem_id>', methods=['PUT'])
@login_required
def update_poem(poem_id):
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    if not isinstance(content, str):
        return jsonify({'error': 'Invalid content'}), 400

    service = _service()
    poem = service.get_poem(poem_id)
    rnd = service.get_round(poem.round_id)
    player = _actor(service, rnd.game_id)
    poem = service.update_poem(poem_id, content, actor_id=player.id)
    return jsonify(poem.to_dict())


@games.route('/poems/<int:poem_id>/submit', methods=['POST'])
@login_required
def submit_poem(poem_id):
    service = _service()
    poem = service.get_poem(poem_id)
    rnd = service.get_round(poem.round_id)
    player = _actor(service, rnd.game_id)
    poem = service.submit_poem(poem_id, actor_id=player.id)
    _notify(rnd.game_id)
    return jsonify(poem.to_dict())


@games.route('/random-words', methods=['GET'])
def random_words():
    count = request.args.get('count', default=5, type=int)
    return jsonify({'words': words.draw(count)})
