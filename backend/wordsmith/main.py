from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from wordsmith.api.games import _service

main = Blueprint('main', __name__)


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    user = _service().register_user(data.get('username'), data.get('password'))
    login_user(user)
    return jsonify({"success": True, "user": user.to_dict()}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = _service().authenticate(data.get('username'), data.get('password'))
    if user:
        login_user(user, remember=True)
        return jsonify({"success": True, "user": user.to_dict()})
    return jsonify({"success": False, "message": "Invalid credentials"}), 401


@main.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({"success": True, "user": current_user.to_dict()})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@main.route('/users', methods=['GET'])
@login_required
def list_users():
    """Accounts that can be invited into a new game."""
    return jsonify([u.to_dict() for u in _service().repo.list_users()])
