"""Authentication routes: register, login, logout (JSON).

Sessions are Flask-Login cookies; API routes elsewhere rely on
``@login_required`` and the JSON 401 handler in ``gatehunt/__init__.py``.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from gatehunt import db
from gatehunt.logging_utils import get_logger
from gatehunt.models.models import User

bp_auth = Blueprint("auth", __name__)
log = get_logger("auth")

USERNAME_MAX_LEN = 80
PASSWORD_MIN_LEN = 6


def _credentials():
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username.strip(), password


@bp_auth.route("/api/auth/register", methods=["POST"])
def register():
    username, password = _credentials()
    if not username or len(username) > USERNAME_MAX_LEN:
        return jsonify({"error": "invalid_input", "message": "Username is required."}), 400
    if not password or len(password) < PASSWORD_MIN_LEN:
        return (
            jsonify(
                {"error": "invalid_input", "message": f"Password must be at least {PASSWORD_MIN_LEN} characters."}
            ),
            400,
        )
    if User.query.filter(func.lower(User.username) == username.lower()).first():
        return jsonify({"error": "username_taken", "message": "Username already exists."}), 409
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "username_taken", "message": "Username already exists."}), 409
    login_user(user)
    log.info(event="user_registered", user_id=user.id)
    return jsonify({"id": user.id, "username": user.username}), 201


@bp_auth.route("/api/auth/login", methods=["POST"])
def login():
    username, password = _credentials()
    if not username or not password:
        return jsonify({"error": "invalid_input", "message": "Username and password are required."}), 400
    user = User.query.filter(func.lower(User.username) == username.lower()).first()
    if user is None or not user.check_password(password):
        log.info(event="login_failed", username=username)
        return jsonify({"error": "invalid_credentials", "message": "Invalid username or password."}), 401
    login_user(user)
    log.info(event="login", user_id=user.id)
    return jsonify({"id": user.id, "username": user.username})


@bp_auth.route("/api/auth/logout", methods=["POST"])
@login_required
def logout():
    user_id = current_user.id
    logout_user()
    log.info(event="logout", user_id=user_id)
    return jsonify({"ok": True})
