"""
project: Gatehunt
module: __init__.py
License: MIT

Gatehunt application object and shared extensions.

Importing the package builds the Flask app and its extensions (`db`,
`login_manager`, `socketio`) and registers every blueprint and Socket.IO
handler. Settings come from the environment (optionally a `.env` file); with
no DATABASE_URL the game runs on SQLite under `instance/gatehunt.db`.
"""

import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

# .env values never override variables already exported
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only installs fall back to whatever DATABASE_URL points at
    pass

secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")
database_url = os.getenv("DATABASE_URL")
if not database_url:
    db_path = Path(app.instance_path) / "gatehunt.db"
    database_url = f"sqlite:///{db_path.as_posix()}"

app.config.update(
    SECRET_KEY=secret_key,
    SQLALCHEMY_DATABASE_URI=database_url,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
)
# Responses keep insertion order
app.json.sort_keys = False

engine_opts = {}
if database_url.startswith("sqlite:///"):
    engine_opts["connect_args"] = {
        "timeout": 10,  # busy timeout (seconds) for sqlite
        "check_same_thread": False,  # socketio handlers run on other threads
    }
db = SQLAlchemy(app, session_options={"expire_on_commit": False}, engine_options=engine_opts)
login_manager = LoginManager(app)


@login_manager.user_loader
def load_user(user_id):
    from gatehunt.models.models import User

    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({"error": "unauthorized", "message": "Login required."}), 401


# async_mode None lets Flask-SocketIO pick the best installed backend
socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    ping_interval=20,
    ping_timeout=10,
)

# Register HTTP blueprints (import after app/db created)
from gatehunt.routes.auth import bp_auth  # noqa: E402
from gatehunt.routes.gate_api import bp_gate  # noqa: E402
from gatehunt.routes.hunters_api import bp_hunters  # noqa: E402
from gatehunt.routes.loot_api import bp_loot  # noqa: E402
from gatehunt.routes.shop_api import bp_shop  # noqa: E402
from gatehunt.routes.skills_api import bp_skills  # noqa: E402

app.register_blueprint(bp_auth)
app.register_blueprint(bp_hunters)
app.register_blueprint(bp_skills)
app.register_blueprint(bp_gate)
app.register_blueprint(bp_loot)
app.register_blueprint(bp_shop)

# Handlers register on import
from gatehunt.websockets import hunter as _ws_hunter  # noqa: F401,E402

from gatehunt.errors import GameError  # noqa: E402


@app.errorhandler(GameError)
def game_error(e: GameError):
    return jsonify(e.to_dict()), e.status


def create_app(overrides: dict | None = None):
    """Return the Flask app instance with the schema and item catalog in place.

    ``overrides`` is merged into ``app.config`` first; tests use it to flip
    TESTING on. Table creation and catalog seeding are idempotent.
    """
    if overrides:
        app.config.update(overrides)
    from gatehunt.server import seed_items

    with app.app_context():
        db.create_all()
        seed_items()
    return app


# Unhandled errors: log with a short id the client can quote back
@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s) path=%s", error_id, request.path)
    return jsonify({"error": "internal", "message": "Internal server error.", "error_id": error_id}), 500
