"""Socket.IO handlers for the ``/gatehunt`` namespace.

Events:
    - watch_hunter: Subscribe to a hunter's updates; payload { hunterId }
    - unwatch_hunter: Unsubscribe; payload { hunterId }

Emits (from the service layer, see ``gatehunt.events``):
    - hunter_update: Hunter row after any progression/currency/skill change
    - gate_update: { status, gate } on locate/clear/progress/complete/expire/abandon
"""

from flask_login import current_user
from flask_socketio import emit, join_room, leave_room

from gatehunt import socketio
from gatehunt.events import NAMESPACE, hunter_room
from gatehunt.logging_utils import get_logger
from gatehunt.services.hunter_service import load_hunter

log = get_logger("ws")


def _validated_hunter_id(data):
    raw = (data or {}).get("hunterId")
    if isinstance(raw, bool) or not isinstance(raw, int):
        emit("error", {"message": "hunterId must be an integer.", "field": "hunterId", "code": "invalid_input"})
        return None
    return raw


@socketio.on("watch_hunter", namespace=NAMESPACE)
def handle_watch_hunter(data):
    hunter_id = _validated_hunter_id(data)
    if hunter_id is None:
        return
    if not getattr(current_user, "is_authenticated", False):
        emit("error", {"message": "Login required.", "code": "unauthorized"})
        return
    hunter = load_hunter(hunter_id)
    if hunter is None or hunter.user_id != current_user.id:
        emit("error", {"message": "You do not own this hunter.", "code": "forbidden"})
        return
    join_room(hunter_room(hunter_id))
    log.info(event="watch_hunter", user_id=current_user.id, hunter_id=hunter_id)
    emit("hunter_update", hunter.to_dict())


@socketio.on("unwatch_hunter", namespace=NAMESPACE)
def handle_unwatch_hunter(data):
    hunter_id = _validated_hunter_id(data)
    if hunter_id is None:
        return
    leave_room(hunter_room(hunter_id))
