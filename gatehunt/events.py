"""Socket.IO push helpers.

Clients join ``hunter:<id>`` rooms on the ``/gatehunt`` namespace (see
``gatehunt.websockets.hunter``). Emits are best-effort: the database commit
has already happened, so a transport failure is logged and swallowed.
"""

from gatehunt import socketio
from gatehunt.logging_utils import get_logger

NAMESPACE = "/gatehunt"

log = get_logger("events")


def hunter_room(hunter_id: int) -> str:
    return f"hunter:{hunter_id}"


def _emit(event: str, payload: dict, hunter_id: int):  # safe emit wrapper
    try:
        socketio.emit(event, payload, namespace=NAMESPACE, to=hunter_room(hunter_id))
    except Exception as e:  # pragma: no cover - transport failure
        log.warn(event="emit_failed", name=event, hunter_id=hunter_id, error=str(e))


def emit_hunter_update(hunter) -> None:
    _emit("hunter_update", hunter.to_dict(), hunter.id)


def emit_gate_update(hunter_id: int, status: str, gate=None) -> None:
    _emit("gate_update", {"status": status, "gate": gate.to_dict() if gate is not None else None}, hunter_id)
