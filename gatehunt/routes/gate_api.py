"""Gate API endpoints.

``/api/gate/*`` addresses a hunter's (single) gate; ``/api/dungeons/<gate_id>``
addresses a gate row directly for the in-run screen.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from gatehunt.errors import InvalidInput, NotFound
from gatehunt.services import gate_service
from gatehunt.services.validation import parse_id

bp_gate = Blueprint("gate", __name__)


def _hunter_id_from_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Invalid JSON body.")
    return parse_id(data.get("hunterId"), "hunterId")


@bp_gate.route("/api/gate/locate", methods=["POST"])
@login_required
def locate():
    gate = gate_service.locate_gate(current_user.id, _hunter_id_from_body())
    return jsonify({"message": "Gate located.", "gate": gate.to_dict()}), 201


@bp_gate.route("/api/gate/status", methods=["GET"])
@login_required
def status():
    hunter_id = parse_id(request.args.get("hunterId"), "hunterId")
    gate = gate_service.gate_status(current_user.id, hunter_id)
    return jsonify({"activeGate": gate.to_dict() if gate else None})


@bp_gate.route("/api/gate/abandon", methods=["POST"])
@login_required
def abandon():
    removed = gate_service.abandon_gate(current_user.id, _hunter_id_from_body())
    return jsonify({"message": "Gate abandoned." if removed else "No active gate.", "removed": removed})


@bp_gate.route("/api/dungeons/<int:gate_id>", methods=["GET"])
@login_required
def get_dungeon(gate_id: int):
    gate = gate_service.get_gate(gate_id, current_user.id)
    if gate is None:
        raise NotFound("Gate not found or expired.")
    return jsonify({"gate": gate.to_dict()})


@bp_gate.route("/api/dungeons/<int:gate_id>/clear-room", methods=["PUT"])
@login_required
def clear_room(gate_id: int):
    gate = gate_service.clear_room(gate_id, current_user.id)
    return jsonify({"message": "Room cleared.", "gate": gate.to_dict()})


@bp_gate.route("/api/dungeons/<int:gate_id>/progress", methods=["PUT"])
@login_required
def progress(gate_id: int):
    return jsonify(gate_service.progress_gate(gate_id, current_user.id))
