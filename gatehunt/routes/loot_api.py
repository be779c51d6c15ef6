"""Loot API endpoints.

Rolling is stateless; crediting a roll to a hunter goes through
``POST /api/hunters/<id>/add-loot``.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from gatehunt.errors import InvalidInput
from gatehunt.services.loot_service import determine_loot

bp_loot = Blueprint("loot", __name__)


@bp_loot.route("/api/loot/roll", methods=["POST"])
@login_required
def roll():
    data = request.get_json(silent=True) or {}
    enemy_id = data.get("enemyId")
    if not isinstance(enemy_id, str) or not enemy_id.strip():
        raise InvalidInput("enemyId is required.", field="enemyId")
    return jsonify(determine_loot(enemy_id.strip()).to_dict())
