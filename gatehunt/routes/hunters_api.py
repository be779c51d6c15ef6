"""Hunter API endpoints.

Roster management plus every per-hunter mutation: experience, stat points,
current resources, currency, skills, loot and item drops. Handlers stay thin;
failures raise ``GameError`` subclasses which the app-level handler renders.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from gatehunt.errors import InvalidInput
from gatehunt.inventory.utils import list_inventory
from gatehunt.services import (
    currency_service,
    hunter_service,
    inventory_service,
    loot_service,
    progression_service,
    skill_service,
)
from gatehunt.services.stats import combat_stats, hunter_stats
from gatehunt.services.validation import require_int

bp_hunters = Blueprint("hunters", __name__)


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Invalid JSON body.")
    return data


def _hunter_payload(hunter) -> dict:
    data = hunter.to_dict()
    data["derived"] = hunter_stats(hunter)
    return data


@bp_hunters.route("/api/hunters", methods=["GET"])
@login_required
def list_hunters():
    hunters = hunter_service.list_hunters(current_user.id)
    return jsonify({"hunters": [h.to_dict() for h in hunters]})


@bp_hunters.route("/api/hunters", methods=["POST"])
@login_required
def create_hunter():
    data = _body()
    hunter = hunter_service.create_hunter(current_user.id, data.get("name"), data.get("class"))
    return jsonify({"message": "Hunter created successfully!", "hunter": hunter.to_dict()}), 201


@bp_hunters.route("/api/hunters/<int:hunter_id>", methods=["GET"])
@login_required
def get_hunter(hunter_id: int):
    hunter = hunter_service.get_owned_hunter(hunter_id, current_user.id)
    return jsonify({"hunter": _hunter_payload(hunter)})


@bp_hunters.route("/api/hunters/<int:hunter_id>", methods=["PATCH"])
@login_required
def update_hunter(hunter_id: int):
    hunter = hunter_service.update_hunter(hunter_id, current_user.id, _body())
    return jsonify({"hunter": hunter.to_dict()})


@bp_hunters.route("/api/hunters/<int:hunter_id>", methods=["DELETE"])
@login_required
def delete_hunter(hunter_id: int):
    hunter_service.delete_hunter(hunter_id, current_user.id)
    return jsonify({"ok": True})


# --- Progression ---


@bp_hunters.route("/api/hunters/<int:hunter_id>/gain-exp", methods=["POST"])
@login_required
def gain_exp(hunter_id: int):
    gained = _body().get("experienceGained")
    report = progression_service.gain_experience(hunter_id, current_user.id, gained)
    return jsonify(
        {
            "levelUp": report["level_up"],
            "newLevel": report["new_level"],
            "levelsGained": report["levels_gained"],
            "statPointsGained": report["stat_points_gained"],
            "skillPointsGained": report["skill_points_gained"],
        }
    )


@bp_hunters.route("/api/hunters/<int:hunter_id>/allocate-stat", methods=["POST"])
@login_required
def allocate_stat(hunter_id: int):
    hunter = progression_service.allocate_stat(hunter_id, current_user.id, _body().get("statName"))
    return jsonify({"hunter": _hunter_payload(hunter)})


@bp_hunters.route("/api/hunters/<int:hunter_id>/combat-stats", methods=["GET"])
@login_required
def get_combat_stats(hunter_id: int):
    hunter = hunter_service.get_owned_hunter(hunter_id, current_user.id)
    return jsonify(combat_stats(hunter))


@bp_hunters.route("/api/hunters/<int:hunter_id>/recover-mp", methods=["POST"])
@login_required
def recover_mp(hunter_id: int):
    return jsonify(hunter_service.recover_mp(hunter_id, current_user.id))


@bp_hunters.route("/api/hunters/<int:hunter_id>/update-current-stats", methods=["PATCH"])
@login_required
def update_current_stats(hunter_id: int):
    data = _body()
    hunter = hunter_service.update_current_resources(
        hunter_id, current_user.id, current_hp=data.get("currentHp"), current_mp=data.get("currentMp")
    )
    return jsonify({"currentHp": hunter.current_hp, "currentMp": hunter.current_mp})


# --- Currency ---


@bp_hunters.route("/api/hunters/<int:hunter_id>/adjust-gold", methods=["POST"])
@login_required
def adjust_gold(hunter_id: int):
    amount = require_int(_body().get("amount"), "amount")
    return jsonify(currency_service.adjust_currency(hunter_id, gold_delta=amount, user_id=current_user.id))


@bp_hunters.route("/api/hunters/<int:hunter_id>/adjust-diamonds", methods=["POST"])
@login_required
def adjust_diamonds(hunter_id: int):
    amount = require_int(_body().get("amount"), "amount")
    return jsonify(currency_service.adjust_currency(hunter_id, diamond_delta=amount, user_id=current_user.id))


@bp_hunters.route("/api/hunters/<int:hunter_id>/currency-history", methods=["GET"])
@login_required
def currency_history(hunter_id: int):
    limit = request.args.get("limit", default=currency_service.HISTORY_DEFAULT_LIMIT, type=int)
    rows = currency_service.currency_history(hunter_id, current_user.id, limit=limit)
    return jsonify({"transactions": [r.to_dict() for r in rows]})


# --- Skills ---


@bp_hunters.route("/api/hunters/<int:hunter_id>/unlock-skill", methods=["POST"])
@login_required
def unlock_skill(hunter_id: int):
    hunter = skill_service.unlock_skill(current_user.id, hunter_id, _body().get("skillId"))
    return jsonify({"message": "Skill unlocked.", "hunter": hunter.to_dict()})


@bp_hunters.route("/api/hunters/<int:hunter_id>/equip-skill", methods=["POST"])
@login_required
def equip_skill(hunter_id: int):
    hunter = skill_service.equip_skill(current_user.id, hunter_id, _body().get("skillId"))
    return jsonify({"message": "Skill equipped.", "equippedSkills": hunter.equipped_skills})


@bp_hunters.route("/api/hunters/<int:hunter_id>/unequip-skill", methods=["POST"])
@login_required
def unequip_skill(hunter_id: int):
    hunter = skill_service.unequip_skill(current_user.id, hunter_id, _body().get("skillId"))
    return jsonify({"message": "Skill unequipped.", "equippedSkills": hunter.equipped_skills})


# --- Inventory / loot ---


@bp_hunters.route("/api/hunters/<int:hunter_id>/inventory", methods=["GET"])
@login_required
def inventory(hunter_id: int):
    hunter = hunter_service.get_owned_hunter(hunter_id, current_user.id)
    return jsonify({"items": list_inventory(hunter.id)})


@bp_hunters.route("/api/hunters/<int:hunter_id>/add-loot", methods=["POST"])
@login_required
def add_loot(hunter_id: int):
    data = _body()
    result = loot_service.apply_loot(current_user.id, hunter_id, data.get("items"), data.get("gold", 0))
    return jsonify(result)


@bp_hunters.route("/api/hunters/<int:hunter_id>/drop-item", methods=["POST"])
@login_required
def drop_item(hunter_id: int):
    data = _body()
    result = inventory_service.drop_item(current_user.id, hunter_id, data.get("inventoryId"), data.get("quantity", 1))
    return jsonify(result)
