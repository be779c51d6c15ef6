"""Shop and item-use endpoints.

Both mutations name the hunter in the JSON body (``hunterId``) like the gate
endpoints do. Dropping an item lives with the other per-hunter inventory
routes in ``hunters_api``.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from gatehunt.errors import InvalidInput
from gatehunt.services import inventory_service, shop_service
from gatehunt.services.validation import parse_id

bp_shop = Blueprint("shop", __name__)


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Invalid JSON body.")
    return data


@bp_shop.route("/api/shop/items", methods=["GET"])
@login_required
def shop_items():
    return jsonify({"items": [i.to_dict() for i in shop_service.list_shop_items()]})


@bp_shop.route("/api/shop/purchase", methods=["POST"])
@login_required
def purchase():
    data = _body()
    hunter_id = parse_id(data.get("hunterId"), "hunterId")
    result = shop_service.purchase_item(current_user.id, hunter_id, data.get("itemId"), data.get("quantity", 1))
    return jsonify(result)


@bp_shop.route("/api/items/use", methods=["POST"])
@login_required
def use_item():
    data = _body()
    hunter_id = parse_id(data.get("hunterId"), "hunterId")
    return jsonify(inventory_service.use_item(current_user.id, hunter_id, data.get("inventoryId")))
