"""
project: Gatehunt
module: server.py
License: MIT

Server bootstrap helpers: schema creation, item catalog seeding, logging
setup and the Socket.IO server entry point used by ``run.py``.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from gatehunt import app, db, socketio
from gatehunt.logging_utils import get_logger
from gatehunt.models.models import Item

log = get_logger("server")

# Every non-gold item id referenced by gatehunt.catalog.loot_tables must be here.
ITEM_SEEDS = [
    dict(
        id="hp-potion-small",
        name="Small HP Potion",
        type="consumable",
        description="Restores a small amount of HP.",
        rarity="common",
        stackable=True,
        price=25,
        effects={"restoreHp": 50},
    ),
    dict(
        id="mp-potion-small",
        name="Small MP Potion",
        type="consumable",
        description="Restores a small amount of MP.",
        rarity="common",
        stackable=True,
        price=30,
        effects={"restoreMp": 30},
    ),
    dict(
        id="goblin-ear",
        name="Goblin Ear",
        type="material",
        description="Proof of a goblin kill. Guild clerks pay for these.",
        rarity="common",
        stackable=True,
    ),
    dict(
        id="slime-gel",
        name="Slime Gel",
        type="material",
        description="Sticky residue left by a slime.",
        rarity="common",
        stackable=True,
    ),
    dict(
        id="bone-fragment",
        name="Bone Fragment",
        type="material",
        description="A shard of an animated skeleton.",
        rarity="common",
        stackable=True,
    ),
    dict(
        id="orc-tusk",
        name="Orc Tusk",
        type="material",
        description="A heavy tusk, prized by alchemists.",
        rarity="uncommon",
        stackable=True,
    ),
    dict(
        id="rusty-sword",
        name="Rusty Sword",
        type="weapon",
        description="A worn blade. Better than bare hands.",
        rarity="uncommon",
        stackable=False,
        price=40,
    ),
    dict(
        id="iron-axe",
        name="Iron Axe",
        type="weapon",
        description="A heavy orcish axe.",
        rarity="rare",
        stackable=False,
        price=150,
    ),
]


def seed_items():
    """Insert catalog items that don't already exist. Returns the number added."""
    existing = {i.id for i in Item.query.all()}
    added = 0
    for row in ITEM_SEEDS:
        if row["id"] in existing:
            continue
        db.session.add(Item(**row))
        added += 1
    if added:
        db.session.commit()
        log.info(event="items_seeded", count=added)
    return added


def init_db():
    """Create tables and seed the item catalog."""
    with app.app_context():
        db.create_all()
        return seed_items()


def _configure_logging():
    """Configure stdlib logging to console and a rotating file in instance/.

    The file path will be instance/gatehunt.log.
    """
    log_dir = app.instance_path
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "gatehunt.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(file_handler)
    root.addHandler(console)


def purge_gates() -> int:
    """Delete every expired gate row (maintenance command)."""
    from gatehunt.services.gate_service import purge_expired_gates
    from gatehunt.services.tx import commit

    with app.app_context():
        removed = purge_expired_gates()
        commit("purge_gates")
        return removed


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Start the Socket.IO server and ensure DB tables exist."""
    init_db()
    _configure_logging()
    try:
        print(f"[INFO] Starting Socket.IO server on {host}:{port} (async_mode={socketio.async_mode})")
        socketio.run(app, host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)
