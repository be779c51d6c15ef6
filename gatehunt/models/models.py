"""
project: Gatehunt
module: models.py
License: MIT

Database models for accounts, hunters, the item catalog, inventories and the
currency ledger.

Notes:
- Passwords are stored as hashed values (Werkzeug generate_password_hash).
- Skill id lists are stored in JSON columns; mutate them by assigning a new
  list (SQLAlchemy does not track in-place appends on plain JSON columns).
- ``Hunter.version`` is an optimistic lock counter bumped by list mutations.
"""

from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from gatehunt import db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(UserMixin, db.Model):
    """Authenticated player account.

    Attributes:
        id: Primary key.
        username: Unique handle for login and display.
        password: Hashed password string (never store plaintext).
    """

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def set_password(self, raw_password: str):
        self.password = generate_password_hash(raw_password)

    def check_password(self, candidate: str) -> bool:
        if not self.password:
            return False
        return check_password_hash(self.password, candidate)


class Hunter(db.Model):
    """A playable hunter owned by a user.

    Level is always ``level_from_exp(experience)``; it is stored so listings
    and gating reads do not recompute it. ``current_hp`` / ``current_mp`` of
    None mean "full" (the derived maximum).
    """

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    name = db.Column(db.String(80), nullable=False)
    hunter_class = db.Column(db.String(20), nullable=False)
    rank = db.Column(db.String(2), nullable=False, default="E")
    level = db.Column(db.Integer, nullable=False, default=1)
    experience = db.Column(db.Integer, nullable=False, default=0)
    stat_points = db.Column(db.Integer, nullable=False, default=0)
    skill_points = db.Column(db.Integer, nullable=False, default=0)
    # Base attributes
    strength = db.Column(db.Integer, nullable=False, default=10)
    agility = db.Column(db.Integer, nullable=False, default=10)
    perception = db.Column(db.Integer, nullable=False, default=10)
    intelligence = db.Column(db.Integer, nullable=False, default=10)
    vitality = db.Column(db.Integer, nullable=False, default=10)
    current_hp = db.Column(db.Integer, nullable=True)
    current_mp = db.Column(db.Integer, nullable=True)
    gold = db.Column(db.Integer, nullable=False, default=0)
    diamonds = db.Column(db.Integer, nullable=False, default=0)
    unlocked_skills = db.Column(db.JSON, nullable=False, default=list)
    equipped_skills = db.Column(db.JSON, nullable=False, default=list)
    version = db.Column(db.Integer, nullable=False, default=1)  # optimistic lock counter
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (db.UniqueConstraint("user_id", "name", name="uq_hunter_user_name"),)

    def attributes(self) -> dict:
        return {
            "strength": self.strength,
            "agility": self.agility,
            "perception": self.perception,
            "intelligence": self.intelligence,
            "vitality": self.vitality,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "class": self.hunter_class,
            "rank": self.rank,
            "level": self.level,
            "experience": self.experience,
            "stat_points": self.stat_points,
            "skill_points": self.skill_points,
            **self.attributes(),
            "current_hp": self.current_hp,
            "current_mp": self.current_mp,
            "gold": self.gold,
            "diamonds": self.diamonds,
            "unlocked_skills": list(self.unlocked_skills or []),
            "equipped_skills": list(self.equipped_skills or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Item(db.Model):
    """Catalog of items that can appear in inventories.

    Attributes:
        id: Slug primary key referenced by loot tables (e.g. 'goblin-ear').
        name: Display name
        type: Category (e.g., 'weapon', 'potion', 'material')
        rarity: Drop frequency tier (common, uncommon, rare, epic, legendary)
        stackable: Stackable items keep one inventory row per hunter.
        price: Shop price in gold per unit; None when the shop does not sell it.
        effects: Consumable effects, e.g. {"restoreHp": 50}.
    """

    id = db.Column(db.String(80), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    description = db.Column(db.Text, nullable=True)
    rarity = db.Column(db.String(20), nullable=False, default="common")
    stackable = db.Column(db.Boolean, nullable=False, default=True)
    price = db.Column(db.Integer, nullable=True)
    effects = db.Column(db.JSON, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "rarity": self.rarity,
            "stackable": bool(self.stackable),
            "price": self.price,
            "effects": dict(self.effects or {}),
        }


class InventoryItem(db.Model):
    __tablename__ = "inventory_item"

    id = db.Column(db.Integer, primary_key=True)
    hunter_id = db.Column(db.Integer, db.ForeignKey("hunter.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = db.Column(db.String(80), db.ForeignKey("item.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    acquired_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    item = db.relationship("Item", lazy="joined")

    def to_dict(self):
        data = {"id": self.id, "item_id": self.item_id, "quantity": self.quantity}
        if self.item is not None:
            data["item"] = self.item.to_dict()
        return data


class CurrencyTransaction(db.Model):
    """Ledger row written alongside every gold/diamond balance change."""

    __tablename__ = "currency_transaction"

    id = db.Column(db.Integer, primary_key=True)
    hunter_id = db.Column(db.Integer, db.ForeignKey("hunter.id", ondelete="CASCADE"), nullable=False, index=True)
    gold_delta = db.Column(db.Integer, nullable=False, default=0)
    diamond_delta = db.Column(db.Integer, nullable=False, default=0)
    gold_after = db.Column(db.Integer, nullable=False)
    diamonds_after = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(40), nullable=False, default="adjust")
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "hunter_id": self.hunter_id,
            "gold_delta": self.gold_delta,
            "diamond_delta": self.diamond_delta,
            "gold_after": self.gold_after,
            "diamonds_after": self.diamonds_after,
            "reason": self.reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
