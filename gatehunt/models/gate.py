from gatehunt import db


class ActiveGate(db.Model):
    """The single in-progress gate run of a hunter.

    One row per hunter (unique ``hunter_id``). Depth and room counters are
    1-indexed. Rows past ``expires_at`` are deleted lazily by whoever reads them.
    """

    __tablename__ = "active_gates"
    id = db.Column(db.Integer, primary_key=True)
    hunter_id = db.Column(
        db.Integer, db.ForeignKey("hunter.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    gate_type = db.Column(db.String(80), nullable=False)
    gate_rank = db.Column(db.String(2), nullable=False)
    total_depth = db.Column(db.Integer, nullable=False)
    rooms_per_depth = db.Column(db.JSON, nullable=False)
    current_depth = db.Column(db.Integer, nullable=False, default=1)
    current_room = db.Column(db.Integer, nullable=False, default=1)
    current_room_status = db.Column(db.String(10), nullable=False, default="pending")
    created_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    def rooms_at(self, depth: int) -> int:
        return int(self.rooms_per_depth[depth - 1])

    def is_expired(self, now) -> bool:
        return now > self.expires_at

    def to_dict(self):
        return {
            "id": self.id,
            "hunter_id": self.hunter_id,
            "gate_type": self.gate_type,
            "gate_rank": self.gate_rank,
            "total_depth": self.total_depth,
            "rooms_per_depth": list(self.rooms_per_depth or []),
            "current_depth": self.current_depth,
            "current_room": self.current_room,
            "current_room_status": self.current_room_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    def __repr__(self):
        return f"<ActiveGate {self.id} hunter={self.hunter_id} {self.current_depth}/{self.current_room}>"
