"""
Gatehunt error taxonomy.

Every failure a caller can see derives from ``GameError`` and carries a stable
snake_case ``code`` plus the HTTP status the route layer answers with. Storage
internals never leak through ``message``; wrap them in ``Internal``.
"""


class GameError(Exception):
    """Base class for user-facing failures."""

    code = "error"
    status = 400
    default_message = "Request failed."

    def __init__(self, message: str | None = None, code: str | None = None, **details):
        self.message = message or self.default_message
        if code:
            self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


# =============================================================================
# Identity / ownership
# =============================================================================


class Unauthorized(GameError):
    code = "unauthorized"
    status = 401
    default_message = "Login required."


class Forbidden(GameError):
    code = "forbidden"
    status = 403
    default_message = "You do not own this resource."


# =============================================================================
# Lookup / state
# =============================================================================


class NotFound(GameError):
    code = "not_found"
    status = 404
    default_message = "Not found."


class Conflict(GameError):
    code = "conflict"
    status = 409
    default_message = "Request conflicts with current state."


class SlotsFull(Conflict):
    code = "slots_full"
    default_message = "Maximum equipped skills reached."


class Expired(GameError):
    code = "expired"
    status = 410
    default_message = "This gate has expired."


class RoomNotCleared(GameError):
    code = "room_not_cleared"
    status = 400
    default_message = "Current room must be cleared before progressing."


# =============================================================================
# Input / resources
# =============================================================================


class InvalidInput(GameError):
    code = "invalid_input"
    status = 400
    default_message = "Invalid input."


class InvalidStat(InvalidInput):
    code = "invalid_stat"
    default_message = "Invalid stat name."


class InsufficientResource(GameError):
    code = "insufficient_resource"
    status = 400
    default_message = "Not enough resources."


class InsufficientPoints(InsufficientResource):
    code = "insufficient_points"
    default_message = "No stat points available to allocate."


class InsufficientFunds(InsufficientResource):
    code = "insufficient_funds"
    default_message = "Not enough currency."


class RequirementsNotMet(GameError):
    code = "requirements_not_met"
    status = 400
    default_message = "Requirements not met."


class NotUnlocked(RequirementsNotMet):
    code = "not_unlocked"
    default_message = "Skill is not unlocked."


class Internal(GameError):
    code = "internal"
    status = 500
    default_message = "Internal error."


__all__ = [
    "GameError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Conflict",
    "SlotsFull",
    "Expired",
    "RoomNotCleared",
    "InvalidInput",
    "InvalidStat",
    "InsufficientResource",
    "InsufficientPoints",
    "InsufficientFunds",
    "RequirementsNotMet",
    "NotUnlocked",
    "Internal",
]
