"""Input coercion shared by services and routes.

JSON gives us ints, floats, bools and strings; only real integers count as
quantities (``True`` is not 1 here). Integer columns are 32-bit, so every
amount, and every balance it would produce, stays within ``MAX_INT``.
"""

from gatehunt.errors import InvalidInput

MAX_INT = 2**31 - 1


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_positive_int(value, field: str) -> int:
    if not is_int(value) or value <= 0:
        raise InvalidInput(f"{field} must be a positive integer.", field=field)
    if value > MAX_INT:
        raise InvalidInput(f"{field} must be at most {MAX_INT}.", field=field)
    return value


def require_non_negative_int(value, field: str) -> int:
    if not is_int(value) or value < 0:
        raise InvalidInput(f"{field} must be a non-negative integer.", field=field)
    if value > MAX_INT:
        raise InvalidInput(f"{field} must be at most {MAX_INT}.", field=field)
    return value


def require_int(value, field: str) -> int:
    if not is_int(value):
        raise InvalidInput(f"{field} must be an integer.", field=field)
    if abs(value) > MAX_INT:
        raise InvalidInput(f"{field} must be between {-MAX_INT} and {MAX_INT}.", field=field)
    return value


def require_within_max(total: int, field: str) -> int:
    """Reject a resulting balance that would not fit the column."""
    if total > MAX_INT:
        raise InvalidInput(f"{field} would exceed {MAX_INT}.", code="limit_exceeded", field=field)
    return total


def parse_id(value, field: str = "id") -> int:
    """Accept an int or a digit string (query params) as a row id."""
    if is_int(value) and 0 < value <= MAX_INT:
        return value
    if isinstance(value, str) and value.strip().isdigit() and 0 < int(value) <= MAX_INT:
        return int(value)
    raise InvalidInput(f"{field} is required.", field=field)
