"""Experience point (XP) progression utilities.

Quadratic curve: gaining level ``L`` costs ``floor(100 + 25 * (L - 1) ** 2)``
experience, so level 2 needs 125, level 3 another 200, level 4 another 325.
Hunters store cumulative experience; the level is always derived from it.

Import ``level_from_exp`` anywhere level gating is needed (skill unlocks, point
rewards, UI progress bars).
"""

from __future__ import annotations

from gatehunt.logging_utils import get_logger

log = get_logger("xp")

# Practical ceiling for the level search; reaching it saturates instead of erroring.
MAX_LEVEL = 999


def exp_needed_for_level_gain(target_level: int) -> int:
    """Return the experience needed to go from ``target_level - 1`` to ``target_level``.

    Levels ``<= 1`` need nothing (every hunter starts at level 1).
    """
    if target_level <= 1:
        return 0
    return int(100 + 25 * (target_level - 1) ** 2)


def cumulative_exp_for_level_start(level: int) -> int:
    """Return total experience required to reach the start of ``level``."""
    if level <= 1:
        return 0
    return sum(exp_needed_for_level_gain(lvl) for lvl in range(2, level + 1))


def level_from_exp(experience: int) -> int:
    """Return the largest level whose cumulative threshold is ``<= experience``.

    Negative experience is treated as 0. The search stops at ``MAX_LEVEL``;
    experience beyond that threshold saturates at ``MAX_LEVEL``.
    """
    experience = max(0, int(experience))
    level = 1
    threshold = 0
    while level < MAX_LEVEL:
        threshold += exp_needed_for_level_gain(level + 1)
        if experience < threshold:
            return level
        level += 1
    log.warn(event="level_saturated", experience=experience, max_level=MAX_LEVEL)
    return MAX_LEVEL


def exp_for_next_level_gain(current_level: int) -> int:
    """Experience needed to go from the start of ``current_level`` to the next one.

    Returns 0 at ``MAX_LEVEL`` so callers can treat it as "maxed out".
    """
    current_level = max(0, current_level)
    if current_level >= MAX_LEVEL:
        return 0
    return exp_needed_for_level_gain(current_level + 1)


def level_progress(experience: int) -> dict:
    """Summarize where ``experience`` sits on the curve (progress bar payload)."""
    experience = max(0, int(experience))
    level = level_from_exp(experience)
    start = cumulative_exp_for_level_start(level)
    needed = exp_for_next_level_gain(level)
    return {
        "level": level,
        "experience": experience,
        "current_level_start_exp": start,
        "exp_progress_in_current_level": experience - start,
        "exp_needed_for_next_level": needed,
        "is_max_level": needed <= 0,
    }


__all__ = [
    "MAX_LEVEL",
    "exp_needed_for_level_gain",
    "cumulative_exp_for_level_start",
    "level_from_exp",
    "exp_for_next_level_gain",
    "level_progress",
]
