"""Structured event logging.

Each call writes one line of ``key=value`` pairs (or a JSON object) to stdout;
errors go to stderr. Service code logs events, not prose:

    from gatehunt.logging_utils import get_logger
    log = get_logger("gate")
    log.info(event="gate_located", hunter_id=3, gate_id=12)

Fields whose value is None are dropped. ``level``, ``ts`` and ``logger`` are
filled in automatically.

Threshold and format come from ``GATEHUNT_LOG_LEVEL`` (debug|info|warn|error)
and ``GATEHUNT_LOG_JSON`` at import time; ``configure()`` changes them later
(the CLI ``--log-level`` flag, tests).
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
_TRUTHY = ("1", "true", "yes", "on")

_settings = {
    "threshold": LEVELS.get(os.getenv("GATEHUNT_LOG_LEVEL", "info").lower(), LEVELS["info"]),
    "json": os.getenv("GATEHUNT_LOG_JSON", "0").lower() in _TRUTHY,
}


def configure(level: str | None = None, json_mode: bool | None = None) -> None:
    """Override the threshold and/or output format for every logger."""
    if level is not None:
        if level.lower() not in LEVELS:
            raise ValueError(f"unknown log level: {level!r}")
        _settings["threshold"] = LEVELS[level.lower()]
    if json_mode is not None:
        _settings["json"] = bool(json_mode)


def _scalar(value) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    return str(value).replace(" ", "_")


def format_record(level: str, fields: dict) -> str:
    rec = {k: v for k, v in fields.items() if v is not None}
    ts = int(time.time())
    if _settings["json"]:
        return json.dumps({"level": level, "ts": ts, **rec}, separators=(",", ":"), default=str)
    return " ".join([f"level={level}", f"ts={ts}"] + [f"{k}={_scalar(v)}" for k, v in rec.items()])


class EventLogger:
    def __init__(self, name: str):
        self.name = name

    def _write(self, level: str, fields: dict):
        if LEVELS[level] < _settings["threshold"]:
            return
        fields.setdefault("logger", self.name)
        stream = sys.stderr if level == "error" else sys.stdout
        print(format_record(level, fields), file=stream)

    def debug(self, **fields):
        self._write("debug", fields)

    def info(self, **fields):
        self._write("info", fields)

    def warn(self, **fields):
        self._write("warn", fields)

    def error(self, **fields):
        self._write("error", fields)


_loggers: dict[str, EventLogger] = {}


def get_logger(name: str) -> EventLogger:
    return _loggers.setdefault(name, EventLogger(name))


log = get_logger("gatehunt")
