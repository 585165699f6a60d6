"""Utility helpers used across backend modules."""

from __future__ import annotations

import re

_LEADING_FLOAT = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")
_LEADING_INT = re.compile(r"^\s*[-+]?\d+")


def parse_weight(value) -> float:
    """Return ``value`` as a float, or ``0.0`` when blank or unparseable.

    Text is parsed from its leading number so ``"80kg"`` yields ``80.0``.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    if not match:
        return 0.0
    return float(match.group(0))


def parse_reps(value) -> int:
    """Return ``value`` as an int, or ``0`` when blank or unparseable."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return int(match.group(0))


def format_duration(seconds: int) -> str:
    """Return ``seconds`` as ``MM:SS`` or ``H:MM:SS`` once past an hour."""

    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
