from __future__ import annotations

import math
import re

from .constants import COLORS, ROBUX_TAX_KEEP_RATE

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_HEX_PREFIX_RE = re.compile(r"^[0-9a-fA-F]+")

_UNIT_MS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def parse_duration(text: str) -> int | None:
    """Convert ``5m``/``1h``/``7d`` style strings to milliseconds.

    Returns ``None`` when the string does not match. ``"0m"`` parses to 0;
    callers treat a falsy result as invalid.
    """
    match = _DURATION_RE.match((text or "").strip())
    if not match:
        return None
    return int(match.group(1)) * _UNIT_MS[match.group(2)]


def parse_hex_color(text: str | None, default: int = COLORS["default"]) -> int:
    """Read ``#RRGGBB`` (leading ``#`` optional). Falls back to ``default``."""
    cleaned = (text or "").strip().replace("#", "", 1)
    match = _HEX_PREFIX_RE.match(cleaned)
    if not match:
        return default
    value = int(match.group(0), 16)
    if value > 0xFFFFFF:
        return default
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def robux_before_tax(amount_after_tax: int) -> int:
    """How much to charge so the receiver nets ``amount_after_tax``."""
    return _round_half_up(amount_after_tax / ROBUX_TAX_KEEP_RATE)


def robux_after_tax(amount_before_tax: int) -> int:
    """How much the receiver nets when charging ``amount_before_tax``."""
    return _round_half_up(amount_before_tax * ROBUX_TAX_KEEP_RATE)
