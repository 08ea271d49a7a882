"""Lenient money parsing and Colombian-peso formatting."""

from __future__ import annotations

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def parse_money_lenient(value: Any) -> int:
    """
    Coerce a stored amount to whole pesos, never raising.

    Mirrors ``floor(Number(x) || 0)``: missing, empty, NaN, infinite or
    unparseable input becomes 0. Unparseable non-empty input is logged.
    """
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return 0
        try:
            number = float(raw)
        except ValueError:
            logger.warning("Unparseable amount %r coerced to 0", value)
            return 0
    else:
        logger.warning("Unsupported amount type %s coerced to 0", type(value).__name__)
        return 0

    if math.isnan(number) or math.isinf(number):
        return 0
    return math.floor(number)


def format_cop(amount: int) -> str:
    """Format pesos as ``$12.000`` (dot thousands separator, no decimals)."""
    return "$" + f"{int(amount):,}".replace(",", ".")
