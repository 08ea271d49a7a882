"""Payment-method normalization and per-order payment extraction."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from cocina.constant import PAYMENT_LABEL_ALIASES, PAYMENT_METHOD_MATCHERS
from cocina.data import method_label
from cocina.models import PaymentRow
from cocina.money import format_cop, parse_money_lenient
from cocina.orders import Order, is_breakfast_order
from cocina.pricing import calculate_correct_breakfast_total

logger = logging.getLogger(__name__)

BreakfastTotal = Callable[[Order], int]


def _raw_method_text(method_like: Any) -> str:
    if isinstance(method_like, str):
        return method_like
    if isinstance(method_like, Mapping):
        for alias in PAYMENT_LABEL_ALIASES:
            value = method_like.get(alias)
            if value:
                return value if isinstance(value, str) else str(value)
    return ""


def normalize_payment_method_key(method_like: Any) -> str:
    """Bucket a free-form payment method into cash, nequi, daviplata or other."""
    text = _raw_method_text(method_like).strip().lower()
    for needle, key in PAYMENT_METHOD_MATCHERS:
        if needle in text:
            return key
    return "other"


def pick_method_label(method_like: Any) -> str:
    return _raw_method_text(method_like) or "Otro"


def authoritative_total(order: Order, breakfast_total: BreakfastTotal = calculate_correct_breakfast_total) -> int:
    """Recomputed total for breakfasts, stored total for everything else."""
    if is_breakfast_order(order):
        return parse_money_lenient(breakfast_total(order))
    return parse_money_lenient(order.get("total"))


def split_lines(order: Order) -> list[Mapping[str, Any]] | None:
    """Explicit split lines; ``paymentLines`` wins over the older ``payments``."""
    for key in ("paymentLines", "payments"):
        lines = order.get(key)
        if isinstance(lines, list) and lines:
            return [line if isinstance(line, Mapping) else {} for line in lines]
    return None


def _legacy_method(order: Order) -> Any:
    meals = order.get("meals")
    breakfasts = order.get("breakfasts")
    first_meal = meals[0] if isinstance(meals, list) and meals and isinstance(meals[0], Mapping) else {}
    first_breakfast = (
        breakfasts[0] if isinstance(breakfasts, list) and breakfasts and isinstance(breakfasts[0], Mapping) else {}
    )
    candidates = (
        first_meal.get("paymentMethod") or first_meal.get("payment"),
        first_breakfast.get("payment") or first_breakfast.get("paymentMethod"),
        order.get("paymentMethod") or order.get("payment"),
    )
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def extract_order_payments(
    order: Order,
    breakfast_total: BreakfastTotal = calculate_correct_breakfast_total,
) -> list[PaymentRow]:
    """
    Canonical payment rows for one order.

    An explicit split is used as recorded. For breakfasts whose split no
    longer adds up to the recomputed total, every line is rescaled by the same
    ratio and floored, so the rows can fall short of the total by up to one
    peso per row. Without a split, a legacy single method takes the whole
    total; failing that, the total goes to "other".
    """
    total = authoritative_total(order, breakfast_total)

    lines = split_lines(order)
    if lines:
        amounts = [parse_money_lenient(line.get("amount")) for line in lines]
        original_sum = sum(amounts)
        if is_breakfast_order(order) and original_sum > 0 and original_sum != total:
            logger.warning(
                "Rescaling breakfast split for order %s: lines sum %d, total %d",
                order.get("id", "?"),
                original_sum,
                total,
            )
            amounts = [amount * total // original_sum for amount in amounts]
        return [
            PaymentRow(
                method_key=normalize_payment_method_key(line.get("method")),
                amount=amount,
                raw_label=pick_method_label(line.get("method")),
            )
            for line, amount in zip(lines, amounts)
        ]

    legacy = _legacy_method(order)
    if legacy is not None:
        return [
            PaymentRow(
                method_key=normalize_payment_method_key(legacy),
                amount=total,
                raw_label=pick_method_label(legacy),
            )
        ]

    return [PaymentRow(method_key="other", amount=total, raw_label="Otro")]


def summarize_payments(rows: Iterable[PaymentRow]) -> str:
    """Compact label such as ``Efectivo $6.000 + Nequi $6.000``."""
    buckets: dict[str, int] = {}
    for row in rows:
        buckets[row.method_key] = buckets.get(row.method_key, 0) + row.amount

    parts: list[str] = []
    for key in ("cash", "nequi", "daviplata"):
        if buckets.get(key):
            parts.append(f"{method_label(key)} {format_cop(buckets[key])}")
    if not parts and buckets.get("other"):
        parts.append(f"{method_label('other')} {format_cop(buckets['other'])}")
    return " + ".join(parts) or "Sin pago"


def default_payments_for_order(order: Order) -> list[dict[str, Any]]:
    """Starting rows for the split editor; 100% cash when nothing is known."""
    rows = extract_order_payments(order)
    if rows:
        return [{"method": row.method_key, "amount": row.amount} for row in rows]
    return [{"method": "cash", "amount": parse_money_lenient(order.get("total"))}]


def payment_lines_mismatch(order: Order, breakfast_total: BreakfastTotal = calculate_correct_breakfast_total) -> int:
    """
    Authoritative total minus the recorded split sum.

    Non-zero values are informational only; zero when there is no split.
    """
    lines = split_lines(order)
    if not lines:
        return 0
    recorded = sum(parse_money_lenient(line.get("amount")) for line in lines)
    return authoritative_total(order, breakfast_total) - recorded
