"""Price calculators for lunch and breakfast lines."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cocina.constant import MEAL_PRICE_MAP, MOJARRA_BASE_PRICE, SOLO_BANDEJA
from cocina.data import breakfast_base_price, is_special_rice, normalize_order_type
from cocina.models import Addition, BreakfastLine, MealLine, as_breakfast, as_meal, name_of
from cocina.money import parse_money_lenient
from cocina.orders import Order, is_breakfast_order, order_lines

logger = logging.getLogger(__name__)


def additions_total(additions: Iterable[Addition]) -> int:
    return sum(item.price * item.quantity for item in additions)


def meal_order_type(meal: MealLine) -> str:
    """
    Resolve ``table`` or ``takeaway`` for a meal.

    Unrecognized values fall back to a heuristic: an address without a table
    number is a client order (takeaway), anything else is dine-in.
    """
    normalized = normalize_order_type(meal.order_type)
    if normalized is not None:
        return normalized
    if meal.address is not None and not meal.table_number:
        return "takeaway"
    return "table"


def is_solo_bandeja(meal: MealLine) -> bool:
    """Tray-only lunches (no soup) have their own, cheaper price row."""
    if name_of(meal.soup).strip().lower() == SOLO_BANDEJA:
        return True
    if meal.soup_replacement is None:
        return False
    repl_name = meal.soup_replacement.name.strip().lower()
    replacement = (meal.soup_replacement.replacement or "").strip().lower()
    return ("remplazo" in repl_name or "reemplazo" in repl_name) and replacement == SOLO_BANDEJA


def calculate_meal_price(line: MealLine | Mapping[str, Any] | None) -> int:
    """Price one lunch; special rice bundles the protein so it never changes the price."""
    if line is None:
        return 0
    meal = as_meal(line)
    extras = additions_total(meal.additions)

    protein = name_of(meal.protein).strip().lower()
    if "mojarra" in protein and not is_special_rice(meal.principle):
        return MOJARRA_BASE_PRICE + extras

    kind = "bandeja" if is_solo_bandeja(meal) else "normal"
    base = MEAL_PRICE_MAP[meal_order_type(meal)][kind]
    return base + extras


def calculate_meal_total(lines: Iterable[MealLine | Mapping[str, Any]]) -> int:
    return sum(calculate_meal_price(line) for line in lines)


def meal_payment_breakdown(lines: Iterable[MealLine | Mapping[str, Any]]) -> dict[str, int]:
    """Sum lunch prices per payment label."""
    breakdown: dict[str, int] = {}
    for line in lines:
        meal = as_meal(line)
        label = name_of(meal.payment_method) or "No especificado"
        breakdown[label] = breakdown.get(label, 0) + calculate_meal_price(meal)
    return breakdown


def calculate_breakfast_price(
    line: BreakfastLine | Mapping[str, Any] | None,
    party_size_hint: int | None = None,
) -> int:
    """
    Price one breakfast from the type/broth table plus additions.

    ``party_size_hint`` is accepted for call compatibility and does not affect
    the price. A line without a type is priced at 0.
    """
    if line is None:
        return 0
    breakfast = as_breakfast(line)
    type_name = name_of(breakfast.type)
    if not type_name:
        logger.debug("Breakfast without type priced at 0")
        return 0

    order_type = breakfast.order_type or "takeaway"
    base = breakfast_base_price(type_name, name_of(breakfast.broth), order_type)
    total = base + additions_total(breakfast.additions)
    logger.debug(
        "Breakfast price type=%s broth=%s order_type=%s base=%d total=%d",
        type_name,
        name_of(breakfast.broth),
        order_type,
        base,
        total,
    )
    return total


def calculate_total_breakfast_price(
    lines: Iterable[BreakfastLine | Mapping[str, Any]] | None,
    party_size_hint: int | None = None,
) -> int:
    if lines is None:
        return 0
    return sum(calculate_breakfast_price(line, party_size_hint) for line in lines)


def infer_breakfast_order_type(lines: Iterable[BreakfastLine]) -> str:
    """Any delivery address on the order means takeaway pricing for every line."""
    if any(line.address is not None and line.address.is_deliverable for line in lines):
        return "takeaway"
    return "table"


def with_order_type(lines: Iterable[BreakfastLine], order_type: str) -> tuple[BreakfastLine, ...]:
    return tuple(dataclasses.replace(line, order_type=order_type) for line in lines)


def calculate_correct_breakfast_total(order: Order) -> int:
    """
    What a breakfast order is actually worth.

    The stored per-line order type is unreliable, so it is replaced by the
    type inferred from the order's addresses. Non-breakfast orders return
    their stored total.
    """
    if not is_breakfast_order(order):
        return parse_money_lenient(order.get("total"))
    _, lines = order_lines(order)
    if not lines:
        return parse_money_lenient(order.get("total"))

    order_type = infer_breakfast_order_type(lines)
    return calculate_total_breakfast_price(with_order_type(lines, order_type))
