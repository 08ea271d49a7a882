"""Classifiers over raw order documents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cocina.config import DEFAULT_DELIVERY_PERSON
from cocina.models import LineKind, OrderLine, as_breakfast, as_meal, name_of

Order = Mapping[str, Any]


def _norm(value: Any) -> str:
    return name_of(value).strip().lower()


def _first_line(order: Order) -> Mapping[str, Any]:
    for key in ("meals", "breakfasts"):
        lines = order.get(key)
        if isinstance(lines, list) and lines and isinstance(lines[0], Mapping):
            return lines[0]
    return {}


def is_breakfast_order(order: Order) -> bool:
    return order.get("type") == "breakfast" or isinstance(order.get("breakfasts"), list)


def order_lines(order: Order) -> tuple[LineKind, tuple[OrderLine, ...]]:
    """Return the order's line kind and its normalized lines."""
    if is_breakfast_order(order):
        raw = order.get("breakfasts")
        lines = raw if isinstance(raw, list) else []
        return "breakfast", tuple(as_breakfast(line) for line in lines if isinstance(line, Mapping))
    raw = order.get("meals")
    lines = raw if isinstance(raw, list) else []
    return "meal", tuple(as_meal(line) for line in lines if isinstance(line, Mapping))


def _collection(order: Order) -> str:
    return _norm(order.get("__collection"))


def is_delivery_order(order: Order) -> bool:
    if "delivery" in _collection(order):
        return True
    tag = _norm(order.get("orderType") or _first_line(order).get("orderType"))
    return "delivery" in tag or "domicil" in tag


def is_table_order(order: Order) -> bool:
    if "table" in _collection(order):
        return True
    return bool(_first_line(order).get("tableNumber"))


def is_salon_order(order: Order) -> bool:
    """
    Dine-in ("salon") means staff-handled: anything from a table collection,
    plus breakfasts a waiter registered as table or takeaway.
    """
    if "table" in _collection(order):
        return True
    if isinstance(order.get("breakfasts"), list):
        tag = _norm(order.get("orderType") or _first_line(order).get("orderType"))
        return any(marker in tag for marker in ("table", "takeaway", "llevar"))
    return False


def delivery_person_of(order: Order) -> str:
    person = name_of(order.get("deliveryPerson")).strip()
    return person or DEFAULT_DELIVERY_PERSON
