"""Typed lookups over the static tables in :mod:`cocina.constant`."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from cocina.constant import (
    BREAKFAST_FALLBACK_PRICE,
    BREAKFAST_PRICE_MAP,
    BREAKFAST_TYPES_PRICED_BY_BROTH,
    DRINK_DISPLAY_ALIASES,
    ORDER_TYPE_SYNONYMS,
    PAYMENT_METHOD_LABELS,
    SPECIAL_RICE_OPTIONS,
)
from cocina.models import Ref, name_of


def normalize_order_type(value: Any) -> str | None:
    """Map an order-type synonym to ``"table"`` or ``"takeaway"``; unknown values give ``None``."""
    raw = name_of(value).strip().lower()
    return ORDER_TYPE_SYNONYMS.get(raw)


def price_tier(order_type: str | None) -> str:
    """Price-table column for an order type: dine-in is ``mesa``, everything else ``llevar``."""
    return "mesa" if normalize_order_type(order_type) == "table" else "llevar"


def breakfast_base_price(type_name: str, broth_name: str, order_type: str | None) -> int:
    """Look up the breakfast base price; unknown types and broths fall back to the default row."""
    type_key = type_name.strip().lower()
    broth_key = broth_name.strip().lower()
    tier = price_tier(order_type)

    category = BREAKFAST_PRICE_MAP.get(type_key)
    if category is None:
        return BREAKFAST_FALLBACK_PRICE[tier]
    if type_key in BREAKFAST_TYPES_PRICED_BY_BROTH:
        row = category.get(broth_key) or category["default"]
    else:
        row = category["default"]
    return row[tier]


def is_special_rice(principle: Iterable[Ref]) -> bool:
    """Special rice dishes bundle the protein."""
    return any(ref.name in SPECIAL_RICE_OPTIONS for ref in principle)


def display_drink_name(drink: Ref | str | None) -> str:
    name = name_of(drink)
    return DRINK_DISPLAY_ALIASES.get(name, name)


def method_label(method_key: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method_key, PAYMENT_METHOD_LABELS["other"])
