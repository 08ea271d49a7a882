"""Cross-order payment aggregation and courier settlement."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from cocina.models import CourierTotals, MethodTotals, SettlementTotals, name_of
from cocina.orders import Order, delivery_person_of, is_breakfast_order, is_salon_order
from cocina.payments import BreakfastTotal, extract_order_payments, normalize_payment_method_key, split_lines
from cocina.pricing import calculate_correct_breakfast_total

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def sum_payments_by_method(
    orders: Iterable[Order],
    breakfast_total: BreakfastTotal = calculate_correct_breakfast_total,
) -> MethodTotals:
    """Flatten every order's payment rows into per-method sums."""
    totals = MethodTotals()
    for order in orders:
        for row in extract_order_payments(order, breakfast_total):
            totals.add(row.method_key, row.amount)
    return totals


def is_order_liquidated(order: Order) -> bool:
    """Whole-order markers meaning the courier already turned the money in."""
    settlement = order.get("settlement")
    if isinstance(settlement, dict) and name_of(settlement.get("status")).strip().lower() == "liquidated":
        return True
    if order.get("liquidated") is True or order.get("cashSettled") is True:
        return True
    return bool(order.get("settledAt"))


def is_payment_method_settled(order: Order, method_key: str) -> bool:
    """Whether the money collected through ``method_key`` has been turned in."""
    if order.get("settled") is True or is_order_liquidated(order):
        return True
    settled_by_method = order.get("paymentSettled")
    if isinstance(settled_by_method, dict):
        return settled_by_method.get(method_key) is True
    return False


def calc_method_totals_all(
    orders: Iterable[Order] = (),
    table_orders: Iterable[Order] = (),
    breakfast_orders: Iterable[Order] = (),
    breakfast_total: BreakfastTotal = calculate_correct_breakfast_total,
) -> SettlementTotals:
    """
    Register totals across every collection.

    Dine-in money is settled on receipt. Delivery money is pending until the
    order (or the specific method) carries a settlement marker.
    """
    acc = SettlementTotals()

    for collection in (orders, table_orders, breakfast_orders):
        for order in collection:
            salon = is_salon_order(order)
            for row in extract_order_payments(order, breakfast_total):
                amount = row.amount
                if amount <= 0:
                    continue

                if salon:
                    acc.total_salon += amount
                    acc.total_settled += amount
                    if row.method_key == "cash":
                        acc.cash_salon += amount
                    elif row.method_key == "nequi":
                        acc.nequi_total += amount
                    elif row.method_key == "daviplata":
                        acc.daviplata_total += amount
                    else:
                        acc.other_total += amount
                    continue

                acc.total_delivery += amount
                settled = is_payment_method_settled(order, row.method_key)
                if settled:
                    acc.total_settled += amount
                else:
                    acc.total_pending += amount

                if row.method_key == "cash":
                    if settled:
                        acc.cash_clients_settled += amount
                    else:
                        acc.cash_clients_pending += amount
                elif row.method_key == "nequi":
                    if settled:
                        acc.nequi_total += amount
                    else:
                        acc.nequi_pending += amount
                elif row.method_key == "daviplata":
                    if settled:
                        acc.daviplata_total += amount
                    else:
                        acc.daviplata_pending += amount
                elif settled:
                    acc.other_total += amount
                else:
                    acc.other_pending += amount

    return acc


def delivery_person_totals(
    delivery_orders: Iterable[Order],
    delivery_person: str,
    breakfast_total: BreakfastTotal = calculate_correct_breakfast_total,
) -> CourierTotals:
    """Money a courier still holds, split by lunch and breakfast."""
    totals = CourierTotals()
    for order in delivery_orders:
        if order.get("settled") is True or delivery_person_of(order) != delivery_person:
            continue
        bucket = totals.breakfast if is_breakfast_order(order) else totals.lunch
        for row in extract_order_payments(order, breakfast_total):
            if is_payment_method_settled(order, row.method_key):
                continue
            bucket.add(row.method_key, row.amount)
            totals.total.add(row.method_key, row.amount)
    return totals


def prepare_settlement_update(order: Order, methods_to_settle: Iterable[str]) -> dict[str, Any]:
    """
    Patch marking ``methods_to_settle`` as turned in.

    The order counts as settled once every split line's method is settled;
    ``settledAt`` is stamped only then.
    """
    current = order.get("paymentSettled")
    payment_settled: dict[str, bool] = dict(current) if isinstance(current, dict) else {}
    for method in methods_to_settle:
        payment_settled[normalize_payment_method_key(method)] = True

    lines = split_lines(order) or [{"method": row.raw_label} for row in extract_order_payments(order)]
    fully_settled = all(
        payment_settled.get(normalize_payment_method_key(line.get("method"))) is True for line in lines
    )

    patch: dict[str, Any] = {"settled": fully_settled, "paymentSettled": payment_settled}
    if fully_settled:
        patch["settledAt"] = _utc_now_iso()
    logger.info(
        "Settlement patch for order %s: methods=%s settled=%s",
        order.get("id", "?"),
        sorted(payment_settled),
        fully_settled,
    )
    return patch
