from cocina.models import BreakfastLine, MealLine
from cocina.orders import (
    delivery_person_of,
    is_breakfast_order,
    is_delivery_order,
    is_salon_order,
    is_table_order,
    order_lines,
)


def test_is_breakfast_order():
    assert is_breakfast_order({"type": "breakfast"})
    assert is_breakfast_order({"breakfasts": []})
    assert not is_breakfast_order({"meals": [{}]})


def test_order_lines_normalizes_and_skips_garbage():
    kind, lines = order_lines({"meals": [{"protein": "Pollo"}, "basura", None]})
    assert kind == "meal"
    assert len(lines) == 1
    assert isinstance(lines[0], MealLine)

    kind, lines = order_lines({"type": "breakfast", "breakfasts": "no es lista"})
    assert (kind, lines) == ("breakfast", ())

    kind, lines = order_lines({"breakfasts": [{"type": {"name": "Moñona"}}]})
    assert isinstance(lines[0], BreakfastLine)


def test_is_delivery_order():
    assert is_delivery_order({"__collection": "deliveryOrders"})
    assert is_delivery_order({"orderType": "Domicilio"})
    assert is_delivery_order({"breakfasts": [{"orderType": {"name": "delivery"}}]})
    assert not is_delivery_order({"__collection": "tableOrders", "meals": [{"tableNumber": "2"}]})


def test_is_table_order():
    assert is_table_order({"__collection": "tableOrders"})
    assert is_table_order({"meals": [{"tableNumber": "5"}]})
    assert not is_table_order({"meals": [{"address": {"address": "Calle 1"}}]})


def test_is_salon_order():
    assert is_salon_order({"__collection": "tableOrders"})
    assert is_salon_order({"breakfasts": [{"orderType": "takeaway"}]})
    assert is_salon_order({"orderType": "table", "breakfasts": []})
    assert not is_salon_order({"breakfasts": [{"orderType": "delivery"}]})
    assert not is_salon_order({"__collection": "orders", "meals": [{"tableNumber": "5"}]})


def test_delivery_person_defaults():
    assert delivery_person_of({"deliveryPerson": " PEDRO "}) == "PEDRO"
    assert delivery_person_of({"deliveryPerson": ""}) == "JUAN"
    assert delivery_person_of({}) == "JUAN"
