import pytest

from cocina.models import MealLine, Ref
from cocina.pricing import (
    calculate_breakfast_price,
    calculate_correct_breakfast_total,
    calculate_meal_price,
    calculate_meal_total,
    calculate_total_breakfast_price,
    meal_order_type,
    meal_payment_breakdown,
)

COMPLETO_PATA = {"type": {"name": "Desayuno completo"}, "broth": {"name": "Caldo de pata"}}


@pytest.mark.parametrize(
    "order_type, expected",
    [("table", 12000), ("takeaway", 13000), ("mesa", 12000), ("para llevar", 13000)],
)
def test_breakfast_price_table(order_type, expected):
    assert calculate_breakfast_price({**COMPLETO_PATA, "orderType": order_type}) == expected


@pytest.mark.parametrize(
    "line, expected",
    [
        ({"type": {"name": "Solo huevos"}, "orderType": "table"}, 7000),
        ({"type": {"name": "Solo caldo"}, "broth": {"name": "Caldo de pajarilla"}, "orderType": "table"}, 9000),
        ({"type": {"name": "Moñona"}, "orderType": "takeaway"}, 14000),
        ({"type": {"name": "Desayuno completo"}, "broth": {"name": "Caldo raro"}, "orderType": "table"}, 11000),
        ({"type": {"name": "Desayuno ejecutivo"}, "orderType": "table"}, 7000),
        ({"type": {"name": "Desayuno ejecutivo"}}, 8000),
    ],
)
def test_breakfast_price_fallbacks(line, expected):
    assert calculate_breakfast_price(line) == expected


def test_breakfast_without_type_is_free():
    assert calculate_breakfast_price({"broth": {"name": "Caldo de pata"}}) == 0
    assert calculate_breakfast_price(None) == 0


def test_breakfast_additions_are_added():
    line = {**COMPLETO_PATA, "orderType": "table", "additions": [{"name": "Huevo", "price": 1500, "quantity": 2}]}
    assert calculate_breakfast_price(line) == 15000


def test_breakfast_price_is_idempotent_and_ignores_party_size():
    line = {**COMPLETO_PATA, "orderType": "takeaway"}
    first = calculate_breakfast_price(line)
    assert calculate_breakfast_price(line) == first
    assert calculate_breakfast_price(line, party_size_hint=5) == first


@pytest.mark.parametrize("count", [0, 1, 3])
def test_total_breakfast_price_is_additive(count):
    lines = [{**COMPLETO_PATA, "orderType": "table"}, {"type": {"name": "Solo huevos"}}, {"type": "Moñona"}][:count]
    assert calculate_total_breakfast_price(lines) == sum(calculate_breakfast_price(line) for line in lines)
    assert calculate_total_breakfast_price(None) == 0


def test_meal_prices_by_order_type():
    assert calculate_meal_price({"orderType": "table"}) == 12000
    assert calculate_meal_price({"orderType": "takeaway"}) == 13000
    assert calculate_meal_price({"soup": {"name": "Solo bandeja"}, "orderType": "table"}) == 11000
    assert calculate_meal_price({"soup": {"name": "Solo bandeja"}, "orderType": "takeaway"}) == 12000
    assert calculate_meal_price(None) == 0


def test_meal_soup_replacement_to_solo_bandeja():
    line = {"soupReplacement": {"name": "Remplazo por Sopa", "replacement": "Solo bandeja"}, "orderType": "table"}
    assert calculate_meal_price(line) == 11000


def test_meal_order_type_heuristic():
    assert meal_order_type(MealLine(order_type="algo raro")) == "table"
    assert meal_order_type(MealLine(address=None, table_number="")) == "table"
    assert meal_order_type(MealLine(order_type="domicilio")) == "takeaway"


def test_meal_with_address_and_no_table_is_takeaway():
    assert calculate_meal_price({"address": {"address": "Calle 5"}}) == 13000


def test_mojarra_has_its_own_price():
    assert calculate_meal_price({"protein": {"name": "Mojarra frita"}, "orderType": "table"}) == 16000
    line = {"protein": {"name": "Mojarra"}, "additions": [{"name": "Patacón", "price": 1000}]}
    assert calculate_meal_price(line) == 17000


def test_special_rice_waives_protein():
    base = {"principle": [{"name": "Arroz con pollo"}], "orderType": "table"}
    for protein in ("Mojarra", "Res", "Pollo"):
        assert calculate_meal_price({**base, "protein": {"name": protein}}) == calculate_meal_price(base)


def test_meal_additions_and_totals():
    lines = [
        {"orderType": "table", "additions": [{"name": "Chicharrón", "price": 3000, "quantity": 2}]},
        MealLine(order_type="takeaway", protein=Ref(name="Res")),
    ]
    assert calculate_meal_price(lines[0]) == 18000
    assert calculate_meal_total(lines) == 31000


def test_meal_payment_breakdown():
    lines = [
        {"orderType": "table", "paymentMethod": {"name": "Efectivo"}},
        {"orderType": "table", "paymentMethod": {"name": "Nequi"}},
        {"orderType": "table", "paymentMethod": {"name": "Efectivo"}},
        {"orderType": "table"},
    ]
    assert meal_payment_breakdown(lines) == {"Efectivo": 24000, "Nequi": 12000, "No especificado": 12000}


def test_correct_breakfast_total_overrides_stored_order_type():
    table_order = {"type": "breakfast", "breakfasts": [{**COMPLETO_PATA, "orderType": "takeaway"}], "total": 99}
    assert calculate_correct_breakfast_total(table_order) == 12000

    delivered = {
        "breakfasts": [
            {**COMPLETO_PATA, "orderType": "table"},
            {**COMPLETO_PATA, "orderType": "table", "address": {"address": "Calle 8 # 1-2"}},
        ]
    }
    assert calculate_correct_breakfast_total(delivered) == 26000


def test_correct_breakfast_total_for_non_breakfasts_is_stored_total():
    assert calculate_correct_breakfast_total({"meals": [{}], "total": "13000"}) == 13000
    assert calculate_correct_breakfast_total({"type": "breakfast", "breakfasts": [], "total": 7000}) == 7000
