from cocina.models import (
    Address,
    BreakfastLine,
    MealLine,
    MethodTotals,
    Ref,
    SettlementTotals,
    address_from,
    as_line,
    breakfast_from_doc,
    line_kind,
    meal_from_doc,
    name_of,
    ref_from,
    refs_from,
)


def test_name_of_accepts_strings_mappings_and_refs():
    assert name_of("Limonada") == "Limonada"
    assert name_of({"name": "Limonada"}) == "Limonada"
    assert name_of(Ref(name="Limonada")) == "Limonada"
    assert name_of(None) == ""
    assert name_of({"name": None}) == ""


def test_ref_from_normalizes_shapes():
    assert ref_from("Pollo") == Ref(name="Pollo")
    assert ref_from({"name": "Pollo"}) == Ref(name="Pollo")
    assert ref_from("") is None
    assert ref_from({}) is None
    assert ref_from({"name": "Remplazo", "replacement": {"name": "Solo bandeja"}}) == Ref(
        name="Remplazo", replacement="Solo bandeja"
    )


def test_refs_from_wraps_single_object():
    assert refs_from({"name": "Arroz"}) == (Ref(name="Arroz"),)
    assert refs_from([{"name": "Arroz"}, None, "Papa"]) == (Ref(name="Arroz"), Ref(name="Papa"))
    assert refs_from(None) == ()


def test_address_from_empty_mapping_is_none():
    assert address_from({}) is None
    assert address_from({"address": "", "phoneNumber": ""}) is None
    address = address_from({"address": "Calle 1 # 2-3", "phoneNumber": "3001234567"})
    assert address == Address(address="Calle 1 # 2-3", phone_number="3001234567")
    assert address.is_deliverable


def test_meal_from_doc_reads_camel_case_fields():
    meal = meal_from_doc(
        {
            "soup": {"name": "Sopa de pasta"},
            "principle": {"name": "Arroz"},
            "protein": "Pollo",
            "sides": [{"name": "Papa"}],
            "additions": [{"name": "Huevo", "price": "2000", "quantity": 2}],
            "cutlery": {"name": "Sí"},
            "tableNumber": 4,
            "paymentMethod": {"name": "Nequi"},
        }
    )
    assert meal.principle == (Ref(name="Arroz"),)
    assert meal.protein == Ref(name="Pollo")
    assert meal.additions[0].price == 2000
    assert meal.additions[0].quantity == 2
    assert meal.cutlery is True
    assert meal.table_number == "4"
    assert meal.payment_method == Ref(name="Nequi")


def test_breakfast_payment_falls_back_to_payment_key():
    breakfast = breakfast_from_doc({"type": {"name": "Solo huevos"}, "payment": {"name": "Efectivo"}})
    assert breakfast.payment_method == Ref(name="Efectivo")


def test_line_kind_and_as_line():
    assert line_kind({"type": {"name": "Moñona"}}) == "breakfast"
    assert line_kind({"soup": "Sancocho"}) == "meal"
    assert isinstance(as_line({"broth": "Caldo de pata"}), BreakfastLine)
    meal = MealLine(protein=Ref(name="Res"))
    assert as_line(meal, "breakfast") is meal


def test_method_totals_buckets_unknown_keys_as_other():
    totals = MethodTotals()
    totals.add("cash", 1000)
    totals.add("bitcoin", 500)
    assert (totals.cash, totals.other, totals.total) == (1000, 500, 1500)


def test_cash_caja_combines_salon_and_settled_clients():
    totals = SettlementTotals(cash_salon=12000, cash_clients_settled=13000, cash_clients_pending=9000)
    assert totals.cash_caja == 25000


def test_payment_precedence_per_line_kind():
    both = {"payment": {"name": "Nequi"}, "paymentMethod": {"name": "Efectivo"}}
    assert meal_from_doc(both).payment_method == Ref(name="Nequi")
    assert breakfast_from_doc({"type": "Moñona", **both}).payment_method == Ref(name="Efectivo")
