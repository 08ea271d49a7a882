"""Domain models and the raw-document ingestion boundary."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from cocina.constant import PAYMENT_METHOD_KEYS
from cocina.money import parse_money_lenient

LineKind = Literal["meal", "breakfast"]
BlockKind = Literal["header", "field", "separator"]

_BREAKFAST_ONLY_KEYS = ("type", "broth", "eggs", "riceBread")


def name_of(value: Any) -> str:
    """Return the display name of a bare string or a ``{name}`` reference."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Ref):
        return value.name
    if isinstance(value, Mapping):
        name = value.get("name")
        return name if isinstance(name, str) else ("" if name is None else str(name))
    return str(value)


@dataclass(frozen=True)
class Ref:
    """A catalog reference such as a soup, drink or payment method."""

    name: str
    replacement: str | None = None


@dataclass(frozen=True)
class Addition:
    """An extra item added to a line, priced per unit."""

    name: str
    quantity: int = 1
    price: int = 0
    protein: str | None = None
    replacement: str | None = None


@dataclass(frozen=True)
class Address:
    """Delivery address attached to a line."""

    address: str = ""
    phone_number: str = ""
    neighborhood: str = ""
    details: str = ""
    address_type: str = ""
    recipient_name: str = ""
    unit_details: str = ""
    local_name: str = ""

    @property
    def is_deliverable(self) -> bool:
        return bool(self.address or self.phone_number)


@dataclass(frozen=True)
class MealLine:
    """One lunch portion."""

    soup: Ref | None = None
    soup_replacement: Ref | None = None
    principle: tuple[Ref, ...] = ()
    principle_replacement: Ref | None = None
    protein: Ref | None = None
    drink: Ref | None = None
    sides: tuple[Ref, ...] = ()
    additions: tuple[Addition, ...] = ()
    cutlery: bool | None = None
    notes: str = ""
    time: Ref | None = None
    table_number: str = ""
    order_type: str | None = None
    payment_method: Ref | None = None
    address: Address | None = None


@dataclass(frozen=True)
class BreakfastLine:
    """One breakfast portion."""

    type: Ref | None = None
    broth: Ref | None = None
    eggs: Ref | None = None
    rice_bread: Ref | None = None
    drink: Ref | None = None
    protein: Ref | None = None
    additions: tuple[Addition, ...] = ()
    cutlery: bool | None = None
    notes: str = ""
    time: Ref | None = None
    table_number: str = ""
    order_type: str | None = None
    payment_method: Ref | None = None
    address: Address | None = None


OrderLine = Union[MealLine, BreakfastLine]


@dataclass(frozen=True)
class PaymentRow:
    """One payment-method share of an order total."""

    method_key: str
    amount: int
    raw_label: str


@dataclass(frozen=True)
class Group:
    """Structurally identical lines collapsed behind one representative."""

    representative: OrderLine
    member_indices: tuple[int, ...]

    @property
    def count(self) -> int:
        return len(self.member_indices)


@dataclass(frozen=True)
class SimilarGroup:
    """A greedy near-equality cluster used for compact summaries."""

    lines: tuple[OrderLine, ...]
    indices: tuple[int, ...]
    payments: tuple[str, ...]
    common_fields: frozenset[str]
    identical_groups: tuple[Group, ...]

    @property
    def count(self) -> int:
        return len(self.indices)


@dataclass(frozen=True)
class Block:
    """Renderer-agnostic receipt element."""

    kind: BlockKind
    text: str = ""
    level: int = 0


@dataclass
class MethodTotals:
    """Per-method payment sums."""

    cash: int = 0
    nequi: int = 0
    daviplata: int = 0
    other: int = 0
    total: int = 0

    def add(self, method_key: str, amount: int) -> None:
        if method_key not in PAYMENT_METHOD_KEYS:
            method_key = "other"
        setattr(self, method_key, getattr(self, method_key) + amount)
        self.total += amount


@dataclass
class SettlementTotals:
    """Register view of payments split by channel and settlement state."""

    cash_salon: int = 0
    cash_clients_settled: int = 0
    cash_clients_pending: int = 0
    nequi_total: int = 0
    nequi_pending: int = 0
    daviplata_total: int = 0
    daviplata_pending: int = 0
    other_total: int = 0
    other_pending: int = 0
    total_salon: int = 0
    total_delivery: int = 0
    total_settled: int = 0
    total_pending: int = 0

    @property
    def cash_caja(self) -> int:
        """Cash reconcilable at the register right now."""
        return self.cash_salon + self.cash_clients_settled


@dataclass
class CourierTotals:
    """Unsettled money held by one delivery courier."""

    lunch: MethodTotals = field(default_factory=MethodTotals)
    breakfast: MethodTotals = field(default_factory=MethodTotals)
    total: MethodTotals = field(default_factory=MethodTotals)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def ref_from(value: Any) -> Ref | None:
    """Normalize a bare string or ``{name}`` mapping; empty input becomes ``None``."""
    if value is None or isinstance(value, Ref):
        return value
    if isinstance(value, Mapping):
        name = name_of(value)
        replacement = value.get("replacement")
        if isinstance(replacement, Mapping):
            replacement = name_of(replacement)
        if not name and not replacement:
            return None
        return Ref(name=name, replacement=_text(replacement) or None)
    name = name_of(value)
    return Ref(name=name) if name else None


def refs_from(value: Any) -> tuple[Ref, ...]:
    """Normalize a list of references; a single object becomes a list of one."""
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        value = [value]
    refs = (ref_from(item) for item in value)
    return tuple(ref for ref in refs if ref is not None)


def addition_from(value: Any) -> Addition | None:
    if isinstance(value, Addition):
        return value
    if not isinstance(value, Mapping):
        name = name_of(value)
        return Addition(name=name) if name else None
    quantity = parse_money_lenient(value.get("quantity")) or 1
    return Addition(
        name=name_of(value),
        quantity=max(1, quantity),
        price=parse_money_lenient(value.get("price")),
        protein=_text(name_of(value.get("protein"))) or None,
        replacement=_text(name_of(value.get("replacement"))) or None,
    )


def additions_from(value: Any) -> tuple[Addition, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    additions = (addition_from(item) for item in value)
    return tuple(item for item in additions if item is not None)


def address_from(value: Any) -> Address | None:
    if value is None or isinstance(value, Address):
        return value
    if isinstance(value, str):
        return Address(address=value) if value else None
    if not isinstance(value, Mapping):
        return None
    address = Address(
        address=_text(value.get("address")),
        phone_number=_text(value.get("phoneNumber")),
        neighborhood=_text(value.get("neighborhood")),
        details=_text(value.get("details")),
        address_type=_text(value.get("addressType")),
        recipient_name=_text(value.get("recipientName")),
        unit_details=_text(value.get("unitDetails")),
        local_name=_text(value.get("localName")),
    )
    return address if address != Address() else None


def _cutlery_from(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return name_of(value) == "Sí"
    if isinstance(value, str):
        return value.strip().lower() in ("true", "sí", "si")
    return bool(value)


def _order_type_from(value: Any) -> str | None:
    if isinstance(value, Mapping):
        value = value.get("name") or value.get("value")
    return _text(value) or None


def _payment_from(raw: Mapping[str, Any], first: str, second: str) -> Ref | None:
    return ref_from(raw.get(first)) or ref_from(raw.get(second))


def meal_from_doc(raw: Mapping[str, Any]) -> MealLine:
    """Build a :class:`MealLine` from a stored meal document."""
    return MealLine(
        soup=ref_from(raw.get("soup")),
        soup_replacement=ref_from(raw.get("soupReplacement")),
        principle=refs_from(raw.get("principle")),
        principle_replacement=ref_from(raw.get("principleReplacement")),
        protein=ref_from(raw.get("protein")),
        drink=ref_from(raw.get("drink")),
        sides=refs_from(raw.get("sides")),
        additions=additions_from(raw.get("additions")),
        cutlery=_cutlery_from(raw.get("cutlery")),
        notes=_text(raw.get("notes")),
        time=ref_from(raw.get("time")),
        table_number=_text(raw.get("tableNumber")),
        order_type=_order_type_from(raw.get("orderType")),
        payment_method=_payment_from(raw, "payment", "paymentMethod"),
        address=address_from(raw.get("address")),
    )


def breakfast_from_doc(raw: Mapping[str, Any]) -> BreakfastLine:
    """Build a :class:`BreakfastLine` from a stored breakfast document."""
    return BreakfastLine(
        type=ref_from(raw.get("type")),
        broth=ref_from(raw.get("broth")),
        eggs=ref_from(raw.get("eggs")),
        rice_bread=ref_from(raw.get("riceBread")),
        drink=ref_from(raw.get("drink")),
        protein=ref_from(raw.get("protein")),
        additions=additions_from(raw.get("additions")),
        cutlery=_cutlery_from(raw.get("cutlery")),
        notes=_text(raw.get("notes")),
        time=ref_from(raw.get("time")),
        table_number=_text(raw.get("tableNumber")),
        order_type=_order_type_from(raw.get("orderType")),
        payment_method=_payment_from(raw, "paymentMethod", "payment"),
        address=address_from(raw.get("address")),
    )


def as_meal(line: MealLine | Mapping[str, Any] | None) -> MealLine:
    if isinstance(line, MealLine):
        return line
    return meal_from_doc(line or {})


def as_breakfast(line: BreakfastLine | Mapping[str, Any] | None) -> BreakfastLine:
    if isinstance(line, BreakfastLine):
        return line
    return breakfast_from_doc(line or {})


def line_kind(line: Any) -> LineKind:
    """Guess whether a line is a meal or a breakfast."""
    if isinstance(line, BreakfastLine):
        return "breakfast"
    if isinstance(line, Mapping) and any(line.get(key) for key in _BREAKFAST_ONLY_KEYS):
        return "breakfast"
    return "meal"


def as_line(line: Any, kind: LineKind | None = None) -> OrderLine:
    if isinstance(line, (MealLine, BreakfastLine)):
        return line
    kind = kind or line_kind(line)
    return as_breakfast(line) if kind == "breakfast" else as_meal(line)
