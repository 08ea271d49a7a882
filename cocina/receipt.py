"""Renderer-agnostic receipt composition."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any

from cocina.config import BUSINESS_FOOTER, BUSINESS_NAME
from cocina.constant import ADDRESS_TYPE_LABELS
from cocina.grouping import (
    ARRAY_FIELDS,
    SPECIAL_RICE_FIELD,
    common_fields,
    differing_fields,
    display_fields,
    display_values,
    get_excluded_sides,
    group_identical_lines,
)
from cocina.models import (
    Block,
    BreakfastLine,
    Group,
    LineKind,
    MealLine,
    OrderLine,
    SimilarGroup,
    as_line,
    line_kind,
)
from cocina.money import format_cop
from cocina.orders import Order, order_lines
from cocina.payments import authoritative_total, extract_order_payments, payment_lines_mismatch, summarize_payments
from cocina.pricing import (
    calculate_breakfast_price,
    calculate_meal_price,
    infer_breakfast_order_type,
)

Pricer = Callable[[Any], int]

_NOUNS: dict[str, tuple[str, str]] = {
    "meal": ("Almuerzo", "Almuerzos"),
    "breakfast": ("Desayuno", "Desayunos"),
}


def _noun(kind: LineKind, count: int) -> str:
    singular, plural = _NOUNS[kind]
    return singular if count == 1 else plural


def _yes_no(value: Hashable) -> str:
    return "Sí" if value else "No"


def _field(text: str, level: int = 0) -> Block:
    return Block(kind="field", text=text, level=level)


def _meal_field_blocks(
    field: str,
    values: dict[str, Hashable],
    excluded_sides: Sequence[str],
    level: int,
    full: bool,
) -> list[Block]:
    value = values.get(field)
    special_rice = bool(values.get(SPECIAL_RICE_FIELD))

    if field in ("soup", "drink"):
        return [_field(value, level)] if value else []
    if field == "principle_replacement":
        return [_field(f"{value} (por principio)", level)] if value else []
    if field == "principle":
        if not value:
            return []
        mixed = " (mixto)" if len(value) > 1 else ""
        return [_field(f"{', '.join(value)}{mixed}", level)]
    if field == "protein":
        if special_rice:
            return [_field("Ya incluida en el arroz", level)]
        return [_field(value, level)] if value else []
    if field == "cutlery":
        return [_field(f"Cubiertos: {_yes_no(value)}", level)]
    if field == "sides":
        if special_rice:
            return [_field("Acompañamientos: Ya incluidos", level)]
        if not value:
            return [_field("Acompañamientos: Ninguno", level)] if full else []
        blocks = [_field(f"Acompañamientos: {', '.join(value)}", level)]
        if excluded_sides:
            blocks.append(_field(f"No Incluir: {', '.join(excluded_sides)}", level))
        return blocks
    if field == "additions":
        if not value:
            return []
        blocks = [_field("Adiciones:", level)]
        for name, detail, quantity in value:
            suffix = f" ({detail})" if detail else ""
            blocks.append(_field(f"- {name}{suffix} ({quantity})", level + 1))
        return blocks
    if field == "notes":
        return [_field(f"Notas: {value or 'Ninguna'}", level)]
    return []


_BREAKFAST_PREFIXES: dict[str, str] = {
    "broth": "Caldo: ",
    "eggs": "Huevos: ",
    "rice_bread": "Arroz/Pan: ",
}


def _breakfast_field_blocks(field: str, values: dict[str, Hashable], level: int) -> list[Block]:
    value = values.get(field)
    if field in ("type", "protein", "drink", "broth", "eggs", "rice_bread"):
        return [_field(f"{_BREAKFAST_PREFIXES.get(field, '')}{value}", level)] if value else []
    if field == "additions":
        if not value:
            return []
        blocks = [_field("Adiciones:", level)]
        blocks.extend(_field(f"- {name} ({quantity})", level + 1) for name, quantity in value)
        return blocks
    if field == "cutlery":
        return [_field(f"Cubiertos: {_yes_no(value)}", level)]
    if field == "notes":
        return [_field(f"Notas: {value or 'Ninguna'}", level)]
    return []


class _FieldRenderer:
    """Turns display values into field blocks for one line kind."""

    def __init__(self, kind: LineKind, catalog_sides: Sequence[Any]) -> None:
        self.kind = kind
        self.catalog_sides = list(catalog_sides)

    def blocks(
        self,
        fields: Iterable[str],
        values: dict[str, Hashable],
        excluded_sides: Sequence[str] = (),
        level: int = 0,
        full: bool = True,
    ) -> list[Block]:
        out: list[Block] = []
        for field in fields:
            if self.kind == "breakfast":
                out.extend(_breakfast_field_blocks(field, values, level))
            else:
                out.extend(_meal_field_blocks(field, values, excluded_sides, level, full))
        return out

    def excluded(self, line: OrderLine) -> list[str]:
        if isinstance(line, MealLine) and self.catalog_sides:
            return get_excluded_sides(line, self.catalog_sides)
        return []

    def full_line(self, line: OrderLine, level: int = 0) -> list[Block]:
        return self.blocks(display_fields(self.kind), display_values(line), self.excluded(line), level)

    def common(self, lines: Sequence[OrderLine]) -> tuple[dict[str, Hashable], list[Block]]:
        common = common_fields(list(lines), self.kind)
        shown: list[str] = []
        for field in display_fields(self.kind):
            if field in ARRAY_FIELDS:
                if common.get(field):
                    shown.append(field)
            elif field in common:
                shown.append(field)
        all_sides_equal = all(
            display_values(line).get("sides") == display_values(lines[0]).get("sides") for line in lines
        )
        excluded = self.excluded(lines[0]) if all_sides_equal else []
        return common, self.blocks(shown, common, excluded, full=False)

    def differences(self, line: OrderLine, common: dict[str, Hashable], level: int = 1) -> list[Block]:
        values = display_values(line)
        fields = differing_fields(line, common, self.kind)
        return self.blocks(fields, values, self.excluded(line), level, full=True)


def _unit_pricer(
    lines: Sequence[OrderLine],
    kind: LineKind,
    meal_pricer: Pricer,
    breakfast_pricer: Pricer,
) -> Callable[[OrderLine], int]:
    if kind == "breakfast":
        order_type = infer_breakfast_order_type(line for line in lines if isinstance(line, BreakfastLine))

        def price(line: OrderLine) -> int:
            return breakfast_pricer(dataclasses.replace(line, order_type=order_type))

        return price
    return meal_pricer


def _with_payment(text: str, payment_label: str) -> str:
    return f"{text} ({payment_label})" if payment_label else text


def _indices_text(indices: Iterable[int]) -> str:
    return ", ".join(str(index + 1) for index in indices)


def _group_subtotal(group: Group, lines: Sequence[OrderLine], price: Callable[[OrderLine], int]) -> int:
    return sum(price(lines[index]) for index in group.member_indices)


def _identical_layout(
    lines: Sequence[OrderLine],
    groups: Sequence[Group],
    kind: LineKind,
    renderer: _FieldRenderer,
    price: Callable[[OrderLine], int],
    payment_label: str,
) -> list[Block]:
    if len(groups) == 1:
        group = groups[0]
        count = group.count
        label = f"{count} {_noun(kind, count)} iguales" if count > 1 else f"1 {_noun(kind, 1)}"
        header = _with_payment(f"{label} - {format_cop(_group_subtotal(group, lines, price))}", payment_label)
        return [Block(kind="header", text=header), *renderer.full_line(group.representative)]

    total = sum(_group_subtotal(group, lines, price) for group in groups)
    header = _with_payment(f"{len(lines)} {_noun(kind, len(lines))} - {format_cop(total)}", payment_label)
    blocks = [Block(kind="header", text=header)]

    representatives = [group.representative for group in groups]
    common, common_blocks = renderer.common(representatives)
    blocks.extend(common_blocks)
    blocks.append(Block(kind="header", text="Diferencias:"))
    for group in groups:
        subtotal = format_cop(_group_subtotal(group, lines, price))
        label = f"* {group.count} {_noun(kind, group.count)} ({_indices_text(group.member_indices)})"
        blocks.append(Block(kind="header", text=f"{label} - {subtotal}"))
        blocks.extend(renderer.differences(group.representative, common))
    return blocks


def _similar_layout(
    groups: Sequence[SimilarGroup],
    kind: LineKind,
    renderer: _FieldRenderer,
    price: Callable[[OrderLine], int],
    payment_label: str,
) -> list[Block]:
    blocks: list[Block] = []
    for position, group in enumerate(groups):
        if position > 0:
            blocks.append(Block(kind="separator"))
        subtotal = sum(price(line) for line in group.lines)
        payments = " / ".join(group.payments) or payment_label
        same = " iguales" if len(group.identical_groups) == 1 and group.count > 1 else ""
        header = _with_payment(f"{group.count} {_noun(kind, group.count)}{same} - {format_cop(subtotal)}", payments)
        blocks.append(Block(kind="header", text=header))

        if len(group.identical_groups) == 1:
            blocks.extend(renderer.full_line(group.lines[0]))
            continue

        common, common_blocks = renderer.common(group.lines)
        blocks.extend(common_blocks)
        blocks.append(Block(kind="header", text="Diferencias:"))
        for sub in group.identical_groups:
            noun = _noun(kind, sub.count)
            blocks.append(Block(kind="header", text=f"* {sub.count} {noun} ({_indices_text(sub.member_indices)})"))
            blocks.extend(renderer.differences(sub.representative, common))
    return blocks


def compose_receipt_blocks(
    lines: Sequence[Any],
    groups: Sequence[Group] | Sequence[SimilarGroup] | None = None,
    *,
    kind: LineKind | None = None,
    payment_label: str = "",
    catalog_sides: Sequence[Any] = (),
    meal_pricer: Pricer = calculate_meal_price,
    breakfast_pricer: Pricer = calculate_breakfast_price,
) -> list[Block]:
    """
    Compose the line-item section of a receipt or message.

    With exact groups (the default) the output is the printed-receipt layout:
    a single group prints every field; several groups print the fields they
    share once, then what sets each group apart. With similar groups from
    :func:`cocina.grouping.group_similar_lines` the output is the summary
    layout, one block per cluster with per-sub-group differences.
    """
    if not isinstance(lines, (list, tuple)):
        raise TypeError(f"lines must be a list of order lines, got {type(lines).__name__}")
    if not lines:
        return []

    kind = kind or line_kind(lines[0])
    normalized = [as_line(line, kind) for line in lines]
    if not groups:
        groups = group_identical_lines(normalized, kind)

    renderer = _FieldRenderer(kind, catalog_sides)
    price = _unit_pricer(normalized, kind, meal_pricer, breakfast_pricer)
    if isinstance(groups[0], SimilarGroup):
        return _similar_layout(groups, kind, renderer, price, payment_label)
    return _identical_layout(normalized, groups, kind, renderer, price, payment_label)


def _address_blocks(lines: Sequence[OrderLine]) -> list[Block]:
    address = next((line.address for line in lines if line.address is not None), None)
    if address is None:
        return []
    blocks = [
        _field(f"Dirección: {address.address or 'Sin dirección'}"),
        _field(f"Barrio: {address.neighborhood or 'No especificado'}"),
        _field(f"Teléfono: {address.phone_number or 'No especificado'}"),
    ]
    if address.address_type:
        blocks.append(_field(f"Tipo de Lugar: {ADDRESS_TYPE_LABELS.get(address.address_type, 'No especificado')}"))
    if address.address_type == "school" and address.recipient_name:
        blocks.append(_field(f"Recibe: {address.recipient_name}"))
    elif address.address_type == "complex" and address.unit_details:
        blocks.append(_field(f"Unidad: {address.unit_details}"))
    elif address.address_type == "shop" and address.local_name:
        blocks.append(_field(f"Nombre del Local: {address.local_name}"))
    if address.details:
        blocks.append(_field(f"Detalles: {address.details}"))
    return blocks


def compose_order_receipt(
    order: Order,
    catalog_sides: Sequence[Any] = (),
    *,
    business_name: str = BUSINESS_NAME,
    printed_at: str | None = None,
) -> list[Block]:
    """Full receipt for one stored order: header, payment, delivery data and lines."""
    kind, lines = order_lines(order)
    rows = extract_order_payments(order)
    payment_text = summarize_payments(rows)

    blocks = [Block(kind="header", text=business_name)]
    if printed_at:
        blocks.append(_field(printed_at))
    blocks.append(Block(kind="separator"))
    blocks.append(_field(f"Tipo: {'Desayuno' if kind == 'breakfast' else 'Almuerzo'}"))
    blocks.append(_field(f"Pago: {payment_text}"))
    blocks.append(_field(f"Total: {format_cop(authoritative_total(order))}"))
    mismatch = payment_lines_mismatch(order)
    if mismatch:
        blocks.append(_field(f"Suma no coincide ({format_cop(mismatch)})"))

    address_blocks = _address_blocks(lines)
    if address_blocks:
        blocks.append(Block(kind="separator"))
        blocks.extend(address_blocks)

    if lines:
        blocks.append(Block(kind="separator"))
        blocks.extend(
            compose_receipt_blocks(list(lines), kind=kind, payment_label=payment_text, catalog_sides=catalog_sides)
        )

    blocks.append(Block(kind="separator"))
    blocks.append(Block(kind="header", text=BUSINESS_FOOTER))
    return blocks
