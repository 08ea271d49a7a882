"""Grouping of identical and near-identical order lines."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Sequence
from typing import Any

from cocina.config import SIMILARITY_MAX_DIFFERENCES
from cocina.constant import (
    BREAKFAST_ADDRESS_FIELDS,
    BREAKFAST_DISPLAY_FIELDS,
    BREAKFAST_SIMILARITY_FIELDS,
    MEAL_ADDRESS_FIELDS,
    MEAL_DISPLAY_FIELDS,
    MEAL_SIMILARITY_FIELDS,
    NO_SOUP_MARKER,
    SIDE_CATCH_ALL_MARKERS,
    SIDE_NONE_MARKER,
    SOLO_BANDEJA,
)
from cocina.data import display_drink_name, is_special_rice
from cocina.models import (
    Address,
    BreakfastLine,
    Group,
    LineKind,
    MealLine,
    OrderLine,
    Ref,
    SimilarGroup,
    as_line,
    as_meal,
    line_kind,
    name_of,
)

logger = logging.getLogger(__name__)

# Display fields compared by set membership rather than equality.
ARRAY_FIELDS = frozenset({"principle", "sides"})

# Derived flag carried alongside the display fields; it drives protein/sides wording.
SPECIAL_RICE_FIELD = "special_rice"


def _sorted_names(refs: Iterable[Ref]) -> tuple[str, ...]:
    return tuple(sorted(ref.name for ref in refs))


def _meal_additions_key(meal: MealLine) -> tuple[tuple[str, str, int], ...]:
    return tuple(sorted((item.name, item.protein or "", item.quantity) for item in meal.additions))


def _breakfast_additions_key(breakfast: BreakfastLine) -> tuple[tuple[str, int], ...]:
    return tuple(sorted((item.name, item.quantity) for item in breakfast.additions))


def are_meals_identical(first: Any, second: Any) -> bool:
    """Lunches are identical when every selection matches, ignoring selection order."""
    if isinstance(first, BreakfastLine) or isinstance(second, BreakfastLine):
        return False
    a, b = as_meal(first), as_meal(second)
    return (
        name_of(a.soup) == name_of(b.soup)
        and name_of(a.soup_replacement) == name_of(b.soup_replacement)
        and name_of(a.principle_replacement) == name_of(b.principle_replacement)
        and name_of(a.protein) == name_of(b.protein)
        and name_of(a.drink) == name_of(b.drink)
        and a.cutlery == b.cutlery
        and a.notes == b.notes
        and _sorted_names(a.principle) == _sorted_names(b.principle)
        and _sorted_names(a.sides) == _sorted_names(b.sides)
        and _meal_additions_key(a) == _meal_additions_key(b)
    )


def are_breakfasts_identical(first: Any, second: Any) -> bool:
    """Breakfasts are identical on type, protein, drink, notes and additions."""
    if isinstance(first, MealLine) or isinstance(second, MealLine):
        return False
    a, b = as_line(first, "breakfast"), as_line(second, "breakfast")
    return (
        name_of(a.type) == name_of(b.type)
        and name_of(a.protein) == name_of(b.protein)
        and name_of(a.drink) == name_of(b.drink)
        and a.notes == b.notes
        and _breakfast_additions_key(a) == _breakfast_additions_key(b)
    )


def _normalize_lines(lines: Any, kind: LineKind | None) -> tuple[LineKind, list[OrderLine]]:
    if not isinstance(lines, (list, tuple)):
        raise TypeError(f"lines must be a list of order lines, got {type(lines).__name__}")
    if kind is None:
        kind = line_kind(lines[0]) if lines else "meal"
    return kind, [as_line(line, kind) for line in lines]


def group_identical_lines(lines: Sequence[Any], kind: LineKind | None = None) -> list[Group]:
    """Partition lines into groups of identical lines, in first-seen order."""
    kind, normalized = _normalize_lines(lines, kind)
    identical = are_breakfasts_identical if kind == "breakfast" else are_meals_identical

    buckets: list[tuple[OrderLine, list[int]]] = []
    for index, line in enumerate(normalized):
        for representative, indices in buckets:
            if identical(representative, line):
                indices.append(index)
                break
        else:
            buckets.append((line, [index]))

    return [Group(representative=rep, member_indices=tuple(indices)) for rep, indices in buckets]


def _address_key(address: Address | None, fields: tuple[str, ...]) -> tuple[str, ...]:
    if address is None:
        return tuple("" for _ in fields)
    return tuple(getattr(address, name) for name in fields)


def soup_display(meal: MealLine) -> str:
    """Receipt wording for the soup slot; empty when there is no soup."""
    soup = name_of(meal.soup)
    if soup.strip().lower() == SOLO_BANDEJA:
        return SOLO_BANDEJA
    if meal.soup_replacement is not None:
        label = meal.soup_replacement.replacement or meal.soup_replacement.name
        return f"{label} (por sopa)"
    if soup and soup != NO_SOUP_MARKER:
        return soup
    return ""


def _meal_signature_value(meal: MealLine, field: str) -> Hashable:
    if field == "soup":
        return soup_display(meal) or NO_SOUP_MARKER
    if field == "principle":
        return (_sorted_names(meal.principle), name_of(meal.principle_replacement))
    if field == "protein":
        return name_of(meal.protein) or "Sin proteína"
    if field == "drink":
        return name_of(meal.drink) or "Sin bebida"
    if field == "cutlery":
        return bool(meal.cutlery)
    if field == "sides":
        return _sorted_names(meal.sides)
    if field == "time":
        return name_of(meal.time) or "No especificada"
    if field == "address":
        return _address_key(meal.address, MEAL_ADDRESS_FIELDS)
    if field == "payment":
        return name_of(meal.payment_method) or "No especificado"
    if field == "additions":
        return tuple(
            sorted((item.name, item.protein or "", item.replacement or "", item.quantity) for item in meal.additions)
        )
    if field == "table":
        return meal.table_number or "No especificada"
    raise KeyError(field)


def _breakfast_signature_value(breakfast: BreakfastLine, field: str) -> Hashable:
    if field in ("type", "eggs", "broth", "rice_bread", "drink"):
        return name_of(getattr(breakfast, field))
    if field == "cutlery":
        return bool(breakfast.cutlery)
    if field == "time":
        return name_of(breakfast.time) or "No especificada"
    if field == "address":
        return _address_key(breakfast.address, BREAKFAST_ADDRESS_FIELDS)
    if field == "payment":
        return name_of(breakfast.payment_method) or "No especificado"
    if field == "additions":
        return _breakfast_additions_key(breakfast)
    raise KeyError(field)


def similarity_signature(line: OrderLine, kind: LineKind) -> tuple[Hashable, ...]:
    """Values of the near-equality checklist for one line."""
    if kind == "breakfast":
        return tuple(_breakfast_signature_value(line, field) for field in BREAKFAST_SIMILARITY_FIELDS)
    return tuple(_meal_signature_value(line, field) for field in MEAL_SIMILARITY_FIELDS)


def group_similar_lines(
    lines: Sequence[Any],
    kind: LineKind | None = None,
    max_differences: int = SIMILARITY_MAX_DIFFERENCES,
) -> list[SimilarGroup]:
    """
    Greedy first-fit clustering for on-screen summaries.

    Lines are visited in input order. Each joins the first existing group whose
    first member differs from it in at most ``max_differences`` checklist
    fields, otherwise it starts a new group. There is no backtracking, so the
    result depends on input order.
    """
    kind, normalized = _normalize_lines(lines, kind)
    checklist = BREAKFAST_SIMILARITY_FIELDS if kind == "breakfast" else MEAL_SIMILARITY_FIELDS
    identical = are_breakfasts_identical if kind == "breakfast" else are_meals_identical

    clusters: list[tuple[list[int], list[tuple[Hashable, ...]]]] = []
    for index, line in enumerate(normalized):
        signature = similarity_signature(line, kind)
        for indices, signatures in clusters:
            reference = signatures[0]
            differences = sum(1 for mine, theirs in zip(signature, reference) if mine != theirs)
            if differences <= max_differences:
                indices.append(index)
                signatures.append(signature)
                break
        else:
            clusters.append(([index], [signature]))

    groups: list[SimilarGroup] = []
    for indices, signatures in clusters:
        members = [normalized[i] for i in indices]
        payments: list[str] = []
        for member in members:
            label = name_of(member.payment_method)
            if label and label not in payments:
                payments.append(label)

        common = frozenset(
            field
            for position, field in enumerate(checklist)
            if all(signature[position] == signatures[0][position] for signature in signatures)
        )

        # Sub-group members share a checklist signature and are exactly identical, notes included.
        sub_buckets: list[tuple[tuple[Hashable, ...], list[int]]] = []
        for index, signature in zip(indices, signatures):
            for bucket_signature, sub_indices in sub_buckets:
                if bucket_signature == signature and identical(normalized[sub_indices[0]], normalized[index]):
                    sub_indices.append(index)
                    break
            else:
                sub_buckets.append((signature, [index]))
        identical_groups = tuple(
            Group(representative=normalized[sub_indices[0]], member_indices=tuple(sub_indices))
            for _, sub_indices in sub_buckets
        )

        groups.append(
            SimilarGroup(
                lines=tuple(members),
                indices=tuple(indices),
                payments=tuple(payments),
                common_fields=common,
                identical_groups=identical_groups,
            )
        )

    logger.debug("Clustered %d lines into %d similar groups", len(normalized), len(groups))
    return groups


def _principle_names(meal: MealLine) -> tuple[str, ...]:
    return tuple(ref.name for ref in meal.principle if "remplazo" not in ref.name.lower())


def display_values(line: OrderLine) -> dict[str, Hashable]:
    """Comparable display value of every receipt field of a line."""
    if isinstance(line, BreakfastLine):
        values: dict[str, Hashable] = {
            field: name_of(getattr(line, field)) for field in ("type", "broth", "eggs", "rice_bread", "protein")
        }
        values["drink"] = display_drink_name(line.drink)
        values["additions"] = _breakfast_additions_key(line)
        values["cutlery"] = line.cutlery is True
        values["notes"] = line.notes
        return values

    return {
        SPECIAL_RICE_FIELD: is_special_rice(line.principle),
        "soup": soup_display(line),
        "principle_replacement": name_of(line.principle_replacement),
        "principle": _principle_names(line),
        "protein": name_of(line.protein),
        "drink": display_drink_name(line.drink),
        "cutlery": bool(line.cutlery),
        "sides": tuple(ref.name for ref in line.sides),
        "additions": tuple(
            sorted((item.name, item.protein or item.replacement or "", item.quantity) for item in line.additions)
        ),
        "notes": line.notes,
    }


def display_fields(kind: LineKind) -> tuple[str, ...]:
    return BREAKFAST_DISPLAY_FIELDS if kind == "breakfast" else MEAL_DISPLAY_FIELDS


def common_fields(lines: Sequence[Any], kind: LineKind | None = None) -> dict[str, Hashable]:
    """
    Fields whose value is shared by every line.

    Scalar fields are common when all values are equal. ``principle`` and
    ``sides`` always appear, reduced to the names present in every line, in
    the first line's order.
    """
    kind, normalized = _normalize_lines(lines, kind)
    if not normalized:
        return {}

    per_line = [display_values(line) for line in normalized]
    first = per_line[0]
    common: dict[str, Hashable] = {}
    for field in first:
        values = [values_of_line[field] for values_of_line in per_line]
        if field in ARRAY_FIELDS:
            shared = set(values[0]).intersection(*values[1:])
            common[field] = tuple(dict.fromkeys(name for name in values[0] if name in shared))
        elif all(value == values[0] for value in values):
            common[field] = values[0]
    return common


def differing_fields(line: Any, common: dict[str, Hashable], kind: LineKind | None = None) -> list[str]:
    """Display fields where ``line`` deviates from a common set, in receipt order."""
    normalized = as_line(line, kind)
    values = display_values(normalized)
    differing: list[str] = []
    for field in display_fields(line_kind(normalized)):
        if field in ARRAY_FIELDS:
            if set(values[field]) != set(common.get(field, ())):
                differing.append(field)
        elif field not in common or common[field] != values[field]:
            differing.append(field)
    return differing


def get_excluded_sides(line: Any, catalog_sides: Iterable[Any]) -> list[str]:
    """
    Sides the customer implicitly left out.

    Only meaningful when the customer picked specific sides: an empty selection
    or the "Ninguno" marker excludes nothing.
    """
    meal = as_meal(line)
    selected = [ref.name for ref in meal.sides if ref.name]
    if not selected or SIDE_NONE_MARKER in selected:
        return []
    catalog = [name_of(option) for option in catalog_sides]
    return [name for name in catalog if name and name not in SIDE_CATCH_ALL_MARKERS and name not in selected]
