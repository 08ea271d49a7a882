"""Editable static price tables, catalog markers and display labels."""

from __future__ import annotations

# Breakfast base prices in COP, keyed by lowercased type and broth name.
BREAKFAST_PRICE_MAP: dict[str, dict[str, dict[str, int]]] = {
    "solo huevos": {
        "default": {"mesa": 7000, "llevar": 8000},
    },
    "solo caldo": {
        "caldo de costilla": {"mesa": 7000, "llevar": 8000},
        "caldo de pescado": {"mesa": 7000, "llevar": 8000},
        "caldo de pata": {"mesa": 8000, "llevar": 9000},
        "caldo de pajarilla": {"mesa": 9000, "llevar": 10000},
        "default": {"mesa": 7000, "llevar": 8000},
    },
    "desayuno completo": {
        "caldo de costilla": {"mesa": 11000, "llevar": 12000},
        "caldo de pescado": {"mesa": 11000, "llevar": 12000},
        "caldo de pata": {"mesa": 12000, "llevar": 13000},
        "caldo de pajarilla": {"mesa": 13000, "llevar": 14000},
        "default": {"mesa": 11000, "llevar": 12000},
    },
    "moñona": {
        "default": {"mesa": 13000, "llevar": 14000},
    },
}

BREAKFAST_FALLBACK_PRICE: dict[str, int] = {"mesa": 7000, "llevar": 8000}

# Types whose price depends on the broth selection.
BREAKFAST_TYPES_PRICED_BY_BROTH: frozenset[str] = frozenset({"solo caldo", "desayuno completo"})

# Lunch base prices in COP.
MEAL_PRICE_MAP: dict[str, dict[str, int]] = {
    "table": {"normal": 12000, "bandeja": 11000},
    "takeaway": {"normal": 13000, "bandeja": 12000},
}

MOJARRA_BASE_PRICE = 16000

SPECIAL_RICE_OPTIONS: tuple[str, ...] = ("Arroz con pollo", "Arroz paisa", "Arroz tres carnes")

SIDE_NONE_MARKER = "Ninguno"
SIDE_CATCH_ALL_MARKERS: tuple[str, ...] = ("Ninguno", "Todo incluído", "Todo incluido")

NO_SOUP_MARKER = "Sin sopa"
SOLO_BANDEJA = "solo bandeja"

# Upstream catalog typos corrected for display only.
DRINK_DISPLAY_ALIASES: dict[str, str] = {
    "Juego de mango": "Jugo de mango",
}

ORDER_TYPE_SYNONYMS: dict[str, str] = {
    "table": "table",
    "mesa": "table",
    "para mesa": "table",
    "en mesa": "table",
    "takeaway": "takeaway",
    "para llevar": "takeaway",
    "llevar": "takeaway",
    "take away": "takeaway",
    "take-away": "takeaway",
    "delivery": "takeaway",
    "deliveri": "takeaway",
    "deli": "takeaway",
    "domicilio": "takeaway",
    "domicilios": "takeaway",
    "a domicilio": "takeaway",
}

PAYMENT_METHOD_KEYS: tuple[str, ...] = ("cash", "nequi", "daviplata", "other")

PAYMENT_METHOD_LABELS: dict[str, str] = {
    "cash": "Efectivo",
    "nequi": "Nequi",
    "daviplata": "Daviplata",
    "other": "Otro",
}

# Substring -> method key, checked in order.
PAYMENT_METHOD_MATCHERS: tuple[tuple[str, str], ...] = (
    ("efect", "cash"),
    ("cash", "cash"),
    ("nequi", "nequi"),
    ("davi", "daviplata"),
)

# Aliases under which a payment reference may carry its label.
PAYMENT_LABEL_ALIASES: tuple[str, ...] = ("name", "label", "title", "method", "type", "payment")

# Near-equality checklists used by the on-screen summary clustering.
MEAL_SIMILARITY_FIELDS: tuple[str, ...] = (
    "soup",
    "principle",
    "protein",
    "drink",
    "cutlery",
    "sides",
    "time",
    "address",
    "payment",
    "additions",
    "table",
)

BREAKFAST_SIMILARITY_FIELDS: tuple[str, ...] = (
    "type",
    "eggs",
    "broth",
    "rice_bread",
    "drink",
    "cutlery",
    "time",
    "address",
    "payment",
    "additions",
)

MEAL_ADDRESS_FIELDS: tuple[str, ...] = ("address", "neighborhood", "phone_number", "details")
BREAKFAST_ADDRESS_FIELDS: tuple[str, ...] = ("address", "phone_number", "details")

# Display fields, in receipt order.
MEAL_DISPLAY_FIELDS: tuple[str, ...] = (
    "soup",
    "principle_replacement",
    "principle",
    "protein",
    "drink",
    "cutlery",
    "sides",
    "additions",
    "notes",
)

BREAKFAST_DISPLAY_FIELDS: tuple[str, ...] = (
    "type",
    "broth",
    "eggs",
    "rice_bread",
    "protein",
    "drink",
    "additions",
    "cutlery",
    "notes",
)

ADDRESS_TYPE_LABELS: dict[str, str] = {
    "house": "Casa/Apto",
    "school": "Colegio/Oficina",
    "complex": "Conjunto",
    "shop": "Tienda/Local",
}
