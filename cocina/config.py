"""Runtime configuration defaults for persistence, receipts and printing."""

from __future__ import annotations

DB_PATH = "data/orders.db"

BUSINESS_NAME = "Cocina Casera"
BUSINESS_FOOTER = "Gracias por pedir en Cocina Casera"

# Courier assigned to delivery orders that were never given one.
DEFAULT_DELIVERY_PERSON = "JUAN"

# Greedy summary clustering: a line joins a group when it differs in at most this many fields.
SIMILARITY_MAX_DIFFERENCES = 3

# 58mm thermal paper, Font A.
RECEIPT_LINE_WIDTH = 32

# Network ESC/POS printer; overridable via COCINA_PRINTER_HOST / COCINA_PRINTER_PORT.
PRINTER_HOST = "192.168.1.100"
PRINTER_PORT = 9100
PRINTER_TIMEOUT_SECONDS = 10

# Raster rendering; font overridable via COCINA_PRINTER_FONT_PATH.
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 24
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_INDENT_STEP_PX = 16
