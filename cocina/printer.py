"""ESC/POS and raster printing of receipt blocks."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from cocina.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_HOST,
    PRINTER_INDENT_STEP_PX,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_PORT,
    PRINTER_TIMEOUT_SECONDS,
    PRINTER_WIDTH_PX,
    RECEIPT_LINE_WIDTH,
)
from cocina.models import Block

logger = logging.getLogger(__name__)

_SECTION_SEPARATOR_HEIGHT_PX = 14
_SECTION_SEPARATOR_THICKNESS_PX = 3
# Extra vertical headroom per text line to avoid descender clipping.
_LINE_EXTRA_PX = 8
_FONT_OVERRIDE_ENV = "COCINA_PRINTER_FONT_PATH"
_HOST_OVERRIDE_ENV = "COCINA_PRINTER_HOST"
_PORT_OVERRIDE_ENV = "COCINA_PRINTER_PORT"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


def resolve_printer_font_path() -> str:
    """
    Resolve a raster font path.

    Resolution order:
    1. COCINA_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def resolve_printer_address(host: str | None = None, port: int | None = None) -> tuple[str, int]:
    """Explicit arguments win over COCINA_PRINTER_HOST/PORT, which win over config."""
    resolved_host = host or os.environ.get(_HOST_OVERRIDE_ENV, "").strip() or PRINTER_HOST
    if port is None:
        raw_port = os.environ.get(_PORT_OVERRIDE_ENV, "").strip()
        try:
            port = int(raw_port) if raw_port else PRINTER_PORT
        except ValueError as exc:
            raise ValueError(f"{_PORT_OVERRIDE_ENV} must be an integer, got {raw_port!r}") from exc
    if not (0 < port < 65536):
        raise ValueError(f"printer port out of range: {port}")
    return resolved_host, port


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Network  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


def _write_blocks(printer: object, blocks: Iterable[Block], width: int) -> None:
    for block in blocks:
        if block.kind == "separator":
            printer.set(align="left", bold=False, normal_textsize=True)
            printer.text("-" * width + "\n")
        elif block.kind == "header":
            printer.set(align="left", bold=True, normal_textsize=True)
            printer.text(f"{'  ' * block.level}{block.text}\n")
        else:
            printer.set(align="left", bold=False, normal_textsize=True)
            printer.text(f"{'  ' * block.level}{block.text}\n")
    printer.text("\n\n")
    printer.cut()


def render_escpos(blocks: Sequence[Block], width: int = RECEIPT_LINE_WIDTH) -> bytes:
    """Render blocks into an ESC/POS byte payload, ending with a cut."""
    try:
        from escpos.printer import Dummy
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Dummy()
    _write_blocks(printer, blocks, width)
    return printer.output


def _render_section_separator() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SECTION_SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = max(0, (_SECTION_SEPARATOR_HEIGHT_PX - _SECTION_SEPARATOR_THICKNESS_PX) // 2)
    bottom = min(_SECTION_SEPARATOR_HEIGHT_PX - 1, top + _SECTION_SEPARATOR_THICKNESS_PX - 1)
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, bottom), fill=0)
    return img


def _render_line(text: str, font: object, indent_px: int, bold: bool) -> object:
    from PIL import Image, ImageDraw

    scratch = Image.new("1", (1, 1), color=1)
    bbox = ImageDraw.Draw(scratch).textbbox((0, 0), text or " ", font=font)
    text_height = bbox[3] - bbox[1]
    canvas_height = max(12, text_height + _LINE_EXTRA_PX)

    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    x = PRINTER_LEFT_INDENT_PX + indent_px
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((x, y), text, font=font, fill=0)
    if bold:
        draw.text((x + 1, y), text, font=font, fill=0)
    return img


def render_raster(blocks: Sequence[Block], font: object | None = None) -> object:
    """Render blocks onto one 1-bit canvas for raster-only printers."""
    from PIL import Image, ImageFont

    if font is None:
        font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)

    strips = []
    for block in blocks:
        if block.kind == "separator":
            strips.append(_render_section_separator())
        else:
            indent_px = PRINTER_INDENT_STEP_PX * block.level
            strips.append(_render_line(block.text, font, indent_px, bold=block.kind == "header"))

    height = max(1, sum(strip.height for strip in strips))
    canvas = Image.new("1", (PRINTER_WIDTH_PX, height), color=1)
    y = 0
    for strip in strips:
        canvas.paste(strip, (0, y))
        y += strip.height
    return canvas


def print_receipt(
    blocks: Sequence[Block],
    host: str | None = None,
    port: int | None = None,
    raster: bool = False,
) -> None:
    """Send blocks to a network thermal printer and cut the ticket."""
    if not blocks:
        return
    resolved_host, resolved_port = resolve_printer_address(host, port)

    try:
        from escpos.printer import Network
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Network(resolved_host, port=resolved_port, timeout=PRINTER_TIMEOUT_SECONDS)
    try:
        if raster:
            printer.image(render_raster(blocks))
            printer.cut()
        else:
            _write_blocks(printer, blocks, RECEIPT_LINE_WIDTH)
    except Exception as exc:
        raise RuntimeError(f"Printing to {resolved_host}:{resolved_port} failed: {exc}") from exc
    finally:
        printer.close()
    logger.info("Printed %d receipt blocks to %s:%d", len(blocks), resolved_host, resolved_port)
