"""Plain-text, HTML and terminal renderers for receipt blocks."""

from __future__ import annotations

import html
from collections.abc import Iterable

from rich.text import Text

from cocina.config import RECEIPT_LINE_WIDTH
from cocina.models import Block

_INDENT = "  "


def header_style(text: str) -> str:
    """Return a consistent style for header rows."""
    if text.startswith("*"):
        return "bold #0b1f0f on #5fbf72"
    return "bold #ffffff on #b23a48"


def render_text(blocks: Iterable[Block], width: int = RECEIPT_LINE_WIDTH) -> str:
    """Render blocks as monospaced text for a fixed paper width."""
    lines: list[str] = []
    for block in blocks:
        if block.kind == "separator":
            lines.append("-" * width)
        else:
            lines.append(f"{_INDENT * block.level}{block.text}")
    return "\n".join(lines) + "\n" if lines else ""


def render_html(blocks: Iterable[Block]) -> str:
    """Render blocks as an HTML fragment for the browser print path."""
    parts: list[str] = []
    for block in blocks:
        if block.kind == "separator":
            parts.append("<div class='line'></div>")
            continue
        text = html.escape(block.text)
        style = f" style='margin-left:{10 * block.level}px;'" if block.level else ""
        if block.kind == "header":
            parts.append(f"<div{style}><b>{text}</b></div>")
        else:
            parts.append(f"<div{style}>{text}</div>")
    return "\n".join(parts)


def render_rich(blocks: Iterable[Block], width: int = RECEIPT_LINE_WIDTH) -> Text:
    """Render blocks as a styled terminal preview."""
    text = Text()
    for idx, block in enumerate(blocks):
        if idx > 0:
            text.append("\n")
        if block.kind == "separator":
            text.append("─" * width, style="dim")
        elif block.kind == "header":
            text.append(_INDENT * block.level)
            text.append(block.text, style=header_style(block.text))
        else:
            text.append(f"{_INDENT * block.level}{block.text}", style="white")
    return text
