import pytest
from PIL import ImageFont

from cocina import printer
from cocina.config import PRINTER_WIDTH_PX
from cocina.models import Block
from cocina.rendering import header_style, render_html, render_rich, render_text

BLOCKS = [
    Block(kind="header", text="Cocina Casera"),
    Block(kind="separator"),
    Block(kind="field", text="Total: $12.000"),
    Block(kind="header", text="* 1 Almuerzo (3)"),
    Block(kind="field", text="Carne", level=1),
]


def test_render_text():
    assert render_text(BLOCKS, width=10) == (
        "Cocina Casera\n----------\nTotal: $12.000\n* 1 Almuerzo (3)\n  Carne\n"
    )
    assert render_text([]) == ""


def test_render_html_escapes_and_indents():
    html = render_html([Block(kind="header", text="Pollo & Papa <2>"), *BLOCKS[1:]])
    assert html.splitlines() == [
        "<div><b>Pollo &amp; Papa &lt;2&gt;</b></div>",
        "<div class='line'></div>",
        "<div>Total: $12.000</div>",
        "<div><b>* 1 Almuerzo (3)</b></div>",
        "<div style='margin-left:10px;'>Carne</div>",
    ]


def test_render_rich():
    text = render_rich(BLOCKS, width=4)
    assert text.plain == "Cocina Casera\n────\nTotal: $12.000\n* 1 Almuerzo (3)\n  Carne"
    assert header_style("* 1 Almuerzo") != header_style("Cocina Casera")


def test_render_escpos_contains_text():
    payload = printer.render_escpos(BLOCKS, width=8)
    assert isinstance(payload, bytes)
    assert b"Cocina Casera" in payload
    assert b"--------\n" in payload
    assert b"  Carne\n" in payload


def test_render_raster():
    image = printer.render_raster(BLOCKS, font=ImageFont.load_default())
    assert image.mode == "1"
    assert image.width == PRINTER_WIDTH_PX
    assert image.height > 14


def test_resolve_printer_address(monkeypatch):
    monkeypatch.delenv("COCINA_PRINTER_HOST", raising=False)
    monkeypatch.delenv("COCINA_PRINTER_PORT", raising=False)
    assert printer.resolve_printer_address() == ("192.168.1.100", 9100)

    monkeypatch.setenv("COCINA_PRINTER_HOST", "10.0.0.7")
    monkeypatch.setenv("COCINA_PRINTER_PORT", "9101")
    assert printer.resolve_printer_address() == ("10.0.0.7", 9101)
    assert printer.resolve_printer_address("printer.local", 9200) == ("printer.local", 9200)

    monkeypatch.setenv("COCINA_PRINTER_PORT", "abc")
    with pytest.raises(ValueError):
        printer.resolve_printer_address()
    with pytest.raises(ValueError):
        printer.resolve_printer_address(port=70000)


def test_resolve_printer_font_path_prefers_env(monkeypatch, tmp_path):
    font = tmp_path / "receipt.ttf"
    font.write_bytes(b"")
    monkeypatch.setenv("COCINA_PRINTER_FONT_PATH", str(font))
    assert printer.resolve_printer_font_path() == str(font)


def test_check_printer_dependencies_reports_missing_font(monkeypatch, tmp_path):
    broken = tmp_path / "broken.ttf"
    broken.write_bytes(b"not a font")
    monkeypatch.setattr(printer, "resolve_printer_font_path", lambda: str(broken))
    ready, message = printer.check_printer_dependencies()
    assert not ready
    assert message.startswith("Printer deps unavailable")


class FakeNetwork:
    instances = []

    def __init__(self, host, port=9100, timeout=60):
        self.host = host
        self.port = port
        self.calls = []
        self.closed = False
        FakeNetwork.instances.append(self)

    def set(self, **kwargs):
        self.calls.append(("set", kwargs))

    def text(self, txt):
        self.calls.append(("text", txt))

    def image(self, img):
        self.calls.append(("image", img.size))

    def cut(self):
        self.calls.append(("cut",))

    def close(self):
        self.closed = True


class BrokenNetwork(FakeNetwork):
    def text(self, txt):
        raise OSError("connection reset")


def test_print_receipt_sends_text_and_cuts(monkeypatch):
    monkeypatch.setattr("escpos.printer.Network", FakeNetwork)
    FakeNetwork.instances.clear()

    printer.print_receipt(BLOCKS, host="printer.local", port=9100)

    (device,) = FakeNetwork.instances
    assert device.host == "printer.local"
    assert ("text", "Cocina Casera\n") in device.calls
    assert ("text", "  Carne\n") in device.calls
    assert device.calls[-1] == ("cut",)
    assert device.closed


def test_print_receipt_raster(monkeypatch):
    render_raster = printer.render_raster
    monkeypatch.setattr("escpos.printer.Network", FakeNetwork)
    monkeypatch.setattr(printer, "render_raster", lambda blocks: render_raster(blocks, font=ImageFont.load_default()))
    FakeNetwork.instances.clear()

    printer.print_receipt(BLOCKS, host="printer.local", port=9100, raster=True)

    (device,) = FakeNetwork.instances
    assert device.calls[0][0] == "image"
    assert device.calls[0][1][0] == PRINTER_WIDTH_PX
    assert device.calls[-1] == ("cut",)
    assert device.closed


def test_print_receipt_wraps_device_errors(monkeypatch):
    monkeypatch.setattr("escpos.printer.Network", BrokenNetwork)
    FakeNetwork.instances.clear()

    with pytest.raises(RuntimeError, match="printer.local:9100"):
        printer.print_receipt(BLOCKS, host="printer.local", port=9100)
    assert FakeNetwork.instances[0].closed


def test_print_receipt_skips_empty_tickets(monkeypatch):
    monkeypatch.setattr("escpos.printer.Network", FakeNetwork)
    FakeNetwork.instances.clear()
    printer.print_receipt([])
    assert FakeNetwork.instances == []
