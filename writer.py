"""Millimetre, top-left-origin drawing surface over a reportlab canvas."""

import io
from contextlib import contextmanager

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from layout import PAGE_H, PAGE_W

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


class PageWriter:
    """Append-only page writer.

    Coordinates are millimetres measured from the top-left corner of an A4
    landscape page; text y values are baselines. The first page exists as
    soon as the writer is created, new_page() starts the next one.
    """

    def __init__(self, title=None, author=None, subject=None):
        self._buf = io.BytesIO()
        self._canvas = canvas.Canvas(self._buf, pagesize=landscape(A4))
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)
        if subject:
            self._canvas.setSubject(subject)
        self.pages = 1
        self.width = PAGE_W
        self.height = PAGE_H

    def _y(self, y):
        return (self.height - y) * mm

    def new_page(self):
        self._canvas.showPage()
        self.pages += 1

    def fill_rect(self, x, y, w, h, color):
        self._canvas.setFillColor(HexColor(color))
        self._canvas.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)

    def rounded_rect(self, x, y, w, h, radius, color):
        self._canvas.setFillColor(HexColor(color))
        self._canvas.roundRect(x * mm, self._y(y + h), w * mm, h * mm, radius * mm, stroke=0, fill=1)

    def line(self, x1, y1, x2, y2, color, width=0.8):
        self._canvas.setStrokeColor(HexColor(color))
        self._canvas.setLineWidth(width * mm)
        self._canvas.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def text(self, value, x, y, size, color, bold=False, align="left"):
        c = self._canvas
        c.setFont(FONT_BOLD if bold else FONT_REGULAR, size)
        c.setFillColor(HexColor(color))
        if align == "center":
            c.drawCentredString(x * mm, self._y(y), value)
        elif align == "right":
            c.drawRightString(x * mm, self._y(y), value)
        else:
            c.drawString(x * mm, self._y(y), value)

    def image(self, data, x, y, w, h, transparent=False):
        """Embed encoded image bytes. JPEG data is passed through untouched;
        transparent PNGs keep their alpha channel as a soft mask."""
        reader = ImageReader(io.BytesIO(data))
        mask = "auto" if transparent else None
        self._canvas.drawImage(reader, x * mm, self._y(y + h), w * mm, h * mm, mask=mask)

    @contextmanager
    def opacity(self, alpha):
        self._canvas.setFillAlpha(alpha)
        try:
            yield
        finally:
            self._canvas.setFillAlpha(1)

    def finish(self):
        """Close the last page and return the serialized PDF."""
        self._canvas.showPage()
        self._canvas.save()
        return self._buf.getvalue()
