"""Proposal document assembly.

A proposal is always laid out as::

    cover | title | one page per image, in input order | thank you

Pages are drawn strictly one after another; nothing is revisited once the
next page has started. Content images are decoded right before their page,
so a broken image stops the run with a single GenerationError and nothing
is returned. The logo and the backdrop image are optional: if they cannot be
decoded the pages are drawn as if they had never been given.
"""

import io
import logging
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from PyPDF2 import PdfReader, PdfWriter

import imaging
from branding import BRANDED, DEFAULT_BRANDING, BrandingConfig, PageStyle
from layout import (
    PAGE_H,
    PAGE_W,
    gradient_strips,
    progress_percent,
    proposal_filename,
    total_steps,
    view_label,
)
from writer import PageWriter

logger = logging.getLogger(__name__)

WHITE = "#FFFFFF"
BLACK = "#000000"


class GenerationError(Exception):
    """Assembly stopped; no document was produced."""

    def __init__(self, message, image_index=None):
        super().__init__(message)
        self.image_index = image_index


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_name: str
    room_name: str
    images: Tuple[Any, ...] = Field(min_length=1)
    branding: BrandingConfig = DEFAULT_BRANDING
    logo: Optional[Any] = None
    style: PageStyle = BRANDED
    raster_width: int = Field(default=imaging.DEFAULT_RASTER_WIDTH, gt=0)
    jpeg_quality: int = Field(default=imaging.DEFAULT_JPEG_QUALITY, ge=1, le=95)

    @field_validator("client_name", "room_name")
    @classmethod
    def _not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def filename(self):
        return proposal_filename(self.client_name, self.room_name)


# ---------------------------------------------------------------------------
# Page routines
# ---------------------------------------------------------------------------

def draw_background(w, branding, backdrop=None):
    if backdrop is not None:
        w.image(backdrop, 0, 0, PAGE_W, PAGE_H)
    else:
        w.fill_rect(0, 0, PAGE_W, PAGE_H, branding.background_color)


def draw_divider(w, y, half_width, color):
    w.line(PAGE_W / 2 - half_width, y, PAGE_W / 2 + half_width, y, color)


def draw_cover_page(w, branding, logo=None, backdrop=None):
    draw_background(w, branding, backdrop)
    cx = PAGE_W / 2
    y = 70

    if logo is not None:
        w.image(logo, cx - 11, y, 22, 22, transparent=True)
        y += 22 + 8

    draw_divider(w, y, 30, branding.accent_color)
    y += 17
    w.text(branding.company_name, cx, y, 36, WHITE, bold=True, align="center")
    y += 13
    w.text(branding.tagline, cx, y, 11, "#CCCCCC", align="center")
    y += 7
    draw_divider(w, y, 30, branding.accent_color)
    y += 20
    w.text(branding.website, cx, y, 9, "#999999", align="center")
    y += 7
    w.text(branding.instagram, cx, y, 9, "#999999", align="center")


def title_lines(client_name, room_name):
    return ("PROPOSAL 3D FOR", f"MR. {client_name.upper()}", room_name.upper())


def draw_title_page(w, client_name, room_name, branding, style=BRANDED, logo=None, backdrop=None):
    draw_background(w, branding, backdrop)
    label, client, room = title_lines(client_name, room_name)
    accent = branding.accent_color

    if style.title_anchor == "bottom-right":
        right = PAGE_W - 20
        w.text(label, right, PAGE_H - 62, 13, "#999999", align="right")
        w.text(client, right, PAGE_H - 42, 32, accent, bold=True, align="right")
        w.text(room, right, PAGE_H - 27, 18, accent, align="right")
        w.line(right - 50, PAGE_H - 20, right, PAGE_H - 20, accent)
        return

    cx = PAGE_W / 2
    y = 72
    if logo is not None:
        w.image(logo, cx - 9, y - 25, 18, 18, transparent=True)
    w.text(label, cx, y + 8, 13, "#999999", align="center")
    w.text(client, cx, y + 28, 32, accent, bold=True, align="center")
    w.text(room, cx, y + 43, 18, accent, align="center")
    draw_divider(w, y + 50, 25, accent)
    w.text(branding.company_name, cx, 185, 8, "#666666", align="center")


def draw_image_page(w, photo, index, branding, watermark=None):
    """Full-bleed photo, bottom gradient, view badge and watermark.

    photo is the already cropped and resampled JPEG; watermark is the faded
    logo PNG, or None to fall back to the company name in small text.
    """
    w.image(photo, 0, 0, PAGE_W, PAGE_H)

    for top, height, alpha in gradient_strips():
        with w.opacity(alpha):
            w.fill_rect(0, top, PAGE_W, height, BLACK)

    badge_w, badge_h = 32, 8
    badge_x, badge_y = 12, PAGE_H - 16
    w.rounded_rect(badge_x, badge_y, badge_w, badge_h, 1.5, branding.accent_color)
    w.text(view_label(index), badge_x + badge_w / 2, badge_y + 5.5, 7, WHITE, bold=True, align="center")

    if watermark is not None:
        w.image(watermark, PAGE_W - 12 - 10, PAGE_H - 10 - 10, 10, 10, transparent=True)
    else:
        with w.opacity(0.5):
            w.text(branding.company_name, PAGE_W - 12, PAGE_H - 10, 6, WHITE, align="right")


def draw_thank_you_page(w, branding, logo=None, backdrop=None):
    draw_background(w, branding, backdrop)
    cx = PAGE_W / 2
    y = 68

    if logo is not None:
        w.image(logo, cx - 10, y, 20, 20, transparent=True)
        y += 20 + 8

    draw_divider(w, y, 30, branding.accent_color)
    y += 20
    w.text("THANK YOU", cx, y, 36, WHITE, bold=True, align="center")
    y += 8
    draw_divider(w, y, 30, branding.accent_color)
    y += 20
    w.text(branding.website, cx, y, 10, "#CCCCCC", align="center")
    y += 8
    w.text(branding.instagram, cx, y, 10, "#999999", align="center")
    w.text(branding.company_name, cx, 185, 7, "#555555", align="center")


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def _load_backdrop(style, request):
    """Backdrop JPEG and the style actually drawn; an unreadable backdrop drops back to BRANDED."""
    if not style.uses_backdrop:
        return None, style
    img = imaging.load_optional(style.backdrop_image, what="backdrop image")
    if img is None:
        return None, BRANDED
    return imaging.to_jpeg(imaging.cover_fit(img, request.raster_width), request.jpeg_quality), style


def render_photo(source, request):
    """Decode one content image and return the JPEG embedded on its page."""
    img = imaging.decode_image(source)
    return imaging.to_jpeg(imaging.cover_fit(img, request.raster_width), request.jpeg_quality)


def assemble(request, on_progress=None):
    """Draw the whole proposal and return the PDF bytes.

    on_progress(percent) is called once after every finished page.
    """
    branding = request.branding
    steps = total_steps(len(request.images))
    done = 0

    def report():
        nonlocal done
        done += 1
        if on_progress is not None:
            on_progress(progress_percent(done, steps))

    logger.info("Assembling proposal %s (%d images)", request.filename, len(request.images))

    logo_img = imaging.load_optional(request.logo)
    logo = imaging.to_png(logo_img) if logo_img is not None else None
    watermark = imaging.to_png(imaging.faded(logo_img)) if logo_img is not None else None
    backdrop, style = _load_backdrop(request.style, request)

    w = PageWriter(
        title=f"Proposal 3D for {request.client_name} - {request.room_name}",
        author=branding.company_name,
        subject=request.room_name,
    )

    draw_cover_page(w, branding, logo, backdrop)
    report()

    w.new_page()
    draw_title_page(w, request.client_name, request.room_name, branding, style, logo, backdrop)
    report()

    for i, source in enumerate(request.images):
        try:
            photo = render_photo(source, request)
        except imaging.ImageDecodeError as e:
            logger.error("Image %d of %s could not be decoded: %s", i + 1, request.filename, e)
            raise GenerationError("Failed to generate PDF", image_index=i) from e
        w.new_page()
        draw_image_page(w, photo, i, branding, watermark)
        logger.debug("Drew %s", view_label(i))
        report()

    w.new_page()
    draw_thank_you_page(w, branding, logo, backdrop)
    report()

    pdf = w.finish()
    logger.info("Proposal %s ready: %d pages, %d bytes", request.filename, w.pages, len(pdf))
    return pdf


def protect(pdf_bytes, password):
    """Re-wrap a finished PDF with password encryption."""
    reader = PdfReader(io.BytesIO(pdf_bytes))
    writer = PdfWriter()
    for page in reader.pages:
        writer.add_page(page)
    writer.encrypt(password)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()
