import math
import re

# A4 landscape page (millimetres)
PAGE_W = 297
PAGE_H = 210
PAGE_RATIO = PAGE_W / PAGE_H

# Bottom gradient band on image pages
GRADIENT_STEPS = 40
GRADIENT_HEIGHT = 50
GRADIENT_MAX_ALPHA = 0.7
GRADIENT_OVERLAP = 0.5

# Pages drawn besides the image pages: cover, title, thank-you
FIXED_PAGES = 3

_NOT_ALNUM = re.compile(r"[^A-Za-z0-9]")


def round_half_up(value):
    """Round .5 away from zero for positive values, the way browsers round."""
    return int(math.floor(value + 0.5))


def cover_crop_box(src_w, src_h, ratio=PAGE_RATIO):
    """Largest centred box of the given aspect ratio inside a src_w x src_h image.

    Returns a Pillow crop box (left, top, right, bottom).
    """
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"invalid image size {src_w}x{src_h}")

    if src_w / src_h > ratio:
        # too wide: keep full height, trim the sides
        crop_w = min(src_w, max(1, round_half_up(src_h * ratio)))
        left = round_half_up((src_w - crop_w) / 2)
        return (left, 0, left + crop_w, src_h)

    # too tall: keep full width, trim top and bottom
    crop_h = min(src_h, max(1, round_half_up(src_w / ratio)))
    top = round_half_up((src_h - crop_h) / 2)
    return (0, top, src_w, top + crop_h)


def raster_size(width, ratio=PAGE_RATIO):
    """Pixel size an image page is resampled to before embedding."""
    return (width, round_half_up(width / ratio))


def gradient_strips(steps=GRADIENT_STEPS, band=GRADIENT_HEIGHT,
                    max_alpha=GRADIENT_MAX_ALPHA, page_h=PAGE_H):
    """(top, height, alpha) of each strip of the bottom gradient, top first."""
    strips = []
    for i in range(steps):
        alpha = (i / steps) * max_alpha
        top = page_h - band + (i * band) / steps
        strips.append((top, band / steps + GRADIENT_OVERLAP, alpha))
    return strips


def view_label(index):
    """Badge text for the image at a 0-based position."""
    return f"VIEW {index + 1:02d}"


def total_steps(image_count):
    return image_count + FIXED_PAGES


def progress_percent(completed, total):
    """Whole percent done; 100 is held back until the last step."""
    if completed >= total:
        return 100
    return min(round_half_up(completed / total * 100), 99)


def safe_name(text):
    return _NOT_ALNUM.sub("", text).upper()


def proposal_filename(client_name, room_name, ext="pdf"):
    """Download name for a proposal.

    Example: "Rahul Sharma", "Master Bedroom" -> "RAHULSHARMA_MASTERBEDROOM.pdf"
    """
    return f"{safe_name(client_name)}_{safe_name(room_name)}.{ext}"
