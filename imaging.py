"""Pillow side of proposal generation: decoding sources and preparing rasters."""

import io
import logging
import os

from PIL import Image, ImageOps

from layout import PAGE_RATIO, cover_crop_box, raster_size

logger = logging.getLogger(__name__)

DEFAULT_RASTER_WIDTH = 1920
DEFAULT_JPEG_QUALITY = 85
WATERMARK_OPACITY = 0.5

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "gif", "bmp", "tif", "tiff"}


class ImageDecodeError(Exception):
    """An image source could not be turned into pixels."""


def is_image_upload(filename, mimetype=None):
    """Accept uploads that declare an image MIME type or carry an image extension."""
    if mimetype and mimetype.startswith("image/"):
        return True
    return "." in (filename or "") and filename.rsplit(".", 1)[1].lower() in IMAGE_EXTENSIONS


def _open(source):
    if isinstance(source, (str, os.PathLike)):
        return Image.open(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return Image.open(io.BytesIO(bytes(source)))
    # werkzeug FileStorage exposes the payload as .stream
    stream = getattr(source, "stream", source)
    if not hasattr(stream, "read"):
        raise ImageDecodeError(f"unsupported image source: {type(source).__name__}")
    if hasattr(stream, "seek"):
        stream.seek(0)
    return Image.open(stream)


def decode_image(source):
    """Resolve an image source to a fully loaded, upright Pillow image."""
    img = None
    try:
        img = _open(source)
        img.load()
        upright = ImageOps.exif_transpose(img)
    except ImageDecodeError:
        raise
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        if img is not None:
            img.close()
        raise ImageDecodeError(f"cannot decode image: {e}") from e
    if upright is not img:
        img.close()
    img = upright
    if img.width <= 0 or img.height <= 0:
        raise ImageDecodeError("image has no pixels")
    return img


def cover_fit(img, width=DEFAULT_RASTER_WIDTH, ratio=PAGE_RATIO):
    """Centre-crop img to the page ratio and resample it to a fixed raster."""
    box = cover_crop_box(img.width, img.height, ratio)
    target = raster_size(width, ratio)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img.crop(box).resize(target, Image.LANCZOS)


def to_jpeg(img, quality=DEFAULT_JPEG_QUALITY):
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def to_png(img):
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def prepare_logo(img):
    return img.convert("RGBA")


def faded(img, opacity=WATERMARK_OPACITY):
    """Copy of an RGBA image with its alpha channel scaled by opacity."""
    img = img.convert("RGBA")
    alpha = img.getchannel("A").point(lambda a: int(a * opacity))
    out = img.copy()
    out.putalpha(alpha)
    return out


def load_optional(source, what="logo"):
    """Decode an optional image; failures degrade to None."""
    if source is None:
        return None
    try:
        return prepare_logo(decode_image(source))
    except ImageDecodeError as e:
        logger.warning("Ignoring %s: %s", what, e)
        return None
