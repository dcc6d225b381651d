"""Branding and page skins shared by every page of a proposal."""

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def normalize_color(value):
    """'#c63' -> '#CC6633'. Raises ValueError for anything but #RGB / #RRGGBB."""
    value = (value or "").strip()
    if not HEX_COLOR.match(value):
        raise ValueError(f"not a hex colour: {value!r}")
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.upper()


class BrandingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    company_name: str = "INTARA DESIGNS"
    tagline: str = "INTERIOR | ARCHITECTURAL | PLANNING"
    website: str = "www.intaradesigns.com"
    instagram: str = "@intara_designs"
    accent_color: str = "#C0623A"
    background_color: str = "#0E0E0E"

    @field_validator("accent_color", "background_color")
    @classmethod
    def _hex_color(cls, value):
        return normalize_color(value)


DEFAULT_BRANDING = BrandingConfig()


class PageStyle(BaseModel):
    """One skin of the proposal pages.

    "branded" fills the text pages with the branding background colour and
    centres everything. "backdrop" draws a fixed background image behind
    the text pages and anchors the title block bottom-right.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["branded", "backdrop"] = "branded"
    backdrop_image: Optional[str] = None
    title_anchor: Literal["center", "bottom-right"] = "center"

    @property
    def uses_backdrop(self):
        return self.kind == "backdrop" and bool(self.backdrop_image)


BRANDED = PageStyle()


def backdrop_style(image_path):
    return PageStyle(kind="backdrop", backdrop_image=image_path, title_anchor="bottom-right")


def style_for(kind, backdrop_image=None):
    """Resolve a skin name from a form field or CLI option."""
    if kind == "backdrop":
        if not backdrop_image:
            raise ValueError("the backdrop style needs a background image")
        return backdrop_style(backdrop_image)
    if kind in (None, "", "branded"):
        return BRANDED
    raise ValueError(f"unknown page style: {kind!r}")
