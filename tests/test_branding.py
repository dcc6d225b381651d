import pytest
from pydantic import ValidationError

from branding import BRANDED, DEFAULT_BRANDING, BrandingConfig, normalize_color, style_for


def test_defaults():
    assert DEFAULT_BRANDING.company_name == "INTARA DESIGNS"
    assert DEFAULT_BRANDING.accent_color == "#C0623A"
    assert DEFAULT_BRANDING.background_color == "#0E0E0E"


@pytest.mark.parametrize("value, expected", [
    ("#c0623a", "#C0623A"),
    ("  #abc ", "#AABBCC"),
    ("#000000", "#000000"),
])
def test_normalize_color(value, expected):
    assert normalize_color(value) == expected


@pytest.mark.parametrize("value", ["red", "#12345", "C0623A", "", None, "#GGGGGG"])
def test_normalize_color_rejects(value):
    with pytest.raises(ValueError):
        normalize_color(value)


def test_branding_rejects_bad_color():
    with pytest.raises(ValidationError):
        BrandingConfig(accent_color="orange")


def test_branding_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_BRANDING.company_name = "OTHER"


def test_style_for():
    assert style_for(None) is BRANDED
    assert style_for("branded") is BRANDED

    backdrop = style_for("backdrop", "/srv/backdrop.jpg")
    assert backdrop.uses_backdrop
    assert backdrop.title_anchor == "bottom-right"

    with pytest.raises(ValueError):
        style_for("backdrop")
    with pytest.raises(ValueError):
        style_for("neon")
