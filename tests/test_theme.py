import pytest

from rentflow.core.settings_store import reconcile
from rentflow.core.theme import FALLBACK_HSL, hex_to_hsl, theme_css


@pytest.mark.parametrize(
    "value,expected",
    [
        ("#14b8a6", "173 80% 40%"),
        ("#ffffff", "0 0% 100%"),
        ("#000", "0 0% 0%"),
        ("ff0000", "0 100% 50%"),
        ("  #00FF00 ", "120 100% 50%"),
    ],
)
def test_hex_to_hsl(value, expected):
    assert hex_to_hsl(value) == expected


@pytest.mark.parametrize("value", ["", "teal", "#12", "#1234567", "#gggggg", None, 42])
def test_hex_to_hsl_malformed_falls_back(value):
    assert hex_to_hsl(value) == FALLBACK_HSL


def test_theme_css_renders_light_and_dark_blocks():
    css = theme_css(reconcile(None, {}))

    root, dark = css.split(".dark")
    assert root.startswith(":root {")
    assert "--primary: 173 80% 40%;" in root
    assert "--table-footer-foreground: 0 0% 100%;" in root
    assert "--table-header-foreground: 0 0% 0%;" in dark
    assert "--table-footer-foreground: 0 0% 100%;" in dark


def test_theme_css_tolerates_bad_stored_color():
    unified = reconcile(None, {"theme": {"colors": {"primary": "not-a-color"}}})
    assert "--primary: 0 0% 0%;" in theme_css(unified)


def test_hex_to_hsl_stays_in_range():
    steps = range(0, 256, 15)
    for r in steps:
        for g in steps:
            for b in steps:
                h, s, l = hex_to_hsl(f"#{r:02x}{g:02x}{b:02x}").split()
                assert 0 <= int(h) < 360
                assert 0 <= int(s.rstrip("%")) <= 100
                assert 0 <= int(l.rstrip("%")) <= 100
