"""
Theme color helpers.

Colors are stored as hex strings but the dashboard consumes them as HSL triples
("173 80% 40%") inside CSS variables. Conversion is lenient: theme columns are
free text, so anything that is not a 3 or 6 digit hex color becomes
``FALLBACK_HSL`` instead of raising.
"""
import colorsys
import re

from rentflow.schemas.settings import ColorSet, UnifiedSettings

FALLBACK_HSL = "0 0% 0%"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# CSS variable name per color field
_CSS_VARS = {
    "primary": "--primary",
    "table_header_background": "--table-header-background",
    "table_header_foreground": "--table-header-foreground",
    "table_footer_background": "--table-footer-background",
    "mobile_nav_background": "--mobile-nav-background",
    "mobile_nav_foreground": "--mobile-nav-foreground",
}


def hex_to_hsl(value) -> str:
    if not isinstance(value, str):
        return FALLBACK_HSL
    match = _HEX_RE.match(value.strip())
    if not match:
        return FALLBACK_HSL

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)

    r, g, b = (int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return f"{round(h * 360) % 360} {round(s * 100)}% {round(l * 100)}%"


def _css_block(selector: str, colors: ColorSet) -> str:
    lines = [f"{selector} {{"]
    for field, var in _CSS_VARS.items():
        lines.append(f"  {var}: {hex_to_hsl(getattr(colors, field))};")
    # Footer text is always white on the accent background
    lines.append("  --table-footer-foreground: 0 0% 100%;")
    lines.append("}")
    return "\n".join(lines)


def theme_css(unified: UnifiedSettings) -> str:
    """Render the ``:root`` and ``.dark`` variable blocks for the current theme."""
    return "\n".join([
        _css_block(":root", unified.theme.colors),
        _css_block(".dark", unified.theme.dark_colors),
    ]) + "\n"
