"""
Serialization of typed token values into CSS literal text.

``token_to_css_value`` is used by every stylesheet-like generator and never
raises: unexpected shapes fall back to ``str(value)``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from . import colors
from .models import (
    ColorValue, DimensionValue, FontFamilyValue, RawValue, ShadowLayer, ShadowValue,
    Token, TypographyValue, coerce_value
)

logger = logging.getLogger(__name__)

GENERIC_FONT_STACK = "system-ui, sans-serif"
GENERIC_FAMILIES = {
    "serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui",
    "ui-serif", "ui-sans-serif", "ui-monospace", "ui-rounded", "emoji", "math",
    "-apple-system", "blinkmacsystemfont",
}

COMPOSITE_SUFFIXES = ["family", "size", "weight", "line-height", "letter-spacing"]

RESPONSIVE_BREAKPOINTS = {
    "tablet": 768,
    "mobile": 480,
}


def format_number(value: Any) -> str:
    """Render a number without a trailing ``.0``."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(round(value, 6))
    return str(value)


def dimension_to_css(dimension: DimensionValue) -> str:
    return f"{format_number(dimension.value)}{dimension.unit or ''}"


def color_to_css(color: ColorValue) -> str:
    if color.opacity is not None and color.opacity < 1:
        if color.rgb:
            r, g, b = color.rgb
            return f"rgba({r}, {g}, {b}, {colors.format_alpha(color.opacity)})"
        if color.hex:
            return colors.hex_to_rgba(color.hex, color.opacity)
    if color.hex:
        return color.hex
    if color.rgb:
        r, g, b = color.rgb
        return f"rgb({r}, {g}, {b})"
    return "#000000"


def shadow_layer_to_css(layer: ShadowLayer) -> str:
    prefix = "inset " if layer.inset else ""
    return (f"{prefix}{format_number(layer.x)}px {format_number(layer.y)}px "
            f"{format_number(layer.blur)}px {format_number(layer.spread)}px {layer.color}")


def shadow_to_css(shadow: ShadowValue) -> str:
    if shadow.is_none:
        return "none"
    return ",\n".join(shadow_layer_to_css(layer) for layer in shadow.layers)


def quote_family(family: str) -> str:
    family = str(family).strip().strip('"\'')
    if family.lower() in GENERIC_FAMILIES:
        return family
    if any(ch.isspace() for ch in family):
        return f"'{family}'"
    return family


def font_family_to_css(font: FontFamilyValue) -> str:
    if not font.family:
        return _generic_stack(font)
    names = [font.family] + [name for name in font.fallback if name]
    return ", ".join(quote_family(name) for name in names)


def _generic_stack(font: FontFamilyValue) -> str:
    if font.fallback:
        return ", ".join(quote_family(name) for name in font.fallback)
    return GENERIC_FONT_STACK


def _plain_to_css(value: Any, default_unit: str = "") -> str:
    if isinstance(value, DimensionValue):
        return dimension_to_css(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{format_number(value)}{default_unit}"
    return str(value)


def value_to_css(value: Any) -> str:
    if isinstance(value, ColorValue):
        return color_to_css(value)
    if isinstance(value, DimensionValue):
        return dimension_to_css(value)
    if isinstance(value, ShadowValue):
        return shadow_to_css(value)
    if isinstance(value, FontFamilyValue):
        return font_family_to_css(value)
    if isinstance(value, TypographyValue):
        # Only meaningful through expand_composite_typography
        if value.font_size is not None:
            return _plain_to_css(value.font_size)
        return "initial"
    if isinstance(value, RawValue):
        value = value.value
    if value is None:
        return "initial"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def token_to_css_value(token: Token) -> str:
    """Literal CSS text for a token's value."""
    try:
        value = token.value
        if not hasattr(value, "kind"):
            value = coerce_value(value, token.category, token.type)
        return value_to_css(value)
    except Exception as e:
        logger.warning(f"Could not serialize {token.path}: {e}")
        return str(token.value)


def _safe_font_family_css(token: Token, font: Any) -> str:
    try:
        return font_family_to_css(font)
    except Exception as e:
        logger.warning(f"Could not serialize font family of {token.path}: {e}")
        return GENERIC_FONT_STACK


def expand_composite_typography(token: Token) -> Dict[str, str]:
    """
    Destructure a composite typography token into suffixed variables.

    Returns an ordered mapping such as ``{"--heading-family": "Inter, sans-serif",
    "--heading-size": "2rem", ...}``.
    """
    value = token.value
    if not isinstance(value, TypographyValue):
        return {token.css_variable: token_to_css_value(token)}

    base = token.css_variable
    expanded: Dict[str, str] = {}
    if value.font_family is not None:
        expanded[f"{base}-family"] = _safe_font_family_css(token, value.font_family)
    expanded[f"{base}-size"] = _plain_to_css(value.font_size, "px") if value.font_size is not None else "1rem"
    if value.font_weight is not None:
        expanded[f"{base}-weight"] = str(value.font_weight)
    expanded[f"{base}-line-height"] = (_plain_to_css(value.line_height)
                                       if value.line_height is not None else "1.5")
    expanded[f"{base}-letter-spacing"] = (_plain_to_css(value.letter_spacing, "em")
                                          if value.letter_spacing is not None else "normal")
    return expanded


def responsive_typography_css(tokens: List[Token], selector: str = ":root") -> str:
    """@media overrides for composite tokens that carry per-breakpoint sizes."""
    blocks = []
    for breakpoint, max_width in RESPONSIVE_BREAKPOINTS.items():
        lines = []
        for token in tokens:
            value = token.value
            if isinstance(value, TypographyValue) and breakpoint in value.responsive_sizes:
                size = _plain_to_css(value.responsive_sizes[breakpoint], "px")
                lines.append(f"    {token.css_variable}-size: {size};")
        if lines:
            blocks.append(f"@media (max-width: {max_width}px) {{\n  {selector} {{\n"
                          + "\n".join(lines) + "\n  }\n}\n")
    return "\n".join(blocks)


def display_value(token: Token) -> str:
    """Short single-line value for documentation output. Never raises."""
    try:
        if isinstance(token.value, TypographyValue):
            expanded = expand_composite_typography(token)
            parts = [expanded.get(f"{token.css_variable}-{suffix}") for suffix in ("family", "size", "weight")]
            return " / ".join(part for part in parts if part)
        return token_to_css_value(token).replace(",\n", ", ")
    except Exception as e:
        logger.warning(f"Could not display {token.path}: {e}")
        return str(token.value)


def font_stack(family: Optional[str], fallback: Optional[str] = None) -> str:
    """CSS font stack for a typeface family and its comma separated fallback."""
    names = [family] if family else []
    if fallback:
        names.extend(part.strip() for part in fallback.split(',') if part.strip())
    if not names:
        return GENERIC_FONT_STACK
    return ", ".join(quote_family(name) for name in names)
