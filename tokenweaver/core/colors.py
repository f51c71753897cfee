"""
Color helpers shared by the normalizer, the value model and the generators.

All functions here work on plain Python values so they can be used before a
token value has been built.
"""

import re
from typing import Any, Optional, Tuple

HEX_PATTERN = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
RGB_PATTERN = re.compile(
    r'^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)$',
    re.IGNORECASE
)
HSL_PATTERN = re.compile(r'^hsla?\(', re.IGNORECASE)

RGB = Tuple[int, int, int]


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_PATTERN.match(value.strip()))


def is_color_string(value: Any) -> bool:
    """True for hex, rgb()/rgba() and hsl()/hsla() strings."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    return bool(HEX_PATTERN.match(text) or RGB_PATTERN.match(text) or HSL_PATTERN.match(text))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return '#{:02X}{:02X}{:02X}'.format(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def hex_to_rgb(hex_value: str) -> RGB:
    """Convert #RGB, #RGBA, #RRGGBB or #RRGGBBAA to an (r, g, b) triple."""
    match = HEX_PATTERN.match(hex_value.strip()) if isinstance(hex_value, str) else None
    if not match:
        raise ValueError(f"Invalid hex color: {hex_value!r}")
    digits = match.group(1)
    if len(digits) in (3, 4):
        digits = ''.join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def hex_alpha(hex_value: str) -> float:
    """Alpha channel encoded in an 8 or 4 digit hex, 1.0 otherwise."""
    digits = hex_value.strip().lstrip('#')
    if len(digits) == 8:
        return round(int(digits[6:8], 16) / 255, 2)
    if len(digits) == 4:
        return round(int(digits[3] * 2, 16) / 255, 2)
    return 1.0


def format_alpha(opacity: float) -> str:
    text = f"{opacity:.3f}".rstrip('0').rstrip('.')
    return text or '0'


def hex_to_rgba(hex_value: str, opacity: float) -> str:
    r, g, b = hex_to_rgb(hex_value)
    return f"rgba({r}, {g}, {b}, {format_alpha(opacity)})"


def parse_rgb_string(value: str) -> Optional[Tuple[RGB, float]]:
    """Parse rgb()/rgba() text into ((r, g, b), alpha), or None."""
    match = RGB_PATTERN.match(value.strip())
    if not match:
        return None
    r, g, b = (_clamp_channel(float(match.group(i))) for i in (1, 2, 3))
    alpha_text = match.group(4)
    if alpha_text is None:
        alpha = 1.0
    elif alpha_text.endswith('%'):
        alpha = float(alpha_text[:-1]) / 100
    else:
        alpha = float(alpha_text)
    return (r, g, b), alpha


def _channels_from_mapping(data: dict) -> Optional[Tuple[float, float, float]]:
    if all(key in data for key in ('r', 'g', 'b')):
        return float(data['r']), float(data['g']), float(data['b'])
    return None


def color_components(raw: Any) -> Tuple[Optional[str], float, Optional[RGB]]:
    """
    Reduce any supported color input to (hex, opacity, rgb).

    Accepts hex strings, rgb()/rgba() strings, ``{hex, opacity}`` mappings,
    Figma ``{r, g, b, a}`` mappings in 0..1 or 0..255 and DTCG
    ``{colorSpace, components, alpha}`` mappings. Raises ValueError when the
    input carries no usable color.
    """
    if isinstance(raw, str):
        text = raw.strip()
        if HEX_PATTERN.match(text):
            digits = text.lstrip('#')
            opacity = hex_alpha(text)
            if len(digits) in (4, 8):
                text = rgb_to_hex(*hex_to_rgb(text))
            return text, opacity, None
        parsed = parse_rgb_string(text)
        if parsed:
            rgb, alpha = parsed
            return rgb_to_hex(*rgb), alpha, rgb
        raise ValueError(f"Unsupported color string: {raw!r}")

    if not isinstance(raw, dict):
        raise ValueError(f"Unsupported color value: {raw!r}")

    opacity = raw.get('opacity', raw.get('alpha', raw.get('a', 1.0)))
    try:
        opacity = float(opacity)
    except (TypeError, ValueError):
        opacity = 1.0

    components = raw.get('components')
    if isinstance(components, (list, tuple)) and len(components) >= 3:
        channels = [float(c) for c in components[:3]]
        if all(0 <= c <= 1 for c in channels):
            channels = [c * 255 for c in channels]
        rgb = tuple(_clamp_channel(c) for c in channels)
        hex_value = raw.get('hex') if is_hex_color(raw.get('hex')) else rgb_to_hex(*rgb)
        return hex_value, opacity, rgb

    if is_hex_color(raw.get('hex')):
        hex_value = raw['hex'].strip()
        rgb_data = raw.get('rgb')
        rgb = None
        if isinstance(rgb_data, dict):
            channels = _channels_from_mapping(rgb_data)
            if channels:
                rgb = tuple(_clamp_channel(c) for c in channels)
        return hex_value, opacity, rgb

    channels = _channels_from_mapping(raw)
    if channels is None and isinstance(raw.get('rgb'), dict):
        channels = _channels_from_mapping(raw['rgb'])
    if channels is not None:
        if all(0 <= c <= 1 for c in channels):
            channels = tuple(c * 255 for c in channels)
        rgb = tuple(_clamp_channel(c) for c in channels)
        return rgb_to_hex(*rgb), opacity, rgb

    raise ValueError(f"Color value has no hex, rgb or components: {raw!r}")
