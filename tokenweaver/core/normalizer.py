"""
Token normalization: walks a detected-format document into canonical Token records.

Malformed leaves never abort a parse; they are skipped and reported in
``ParseResult.errors`` while every usable token is still returned.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from . import colors
from .format_detector import TokenFormat, detect_format
from .models import (
    COMPOSITE_TYPOGRAPHY, ColorValue, DimensionValue, ParseResult, RawValue,
    Token, TokenCategory, css_variable_for_path, coerce_value
)

logger = logging.getLogger(__name__)

MAX_WALK_DEPTH = 20

DTCG_TYPE_MAP = {
    "color": "color",
    "dimension": "dimension",
    "fontFamily": "fontFamily",
    "fontWeight": "fontWeight",
    "duration": "duration",
    "cubicBezier": "cubicBezier",
    "number": "number",
    "string": "string",
    "boolean": "boolean",
    "shadow": "shadow",
    "gradient": "gradient",
    "typography": COMPOSITE_TYPOGRAPHY,
    "border": "border",
    "transition": "transition",
    # Figma variable exports also use these
    "float": "number",
    "spacing": "dimension",
    "sizing": "dimension",
    "borderRadius": "dimension",
    "boxShadow": "shadow",
}

STYLE_DICTIONARY_TYPE_MAP = {
    "COLOR": "color",
    "FLOAT": "number",
    "STRING": "string",
    "BOOLEAN": "boolean",
}

# First path segment (lower-cased) -> category
CATEGORY_LOOKUP: Dict[str, TokenCategory] = {
    "color": TokenCategory.COLOR,
    "colors": TokenCategory.COLOR,
    "colour": TokenCategory.COLOR,
    "colours": TokenCategory.COLOR,
    "palette": TokenCategory.COLOR,
    "brand": TokenCategory.COLOR,
    "background": TokenCategory.COLOR,
    "foreground": TokenCategory.COLOR,
    "typography": TokenCategory.TYPOGRAPHY,
    "type": TokenCategory.TYPOGRAPHY,
    "font": TokenCategory.TYPOGRAPHY,
    "fonts": TokenCategory.TYPOGRAPHY,
    "text": TokenCategory.TYPOGRAPHY,
    "space": TokenCategory.SPACING,
    "spacing": TokenCategory.SPACING,
    "size": TokenCategory.SPACING,
    "sizes": TokenCategory.SPACING,
    "sizing": TokenCategory.SPACING,
    "shadow": TokenCategory.SHADOW,
    "shadows": TokenCategory.SHADOW,
    "elevation": TokenCategory.SHADOW,
    "radius": TokenCategory.RADIUS,
    "radii": TokenCategory.RADIUS,
    "border-radius": TokenCategory.RADIUS,
    "corner": TokenCategory.RADIUS,
    "corners": TokenCategory.RADIUS,
    "grid": TokenCategory.GRID,
    "breakpoint": TokenCategory.GRID,
    "breakpoints": TokenCategory.GRID,
    "layout": TokenCategory.GRID,
    "container": TokenCategory.GRID,
}

# Fallback when the first segment is not in the lookup table. Checked in order
# against the whole lower-cased path.
CATEGORY_KEYWORDS: List[Tuple[TokenCategory, re.Pattern]] = [
    (TokenCategory.COLOR, re.compile(r'colou?r|background|foreground|fill|stroke|brand')),
    (TokenCategory.TYPOGRAPHY, re.compile(r'typography|font|heading|body|display|line-height|letter-spacing')),
    (TokenCategory.SPACING, re.compile(r'space|spacing|gap|margin|padding|inset')),
    (TokenCategory.SHADOW, re.compile(r'shadow|elevation')),
    (TokenCategory.RADIUS, re.compile(r'radius|corner|rounded')),
    (TokenCategory.GRID, re.compile(r'grid|breakpoint|column|container|layout')),
]

TYPE_CATEGORY = {
    "color": TokenCategory.COLOR,
    "shadow": TokenCategory.SHADOW,
    COMPOSITE_TYPOGRAPHY: TokenCategory.TYPOGRAPHY,
    "fontFamily": TokenCategory.TYPOGRAPHY,
    "fontWeight": TokenCategory.TYPOGRAPHY,
}

DIMENSION_PATTERN = re.compile(r'^(-?\d*\.?\d+)(px|rem|em|%|vh|vw|pt|ch|ex|vmin|vmax)$')
DURATION_PATTERN = re.compile(r'^(-?\d*\.?\d+)(ms|s)$')
NUMBER_PATTERN = re.compile(r'^-?\d*\.?\d+$')


def detect_category(path: str, type_: str = "string") -> TokenCategory:
    """Category for a token: type override, first-segment lookup, keyword fallback, else OTHER."""
    if type_ in TYPE_CATEGORY:
        return TYPE_CATEGORY[type_]
    first = path.split('/')[0].strip().lower() if path else ''
    if first in CATEGORY_LOOKUP:
        return CATEGORY_LOOKUP[first]
    lowered = path.lower()
    for category, pattern in CATEGORY_KEYWORDS:
        if pattern.search(lowered):
            return category
    return TokenCategory.OTHER


def infer_type(value: Any) -> str:
    """Infer a token type from the shape of an untyped value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        text = value.strip()
        if colors.is_color_string(text):
            return "color"
        if DIMENSION_PATTERN.match(text):
            return "dimension"
        if DURATION_PATTERN.match(text):
            return "duration"
        if NUMBER_PATTERN.match(text):
            return "number"
        return "string"
    if isinstance(value, dict):
        if ("r" in value and "g" in value) or "hex" in value or "components" in value:
            return "color"
        if "value" in value and "unit" in value:
            return "dimension"
        if "blur" in value and "color" in value:
            return "shadow"
        if "fontSize" in value and ("fontFamily" in value or "fontWeight" in value):
            return COMPOSITE_TYPOGRAPHY
    if isinstance(value, list) and value and all(isinstance(v, dict) and "blur" in v for v in value):
        return "shadow"
    return "string"


class TokenNormalizer:
    """
    Converts a token export document into a ParseResult.

    ``mode`` selects one mode of a Style-Dictionary export; when omitted the
    first mode of each collection is used so variable names stay unique.
    """

    def __init__(self, theme_id: Optional[str] = None, mode: Optional[str] = None):
        self.theme_id = theme_id
        self.mode = mode

    def parse(self, document: Any) -> ParseResult:
        result = ParseResult()
        token_format = detect_format(document)
        self._result = result
        self._seen_variables: Dict[str, str] = {}
        self._skipped = 0

        if token_format == TokenFormat.DTCG_VARIABLES:
            self._walk_dtcg(document, [], None, 0)
        elif token_format == TokenFormat.STYLE_DICTIONARY:
            self._parse_style_dictionary(document)
        elif token_format == TokenFormat.FLAT:
            self._walk_flat(document, [], 0)
        else:
            result.errors.append(
                "Unable to detect token file format. Expected dtcg-variables, style-dictionary, or flat JSON."
            )

        categories: Dict[str, int] = {}
        for token in result.tokens:
            categories[token.category.value] = categories.get(token.category.value, 0) + 1
        result.metadata.update({
            "format": token_format.value,
            "total_parsed": len(result.tokens),
            "total_skipped": self._skipped,
            "categories": categories,
        })
        logger.debug(f"Parsed {len(result.tokens)} tokens ({token_format.value}), skipped {self._skipped}")
        return result

    # -- shared -----------------------------------------------------------

    def _skip(self, path: str, reason: str) -> None:
        self._skipped += 1
        message = f"Skipped {path or '<root>'}: {reason}"
        self._result.errors.append(message)
        logger.debug(message)

    def _add_token(self, path: str, type_: str, value: Any, description: Optional[str] = None) -> None:
        css_variable = css_variable_for_path(path)
        if css_variable in self._seen_variables:
            self._skip(path, f"duplicate CSS variable {css_variable} (already used by {self._seen_variables[css_variable]})")
            return
        category = detect_category(path, type_)
        try:
            value = coerce_value(value, category, type_)
        except (ValueError, TypeError, KeyError) as e:
            self._skip(path, str(e))
            return
        token = Token(
            path=path,
            value=value,
            category=category,
            type=type_,
            css_variable=css_variable,
            theme_id=self.theme_id,
            sort_order=len(self._result.tokens),
            description=description or None,
        )
        self._seen_variables[css_variable] = path
        self._result.tokens.append(token)

    def _convert(self, path: str, type_: str, raw: Any) -> Any:
        """Convert a leaf value for its type; raises ValueError when unusable."""
        if raw is None or raw == "":
            raise ValueError("missing value")
        if type_ == "color":
            if isinstance(raw, str) and not colors.is_hex_color(raw) and not raw.lower().startswith("rgb"):
                return RawValue(raw.strip())
            hex_value, opacity, rgb = colors.color_components(raw)
            return ColorValue(hex_value, opacity, rgb)
        if type_ == "dimension":
            return self._convert_dimension(raw)
        if type_ == "shadow":
            if isinstance(raw, str):
                return raw
            if not isinstance(raw, (dict, list)):
                raise ValueError(f"unsupported shadow value {raw!r}")
            return raw
        return raw

    @staticmethod
    def _convert_dimension(raw: Any) -> Any:
        if isinstance(raw, bool):
            raise ValueError(f"unsupported dimension value {raw!r}")
        if isinstance(raw, (int, float)):
            return DimensionValue(raw, "px")
        if isinstance(raw, dict):
            value = raw.get("value")
            if isinstance(value, str) and NUMBER_PATTERN.match(value.strip()):
                value = float(value)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"dimension without numeric value {raw!r}")
            return DimensionValue(value, raw.get("unit") or "px")
        if isinstance(raw, str):
            match = DIMENSION_PATTERN.match(raw.strip())
            if match:
                number = float(match.group(1))
                return DimensionValue(int(number) if number.is_integer() else number, match.group(2))
            if NUMBER_PATTERN.match(raw.strip()):
                number = float(raw)
                return DimensionValue(int(number) if number.is_integer() else number, "px")
            return RawValue(raw.strip())
        raise ValueError(f"unsupported dimension value {raw!r}")

    # -- dtcg-variables ---------------------------------------------------

    def _walk_dtcg(self, node: Dict[str, Any], parts: List[str], group_type: Optional[str], depth: int) -> None:
        path = '/'.join(parts)
        if depth > MAX_WALK_DEPTH:
            self._result.warnings.append(f"Maximum nesting depth exceeded at {path}")
            return
        inherited = node.get("$type", group_type)
        for key, child in node.items():
            key = str(key)
            if key.startswith("$"):
                continue
            child_parts = parts + [key]
            child_path = '/'.join(child_parts)
            if not isinstance(child, dict):
                self._result.warnings.append(f"Ignored non-token entry at {child_path}")
                continue
            if "$value" in child:
                self._add_dtcg_leaf(child_path, child, inherited)
            else:
                self._walk_dtcg(child, child_parts, inherited, depth + 1)

    def _add_dtcg_leaf(self, path: str, leaf: Dict[str, Any], inherited_type: Optional[str]) -> None:
        raw = leaf.get("$value")
        type_tag = leaf.get("$type", inherited_type)
        type_ = DTCG_TYPE_MAP.get(type_tag, "string") if type_tag else infer_type(raw)
        try:
            value = self._convert(path, type_, raw)
        except (ValueError, TypeError, KeyError) as e:
            self._skip(path, str(e))
            return
        self._add_token(path, type_, value, leaf.get("$description"))

    # -- style-dictionary -------------------------------------------------

    def _parse_style_dictionary(self, document: Dict[str, Any]) -> None:
        collections_seen: Dict[str, List[str]] = {}
        for collection in document.get("collections", []):
            if not isinstance(collection, dict):
                self._result.warnings.append("Ignored malformed collection entry")
                continue
            collection_name = collection.get("name") or "Default"
            modes = collection.get("modes")
            if not isinstance(modes, list):
                self._result.warnings.append(f"Collection {collection_name} has no modes, skipping")
                continue
            mode_names = [m.get("name") or "Default" for m in modes if isinstance(m, dict)]
            collections_seen[collection_name] = mode_names
            selected = self._select_mode(collection_name, modes)
            if selected is not None:
                self._parse_mode(collection_name, selected)
        self._result.metadata["collections"] = collections_seen

    def _select_mode(self, collection_name: str, modes: List[Any]) -> Optional[Dict[str, Any]]:
        candidates = [m for m in modes if isinstance(m, dict)]
        if not candidates:
            self._result.warnings.append(f"Collection {collection_name} has no usable modes")
            return None
        if self.mode is not None:
            for mode in candidates:
                if (mode.get("name") or "Default") == self.mode:
                    return mode
            self._result.warnings.append(
                f"Mode {self.mode} not found in {collection_name}, using {candidates[0].get('name') or 'Default'}"
            )
        elif len(candidates) > 1:
            ignored = ', '.join(m.get("name") or "Default" for m in candidates[1:])
            self._result.warnings.append(f"Collection {collection_name}: ignored modes {ignored}")
        return candidates[0]

    def _parse_mode(self, collection_name: str, mode: Dict[str, Any]) -> None:
        mode_name = mode.get("name") or "Default"
        variables = mode.get("variables")
        if not isinstance(variables, list):
            self._result.warnings.append(f"Mode {mode_name} in {collection_name} has no variables")
            return
        for variable in variables:
            if not isinstance(variable, dict) or not variable.get("name"):
                self._skip(f"{collection_name}/{mode_name}", "variable without a name")
                continue
            path = str(variable["name"]).strip('/')
            figma_type = str(variable.get("type") or "STRING").upper()
            type_ = STYLE_DICTIONARY_TYPE_MAP.get(figma_type, "string")
            try:
                value = self._convert(path, type_, variable.get("value"))
            except (ValueError, TypeError, KeyError) as e:
                self._skip(path, str(e))
                continue
            self._add_token(path, type_, value, variable.get("description"))

    # -- flat -------------------------------------------------------------

    def _walk_flat(self, node: Dict[str, Any], parts: List[str], depth: int) -> None:
        path = '/'.join(parts)
        if depth > MAX_WALK_DEPTH:
            self._result.warnings.append(f"Maximum nesting depth exceeded at {path}")
            return
        for key, child in node.items():
            key = str(key)
            if key.startswith("$"):
                continue
            child_parts = parts + [key]
            child_path = '/'.join(child_parts)
            if isinstance(child, dict) and "value" in child:
                self._add_flat_leaf(child_path, child)
            elif isinstance(child, dict):
                self._walk_flat(child, child_parts, depth + 1)
            else:
                self._result.warnings.append(f"Ignored non-token entry at {child_path}")

    def _add_flat_leaf(self, path: str, leaf: Dict[str, Any]) -> None:
        raw = leaf.get("value")
        type_ = leaf.get("type") or infer_type(raw)
        type_ = DTCG_TYPE_MAP.get(type_, type_)
        try:
            value = self._convert(path, type_, raw)
        except (ValueError, TypeError, KeyError) as e:
            self._skip(path, str(e))
            return
        self._add_token(path, type_, value, leaf.get("description") or leaf.get("comment"))


def parse_tokens(document: Any, theme_id: Optional[str] = None, mode: Optional[str] = None) -> ParseResult:
    """Detect the format of ``document`` and normalize it into tokens."""
    return TokenNormalizer(theme_id=theme_id, mode=mode).parse(document)
