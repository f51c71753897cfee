"""
Data and build-config generators: token JSON in three shapes and a Tailwind
``theme.extend`` config.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..core.json_utils import pretty_json
from ..core.models import (
    COMPOSITE_TYPOGRAPHY, ColorValue, DimensionValue, FileMap, FontFamilyValue, RawValue,
    ShadowValue, Token, TokenCategory, TypographyValue
)
from ..core.values import expand_composite_typography, format_number, token_to_css_value
from .formats import JSON_FORMATS, BaseGenerator, ExportContext, GeneratorOptions, sort_tokens

logger = logging.getLogger(__name__)

W3C_TYPES = {
    "color", "dimension", "fontFamily", "fontWeight", "duration", "cubicBezier", "number",
    "string", "boolean", "shadow", "gradient", "typography", "border", "transition",
}

TAILWIND_HEADER = "/** @type {import('tailwindcss').Config} */\n"
JS_IDENTIFIER = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def json_value(token: Token) -> Any:
    """Plain JSON value for a token: CSS text for simple shapes, objects for composites."""
    value = token.value
    if isinstance(value, TypographyValue):
        return value.to_json()
    if isinstance(value, RawValue):
        return value.value
    if isinstance(value, ShadowValue):
        return token_to_css_value(token).replace(",\n", ", ")
    return token_to_css_value(token)


def _w3c_value(token: Token) -> Any:
    value = token.value
    if isinstance(value, ColorValue):
        if value.hex and value.opacity < 1:
            return f"{value.hex}{int(round(value.opacity * 255)):02X}"
        return token_to_css_value(token)
    if isinstance(value, DimensionValue):
        return {"value": value.value, "unit": value.unit}
    if isinstance(value, ShadowValue):
        return [{
            "color": layer.color,
            "offsetX": {"value": layer.x, "unit": "px"},
            "offsetY": {"value": layer.y, "unit": "px"},
            "blur": {"value": layer.blur, "unit": "px"},
            "spread": {"value": layer.spread, "unit": "px"},
            "inset": layer.inset,
        } for layer in value.layers]
    if isinstance(value, FontFamilyValue):
        names = [name for name in [value.family] + list(value.fallback) if name]
        return names[0] if len(names) == 1 else names
    if isinstance(value, TypographyValue):
        return value.to_json()
    return value.to_json() if hasattr(value, "to_json") else value


def _w3c_type(token: Token) -> str:
    if token.type == COMPOSITE_TYPOGRAPHY:
        return "typography"
    if isinstance(token.value, ShadowValue):
        return "shadow"
    if isinstance(token.value, DimensionValue) and token.type not in W3C_TYPES - {"number", "string"}:
        return "dimension"
    return token.type if token.type in W3C_TYPES else "string"


def _normalize_key(key: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', key.lower()).strip('-') or '_'


class _Node:
    """Tree node used to nest paths; a node may be both a value and a group."""

    def __init__(self):
        self.children: Dict[str, '_Node'] = {}
        self.leaf: Any = None
        self.has_leaf = False

    def child(self, key: str) -> '_Node':
        return self.children.setdefault(key, _Node())

    def render(self) -> Any:
        if not self.children:
            return self.leaf
        rendered = {key: node.render() for key, node in self.children.items()}
        if self.has_leaf:
            return {"value": self.leaf, **rendered}
        return rendered


def _metadata_leaf(token: Token) -> Dict[str, Any]:
    leaf = {
        "value": json_value(token),
        "type": token.type,
        "category": token.category.value,
        "cssVariable": token.css_variable,
    }
    if token.description:
        leaf["description"] = token.description
    return leaf


def _nest(tokens: List[Token], key_func, leaf_func) -> Dict[str, Any]:
    root = _Node()
    for token in tokens:
        parts = [part for part in token.path.split('/') if part.strip()] or [token.css_variable[2:]]
        node = root
        for part in parts:
            node = node.child(key_func(part))
        node.leaf = leaf_func(token)
        node.has_leaf = True
    rendered = root.render()
    return rendered if isinstance(rendered, dict) else {}


def build_json_document(tokens: List[Token], json_format: str = "nested",
                        include_metadata: bool = False) -> Dict[str, Any]:
    if json_format not in JSON_FORMATS:
        raise ValueError(f"Unknown JSON format '{json_format}'. Expected one of: {', '.join(JSON_FORMATS)}")
    ordered = sort_tokens(tokens)
    if json_format == "flat":
        leaf = _metadata_leaf if include_metadata else json_value
        return {token.css_variable: leaf(token) for token in ordered}
    if json_format == "w3c":
        def w3c_leaf(token: Token) -> Dict[str, Any]:
            leaf = {"$type": _w3c_type(token), "$value": _w3c_value(token)}
            if token.description:
                leaf["$description"] = token.description
            return leaf
        return _nest(ordered, lambda part: part.strip(), w3c_leaf)
    return _nest(ordered, _normalize_key, _metadata_leaf if include_metadata else json_value)


def generate_json(tokens: List[Token], options: Optional[GeneratorOptions] = None) -> str:
    """
    Token data as JSON.

    ``flat`` keys tokens by CSS variable, ``nested`` nests lower-cased path
    segments and ``w3c`` writes DTCG ``$type``/``$value`` groups that the
    normalizer can read back. Empty input always yields ``{}``.
    """
    options = options or GeneratorOptions()
    document = build_json_document(tokens, options.json_format, options.include_metadata)
    return pretty_json(document)


# ---------------------------------------------------------------------------
# Tailwind
# ---------------------------------------------------------------------------

def _js_string(value: str) -> str:
    escaped = value.replace('\\', '\\\\').replace("'", "\\'").replace('\n', '\\n')
    return f"'{escaped}'"


def to_js_literal(value: Any, indent: int = 0) -> str:
    """Render JSON-like data as a JavaScript literal with single quotes."""
    pad = '  ' * indent
    inner = '  ' * (indent + 1)
    if isinstance(value, dict):
        if not value:
            return '{}'
        items = []
        for key, item in value.items():
            key_text = key if JS_IDENTIFIER.match(key) else _js_string(key)
            items.append(f"{inner}{key_text}: {to_js_literal(item, indent + 1)}")
        return '{\n' + ',\n'.join(items) + f'\n{pad}}}'
    if isinstance(value, (list, tuple)):
        if not value:
            return '[]'
        return '[' + ', '.join(to_js_literal(item, indent + 1) for item in value) + ']'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return format_number(value)
    if value is None:
        return 'null'
    return _js_string(str(value))


def tailwind_key(token: Token) -> str:
    """Key inside a theme bucket: the path without its category root, slugged."""
    parts = [re.sub(r'[^a-z0-9]+', '-', part.lower()).strip('-') for part in token.path.split('/')]
    parts = [part for part in parts if part]
    if len(parts) > 1:
        parts = parts[1:]
    return '-'.join(parts) or token.css_variable[2:]


def _set_color(bucket: Dict[str, Any], key: str, value: str) -> None:
    parts = key.split('-')
    if len(parts) > 1 and parts[-1].isdigit():
        name, shade = '-'.join(parts[:-1]), parts[-1]
        group = bucket.get(name)
        if isinstance(group, str):
            group = {"DEFAULT": group}
        group = group or {}
        group[shade] = value
        bucket[name] = group
    elif isinstance(bucket.get(key), dict):
        bucket[key]["DEFAULT"] = value
    else:
        bucket[key] = value


def _font_family_list(token: Token) -> List[str]:
    text = token_to_css_value(token)
    return [name.strip().strip('\'"') for name in text.split(',') if name.strip()]


def build_tailwind_theme(tokens: List[Token], use_css_variables: bool = True) -> Dict[str, Any]:
    theme: Dict[str, Dict[str, Any]] = {
        "colors": {}, "spacing": {}, "fontSize": {}, "fontWeight": {},
        "fontFamily": {}, "borderRadius": {}, "boxShadow": {}, "screens": {},
    }

    def ref(token: Token) -> str:
        if use_css_variables:
            return f"var({token.css_variable})"
        return token_to_css_value(token).replace(",\n", ", ")

    for token in sort_tokens(tokens):
        key = tailwind_key(token)
        path = token.path.lower()
        category = token.category
        if category == TokenCategory.COLOR:
            _set_color(theme["colors"], key, ref(token))
        elif category == TokenCategory.SPACING:
            theme["spacing"][key] = ref(token)
        elif category == TokenCategory.RADIUS:
            theme["borderRadius"][key] = ref(token)
        elif category == TokenCategory.SHADOW:
            theme["boxShadow"][key] = ref(token)
        elif category == TokenCategory.GRID:
            if "breakpoint" in path or "screen" in path:
                # media queries cannot read custom properties
                theme["screens"][key] = token_to_css_value(token)
        elif category == TokenCategory.TYPOGRAPHY:
            if token.is_composite_typography:
                expanded = expand_composite_typography(token)
                base = token.css_variable
                size = f"var({base}-size)" if use_css_variables else expanded[f"{base}-size"]
                extras = {}
                for suffix, field_name in (("line-height", "lineHeight"), ("letter-spacing", "letterSpacing"),
                                           ("weight", "fontWeight")):
                    name = f"{base}-{suffix}"
                    if name in expanded:
                        extras[field_name] = f"var({name})" if use_css_variables else expanded[name]
                theme["fontSize"][key] = [size, extras]
            elif token.type == "fontFamily" or isinstance(token.value, FontFamilyValue) or "family" in path:
                theme["fontFamily"][key] = _font_family_list(token)
            elif token.type == "fontWeight" or "weight" in path:
                theme["fontWeight"][key] = ref(token)
            elif "size" in path or isinstance(token.value, DimensionValue):
                theme["fontSize"][key] = ref(token)

    return {bucket: values for bucket, values in theme.items() if values}


def generate_tailwind(tokens: List[Token], options: Optional[GeneratorOptions] = None) -> str:
    """Tailwind config module whose ``theme.extend`` carries the token buckets."""
    options = options or GeneratorOptions()
    extend = build_tailwind_theme(tokens, options.use_css_variables)
    config = {"theme": {"extend": extend}}
    return TAILWIND_HEADER + "module.exports = " + to_js_literal(config) + ";\n"


class JSONGenerator(BaseGenerator):
    """Nested token JSON with metadata, plus flat and W3C variants."""

    @property
    def format_id(self) -> str:
        return "json"

    @property
    def destinations(self) -> List[str]:
        return ["dist/tokens.json", "dist/tokens.flat.json", "dist/tokens.w3c.json", "dist/themes/"]

    def generate(self, context: ExportContext) -> FileMap:
        tokens = context.tokens
        files: FileMap = {
            "dist/tokens.json": pretty_json(build_json_document(tokens, "nested", include_metadata=True)),
            "dist/tokens.flat.json": pretty_json(build_json_document(tokens, "flat")),
            "dist/tokens.w3c.json": pretty_json(build_json_document(tokens, "w3c")),
        }
        root = context.default_theme
        for theme in context.themes:
            if theme is not root:
                files[f"dist/themes/{theme.slug}.json"] = pretty_json(build_json_document(theme.tokens, "flat"))
        logger.debug(f"JSON export: {len(tokens)} tokens, {len(files)} files")
        return files


class TailwindGenerator(BaseGenerator):
    """Tailwind config extending the theme with the default theme's tokens."""

    @property
    def format_id(self) -> str:
        return "tailwind"

    @property
    def destinations(self) -> List[str]:
        return ["dist/tailwind.config.js"]

    def generate(self, context: ExportContext) -> FileMap:
        return {"dist/tailwind.config.js": generate_tailwind(context.tokens, self.options)}
