import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from . import colors

logger = logging.getLogger(__name__)


class TokenCategory(Enum):
    """Coarse token classification. Declaration order is the stylesheet order."""
    COLOR = "color"
    TYPOGRAPHY = "typography"
    SPACING = "spacing"
    SHADOW = "shadow"
    RADIUS = "radius"
    GRID = "grid"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: Any) -> 'TokenCategory':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_ORDER: List[TokenCategory] = list(TokenCategory)

CATEGORY_LABELS = {
    TokenCategory.COLOR: "Colors",
    TokenCategory.TYPOGRAPHY: "Typography",
    TokenCategory.SPACING: "Spacing",
    TokenCategory.SHADOW: "Shadows",
    TokenCategory.RADIUS: "Radius",
    TokenCategory.GRID: "Grid",
    TokenCategory.OTHER: "Other",
}

COMPOSITE_TYPOGRAPHY = "typography-composite"


def css_variable_for_path(path: str) -> str:
    """Derive the custom property name for a token path.

    ``Color/Primary/500`` becomes ``--color-primary-500``.
    """
    slug = path.lower()
    slug = re.sub(r'[/\s]+', '-', slug)
    slug = re.sub(r'[^a-z0-9-]', '-', slug)
    slug = re.sub(r'-{2,}', '-', slug).strip('-')
    return f"--{slug}" if slug else "--token"


def format_token_name(path: str) -> str:
    """Human readable name from the last path segment."""
    last = path.rstrip('/').split('/')[-1] if path else ''
    words = re.sub(r'[-_]+', ' ', last).split()
    return ' '.join(word[:1].upper() + word[1:] for word in words)


def slugify(text: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', (text or '').lower()).strip('-')
    return slug or 'untitled'


# ---------------------------------------------------------------------------
# Token value variants
# ---------------------------------------------------------------------------

@dataclass
class ColorValue:
    hex: Optional[str] = None
    opacity: float = 1.0
    rgb: Optional[tuple] = None
    kind: ClassVar[str] = "color"

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.hex:
            data["hex"] = self.hex
        if self.rgb:
            data["rgb"] = {"r": self.rgb[0], "g": self.rgb[1], "b": self.rgb[2]}
        data["opacity"] = self.opacity
        return data


@dataclass
class DimensionValue:
    value: Union[int, float]
    unit: str = "px"
    kind: ClassVar[str] = "dimension"

    def to_json(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit}


@dataclass
class ShadowLayer:
    x: float = 0
    y: float = 0
    blur: float = 0
    spread: float = 0
    color: str = "rgba(0,0,0,0.1)"
    inset: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {
            "offsetX": self.x,
            "offsetY": self.y,
            "blur": self.blur,
            "spread": self.spread,
            "color": self.color,
            "inset": self.inset,
        }


@dataclass
class ShadowValue:
    layers: List[ShadowLayer] = field(default_factory=list)
    kind: ClassVar[str] = "shadow"

    @property
    def is_none(self) -> bool:
        return not self.layers

    def to_json(self) -> Dict[str, Any]:
        return {"shadows": [layer.to_json() for layer in self.layers]}


@dataclass
class FontFamilyValue:
    family: Optional[str] = None
    fallback: List[str] = field(default_factory=list)
    kind: ClassVar[str] = "fontFamily"

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"family": self.family}
        if self.fallback:
            data["fallback"] = list(self.fallback)
        return data


@dataclass
class TypographyValue:
    """Composite typography record; consumers destructure it themselves."""
    font_family: Optional[FontFamilyValue] = None
    font_size: Optional[Union[DimensionValue, str]] = None
    font_weight: Optional[Union[int, str]] = None
    line_height: Optional[Union[float, int, str, DimensionValue]] = None
    letter_spacing: Optional[Union[float, int, str, DimensionValue]] = None
    responsive_sizes: Dict[str, Union[DimensionValue, str]] = field(default_factory=dict)
    kind: ClassVar[str] = "typography"

    def to_json(self) -> Dict[str, Any]:
        def plain(value):
            return value.to_json() if hasattr(value, 'to_json') else value

        data: Dict[str, Any] = {}
        if self.font_family is not None:
            data["fontFamily"] = self.font_family.to_json()
        if self.font_size is not None:
            data["fontSize"] = plain(self.font_size)
        if self.font_weight is not None:
            data["fontWeight"] = self.font_weight
        if self.line_height is not None:
            data["lineHeight"] = plain(self.line_height)
        if self.letter_spacing is not None:
            data["letterSpacing"] = plain(self.letter_spacing)
        for breakpoint, size in sorted(self.responsive_sizes.items()):
            data[f"fontSize{breakpoint[:1].upper()}{breakpoint[1:]}"] = plain(size)
        return data


@dataclass
class RawValue:
    """Strings, numbers, booleans and anything without a richer shape."""
    value: Any = None
    kind: ClassVar[str] = "raw"

    def to_json(self) -> Any:
        return self.value


TokenValue = Union[ColorValue, DimensionValue, ShadowValue, FontFamilyValue, TypographyValue, RawValue]
VALUE_TYPES = (ColorValue, DimensionValue, ShadowValue, FontFamilyValue, TypographyValue, RawValue)

RESPONSIVE_SIZE_KEYS = {"fontSizeTablet": "tablet", "fontSizeMobile": "mobile"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _dimension(raw: Any, default_unit: str) -> Union[DimensionValue, str, None]:
    if raw is None:
        return None
    if _is_number(raw):
        return DimensionValue(raw, default_unit)
    if isinstance(raw, dict) and _is_number(raw.get("value")):
        unit = raw.get("unit")
        return DimensionValue(raw["value"], default_unit if unit is None else unit)
    return str(raw)


def _font_family(raw: Any) -> Optional[FontFamilyValue]:
    if raw is None:
        return None
    if isinstance(raw, FontFamilyValue):
        return raw
    if isinstance(raw, (list, tuple)):
        names = [str(name) for name in raw if name]
        return FontFamilyValue(names[0] if names else None, names[1:])
    if isinstance(raw, dict):
        family = raw.get("family", raw.get("fontFamily"))
        if isinstance(family, (list, tuple)):
            return _font_family(family)
        fallback = raw.get("fallback") or []
        if isinstance(fallback, str):
            fallback = [part.strip() for part in fallback.split(',') if part.strip()]
        elif not isinstance(fallback, (list, tuple)):
            fallback = [fallback]
        return FontFamilyValue(None if family is None else str(family),
                               [str(name) for name in fallback if name is not None])
    return FontFamilyValue(str(raw))


def _typography(raw: Dict[str, Any]) -> TypographyValue:
    line_height = raw.get("lineHeight")
    if isinstance(line_height, dict):
        line_height = _dimension(line_height, "")
    responsive = {}
    for key, breakpoint in RESPONSIVE_SIZE_KEYS.items():
        if raw.get(key) is not None:
            responsive[breakpoint] = _dimension(raw[key], "rem")
    return TypographyValue(
        font_family=_font_family(raw.get("fontFamily")),
        font_size=_dimension(raw.get("fontSize"), "rem"),
        font_weight=raw.get("fontWeight"),
        line_height=line_height,
        letter_spacing=_dimension(raw.get("letterSpacing"), "em"),
        responsive_sizes=responsive,
    )


DEFAULT_SHADOW_COLOR = "rgba(0,0,0,0.1)"


def _shadow_layer(raw: Dict[str, Any]) -> ShadowLayer:
    color = raw.get("color", DEFAULT_SHADOW_COLOR)
    if not isinstance(color, str):
        try:
            hex_value, opacity, rgb = colors.color_components(color)
            color = colors.hex_to_rgba(hex_value, opacity) if opacity < 1 else hex_value
        except (ValueError, TypeError):
            logger.debug(f"Unusable shadow color {color!r}, using {DEFAULT_SHADOW_COLOR}")
            color = DEFAULT_SHADOW_COLOR

    def number(*keys):
        for key in keys:
            value = raw.get(key)
            if isinstance(value, dict):
                value = value.get("value")
            if _is_number(value):
                return value
            if isinstance(value, str):
                match = re.match(r'^\s*(-?[\d.]+)', value)
                if match:
                    return float(match.group(1))
        return 0

    return ShadowLayer(
        x=number("offsetX", "x"),
        y=number("offsetY", "y"),
        blur=number("blur", "radius"),
        spread=number("spread"),
        color=color,
        inset=bool(raw.get("inset", False) or raw.get("type") == "INNER_SHADOW"),
    )


def coerce_value(raw: Any, category: TokenCategory = TokenCategory.OTHER,
                 type_: str = "string") -> TokenValue:
    """Build the tagged value for JSON-shaped input, discriminated by category and type."""
    if isinstance(raw, VALUE_TYPES):
        return raw
    if raw is None:
        return RawValue(None)

    if type_ in (COMPOSITE_TYPOGRAPHY, "typography") and isinstance(raw, dict):
        if any(key in raw for key in ("fontSize", "fontWeight", "lineHeight", "letterSpacing")):
            return _typography(raw)

    if category == TokenCategory.COLOR or type_ == "color":
        if isinstance(raw, (str, dict)):
            try:
                hex_value, opacity, rgb = colors.color_components(raw)
                return ColorValue(hex_value, opacity, rgb)
            except (ValueError, TypeError):
                return RawValue(raw)

    if category == TokenCategory.SHADOW or type_ == "shadow":
        if isinstance(raw, str) and raw.strip().lower() == "none":
            return ShadowValue([])
        if isinstance(raw, dict):
            layers = raw.get("shadows", raw.get("layers"))
            if isinstance(layers, list):
                return ShadowValue([_shadow_layer(layer) for layer in layers if isinstance(layer, dict)])
            return ShadowValue([_shadow_layer(raw)])
        if isinstance(raw, list):
            return ShadowValue([_shadow_layer(layer) for layer in raw if isinstance(layer, dict)])

    if type_ == "fontFamily" or (isinstance(raw, dict) and set(raw) & {"family", "fontFamily"}
                                 and not set(raw) & {"fontSize", "value"}):
        if isinstance(raw, (dict, list, str)):
            return _font_family(raw)

    if isinstance(raw, dict) and _is_number(raw.get("value")) and set(raw) <= {"value", "unit"}:
        unit = raw.get("unit")
        if unit is None:
            if category == TokenCategory.TYPOGRAPHY and 0 < raw["value"] < 10:
                unit = ""
            else:
                unit = "px"
        return DimensionValue(raw["value"], unit)

    if _is_number(raw) and (type_ == "dimension" or category in (
            TokenCategory.SPACING, TokenCategory.RADIUS, TokenCategory.GRID)):
        return DimensionValue(raw, "px")

    return RawValue(raw)


def value_to_json(value: Any) -> Any:
    if hasattr(value, "to_json"):
        return value.to_json()
    return value


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def _pick(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class Token:
    path: str
    value: Any = None
    category: TokenCategory = TokenCategory.OTHER
    type: str = "string"
    name: str = ""
    css_variable: str = ""
    theme_id: Optional[str] = None
    id: Optional[str] = None
    sort_order: int = 0
    description: Optional[str] = None

    def __post_init__(self):
        self.category = TokenCategory.from_value(self.category)
        self.value = coerce_value(self.value, self.category, self.type)
        if not self.name:
            self.name = format_token_name(self.path)
        if not self.css_variable:
            self.css_variable = css_variable_for_path(self.path)

    @property
    def is_composite_typography(self) -> bool:
        return isinstance(self.value, TypographyValue)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Token':
        path = _pick(data, "path", "name", default="")
        return cls(
            path=path,
            value=data.get("value"),
            category=_pick(data, "category", default="other"),
            type=_pick(data, "type", default="string"),
            name=_pick(data, "name", default=""),
            css_variable=_pick(data, "css_variable", "cssVariable", default=""),
            theme_id=_pick(data, "theme_id", "themeId"),
            id=_pick(data, "id"),
            sort_order=_pick(data, "sort_order", "sortOrder", default=0),
            description=_pick(data, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "theme_id": self.theme_id,
            "name": self.name,
            "path": self.path,
            "category": self.category.value,
            "type": self.type,
            "value": value_to_json(self.value),
            "css_variable": self.css_variable,
            "sort_order": self.sort_order,
        }
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class FontFile:
    storage_path: str
    format: str = "woff2"
    weight: Union[int, str] = 400
    style: str = "normal"

    @property
    def filename(self) -> str:
        return self.storage_path.replace('\\', '/').rstrip('/').split('/')[-1]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FontFile':
        storage_path = _pick(data, "storage_path", "storagePath", "url", default="")
        fmt = _pick(data, "format", default=None)
        if fmt is None:
            fmt = storage_path.rsplit('.', 1)[-1].lower() if '.' in storage_path else "woff2"
        return cls(storage_path, fmt, _pick(data, "weight", default=400), _pick(data, "style", default="normal"))


@dataclass
class Typeface:
    family: str
    role: str = "text"
    id: Optional[str] = None
    fallback: str = ""
    source_type: str = "custom"
    weights: List[Union[int, str]] = field(default_factory=lambda: [400])
    is_variable: bool = False
    font_files: List[FontFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Typeface':
        return cls(
            family=_pick(data, "family", "name", default=""),
            role=_pick(data, "role", default="text"),
            id=_pick(data, "id"),
            fallback=_pick(data, "fallback", default=""),
            source_type=_pick(data, "source_type", "sourceType", default="custom"),
            weights=list(_pick(data, "weights", default=[400])),
            is_variable=bool(_pick(data, "is_variable", "isVariable", default=False)),
            font_files=[FontFile.from_dict(f) for f in _pick(data, "font_files", "fontFiles", default=[])],
        )


@dataclass
class TypographyRole:
    role_name: str
    typeface_role: str = "text"
    font_size: Optional[str] = None
    font_weight: Optional[Union[int, str]] = None
    line_height: Optional[Union[float, str]] = None
    letter_spacing: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TypographyRole':
        return cls(
            role_name=_pick(data, "role_name", "roleName", "name", default=""),
            typeface_role=_pick(data, "typeface_role", "typefaceRole", default="text"),
            font_size=_pick(data, "font_size", "fontSize"),
            font_weight=_pick(data, "font_weight", "fontWeight"),
            line_height=_pick(data, "line_height", "lineHeight"),
            letter_spacing=_pick(data, "letter_spacing", "letterSpacing"),
        )


@dataclass
class Theme:
    name: str
    id: Optional[str] = None
    slug: str = ""
    is_default: bool = False
    description: str = ""
    tokens: List[Token] = field(default_factory=list)
    typefaces: List[Typeface] = field(default_factory=list)
    typography_roles: List[TypographyRole] = field(default_factory=list)

    def __post_init__(self):
        if not self.slug:
            self.slug = slugify(self.name)

    def typeface_for_role(self, role: str) -> Optional[Typeface]:
        for typeface in self.typefaces:
            if typeface.role == role:
                return typeface
        return None

    @property
    def token_paths(self) -> List[str]:
        return [token.path for token in self.tokens]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Theme':
        theme_id = _pick(data, "id")
        tokens = []
        for index, raw in enumerate(_pick(data, "tokens", default=[])):
            token = Token.from_dict(raw)
            if token.theme_id is None:
                token.theme_id = theme_id
            if "sort_order" not in raw and "sortOrder" not in raw:
                token.sort_order = index
            tokens.append(token)
        return cls(
            name=_pick(data, "name", default="Untitled"),
            id=theme_id,
            slug=_pick(data, "slug", default=""),
            is_default=bool(_pick(data, "is_default", "isDefault", default=False)),
            description=_pick(data, "description", default=""),
            tokens=tokens,
            typefaces=[Typeface.from_dict(t) for t in _pick(data, "typefaces", default=[])],
            typography_roles=[TypographyRole.from_dict(r)
                              for r in _pick(data, "typography_roles", "typographyRoles", default=[])],
        )


@dataclass
class ComponentProp:
    name: str
    type: str = "any"
    default: Any = None
    required: bool = False
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentProp':
        return cls(
            name=_pick(data, "name", default=""),
            type=_pick(data, "type", default="any"),
            default=data.get("default"),
            required=bool(data.get("required", False)),
            description=_pick(data, "description", default=""),
        )


@dataclass
class ComponentVariant:
    name: str
    props: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentVariant':
        return cls(_pick(data, "name", default=""), dict(data.get("props") or {}),
                   _pick(data, "description", default=""))


@dataclass
class ComponentExample:
    title: str
    code: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentExample':
        return cls(_pick(data, "title", default="Example"), _pick(data, "code", default=""),
                   _pick(data, "description", default=""))


class ComponentStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


@dataclass
class Component:
    name: str
    id: Optional[str] = None
    slug: str = ""
    description: str = ""
    category: str = "other"
    status: ComponentStatus = ComponentStatus.PUBLISHED
    code: str = ""
    props: List[ComponentProp] = field(default_factory=list)
    variants: List[ComponentVariant] = field(default_factory=list)
    linked_tokens: List[str] = field(default_factory=list)
    examples: List[ComponentExample] = field(default_factory=list)

    def __post_init__(self):
        if not self.slug:
            self.slug = slugify(self.name)
        if not isinstance(self.status, ComponentStatus):
            self.status = ComponentStatus(str(self.status).lower())

    @property
    def is_published(self) -> bool:
        return self.status == ComponentStatus.PUBLISHED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Component':
        return cls(
            name=_pick(data, "name", default="Component"),
            id=_pick(data, "id"),
            slug=_pick(data, "slug", default=""),
            description=_pick(data, "description", default=""),
            category=_pick(data, "category", default="other"),
            status=_pick(data, "status", default="published"),
            code=_pick(data, "code", default=""),
            props=[ComponentProp.from_dict(p) for p in _pick(data, "props", default=[])],
            variants=[ComponentVariant.from_dict(v) for v in _pick(data, "variants", default=[])],
            linked_tokens=list(_pick(data, "linked_tokens", "linkedTokens", default=[])),
            examples=[ComponentExample.from_dict(e)
                      for e in _pick(data, "examples", "component_examples", default=[])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "category": self.category,
            "props": [vars(prop).copy() for prop in self.props],
            "variants": [vars(variant).copy() for variant in self.variants],
            "code": self.code,
            "linked_tokens": list(self.linked_tokens),
            "examples": [vars(example).copy() for example in self.examples],
        }


@dataclass(frozen=True)
class BinaryFileRef:
    """Opaque reference to binary content (font files) carried through a file map."""
    source: str
    type: str = "binary"

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.source, "type": self.type}


FileContent = Union[str, BinaryFileRef]
FileMap = Dict[str, FileContent]


@dataclass
class ParseResult:
    tokens: List[Token] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.tokens)


@dataclass
class PackageRequest:
    theme_ids: List[str]
    component_ids: List[str] = field(default_factory=list)
    formats: List[str] = field(default_factory=lambda: ["all"])
    project_name: str = "design-system"
    version: str = "1.0.0"
    generated_at: Optional[str] = None


@dataclass
class PackageResult:
    files: FileMap = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    project_name: str = "design-system"
    version: str = "1.0.0"

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def success(self) -> bool:
        return not self.errors
