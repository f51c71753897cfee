import logging
import re
from typing import Dict, List, Optional

from ..core.models import BinaryFileRef, FileMap, Theme, Token, TokenCategory, Typeface
from ..core.values import (
    COMPOSITE_SUFFIXES, expand_composite_typography, responsive_typography_css, token_to_css_value
)
from .formats import BaseGenerator, ExportContext, GeneratorOptions, default_theme, group_by_category

logger = logging.getLogger(__name__)

FONT_FORMATS = {
    "woff2": "woff2",
    "woff": "woff",
    "ttf": "truetype",
    "otf": "opentype",
    "eot": "embedded-opentype",
    "svg": "svg",
}

SCSS_MAP_NAMES = {
    TokenCategory.COLOR: "colors",
    TokenCategory.TYPOGRAPHY: "typography",
    TokenCategory.SPACING: "spacing",
    TokenCategory.SHADOW: "shadows",
    TokenCategory.RADIUS: "radius",
    TokenCategory.GRID: "grid",
    TokenCategory.OTHER: "other",
}

SRC_SEPARATOR = ",\n       "

GET_TOKEN_FUNCTION = """// Utility function to get values from maps
@function get-token($map, $key) {
  @if map-has-key($map, $key) {
    @return map-get($map, $key);
  }
  @warn "Token '#{$key}' not found in map.";
  @return null;
}
"""


def _declarations(token: Token) -> List[tuple]:
    if token.is_composite_typography:
        expanded = expand_composite_typography(token)
        names = [f"{token.css_variable}-{suffix}" for suffix in COMPOSITE_SUFFIXES]
        return [(name, expanded[name]) for name in names if name in expanded]
    return [(token.css_variable, token_to_css_value(token))]


def minify_css(css: str) -> str:
    css = re.sub(r'/\*[\s\S]*?\*/', '', css)
    css = css.replace('\n', '')
    css = re.sub(r'\s{2,}', ' ', css)
    css = re.sub(r':\s', ':', css)
    css = re.sub(r';\s*}', '}', css)
    css = re.sub(r'\s*{\s*', '{', css)
    css = re.sub(r'}\s*', '}', css)
    return css.strip()


def generate_css(tokens: List[Token], options: Optional[GeneratorOptions] = None) -> str:
    """
    Custom properties for ``tokens`` in one selector block.

    Categories appear in fixed order, each optionally preceded by a comment;
    tokens inside a category are sorted by sort order then name. Composite
    typography tokens expand into their ``-family``/``-size``/... variables.
    """
    options = options or GeneratorOptions()
    options.validate()
    selector = options.scope or options.selector

    if not tokens:
        return f"{selector} {{\n  /* No tokens defined */\n}}\n"

    css = ""
    if options.include_header and not options.minify:
        css += f"/**\n * {options.title} Tokens\n * Generated: {options.date}\n */\n\n"

    css += f"{selector} {{\n"
    grouped = group_by_category(tokens)
    categories = list(grouped)
    for index, category in enumerate(categories):
        if options.include_comments:
            css += f"  /* {category.label} */\n"
        for token in grouped[category]:
            for name, value in _declarations(token):
                css += f"  {name}: {value};\n"
        if index < len(categories) - 1:
            css += "\n"
    css += "}\n"

    responsive = responsive_typography_css(tokens, selector)
    if responsive:
        css += "\n" + responsive

    if options.minify:
        css = minify_css(css)
    return css


def generate_multi_theme_css(themes: List[Theme], options: Optional[GeneratorOptions] = None) -> str:
    """One block per theme: the default theme on :root, others on [data-theme="slug"]."""
    options = options or GeneratorOptions()
    root_theme = default_theme(themes)
    blocks = []
    for index, theme in enumerate(themes):
        selector = ":root" if theme is root_theme else f'[data-theme="{theme.slug}"]'
        theme_options = options.with_changes(selector=selector, scope=None,
                                             include_header=options.include_header and index == 0)
        blocks.append(generate_css(theme.tokens, theme_options))
    if not blocks:
        return generate_css([], options)
    return "\n".join(blocks)


def scss_variable_name(css_variable: str, prefix: str = "") -> str:
    name = css_variable[2:]
    if prefix:
        return f"{prefix}-{name}"
    # SCSS identifiers cannot start with a digit
    return f"_{name}" if name[:1].isdigit() else name


def generate_scss(tokens: List[Token], options: Optional[GeneratorOptions] = None) -> str:
    """SCSS variables grouped by category, optionally followed by per-category maps."""
    options = options or GeneratorOptions()
    if not tokens:
        return "// No tokens defined\n"

    scss = ""
    if options.include_header:
        scss += f"// {options.title} Tokens\n// Generated: {options.date}\n\n"

    grouped = group_by_category(tokens)
    for category, category_tokens in grouped.items():
        scss += f"// {category.label}\n"
        for token in category_tokens:
            for name, value in _declarations(token):
                variable = scss_variable_name(name, options.prefix)
                scss += f"${variable}: {value};\n"
        scss += "\n"

    if options.use_maps:
        scss += "// Token Maps (for programmatic access)\n"
        for category, category_tokens in grouped.items():
            map_name = SCSS_MAP_NAMES[category]
            if options.prefix:
                map_name = f"{options.prefix}-{map_name}"
            entries = []
            for token in category_tokens:
                for name, _ in _declarations(token):
                    variable = scss_variable_name(name, options.prefix)
                    entries.append(f"  '{name[2:]}': ${variable}")
            scss += f"${map_name}: (\n" + ",\n".join(entries) + "\n);\n\n"
        scss += GET_TOKEN_FUNCTION
    return scss


def _google_fonts_url(typefaces: List[Typeface]) -> str:
    weights_by_family: Dict[str, set] = {}
    for typeface in typefaces:
        weights = weights_by_family.setdefault(typeface.family, set())
        weights.update(str(weight) for weight in (typeface.weights or [400]))
    families = []
    for family, weights in weights_by_family.items():
        ordered = sorted(weights, key=lambda w: (not w.isdigit(), int(w) if w.isdigit() else 0, w))
        families.append(f"family={family.replace(' ', '+')}:wght@{';'.join(ordered)}")
    return f"https://fonts.googleapis.com/css2?{'&'.join(families)}&display=swap"


def generate_font_face_css(typefaces: List[Typeface], options: Optional[GeneratorOptions] = None) -> str:
    """
    ``@font-face`` rules for custom typefaces plus a single Google Fonts import.

    Font files are grouped by (family, weight, style); each group becomes one
    rule listing every available format.
    """
    options = options or GeneratorOptions()
    font_path = options.font_path.rstrip('/')

    groups: Dict[tuple, List[str]] = {}
    google = []
    for typeface in typefaces:
        if typeface.source_type == "google":
            google.append(typeface)
            continue
        if typeface.source_type != "custom":
            continue
        for font_file in typeface.font_files:
            key = (typeface.family, str(font_file.weight), font_file.style or "normal")
            fmt = FONT_FORMATS.get(font_file.format.lower(), font_file.format)
            groups.setdefault(key, []).append(f"url('{font_path}/{font_file.filename}') format('{fmt}')")

    rules = []
    for (family, weight, style), sources in groups.items():
        rules.append(
            "@font-face {\n"
            f"  font-family: '{family}';\n"
            f"  font-style: {style};\n"
            f"  font-weight: {weight};\n"
            "  font-display: swap;\n"
            f"  src: {SRC_SEPARATOR.join(sources)};\n"
            "}\n"
        )

    css = "\n".join(rules)
    if google:
        css = f"@import url('{_google_fonts_url(google)}');\n" + ("\n" + css if css else "")
    return css


def font_files_to_include(typefaces: List[Typeface]) -> Dict[str, str]:
    """Package path -> storage path for every custom font file."""
    files: Dict[str, str] = {}
    for typeface in typefaces:
        if typeface.source_type != "custom":
            continue
        for font_file in typeface.font_files:
            files.setdefault(f"fonts/{font_file.filename}", font_file.storage_path)
    return files


class CSSGenerator(BaseGenerator):
    """CSS custom properties for every theme, plus @font-face rules."""

    @property
    def format_id(self) -> str:
        return "css"

    @property
    def destinations(self) -> List[str]:
        return ["dist/tokens.css", "dist/fonts.css"]

    def generate(self, context: ExportContext) -> FileMap:
        files: FileMap = {"dist/tokens.css": generate_multi_theme_css(context.themes, self.options)}
        typefaces = context.typefaces
        if typefaces:
            font_css = generate_font_face_css(typefaces, self.options.with_changes(font_path="../fonts"))
            if font_css:
                files["dist/fonts.css"] = font_css
        return files


class SCSSGenerator(BaseGenerator):
    """SCSS variables and SCSS maps for the default theme."""

    @property
    def format_id(self) -> str:
        return "scss"

    @property
    def destinations(self) -> List[str]:
        return ["dist/_tokens.scss", "dist/_tokens-maps.scss"]

    def generate(self, context: ExportContext) -> FileMap:
        tokens = context.tokens
        return {
            "dist/_tokens.scss": generate_scss(tokens, self.options.with_changes(use_maps=False)),
            "dist/_tokens-maps.scss": generate_scss(tokens, self.options.with_changes(use_maps=True)),
        }


class FontsGenerator(BaseGenerator):
    """Custom font files referenced as binary pass-through entries."""

    @property
    def format_id(self) -> str:
        return "fonts"

    @property
    def destinations(self) -> List[str]:
        return ["fonts/"]

    def generate(self, context: ExportContext) -> FileMap:
        return {path: BinaryFileRef(source)
                for path, source in font_files_to_include(context.typefaces).items()}
