"""
Shared pieces of the generator layer: options, the generator base class and
the grouping helpers every output format relies on.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..core.models import (
    CATEGORY_ORDER, Component, FileMap, Theme, Token, TokenCategory, Typeface
)

JSON_FORMATS = ("flat", "nested", "w3c")


@dataclass
class GeneratorOptions:
    """Options shared by all generators. Each generator reads the ones it needs."""
    project_name: str = "design-system"
    version: str = "1.0.0"
    generated_at: Optional[str] = None
    # stylesheets
    selector: str = ":root"
    scope: Optional[str] = None
    minify: bool = False
    include_comments: bool = True
    include_header: bool = False
    prefix: str = ""
    use_maps: bool = True
    font_path: str = "./fonts"
    # data
    json_format: str = "nested"
    include_metadata: bool = False
    # build config
    use_css_variables: bool = True
    # AI context
    globs: List[str] = field(default_factory=lambda: ["**/*.tsx", "**/*.jsx", "**/*.css"])

    @property
    def timestamp(self) -> str:
        """Fixed ``generated_at`` when given, otherwise the current UTC time."""
        if self.generated_at:
            return self.generated_at
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    @property
    def date(self) -> str:
        return self.timestamp[:10]

    @property
    def title(self) -> str:
        """Human readable project name for document headings."""
        return project_title(self.project_name)

    @property
    def slug(self) -> str:
        return re.sub(r'[^a-z0-9]+', '-', self.project_name.lower()).strip('-') or 'design-system'

    def with_changes(self, **changes) -> 'GeneratorOptions':
        return replace(self, **changes)

    def validate(self) -> None:
        if not (self.scope or self.selector or '').strip():
            raise ValueError("A CSS selector is required")
        if not self.project_name.strip():
            raise ValueError("Project name must not be empty")


@dataclass
class ExportContext:
    """Immutable snapshot handed to generators for one export call."""
    themes: List[Theme] = field(default_factory=list)
    components: List[Component] = field(default_factory=list)
    options: GeneratorOptions = field(default_factory=GeneratorOptions)

    @property
    def default_theme(self) -> Optional[Theme]:
        return default_theme(self.themes)

    @property
    def tokens(self) -> List[Token]:
        theme = self.default_theme
        return list(theme.tokens) if theme else []

    @property
    def typefaces(self) -> List[Typeface]:
        seen = set()
        typefaces = []
        for theme in self.themes:
            for typeface in theme.typefaces:
                key = (typeface.family, typeface.source_type, typeface.role)
                if key not in seen:
                    seen.add(key)
                    typefaces.append(typeface)
        return typefaces

    @property
    def published_components(self) -> List[Component]:
        return published_components(self.components)


class BaseGenerator(ABC):
    """Base class for all package generators."""

    def __init__(self, options: GeneratorOptions = None):
        self.options = options or GeneratorOptions()

    @abstractmethod
    def generate(self, context: ExportContext) -> FileMap:
        """Produce this format's files, keyed by path relative to the package root."""
        pass

    @property
    @abstractmethod
    def format_id(self) -> str:
        """Identifier used in package requests."""
        pass

    @property
    @abstractmethod
    def destinations(self) -> List[str]:
        """Path prefixes or exact file names this generator writes to."""
        pass

    @property
    def description(self) -> str:
        return self.__class__.__doc__.strip().splitlines()[0] if self.__class__.__doc__ else self.format_id


def project_title(project_name: str) -> str:
    words = re.split(r'[-_\s]+', project_name.strip())
    return ' '.join(word[:1].upper() + word[1:] for word in words if word) or 'Design System'


def default_theme(themes: List[Theme]) -> Optional[Theme]:
    for theme in themes:
        if theme.is_default:
            return theme
    return themes[0] if themes else None


def published_components(components: List[Component]) -> List[Component]:
    return [component for component in components if component.is_published]


def sort_tokens(tokens: List[Token]) -> List[Token]:
    return sorted(tokens, key=lambda token: (token.sort_order, token.name))


def group_by_category(tokens: List[Token]) -> Dict[TokenCategory, List[Token]]:
    """Non-empty category buckets in stylesheet order, each sorted by sort order then name."""
    buckets: Dict[TokenCategory, List[Token]] = {}
    for token in tokens:
        buckets.setdefault(token.category, []).append(token)
    return {category: sort_tokens(buckets[category]) for category in CATEGORY_ORDER if category in buckets}


def tokens_in(tokens: List[Token], category: TokenCategory) -> List[Token]:
    return sort_tokens([token for token in tokens if token.category == category])


def props_summary(component: Component, limit: Optional[int] = None) -> str:
    names = [prop.name for prop in component.props if prop.name]
    if limit is not None and len(names) > limit:
        names = names[:limit] + ["..."]
    return ", ".join(names) if names else "-"


def md_cell(text: str) -> str:
    """Escape a value for use inside a markdown table cell."""
    return str(text).replace("|", "\\|").replace("\n", " ")
