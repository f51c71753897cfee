"""
Persistence collaborators for the package assembler.

Both repositories expose ``get_theme(id)`` and ``get_component(id)`` and
raise ``KeyError`` for unknown ids.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import chardet
import yaml

from ..core.models import Component, Theme

logger = logging.getLogger(__name__)

DATA_SUFFIXES = ('.json', '.yaml', '.yml')


def read_text(path: Union[str, Path]) -> str:
    """Read a file as text, detecting the encoding when it is not UTF-8."""
    raw = Path(path).read_bytes()
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        detected = chardet.detect(raw)
        encoding = detected.get('encoding') or 'latin-1'
        logger.debug(f"{path}: decoding as {encoding} (confidence {detected.get('confidence')})")
        return raw.decode(encoding, errors='replace')


def load_document(path: Union[str, Path]) -> Any:
    """Parse a JSON or YAML file."""
    path = Path(path)
    text = read_text(path)
    if path.suffix.lower() in ('.yaml', '.yml'):
        return yaml.safe_load(text)
    return json.loads(text)


class InMemoryRepository:
    """Repository over themes and components already held in memory."""

    def __init__(self, themes: Optional[Iterable[Theme]] = None,
                 components: Optional[Iterable[Component]] = None):
        self.themes: Dict[str, Theme] = {}
        self.components: Dict[str, Component] = {}
        for theme in themes or []:
            self.add_theme(theme)
        for component in components or []:
            self.add_component(component)

    def add_theme(self, theme: Theme) -> None:
        self.themes[theme.id or theme.slug] = theme

    def add_component(self, component: Component) -> None:
        self.components[component.id or component.slug] = component

    def get_theme(self, theme_id: str) -> Theme:
        if theme_id in self.themes:
            return self.themes[theme_id]
        for theme in self.themes.values():
            if theme.slug == theme_id:
                return theme
        raise KeyError(theme_id)

    def get_component(self, component_id: str) -> Component:
        if component_id in self.components:
            return self.components[component_id]
        for component in self.components.values():
            if component.slug == component_id:
                return component
        raise KeyError(component_id)

    def theme_ids(self) -> List[str]:
        return list(self.themes)

    def component_ids(self) -> List[str]:
        return list(self.components)


class JsonRepository(InMemoryRepository):
    """
    Repository backed by a data directory::

        data_dir/
            themes/<theme>.json|yaml
            components/<component>.json|yaml

    A theme file holds one theme record; a component file holds one
    component record or a list of them. Records without an ``id`` are
    addressed by slug. Files that cannot be parsed are logged and skipped.
    """

    def __init__(self, data_dir: Union[str, Path]):
        super().__init__()
        self.data_dir = Path(data_dir)
        if not self.data_dir.is_dir():
            raise FileNotFoundError(f"Data directory not found: {self.data_dir}")
        for record in self._records("themes"):
            self.add_theme(Theme.from_dict(record))
        for record in self._records("components"):
            self.add_component(Component.from_dict(record))
        logger.debug(f"Loaded {len(self.themes)} themes and {len(self.components)} components "
                     f"from {self.data_dir}")

    def _records(self, folder: str) -> List[Dict[str, Any]]:
        directory = self.data_dir / folder
        if not directory.is_dir():
            return []
        records = []
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() not in DATA_SUFFIXES:
                continue
            try:
                document = load_document(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Skipping {path}: {e}")
                continue
            items = document if isinstance(document, list) else [document]
            records.extend(item for item in items if isinstance(item, dict))
        return records
