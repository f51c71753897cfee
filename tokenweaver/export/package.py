"""
Package assembly: resolves requested formats, runs each generator in
isolation and merges their outputs into one file map.
"""

import logging
from typing import Dict, List, Optional, Tuple, Type

from ..core.json_utils import pretty_json
from ..core.models import Component, FileMap, PackageRequest, PackageResult, Theme
from .ai_context import (
    ClaudeMdGenerator, ClaudeSkillGenerator, CursorRulesGenerator, LLMSTxtGenerator,
    ProjectKnowledgeGenerator
)
from .data import JSONGenerator, TailwindGenerator
from .formats import BaseGenerator, ExportContext, GeneratorOptions, published_components
from .mcp_scaffold import MCPServerGenerator
from .stylesheets import CSSGenerator, FontsGenerator, SCSSGenerator

logger = logging.getLogger(__name__)

EXPAND_ALL = ("all", "full-package")
REQUIRED_FILES = ("LLMS.txt", "package.json", "README.md")


class PackageCollisionError(RuntimeError):
    """Two generators produced the same output path."""


class ComponentsGenerator(BaseGenerator):
    """Component source files for published components that carry code."""

    @property
    def format_id(self) -> str:
        return "components"

    @property
    def destinations(self) -> List[str]:
        return ["components/"]

    def generate(self, context: ExportContext) -> FileMap:
        files: FileMap = {}
        for component in context.published_components:
            if component.code.strip():
                files[f"components/{component.slug}.jsx"] = component.code.rstrip("\n") + "\n"
        return files


def _overlaps(first: str, second: str) -> bool:
    if first == second:
        return True
    if first.endswith('/') and second.startswith(first):
        return True
    return second.endswith('/') and first.startswith(second)


class GeneratorRegistry:
    """Maps format ids to generator classes; destinations must stay disjoint."""

    def __init__(self, generators: Optional[List[Type[BaseGenerator]]] = None):
        self.generators: Dict[str, Type[BaseGenerator]] = {}
        self._destinations: Dict[str, List[str]] = {}
        for generator_class in generators if generators is not None else DEFAULT_GENERATORS:
            self.register(generator_class)

    def register(self, generator_class: Type[BaseGenerator]) -> None:
        probe = generator_class()
        format_id = probe.format_id
        if format_id in self.generators or format_id in EXPAND_ALL:
            raise ValueError(f"Format '{format_id}' is already registered")
        for other_id, other_destinations in self._destinations.items():
            for destination in probe.destinations:
                for other in other_destinations:
                    if _overlaps(destination, other):
                        raise ValueError(
                            f"Destination '{destination}' of '{format_id}' overlaps '{other}' of '{other_id}'"
                        )
        self.generators[format_id] = generator_class
        self._destinations[format_id] = list(probe.destinations)

    def get_available_formats(self) -> List[str]:
        """Get list of registered format ids."""
        return list(self.generators.keys())

    def destinations(self, format_id: str) -> List[str]:
        return list(self._destinations[format_id])

    def create(self, format_id: str, options: GeneratorOptions) -> BaseGenerator:
        return self.generators[format_id](options)

    def resolve(self, formats: List[str]) -> Tuple[List[str], List[str]]:
        """Expand ``all``/``full-package`` and split requested ids into (known, unknown)."""
        resolved: List[str] = []
        unknown: List[str] = []
        for format_id in formats:
            if format_id in EXPAND_ALL:
                candidates = self.get_available_formats()
            elif format_id in self.generators:
                candidates = [format_id]
            else:
                if format_id not in unknown:
                    unknown.append(format_id)
                continue
            for candidate in candidates:
                if candidate not in resolved:
                    resolved.append(candidate)
        return resolved, unknown


DEFAULT_GENERATORS: List[Type[BaseGenerator]] = [
    CSSGenerator,
    JSONGenerator,
    TailwindGenerator,
    SCSSGenerator,
    LLMSTxtGenerator,
    CursorRulesGenerator,
    ClaudeMdGenerator,
    ProjectKnowledgeGenerator,
    MCPServerGenerator,
    ClaudeSkillGenerator,
    ComponentsGenerator,
    FontsGenerator,
]


class PackageAssembler:
    """
    Builds a downloadable design system package.

    Themes and components are fetched through ``repository``, which must
    provide ``get_theme(id)`` and ``get_component(id)`` raising ``KeyError``
    for unknown ids.
    """

    def __init__(self, repository, registry: Optional[GeneratorRegistry] = None):
        self.repository = repository
        self.registry = registry or GeneratorRegistry()

    def build_package(self, request: PackageRequest) -> PackageResult:
        """
        Assemble the package described by ``request``.

        Raises:
            ValueError: None of the requested themes or components could be fetched.
            RuntimeError: One of the always-present files could not be produced.
            PackageCollisionError: Two generators wrote the same path.
        """
        result = PackageResult(project_name=request.project_name, version=request.version)

        formats, unknown = self.registry.resolve(list(request.formats))
        for format_id in unknown:
            result.errors.append(f"Unknown format: {format_id}")

        themes, components = self._fetch(request, result.warnings)
        if not themes and not components:
            raise ValueError("None of the requested themes or components could be fetched")
        self._check_linked_tokens(themes, components, result.warnings)

        options = GeneratorOptions(project_name=request.project_name, version=request.version)
        options.generated_at = request.generated_at or options.timestamp
        context = ExportContext(themes=themes, components=components, options=options)

        produced: Dict[str, List[str]] = {}
        try:
            llms = self.registry.create("llms-txt", options).generate(context)
        except Exception as e:
            raise RuntimeError(f"Failed to generate LLMS.txt: {e}") from e
        self._merge(result.files, llms, "llms-txt", produced)

        for format_id in formats:
            if format_id == "llms-txt":
                continue
            generator = self.registry.create(format_id, options)
            try:
                files = generator.generate(context)
            except Exception as e:
                logger.warning(f"Generator '{format_id}' failed: {e}")
                result.errors.append(f"{format_id}: {e}")
                continue
            self._merge(result.files, files, format_id, produced)

        try:
            result.files["package.json"] = self._package_json(options, result.files)
            result.files["README.md"] = self._readme(options, context, produced)
        except Exception as e:
            raise RuntimeError(f"Failed to generate package metadata: {e}") from e

        logger.info(f"Package '{request.project_name}' built: {result.file_count} files, "
                    f"{len(result.errors)} errors, {len(result.warnings)} warnings")
        return result

    def _fetch(self, request: PackageRequest, warnings: List[str]) -> Tuple[List[Theme], List[Component]]:
        themes: List[Theme] = []
        for theme_id in request.theme_ids:
            try:
                themes.append(self.repository.get_theme(theme_id))
            except (KeyError, ValueError, OSError) as e:
                logger.warning(f"Could not fetch theme '{theme_id}': {e}")
                warnings.append(f"Theme '{theme_id}' could not be fetched and was skipped")

        components: List[Component] = []
        for component_id in request.component_ids:
            try:
                components.append(self.repository.get_component(component_id))
            except (KeyError, ValueError, OSError) as e:
                logger.warning(f"Could not fetch component '{component_id}': {e}")
                warnings.append(f"Component '{component_id}' could not be fetched and was skipped")
        return themes, components

    @staticmethod
    def _check_linked_tokens(themes: List[Theme], components: List[Component], warnings: List[str]) -> None:
        known = {path for theme in themes for path in theme.token_paths}
        for component in components:
            for path in component.linked_tokens:
                if path not in known:
                    warnings.append(f"Component '{component.name}' links unknown token '{path}'")

    @staticmethod
    def _merge(target: FileMap, files: FileMap, format_id: str, produced: Dict[str, List[str]]) -> None:
        for path in files:
            if path in target or path in REQUIRED_FILES[1:]:
                raise PackageCollisionError(f"'{format_id}' produced '{path}' which is already in the package")
        target.update(files)
        produced[format_id] = sorted(files)

    @staticmethod
    def _package_json(options: GeneratorOptions, files: FileMap) -> str:
        exports = {}
        for name, path in (("./tokens.css", "dist/tokens.css"), ("./tokens.json", "dist/tokens.json"),
                           ("./tailwind.config", "dist/tailwind.config.js"), ("./fonts.css", "dist/fonts.css")):
            if path in files:
                exports[name] = f"./{path}"
        document = {
            "name": options.slug,
            "version": options.version,
            "description": f"{options.title} design system",
        }
        if exports:
            document["exports"] = exports
        return pretty_json(document)

    def _readme(self, options: GeneratorOptions, context: ExportContext,
                produced: Dict[str, List[str]]) -> str:
        themes = context.themes
        readme = f"# {options.title} Design System\n\n"
        readme += f"Version {options.version}. Generated {options.timestamp}.\n\n"
        readme += "## Themes\n\n"
        if themes:
            for theme in themes:
                default = " (default)" if theme is context.default_theme else ""
                readme += f"- {theme.name}{default}: {len(theme.tokens)} tokens\n"
        else:
            readme += "No themes exported.\n"
        readme += f"\n{len(published_components(context.components))} published component(s).\n\n"

        readme += "## Contents\n\n"
        for format_id, paths in produced.items():
            if not paths:
                continue
            generator = self.registry.create(format_id, options)
            readme += f"### {format_id}\n\n{generator.description}\n\n"
            readme += "".join(f"- `{path}`\n" for path in paths) + "\n"

        readme += "## Usage\n\n"
        if "css" in produced:
            readme += "Import `dist/tokens.css` once at the root of your app and reference tokens with `var(--name)`.\n\n"
        readme += "Switch themes by setting `data-theme=\"<slug>\"` on a parent element.\n"
        return readme
