import json
import zipfile
from typing import List

import pytest

from tokenweaver.core.models import BinaryFileRef, Component, PackageRequest, Theme
from tokenweaver.core.normalizer import parse_tokens
from tokenweaver.export.archive import write_directory, write_zip
from tokenweaver.export.formats import BaseGenerator
from tokenweaver.export.package import (
    DEFAULT_GENERATORS, GeneratorRegistry, PackageAssembler, PackageCollisionError
)
from tokenweaver.export.stylesheets import CSSGenerator
from tokenweaver.store.repository import InMemoryRepository

FIXED_TIMESTAMP = "2024-05-01T12:00:00Z"


class BrokenGenerator(BaseGenerator):
    """Always fails."""

    @property
    def format_id(self) -> str:
        return "broken"

    @property
    def destinations(self) -> List[str]:
        return ["broken/"]

    def generate(self, context):
        raise RuntimeError("boom")


class ReadmeWriter(BaseGenerator):
    """Writes a path reserved for the package itself."""

    @property
    def format_id(self) -> str:
        return "readme-writer"

    @property
    def destinations(self) -> List[str]:
        return ["extras/"]

    def generate(self, context):
        return {"README.md": "# mine\n"}


class DistClash(BaseGenerator):
    """Claims the whole dist folder."""

    @property
    def format_id(self) -> str:
        return "dist-clash"

    @property
    def destinations(self) -> List[str]:
        return ["dist/"]

    def generate(self, context):
        return {}


def make_request(**changes):
    values = dict(theme_ids=["light", "dark"], component_ids=["button", "secret"], formats=["all"],
                  project_name="acme-ui", version="2.1.0", generated_at=FIXED_TIMESTAMP)
    values.update(changes)
    return PackageRequest(**values)


class TestGeneratorRegistry:
    """Test format registration and resolution."""

    def test_default_formats(self):
        registry = GeneratorRegistry()
        assert registry.get_available_formats() == [
            "css", "json", "tailwind", "scss", "llms-txt", "cursor-rules", "claude-md",
            "project-knowledge", "mcp-server", "claude-skill", "components", "fonts",
        ]

    def test_overlapping_destinations_rejected(self):
        with pytest.raises(ValueError):
            GeneratorRegistry([CSSGenerator, DistClash])

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValueError):
            GeneratorRegistry([CSSGenerator, CSSGenerator])

    def test_resolve(self):
        registry = GeneratorRegistry()
        known, unknown = registry.resolve(["css", "all", "nope", "nope"])
        assert known[0] == "css"
        assert sorted(known) == sorted(registry.get_available_formats())
        assert unknown == ["nope"]

    def test_destinations(self):
        assert GeneratorRegistry().destinations("mcp-server") == ["mcp-server/"]


class TestPackageAssembler:
    """Test package assembly end to end."""

    def test_full_package(self, repository):
        result = PackageAssembler(repository).build_package(make_request())
        assert result.success
        assert result.warnings == []
        for path in ("LLMS.txt", "package.json", "README.md", "dist/tokens.css", "dist/themes/dark.json",
                     "mcp-server/package.json", "skill/SKILL.md", ".cursor/rules/design-system.mdc",
                     "CLAUDE.md", "project-knowledge.txt", "components/button.jsx"):
            assert path in result.files
        assert result.files["fonts/brand-sans-bold.woff2"] == BinaryFileRef("fonts/brand-sans-bold.woff2")
        assert "components/secret-panel.jsx" not in result.files

    def test_package_json(self, repository):
        result = PackageAssembler(repository).build_package(make_request())
        package = json.loads(result.files["package.json"])
        assert package == {
            "name": "acme-ui",
            "version": "2.1.0",
            "description": "Acme Ui design system",
            "exports": {
                "./tokens.css": "./dist/tokens.css",
                "./tokens.json": "./dist/tokens.json",
                "./tailwind.config": "./dist/tailwind.config.js",
                "./fonts.css": "./dist/fonts.css",
            },
        }

    def test_readme(self, repository):
        readme = PackageAssembler(repository).build_package(make_request()).files["README.md"]
        assert readme.startswith("# Acme Ui Design System\n\nVersion 2.1.0. Generated 2024-05-01T12:00:00Z.\n")
        assert "- Light (default): 9 tokens\n" in readme
        assert "### css\n\nCSS custom properties for every theme, plus @font-face rules.\n" in readme
        assert "- `dist/tokens.css`\n" in readme

    def test_llms_only(self, repository):
        result = PackageAssembler(repository).build_package(make_request(formats=["llms-txt"]))
        assert set(result.files) == {"LLMS.txt", "package.json", "README.md"}
        assert "exports" not in json.loads(result.files["package.json"])

    def test_llms_always_present(self, repository):
        result = PackageAssembler(repository).build_package(make_request(formats=["css"]))
        assert "LLMS.txt" in result.files
        assert "mcp-server/package.json" not in result.files

    def test_unknown_format(self, repository):
        result = PackageAssembler(repository).build_package(make_request(formats=["css", "bogus"]))
        assert result.errors == ["Unknown format: bogus"]
        assert "dist/tokens.css" in result.files
        assert not result.success

    def test_generator_failure_is_isolated(self, repository):
        registry = GeneratorRegistry(DEFAULT_GENERATORS + [BrokenGenerator])
        result = PackageAssembler(repository, registry).build_package(make_request())
        assert result.errors == ["broken: boom"]
        assert "dist/tokens.css" in result.files
        assert "mcp-server/package.json" in result.files

    def test_reserved_path_collision(self, repository):
        registry = GeneratorRegistry(DEFAULT_GENERATORS + [ReadmeWriter])
        with pytest.raises(PackageCollisionError):
            PackageAssembler(repository, registry).build_package(make_request())

    def test_missing_theme_is_a_warning(self, repository):
        result = PackageAssembler(repository).build_package(make_request(theme_ids=["light", "ghost"]))
        assert "Theme 'ghost' could not be fetched and was skipped" in result.warnings
        assert "dist/tokens.css" in result.files

    def test_nothing_fetched(self, repository):
        with pytest.raises(ValueError):
            PackageAssembler(repository).build_package(make_request(theme_ids=["ghost"], component_ids=[]))

    def test_unknown_linked_token_warning(self, repository):
        repository.add_component(Component(name="Card", id="card", linked_tokens=["Color/Missing"]))
        result = PackageAssembler(repository).build_package(
            make_request(component_ids=["button", "card"]))
        assert result.warnings == ["Component 'Card' links unknown token 'Color/Missing'"]

    def test_non_string_font_family_does_not_abort_package(self):
        document = {"Typography": {"body": {"$type": "typography", "$value": {
            "fontFamily": {"family": 5}, "fontSize": "16px"}}}}
        theme = Theme(name="Light", id="light", is_default=True, tokens=parse_tokens(document, theme_id="light").tokens)
        result = PackageAssembler(InMemoryRepository(themes=[theme])).build_package(
            make_request(theme_ids=["light"], component_ids=[]))
        assert result.errors == []
        assert "--typography-body-family: 5;" in result.files["dist/tokens.css"]
        assert "LLMS.txt" in result.files

    def test_idempotent_with_fixed_timestamp(self, repository):
        assembler = PackageAssembler(repository)
        first = assembler.build_package(make_request())
        second = assembler.build_package(make_request())
        assert first.files == second.files

    def test_single_timestamp_shared(self, repository):
        result = PackageAssembler(repository).build_package(make_request(generated_at=None))
        design_system = json.loads(result.files["mcp-server/design-system.json"])
        skill_tokens = json.loads(result.files["skill/tokens.json"])
        assert design_system["generatedAt"] == skill_tokens["generatedAt"]
        assert f"> Generated: {design_system['generatedAt']}\n" in result.files["LLMS.txt"]


class TestArchive:
    """Test writing packages to disk."""

    def setup_method(self):
        self.files = {
            "README.md": "# Readme\n",
            "dist/tokens.css": ":root {\n}\n",
            "fonts/brand.woff2": BinaryFileRef("uploads/brand.woff2"),
            "fonts/missing.woff": BinaryFileRef("uploads/missing.woff"),
        }

    def make_font_root(self, tmp_path):
        root = tmp_path / "fonts-src"
        (root / "uploads").mkdir(parents=True)
        (root / "uploads" / "brand.woff2").write_bytes(b"wOF2data")
        return root

    def test_write_directory(self, tmp_path):
        out = tmp_path / "out"
        written = write_directory(self.files, out, self.make_font_root(tmp_path))
        assert written == 3
        assert (out / "README.md").read_text(encoding="utf-8") == "# Readme\n"
        assert (out / "dist" / "tokens.css").exists()
        assert (out / "fonts" / "brand.woff2").read_bytes() == b"wOF2data"
        assert not (out / "fonts" / "missing.woff").exists()

    def test_write_zip(self, tmp_path):
        zip_path = tmp_path / "package.zip"
        written = write_zip(self.files, zip_path, self.make_font_root(tmp_path))
        assert written == 3
        with zipfile.ZipFile(zip_path) as zf:
            assert sorted(zf.namelist()) == ["README.md", "dist/tokens.css", "fonts/brand.woff2"]
            assert zf.read("fonts/brand.woff2") == b"wOF2data"

    def test_binary_without_font_root_is_skipped(self, tmp_path):
        assert write_directory(self.files, tmp_path / "out") == 2

    def test_rejects_escaping_paths(self, tmp_path):
        with pytest.raises(ValueError):
            write_directory({"../evil.txt": "x"}, tmp_path / "out")
