"""
TokenWeaver CLI - Command-line interface for design token ingestion and export
"""

import click
import sys
from collections import Counter
from pathlib import Path
import logging

from ..core.format_detector import detect_format
from ..core.json_utils import pretty_json
from ..core.models import PackageRequest, Theme
from ..core.normalizer import parse_tokens
from ..config.settings import SettingsManager
from ..export.archive import write_directory, write_zip
from ..export.package import EXPAND_ALL, GeneratorRegistry, PackageAssembler
from ..store.repository import InMemoryRepository, JsonRepository, load_document

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


def _load(path: Path):
    try:
        return load_document(path)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {path}: {e}")
        sys.exit(1)


def _single_file_repository(path: Path) -> InMemoryRepository:
    """Wrap a raw token export as a one-theme repository."""
    result = parse_tokens(_load(path), theme_id=path.stem)
    for error in result.errors:
        logger.warning(error)
    theme = Theme(name=path.stem, id=path.stem, is_default=True, tokens=result.tokens)
    return InMemoryRepository(themes=[theme])


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(package_name="tokenweaver")
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='YAML settings file (default: ~/.tokenweaver.yaml).')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging.')
@click.pass_context
def main(ctx, config_file, verbose):
    """
    TokenWeaver CLI: Design token ingestion and multi-format export.

    Normalizes design-tool token exports and packages a design system as
    stylesheets, build configs, AI assistant context and an MCP server.
    """
    manager = SettingsManager(Path(config_file) if config_file else None)
    settings = manager.resolve()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.getLogger().setLevel(level)
    ctx.obj = settings


@main.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def detect(file):
    """Print the detected format of a token export."""
    document = _load(file)
    click.echo(detect_format(document).value)


@main.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--theme-id', help='Theme id stamped on every token.')
@click.option('--mode', help='Style-Dictionary mode to read (default: first mode).')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write normalized tokens to this file instead of stdout.')
@click.option('--strict', is_flag=True, help='Exit with an error when any token was skipped.')
def parse(file, theme_id, mode, output, strict):
    """Normalize a token export into canonical token records."""
    result = parse_tokens(_load(file), theme_id=theme_id, mode=mode)
    for error in result.errors:
        logger.warning(error)
    for warning in result.warnings:
        logger.info(warning)

    document = {
        "metadata": result.metadata,
        "tokens": [token.to_dict() for token in result.tokens],
        "errors": result.errors,
        "warnings": result.warnings,
    }
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(pretty_json(document), encoding='utf-8')
        logger.info(f"Wrote {len(result.tokens)} tokens to {output}")
    else:
        click.echo(pretty_json(document), nl=False)

    counts = Counter(token.category.label for token in result.tokens)
    summary = ", ".join(f"{label}: {count}" for label, count in counts.items()) or "no tokens"
    click.echo(f"Format: {result.metadata.get('format')} | {summary} | skipped: {len(result.errors)}", err=True)

    if strict and result.errors:
        logger.error(f"{len(result.errors)} token(s) could not be parsed")
        sys.exit(1)


@main.command()
@click.argument('source', type=click.Path(exists=True, path_type=Path))
@click.option('--output', '-o', required=True, type=click.Path(path_type=Path), help='Output directory, or ZIP file with --zip.')
@click.option('--theme', '-t', 'themes', multiple=True, help='Theme id to export (default: all themes).')
@click.option('--component', '-c', 'components', multiple=True, help='Component id to export (default: all components).')
@click.option('--format', '-f', 'formats', multiple=True, help='Format id to generate; repeatable (default: all).')
@click.option('--zip', 'as_zip', is_flag=True, help='Write a ZIP archive instead of a directory.')
@click.option('--project-name', help='Project name used in package metadata.')
@click.option('--version', 'package_version', help='Package version.')
@click.option('--generated-at', help='Fixed generation timestamp for reproducible output.')
@click.option('--font-root', type=click.Path(file_okay=False), help='Directory holding custom font files.')
@click.pass_obj
def export(settings, source, output, themes, components, formats, as_zip, project_name, package_version,
           generated_at, font_root):
    """Build a design system package from a data directory or a token file."""
    settings.update({
        "project_name": project_name,
        "version": package_version,
        "formats": list(formats),
        "font_root": font_root,
    })

    try:
        if source.is_dir():
            repository = JsonRepository(source)
        else:
            repository = _single_file_repository(source)

        request = PackageRequest(
            theme_ids=list(themes) or repository.theme_ids(),
            component_ids=list(components) or repository.component_ids(),
            formats=settings.formats,
            project_name=settings.project_name,
            version=settings.version,
            generated_at=generated_at,
        )
        result = PackageAssembler(repository).build_package(request)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error(f"Export failed: {e}")
        sys.exit(1)

    for warning in result.warnings:
        logger.warning(warning)
    for error in result.errors:
        logger.error(error)

    if as_zip:
        zip_path = output if output.suffix == '.zip' else output.with_suffix('.zip')
        written = write_zip(result.files, zip_path, settings.font_root)
        click.echo(f"Wrote {written} files to {zip_path}")
    else:
        written = write_directory(result.files, output, settings.font_root)
        click.echo(f"Wrote {written} files to {output}")


@main.command()
def formats():
    """List the available export formats."""
    registry = GeneratorRegistry()
    for format_id in registry.get_available_formats():
        destinations = ", ".join(registry.destinations(format_id))
        click.echo(f"{format_id:<18} {destinations}")
    click.echo(f"{' | '.join(EXPAND_ALL):<18} every format above")


if __name__ == '__main__':
    main()
