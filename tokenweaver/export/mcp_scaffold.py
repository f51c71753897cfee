"""
MCP integration-server scaffold.

Renders a small TypeScript package that serves the exported design system
over the Model Context Protocol. Source files come from the Jinja2 templates
in ``tokenweaver/templates/mcp_server``; the data files are the design system
snapshot serialized as JSON. Identical input renders byte-identical files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..core.json_utils import pretty_json
from ..core.models import CATEGORY_ORDER, Component, FileMap, Theme
from .data import json_value
from .formats import BaseGenerator, ExportContext, GeneratorOptions, published_components, sort_tokens

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "mcp_server"

# output path -> template name
SCAFFOLD_TEMPLATES = {
    "package.json": "package.json.j2",
    "tsconfig.json": "tsconfig.json.j2",
    "src/index.ts": "src/index.ts.j2",
    "src/server.ts": "src/server.ts.j2",
    "src/types.ts": "src/types.ts.j2",
    "src/tools/tokenTools.ts": "src/tools/tokenTools.ts.j2",
    "src/tools/componentTools.ts": "src/tools/componentTools.ts.j2",
    "README.md": "README.md.j2",
    ".gitignore": "gitignore.j2",
}

TOKEN_TOOLS = [
    ("get_token", "Get a design token by path, name or CSS variable"),
    ("list_tokens", "List tokens, optionally filtered by category or theme"),
    ("search_tokens", "Search tokens by path, name or value"),
    ("get_theme", "Get every token of one theme"),
]

COMPONENT_TOOLS = [
    ("get_component", "Get full documentation for a component"),
    ("list_components", "List components, optionally filtered by category"),
    ("get_component_code", "Get the source code of a component"),
    ("get_component_props", "Get the props and variants of a component"),
    ("search_components", "Search components by name, description or category"),
]

MCP_FILES = list(SCAFFOLD_TEMPLATES) + ["src/data/tokens.json", "src/data/components.json", "design-system.json"]

_env: Optional[Environment] = None


def create_template_env(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Jinja2 environment for the scaffold templates."""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["json"] = lambda value: json.dumps(value, ensure_ascii=False)
    return env


def get_template_env() -> Environment:
    global _env
    if _env is None:
        _env = create_template_env()
    return _env


def build_design_system(themes: List[Theme], components: List[Component],
                        options: GeneratorOptions) -> Dict[str, Any]:
    """The ``design-system.json`` snapshot the server reads at startup."""
    return {
        "name": options.title,
        "version": options.version,
        "generatedAt": options.timestamp,
        "themes": [{"name": theme.name, "slug": theme.slug, "isDefault": theme.is_default} for theme in themes],
        "tokens": [{
            "themeId": theme.id,
            "themeName": theme.name,
            "path": token.path,
            "name": token.name,
            "category": token.category.value,
            "type": token.type,
            "value": json_value(token),
            "css_variable": token.css_variable,
        } for theme in themes for token in sort_tokens(theme.tokens)],
        "components": [component.to_dict() for component in published_components(components)],
    }


def generate_mcp_server(themes: List[Theme], components: List[Component],
                        options: Optional[GeneratorOptions] = None) -> Dict[str, str]:
    """
    Render the MCP server package.

    Args:
        themes: Themes to serve; all of their tokens are included.
        components: Components to serve; only published ones are kept.
        options: Project name, version and ``generated_at`` parameterize the output.

    Returns:
        Mapping of package-relative paths to file contents.
    """
    options = options or GeneratorOptions()
    design_system = build_design_system(themes, components, options)
    template_vars = {
        "package_name": f"{options.slug}-mcp",
        "title": options.title,
        "version": options.version,
        "generated_at": design_system["generatedAt"],
        "token_count": len(design_system["tokens"]),
        "theme_count": len(design_system["themes"]),
        "component_count": len(design_system["components"]),
        "categories": [category.value for category in CATEGORY_ORDER],
        "token_tools": TOKEN_TOOLS,
        "component_tools": COMPONENT_TOOLS,
    }

    env = get_template_env()
    files = {path: env.get_template(name).render(**template_vars)
             for path, name in SCAFFOLD_TEMPLATES.items()}
    files["src/data/tokens.json"] = pretty_json({
        "themes": design_system["themes"],
        "tokens": design_system["tokens"],
    })
    files["src/data/components.json"] = pretty_json({"components": design_system["components"]})
    files["design-system.json"] = pretty_json(design_system)

    logger.debug(f"MCP scaffold rendered: {len(files)} files, {template_vars['token_count']} tokens")
    return files


class MCPServerGenerator(BaseGenerator):
    """MCP server scaffold under mcp-server/."""

    @property
    def format_id(self) -> str:
        return "mcp-server"

    @property
    def destinations(self) -> List[str]:
        return ["mcp-server/"]

    def generate(self, context: ExportContext) -> FileMap:
        files = generate_mcp_server(context.themes, context.components, self.options)
        return {f"mcp-server/{path}": content for path, content in files.items()}
