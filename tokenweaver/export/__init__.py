# Generators and package assembly for TokenWeaver

from .formats import BaseGenerator, ExportContext, GeneratorOptions

from .stylesheets import (
    generate_css, generate_multi_theme_css, generate_scss, generate_font_face_css,
    font_files_to_include, CSSGenerator, SCSSGenerator, FontsGenerator
)

from .data import generate_json, generate_tailwind, JSONGenerator, TailwindGenerator

from .ai_context import (
    generate_llms_txt, generate_cursor_rules, generate_claude_md,
    generate_project_knowledge, generate_claude_skill
)

from .mcp_scaffold import generate_mcp_server, MCPServerGenerator

from .package import (
    GeneratorRegistry, PackageAssembler, PackageCollisionError, ComponentsGenerator
)

from .archive import write_directory, write_zip

__all__ = [
    'BaseGenerator', 'ExportContext', 'GeneratorOptions',
    'generate_css', 'generate_multi_theme_css', 'generate_scss', 'generate_font_face_css',
    'font_files_to_include', 'CSSGenerator', 'SCSSGenerator', 'FontsGenerator',
    'generate_json', 'generate_tailwind', 'JSONGenerator', 'TailwindGenerator',
    'generate_llms_txt', 'generate_cursor_rules', 'generate_claude_md',
    'generate_project_knowledge', 'generate_claude_skill',
    'generate_mcp_server', 'MCPServerGenerator',
    'GeneratorRegistry', 'PackageAssembler', 'PackageCollisionError', 'ComponentsGenerator',
    'write_directory', 'write_zip'
]
