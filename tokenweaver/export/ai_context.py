"""
AI assistant context documents.

Four renderings of the same design system at different depths (LLMS.txt,
Cursor rules, CLAUDE.md and a plain text project knowledge file) plus the
Claude skill bundle. Every document lists tokens first, then published
components, then usage guidelines, and is fitted into its byte budget by the
shared size-budget enforcer so that truncation always drops guidelines
before tokens.
"""

import json
import logging
from typing import Dict, List, Optional

from ..core.json_utils import pretty_json
from ..core.models import Component, FileMap, Theme, Token, TokenCategory
from ..core.size_budget import DocumentBudget, TruncationStyle, enforce_budget
from ..core.values import display_value, font_stack
from .data import json_value
from .formats import (
    BaseGenerator, ExportContext, GeneratorOptions, default_theme, md_cell, props_summary,
    published_components, sort_tokens, tokens_in
)

logger = logging.getLogger(__name__)

SIZE_VARIANT_NAMES = {"xs", "sm", "md", "lg", "xl"}

DOS = [
    "Use CSS variables for every color, spacing, radius and shadow value",
    "Reuse existing components before creating new ones",
    "Follow the typography scale for font sizes and weights",
    "Include hover, focus and active states on interactive elements",
    "Prefer semantic tokens (`--color-primary`) over palette tokens",
]

DONTS = [
    "Hardcode hex colors or pixel values",
    "Create one-off spacing or font sizes outside the scale",
    "Override component styles with inline values",
    "Mix tokens from different themes in one view",
]

BEST_PRACTICES = [
    "Start from the closest existing component and extend it through props",
    "Keep spacing on the spacing scale for padding, margins and gaps",
    "Check color contrast when combining foreground and background tokens",
    "Switch themes with the `data-theme` attribute instead of swapping values",
]

PROJECT_RULES = [
    ("Always use CSS variables, never hardcode values",
     "Example: color: var(--color-primary-500), not color: #3b82f6"),
    ("Use existing components, don't recreate",
     "Check the components list above before building new UI elements"),
    ("Maintain spacing consistency",
     "Use spacing tokens for all padding and margins"),
    ("Include interactive states",
     "Add hover, focus and active states for all interactive elements"),
    ("Follow the typography scale",
     "Use typography tokens for font sizes, line heights and font weights"),
]


def _options(options: Optional[GeneratorOptions]) -> GeneratorOptions:
    return options or GeneratorOptions()


def _tokens(themes: List[Theme]) -> List[Token]:
    theme = default_theme(themes)
    return list(theme.tokens) if theme else []


def _more(count: int, shown: int, noun: str, markdown: bool = True) -> str:
    if count <= shown:
        return ""
    text = f"...and {count - shown} more {noun}"
    return f"*{text}*\n" if markdown else f"{text}\n"


def _example_usage(component: Component) -> str:
    if component.examples and component.examples[0].code:
        first_line = component.examples[0].code.strip().splitlines()[0]
        return first_line[:120]
    return f"<{component.name.replace(' ', '')} />"


# ---------------------------------------------------------------------------
# LLMS.txt
# ---------------------------------------------------------------------------

def _llms_token_list(tokens: List[Token], limit: int) -> str:
    text = ""
    for token in tokens[:limit]:
        text += f"- `{token.css_variable}`: {display_value(token)}\n"
    text += _more(len(tokens), limit, "tokens")
    return text


def _llms_tokens(themes: List[Theme]) -> str:
    tokens = _tokens(themes)
    root = default_theme(themes)
    text = "## Design Tokens\n\n"

    text += "### Colors\n\n"
    if len(themes) > 1:
        for theme in themes:
            colors = tokens_in(theme.tokens, TokenCategory.COLOR)
            text += f"#### {theme.name}{' (default)' if theme is root else ''}\n\n"
            text += (_llms_token_list(colors, 50) if colors else "No color tokens defined.\n") + "\n"
    else:
        colors = tokens_in(tokens, TokenCategory.COLOR)
        text += (_llms_token_list(colors, 100) if colors else "No color tokens defined.\n") + "\n"

    text += "### Typography\n\n"
    if root and root.typefaces:
        text += "#### Typeface Roles\n\n"
        text += "| Role | Family | Weight | Fallback Stack |\n"
        text += "|------|--------|--------|----------------|\n"
        for typeface in root.typefaces:
            weights = ", ".join(str(weight) for weight in typeface.weights) or "400"
            stack = font_stack(typeface.family, typeface.fallback)
            text += (f"| {md_cell(typeface.role)} | {md_cell(typeface.family)} | {weights} | "
                     f"`{md_cell(stack)}` |\n")
        text += "\n"
    if root and root.typography_roles:
        text += "#### Typography Scale\n\n"
        text += "| Role | Typeface | Size | Weight | Line Height |\n"
        text += "|------|----------|------|--------|-------------|\n"
        for role in root.typography_roles:
            text += (f"| {md_cell(role.role_name)} | {md_cell(role.typeface_role)} | "
                     f"{md_cell(role.font_size or '-')} | {md_cell(role.font_weight or '-')} | "
                     f"{md_cell(role.line_height or '-')} |\n")
        text += "\n"
    typography = tokens_in(tokens, TokenCategory.TYPOGRAPHY)
    if typography:
        text += "#### Typography Tokens\n\n" + _llms_token_list(typography, 100) + "\n"
    elif not (root and (root.typefaces or root.typography_roles)):
        text += "No typography tokens defined.\n\n"

    sections = [
        ("Spacing", TokenCategory.SPACING, "spacing"),
        ("Border Radius", TokenCategory.RADIUS, "radius"),
        ("Shadows", TokenCategory.SHADOW, "shadow"),
        ("Grid", TokenCategory.GRID, "grid"),
        ("Other", TokenCategory.OTHER, None),
    ]
    for title, category, noun in sections:
        found = tokens_in(tokens, category)
        if not found and noun is None:
            continue
        text += f"### {title}\n\n"
        text += (_llms_token_list(found, 100) if found else f"No {noun} tokens defined.\n") + "\n"
    return text


def _llms_component(component: Component) -> str:
    text = f"### {component.name}\n\n"
    if component.description:
        text += f"{component.description}\n\n"
    text += f"**Category:** {component.category}\n\n"

    if component.props:
        text += "**Props:**\n\n"
        text += "| Prop | Type | Default | Description |\n"
        text += "|------|------|---------|-------------|\n"
        for prop in component.props:
            default = "-" if prop.default is None else f"`{md_cell(json.dumps(prop.default))}`"
            required = " *(required)*" if prop.required else ""
            text += (f"| `{md_cell(prop.name)}`{required} | `{md_cell(prop.type)}` | {default} | "
                     f"{md_cell(prop.description or '-')} |\n")
        text += "\n"

    if component.variants:
        text += "**Variants:**\n\n"
        for variant in component.variants:
            suffix = f": {variant.description}" if variant.description else ""
            text += f"- `{variant.name}`{suffix}\n"
        text += "\n"

    if component.linked_tokens:
        text += "**Linked Tokens:** " + ", ".join(f"`{path}`" for path in component.linked_tokens) + "\n\n"

    if component.examples:
        text += "**Examples:**\n\n"
        for example in component.examples:
            text += f"#### {example.title}\n\n"
            if example.description:
                text += f"{example.description}\n\n"
            if example.code:
                text += f"```jsx\n{example.code.rstrip()}\n```\n\n"

    return text + "---\n\n"


def generate_llms_txt(themes: List[Theme], components: List[Component],
                      options: Optional[GeneratorOptions] = None) -> str:
    """
    Exhaustive design system reference for language models.

    Sections: overview, every token category (colors per theme when more
    than one theme is exported), typeface roles and scale, published
    components with props/variants/examples, and usage guidelines.
    """
    options = _options(options)
    published = published_components(components)

    header = f"# {options.title} Design System\n\n"
    header += f"> Version: {options.version}\n"
    header += f"> Generated: {options.timestamp}\n\n"
    header += "## Overview\n\n"
    header += (f"This document describes the {options.title} design system: {len(_tokens(themes))} tokens "
               f"across {len(themes)} theme(s) and {len(published)} published component(s). "
               "Use the CSS variables listed here instead of literal values.\n\n")

    content = header + "---\n\n" + _llms_tokens(themes) + "---\n\n"

    content += "## Components\n\n"
    if published:
        for component in published:
            content += _llms_component(component)
    else:
        content += "No published components available.\n\n---\n\n"

    content += "## Usage Guidelines\n\n"
    content += "### DO's\n\n" + "".join(f"- {item}\n" for item in DOS) + "\n"
    content += "### DON'Ts\n\n" + "".join(f"- {item}\n" for item in DONTS) + "\n"
    content += "### Best Practices\n\n"
    content += "".join(f"{index}. {item}\n" for index, item in enumerate(BEST_PRACTICES, 1))

    logger.debug(f"LLMS.txt: {len(themes)} themes, {len(published)} components, {len(content)} chars")
    return enforce_budget(content, DocumentBudget.EXHAUSTIVE, TruncationStyle.MARKDOWN, header).content


# ---------------------------------------------------------------------------
# Cursor rules
# ---------------------------------------------------------------------------

def generate_cursor_rules(themes: List[Theme], components: List[Component],
                          options: Optional[GeneratorOptions] = None) -> str:
    """Ultra-condensed ``.mdc`` rules file with YAML frontmatter."""
    options = _options(options)
    tokens = _tokens(themes)

    frontmatter = "---\n"
    frontmatter += f"description: {options.title} design system tokens and components\n"
    frontmatter += f"globs: {json.dumps(list(options.globs))}\n"
    frontmatter += "alwaysApply: false\n"
    frontmatter += "---\n\n"
    head = frontmatter + f"# {options.title} Design System\n\n"

    content = head + "## Quick Reference\n\n"

    colors = tokens_in(tokens, TokenCategory.COLOR)
    if colors:
        content += "### Colors\n"
        content += "".join(f"- `{token.css_variable}`: {display_value(token)}\n" for token in colors[:15])
        content += _more(len(colors), 15, "colors") + "\n"

    for title, category, limit in (("Spacing", TokenCategory.SPACING, 12),
                                   ("Typography", TokenCategory.TYPOGRAPHY, 10),
                                   ("Radius", TokenCategory.RADIUS, 8),
                                   ("Shadows", TokenCategory.SHADOW, 5)):
        found = tokens_in(tokens, category)
        if not found:
            continue
        content += f"### {title}\n"
        content += "".join(f"- `{token.css_variable}`: {display_value(token)}\n" for token in found[:limit])
        content += _more(len(found), limit, title.lower()) + "\n"

    published = published_components(components)
    if published:
        content += "## Components\n\n"
        for component in published[:10]:
            description = (component.description or "")[:100]
            content += f"### {component.name}\n"
            if description:
                content += f"{description}\n"
            content += f"Props: {props_summary(component)}\n\n"
        content += _more(len(published), 10, "components")

    content += "## Patterns\n\n"
    content += "- Style with `var(--token)` references, never literal values\n"
    content += "- Compose layouts from spacing tokens\n"
    content += "- Reuse the components above before writing new ones\n"
    content += "- Add hover and focus states to interactive elements\n"

    return enforce_budget(content, DocumentBudget.ULTRA_CONDENSED, TruncationStyle.MARKDOWN, head).content


# ---------------------------------------------------------------------------
# CLAUDE.md
# ---------------------------------------------------------------------------

CLAUDE_TABLE_SECTIONS = [
    ("Colors", TokenCategory.COLOR),
    ("Spacing", TokenCategory.SPACING),
    ("Typography", TokenCategory.TYPOGRAPHY),
    ("Radius", TokenCategory.RADIUS),
    ("Shadows", TokenCategory.SHADOW),
]


def _claude_md(themes: List[Theme], components: List[Component], options: GeneratorOptions) -> str:
    tokens = _tokens(themes)
    head = f"# {options.title} Design System Reference\n\n"
    head += f"Version {options.version}. Use these tokens and components for all UI work.\n\n"

    content = head + "## Quick Reference\n\n### Tokens\n\n"
    for title, category in CLAUDE_TABLE_SECTIONS:
        found = tokens_in(tokens, category)
        if not found:
            continue
        content += f"#### {title}\n\n| Token | Value |\n|-------|-------|\n"
        for token in found[:10]:
            content += f"| `{token.css_variable}` | `{md_cell(display_value(token))}` |\n"
        content += "\n" + _more(len(found), 10, title.lower())
    if not tokens:
        content += "No tokens defined.\n\n"

    published = published_components(components)
    content += "### Components\n\n"
    if published:
        content += "| Name | Category | Props |\n|------|----------|-------|\n"
        for component in published[:15]:
            content += (f"| **{md_cell(component.name)}** | {md_cell(component.category)} | "
                        f"{md_cell(props_summary(component, 4))} |\n")
        content += "\n" + _more(len(published), 15, "components")
    else:
        content += "No published components available.\n\n"

    content += "See `.claude/rules/tokens.md` for the complete token list.\n\n"

    content += "## Detailed Reference\n\n"
    colors = tokens_in(tokens, TokenCategory.COLOR)
    if colors:
        content += "### Color Tokens\n\n"
        content += "".join(f"- `{token.css_variable}`: {display_value(token)}\n" for token in colors[:30])
        content += _more(len(colors), 30, "colors") + "\n"
    for component in published[:10]:
        content += f"### {component.name}\n\n"
        if component.description:
            content += f"{component.description}\n\n"
        if component.variants:
            content += "Variants: " + ", ".join(f"`{variant.name}`" for variant in component.variants) + "\n\n"
        content += f"```jsx\n{_example_usage(component)}\n```\n\n"

    content += "## Usage Guidelines\n\n"
    content += "".join(f"- {item}\n" for item in DOS)
    content += "".join(f"- Don't {item[0].lower()}{item[1:]}\n" for item in DONTS)

    return enforce_budget(content, DocumentBudget.BALANCED_MARKDOWN, TruncationStyle.MARKDOWN, head).content


def _claude_rules_tokens(themes: List[Theme], options: GeneratorOptions) -> str:
    tokens = _tokens(themes)
    content = f"# {options.title} Tokens\n\n"
    content += "Every token of the default theme. Reference them as `var(--name)`.\n\n"
    if not tokens:
        return content + "No tokens defined.\n"
    for category in TokenCategory:
        found = tokens_in(tokens, category)
        if not found:
            continue
        content += f"## {category.label}\n\n"
        content += "".join(f"- `{token.css_variable}`: {display_value(token)}\n" for token in found)
        content += "\n"
    return content


def generate_claude_md(themes: List[Theme], components: List[Component],
                       options: Optional[GeneratorOptions] = None) -> Dict[str, str]:
    """``CLAUDE.md`` within its budget plus an unbounded ``.claude/rules/tokens.md``."""
    options = _options(options)
    return {
        "CLAUDE.md": _claude_md(themes, components, options),
        ".claude/rules/tokens.md": _claude_rules_tokens(themes, options),
    }


# ---------------------------------------------------------------------------
# Project knowledge
# ---------------------------------------------------------------------------

def _knowledge_line(token: Token) -> str:
    return f"{token.name}: {display_value(token)} ({token.css_variable})\n"


def generate_project_knowledge(themes: List[Theme], components: List[Component],
                               options: Optional[GeneratorOptions] = None) -> str:
    """Plain text summary for chat project knowledge uploads."""
    options = _options(options)
    tokens = _tokens(themes)

    head = "DESIGN SYSTEM KNOWLEDGE\n"
    head += f"PROJECT: {options.title}\n"
    head += f"VERSION: {options.version}\n"
    head += f"GENERATED: {options.date}\n\n"

    content = head + "=== DESIGN TOKENS ===\n\n"
    sections = [
        ("COLORS", TokenCategory.COLOR, 12),
        ("SPACING", TokenCategory.SPACING, None),
        ("RADIUS", TokenCategory.RADIUS, None),
        ("SHADOWS", TokenCategory.SHADOW, 6),
        ("TYPOGRAPHY", TokenCategory.TYPOGRAPHY, 8),
    ]
    for title, category, limit in sections:
        found = tokens_in(tokens, category)
        content += f"{title}:\n"
        if not found:
            content += f"No {title.lower()} tokens defined.\n\n"
            continue
        shown = found if limit is None else found[:limit]
        content += "".join(_knowledge_line(token) for token in shown)
        if limit is not None:
            content += _more(len(found), limit, f"{title.lower()} tokens", markdown=False)
        content += "\n"

    content += "=== COMPONENTS ===\n\n"
    published = published_components(components)
    if not published:
        content += "No published components available.\n\n"
    for component in published[:10]:
        content += f"{component.name.upper()}\n"
        if component.category:
            content += f"- Category: {component.category}\n"
        if component.variants:
            content += "- Variants: " + ", ".join(variant.name for variant in component.variants) + "\n"
        sizes = [variant.name for variant in component.variants if variant.name.lower() in SIZE_VARIANT_NAMES]
        if sizes:
            content += "- Sizes: " + ", ".join(sizes) + "\n"
        if component.props:
            content += f"- Props: {props_summary(component, 5)}\n"
        content += f"- Example: {_example_usage(component)}\n\n"
    content += _more(len(published), 10, "components", markdown=False)

    content += "=== USAGE RULES ===\n\n"
    for index, (rule, detail) in enumerate(PROJECT_RULES, 1):
        content += f"{index}. {rule}\n   {detail}\n"

    return enforce_budget(content, DocumentBudget.CONDENSED_TEXT, TruncationStyle.PLAIN, head).content


# ---------------------------------------------------------------------------
# Claude skill
# ---------------------------------------------------------------------------

def _skill_token_list(tokens: List[Token]) -> str:
    if not tokens:
        return "*No tokens*\n"
    return "".join(f"- `{token.css_variable}`\n" for token in tokens)


def _skill_markdown(themes: List[Theme], components: List[Component], options: GeneratorOptions) -> str:
    tokens = _tokens(themes)
    content = "---\n"
    content += f"name: {options.slug}-tokens\n"
    content += f"description: Design tokens and component reference for {options.title}\n"
    content += "---\n\n"
    content += f"# {options.title} Design System Skill\n\n"
    content += "## Description\n\n"
    content += (f"This skill provides access to the {options.title} design system. Use it when creating "
                "UI components or styling elements to stay consistent with the design system.\n\n")
    content += "## Usage\n\n"
    content += "1. Look up tokens in `tokens.json` for colors, spacing and typography\n"
    content += "2. Look up components in `components.json` before building new patterns\n"
    content += "3. Always use CSS variables (e.g. `var(--color-primary)`) instead of literal values\n\n"
    content += "## Files\n\n"
    content += "- `tokens.json` - All design tokens with CSS variable names and values\n"
    content += "- `components.json` - Component specifications with props, variants and examples\n\n"

    content += "## Token Reference\n\n"
    for title, category, limit in (("Essential Color Tokens", TokenCategory.COLOR, 8),
                                   ("Spacing Scale", TokenCategory.SPACING, None),
                                   ("Border Radius", TokenCategory.RADIUS, None),
                                   ("Shadows", TokenCategory.SHADOW, 4),
                                   ("Typography", TokenCategory.TYPOGRAPHY, 8)):
        found = tokens_in(tokens, category)
        content += f"### {title}\n\n" + _skill_token_list(found if limit is None else found[:limit]) + "\n"

    content += "## Component Reference\n\n"
    published = published_components(components)
    if not published:
        content += "No published components available.\n\n"
    by_category: Dict[str, List[Component]] = {}
    for component in published:
        by_category.setdefault(component.category or "other", []).append(component)
    for category, members in by_category.items():
        content += f"### {category[:1].upper()}{category[1:]}\n\n"
        content += "".join(f"- **{component.name}**: {component.description or 'No description'}\n"
                           for component in members)
        content += "\n"

    content += "## Styling Guidelines\n\n"
    content += "".join(f"- {item}\n" for item in DOS)
    return content


def generate_claude_skill(themes: List[Theme], components: List[Component],
                          options: Optional[GeneratorOptions] = None) -> Dict[str, str]:
    """Skill bundle: ``SKILL.md`` with frontmatter and two JSON data files."""
    options = _options(options)
    tokens_json = {
        "designSystem": options.title,
        "generatedAt": options.timestamp,
        "themes": [{"name": theme.name, "slug": theme.slug, "isDefault": theme.is_default} for theme in themes],
        "tokens": [{
            "theme": theme.name,
            "path": token.path,
            "name": token.name,
            "category": token.category.value,
            "type": token.type,
            "cssVariable": token.css_variable,
            "value": json_value(token),
        } for theme in themes for token in sort_tokens(theme.tokens)],
    }
    components_json = {
        "designSystem": options.title,
        "generatedAt": options.timestamp,
        "components": [{
            "name": component.name,
            "slug": component.slug,
            "description": component.description,
            "category": component.category,
            "props": [{
                "name": prop.name,
                "type": prop.type,
                "required": prop.required,
                "default": prop.default,
                "description": prop.description,
            } for prop in component.props],
            "variants": [{"name": variant.name, "description": variant.description}
                         for variant in component.variants],
            "linkedTokens": list(component.linked_tokens),
            "examples": [{"title": example.title, "description": example.description, "code": example.code}
                         for example in component.examples],
        } for component in published_components(components)],
    }
    return {
        "SKILL.md": _skill_markdown(themes, components, options),
        "tokens.json": pretty_json(tokens_json),
        "components.json": pretty_json(components_json),
    }


class LLMSTxtGenerator(BaseGenerator):
    """Exhaustive LLMS.txt reference."""

    @property
    def format_id(self) -> str:
        return "llms-txt"

    @property
    def destinations(self) -> List[str]:
        return ["LLMS.txt"]

    def generate(self, context: ExportContext) -> FileMap:
        return {"LLMS.txt": generate_llms_txt(context.themes, context.components, self.options)}


class CursorRulesGenerator(BaseGenerator):
    """Cursor rules file with frontmatter."""

    @property
    def format_id(self) -> str:
        return "cursor-rules"

    @property
    def destinations(self) -> List[str]:
        return [".cursor/rules/"]

    def generate(self, context: ExportContext) -> FileMap:
        content = generate_cursor_rules(context.themes, context.components, self.options)
        return {".cursor/rules/design-system.mdc": content}


class ClaudeMdGenerator(BaseGenerator):
    """CLAUDE.md plus the full token rules file."""

    @property
    def format_id(self) -> str:
        return "claude-md"

    @property
    def destinations(self) -> List[str]:
        return ["CLAUDE.md", ".claude/rules/"]

    def generate(self, context: ExportContext) -> FileMap:
        return dict(generate_claude_md(context.themes, context.components, self.options))


class ProjectKnowledgeGenerator(BaseGenerator):
    """Plain text project knowledge."""

    @property
    def format_id(self) -> str:
        return "project-knowledge"

    @property
    def destinations(self) -> List[str]:
        return ["project-knowledge.txt"]

    def generate(self, context: ExportContext) -> FileMap:
        content = generate_project_knowledge(context.themes, context.components, self.options)
        return {"project-knowledge.txt": content}


class ClaudeSkillGenerator(BaseGenerator):
    """Claude skill bundle under skill/."""

    @property
    def format_id(self) -> str:
        return "claude-skill"

    @property
    def destinations(self) -> List[str]:
        return ["skill/"]

    def generate(self, context: ExportContext) -> FileMap:
        bundle = generate_claude_skill(context.themes, context.components, self.options)
        return {f"skill/{name}": content for name, content in bundle.items()}
