"""Version information for TokenWeaver."""

__version__ = "1.2.0"
__version_info__ = (1, 2, 0)

# Version history:
# 1.2.0 - AI Context & Integration Server Release
#   - Added MCP integration-server scaffold rendered from packaged templates.
#   - Added Claude skill bundle and project-knowledge exports.
#   - Shared size-budget enforcer for every AI-context document.
#   - Package assembler isolates per-format failures.
#
# 1.1.0 - Multi-Theme Exports
#   - Multi-theme CSS with data-theme selectors.
#   - SCSS maps and W3C JSON output.
#   - Font-face generation with Google Fonts imports.
#
# 1.0.0 - Initial Release
#   - Format detection for DTCG, Style-Dictionary and flat token exports.
#   - Token normalization into canonical records.
#   - CSS, JSON and Tailwind generators.
