import pytest

from tokenweaver.core.models import BinaryFileRef, ColorValue, Token
from tokenweaver.export.formats import ExportContext, GeneratorOptions
from tokenweaver.export.stylesheets import (
    CSSGenerator, FontsGenerator, SCSSGenerator, generate_css, generate_font_face_css,
    generate_multi_theme_css, generate_scss
)


class TestCSSGeneration:
    """Test custom property output."""

    def test_token_line(self, tokens):
        css = generate_css(tokens)
        assert css.startswith(":root {\n  /* Colors */\n")
        assert "  --color-primary-500: #657E79;\n" in css
        assert "  --color-overlay: rgba(0, 0, 0, 0.5);\n" in css

    def test_category_order(self, tokens):
        css = generate_css(tokens)
        positions = [css.index(f"/* {label} */")
                     for label in ("Colors", "Typography", "Spacing", "Shadows", "Radius", "Grid")]
        assert positions == sorted(positions)

    def test_sorted_within_category(self, tokens):
        css = generate_css(tokens)
        assert css.index("--color-primary-500") < css.index("--color-primary-600") < css.index("--color-overlay")

    def test_composite_typography_expanded(self, tokens):
        css = generate_css(tokens)
        assert "  --typography-heading-family: 'Inter Display', sans-serif;\n" in css
        assert "  --typography-heading-size: 2rem;\n" in css
        assert "@media (max-width: 480px)" in css

    def test_multi_layer_shadow(self, tokens):
        css = generate_css(tokens)
        assert "--shadow-md: 0px 4px 6px -1px rgba(0, 0, 0, 0.1),\n0px 2px 4px -2px rgba(0, 0, 0, 0.06);" in css

    def test_empty_tokens(self):
        assert generate_css([]) == ":root {\n  /* No tokens defined */\n}\n"

    def test_scope_and_comments(self, tokens):
        css = generate_css(tokens, GeneratorOptions(scope=".brand", include_comments=False))
        assert css.startswith(".brand {\n")
        assert "/*" not in css

    def test_header_is_opt_in(self, tokens, options):
        assert "Generated:" not in generate_css(tokens, options)
        css = generate_css(tokens, options.with_changes(include_header=True))
        assert css.startswith("/**\n * Acme Ui Tokens\n * Generated: 2024-05-01\n */\n")

    def test_minify(self, tokens):
        css = generate_css(tokens, GeneratorOptions(minify=True))
        assert "\n" not in css
        assert css.startswith(":root{--color-primary-500:#657E79;")

    def test_missing_selector_rejected(self, tokens):
        with pytest.raises(ValueError):
            generate_css(tokens, GeneratorOptions(selector=""))

    def test_multi_theme(self, themes):
        css = generate_multi_theme_css(themes)
        assert css.index(":root {") < css.index('[data-theme="dark"] {')
        assert "--color-primary-500: #A3C4BE;" in css


class TestSCSSGeneration:
    """Test SCSS variables and maps."""

    def test_variables_and_maps(self, tokens):
        scss = generate_scss(tokens)
        assert "$color-primary-500: #657E79;\n" in scss
        assert "$colors: (\n  'color-primary-500': $color-primary-500," in scss
        assert "@function get-token($map, $key)" in scss

    def test_prefix(self, tokens):
        scss = generate_scss(tokens, GeneratorOptions(prefix="ds"))
        assert "$ds-color-primary-500: #657E79;" in scss
        assert "$ds-colors: (" in scss

    def test_leading_digit_is_escaped(self):
        scss = generate_scss([Token(path="500", value=ColorValue("#111111"), category="color", type="color")])
        assert "$_500: #111111;\n" in scss
        assert "  '500': $_500" in scss
        assert "$500" not in scss

    def test_without_maps(self, tokens):
        scss = generate_scss(tokens, GeneratorOptions(use_maps=False))
        assert "Token Maps" not in scss
        assert "get-token" not in scss

    def test_empty(self):
        assert generate_scss([]) == "// No tokens defined\n"

    def test_generator_files(self, themes, options):
        files = SCSSGenerator(options).generate(ExportContext(themes, [], options))
        assert set(files) == {"dist/_tokens.scss", "dist/_tokens-maps.scss"}
        assert "$colors: (" not in files["dist/_tokens.scss"]
        assert "$colors: (" in files["dist/_tokens-maps.scss"]


class TestFonts:
    """Test @font-face rules and font pass-through."""

    def test_google_import_and_grouped_rule(self, themes):
        css = generate_font_face_css(themes[0].typefaces)
        assert css.startswith(
            "@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;700&display=swap');\n")
        assert css.count("@font-face") == 1
        assert "  font-family: 'Brand Sans';\n" in css
        assert "  font-weight: 700;\n" in css
        assert ("url('./fonts/brand-sans-bold.woff2') format('woff2'),\n"
                "       url('./fonts/brand-sans-bold.woff') format('woff')") in css

    def test_no_typefaces(self):
        assert generate_font_face_css([]) == ""

    def test_css_generator_fonts_file(self, themes, options):
        files = CSSGenerator(options).generate(ExportContext(themes, [], options))
        assert set(files) == {"dist/tokens.css", "dist/fonts.css"}
        assert "url('../fonts/brand-sans-bold.woff2')" in files["dist/fonts.css"]

    def test_font_file_references(self, themes, options):
        files = FontsGenerator(options).generate(ExportContext(themes, [], options))
        assert files == {
            "fonts/brand-sans-bold.woff2": BinaryFileRef("fonts/brand-sans-bold.woff2"),
            "fonts/brand-sans-bold.woff": BinaryFileRef("fonts/brand-sans-bold.woff"),
        }
