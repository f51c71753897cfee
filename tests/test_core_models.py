import pytest

from tokenweaver.core import colors
from tokenweaver.core.models import (
    ColorValue, Component, ComponentStatus, DimensionValue, FontFamilyValue, RawValue, ShadowValue,
    Theme, Token, TokenCategory, TypographyValue, coerce_value, css_variable_for_path,
    format_token_name, value_to_json
)


class TestColorHelpers:
    """Test the color conversion helpers."""

    def test_rgb_to_hex_uppercase(self):
        assert colors.rgb_to_hex(101, 126, 121) == "#657E79"

    def test_rgb_to_hex_clamps(self):
        assert colors.rgb_to_hex(300, -5, 0) == "#FF0000"

    def test_hex_to_rgb_short_and_long(self):
        assert colors.hex_to_rgb("#fff") == (255, 255, 255)
        assert colors.hex_to_rgb("#657E79") == (101, 126, 121)
        assert colors.hex_to_rgb("#657E7980") == (101, 126, 121)

    def test_hex_to_rgb_invalid(self):
        with pytest.raises(ValueError):
            colors.hex_to_rgb("not-a-color")

    def test_hex_to_rgba(self):
        assert colors.hex_to_rgba("#000000", 0.5) == "rgba(0, 0, 0, 0.5)"

    def test_figma_unit_components(self):
        hex_value, opacity, rgb = colors.color_components({"r": 1, "g": 0, "b": 0, "a": 0.25})
        assert hex_value == "#FF0000"
        assert opacity == 0.25
        assert rgb == (255, 0, 0)

    def test_dtcg_components(self):
        hex_value, opacity, rgb = colors.color_components(
            {"colorSpace": "srgb", "components": [0, 0.5, 1], "alpha": 1})
        assert hex_value == "#0080FF"
        assert opacity == 1.0

    def test_rgba_string(self):
        hex_value, opacity, rgb = colors.color_components("rgba(10, 20, 30, 0.4)")
        assert hex_value == "#0A141E"
        assert opacity == 0.4
        assert rgb == (10, 20, 30)

    def test_eight_digit_hex_carries_alpha(self):
        hex_value, opacity, _ = colors.color_components("#FF000080")
        assert hex_value == "#FF0000"
        assert opacity == 0.5

    def test_unusable_color_raises(self):
        with pytest.raises(ValueError):
            colors.color_components({"name": "blue"})


class TestNaming:
    """Test path derived names."""

    def test_css_variable_for_path(self):
        assert css_variable_for_path("Color/Primary/500") == "--color-primary-500"

    def test_css_variable_collapses_separators(self):
        assert css_variable_for_path("Font Size / Body  Large") == "--font-size-body-large"
        assert css_variable_for_path("spacing/1.5") == "--spacing-1-5"

    def test_css_variable_strips_edges(self):
        assert css_variable_for_path("/Color/") == "--color"

    def test_format_token_name(self):
        assert format_token_name("Color/primary_500") == "Primary 500"
        assert format_token_name("spacing/extra-large") == "Extra Large"


class TestValueCoercion:
    """Test the tagged value union built from JSON-shaped input."""

    def test_color_from_hex_object(self):
        value = coerce_value({"hex": "#657E79"}, TokenCategory.COLOR, "color")
        assert isinstance(value, ColorValue)
        assert value.hex == "#657E79"
        assert value.opacity == 1.0

    def test_dimension_defaults_to_px(self):
        value = coerce_value(12, TokenCategory.SPACING, "number")
        assert value == DimensionValue(12, "px")

    def test_typography_unitless_small_number(self):
        value = coerce_value({"value": 1.5}, TokenCategory.TYPOGRAPHY, "number")
        assert value == DimensionValue(1.5, "")

    def test_shadow_none(self):
        value = coerce_value("none", TokenCategory.SHADOW, "shadow")
        assert isinstance(value, ShadowValue)
        assert value.is_none

    def test_shadow_layers(self):
        value = coerce_value([{"x": 0, "y": 1, "blur": 2, "color": "#000"}], TokenCategory.SHADOW, "shadow")
        assert len(value.layers) == 1
        assert value.layers[0].y == 1

    def test_font_family(self):
        value = coerce_value({"family": "Inter", "fallback": "Arial, sans-serif"},
                             TokenCategory.TYPOGRAPHY, "fontFamily")
        assert value == FontFamilyValue("Inter", ["Arial", "sans-serif"])

    def test_composite_typography(self):
        value = coerce_value({"fontSize": 16, "fontWeight": 600}, TokenCategory.TYPOGRAPHY,
                             "typography-composite")
        assert isinstance(value, TypographyValue)
        assert value.font_size == DimensionValue(16, "rem")
        assert value.font_weight == 600

    def test_raw_fallback(self):
        assert coerce_value(True, TokenCategory.OTHER, "boolean") == RawValue(True)

    def test_value_to_json_roundtrip_shape(self):
        assert value_to_json(DimensionValue(4, "px")) == {"value": 4, "unit": "px"}
        assert value_to_json(RawValue("x")) == "x"


class TestRecords:
    """Test Token, Theme and Component records."""

    def test_token_derives_name_and_variable(self):
        token = Token(path="Color/Primary/500", value="#657E79", category="color", type="color")
        assert token.name == "500"
        assert token.css_variable == "--color-primary-500"
        assert token.category == TokenCategory.COLOR
        assert isinstance(token.value, ColorValue)

    def test_unknown_category_is_other(self):
        token = Token(path="misc/thing", value="x", category="mystery")
        assert token.category == TokenCategory.OTHER

    def test_token_from_dict_camel_case(self):
        token = Token.from_dict({"path": "Spacing/md", "category": "spacing", "type": "dimension",
                                 "value": {"value": 16, "unit": "px"}, "cssVariable": "--space-md",
                                 "sortOrder": 3})
        assert token.css_variable == "--space-md"
        assert token.sort_order == 3
        assert token.to_dict()["value"] == {"value": 16, "unit": "px"}

    def test_theme_from_dict_sets_order_and_theme_id(self):
        theme = Theme.from_dict({"id": "t1", "name": "Brand Light", "tokens": [
            {"path": "b", "value": "1"}, {"path": "a", "value": "2"}]})
        assert theme.slug == "brand-light"
        assert [token.sort_order for token in theme.tokens] == [0, 1]
        assert all(token.theme_id == "t1" for token in theme.tokens)

    def test_component_defaults_to_published(self):
        component = Component.from_dict({"name": "Data Table"})
        assert component.status == ComponentStatus.PUBLISHED
        assert component.is_published
        assert component.slug == "data-table"

    def test_component_accepts_examples_alias(self):
        component = Component.from_dict({"name": "Card", "status": "Draft",
                                         "component_examples": [{"title": "Basic", "code": "<Card />"}]})
        assert component.status == ComponentStatus.DRAFT
        assert component.examples[0].code == "<Card />"
