import pytest

from tokenweaver.core.format_detector import TokenFormat, detect_format
from tokenweaver.core.models import ColorValue, DimensionValue, TokenCategory, TypographyValue
from tokenweaver.core.normalizer import TokenNormalizer, detect_category, infer_type, parse_tokens


STYLE_DICTIONARY_DOC = {
    "collections": [{
        "name": "Primitives",
        "modes": [
            {"name": "Light", "variables": [
                {"name": "color/brand/primary", "type": "COLOR", "value": {"r": 1, "g": 0, "b": 0, "a": 1}},
                {"name": "spacing/sm", "type": "FLOAT", "value": 8},
                {"name": "flags/enabled", "type": "BOOLEAN", "value": True},
            ]},
            {"name": "Dark", "variables": [
                {"name": "color/brand/primary", "type": "COLOR", "value": {"r": 0, "g": 0, "b": 0, "a": 1}},
            ]},
        ],
    }]
}


class TestFormatDetector:
    """Test structural format detection."""

    def test_dtcg(self, dtcg_document):
        assert detect_format(dtcg_document) == TokenFormat.DTCG_VARIABLES

    def test_style_dictionary(self):
        assert detect_format(STYLE_DICTIONARY_DOC) == TokenFormat.STYLE_DICTIONARY

    def test_flat(self):
        assert detect_format({"color": {"primary": {"value": "#fff"}}}) == TokenFormat.FLAT

    @pytest.mark.parametrize("document", [None, [], "text", 42, {}, {"a": {"b": 1}}, {"collections": []}])
    def test_unknown_never_raises(self, document):
        assert detect_format(document) == TokenFormat.UNKNOWN

    def test_dtcg_needs_a_type_on_the_leaf_or_a_group(self):
        assert detect_format({"a": {"b": {"$value": 1}}}) == TokenFormat.UNKNOWN
        assert detect_format({"a": {"$type": "number", "b": {"$value": 1}}}) == TokenFormat.DTCG_VARIABLES

    def test_style_dictionary_needs_variables(self):
        document = {"collections": [{"name": "Primitives", "modes": [{"name": "Light"}]}]}
        assert detect_format(document) == TokenFormat.UNKNOWN

    def test_depth_cap(self):
        document = {"$type": "number", "$value": 1}
        for index in range(15):
            document = {f"level{index}": document}
        assert detect_format(document) == TokenFormat.UNKNOWN


class TestCategoryDetection:
    """Test category lookup rules."""

    def test_type_overrides_path(self):
        assert detect_category("Spacing/brand", "color") == TokenCategory.COLOR

    def test_first_segment_lookup(self):
        assert detect_category("Radii/sm") == TokenCategory.RADIUS
        assert detect_category("breakpoints/md") == TokenCategory.GRID

    def test_keyword_fallback(self):
        assert detect_category("semantic/button-background") == TokenCategory.COLOR
        assert detect_category("component/card-padding") == TokenCategory.SPACING

    def test_default_other(self):
        assert detect_category("motion/duration/fast") == TokenCategory.OTHER

    def test_infer_type(self):
        assert infer_type("#fff") == "color"
        assert infer_type("12px") == "dimension"
        assert infer_type("200ms") == "duration"
        assert infer_type("1.5") == "number"
        assert infer_type({"r": 1, "g": 0, "b": 0}) == "color"
        assert infer_type({"value": 4, "unit": "px"}) == "dimension"


class TestTokenNormalizer:
    """Test normalization for each supported format."""

    def test_spec_example_single_token(self):
        document = {"Color": {"Primary": {"500": {"$type": "color", "$value": {"hex": "#657E79"}}}}}
        result = parse_tokens(document)
        assert len(result.tokens) == 1
        token = result.tokens[0]
        assert token.path == "Color/Primary/500"
        assert token.category == TokenCategory.COLOR
        assert token.css_variable == "--color-primary-500"
        assert token.value.hex == "#657E79"

    def test_dtcg_group_type_inheritance(self, dtcg_document):
        result = parse_tokens(dtcg_document, theme_id="light")
        by_path = {token.path: token for token in result.tokens}
        assert by_path["Color/Primary/600"].type == "color"
        assert by_path["Color/Primary/600"].description == "Hover state"
        assert by_path["Spacing/md"].value == DimensionValue(16, "px")
        assert all(token.theme_id == "light" for token in result.tokens)
        assert [token.sort_order for token in result.tokens] == [0, 1, 2]

    def test_metadata(self, dtcg_document):
        result = parse_tokens(dtcg_document)
        assert result.metadata["format"] == "dtcg-variables"
        assert result.metadata["total_parsed"] == 3
        assert result.metadata["total_skipped"] == 0
        assert result.metadata["categories"] == {"color": 2, "spacing": 1}

    def test_malformed_leaf_is_skipped_not_fatal(self):
        document = {"Color": {
            "good": {"$type": "color", "$value": "#112233"},
            "broken": {"$type": "color", "$value": {"nothing": True}},
            "empty": {"$type": "color", "$value": None},
        }}
        result = parse_tokens(document)
        assert [token.path for token in result.tokens] == ["Color/good"]
        assert len(result.errors) == 2
        assert any(error.startswith("Skipped Color/broken") for error in result.errors)
        assert result.metadata["total_skipped"] == 2

    def test_unusable_shadow_color_falls_back_to_default(self):
        document = {"Shadow": {
            "$type": "shadow",
            "sm": {"$value": {"blur": 4, "color": 123}},
            "md": {"$value": {"offsetX": 0, "offsetY": 4, "blur": 8, "spread": 0, "color": "#000000"}},
        }}
        result = parse_tokens(document)
        by_path = {token.path: token for token in result.tokens}
        assert set(by_path) == {"Shadow/sm", "Shadow/md"}
        assert by_path["Shadow/sm"].value.layers[0].color == "rgba(0,0,0,0.1)"
        assert by_path["Shadow/md"].value.layers[0].color == "#000000"
        assert result.errors == []

    def test_value_coercion_failure_skips_only_that_leaf(self, monkeypatch):
        from tokenweaver.core import normalizer

        real_coerce = normalizer.coerce_value

        def failing_coerce(raw, category, type_):
            if isinstance(raw, ColorValue) and raw.hex == "#222222":
                raise ValueError("Unsupported color value")
            return real_coerce(raw, category, type_)

        monkeypatch.setattr(normalizer, "coerce_value", failing_coerce)
        document = {"Color": {
            "$type": "color",
            "a": {"$value": "#111111"},
            "b": {"$value": "#222222"},
            "c": {"$value": "#333333"},
        }}
        result = parse_tokens(document)
        assert [token.path for token in result.tokens] == ["Color/a", "Color/c"]
        assert result.errors == ["Skipped Color/b: Unsupported color value"]
        assert result.metadata["total_skipped"] == 1

    def test_non_string_font_family_is_coerced(self):
        document = {"Typography": {"body": {"$type": "typography", "$value": {
            "fontFamily": {"family": 5, "fallback": [7, "serif"]}, "fontSize": "16px"}}}}
        result = parse_tokens(document)
        assert result.errors == []
        font = result.tokens[0].value.font_family
        assert font.family == "5"
        assert font.fallback == ["7", "serif"]

    def test_duplicate_css_variable_dropped(self):
        document = {
            "Color": {"Primary": {"$type": "color", "$value": "#111111"}},
            "color": {"primary": {"$type": "color", "$value": "#222222"}},
        }
        result = parse_tokens(document)
        assert len(result.tokens) == 1
        assert result.tokens[0].value.hex == "#111111"
        assert "duplicate" in result.errors[0]

    def test_dtcg_typography_composite(self):
        document = {"Typography": {"Body": {"$type": "typography", "$value": {
            "fontFamily": "Inter", "fontSize": "16px", "fontWeight": 400, "lineHeight": 1.5}}}}
        token = parse_tokens(document).tokens[0]
        assert token.category == TokenCategory.TYPOGRAPHY
        assert isinstance(token.value, TypographyValue)
        assert token.is_composite_typography

    def test_style_dictionary_first_mode(self):
        result = parse_tokens(STYLE_DICTIONARY_DOC)
        by_path = {token.path: token for token in result.tokens}
        assert set(by_path) == {"color/brand/primary", "spacing/sm", "flags/enabled"}
        assert by_path["color/brand/primary"].value.hex == "#FF0000"
        assert by_path["spacing/sm"].category == TokenCategory.SPACING
        assert by_path["flags/enabled"].type == "boolean"
        assert result.metadata["collections"] == {"Primitives": ["Light", "Dark"]}
        assert any("ignored modes Dark" in warning for warning in result.warnings)

    def test_style_dictionary_selected_mode(self):
        result = TokenNormalizer(mode="Dark").parse(STYLE_DICTIONARY_DOC)
        assert len(result.tokens) == 1
        assert result.tokens[0].value.hex == "#000000"

    def test_flat_infers_types(self):
        document = {"space": {"sm": {"value": "4px"}}, "brand": {"accent": {"value": "rgb(255, 0, 0)"}}}
        result = parse_tokens(document)
        by_path = {token.path: token for token in result.tokens}
        assert by_path["space/sm"].type == "dimension"
        assert by_path["space/sm"].value == DimensionValue(4, "px")
        assert isinstance(by_path["brand/accent"].value, ColorValue)
        assert by_path["brand/accent"].value.hex == "#FF0000"

    def test_unknown_format_reports_error(self):
        result = parse_tokens({"nothing": "here"})
        assert result.tokens == []
        assert result.metadata["format"] == "unknown"
        assert result.errors
