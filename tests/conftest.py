import json
import pytest

import yaml

from tokenweaver.core.models import (
    Component, ComponentExample, ComponentProp, ComponentVariant, FontFile, Theme, Token,
    Typeface, TypographyRole
)
from tokenweaver.export.formats import GeneratorOptions
from tokenweaver.store.repository import InMemoryRepository

FIXED_TIMESTAMP = "2024-05-01T12:00:00Z"


def make_tokens():
    """A small but complete token set covering every category."""
    return [
        Token(path="Color/Primary/500", value={"hex": "#657E79"}, category="color", type="color"),
        Token(path="Color/Primary/600", value="#4A5D59", category="color", type="color"),
        Token(path="Color/Overlay", value={"hex": "#000000", "opacity": 0.5}, category="color", type="color"),
        Token(path="Spacing/md", value={"value": 16, "unit": "px"}, category="spacing", type="dimension"),
        Token(path="Spacing/lg", value=24, category="spacing", type="dimension"),
        Token(path="Radius/sm", value={"value": 4, "unit": "px"}, category="radius", type="dimension"),
        Token(path="Shadow/md", value={"shadows": [
            {"offsetX": 0, "offsetY": 4, "blur": 6, "spread": -1, "color": "rgba(0, 0, 0, 0.1)"},
            {"offsetX": 0, "offsetY": 2, "blur": 4, "spread": -2, "color": "rgba(0, 0, 0, 0.06)"},
        ]}, category="shadow", type="shadow"),
        Token(path="Typography/Heading", value={
            "fontFamily": {"family": "Inter Display", "fallback": ["sans-serif"]},
            "fontSize": {"value": 2, "unit": "rem"},
            "fontWeight": 700,
            "lineHeight": 1.2,
            "letterSpacing": {"value": -0.02, "unit": "em"},
            "fontSizeMobile": {"value": 1.5, "unit": "rem"},
        }, category="typography", type="typography-composite"),
        Token(path="Grid/Breakpoint/md", value={"value": 768, "unit": "px"}, category="grid", type="dimension"),
    ]


def make_themes():
    light = Theme(
        name="Light",
        id="light",
        is_default=True,
        tokens=make_tokens(),
        typefaces=[
            Typeface(family="Inter", role="text", fallback="system-ui, sans-serif", source_type="google",
                     weights=[400, 700]),
            Typeface(family="Brand Sans", role="display", source_type="custom", weights=[700],
                     font_files=[FontFile("fonts/brand-sans-bold.woff2", "woff2", 700),
                                 FontFile("fonts/brand-sans-bold.woff", "woff", 700)]),
        ],
        typography_roles=[TypographyRole("heading-1", "display", "2rem", 700, 1.2)],
    )
    for index, token in enumerate(light.tokens):
        token.sort_order = index
    dark = Theme(
        name="Dark",
        id="dark",
        tokens=[
            Token(path="Color/Primary/500", value="#A3C4BE", category="color", type="color"),
            Token(path="Spacing/md", value={"value": 16, "unit": "px"}, category="spacing", type="dimension"),
        ],
    )
    return [light, dark]


def make_components():
    button = Component(
        name="Button",
        id="button",
        description="Primary action trigger.",
        category="actions",
        code="export function Button({ variant = 'primary', children }) {\n  return <button>{children}</button>;\n}",
        props=[
            ComponentProp("variant", "'primary' | 'secondary'", "primary", False, "Visual style"),
            ComponentProp("size", "'sm' | 'md' | 'lg'", "md"),
            ComponentProp("children", "ReactNode", required=True),
        ],
        variants=[ComponentVariant("primary", {"variant": "primary"}), ComponentVariant("sm", {"size": "sm"})],
        linked_tokens=["Color/Primary/500", "Spacing/md"],
        examples=[ComponentExample("Basic", "<Button variant=\"primary\">Save</Button>")],
    )
    draft = Component(name="Secret Panel", id="secret", status="draft", description="Not ready.")
    return [button, draft]


@pytest.fixture
def tokens():
    return make_tokens()


@pytest.fixture
def themes():
    return make_themes()


@pytest.fixture
def components():
    return make_components()


@pytest.fixture
def options():
    return GeneratorOptions(project_name="acme-ui", version="2.1.0", generated_at=FIXED_TIMESTAMP)


@pytest.fixture
def repository():
    return InMemoryRepository(themes=make_themes(), components=make_components())


@pytest.fixture
def dtcg_document():
    return {
        "Color": {
            "$type": "color",
            "Primary": {
                "500": {"$value": {"hex": "#657E79"}},
                "600": {"$value": "#4A5D59", "$description": "Hover state"},
            },
        },
        "Spacing": {
            "md": {"$type": "dimension", "$value": "16px"},
        },
    }


@pytest.fixture
def data_dir(tmp_path):
    """A data directory with JSON themes and YAML components."""
    root = tmp_path / "data"
    (root / "themes").mkdir(parents=True)
    (root / "components").mkdir()
    (root / "themes" / "light.json").write_text(json.dumps({
        "id": "light",
        "name": "Light",
        "is_default": True,
        "tokens": [
            {"path": "Color/Primary/500", "category": "color", "type": "color", "value": {"hex": "#657E79"}},
            {"path": "Spacing/md", "category": "spacing", "type": "dimension",
             "value": {"value": 16, "unit": "px"}},
        ],
    }), encoding="utf-8")
    (root / "themes" / "dark.yaml").write_text(yaml.safe_dump({
        "id": "dark",
        "name": "Dark",
        "tokens": [{"path": "Color/Primary/500", "category": "color", "type": "color", "value": "#A3C4BE"}],
    }), encoding="utf-8")
    (root / "components" / "button.yaml").write_text(yaml.safe_dump({
        "id": "button",
        "name": "Button",
        "category": "actions",
        "code": "export const Button = () => null;",
        "props": [{"name": "variant", "type": "string", "default": "primary"}],
        "linked_tokens": ["Color/Primary/500"],
    }), encoding="utf-8")
    return root
