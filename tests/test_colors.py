"""Tests for svg_icons.colors module."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_icons.colors import (
    BLACK,
    WHITE,
    Color,
    ColorAction,
    classify_color,
    parse_color,
    parse_colors,
)
from svg_icons.errors import InvalidIconError
from svg_icons.utils import parse_svg_string, serialize_body


def svg(content: str):
    return parse_svg_string(
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">{content}</svg>'
    )


class TestParseColor:
    """Tests for parse_color function."""

    @pytest.mark.parametrize("value", ["#000", "#000000", "black", "BLACK", "rgb(0,0,0)", "hsl(0, 0%, 0%)"])
    def test_black_spellings(self, value):
        assert parse_color(value) == BLACK

    @pytest.mark.parametrize("value", ["#fff", "#FFFFFF", "white", "rgb(255, 255, 255)"])
    def test_white_spellings(self, value):
        assert parse_color(value) == WHITE

    def test_hex_with_alpha(self):
        assert parse_color("#00000080") == Color(0, 0, 0, 128)

    def test_css_alpha(self):
        assert parse_color("rgba(0, 0, 0, 0.5)") == Color(0, 0, 0, 128)
        assert parse_color("rgba(255, 255, 255, 50%)") == Color(255, 255, 255, 128)

    def test_transparent(self):
        assert parse_color("transparent") == Color(0, 0, 0, 0)

    @pytest.mark.parametrize("value", ["", "notacolor", "#12", "rgb(1, 2)"])
    def test_invalid(self, value):
        assert parse_color(value) is None

    def test_hex_property(self):
        assert Color(21, 94, 239).hex == "#155eef"
        assert Color(0, 0, 0, 128).hex == "#00000080"


class TestClassifyColor:
    """Tests for classify_color function."""

    def test_black_is_inherited(self):
        assert classify_color(BLACK) == ColorAction.INHERIT

    def test_white_is_removed(self):
        assert classify_color(WHITE) == ColorAction.REMOVE

    def test_near_black_is_kept(self):
        assert classify_color(Color(1, 1, 1)) == ColorAction.KEEP

    def test_translucent_black_is_kept(self):
        assert classify_color(Color(0, 0, 0, 128)) == ColorAction.KEEP


class TestParseColors:
    """Tests for parse_colors function."""

    def test_black_white_and_palette(self):
        root = svg(
            '<path d="M0 0h1" fill="#000"/>'
            '<path d="M0 1h1" fill="#fff"/>'
            '<path d="M0 2h1" fill="red"/>'
        )
        report = parse_colors(root)
        assert serialize_body(root) == (
            '<path d="M0 0h1" fill="currentColor"/><path d="M0 2h1" fill="red"/>'
        )
        assert report.replaced == 1
        assert report.removed == 1
        assert report.kept == ["red"]
        assert report.is_monotone is False

    def test_default_fill(self):
        root = svg('<path d="M0 0h1"/>')
        report = parse_colors(root)
        assert root[0].get("fill") == "currentColor"
        assert report.defaulted == 1
        assert report.is_monotone is True

    def test_inherited_fill_is_not_defaulted(self):
        root = svg('<g fill="none"><path d="M0 0h1" stroke="black"/></g>')
        parse_colors(root)
        path = root[0][0]
        assert path.get("fill") is None
        assert path.get("stroke") == "currentColor"

    def test_stroke_only_palette_color(self):
        root = svg('<path d="M10 4l4 4-4 4" stroke="#155EEF" fill="none"/>')
        report = parse_colors(root)
        assert root[0].get("stroke") == "#155EEF"
        assert report.kept == ["#155EEF"]

    def test_coverage_colors_untouched(self):
        root = svg(
            '<clipPath id="c"><rect width="1" height="1" fill="#fff"/></clipPath>'
            '<path d="M0 0h1" clip-path="url(#c)" fill="black"/>'
        )
        parse_colors(root)
        assert root[0][0].get("fill") == "#fff"
        assert root[1].get("fill") == "currentColor"

    def test_white_gradient_stop_is_kept(self):
        root = svg(
            '<linearGradient id="g"><stop offset="0" stop-color="#fff"/></linearGradient>'
            '<path d="M0 0h1" fill="url(#g)"/>'
        )
        report = parse_colors(root)
        assert root[0][0].get("stop-color") == "#fff"
        assert root[1].get("fill") == "url(#g)"
        assert report.removed == 0

    def test_white_group_removed_with_content(self):
        root = svg(
            '<g fill="white"><path d="M0 0h1"/></g><path d="M1 1h1" fill="#000"/>'
        )
        parse_colors(root)
        assert serialize_body(root) == '<path d="M1 1h1" fill="currentColor"/>'

    def test_invalid_color(self):
        root = svg('<path d="M0 0h1" fill="#12"/>')
        with pytest.raises(InvalidIconError, match="Invalid color"):
            parse_colors(root)

    def test_only_white_shapes(self):
        root = svg('<rect width="24" height="24" fill="#ffffff"/>')
        with pytest.raises(InvalidIconError, match="no visible geometry"):
            parse_colors(root)

    def test_idempotent(self):
        root = svg(
            '<path d="M0 0h1" stroke="black" fill="none"/>'
            '<circle r="1" fill="#fff"/><circle r="2"/>'
        )
        parse_colors(root)
        first = serialize_body(root)
        report = parse_colors(root)
        assert serialize_body(root) == first
        assert report.replaced == 0
        assert report.removed == 0
        assert report.defaulted == 0

    def test_custom_classifier(self):
        root = svg('<path d="M0 0h1" fill="#000"/><path d="M0 1h1"/>')
        parse_colors(root, classify=lambda color: ColorAction.KEEP)
        assert root[0].get("fill") == "#000"
        assert root[1].get("fill") is None

    def test_custom_default_color(self):
        root = svg('<path d="M0 0h1" fill="black"/>')
        parse_colors(root, default_color="var(--icon-color)")
        assert root[0].get("fill") == "var(--icon-color)"
