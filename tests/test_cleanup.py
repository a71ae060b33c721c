"""Tests for svg_icons.cleanup module."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_icons.cleanup import (
    ViewBox,
    cleanup_svg,
    get_view_box,
    parse_length,
    parse_view_box,
    unwrap_groups,
)
from svg_icons.errors import InvalidIconError
from svg_icons.utils import get_local_name, parse_svg_string, serialize_body

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'


def svg(content: str, open_tag: str = SVG_OPEN):
    return parse_svg_string(f"{open_tag}{content}</svg>")


class TestParseViewBox:
    """Tests for parse_view_box function."""

    def test_space_separated(self):
        assert parse_view_box("0 0 24 24") == ViewBox(0, 0, 24, 24)

    def test_comma_separated(self):
        assert parse_view_box("-1,-2, 16,  20") == ViewBox(-1, -2, 16, 20)

    @pytest.mark.parametrize("value", ["0 0 24", "a b c d", "0 0 0 24", "0 0 24 -1", ""])
    def test_invalid(self, value):
        with pytest.raises(InvalidIconError):
            parse_view_box(value)

    @pytest.mark.parametrize("value", ["0 0 NaN 16", "0 0 16 inf", "nan 0 16 16", "0 -Infinity 16 16"])
    def test_non_finite(self, value):
        with pytest.raises(InvalidIconError):
            parse_view_box(value)


class TestParseLength:
    """Tests for parse_length function."""

    def test_plain_number(self):
        assert parse_length("24") == 24

    def test_pixels(self):
        assert parse_length("20px") == 20

    def test_other_units(self):
        assert parse_length("1em") is None
        assert parse_length("100%") is None

    def test_missing(self):
        assert parse_length(None) is None

    def test_overflow(self):
        assert parse_length("1e999") is None


class TestGetViewBox:
    """Tests for get_view_box function."""

    def test_from_view_box(self):
        root = svg('<path d="M0 0h1"/>')
        assert get_view_box(root) == ViewBox(0, 0, 24, 24)

    def test_from_width_and_height(self):
        root = svg(
            '<path d="M0 0h1"/>',
            '<svg xmlns="http://www.w3.org/2000/svg" width="20px" height="10">',
        )
        assert get_view_box(root) == ViewBox(0, 0, 20, 10)

    def test_missing_dimensions(self):
        root = svg('<path d="M0 0h1"/>', '<svg xmlns="http://www.w3.org/2000/svg">')
        with pytest.raises(InvalidIconError):
            get_view_box(root)


class TestCleanupSvg:
    """Tests for cleanup_svg function."""

    def test_returns_view_box_and_strips_size(self):
        root = svg(
            '<path d="M0 0h24v24H0z"/>',
            '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">',
        )
        assert cleanup_svg(root) == ViewBox(0, 0, 24, 24)
        assert root.get("width") is None
        assert root.get("height") is None
        assert root.get("viewBox") == "0 0 24 24"

    def test_rejects_other_root(self):
        root = parse_svg_string('<html><path d="M0 0h1"/></html>')
        with pytest.raises(InvalidIconError, match="expected <svg>"):
            cleanup_svg(root)

    def test_rejects_document_without_geometry(self):
        root = svg('<defs><path id="p" d="M0 0h1"/></defs>')
        with pytest.raises(InvalidIconError, match="no visible geometry"):
            cleanup_svg(root)

    def test_rejects_script(self):
        root = svg('<script>alert(1)</script><path d="M0 0h1"/>')
        with pytest.raises(InvalidIconError):
            cleanup_svg(root)

    def test_rejects_stylesheet(self):
        root = svg('<style>path { fill: red; }</style><path d="M0 0h1"/>')
        with pytest.raises(InvalidIconError):
            cleanup_svg(root)

    def test_rejects_invalid_path_data(self):
        root = svg('<path d="M0 0 L x"/>')
        with pytest.raises(InvalidIconError, match="Invalid path data"):
            cleanup_svg(root)

    def test_removes_editor_noise(self):
        root = svg(
            '<metadata><rdf/></metadata><title>Icon</title>'
            '<sodipodi:namedview xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"/>'
            '<path xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"'
            ' inkscape:label="layer" onclick="x()" d="M0 0h1"/>'
            '<style/>'
        )
        cleanup_svg(root)
        assert serialize_body(root) == '<path d="M0 0h1"/>'

    def test_removes_empty_paths(self):
        root = svg('<path d=""/><path d="M0 0h1"/>')
        cleanup_svg(root)
        assert serialize_body(root) == '<path d="M0 0h1"/>'

    def test_inlines_style(self):
        root = svg('<path fill="blue" style="fill:red; stroke:#000;-inkscape-x:1" d="M0 0h1"/>')
        cleanup_svg(root)
        path = root[0]
        assert path.get("fill") == "red"
        assert path.get("stroke") == "#000"
        assert path.get("style") is None
        assert path.get("-inkscape-x") is None

    def test_moves_root_presentation_to_group(self):
        root = svg(
            '<path d="M0 0h1"/><circle cx="1" cy="1" r="1"/>',
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"'
            ' fill="none" stroke="currentColor" stroke-width="2">',
        )
        cleanup_svg(root)
        assert root.get("fill") is None
        assert len(root) == 1
        group = root[0]
        assert get_local_name(group.tag) == "g"
        assert group.get("fill") == "none"
        assert group.get("stroke-width") == "2"
        assert len(group) == 2

    def test_strips_whitespace_text(self):
        root = parse_svg_string(
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">\n'
            '  <path d="M0 0h1"/>\n  <text x="1">Hi</text>\n</svg>'
        )
        cleanup_svg(root)
        assert serialize_body(root) == '<path d="M0 0h1"/><text x="1">Hi</text>'


class TestUnwrapGroups:
    """Tests for unwrap_groups function."""

    def test_nested_empty_groups(self):
        root = svg('<g><g><path d="M0 0h1"/></g><circle r="1"/></g>')
        unwrap_groups(root)
        assert [get_local_name(child.tag) for child in root] == ["path", "circle"]

    def test_keeps_groups_with_attributes(self):
        root = svg('<g fill="red"><path d="M0 0h1"/></g>')
        unwrap_groups(root)
        assert get_local_name(root[0].tag) == "g"
