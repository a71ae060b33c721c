"""Icon document validation and cleanup.

``cleanup_svg`` checks that a parsed document is an SVG icon that can be
embedded in a collection and strips everything that is not needed to
render it. It works in place and raises ``InvalidIconError`` for documents
that cannot be used.
"""

import logging
import math
import re
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from .errors import InvalidIconError
from .pathdata import parse_path_data
from .utils import (
    KEPT_NAMESPACES,
    PRESENTATION_ATTRIBUTES,
    get_local_name,
    get_namespace,
    has_visible_geometry,
    parse_style,
    svg_tag,
)

logger = logging.getLogger(__name__)

# Elements removed together with their content
REMOVED_ELEMENTS = frozenset(["metadata", "title", "desc"])

# Elements that make a document unsafe to redistribute
FORBIDDEN_ELEMENTS = frozenset(["script", "foreignObject"])

# Elements whose text content is significant
TEXT_ELEMENTS = frozenset(["text", "tspan", "textPath", "style"])

_VIEWBOX_SPLIT_RE = re.compile(r"[\s,]+")
_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(px)?\s*$")


@dataclass
class ViewBox:
    """Icon view box."""

    left: float
    top: float
    width: float
    height: float


def parse_view_box(value: str) -> ViewBox:
    """Parse a viewBox attribute.

    Raises:
        InvalidIconError: If the value is not four numbers with a
            positive width and height.
    """
    parts = [part for part in _VIEWBOX_SPLIT_RE.split(value.strip()) if part]
    if len(parts) != 4:
        raise InvalidIconError(f"Invalid viewBox: {value!r}")
    try:
        left, top, width, height = (float(part) for part in parts)
    except ValueError:
        raise InvalidIconError(f"Invalid viewBox: {value!r}") from None
    if not all(math.isfinite(v) for v in (left, top, width, height)):
        raise InvalidIconError(f"Invalid viewBox: {value!r}")
    if width <= 0 or height <= 0:
        raise InvalidIconError(f"Invalid viewBox size: {value!r}")
    return ViewBox(left, top, width, height)


def parse_length(value: str | None) -> float | None:
    """Parse a user-unit or pixel length. Other units return None."""
    if value is None:
        return None
    match = _LENGTH_RE.match(value)
    if match is None:
        return None
    length = float(match.group(1))
    # "1e999" overflows to inf
    return length if math.isfinite(length) else None


def get_view_box(root: ET.Element) -> ViewBox:
    """Determine the view box of a root element.

    Falls back to numeric width and height when viewBox is missing.

    Raises:
        InvalidIconError: If no view box can be determined.
    """
    value = root.get("viewBox")
    if value is not None:
        return parse_view_box(value)

    width = parse_length(root.get("width"))
    height = parse_length(root.get("height"))
    if width is None or height is None or width <= 0 or height <= 0:
        raise InvalidIconError("Missing viewBox and usable width/height")
    return ViewBox(0.0, 0.0, width, height)


def _strip_foreign_attributes(element: ET.Element) -> None:
    for key in list(element.attrib):
        namespace = get_namespace(key)
        if namespace is not None and namespace not in KEPT_NAMESPACES:
            del element.attrib[key]
        elif namespace is None and key.lower().startswith("on"):
            del element.attrib[key]


def _inline_style(element: ET.Element) -> None:
    style = element.attrib.pop("style", None)
    if style is None:
        return
    for key, value in parse_style(style).items():
        if key.startswith("-"):
            # Vendor-specific property
            continue
        element.set(key, value)


def _clean_element(element: ET.Element) -> None:
    """Recursively clean the children of an element."""
    for child in list(element):
        if not isinstance(child.tag, str):
            element.remove(child)
            continue

        namespace = get_namespace(child.tag)
        local_name = get_local_name(child.tag)
        if namespace is not None and namespace not in KEPT_NAMESPACES:
            element.remove(child)
            continue
        if local_name in FORBIDDEN_ELEMENTS:
            raise InvalidIconError(f"Unsupported element <{local_name}>")
        if local_name in REMOVED_ELEMENTS:
            element.remove(child)
            continue
        if local_name == "style":
            if (child.text or "").strip():
                raise InvalidIconError("Stylesheets are not supported")
            element.remove(child)
            continue

        _strip_foreign_attributes(child)
        _inline_style(child)

        if local_name == "path":
            d = child.get("d", "").strip()
            if not d:
                element.remove(child)
                continue
            try:
                parse_path_data(d)
            except ValueError as e:
                raise InvalidIconError(f"Invalid path data: {e}") from None

        if local_name not in TEXT_ELEMENTS and not (child.text or "").strip():
            child.text = None
        if not (child.tail or "").strip():
            child.tail = None

        _clean_element(child)


def unwrap_groups(element: ET.Element) -> None:
    """Replace attribute-less groups with their children."""
    index = 0
    while index < len(element):
        child = element[index]
        if get_local_name(child.tag) == "g" and not child.attrib:
            element.remove(child)
            for offset, grandchild in enumerate(list(child)):
                element.insert(index + offset, grandchild)
            continue
        unwrap_groups(child)
        index += 1


def _wrap_root_attributes(root: ET.Element) -> None:
    """Move presentation attributes from the root onto a wrapping group."""
    moved = {
        key: root.attrib.pop(key)
        for key in list(root.attrib)
        if key in PRESENTATION_ATTRIBUTES
    }
    if not moved:
        return
    group = ET.Element(svg_tag("g"), moved)
    group.extend(list(root))
    for child in list(root):
        root.remove(child)
    root.append(group)


def cleanup_svg(root: ET.Element) -> ViewBox:
    """Validate and clean an icon document in place.

    Args:
        root: Root element of the icon document.

    Returns:
        The icon's view box.

    Raises:
        InvalidIconError: If the document is not a usable icon.
    """
    if get_local_name(root.tag) != "svg":
        raise InvalidIconError(
            f"Root element is <{get_local_name(root.tag)}>, expected <svg>"
        )

    view_box = get_view_box(root)

    _strip_foreign_attributes(root)
    _inline_style(root)
    root.text = None
    _clean_element(root)
    unwrap_groups(root)

    for key in ("width", "height"):
        root.attrib.pop(key, None)
    root.set(
        "viewBox",
        " ".join(
            f"{value:g}"
            for value in (view_box.left, view_box.top, view_box.width, view_box.height)
        ),
    )
    _wrap_root_attributes(root)

    if not has_visible_geometry(root):
        raise InvalidIconError("Icon has no visible geometry")

    logger.debug(
        "Cleaned icon document: viewBox %.6g %.6g %.6g %.6g",
        view_box.left,
        view_box.top,
        view_box.width,
        view_box.height,
    )
    return view_box
