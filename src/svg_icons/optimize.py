"""Icon markup optimization and path compatibility rewriting."""

import logging
import re
from xml.etree import ElementTree as ET

from .pathdata import deoptimize_path_data, format_number, optimize_path_data
from .utils import (
    INHERITABLE_ATTRIBUTES,
    SVG_NAMESPACES,
    get_local_name,
)

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 3

# Attributes holding a single number
NUMERIC_ATTRIBUTES = frozenset(
    [
        "x",
        "y",
        "x1",
        "y1",
        "x2",
        "y2",
        "cx",
        "cy",
        "r",
        "rx",
        "ry",
        "fx",
        "fy",
        "width",
        "height",
        "offset",
        "opacity",
        "fill-opacity",
        "stroke-opacity",
        "stop-opacity",
        "stroke-width",
        "stroke-miterlimit",
        "stroke-dashoffset",
    ]
)

# Attributes holding a list of numbers
NUMBER_LIST_ATTRIBUTES = frozenset(["points", "stroke-dasharray"])

# Attribute values that equal the SVG initial value
DEFAULT_VALUES = {
    "opacity": "1",
    "fill-opacity": "1",
    "stroke-opacity": "1",
    "stop-opacity": "1",
    "fill-rule": "nonzero",
    "clip-rule": "nonzero",
    "stroke": "none",
    "stroke-width": "1",
    "stroke-dasharray": "none",
    "stroke-dashoffset": "0",
    "stroke-linecap": "butt",
    "stroke-linejoin": "miter",
    "stroke-miterlimit": "4",
    "visibility": "visible",
}

# Attributes defaulting to 0 on geometry elements
ZERO_DEFAULTS = {
    "rect": ("x", "y"),
    "circle": ("cx", "cy"),
    "ellipse": ("cx", "cy"),
    "line": ("x1", "y1", "x2", "y2"),
    "use": ("x", "y"),
}

# Group attributes that cannot be moved onto a single child
NON_COLLAPSIBLE_ATTRIBUTES = frozenset(["id", "clip-path", "mask", "filter", "opacity"])

# Attributes that prevent merging sibling paths
NON_MERGEABLE_ATTRIBUTES = frozenset(
    [
        "id",
        "opacity",
        "stroke-opacity",
        "marker-start",
        "marker-mid",
        "marker-end",
        "clip-path",
        "mask",
        "filter",
    ]
)

# Leading attribute order; everything else follows alphabetically
ATTRIBUTE_ORDER = (
    "id",
    "width",
    "height",
    "x",
    "x1",
    "x2",
    "y",
    "y1",
    "y2",
    "cx",
    "cy",
    "r",
    "fill",
    "stroke",
    "marker",
    "d",
    "points",
)

ID_PREFIX = "svgID"

_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*$")
_LIST_SPLIT_RE = re.compile(r"[\s,]+")
_URL_REF_RE = re.compile(r"url\(\s*['\"]?#([^)'\"\s]+)['\"]?\s*\)")

_HREF_ATTRIBUTES = ("href", f"{{{SVG_NAMESPACES['xlink']}}}href")


def _round_attributes(element: ET.Element, precision: int) -> None:
    local_name = get_local_name(element.tag)
    for key, value in list(element.attrib.items()):
        if key == "d" and local_name == "path":
            element.set(key, optimize_path_data(value, precision))
        elif key in NUMERIC_ATTRIBUTES and _NUMBER_RE.match(value):
            element.set(key, format_number(float(value), precision))
        elif key in NUMBER_LIST_ATTRIBUTES:
            tokens = [t for t in _LIST_SPLIT_RE.split(value.strip()) if t]
            # Lengths with units ("5%", "2px") are left as written
            if not tokens or not all(_NUMBER_RE.match(t) for t in tokens):
                continue
            element.set(
                key,
                " ".join(format_number(float(t), precision) for t in tokens),
            )


def _remove_defaults(element: ET.Element, inherited: dict[str, str]) -> None:
    local_name = get_local_name(element.tag)
    for key, default in DEFAULT_VALUES.items():
        value = element.get(key)
        if value is None or value != default:
            continue
        if key in INHERITABLE_ATTRIBUTES and inherited.get(key, default) != default:
            continue
        del element.attrib[key]
    for key in ZERO_DEFAULTS.get(local_name, ()):
        if element.get(key) == "0":
            del element.attrib[key]

    state = dict(inherited)
    for key in INHERITABLE_ATTRIBUTES:
        if key in element.attrib:
            state[key] = element.attrib[key]
    for child in element:
        _remove_defaults(child, state)


def _can_collapse(group: ET.Element) -> bool:
    if len(group) != 1:
        return False
    child = group[0]
    if child.get("id") is not None:
        return False
    for key in group.attrib:
        if key in NON_COLLAPSIBLE_ATTRIBUTES:
            return False
        if key not in INHERITABLE_ATTRIBUTES and key != "transform":
            return False
    return True


def collapse_groups(element: ET.Element) -> None:
    """Remove groups that have no effect on rendering.

    Groups without attributes are replaced by their children. A group with
    a single child passes its inheritable attributes down (the child's own
    values win) and is replaced by the child.
    """
    for child in list(element):
        collapse_groups(child)

    index = 0
    while index < len(element):
        child = element[index]
        if get_local_name(child.tag) != "g":
            index += 1
            continue
        if len(child) == 0:
            element.remove(child)
            continue
        if not child.attrib:
            element.remove(child)
            for offset, grandchild in enumerate(list(child)):
                element.insert(index + offset, grandchild)
            continue
        if _can_collapse(child):
            grandchild = child[0]
            for key, value in child.attrib.items():
                if key == "transform":
                    own = grandchild.get("transform")
                    grandchild.set(key, f"{value} {own}" if own else value)
                elif key not in grandchild.attrib:
                    grandchild.set(key, value)
            element.remove(child)
            element.insert(index, grandchild)
            continue
        index += 1


def _effective_fill(path: ET.Element, inherited_fill: str | None) -> str | None:
    return path.get("fill", inherited_fill)


def merge_paths(element: ET.Element, inherited_fill: str | None = None) -> None:
    """Merge consecutive unfilled paths that share every attribute.

    Only paths without fill are merged: joining filled paths could change
    how overlapping areas are filled.
    """
    fill = element.get("fill", inherited_fill)
    index = 0
    while index < len(element):
        current = element[index]
        merge_paths(current, fill)
        if index + 1 >= len(element):
            break
        following = element[index + 1]
        if _mergeable(current, following, fill):
            current.set("d", current.get("d", "") + following.get("d", ""))
            element.remove(following)
            continue
        index += 1


def _mergeable(first: ET.Element, second: ET.Element, fill: str | None) -> bool:
    if get_local_name(first.tag) != "path" or get_local_name(second.tag) != "path":
        return False
    if len(first) or len(second):
        return False
    if _effective_fill(first, fill) != "none":
        return False
    first_attributes = {k: v for k, v in first.attrib.items() if k != "d"}
    second_attributes = {k: v for k, v in second.attrib.items() if k != "d"}
    if first_attributes != second_attributes:
        return False
    if any(key in NON_MERGEABLE_ATTRIBUTES for key in first_attributes):
        return False
    return second.get("d", "").startswith("M")


def _collect_references(root: ET.Element) -> set[str]:
    references: set[str] = set()
    for elem in root.iter():
        for key, value in elem.attrib.items():
            references.update(_URL_REF_RE.findall(value))
            if key in _HREF_ATTRIBUTES and value.startswith("#"):
                references.add(value[1:])
    return references


def cleanup_ids(root: ET.Element, prefix: str = ID_PREFIX) -> dict[str, str]:
    """Drop unused ids and rename the used ones.

    Referenced ids become ``svgID0``, ``svgID1``... in document order, so
    icons from different sources share one id scheme.

    Returns:
        Mapping of old id to new id.
    """
    references = _collect_references(root)
    renamed: dict[str, str] = {}
    for elem in root.iter():
        old = elem.get("id")
        if old is None:
            continue
        if old not in references or old in renamed:
            del elem.attrib["id"]
            continue
        renamed[old] = f"{prefix}{len(renamed)}"
        elem.set("id", renamed[old])

    if not renamed:
        return renamed

    def replace_url(match: re.Match) -> str:
        old = match.group(1)
        return f"url(#{renamed.get(old, old)})"

    for elem in root.iter():
        for key, value in list(elem.attrib.items()):
            if key in _HREF_ATTRIBUTES and value.startswith("#"):
                elem.set(key, "#" + renamed.get(value[1:], value[1:]))
            elif "url(" in value:
                elem.set(key, _URL_REF_RE.sub(replace_url, value))
    return renamed


def _remove_empty_containers(element: ET.Element) -> None:
    for child in list(element):
        _remove_empty_containers(child)
        if get_local_name(child.tag) in ("defs", "g") and len(child) == 0:
            element.remove(child)


def _attribute_sort_key(name: str) -> tuple[int, str]:
    group = get_local_name(name).split("-", 1)[0]
    try:
        return (ATTRIBUTE_ORDER.index(group), name)
    except ValueError:
        return (len(ATTRIBUTE_ORDER), name)


def sort_attributes(root: ET.Element) -> None:
    """Sort attributes of all elements below the root."""
    for elem in root.iter():
        if elem is root:
            continue
        items = sorted(elem.attrib.items(), key=lambda item: _attribute_sort_key(item[0]))
        elem.attrib.clear()
        elem.attrib.update(items)


def optimize_svg(root: ET.Element, precision: int = DEFAULT_PRECISION) -> None:
    """Minify an icon document in place.

    Args:
        root: Root element of a cleaned icon document.
        precision: Number of decimals kept in coordinates.

    Raises:
        ValueError: If path data is malformed.
    """
    for elem in root.iter():
        if elem is not root:
            _round_attributes(elem, precision)
    for child in root:
        _remove_defaults(child, {})
    _remove_empty_containers(root)
    collapse_groups(root)
    merge_paths(root)
    # Merging can leave groups with a single child
    collapse_groups(root)
    cleanup_ids(root)
    sort_attributes(root)


def deoptimize_paths(root: ET.Element) -> int:
    """Rewrite all path data for compatibility with older renderers.

    Returns:
        Number of paths rewritten.

    Raises:
        ValueError: If path data is malformed.
    """
    count = 0
    for elem in root.iter():
        if get_local_name(elem.tag) != "path":
            continue
        d = elem.get("d")
        if d:
            elem.set("d", deoptimize_path_data(d))
            count += 1
    logger.debug("Rewrote %d path(s) for compatibility", count)
    return count
