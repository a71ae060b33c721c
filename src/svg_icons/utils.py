"""Utility functions for SVG parsing and serialization."""

from pathlib import Path
from typing import Iterator
from xml.etree import ElementTree as ET

# SVG namespace mappings
SVG_NAMESPACES = {
    "svg": "http://www.w3.org/2000/svg",
    "xlink": "http://www.w3.org/1999/xlink",
    "xml": "http://www.w3.org/XML/1998/namespace",
}

# Namespaces that are allowed to survive cleanup
KEPT_NAMESPACES = frozenset(SVG_NAMESPACES.values())

# Drawing elements that produce visible geometry
DRAWING_ELEMENTS = frozenset(
    [
        "rect",
        "circle",
        "ellipse",
        "line",
        "polyline",
        "polygon",
        "path",
        "text",
        "image",
        "use",
    ]
)

# Containers whose content is never rendered directly
NON_RENDERED_CONTAINERS = frozenset(
    [
        "defs",
        "clipPath",
        "mask",
        "symbol",
        "pattern",
        "marker",
        "linearGradient",
        "radialGradient",
    ]
)

# Presentation attributes inherited by descendants
INHERITABLE_ATTRIBUTES = frozenset(
    [
        "clip-rule",
        "color",
        "fill",
        "fill-opacity",
        "fill-rule",
        "font-family",
        "font-size",
        "font-style",
        "font-weight",
        "stroke",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
        "text-anchor",
        "visibility",
    ]
)

# Presentation attributes that apply to the element itself only
PRESENTATION_ATTRIBUTES = INHERITABLE_ATTRIBUTES | frozenset(
    [
        "clip-path",
        "filter",
        "mask",
        "opacity",
        "transform",
    ]
)

# Serialized attribute prefixes for kept namespaces
_ATTRIBUTE_PREFIXES = {
    SVG_NAMESPACES["xlink"]: "xlink:",
    SVG_NAMESPACES["xml"]: "xml:",
}


def register_namespaces() -> None:
    """Register SVG namespaces to preserve prefixes when writing."""
    for prefix, uri in SVG_NAMESPACES.items():
        if prefix != "xml":
            ET.register_namespace(prefix, uri)


def parse_svg(file_path: Path) -> ET.Element:
    """Parse an SVG file and return the root element.

    Comments, processing instructions and the XML declaration are
    discarded by the parser.

    Args:
        file_path: Path to the SVG file.

    Returns:
        Root element of the parsed SVG.

    Raises:
        FileNotFoundError: If the file does not exist.
        ET.ParseError: If the file is not valid XML.
    """
    register_namespaces()
    tree = ET.parse(file_path)
    return tree.getroot()


def parse_svg_string(text: str) -> ET.Element:
    """Parse SVG markup held in memory and return the root element."""
    register_namespaces()
    return ET.fromstring(text)


def get_local_name(tag: str) -> str:
    """Extract local name from a namespaced tag.

    Args:
        tag: Full tag name, possibly with namespace.

    Returns:
        Local name without namespace prefix.

    Example:
        >>> get_local_name("{http://www.w3.org/2000/svg}rect")
        'rect'
    """
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def get_namespace(tag: str) -> str | None:
    """Return the namespace URI of a tag or attribute name, if any."""
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def svg_tag(local_name: str) -> str:
    """Build a tag name in the SVG namespace."""
    return f"{{{SVG_NAMESPACES['svg']}}}{local_name}"


def is_drawing_element(element: ET.Element) -> bool:
    """Check if an element is a drawing element.

    Args:
        element: An XML element.

    Returns:
        True if the element is a drawing element.
    """
    return get_local_name(element.tag) in DRAWING_ELEMENTS


def iter_with_parents(
    root: ET.Element,
) -> Iterator[tuple[ET.Element, ET.Element]]:
    """Iterate over (parent, child) pairs in document order."""
    for parent in root.iter():
        for child in parent:
            yield parent, child


def iter_rendered(root: ET.Element) -> Iterator[ET.Element]:
    """Iterate over elements outside of non-rendered containers.

    The root itself is not yielded.
    """
    for child in root:
        if not isinstance(child.tag, str):
            continue
        yield child
        if get_local_name(child.tag) not in NON_RENDERED_CONTAINERS:
            yield from iter_rendered(child)


def has_visible_geometry(root: ET.Element) -> bool:
    """Check if any drawing element is rendered outside of definitions."""
    return any(is_drawing_element(elem) for elem in iter_rendered(root))


def parse_style(style: str) -> dict[str, str]:
    """Parse an inline style attribute into declarations."""
    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        key, value = chunk.split(":", 1)
        key = key.strip()
        value = value.strip()
        if key and value:
            declarations[key] = value
    return declarations


def _escape(value: str, quote: bool) -> str:
    value = value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    if quote:
        value = value.replace('"', "&quot;")
    return value


def _attribute_name(name: str) -> str:
    namespace = get_namespace(name)
    if namespace is None:
        return name
    prefix = _ATTRIBUTE_PREFIXES.get(namespace, "")
    return prefix + get_local_name(name)


def serialize_element(element: ET.Element) -> str:
    """Serialize an element without namespace declarations.

    Tags are written with their local names, attributes in their current
    order. Elements without children or text are self-closed.
    """
    name = get_local_name(element.tag)
    parts = [f"<{name}"]
    for key, value in element.attrib.items():
        parts.append(f' {_attribute_name(key)}="{_escape(value, True)}"')

    children = [child for child in element if isinstance(child.tag, str)]
    text = element.text or ""
    if not children and not text:
        parts.append("/>")
    else:
        parts.append(">")
        parts.append(_escape(text, False))
        for child in children:
            parts.append(serialize_element(child))
            parts.append(_escape(child.tail or "", False))
        parts.append(f"</{name}>")
    return "".join(parts)


def serialize_body(root: ET.Element) -> str:
    """Serialize the content of an SVG root element as inner markup."""
    return "".join(
        serialize_element(child) for child in root if isinstance(child.tag, str)
    )
