"""Color canonicalization for monotone icons.

Pure black paint becomes ``currentColor`` so the icon follows the color of
the surrounding text, shapes painted pure white are removed, and every
other color is left exactly as written. Comparison is exact: near-black
values such as ``#010101`` are kept.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable
from xml.etree import ElementTree as ET

from PIL import ImageColor

from .errors import InvalidIconError
from .utils import (
    DRAWING_ELEMENTS,
    NON_RENDERED_CONTAINERS,
    get_local_name,
    has_visible_geometry,
)

# Attributes holding a color value
COLOR_ATTRIBUTES = (
    "fill",
    "stroke",
    "stop-color",
    "flood-color",
    "lighting-color",
    "color",
)

# Values meaning "no paint"
EMPTY_COLORS = frozenset(["none", "transparent"])

# Values that are not colors but are valid paint
PASSTHROUGH_VALUES = frozenset(["currentcolor", "inherit", "initial", "unset"])

# Containers whose colors describe coverage rather than paint
COVERAGE_CONTAINERS = frozenset(["clipPath", "mask"])

# Elements that can be removed when painted white
REMOVABLE_ELEMENTS = DRAWING_ELEMENTS | frozenset(["g", "svg"])

DEFAULT_COLOR = "currentColor"

_FUNCTION_RE = re.compile(r"^(rgb|hsl)a?\((.*)\)$")
_ARGUMENT_SPLIT_RE = re.compile(r"\s*[,/]\s*")


@dataclass(frozen=True)
class Color:
    """An sRGB color with alpha, all channels in 0..255."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    @property
    def hex(self) -> str:
        """Hex notation, with alpha only when not opaque."""
        text = f"#{self.red:02x}{self.green:02x}{self.blue:02x}"
        if self.alpha != 255:
            text += f"{self.alpha:02x}"
        return text


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


class ColorAction(str, Enum):
    """What to do with a color found in an icon."""

    KEEP = "keep"
    INHERIT = "inherit"
    REMOVE = "remove"


ColorClassifier = Callable[[Color], ColorAction]


def _parse_alpha(value: str) -> int:
    if value.endswith("%"):
        alpha = float(value[:-1]) / 100
    else:
        alpha = float(value)
    if not 0 <= alpha <= 1:
        raise ValueError(f"Alpha out of range: {value}")
    return round(alpha * 255)


def _split_alpha(value: str) -> tuple[str, int]:
    """Separate a CSS alpha component, which PIL reads as 0..255."""
    match = _FUNCTION_RE.match(value)
    if match is None:
        return value, 255
    arguments = _ARGUMENT_SPLIT_RE.split(match.group(2).strip())
    if len(arguments) == 4:
        return f"{match.group(1)}({','.join(arguments[:3])})", _parse_alpha(arguments[3])
    return f"{match.group(1)}({','.join(arguments)})", 255


def is_empty_color(value: str) -> bool:
    """Check if a color value means the absence of paint."""
    return value.strip().lower() in EMPTY_COLORS


def is_passthrough_value(value: str) -> bool:
    """Check if a paint value is exempt from color parsing."""
    normalized = value.strip().lower()
    return normalized in PASSTHROUGH_VALUES or normalized.startswith("url(")


def parse_color(value: str) -> Color | None:
    """Parse a CSS color string.

    Named colors, hex notation (3, 4, 6 or 8 digits), ``rgb()``,
    ``rgba()``, ``hsl()``, ``hsla()`` and ``hsv()`` are supported.

    Args:
        value: Color string.

    Returns:
        Parsed color, or None if the string is not a color.
    """
    normalized = value.strip().lower()
    if not normalized:
        return None
    if normalized == "transparent":
        return Color(0, 0, 0, 0)
    try:
        text, alpha = _split_alpha(normalized)
        channels = ImageColor.getrgb(text)
    except ValueError:
        return None
    if len(channels) == 4:
        red, green, blue, own_alpha = channels
        alpha = round(own_alpha * alpha / 255)
    else:
        red, green, blue = channels
    return Color(red, green, blue, alpha)


def classify_color(color: Color) -> ColorAction:
    """Default color policy for monotone icons.

    Args:
        color: Parsed color.

    Returns:
        INHERIT for exact black, REMOVE for exact white, KEEP otherwise.
    """
    if color == BLACK:
        return ColorAction.INHERIT
    if color == WHITE:
        return ColorAction.REMOVE
    return ColorAction.KEEP


@dataclass
class ColorReport:
    """Summary of a color canonicalization run."""

    kept: list[str] = field(default_factory=list)
    replaced: int = 0
    defaulted: int = 0
    removed: int = 0

    @property
    def is_monotone(self) -> bool:
        """Check if no explicit palette color was kept."""
        return not self.kept


@dataclass
class _ColorWalk:
    classify: ColorClassifier
    default_color: str
    report: ColorReport
    marked: list[ET.Element] = field(default_factory=list)

    def visit(
        self, element: ET.Element, inherited_fill: str | None, coverage: bool
    ) -> None:
        local_name = get_local_name(element.tag)
        if local_name in COVERAGE_CONTAINERS:
            coverage = True

        if not coverage:
            if self._rewrite(element, local_name):
                self.marked.append(element)
                self.report.removed += 1
                return
            if (
                local_name in DRAWING_ELEMENTS
                and element.get("fill") is None
                and inherited_fill is None
                and self._apply_default(element)
            ):
                self.report.defaulted += 1

        fill = element.get("fill", inherited_fill)
        if local_name in NON_RENDERED_CONTAINERS:
            # Definitions inherit from where they are used, not from here
            fill = None
        for child in element:
            if isinstance(child.tag, str):
                self.visit(child, fill, coverage)

    def _rewrite(self, element: ET.Element, local_name: str) -> bool:
        """Rewrite color attributes. Returns True if the element must go."""
        remove = False
        for attribute in COLOR_ATTRIBUTES:
            value = element.get(attribute)
            if value is None or is_empty_color(value) or is_passthrough_value(value):
                continue
            color = parse_color(value)
            if color is None:
                raise InvalidIconError(
                    f'Invalid color: "{value}" in attribute {attribute}'
                )
            action = self.classify(color)
            if action == ColorAction.INHERIT:
                element.set(attribute, self.default_color)
                self.report.replaced += 1
            elif action == ColorAction.REMOVE and local_name in REMOVABLE_ELEMENTS:
                remove = True
            elif value not in self.report.kept:
                self.report.kept.append(value)
        return remove

    def _apply_default(self, element: ET.Element) -> bool:
        """Resolve the implicit black fill of a shape."""
        action = self.classify(BLACK)
        if action == ColorAction.INHERIT:
            element.set("fill", self.default_color)
            return True
        return False


def parse_colors(
    root: ET.Element,
    classify: ColorClassifier = classify_color,
    default_color: str = DEFAULT_COLOR,
) -> ColorReport:
    """Canonicalize every color in an icon document in place.

    Colors inside clip paths and masks are left alone. ``none``,
    ``transparent``, ``currentColor`` and paint server references are
    never parsed, so running this twice is a no-op.

    Args:
        root: Root element of the icon document.
        classify: Policy deciding what happens to each color.
        default_color: Replacement for colors classified as INHERIT.

    Returns:
        ColorReport describing the changes.

    Raises:
        InvalidIconError: If a color cannot be parsed, or removing white
            shapes leaves nothing to draw.
    """
    report = ColorReport()
    walk = _ColorWalk(classify=classify, default_color=default_color, report=report)
    walk.visit(root, inherited_fill=None, coverage=False)

    if root in walk.marked:
        raise InvalidIconError("Icon root is painted white")

    parents = {child: parent for parent in root.iter() for child in parent}
    for element in walk.marked:
        parents[element].remove(element)

    if walk.marked and not has_visible_geometry(root):
        raise InvalidIconError("Icon has no visible geometry after removing white shapes")

    return report
