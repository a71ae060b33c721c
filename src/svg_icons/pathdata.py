"""Path data parsing, minification and compatibility rewriting.

Path data is read into a list of ``PathCommand`` objects, one per segment:
implicit command repetition is made explicit while parsing, and an implicit
lineto following a moveto is stored as ``L``/``l``. Two writers turn
commands back into text:

- ``optimize_path_data`` produces the shortest form (absolute or relative
  per segment, axis-aligned lines as ``H``/``V``, repeated commands and
  separators omitted where the grammar allows).
- ``deoptimize_path_data`` produces a verbose form that older renderers
  accept: every segment carries its own command letter, arc flags are
  separated, and ``S``/``T`` shorthand curves are spelled out as ``C``/``Q``.
"""

import re
from dataclasses import dataclass, field

# Number of arguments per command
COMMAND_ARITY = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}

# Arc argument positions holding flags
ARC_FLAG_INDEXES = (3, 4)

# Precision used when re-emitting numbers without minification
EXACT_PRECISION = 12

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATOR_RE = re.compile(r"[\s,]*")

Point = tuple[float, float]


@dataclass
class PathCommand:
    """A single path segment as written in path data."""

    command: str
    args: list[float] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Upper-case command name."""
        return self.command.upper()

    @property
    def is_relative(self) -> bool:
        """Check if the command uses relative coordinates."""
        return self.command.islower()


@dataclass
class Segment:
    """A path command resolved against the current pen position."""

    command: PathCommand
    absolute: list[float]
    start: Point
    reflected: Point | None = None

    @property
    def name(self) -> str:
        """Upper-case command name."""
        return self.command.name


def _skip_separators(d: str, pos: int) -> int:
    match = _SEPARATOR_RE.match(d, pos)
    return match.end() if match else pos


def parse_path_data(d: str) -> list[PathCommand]:
    """Parse a path data string.

    Args:
        d: Value of a ``d`` attribute.

    Returns:
        One PathCommand per segment.

    Raises:
        ValueError: If the path data is malformed.
    """
    commands: list[PathCommand] = []
    pos = _skip_separators(d, 0)
    current: str | None = None

    while pos < len(d):
        char = d[pos]
        if char in "MmLlHhVvCcSsQqTtAaZz":
            current = char
            pos = _skip_separators(d, pos + 1)
            if current in "Zz":
                commands.append(PathCommand(current))
                continue
            if not commands and current not in "Mm":
                raise ValueError(f"Path data must start with a moveto: {d!r}")
        elif current is None:
            raise ValueError(f"Path data must start with a command: {d!r}")
        elif current in "Zz":
            raise ValueError(f"Unexpected data after closepath at {pos}: {d!r}")

        args: list[float] = []
        for index in range(COMMAND_ARITY[current.upper()]):
            if current in "Aa" and index in ARC_FLAG_INDEXES:
                if pos >= len(d) or d[pos] not in "01":
                    raise ValueError(f"Invalid arc flag at {pos}: {d!r}")
                args.append(float(d[pos]))
                pos = _skip_separators(d, pos + 1)
                continue
            match = _NUMBER_RE.match(d, pos)
            if match is None:
                raise ValueError(f"Expected number at {pos}: {d!r}")
            args.append(float(match.group()))
            pos = _skip_separators(d, match.end())

        commands.append(PathCommand(current, args))
        # Coordinate pairs following a moveto are implicit linetos
        if current == "M":
            current = "L"
        elif current == "m":
            current = "l"

    return commands


def _reflect(control: Point | None, point: Point) -> Point:
    if control is None:
        return point
    return (2 * point[0] - control[0], 2 * point[1] - control[1])


def resolve_segments(commands: list[PathCommand]) -> list[Segment]:
    """Resolve commands to absolute coordinates.

    Shorthand curves get their implicit first control point in
    ``Segment.reflected``.

    Args:
        commands: Parsed path commands.

    Returns:
        Segments in the same order as the commands.
    """
    segments: list[Segment] = []
    x = y = 0.0
    start_x = start_y = 0.0
    previous_name: str | None = None
    previous_control: Point | None = None

    for command in commands:
        name = command.name
        relative = command.is_relative
        args = command.args
        start = (x, y)
        reflected = None

        if name == "Z":
            absolute: list[float] = []
            x, y = start_x, start_y
        elif name == "H":
            absolute = [args[0] + x if relative else args[0]]
            x = absolute[0]
        elif name == "V":
            absolute = [args[0] + y if relative else args[0]]
            y = absolute[0]
        elif name == "A":
            end_x = args[5] + x if relative else args[5]
            end_y = args[6] + y if relative else args[6]
            absolute = args[:5] + [end_x, end_y]
            x, y = end_x, end_y
        else:
            absolute = [
                value + (x if index % 2 == 0 else y) if relative else value
                for index, value in enumerate(args)
            ]
            if name == "S":
                cubic = previous_name in ("C", "S")
                reflected = _reflect(previous_control if cubic else None, start)
            elif name == "T":
                quadratic = previous_name in ("Q", "T")
                reflected = _reflect(previous_control if quadratic else None, start)
            x, y = absolute[-2], absolute[-1]
            if name == "M":
                start_x, start_y = x, y

        if name in ("C", "S"):
            previous_control = (absolute[-4], absolute[-3])
        elif name == "Q":
            previous_control = (absolute[0], absolute[1])
        elif name == "T":
            previous_control = reflected
        else:
            previous_control = None
        previous_name = name

        segments.append(Segment(command, absolute, start, reflected))

    return segments


def format_number(value: float, precision: int = 3) -> str:
    """Format a number in its shortest form.

    Example:
        >>> format_number(0.5)
        '.5'
        >>> format_number(-1.23456)
        '-1.235'
    """
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    text = f"{rounded:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text.startswith("0."):
        text = text[1:]
    elif text.startswith("-0."):
        text = "-" + text[2:]
    return text


class _PathWriter:
    """Joins command letters and numbers with minimal separators."""

    def __init__(self, compact: bool):
        self.compact = compact
        self.parts: list[str] = []
        self.last_letter: str | None = None
        self._previous: str | None = None
        self._previous_is_flag = False

    def command(self, letter: str) -> None:
        if self.compact and self._is_implicit(letter):
            self.last_letter = letter
            return
        self.parts.append(letter)
        self.last_letter = letter
        self._previous = None
        self._previous_is_flag = False

    def _is_implicit(self, letter: str) -> bool:
        if self.last_letter is None or letter in "MmZz":
            return False
        if letter == self.last_letter:
            return True
        return (self.last_letter, letter) in (("M", "L"), ("m", "l"))

    def number(self, text: str, flag: bool = False) -> None:
        if self._previous is not None and self._needs_separator(text, flag):
            self.parts.append(" ")
        self.parts.append(text)
        self._previous = text
        self._previous_is_flag = flag

    def _needs_separator(self, text: str, flag: bool) -> bool:
        if text.startswith("-"):
            return False
        if not self.compact:
            return True
        if self._previous_is_flag:
            return False
        return not (text.startswith(".") and "." in self._previous)

    def result(self) -> str:
        return "".join(self.parts)


def _arc_tokens(args: list[float], precision: int) -> list[tuple[str, bool]]:
    tokens = [(format_number(value, precision), False) for value in args[:3]]
    tokens += [(str(int(args[3])), True), (str(int(args[4])), True)]
    return tokens


def optimize_path_data(d: str, precision: int = 3) -> str:
    """Rewrite path data in its shortest equivalent form.

    Coordinates are rounded to ``precision`` decimals. Relative offsets
    are computed from the rounded pen position so rounding errors do not
    accumulate along the path.

    Args:
        d: Path data.
        precision: Number of decimals to keep.

    Returns:
        Minified path data.

    Raises:
        ValueError: If the path data is malformed.
    """
    segments = resolve_segments(parse_path_data(d))
    writer = _PathWriter(compact=True)
    pen_x = pen_y = 0.0
    start_x = start_y = 0.0

    def fmt(value: float) -> str:
        return format_number(value, precision)

    for index, segment in enumerate(segments):
        name = segment.name
        if name == "Z":
            writer.command("z")
            pen_x, pen_y = start_x, start_y
            continue

        if name == "A":
            end_x = round(segment.absolute[5], precision)
            end_y = round(segment.absolute[6], precision)
            head = _arc_tokens(segment.absolute, precision)
            absolute = head + [(fmt(end_x), False), (fmt(end_y), False)]
            relative = head + [(fmt(end_x - pen_x), False), (fmt(end_y - pen_y), False)]
        elif name == "H":
            end_x, end_y = round(segment.absolute[0], precision), pen_y
            absolute = [(fmt(end_x), False)]
            relative = [(fmt(end_x - pen_x), False)]
        elif name == "V":
            end_x, end_y = pen_x, round(segment.absolute[0], precision)
            absolute = [(fmt(end_y), False)]
            relative = [(fmt(end_y - pen_y), False)]
        else:
            coords = [round(value, precision) for value in segment.absolute]
            end_x, end_y = coords[-2], coords[-1]
            if name == "L" and end_y == pen_y:
                name = "H"
                coords = [end_x]
            elif name == "L" and end_x == pen_x:
                name = "V"
                coords = [end_y]
            absolute = [(fmt(value), False) for value in coords]
            if name == "H":
                offsets = [end_x - pen_x]
            elif name == "V":
                offsets = [end_y - pen_y]
            else:
                offsets = [
                    value - (pen_x if i % 2 == 0 else pen_y)
                    for i, value in enumerate(coords)
                ]
            relative = [(fmt(value), False) for value in offsets]

        if index == 0:
            letter, tokens = name, absolute
        elif _token_length(relative) <= _token_length(absolute):
            letter, tokens = name.lower(), relative
        else:
            letter, tokens = name, absolute

        writer.command(letter)
        for text, flag in tokens:
            writer.number(text, flag)

        pen_x, pen_y = end_x, end_y
        if name == "M":
            start_x, start_y = pen_x, pen_y

    return writer.result()


def _token_length(tokens: list[tuple[str, bool]]) -> int:
    return sum(len(text) + 1 for text, _ in tokens)


def deoptimize_path_data(d: str) -> str:
    """Rewrite path data for renderers without full path grammar support.

    Every segment gets an explicit command letter, arc flags are
    separated by spaces and shorthand curves are expanded. Relative
    commands stay relative.

    Args:
        d: Path data.

    Returns:
        Expanded path data.

    Raises:
        ValueError: If the path data is malformed.
    """
    segments = resolve_segments(parse_path_data(d))
    writer = _PathWriter(compact=False)

    def fmt(value: float) -> str:
        return format_number(value, EXACT_PRECISION)

    for segment in segments:
        command = segment.command
        letter = command.command
        args = list(command.args)

        if segment.name in ("S", "T") and segment.reflected is not None:
            control_x, control_y = segment.reflected
            if command.is_relative:
                control_x -= segment.start[0]
                control_y -= segment.start[1]
            letter = "c" if segment.name == "S" else "q"
            if not command.is_relative:
                letter = letter.upper()
            args = [control_x, control_y] + args

        writer.command(letter)
        for index, value in enumerate(args):
            if segment.name == "A" and index in ARC_FLAG_INDEXES:
                writer.number(str(int(value)), flag=True)
            else:
                writer.number(fmt(value))

    return writer.result()
