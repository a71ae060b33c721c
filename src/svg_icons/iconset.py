"""Icon sets: loading icon files and exporting collection records."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from xml.etree import ElementTree as ET

from .cleanup import ViewBox
from .diagnostics import Diagnostic, DiagnosticSink, log_diagnostic
from .discover import DEFAULT_EXTENSION, iter_icon_files
from .errors import SourceError
from .utils import parse_svg

logger = logging.getLogger(__name__)

# Default icon grid of a collection
DEFAULT_ICON_SIZE = 16


def _number(value: float) -> int | float:
    """Return integral floats as int so they serialize without a fraction."""
    if float(value).is_integer():
        return int(value)
    return value


@dataclass
class IconDocument:
    """A parsed icon waiting to be processed.

    The tree is owned by the icon set and modified in place by each
    pipeline stage.
    """

    name: str
    root: ET.Element
    source: Path | None = None
    mtime: int = 0
    view_box: ViewBox | None = None


@dataclass(frozen=True)
class IconEntry:
    """A processed icon stored in an icon set."""

    body: str
    width: float | None = None
    height: float | None = None
    left: float | None = None
    top: float | None = None
    mtime: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the collection record form, omitting unset fields."""
        result: dict[str, Any] = {"body": self.body}
        for key in ("left", "top", "width", "height"):
            value = getattr(self, key)
            if value is not None:
                result[key] = _number(value)
        return result


@dataclass
class IconSet:
    """Icons of one collection.

    Loaded documents wait in ``documents`` until they are committed as
    entries or removed. ``aliases`` maps alias names to the icon or alias
    they point to.
    """

    prefix: str = ""
    width: float = DEFAULT_ICON_SIZE
    height: float = DEFAULT_ICON_SIZE
    documents: dict[str, IconDocument] = field(default_factory=dict)
    icons: dict[str, IconEntry] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.documents or name in self.icons or name in self.aliases

    def __len__(self) -> int:
        return len(self.documents) + len(self.icons)

    def add_document(self, document: IconDocument) -> None:
        """Add a loaded document.

        Raises:
            ValueError: If the name is already used.
        """
        if document.name in self:
            raise ValueError(f"Duplicate icon name: {document.name}")
        self.documents[document.name] = document

    def commit(self, name: str, body: str) -> IconEntry:
        """Turn a processed document into an icon entry.

        Width and height are stored only when they differ from the set's
        default grid, left and top only when they are not 0.

        Args:
            name: Icon name.
            body: Serialized inner markup.

        Returns:
            The committed entry.
        """
        document = self.documents.pop(name)
        view_box = document.view_box or ViewBox(0, 0, self.width, self.height)
        entry = IconEntry(
            body=body,
            width=view_box.width if view_box.width != self.width else None,
            height=view_box.height if view_box.height != self.height else None,
            left=view_box.left or None,
            top=view_box.top or None,
            mtime=document.mtime,
        )
        self.icons[name] = entry
        return entry

    def remove(self, name: str) -> None:
        """Remove an icon or alias and every alias that pointed to it."""
        self.documents.pop(name, None)
        self.icons.pop(name, None)
        self.aliases.pop(name, None)
        for alias in [a for a in self.aliases if self.resolve_alias(a) is None]:
            self.aliases.pop(alias, None)

    def add_alias(self, name: str, parent: str) -> None:
        """Add an alias for an existing icon or alias.

        Raises:
            ValueError: If the name is taken or the parent does not resolve.
        """
        if name in self:
            raise ValueError(f"Duplicate icon name: {name}")
        if parent not in self:
            raise ValueError(f"Unknown alias parent: {parent}")
        self.aliases[name] = parent

    def resolve_alias(self, name: str) -> str | None:
        """Follow aliases to an icon name. Returns None if unresolvable."""
        seen: set[str] = set()
        while name in self.aliases:
            if name in seen:
                return None
            seen.add(name)
            name = self.aliases[name]
        if name in self.icons or name in self.documents:
            return name
        return None

    def icon_names(self) -> list[str]:
        """Names of all icons, pending and committed, excluding aliases."""
        return list(self.documents) + list(self.icons)

    @property
    def last_modified(self) -> int:
        """Latest modification time of committed icons, 0 if none."""
        return max((entry.mtime for entry in self.icons.values()), default=0)

    def export(self) -> dict[str, Any]:
        """Export committed icons as a collection record.

        Returns:
            Dictionary with ``prefix``, ``icons``, ``lastModified`` and,
            when present, ``aliases`` and a non-default ``width``/``height``.
        """
        record: dict[str, Any] = {
            "prefix": self.prefix,
            "icons": {name: self.icons[name].to_dict() for name in sorted(self.icons)},
        }
        aliases = {
            name: {"parent": parent}
            for name, parent in sorted(self.aliases.items())
            if self.resolve_alias(name) in self.icons
        }
        if aliases:
            record["aliases"] = aliases
        if self.width != DEFAULT_ICON_SIZE:
            record["width"] = _number(self.width)
        if self.height != DEFAULT_ICON_SIZE:
            record["height"] = _number(self.height)
        record["lastModified"] = self.last_modified
        return record


def icon_name(path: Path, extension: str = DEFAULT_EXTENSION) -> str:
    """Derive an icon name from a file name by stripping the extension."""
    name = path.name
    if name.lower().endswith(extension.lower()):
        name = name[: len(name) - len(extension)]
    return name


def load_icon_set(
    directory: Path,
    include_sub_dirs: bool = False,
    extension: str = DEFAULT_EXTENSION,
    prefix: str = "",
    width: float = DEFAULT_ICON_SIZE,
    height: float = DEFAULT_ICON_SIZE,
    sink: DiagnosticSink | None = None,
) -> IconSet:
    """Load every icon file of a directory into an icon set.

    Files that cannot be read or parsed are skipped with a warning.

    Args:
        directory: Directory holding icon files.
        include_sub_dirs: Whether to add files of nested directories.
        extension: Icon file extension.
        prefix: Collection prefix.
        width: Default icon width of the set.
        height: Default icon height of the set.
        sink: Receiver for diagnostics.

    Returns:
        IconSet with one pending document per loaded file.

    Raises:
        SourceError: If the directory does not exist.
    """
    sink = sink or log_diagnostic
    directory = Path(directory)
    if not directory.is_dir():
        raise SourceError(f"Source is not a directory: {directory}")

    icon_set = IconSet(prefix=prefix, width=width, height=height)
    for path in iter_icon_files(directory, extension, include_sub_dirs, sink):
        name = icon_name(path, extension)
        if name in icon_set:
            sink(
                Diagnostic(
                    severity="warning",
                    subject=str(path),
                    reason=f'Duplicate icon name "{name}", file ignored',
                    stage="load",
                )
            )
            continue
        try:
            root = parse_svg(path)
            mtime = int(path.stat().st_mtime)
        except (OSError, ET.ParseError, UnicodeDecodeError) as e:
            sink(
                Diagnostic(
                    severity="warning",
                    subject=str(path),
                    reason=f"Cannot import file: {e}",
                    stage="load",
                )
            )
            continue
        icon_set.add_document(IconDocument(name, root, source=path, mtime=mtime))

    logger.debug("Loaded %d icon(s) from %s", len(icon_set.documents), directory)
    return icon_set
