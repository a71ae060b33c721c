"""Discovery of icon source directories and files."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .diagnostics import Diagnostic, DiagnosticSink, log_diagnostic

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".svg"
DEFAULT_SEPARATOR = "-"


@dataclass(frozen=True)
class SourceDirectory:
    """A directory that becomes one icon collection."""

    path: Path
    relative: Path


def _has_extension(path: Path, extension: str) -> bool:
    return path.name.lower().endswith(extension.lower())


def _list_directory(
    directory: Path, sink: DiagnosticSink
) -> list[Path] | None:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        sink(
            Diagnostic(
                severity="warning",
                subject=str(directory),
                reason=f"Cannot read directory: {e.strerror or e}",
                stage="discover",
            )
        )
        return None


def find_svg_directories(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    sink: DiagnosticSink | None = None,
) -> list[SourceDirectory]:
    """Find every directory that directly contains icon files.

    The tree is walked depth-first with entries sorted by name. A
    directory qualifies when it holds at least one icon file itself;
    traversal continues below qualifying directories, so nested
    directories become collections of their own. Hidden and symlinked
    directories are skipped, and an unreadable directory only drops its
    own branch.

    Args:
        root: Directory to scan.
        extension: Icon file extension (case-insensitive).
        sink: Receiver for diagnostics.

    Returns:
        Qualifying directories with their path relative to ``root``.
    """
    sink = sink or log_diagnostic
    root = Path(root)
    result: list[SourceDirectory] = []

    def traverse(directory: Path) -> None:
        entries = _list_directory(directory, sink)
        if entries is None:
            return

        has_icons = False
        subdirs: list[Path] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_symlink() and entry.is_dir():
                # Linked directories may point back to an ancestor
                continue
            if entry.is_dir():
                subdirs.append(entry)
            elif entry.is_file() and _has_extension(entry, extension):
                has_icons = True

        if has_icons:
            result.append(SourceDirectory(directory, directory.relative_to(root)))

        for subdir in subdirs:
            traverse(subdir)

    traverse(root)
    logger.debug("Found %d icon director(ies) below %s", len(result), root)
    return result


def collection_key(
    relative: Path,
    prefix: str | None = None,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Build the collection key for a directory.

    The scan root itself gets the bare prefix (``ic``, not ``ic-``), or
    ``""`` without a prefix.

    Example:
        >>> collection_key(Path("a/b"), prefix="ic")
        'ic-a-b'
    """
    parts = [part for part in Path(relative).parts if part not in ("", ".")]
    if prefix:
        parts.insert(0, prefix)
    return separator.join(parts)


def iter_icon_files(
    directory: Path,
    extension: str = DEFAULT_EXTENSION,
    include_sub_dirs: bool = False,
    sink: DiagnosticSink | None = None,
) -> list[Path]:
    """List icon files of a directory in name order.

    With ``include_sub_dirs`` files of nested directories are appended
    after the directory's own files, depth-first.

    Args:
        directory: Directory to list.
        extension: Icon file extension (case-insensitive).
        include_sub_dirs: Whether to descend into sub-directories.
        sink: Receiver for diagnostics.

    Returns:
        Icon file paths.
    """
    sink = sink or log_diagnostic
    entries = _list_directory(Path(directory), sink)
    if entries is None:
        return []

    files: list[Path] = []
    subdirs: list[Path] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_symlink() and entry.is_dir():
            continue
        if entry.is_dir():
            subdirs.append(entry)
        elif entry.is_file() and _has_extension(entry, extension):
            files.append(entry)

    if include_sub_dirs:
        for subdir in subdirs:
            files.extend(iter_icon_files(subdir, extension, True, sink))
    return files
