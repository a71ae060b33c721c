"""Import pipeline turning icon directories into collection records.

Every icon goes through the same stages:

    loaded -> validated -> color_canonicalized -> optimized
           -> compat_rewritten -> committed

A failing stage rejects the icon: it is removed from its icon set and a
diagnostic names the icon, the stage and the reason. Nothing is retried,
since a rejection is deterministic for a given file.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .cleanup import cleanup_svg
from .colors import DEFAULT_COLOR, parse_colors
from .diagnostics import Diagnostic, DiagnosticSink, log_diagnostic
from .discover import (
    DEFAULT_EXTENSION,
    DEFAULT_SEPARATOR,
    SourceDirectory,
    collection_key,
    find_svg_directories,
)
from .errors import ImportCancelledError, InvalidIconError, SourceError
from .iconset import DEFAULT_ICON_SIZE, IconDocument, IconSet, load_icon_set
from .optimize import DEFAULT_PRECISION, deoptimize_paths, optimize_svg
from .utils import serialize_body

logger = logging.getLogger(__name__)


class IconStage(str, Enum):
    """Processing state of a single icon."""

    LOADED = "loaded"
    VALIDATED = "validated"
    COLOR_CANONICALIZED = "color_canonicalized"
    OPTIMIZED = "optimized"
    COMPAT_REWRITTEN = "compat_rewritten"
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass
class ImportOptions:
    """Options shared by both import operations."""

    extension: str = DEFAULT_EXTENSION
    width: float = DEFAULT_ICON_SIZE
    height: float = DEFAULT_ICON_SIZE
    precision: int = DEFAULT_PRECISION
    separator: str = DEFAULT_SEPARATOR
    default_color: str = DEFAULT_COLOR


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ImportCancelledError("Import cancelled")


def process_icon(document: IconDocument, options: ImportOptions) -> str:
    """Run all transformation stages on one document.

    Args:
        document: Icon document, modified in place.
        options: Import options.

    Returns:
        Serialized icon body.

    Raises:
        InvalidIconError: If a stage rejects the icon or fails with any
            other error. The failing stage is available as ``error.stage``.
    """
    # Stage being entered; reported when the step fails
    stage = IconStage.VALIDATED
    try:
        document.view_box = cleanup_svg(document.root)

        stage = IconStage.COLOR_CANONICALIZED
        parse_colors(document.root, default_color=options.default_color)

        stage = IconStage.OPTIMIZED
        optimize_svg(document.root, options.precision)

        stage = IconStage.COMPAT_REWRITTEN
        deoptimize_paths(document.root)

        stage = IconStage.COMMITTED
        return serialize_body(document.root)
    except (InvalidIconError, ValueError) as e:
        raise InvalidIconError(str(e), stage=stage.value) from e
    except Exception as e:
        # Any failure stays within this icon, e.g. RecursionError on deep nesting
        raise InvalidIconError(
            f"{type(e).__name__}: {e}", stage=stage.value
        ) from e


def process_icon_set(
    icon_set: IconSet,
    options: ImportOptions | None = None,
    sink: DiagnosticSink | None = None,
    cancel: threading.Event | None = None,
) -> dict[str, IconStage]:
    """Process every pending icon of a set.

    Aliases are never processed. Rejected icons are removed from the set.

    Args:
        icon_set: Icon set with loaded documents.
        options: Import options.
        sink: Receiver for diagnostics.
        cancel: Event that stops the run before the next icon starts.

    Returns:
        Final stage of each processed icon.

    Raises:
        ImportCancelledError: If ``cancel`` is set.
    """
    options = options or ImportOptions()
    sink = sink or log_diagnostic
    states: dict[str, IconStage] = {}

    for name in list(icon_set.documents):
        _check_cancelled(cancel)
        document = icon_set.documents[name]
        try:
            body = process_icon(document, options)
        except InvalidIconError as e:
            sink(
                Diagnostic(
                    severity="warning",
                    subject=name,
                    reason=f"Skipping icon: {e}",
                    stage=e.stage,
                )
            )
            icon_set.remove(name)
            states[name] = IconStage.REJECTED
            continue
        icon_set.commit(name, body)
        states[name] = IconStage.COMMITTED

    committed = sum(1 for state in states.values() if state == IconStage.COMMITTED)
    logger.info(
        "Processed %d icon(s): %d committed, %d rejected",
        len(states),
        committed,
        len(states) - committed,
    )
    return states


def _require_directory(source: Path) -> Path:
    source = Path(source)
    if not source.exists():
        raise SourceError(f"Source directory not found: {source}")
    if not source.is_dir():
        raise SourceError(f"Source is not a directory: {source}")
    return source


def import_svg_collection(
    source: Path | str,
    include_sub_dirs: bool = True,
    *,
    prefix: str = "",
    options: ImportOptions | None = None,
    sink: DiagnosticSink | None = None,
    cancel: threading.Event | None = None,
) -> dict[str, Any]:
    """Import one directory as a single collection.

    Invalid icons are skipped with a diagnostic instead of failing the
    import.

    Args:
        source: Directory holding icon files.
        include_sub_dirs: Whether files of nested directories are added
            to the same collection.
        prefix: Collection prefix stored in the record.
        options: Import options.
        sink: Receiver for diagnostics.
        cancel: Event that aborts the import.

    Returns:
        Collection record. ``icons`` is empty when every icon was rejected.

    Raises:
        SourceError: If ``source`` is not a directory.
        ImportCancelledError: If ``cancel`` is set.
    """
    options = options or ImportOptions()
    sink = sink or log_diagnostic
    source = _require_directory(Path(source))

    icon_set = load_icon_set(
        source,
        include_sub_dirs=include_sub_dirs,
        extension=options.extension,
        prefix=prefix,
        width=options.width,
        height=options.height,
        sink=sink,
    )
    process_icon_set(icon_set, options, sink, cancel)
    return icon_set.export()


def _import_directory(
    directory: SourceDirectory,
    options: ImportOptions,
    sink: DiagnosticSink,
    cancel: threading.Event | None,
) -> dict[str, Any] | None:
    _check_cancelled(cancel)
    try:
        icon_set = load_icon_set(
            directory.path,
            include_sub_dirs=False,
            extension=options.extension,
            width=options.width,
            height=options.height,
            sink=sink,
        )
    except SourceError as e:
        # Directory vanished or became unreadable after discovery
        sink(
            Diagnostic(
                severity="warning",
                subject=str(directory.path),
                reason=str(e),
                stage="load",
            )
        )
        return None
    process_icon_set(icon_set, options, sink, cancel)
    if not icon_set.icons:
        logger.info("No usable icons in %s, collection omitted", directory.path)
        return None
    return icon_set.export()


def import_svg_collections(
    source: Path | str,
    prefix: str | None = None,
    *,
    options: ImportOptions | None = None,
    sink: DiagnosticSink | None = None,
    cancel: threading.Event | None = None,
    max_workers: int = 1,
) -> dict[str, dict[str, Any]]:
    """Import a directory tree as one collection per icon directory.

    Every directory that directly contains icon files becomes a
    collection holding only its own files. Keys join the directory's path
    segments below ``source`` with the separator, after the optional
    prefix. Directories without any usable icon are omitted.

    Args:
        source: Root directory to scan.
        prefix: Namespace prepended to every key.
        options: Import options.
        sink: Receiver for diagnostics.
        cancel: Event that aborts the import.
        max_workers: Number of directories processed in parallel.

    Returns:
        Mapping of collection key to collection record, in discovery order.

    Raises:
        SourceError: If ``source`` is not a directory.
        ImportCancelledError: If ``cancel`` is set.
    """
    options = options or ImportOptions()
    sink = sink or log_diagnostic
    source = _require_directory(Path(source))

    directories = find_svg_directories(source, options.extension, sink)
    keys = [
        collection_key(directory.relative, prefix, options.separator)
        for directory in directories
    ]

    if max_workers > 1 and len(directories) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(_import_directory, directory, options, sink, cancel)
                for directory in directories
            ]
            records = [future.result() for future in futures]
    else:
        records = [
            _import_directory(directory, options, sink, cancel)
            for directory in directories
        ]

    collections: dict[str, dict[str, Any]] = {}
    for key, record in zip(keys, records):
        if record is not None:
            collections[key] = record

    logger.info(
        "Imported %d collection(s) from %d director(ies) in %s",
        len(collections),
        len(directories),
        source,
    )
    return collections
