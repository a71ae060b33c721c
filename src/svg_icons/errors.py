"""Exception types raised by the import pipeline."""


class SvgIconsError(Exception):
    """Base class for all package errors."""


class InvalidIconError(SvgIconsError):
    """An icon document cannot be used.

    Raised by a pipeline stage for a single icon. The importer catches it,
    removes the icon and reports the reason together with ``stage``, the
    pipeline stage that failed.
    """

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class SourceError(SvgIconsError):
    """The requested source directory is missing or not a directory."""


class ImportCancelledError(SvgIconsError):
    """The caller cancelled the import before it completed."""
