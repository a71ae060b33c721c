"""SVG Icons - Build indexed icon collections from directories of SVG files."""

__version__ = "0.1.0"

from .colors import (
    Color,
    ColorAction,
    classify_color,
    parse_color,
    parse_colors,
)
from .config import (
    ImportConfig,
    parse_import_config_file,
)
from .diagnostics import (
    Diagnostic,
    DiagnosticCollector,
    format_diagnostics,
)
from .errors import (
    ImportCancelledError,
    InvalidIconError,
    SourceError,
    SvgIconsError,
)
from .iconset import (
    IconEntry,
    IconSet,
    load_icon_set,
)
from .importer import (
    ImportOptions,
    import_svg_collection,
    import_svg_collections,
    process_icon_set,
)

__all__ = [
    # Colors
    "Color",
    "ColorAction",
    "classify_color",
    "parse_color",
    "parse_colors",
    # Config
    "ImportConfig",
    "parse_import_config_file",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCollector",
    "format_diagnostics",
    # Errors
    "ImportCancelledError",
    "InvalidIconError",
    "SourceError",
    "SvgIconsError",
    # Icon sets
    "IconEntry",
    "IconSet",
    "load_icon_set",
    # Import (pipeline entry points)
    "ImportOptions",
    "import_svg_collection",
    "import_svg_collections",
    "process_icon_set",
]
