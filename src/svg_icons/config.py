"""Import configuration files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import yaml

from .importer import ImportOptions

ImportMode = Literal["single", "multi"]


@dataclass
class ImportConfig:
    """Complete import configuration."""

    source: Path
    mode: ImportMode = "single"
    output: Path | None = None
    prefix: str | None = None
    include_sub_dirs: bool = True
    max_workers: int = 1
    options: ImportOptions = field(default_factory=ImportOptions)


def parse_options_section(data: dict) -> ImportOptions:
    """Parse the options section from YAML data.

    Args:
        data: Options section dictionary.

    Returns:
        Parsed ImportOptions.

    Raises:
        ValueError: If the format is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("'options' must be a dictionary")

    options = ImportOptions()
    if "extension" in data:
        extension = str(data["extension"])
        if not extension.startswith("."):
            extension = "." + extension
        options.extension = extension
    if "width" in data:
        options.width = float(data["width"])
    if "height" in data:
        options.height = float(data["height"])
    if "precision" in data:
        options.precision = int(data["precision"])
        if options.precision < 0:
            raise ValueError("'precision' must not be negative")
    if "separator" in data:
        options.separator = str(data["separator"])
    if "default_color" in data:
        options.default_color = str(data["default_color"])

    if options.width <= 0 or options.height <= 0:
        raise ValueError("Icon width and height must be positive")
    return options


def parse_import_config_file(config_path: Path) -> ImportConfig:
    """Parse a YAML import configuration file.

    Relative ``source`` and ``output`` paths are resolved against the
    directory of the configuration file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed ImportConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the configuration format is invalid.
    """
    config_path = Path(config_path)
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError("Config file must be a YAML dictionary")
    if "source" not in data:
        raise ValueError("Config file must have a 'source' field")

    base = config_path.parent
    config = ImportConfig(source=base / str(data["source"]))

    if "mode" in data:
        mode = data["mode"]
        if mode not in ("single", "multi"):
            raise ValueError(f"Unsupported mode: {mode}")
        config.mode = mode
    if data.get("output") is not None:
        config.output = base / str(data["output"])
    if data.get("prefix") is not None:
        config.prefix = str(data["prefix"])
    if "include_sub_dirs" in data:
        config.include_sub_dirs = bool(data["include_sub_dirs"])
    if "max_workers" in data:
        config.max_workers = int(data["max_workers"])
        if config.max_workers < 1:
            raise ValueError("'max_workers' must be at least 1")
    if "options" in data:
        config.options = parse_options_section(data["options"])

    return config
