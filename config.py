"""Configuration file support for the constscan CLI.

A scan can be configured with a ``constscan.yaml``, ``constscan.yml`` or
``constscan.toml`` file in the package directory, or with an explicit
``--config`` path. Command line flags always win over file values.
"""

import argparse
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

import yaml


CONFIG_FILENAMES = ("constscan.yaml", "constscan.yml", "constscan.toml")
VALID_FORMATS = ("text", "json")
VALID_ERROR_CODES = {
    "CONFIG_NOT_FOUND",
    "CONFIG_PARSE",
    "CONFIG_INVALID",
}

_KNOWN_KEYS = {
    "types", "include_tests", "tags", "format", "output",
    "sort_by_value", "names_only",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: Optional[str] = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


@dataclass(frozen=True)
class ScanConfig:
    directory: Path
    type_names: Tuple[str, ...] = ()
    include_tests: bool = False
    build_tags: FrozenSet[str] = frozenset()
    output_format: str = "text"
    output: Optional[Path] = None
    sort_by_value: bool = False
    names_only: bool = False


def find_config_file(directory: Path) -> Optional[Path]:
    """Return the first config file present in the directory, if any."""
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _split_names(value: Any, key: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, list) and all(isinstance(item, str) for item in value):
        items = [item.strip() for item in value]
    else:
        raise ConfigError(
            "CONFIG_INVALID",
            f"'{key}' must be a string or a list of strings",
            f"For example: {key}: [Color, Weekday]",
        )
    return tuple(item for item in items if item)


def _validate(data: Any, path: Path) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("CONFIG_INVALID", f"{path}: top level must be a mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(
            "CONFIG_INVALID",
            f"{path}: unknown keys: {', '.join(unknown)}",
            f"Known keys are: {', '.join(sorted(_KNOWN_KEYS))}.",
        )

    values: Dict[str, Any] = {}
    if "types" in data:
        values["types"] = _split_names(data["types"], "types")
    if "tags" in data:
        values["tags"] = frozenset(_split_names(data["tags"], "tags"))
    for key in ("include_tests", "sort_by_value", "names_only"):
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError("CONFIG_INVALID", f"{path}: '{key}' must be true or false")
            values[key] = data[key]
    if "format" in data:
        if data["format"] not in VALID_FORMATS:
            raise ConfigError(
                "CONFIG_INVALID",
                f"{path}: unsupported format {data['format']!r}",
                f"Use one of: {', '.join(VALID_FORMATS)}.",
            )
        values["format"] = data["format"]
    if "output" in data:
        if not isinstance(data["output"], str):
            raise ConfigError("CONFIG_INVALID", f"{path}: 'output' must be a path string")
        # Relative output paths are relative to the config file.
        values["output"] = path.parent / data["output"]
    return values


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Parse and validate a config file.

    Args:
        path: Path to a YAML or TOML config file.

    Returns:
        Validated values keyed by config key.

    Raises:
        ConfigError: If the file is missing, malformed or has invalid values.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(
            "CONFIG_NOT_FOUND",
            f"Config file does not exist: {path}",
            "Provide an existing path for --config.",
        ) from None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError("CONFIG_PARSE", f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".toml":
            data = tomllib.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigError("CONFIG_PARSE", f"Cannot parse config file {path}: {e}") from e

    return _validate(data, path)


def build_config(parsed: argparse.Namespace, file_values: Dict[str, Any], directory: Path) -> ScanConfig:
    """Merge parsed command line flags over config file values."""
    type_names: Tuple[str, ...] = ()
    if parsed.type:
        type_names = tuple(name for group in parsed.type for name in _split_names(group, "--type"))
    else:
        type_names = file_values.get("types", ())

    tags = file_values.get("tags", frozenset())
    if parsed.tags is not None:
        tags = frozenset(_split_names(parsed.tags, "--tags"))

    output = Path(parsed.output) if parsed.output else file_values.get("output")

    def flag(name: str) -> bool:
        value = getattr(parsed, name)
        return value if value is not None else file_values.get(name, False)

    return ScanConfig(
        directory=directory,
        type_names=type_names,
        include_tests=flag("include_tests"),
        build_tags=tags,
        output_format=parsed.format or file_values.get("format", "text"),
        output=output,
        sort_by_value=flag("sort_by_value"),
        names_only=flag("names_only"),
    )
