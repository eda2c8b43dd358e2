from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json
import yaml

from sfbackup.remap import RemapError, parse_source_path


KEY_BACKUP_SOURCE = "BackupSource"
KEY_EXCLUDE_SOURCE = "ExcludeSource"
KEY_TARGET_BASE = "BackupBaseLocation"
KEY_EXCLUDE_PATTERNS = "ExcludePatterns"
KEY_FOLLOW_SYMLINKS = "FollowSymlinks"

REQUIRED_KEYS = (KEY_BACKUP_SOURCE, KEY_EXCLUDE_SOURCE, KEY_TARGET_BASE)

_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


class ConfigError(ValueError):
    pass


@dataclass(slots=True)
class BackupConfig:
    parameter_file: Path
    source_list_file: Path
    exclude_list_file: Path
    target_base: str
    source_roots: list[Path]
    exclude_prefixes: list[Path] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    follow_symlinks: bool = False


def _as_path(value: Any, field_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{field_name} must be a non-empty string path")
    return Path(value.strip()).expanduser()


def _as_bool(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise ConfigError(f"{field_name} must be a boolean")


def _as_list_of_strings(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise ConfigError(f"{field_name} must be a list of strings")
    return [item.strip() for item in value if item.strip()]


def parse_parameter_lines(lines: list[str]) -> dict[str, str]:
    """Parse ``key = value`` lines, skipping blanks and ``#`` comments."""
    parsed: dict[str, str] = {}
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        if not sep:
            raise ConfigError(f"Line {number} is not a key=value pair: {stripped!r}")
        parsed[key.strip()] = value.strip()
    return parsed


def _load_raw_config(parameter_file: Path) -> dict[str, Any]:
    if not parameter_file.is_file():
        raise ConfigError(f"Parameter file does not exist: {parameter_file}")

    try:
        text = parameter_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read parameter file {parameter_file}: {exc}") from exc

    suffix = parameter_file.suffix.lower()
    try:
        if suffix in {".yml", ".yaml"}:
            loaded = yaml.safe_load(text)
        elif suffix == ".json":
            loaded = json.loads(text)
        else:
            loaded = parse_parameter_lines(text.splitlines())
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Malformed parameter file {parameter_file}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError("Parameter file root must be a mapping of keys to values")
    return loaded


def read_path_list(list_file: Path, description: str) -> list[Path]:
    try:
        text = list_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {description} {list_file}: {exc}") from exc
    return [Path(line.strip()) for line in text.splitlines() if line.strip()]


def validate_target_base(target_base: str) -> None:
    if not Path(target_base).is_dir():
        raise ConfigError(f"{target_base} is not a valid directory structure")


def load_config(parameter_file: Path) -> BackupConfig:
    raw = _load_raw_config(parameter_file)

    for key in REQUIRED_KEYS:
        value = raw.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigError(f"No value provided for required parameter {key}")

    source_list_file = _as_path(raw.get(KEY_BACKUP_SOURCE), KEY_BACKUP_SOURCE)
    exclude_list_file = _as_path(raw.get(KEY_EXCLUDE_SOURCE), KEY_EXCLUDE_SOURCE)
    target_value = raw.get(KEY_TARGET_BASE)
    if not isinstance(target_value, str):
        raise ConfigError(f"{KEY_TARGET_BASE} must be a non-empty string path")
    target_base = target_value.strip()

    source_roots = read_path_list(source_list_file, "source directory list")
    if not source_roots:
        raise ConfigError(f"Source directory list is empty: {source_list_file}")
    for root in source_roots:
        try:
            parse_source_path(root)
        except RemapError as exc:
            raise ConfigError(f"Invalid source root {root}: {exc}") from exc

    exclude_prefixes = read_path_list(exclude_list_file, "exclude directory list")

    validate_target_base(target_base)

    return BackupConfig(
        parameter_file=parameter_file,
        source_list_file=source_list_file,
        exclude_list_file=exclude_list_file,
        target_base=target_base,
        source_roots=source_roots,
        exclude_prefixes=exclude_prefixes,
        exclude_patterns=_as_list_of_strings(raw.get(KEY_EXCLUDE_PATTERNS), KEY_EXCLUDE_PATTERNS),
        follow_symlinks=_as_bool(raw.get(KEY_FOLLOW_SYMLINKS), KEY_FOLLOW_SYMLINKS, default=False),
    )
