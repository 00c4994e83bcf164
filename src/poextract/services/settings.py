"""Option defaults, config files and validation."""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from poextract.errors import ConfigError

# Looked up in base_dir when no config file is given
CONFIG_FILES = (".poextract.yaml", ".poextract.yml", ".poextract.json")

GIT_CHECK_TRACKED_ONLY = "tracked-only"

DEFAULTS: dict[str, Any] = {
    "base_dir": ".",
    "context": "",

    # Extraction
    "markers": ["__"],
    "arg_pos": 0,
    "members": False,
    "parser": "auto",
    "comments": {
        "extract": True,
        "key_regex": r"i18n-extract (.+)",
        "ignore_regex": r"i18n-ignore-line",
    },

    # Merging
    "references": {
        "enabled": True,
        "max": -1,
        "per_file": -1,
        "per_line": -1,
        "line_length": -1,
    },
    "sort": "source",
    "replace": False,

    # Writing
    "force_save": False,
    "dry_run": False,
    "git_check": True,  # True / False / "tracked-only"
    "wrap_width": 78,
    "charset": None,
}

# camelCase spellings accepted in config files
_ALIASES = {
    "baseDir": "base_dir",
    "marker": "markers",
    "argPos": "arg_pos",
    "keyRegex": "key_regex",
    "ignoreRegex": "ignore_regex",
    "perFile": "per_file",
    "perLine": "per_line",
    "lineLength": "line_length",
    "forceSave": "force_save",
    "dryRun": "dry_run",
    "gitCheck": "git_check",
    "wrapWidth": "wrap_width",
}


def _normalize(options: dict[str, Any]) -> dict[str, Any]:
    result = {}
    for key, value in options.items():
        key = _ALIASES.get(key, key)
        if isinstance(value, dict):
            value = _normalize(value)
        result[key] = value
    # comments: true / references: false shorthand
    if isinstance(result.get("comments"), bool):
        result["comments"] = {"extract": result["comments"]}
    if isinstance(result.get("references"), bool):
        result["references"] = {"enabled": result["references"]}
    if isinstance(result.get("markers"), str):
        result["markers"] = [result["markers"]]
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read options from a JSON or YAML file."""
    path = Path(path)
    text = path.read_text("utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def find_config_file(base_dir: str | Path) -> Optional[Path]:
    for name in CONFIG_FILES:
        candidate = Path(base_dir) / name
        if candidate.is_file():
            return candidate
    return None


class Settings:
    """Options for one extraction/merge run, layered over DEFAULTS."""

    def __init__(self, *layers: Optional[dict[str, Any]], **overrides: Any):
        self._data: dict[str, Any] = copy.deepcopy(DEFAULTS)
        for layer in layers + (overrides,):
            if layer:
                self.update(layer)
        self.validate()

    @classmethod
    def load(cls, config_file: str | Path | None = None, *layers: Optional[dict[str, Any]],
             **overrides: Any) -> "Settings":
        """Settings from a config file (or the one found in base_dir), then layers, then overrides."""
        if config_file is None:
            base_dir = overrides.get("base_dir") or overrides.get("baseDir") or DEFAULTS["base_dir"]
            config_file = find_config_file(base_dir)
        file_options = load_config_file(config_file) if config_file else {}
        if config_file and "base_dir" not in file_options and "baseDir" not in file_options:
            file_options["base_dir"] = str(Path(config_file).parent)
        return cls(file_options, *layers, **overrides)

    # ── Public API ────────────────────────────────────────────────

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key, DEFAULTS.get(key))

    def __setitem__(self, key: str, value: Any):
        self.update({key: value})
        self.validate()

    def get_value(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default if default is not None else DEFAULTS.get(key))

    def update(self, options: dict[str, Any]):
        self._data = _deep_merge(self._data, _normalize(options))

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    @property
    def base_dir(self) -> Path:
        return Path(self._data["base_dir"] or ".")

    @property
    def references_enabled(self) -> bool:
        return bool(self._data["references"].get("enabled"))

    def validate(self):
        """Raise ConfigError for any option with the wrong shape."""
        from poextract.parsers import get_parser
        from poextract.services.sorters import get_comparator

        data = self._data
        markers = data["markers"]
        if not isinstance(markers, (list, tuple)) or not markers:
            raise ConfigError("Option (markers) must be a non-empty list of names")
        for marker in markers:
            if not isinstance(marker, str) or not marker:
                raise ConfigError(f"Invalid marker: {marker!r}")
        for key in ("arg_pos", "wrap_width"):
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Option ({key}) must be an integer, got {value!r}")
        if not isinstance(data["context"], str):
            raise ConfigError(f"Option (context) must be a string, got {data['context']!r}")
        get_parser(data["parser"])
        get_comparator(data["sort"])
        for key in ("key_regex", "ignore_regex"):
            pattern = data["comments"].get(key)
            if pattern is None or isinstance(pattern, re.Pattern):
                continue
            try:
                re.compile(pattern)
            except (re.error, TypeError) as e:
                raise ConfigError(f"Option (comments.{key}) is not a valid regex: {pattern!r}") from e
        for key in ("max", "per_file", "per_line", "line_length"):
            value = data["references"].get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Option (references.{key}) must be an integer, got {value!r}")
        if data["git_check"] not in (True, False, GIT_CHECK_TRACKED_ONLY):
            raise ConfigError(
                f"Option (git_check) must be true, false or '{GIT_CHECK_TRACKED_ONLY}', got {data['git_check']!r}"
            )
