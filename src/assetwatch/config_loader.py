"""Load WatcherConfig from assetwatch.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from assetwatch.config import WatcherConfig

CONFIG_NAMES = ("assetwatch.yaml", "assetwatch.yml", "assetwatch.toml")

_KNOWN_KEYS = frozenset({
    "model_file", "hash_algorithm", "verbose", "max_events",
    "watch_debounce_ms", "watch_step_ms", "workers",
})


def load_config(root: Path, **overrides: object) -> WatcherConfig:
    """Load WatcherConfig from root, optionally merging assetwatch.yaml.

    Looks for assetwatch.yaml, assetwatch.yml, or assetwatch.toml in root.
    If found, loads and merges with overrides. Overrides take precedence;
    ``None`` overrides are ignored so unset CLI flags keep file values.
    """
    file_config = _read_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    # Normalize model_file to Path
    if "model_file" in merged and not isinstance(merged["model_file"], Path):
        merged["model_file"] = Path(str(merged["model_file"]))
    return WatcherConfig(root=root, **merged)


def _read_config(root: Path) -> dict[str, object]:
    """Read assetwatch config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("assetwatch.yaml", "assetwatch.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "assetwatch.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return _flatten_section(data)


def _flatten_section(data: dict[str, object]) -> dict[str, object]:
    """Extract assetwatch.* keys into top-level config, dropping unknown keys."""
    result: dict[str, object] = {}
    section = data.get("assetwatch")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    for k, v in data.items():
        if k != "assetwatch" and k in _KNOWN_KEYS:
            result[k] = v
    return result
