"""Load AutoreloadConfig from autoreload.yaml / autoreload.toml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from autoreload._errors import ConfigError
from autoreload.config import AutoreloadConfig, coerce_targets

_CONFIG_KEYS = frozenset({"port", "host", "serve_path", "paths", "log"})


def load_config(root: Path, **overrides: object) -> AutoreloadConfig:
    """Load AutoreloadConfig from root, optionally merging a config file.

    Looks for autoreload.yaml, autoreload.yml, or autoreload.toml in root.
    Relative watch paths found in the file are resolved against root.
    Overrides whose value is None are ignored so CLI defaults don't clobber
    the file.

    Raises:
        ConfigError: If the config file is malformed or holds invalid values.

    """
    root = Path(root)
    file_config = _read_config_file(root)
    if "paths" in file_config:
        targets = coerce_targets(file_config["paths"])  # type: ignore[arg-type]
        file_config["paths"] = tuple(
            t if t.path.is_absolute() else type(t)(root / t.path, t.events, t.options)
            for t in targets
        )
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = set(merged) - _CONFIG_KEYS
    if unknown:
        msg = f"Unknown autoreload config key(s): {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    return AutoreloadConfig(**merged)  # type: ignore[arg-type]


def _read_config_file(root: Path) -> dict[str, object]:
    """Read autoreload config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("autoreload.yaml", "autoreload.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "autoreload.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_autoreload_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_autoreload_section(data, path)


def _flatten_autoreload_section(data: object, path: Path) -> dict[str, object]:
    """Extract autoreload.* keys into top-level config."""
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping at the top level"
        raise ConfigError(msg)
    result: dict[str, object] = {}
    section = data.get("autoreload")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "autoreload" and k in _CONFIG_KEYS:
            result[k] = v
    return result
