from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides, ResolverConfig

_TOP_LEVEL_KEYS = ("app_name", "environment")

# Flat keys (env vars, CLI flags) mapped to their (section, key) location.
# Every ResolverConfig field keeps its own name inside the resolver section.
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "playwright_headless": ("playwright", "headless"),
    "playwright_navigation_timeout_ms": ("playwright", "navigation_timeout_ms"),
    "playwright_settle_ms": ("playwright", "settle_ms"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    **{name: ("resolver", name) for name in ResolverConfig.model_fields},
}

_SECTIONS = frozenset(section for section, _ in _FLAT_KEYS.values())


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge `override` into `base` in place; nested mappings merge, lists replace."""
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, Mapping):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer (defaults, YAML, env or CLI) into the sectioned shape.

    Sectioned blocks (``resolver: {...}``) pass through; flat keys such as
    ``policy`` or ``http_timeout_seconds`` are moved into their section.
    Unknown keys are dropped.
    """
    out: dict[str, Any] = {
        key: dict(value)
        for key, value in data.items()
        if key in _SECTIONS and isinstance(value, Mapping)
    }
    out.update({key: data[key] for key in _TOP_LEVEL_KEYS if key in data})

    for flat_key, (section, section_key) in _FLAT_KEYS.items():
        if flat_key in data:
            out.setdefault(section, {})[section_key] = data[flat_key]
    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with strict precedence:
    defaults < YAML file < env vars (SOURCARR_*, .env included) < cli overrides

    Reads files only; never creates them.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # Existing process env wins over the .env file.
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = []
    if config_path is not None:
        layers.append(_read_yaml_config(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged = _normalize_layer(deepcopy(DEFAULT_CONFIG))
    for layer in layers:
        _deep_merge(merged, _normalize_layer(layer))

    return AppConfig.model_validate(merged)
