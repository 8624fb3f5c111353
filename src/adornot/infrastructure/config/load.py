"""Layered configuration loading: defaults < YAML < env (.env) < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, DomainsConfig, EnvOverrides, PiholeConfig, ProbeConfig

_TOP_LEVEL_KEYS: frozenset[str] = frozenset({"app_name", "environment"})

_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "probe": ProbeConfig,
    "pihole": PiholeConfig,
    "domains": DomainsConfig,
}


def _flat_keys() -> dict[str, tuple[str, str]]:
    """Map ``<section>_<field>`` names (env vars, CLI flags) to their section slot."""
    keys = {
        f"{section}_{field}": (section, field)
        for section, model in _SECTION_MODELS.items()
        for field in model.model_fields
    }
    keys["log_level"] = ("logging", "level")
    keys["log_format"] = ("logging", "format")
    return keys


FLAT_KEYS: dict[str, tuple[str, str]] = _flat_keys()
SECTIONS: frozenset[str] = frozenset({*_SECTION_MODELS, "logging"})


def sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape ``AppConfig`` validates.

    A layer may mix sectioned blocks (``{"probe": {...}}``, as in YAML)
    and flat keys (``probe_max_concurrency``, as from env or CLI). Flat
    keys are applied after the blocks of the same layer. Unknown keys
    are dropped.
    """
    out: dict[str, Any] = {}
    flat: list[tuple[str, str, Any]] = []
    for key, value in layer.items():
        if key in SECTIONS and isinstance(value, Mapping):
            out.setdefault(key, {}).update(value)
        elif key in _TOP_LEVEL_KEYS:
            out[key] = value
        elif key in FLAT_KEYS:
            section, field = FLAT_KEYS[key]
            flat.append((section, field, value))
    for section, field, value in flat:
        out.setdefault(section, {})[field] = value
    return out


def _overlay(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Apply *layer* onto *target* in place; nested mappings merge key by key."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _overlay(current, value)
        else:
            target[key] = value


def _yaml_layer(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return dict(parsed)


def _env_layer(dotenv_path: Path | None) -> dict[str, Any]:
    # Variables already set in the process win over the .env file.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)
    return EnvOverrides().to_update_dict()


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig``.

    Layers, lowest precedence first: built-in defaults, the YAML file,
    ``ADORNOT_*`` environment variables (``.env`` included), then CLI
    overrides. Missing files raise ``FileNotFoundError``; invalid values
    raise ``pydantic.ValidationError``. Nothing is written to disk.
    """
    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(_yaml_layer(config_path))
    layers.append(_env_layer(dotenv_path))
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _overlay(merged, sectioned(layer))
    return AppConfig.model_validate(merged)
