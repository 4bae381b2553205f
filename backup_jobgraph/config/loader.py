"""Helpers for reading user configuration into typed dataclasses."""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Any
from collections.abc import Iterable, Mapping

import yaml
from compoconf import parse_config
from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf

from . import schema
from .normalize import ConfigNormalizationError, check_jobs, normalize_config_data
from .resolvers import register_default_resolvers


class ConfigLoaderError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


_REGISTRY_SENTINEL = {"loaded": False}


def _ensure_registrations() -> None:
    if _REGISTRY_SENTINEL["loaded"]:
        return

    for module in ("backup_jobgraph.runner.base", "backup_jobgraph.runner.command"):
        import_module(module)

    _REGISTRY_SENTINEL["loaded"] = True


def _load_yaml(path: str | Path) -> Mapping[str, Any]:
    cfg = OmegaConf.load(path)
    return OmegaConf.to_container(cfg, resolve=True)  # type: ignore[return-value]


def _parse_root(data: Any, source: str) -> schema.RootConfig:
    if not isinstance(data, Mapping):
        raise ConfigLoaderError(f"Configuration root must be a mapping: {source}")
    try:
        data = normalize_config_data(data)
    except ConfigNormalizationError as exc:
        raise ConfigLoaderError(f"{source}: {exc}") from exc
    try:
        root = parse_config(schema.RootConfig, data)
    except Exception as exc:  # pragma: no cover - compoconf raises rich errors
        raise ConfigLoaderError(f"Unable to parse config {source}: {exc}") from exc
    try:
        check_jobs(root)
    except ConfigNormalizationError as exc:
        raise ConfigLoaderError(f"{source}: {exc}") from exc
    return root


def load_config(path: str | Path) -> schema.RootConfig:
    """Load and validate a configuration file into ``RootConfig``."""

    path = Path(path)
    if not path.exists():
        raise ConfigLoaderError(f"Configuration file not found: {path}")

    register_default_resolvers()
    _ensure_registrations()

    try:
        data = _load_yaml(path)
    except Exception as exc:
        raise ConfigLoaderError(f"Unable to read config {path}: {exc}") from exc
    return _parse_root(data, str(path))


def load_config_data(data: Mapping[str, Any], source: str = "<memory>") -> schema.RootConfig:
    """Parse an already loaded mapping, resolving interpolations first."""

    register_default_resolvers()
    _ensure_registrations()
    resolved = OmegaConf.to_container(OmegaConf.create(dict(data)), resolve=True)
    return _parse_root(resolved, source)


def load_hydra_config(
    config_name: str,
    config_dir: str | Path,
    overrides: Iterable[str] | None = None,
) -> schema.RootConfig:
    register_default_resolvers()

    overrides = list(overrides or [])
    config_dir = Path(config_dir).resolve()
    if not config_dir.exists():
        raise ConfigLoaderError(f"Hydra config directory not found: {config_dir}")

    try:
        with initialize_config_dir(version_base=None, config_dir=str(config_dir)):
            cfg = compose(config_name=config_name, overrides=overrides)
    except Exception as exc:
        raise ConfigLoaderError(f"Unable to compose Hydra config {config_name}: {exc}") from exc

    data = OmegaConf.to_container(cfg, resolve=True)
    _ensure_registrations()
    return _parse_root(data, f"Hydra config {config_name}")


def load_config_reference(
    ref: str | Path,
    config_dir: str | Path,
    overrides: Iterable[str] | None = None,
) -> schema.RootConfig:
    """Load ``ref`` as a file path if it exists, otherwise as a Hydra config
    name inside ``config_dir``."""

    path = Path(ref)
    if path.is_file():
        overrides = list(overrides or [])
        if not overrides:
            return load_config(path)

        register_default_resolvers()
        _ensure_registrations()
        cfg = OmegaConf.load(str(path))
        for override_str in overrides:
            if "=" not in override_str:
                raise ConfigLoaderError(f"Override must have the form key=value: {override_str}")
            key, value = override_str.split("=", 1)
            OmegaConf.update(cfg, key, yaml_value(value), merge=True)
        data = OmegaConf.to_container(cfg, resolve=True)
        return _parse_root(data, str(path))
    return load_hydra_config(str(ref), config_dir, overrides)


def yaml_value(value: str) -> Any:
    """Interpret an override value the way YAML would (``false`` -> False)."""

    if not value.strip():
        return value
    return yaml.safe_load(value)


def ensure_registrations() -> None:
    """Expose registry initialisation for consumers that only instantiate
    partial configs."""

    register_default_resolvers()
    _ensure_registrations()


__all__ = [
    "ConfigLoaderError",
    "load_config",
    "load_config_data",
    "load_hydra_config",
    "load_config_reference",
    "ensure_registrations",
]
