"""OmegaConf resolvers used by backup_jobgraph configs."""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache

from omegaconf import OmegaConf


_REGISTRATION_SENTINEL = {"registered": False}


@lru_cache
def _run_timestamp() -> datetime:
    return datetime.now()


def _now(fmt: str = "%Y%m%d_%H%M%S") -> str:
    """Timestamp of the current process run, stable across lookups."""
    return _run_timestamp().strftime(fmt)


def _join(separator, *parts):
    return str(separator).join(str(part) for part in parts if part is not None)


def register_default_resolvers(force: bool = False) -> None:
    """Register the resolvers if they have not already been registered."""

    if _REGISTRATION_SENTINEL["registered"] and not force:
        return

    OmegaConf.register_new_resolver("now", _now, replace=True)
    OmegaConf.register_new_resolver("join", _join, replace=True)

    _REGISTRATION_SENTINEL["registered"] = True


__all__ = ["register_default_resolvers"]
