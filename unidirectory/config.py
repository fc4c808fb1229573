"""
Runtime configuration and service composition.

Settings come from environment variables (UNIDIRECTORY_*) and can be
overridden by CLI options. build_service() is the only place that decides
which UniversityService implementation the application uses.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from unidirectory.remote import RemoteUniversityService
from unidirectory.service import LocalUniversityService, UniversityService
from unidirectory.storage import JsonFileStore, MemoryStore, default_data_dir

BACKENDS: tuple[str, ...] = ("local", "memory", "remote")
DEFAULT_API_URL = "http://localhost:4000/api"


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass(frozen=True)
class Settings:
    backend: str = "local"
    api_url: str = DEFAULT_API_URL
    data_dir: Path = field(default_factory=default_data_dir)
    latency: float = 0.0
    timeout: float = 30.0

    def with_overrides(self, **overrides: object) -> "Settings":
        """
        Return a copy with every override that is not None applied.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        if "data_dir" in values:
            values["data_dir"] = Path(str(values["data_dir"]))
        updated = replace(self, **values)
        _check_backend(updated.backend)
        return updated


def _check_backend(backend: str) -> None:
    if backend not in BACKENDS:
        raise ConfigError(f"Unknown backend {backend!r} (expected one of: {', '.join(BACKENDS)})")


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    backend = (env.get("UNIDIRECTORY_BACKEND") or "local").strip().lower()
    _check_backend(backend)

    api_url = (env.get("UNIDIRECTORY_API_URL") or "").strip() or DEFAULT_API_URL
    data_dir_raw = (env.get("UNIDIRECTORY_DATA_DIR") or "").strip()
    data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else default_data_dir()

    return Settings(
        backend=backend,
        api_url=api_url,
        data_dir=data_dir,
        latency=_float_env(env, "UNIDIRECTORY_LATENCY", 0.0),
        timeout=_float_env(env, "UNIDIRECTORY_TIMEOUT", 30.0),
    )


def build_service(settings: Settings) -> UniversityService:
    """
    Create the UniversityService selected by settings.backend.
    """
    if settings.backend == "remote":
        return RemoteUniversityService(settings.api_url, timeout=settings.timeout)
    if settings.backend == "memory":
        return LocalUniversityService(MemoryStore(), latency=settings.latency)
    if settings.backend == "local":
        return LocalUniversityService(JsonFileStore(settings.data_dir), latency=settings.latency)

    raise ConfigError(f"Unknown backend {settings.backend!r}")
