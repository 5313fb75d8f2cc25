"""Configuration management for the DC Nexus service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .store import resolve_store_path

DEFAULT_SERVICE_NAME = "DC Nexus Pro"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def _resolve_relative(value: object, base_path: Path | None) -> Path:
    raw = Path(str(value)).expanduser()
    if raw.is_absolute() or base_path is None:
        return raw.resolve(strict=False)
    return (base_path / raw).resolve(strict=False)


def _default_static_dir() -> Path:
    return (Path(__file__).resolve().parent.parent / "public").resolve(strict=False)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the web front end and the users API."""

    service_name: str = DEFAULT_SERVICE_NAME
    users_path: Path = resolve_store_path(None)
    static_dir: Optional[Path] = _default_static_dir()
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""
        defaults = Settings()

        users_path = defaults.users_path
        if data.get("users_path"):
            users_path = _resolve_relative(data["users_path"], base_path)

        static_dir = defaults.static_dir
        if "static_dir" in data:
            raw_static = data.get("static_dir")
            static_dir = _resolve_relative(raw_static, base_path) if raw_static else None

        raw_port = data.get("port")
        if raw_port is None:
            port = defaults.port
        else:
            try:
                port = int(raw_port)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ValueError(f"port must be an integer, got {raw_port!r}") from exc

        return Settings(
            service_name=str(data.get("service_name") or defaults.service_name),
            users_path=users_path,
            static_dir=static_dir,
            host=str(data.get("host") or defaults.host),
            port=port,
        )

    def with_env_overrides(self, environ: Mapping[str, str] | None = None) -> "Settings":
        """Return a copy with ``DCNEXUS_*`` environment variables applied."""
        env = os.environ if environ is None else environ
        updates: Dict[str, object] = {}

        users_path = env.get("DCNEXUS_USERS_PATH")
        if users_path:
            updates["users_path"] = resolve_store_path(users_path)
        static_dir = env.get("DCNEXUS_STATIC_DIR")
        if static_dir:
            updates["static_dir"] = Path(static_dir).expanduser().resolve(strict=False)
        host = env.get("DCNEXUS_HOST")
        if host:
            updates["host"] = host.strip()
        port = env.get("DCNEXUS_PORT")
        if port:
            try:
                updates["port"] = int(port)
            except ValueError as exc:
                raise ValueError(f"DCNEXUS_PORT must be an integer, got {port!r}") from exc

        return replace(self, **updates) if updates else self


def load_settings(config_path: Path) -> Settings:
    """Load settings from a YAML file; a missing file yields the defaults."""
    if not config_path.exists():
        return Settings()

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")

    return Settings.from_dict(raw, base_path=config_path.parent)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "settings.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "load_settings", "resolve_config_path"]
