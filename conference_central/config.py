"""Configuration management for the conference service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import DEFAULT_LOCK_TIMEOUT, DEFAULT_TRANSACTION_RETRIES, Database, resolve_database_path


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the store and the HTTP service."""

    database_path: Path
    transaction_retries: int = DEFAULT_TRANSACTION_RETRIES
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        unknown = set(data) - {"database_path", "transaction_retries", "lock_timeout"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_path = data.get("database_path")
        if raw_path:
            candidate = Path(str(raw_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        try:
            retries = int(data.get("transaction_retries", DEFAULT_TRANSACTION_RETRIES))  # type: ignore[arg-type]
            lock_timeout = float(data.get("lock_timeout", DEFAULT_LOCK_TIMEOUT))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid numeric configuration value: {exc}") from exc

        if retries < 0:
            raise ValueError("transaction_retries must not be negative")
        if lock_timeout <= 0:
            raise ValueError("lock_timeout must be positive")

        return Settings(
            database_path=database_path,
            transaction_retries=retries,
            lock_timeout=lock_timeout,
        )

    def open_database(self, *, initialize: bool = True) -> Database:
        database = Database(
            self.database_path,
            transaction_retries=self.transaction_retries,
            lock_timeout=self.lock_timeout,
        )
        if initialize:
            database.initialize()
        return database


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "conference.yaml").resolve(strict=False)
    return candidate


def _load_yaml(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from the optional YAML file, then apply environment overrides."""

    env = os.environ if environ is None else environ

    explicit_config = env.get("CONFERENCE_CONFIG")
    config_path = resolve_config_path(explicit_config)
    data: Dict[str, object] = {}
    if config_path.exists():
        data = _load_yaml(config_path)
    elif explicit_config:
        raise ValueError(f"Configuration file {config_path} does not exist")

    overrides = {
        "database_path": env.get("CONFERENCE_DB_PATH"),
        "transaction_retries": env.get("CONFERENCE_TRANSACTION_RETRIES"),
        "lock_timeout": env.get("CONFERENCE_LOCK_TIMEOUT"),
    }
    for key, value in overrides.items():
        if value is not None and value.strip():
            data[key] = value.strip()

    return Settings.from_dict(data, base_path=config_path.parent)


__all__ = ["Settings", "load_settings", "resolve_config_path"]
