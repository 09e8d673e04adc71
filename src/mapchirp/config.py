from __future__ import annotations

from pathlib import Path
from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from mapchirp.domain.errors import ConfigError
from mapchirp.domain.result import Err, Ok, Result


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


_DEFAULTS: dict[str, object] = {
    "cache": {
        "db_path": "~/.config/mapchirp/store.db",
        "ttl_seconds": 86400,
    },
    "sweeper": {
        "interval_seconds": 3600,
    },
    "fetcher": {
        "base_url": "https://x.com",
        "user_agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        "timeout_seconds": 30,
    },
    "resolution": {
        "coalesce": False,
    },
    "page": {
        "url": "https://x.com/home",
    },
}


def create_config(
    yaml_path: str = "mapchirp.yaml",
    env_prefix: str = "MAPCHIRP",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def db_path(cfg: AppConfig) -> Path:
    return Path(str(cfg["cache.db_path"])).expanduser()


def ttl_seconds(cfg: AppConfig) -> float:
    return float(str(cfg["cache.ttl_seconds"]))


def sweep_interval_seconds(cfg: AppConfig) -> float:
    return float(str(cfg["sweeper.interval_seconds"]))


def coalesce_enabled(cfg: AppConfig) -> bool:
    return _as_bool(cfg["resolution.coalesce"])


def validate_config(cfg: AppConfig) -> Result[AppConfig, ConfigError]:
    """Check that numeric settings parse and are positive."""
    bad: list[str] = []
    for key in ("cache.ttl_seconds", "sweeper.interval_seconds", "fetcher.timeout_seconds"):
        try:
            if float(str(cfg[key])) <= 0:
                bad.append(key)
        except (KeyError, ValueError):
            bad.append(key)
    if bad:
        return Err(ConfigError(f"Invalid values for: {', '.join(bad)}", invalid_keys=tuple(bad)))
    return Ok(cfg)
