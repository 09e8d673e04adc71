from dataclasses import dataclass


@dataclass(frozen=True)
class MapchirpError:
    message: str


@dataclass(frozen=True)
class FetchError(MapchirpError):
    username: str
    status_code: int | None = None


@dataclass(frozen=True)
class ConfigError(MapchirpError):
    invalid_keys: tuple[str, ...] = ()
