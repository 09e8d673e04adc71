"""Display settings shared with the options and badge views.

Stored under the ``settings`` key in the camelCase layout the views read.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from typing import TYPE_CHECKING, Any

from mapchirp.cache.location_cache import SETTINGS_KEY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapchirp.cache.protocol import KeyValueStore
    from mapchirp.domain.profile_record import ProfileRecord

logger = logging.getLogger(__name__)

_WIRE_NAMES = {
    "display_enabled": "displayEnabled",
    "badge_color": "badgeColor",
    "text_color": "textColor",
    "badge_icon": "badgeIcon",
    "country_filter": "countryFilter",
}


@dataclass(frozen=True)
class Settings:
    display_enabled: bool = True
    badge_color: str = "#1d9bf0"
    text_color: str = "#ffffff"
    badge_icon: str = "📍"
    country_filter: tuple[str, ...] = field(default_factory=tuple)

    def to_wire(self) -> dict[str, Any]:
        data = asdict(self)
        data["country_filter"] = list(self.country_filter)
        return {_WIRE_NAMES[name]: value for name, value in data.items()}

    @classmethod
    def from_wire(cls, data: object) -> Settings:
        """Build settings from a stored record, defaulting missing or bad fields."""
        defaults = cls()
        if not isinstance(data, dict):
            return defaults
        overrides: dict[str, Any] = {}

        enabled = data.get("displayEnabled")
        if isinstance(enabled, bool):
            overrides["display_enabled"] = enabled
        for name in ("badge_color", "text_color", "badge_icon"):
            value = data.get(_WIRE_NAMES[name])
            if isinstance(value, str) and value:
                overrides[name] = value
        countries = data.get("countryFilter")
        if isinstance(countries, list):
            overrides["country_filter"] = normalize_country_filter(c for c in countries if isinstance(c, str))

        return replace(defaults, **overrides)


def normalize_country_filter(countries: Iterable[str]) -> tuple[str, ...]:
    """Trim entries and drop blanks, keeping order."""
    return tuple(c.strip() for c in countries if c.strip())


def load_settings(store: KeyValueStore) -> Settings:
    return Settings.from_wire(store.get(SETTINGS_KEY))


def save_settings(store: KeyValueStore, settings: Settings) -> None:
    store.set({SETTINGS_KEY: settings.to_wire()})
    logger.debug("Saved settings")


def reset_settings(store: KeyValueStore) -> Settings:
    defaults = Settings()
    save_settings(store, defaults)
    return defaults


def matches_country_filter(location: str, settings: Settings) -> bool:
    """True if no filter is set or the location mentions one of the countries."""
    if not settings.country_filter:
        return True
    lowered = location.lower()
    return any(country.lower() in lowered for country in settings.country_filter)


def filter_by_country(records: Iterable[ProfileRecord], country: str | None) -> list[ProfileRecord]:
    """Records whose location contains ``country``, case-insensitively."""
    if not country:
        return list(records)
    needle = country.lower()
    return [r for r in records if needle in r.location.lower()]
