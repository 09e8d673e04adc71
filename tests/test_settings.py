from __future__ import annotations

from typing import TYPE_CHECKING

from mapchirp.domain.profile_record import ProfileRecord
from mapchirp.settings import (
    Settings,
    filter_by_country,
    load_settings,
    matches_country_filter,
    reset_settings,
    save_settings,
)

if TYPE_CHECKING:
    from mapchirp.cache.sqlite_store import SqliteKeyValueStore


class TestSettings:
    def test_defaults(self) -> None:
        assert Settings().to_wire() == {
            "displayEnabled": True,
            "badgeColor": "#1d9bf0",
            "textColor": "#ffffff",
            "badgeIcon": "📍",
            "countryFilter": [],
        }

    def test_load_missing_returns_defaults(self, store: SqliteKeyValueStore) -> None:
        assert load_settings(store) == Settings()

    def test_save_and_load(self, store: SqliteKeyValueStore) -> None:
        settings = Settings(display_enabled=False, badge_color="#000000", country_filter=("Japan", "Brazil"))
        save_settings(store, settings)
        assert store.get("settings")["countryFilter"] == ["Japan", "Brazil"]
        assert load_settings(store) == settings

    def test_from_wire_defaults_bad_fields(self) -> None:
        settings = Settings.from_wire(
            {"displayEnabled": "yes", "badgeColor": "", "textColor": "#111111", "countryFilter": [" Peru ", "", 3]}
        )
        assert settings.display_enabled is True
        assert settings.badge_color == "#1d9bf0"
        assert settings.text_color == "#111111"
        assert settings.country_filter == ("Peru",)

    def test_from_wire_non_object(self) -> None:
        assert Settings.from_wire(["nope"]) == Settings()

    def test_reset(self, store: SqliteKeyValueStore) -> None:
        save_settings(store, Settings(badge_icon="*"))
        assert reset_settings(store) == Settings()
        assert load_settings(store) == Settings()


class TestCountryFilters:
    def test_matches_without_filter(self) -> None:
        assert matches_country_filter("Anywhere", Settings())

    def test_matches_case_insensitive(self) -> None:
        settings = Settings(country_filter=("japan",))
        assert matches_country_filter("Tokyo, Japan", settings)
        assert not matches_country_filter("Seoul, Korea", settings)

    def test_filter_by_country(self) -> None:
        records = [
            ProfileRecord("a", "Tokyo, Japan", 0.0),
            ProfileRecord("b", "Osaka, JAPAN", 0.0),
            ProfileRecord("c", "Lima, Peru", 0.0),
        ]
        assert [r.username for r in filter_by_country(records, "japan")] == ["a", "b"]
        assert len(filter_by_country(records, None)) == 3
        assert len(filter_by_country(records, "")) == 3
