import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mapchirp.domain.profile_record import ProfileRecord
from mapchirp.services.export import CacheStats
from mapchirp.settings import Settings

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_resolutions(results: list[tuple[str, str | None]]) -> None:
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Username")
    table.add_column("Location")
    for username, location in results:
        table.add_row(f"@{username}", location if location is not None else "[dim]not found[/dim]")
    console.print(table)


def print_records(records: list[ProfileRecord]) -> None:
    if not records:
        console.print("No cached locations.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Username")
    table.add_column("Location")
    for r in sorted(records, key=lambda r: r.username.lower()):
        table.add_row(f"@{r.username}", r.location)
    console.print(table)
    console.print(f"{len(records)} user{'' if len(records) == 1 else 's'}")


def print_cache_stats(stats: CacheStats) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Cached locations", str(stats.cached_locations))
    table.add_row("Loaded at", stats.loaded_at.isoformat(timespec="seconds") if stats.loaded_at else "never")
    table.add_row("Credential", "[green]captured[/green]" if stats.has_credential else "[dim]none[/dim]")
    console.print(table)


def print_settings(settings: Settings) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in settings.to_wire().items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)
    console.print(f"Preview: {settings.badge_icon} New York")


def print_json(data: dict[str, Any]) -> None:
    console.print_json(json.dumps(data))
