import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from mapchirp.cache.location_cache import TOKEN_KEY
from mapchirp.cli._logging import configure_logging
from mapchirp.cli._output import (
    console,
    print_cache_stats,
    print_error,
    print_json,
    print_records,
    print_resolutions,
    print_settings,
)
from mapchirp.config import validate_config
from mapchirp.domain.result import Err
from mapchirp.runtime import watch_page
from mapchirp.services.container import ServiceContainer, cli_context
from mapchirp.services.export import cache_stats, export_locations
from mapchirp.settings import filter_by_country, load_settings, normalize_country_filter, reset_settings, save_settings

app = typer.Typer(name="mapchirp", help="mapchirp — resolve and cache profile locations")

_DbPathOpt = Annotated[Path | None, typer.Option("--db-path", help="Override the store location")]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """mapchirp — resolve and cache profile locations."""
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


def _check_config(container: ServiceContainer) -> None:
    match validate_config(container.app_config):
        case Err(error=error):
            print_error(error.message)
            raise typer.Exit(code=1)


async def _resolve_all(container: ServiceContainer, usernames: list[str]) -> list[tuple[str, str | None]]:
    try:
        locations = await asyncio.gather(*(container.resolver.resolve(u) for u in usernames))
    finally:
        await container.fetcher.aclose()
    return list(zip(usernames, locations, strict=True))


@app.command()
def resolve(
    usernames: Annotated[list[str], typer.Argument(help="Usernames to resolve, without the @")],
    coalesce: Annotated[
        bool | None, typer.Option("--coalesce/--no-coalesce", help="Share one fetch between duplicate usernames")
    ] = None,
    db_path: _DbPathOpt = None,
) -> None:
    """Resolve usernames to locations, using the cache first."""
    with cli_context(db_path=db_path, coalesce=coalesce) as container:
        _check_config(container)
        results = asyncio.run(_resolve_all(container, [u.lstrip("@") for u in usernames]))
    print_resolutions(results)
    if all(location is None for _u, location in results):
        raise typer.Exit(code=1)


@app.command()
def watch(
    url: Annotated[str | None, typer.Option("--url", help="Page to open (defaults to page.url)")] = None,
    headless: Annotated[bool, typer.Option("--headless", help="Run the browser without a window")] = False,
    db_path: _DbPathOpt = None,
) -> None:
    """Open the page in a browser and capture credentials and locations from its traffic."""
    with cli_context(db_path=db_path) as container:
        _check_config(container)
        target = url or str(container.app_config["page.url"])
        try:
            asyncio.run(watch_page(container, target, headless=headless))
        except KeyboardInterrupt:
            console.print("Stopped.")


cache_app = typer.Typer(name="cache", help="Inspect and manage cached locations")
app.add_typer(cache_app, name="cache")


@cache_app.command("stats")
def cache_stats_cmd(db_path: _DbPathOpt = None) -> None:
    """Show cache counters."""
    with cli_context(db_path=db_path) as container:
        stats = cache_stats(container.store, container.location_cache)
    print_cache_stats(stats)


@cache_app.command("list")
def cache_list(
    country: Annotated[str | None, typer.Option("--country", help="Only locations containing this text")] = None,
    db_path: _DbPathOpt = None,
) -> None:
    """List fresh cached locations."""
    with cli_context(db_path=db_path) as container:
        records = filter_by_country(container.location_cache.records(), country)
    print_records(records)


@cache_app.command("clear")
def cache_clear(db_path: _DbPathOpt = None) -> None:
    """Remove every cached location."""
    with cli_context(db_path=db_path) as container:
        removed = container.location_cache.clear()
    if removed == 0:
        console.print("Cache is already empty!")
    else:
        console.print(f"[bold green]Cleared[/bold green] {removed} cached locations")


@cache_app.command("export")
def cache_export(
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write JSON to this file")] = None,
    db_path: _DbPathOpt = None,
) -> None:
    """Export cached locations as JSON."""
    with cli_context(db_path=db_path) as container:
        data = export_locations(container.location_cache)
    if output is None:
        print_json(data)
        return
    output.write_text(json.dumps(data, indent=2, ensure_ascii=False))
    console.print(f"[bold green]Exported[/bold green] {data['total_locations']} locations to {output}")


@cache_app.command("sweep")
def cache_sweep(db_path: _DbPathOpt = None) -> None:
    """Remove expired locations now."""
    with cli_context(db_path=db_path) as container:
        _check_config(container)
        removed = container.sweeper.sweep()
    console.print(f"Removed {removed} expired locations")


settings_app = typer.Typer(name="settings", help="Display settings used by the badge and map views")
app.add_typer(settings_app, name="settings")


@settings_app.command("show")
def settings_show(db_path: _DbPathOpt = None) -> None:
    """Show current settings."""
    with cli_context(db_path=db_path) as container:
        settings = load_settings(container.store)
    print_settings(settings)


@settings_app.command("set")
def settings_set(
    display: Annotated[bool | None, typer.Option("--display/--no-display", help="Show location badges")] = None,
    badge_color: Annotated[str | None, typer.Option("--badge-color", help="Badge background color")] = None,
    text_color: Annotated[str | None, typer.Option("--text-color", help="Badge text color")] = None,
    badge_icon: Annotated[str | None, typer.Option("--badge-icon", help="Badge icon")] = None,
    country: Annotated[list[str] | None, typer.Option("--country", help="Country filter entry (repeatable)")] = None,
    db_path: _DbPathOpt = None,
) -> None:
    """Update settings; unspecified options keep their current value."""
    with cli_context(db_path=db_path) as container:
        settings = load_settings(container.store)
        changes: dict[str, object] = {}
        if display is not None:
            changes["display_enabled"] = display
        if badge_color:
            changes["badge_color"] = badge_color
        if text_color:
            changes["text_color"] = text_color
        if badge_icon:
            changes["badge_icon"] = badge_icon
        if country is not None:
            changes["country_filter"] = normalize_country_filter(country)
        settings = replace(settings, **changes)
        save_settings(container.store, settings)
    console.print("[bold green]Settings saved[/bold green]")
    print_settings(settings)


@settings_app.command("reset")
def settings_reset(db_path: _DbPathOpt = None) -> None:
    """Restore default settings."""
    with cli_context(db_path=db_path) as container:
        settings = reset_settings(container.store)
    console.print("Settings reset to defaults")
    print_settings(settings)


token_app = typer.Typer(name="token", help="Captured authorization credential")
app.add_typer(token_app, name="token")


@token_app.command("show")
def token_show(db_path: _DbPathOpt = None) -> None:
    """Print the last captured credential."""
    with cli_context(db_path=db_path) as container:
        token = container.store.get(TOKEN_KEY)
    if not isinstance(token, str) or not token:
        print_error("No token found. Run `mapchirp watch` and reload the page.")
        raise typer.Exit(code=1)
    console.print(token, soft_wrap=True)
