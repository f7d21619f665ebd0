"""gigmatch CLI using Typer.

Commands:
- profile: Show the artists and taste profile inferred from a listening history
- match: Find upcoming events near a location that fit a listening history
- find-events: Search all event sources for a list of artists
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from .aggregator import EventAggregator
from .config import get_settings
from .extraction import extract_artists
from .history import load_records_file
from .logging import configure_logging, get_logger
from .models import AggregationResult, ListeningRecord, MatchResult, UserLocation
from .pipeline import MatchPipeline
from .profile import build_profile
from .sources.musicbrainz import ArtistSocialResolver
from .taxonomy import format_taste_profile

app = typer.Typer(
    name="gigmatch",
    help="Match live events to a listener's music taste.",
    add_completion=False,
)


def setup_logging(level: Optional[str], format: Optional[str] = None) -> None:
    """Configure logging from CLI options, falling back to settings."""
    settings = get_settings()
    configure_logging(level=level or settings.log_level, format=format or settings.log_format)


def read_records(path: Path) -> list[ListeningRecord]:
    """Load a records file, turning load errors into a clean CLI exit."""
    try:
        return load_records_file(path)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: could not read {path}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def profile(
    records_file: Annotated[Path, typer.Option("--records", "-r", help="JSON file of listening records")],
    top: Annotated[int, typer.Option("--top", help="How many artists to list")] = 10,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = None,
) -> None:
    """Show the artists and taste profile inferred from a listening history.

    Example:
        gigmatch profile --records history.json
    """
    setup_logging(log_level)

    records = read_records(records_file)
    extraction = extract_artists(records)
    taste = build_profile(extraction.artists, [record.title for record in records])

    typer.echo(f"Records: {len(records)}")
    typer.echo(f"Unique artists: {len(extraction.artists)}")
    typer.echo()

    typer.echo("Top artists:")
    for artist in extraction.extracted[:top]:
        typer.echo(f"  - {artist.name} ({artist.count})")
    typer.echo()

    formatted = format_taste_profile(taste)
    if formatted:
        typer.echo("Taste profile:")
        for line in formatted:
            typer.echo(f"  - {line}")
    else:
        typer.echo("Taste profile: no genre detected")


@app.command()
def match(
    latitude: Annotated[float, typer.Option("--lat", help="Latitude of the listener")],
    longitude: Annotated[float, typer.Option("--lon", help="Longitude of the listener")],
    records_file: Annotated[Optional[Path], typer.Option("--records", "-r", help="JSON file of listening records")] = None,
    playlists: Annotated[Optional[list[str]], typer.Option("--playlist", "-p", help="Playlist id to read history from (repeatable)")] = None,
    radius_km: Annotated[Optional[int], typer.Option("--radius", help="Search radius in km")] = None,
    size: Annotated[Optional[int], typer.Option("--size", "-n", help="Maximum number of matches")] = None,
    socials: Annotated[bool, typer.Option("--socials/--no-socials", help="Look up artist social links")] = False,
    output_json: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output JSON file for results")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = None,
    log_format: Annotated[Optional[str], typer.Option("--log-format", help="Log format (console, json)")] = None,
) -> None:
    """Find upcoming events near a location that fit a listening history.

    Example:
        gigmatch match --records history.json --lat 50.45 --lon 30.52
    """
    setup_logging(log_level, log_format)
    logger = get_logger(__name__)

    if records_file is None and not playlists:
        typer.echo("Error: provide --records or at least one --playlist", err=True)
        raise typer.Exit(1)

    try:
        location = UserLocation(latitude=latitude, longitude=longitude)
    except ValueError as e:
        typer.echo(f"Error: invalid location: {e}", err=True)
        raise typer.Exit(1)

    async def run() -> MatchResult:
        pipeline = MatchPipeline(settings=get_settings())
        if socials:
            pipeline.social_resolver = ArtistSocialResolver(cache=pipeline.cache)
        try:
            if records_file is not None:
                records = read_records(records_file)
            else:
                records = await pipeline.load_history(playlists or [])
            return await pipeline.find_matches(
                records,
                location,
                radius_km=radius_km,
                size=size,
                playlists_analyzed=len(playlists or []),
            )
        finally:
            await pipeline.aclose()

    try:
        result = asyncio.run(run())
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("matching_failed", error=str(e))
        typer.echo(f"Error: Matching failed - {e}", err=True)
        raise typer.Exit(1)

    typer.echo()
    typer.echo("=" * 60)
    typer.echo("MATCHES")
    typer.echo("=" * 60)
    typer.echo()
    if result.formatted_profile:
        typer.echo(f"Taste profile: {', '.join(result.formatted_profile)}")
    typer.echo(f"Records: {result.stats.total_records}  Artists: {result.stats.unique_artists}")
    typer.echo()

    if not result.matches:
        typer.echo("No matching events found.")
    for i, event in enumerate(result.matches, 1):
        kind = "artist" if event.is_exact_match else "style"
        distance = f", {event.distance:.0f} km" if event.distance is not None else ""
        typer.echo(f"{i}. {event.artist_name} @ {event.venue} ({event.date}{distance})")
        typer.echo(f"   Match: {event.vibe_match}% [{kind}]")
        if event.ticket_url:
            typer.echo(f"   Tickets: {event.ticket_url}")
    typer.echo()

    if output_json:
        output_json.write_text(result.model_dump_json(indent=2))
        typer.echo(f"Results written to: {output_json}")


@app.command("find-events")
def find_events(
    artists: Annotated[list[str], typer.Option("--artist", "-a", help="Artist to search for (repeatable)")],
    city: Annotated[Optional[str], typer.Option("--city", "-c", help="City to search in")] = None,
    limit: Annotated[int, typer.Option("--limit", help="Maximum number of artists searched")] = 20,
    output_json: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output JSON file for results")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = None,
) -> None:
    """Search all configured event sources for a list of artists."""
    setup_logging(log_level)

    async def run() -> AggregationResult:
        pipeline = MatchPipeline()
        try:
            if not pipeline.source_registry.names:
                raise ValueError("No event sources configured (set TICKETMASTER_API_KEY)")
            return await pipeline.find_events(artists, city=city, limit=limit)
        finally:
            await pipeline.aclose()

    try:
        result = asyncio.run(run())
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Found {len(result.events)} upcoming event(s):")
    typer.echo()
    for event in result.events:
        typer.echo(f"  {event.date}  {event.artist_name} @ {event.venue}, {event.city or event.location}")
    typer.echo()

    typer.echo("Data Sources:")
    for source, count in result.sources.items():
        typer.echo(f"  - {source}: {count}")

    if result.artists_without_events:
        typer.echo()
        typer.echo("No events found for:")
        for artist in result.artists_without_events:
            typer.echo(f"  {artist}")
            for site, url in EventAggregator.search_links(artist).items():
                typer.echo(f"    {site}: {url}")

    if output_json:
        output_json.write_text(result.model_dump_json(indent=2))
        typer.echo(f"Results written to: {output_json}")


def main() -> None:
    """CLI entry point."""
    app()
