"""Main CLI entry point for the tourplan command."""

import json
import logging
import sys
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm
from typing import Optional

from .. import __version__
from ..errors import InvalidInputError, TravelTimeUnavailableError
from ..scheduling import (
    ShowingTour,
    SchedulingGranularity,
    Stop,
    TourConfig,
    TourSchedule,
    TourScheduler,
    WallClock,
    round_for_booking,
)
from ..storage import TourStore
from ..travel import PROVIDERS, build_travel_time_provider

console = Console()

GRANULARITIES = [g.value for g in SchedulingGranularity]


def get_store(store_path: Optional[str] = None) -> TourStore:
    """Get tour store instance."""
    return TourStore(Path(store_path) if store_path else None)


def load_tour_file(path: Path):
    """Read stops and config from a tour JSON file."""
    with open(path, 'r') as f:
        data = json.load(f)

    stops = [Stop.from_dict(s) for s in data.get("stops", data.get("properties", []))]
    config = TourConfig.from_dict(data.get("config", {}))
    return stops, config


def _fmt_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def render_schedule(schedule: TourSchedule, title: str = "Tour Schedule"):
    """Print a schedule as a table plus summary panel."""
    table = Table(title=title)
    table.add_column("Time", justify="right", style="bold")
    table.add_column("Book At", justify="right", style="green")
    table.add_column("Block")
    table.add_column("Duration", justify="right")
    table.add_column("Address", style="cyan", max_width=40)

    for item in schedule.items:
        time_label = item.time.format_12h()
        if item.day_offset:
            time_label += f" (+{item.day_offset}d)"
        if item.is_showing:
            table.add_row(
                time_label,
                item.booking_time.format_12h() if item.booking_time else "",
                "Showing",
                _fmt_duration(item.duration_minutes),
                item.address,
            )
        else:
            distance = f" ({item.distance_km:.1f} km)" if item.distance_km else ""
            table.add_row(
                time_label,
                "",
                "[dim]Drive[/dim]",
                _fmt_duration(item.duration_minutes),
                f"[dim]to {item.address}{distance}[/dim]",
            )

    console.print(table)

    if schedule.can_fit_in_window:
        status = "[green]✓ Tour fits in time window[/green]"
    else:
        status = f"[red]✗ Tour exceeds time window by {_fmt_duration(schedule.overrun_minutes)}[/red]"

    summary = (
        f"{status}\n\n"
        f"Window: [cyan]{schedule.start_time.format_12h()}[/cyan] for "
        f"[cyan]{_fmt_duration(schedule.window_minutes)}[/cyan]\n"
        f"Ends: [cyan]{schedule.end_time.format_12h()}[/cyan]\n"
        f"Total: [cyan]{_fmt_duration(schedule.total_duration_minutes)}[/cyan]  "
        f"Showing: [cyan]{_fmt_duration(schedule.total_showing_time_minutes)}[/cyan]  "
        f"Drive: [cyan]{_fmt_duration(schedule.total_drive_time_minutes)}[/cyan]"
    )
    if schedule.directions_url:
        summary += f"\n\n[dim]{schedule.directions_url}[/dim]"

    console.print(Panel.fit(summary, title="Summary"))


@click.group()
@click.version_option(version=__version__, prog_name="tourplan")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Tour Engine - showing tour scheduling for realtors.

    \b
    Quick Start:
      tourplan schedule tour.json                        # Compute a schedule
      tourplan schedule tour.json --save --name "Sat AM" # Compute and save
      tourplan round 9:50 -g on-the-half-hour            # Booking time
      tourplan tours list                                # Saved tours
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.argument("tour_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", help='Override window start, e.g. "9:00 AM"')
@click.option("--end", help='Override window end, e.g. "11:00 AM"')
@click.option("--duration", "-d", type=int, help="Override default showing duration (minutes)")
@click.option("--granularity", "-g", type=click.Choice(GRANULARITIES), help="Booking time rounding")
@click.option("--provider", "-p", type=click.Choice(list(PROVIDERS.keys())), default="google",
              show_default=True, help="Travel time provider")
@click.option("--api-key", envvar="GOOGLE_MAPS_API_KEY", help="Google Maps API key")
@click.option("--workers", type=int, default=4, show_default=True, help="Parallel leg lookups")
@click.option("--json", "as_json", is_flag=True, help="Print the schedule as JSON")
@click.option("--save", is_flag=True, help="Save the tour and schedule")
@click.option("--name", help="Tour name when saving")
@click.option("--owner", default="default", show_default=True, help="Owner account when saving")
@click.option("--store", "store_path", help="Custom tour store path")
def schedule(
    tour_file: str,
    start: Optional[str],
    end: Optional[str],
    duration: Optional[int],
    granularity: Optional[str],
    provider: str,
    api_key: Optional[str],
    workers: int,
    as_json: bool,
    save: bool,
    name: Optional[str],
    owner: str,
    store_path: Optional[str],
):
    """Compute a showing schedule from a tour JSON file.

    \b
    The file holds {"stops": [...], "config": {...}}; stops are visited
    in the order listed.
    """
    try:
        stops, config = load_tour_file(Path(tour_file))
        if start:
            config.start_time = WallClock.parse(start)
        if end:
            config.end_time = WallClock.parse(end)
        if duration is not None:
            config.default_showing_duration_minutes = duration
        if granularity:
            config.scheduling_granularity = SchedulingGranularity.parse(granularity)

        travel = build_travel_time_provider(provider, api_key=api_key)
        result = TourScheduler(travel, max_workers=workers).compute_schedule(stops, config)
    except (InvalidInputError, TravelTimeUnavailableError, ValueError, KeyError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        render_schedule(result, title=config.name or "Tour Schedule")

    if save:
        tour_name = name or config.name
        if not tour_name:
            console.print("[red]Error:[/red] --name is required to save a tour")
            sys.exit(1)
        config.name = tour_name
        tour = ShowingTour(
            name=tour_name,
            description=config.description,
            owner_id=owner,
            stops=stops,
            config=config,
            schedule=result,
        )
        tour_id = get_store(store_path).save(tour)
        console.print(f"[green]✓ Saved tour[/green] [cyan]{tour_id}[/cyan]")


@cli.command("round")
@click.argument("time_value", metavar="TIME")
@click.option("--granularity", "-g", type=click.Choice(GRANULARITIES),
              default=SchedulingGranularity.ON_THE_HOUR.value, show_default=True)
def round_time(time_value: str, granularity: str):
    """Show the client-facing booking time for a showing time."""
    try:
        clock = WallClock.parse(time_value)
    except InvalidInputError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    booked = round_for_booking(clock, granularity)
    console.print(f"{clock.format_12h()} → [green]{booked.format_12h()}[/green]")


# ============================================================================
# SAVED TOURS
# ============================================================================

@cli.group()
def tours():
    """Manage saved tours."""
    pass


@tours.command("list")
@click.option("--owner", default="default", show_default=True, help="Owner account")
@click.option("--store", "store_path", help="Custom tour store path")
def list_tours(owner: str, store_path: Optional[str]):
    """List saved tours, newest first."""
    saved = get_store(store_path).list(owner)

    if not saved:
        console.print("[yellow]No saved tours.[/yellow]")
        return

    table = Table(title=f"Saved Tours ({len(saved)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Stops", justify="right")
    table.add_column("Window")
    table.add_column("Fits", justify="center")

    for tour in saved:
        window = f"{tour.config.start_time.format_12h()} - {tour.config.end_time.format_12h()}"
        if tour.schedule is None:
            fits = "[dim]-[/dim]"
        elif tour.schedule.can_fit_in_window:
            fits = "[green]yes[/green]"
        else:
            fits = "[red]no[/red]"
        table.add_row(tour.id, tour.name, str(len(tour.stops)), window, fits)

    console.print(table)


@tours.command("show")
@click.argument("tour_id")
@click.option("--store", "store_path", help="Custom tour store path")
def show_tour(tour_id: str, store_path: Optional[str]):
    """Show a saved tour and its cached schedule."""
    tour = get_store(store_path).get(tour_id)
    if tour is None:
        console.print(f"[red]Tour {tour_id} not found[/red]")
        sys.exit(1)

    details = f"[bold]{tour.name}[/bold]"
    if tour.description:
        details += f"\n{tour.description}"
    if tour.config.showing_date:
        details += f"\nDate: {tour.config.showing_date.isoformat()}"
    details += "\n\n" + "\n".join(
        f"{i}. {stop.address or stop.id}" for i, stop in enumerate(tour.stops, 1)
    )
    console.print(Panel.fit(details, title=tour.id))

    if tour.schedule:
        render_schedule(tour.schedule)
    else:
        console.print("[dim]No schedule saved with this tour.[/dim]")


@tours.command("delete")
@click.argument("tour_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--store", "store_path", help="Custom tour store path")
def delete_tour(tour_id: str, yes: bool, store_path: Optional[str]):
    """Delete a saved tour."""
    store = get_store(store_path)
    if store.get(tour_id) is None:
        console.print(f"[red]Tour {tour_id} not found[/red]")
        sys.exit(1)

    if not yes and not Confirm.ask(f"Delete tour {tour_id}?"):
        return

    store.delete(tour_id)
    console.print(f"[green]✓ Deleted tour {tour_id}[/green]")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int):
    """Run the tour API server."""
    import uvicorn

    uvicorn.run("tour_engine.website_api.main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
