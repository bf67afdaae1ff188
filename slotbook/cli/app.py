"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.json_store import JsonBookingStore
from ..config import AppConfig, BusinessConfig, get_default_config_path
from ..domain.exceptions import SlotbookError
from ..domain.models import WEEKDAY_NAMES
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="slotbook",
    help="Compute bookable appointment slots from business hours and existing bookings",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
BusinessOption = Annotated[Optional[str], typer.Option("--business", "-b", help="Business id. Defaults to the configured default business.")]
LocationOption = Annotated[Optional[str], typer.Option("--location", "-l", help="Location id. Defaults to the service's location.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Slot resolution for appointment booking.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load(config_file: Optional[Path], business_id: Optional[str]) -> Tuple[BusinessConfig, AvailabilityService]:
    """Load the config, pick the business and wire the service to the JSON store."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)

    resolved_id = config.resolve_business_id(business_id)
    business = config.find_business(resolved_id)
    if business is None:
        raise ValueError(f"Unknown business: '{resolved_id}'")

    store = JsonBookingStore(config=config, data_file=config.resolve_data_path(config_path))
    return business, AvailabilityService(store=store)


def _parse_date(value: str, tz: str, label: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz)
    except ValueError as e:
        raise ValueError(f"Could not parse {label} '{value}', expected YYYY-MM-DD") from e


def _fail(error: Exception):
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    service: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id. Without it the default duration applies.")] = None,
    location: LocationOption = None,
    business: BusinessOption = None,
    config_file: ConfigOption = None,
):
    """
    List bookable start times for a date.

    Examples:

        slotbook slots 2024-11-25 --service haircut
    """
    try:
        business_config, service_layer = _load(config_file, business)
        settings = business_config.localization_settings()
        target = _parse_date(date, business_config.timezone, "date")

        found = asyncio.run(
            service_layer.slots_for_date(
                business_id=business_config.id,
                date=target,
                service_id=service,
                location_id=location,
            )
        )
    except (SlotbookError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print()
    if not found:
        console.print(
            f"[yellow]⚠ No slots available on {settings.format_date(target)}.[/yellow]\n"
            "The business may be closed or fully booked."
        )
    else:
        console.print(
            f"[bold green]✓ {len(found)} slot(s) at {business_config.display_name()} "
            f"on {settings.format_date(target)}:[/bold green]\n"
        )
        for slot in found:
            console.print(f"  {settings.format_time(slot)}")
    console.print()


@app.command()
def dates(
    start: Annotated[str, typer.Argument(help="First date (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last date, inclusive (YYYY-MM-DD)")],
    service: Annotated[str, typer.Option("--service", "-s", help="Service id")],
    location: LocationOption = None,
    business: BusinessOption = None,
    config_file: ConfigOption = None,
):
    """
    List the dates in a range that still have at least one free slot.
    """
    try:
        business_config, service_layer = _load(config_file, business)
        tz = business_config.timezone

        found = asyncio.run(
            service_layer.dates_with_slots(
                business_id=business_config.id,
                service_id=service,
                start_date=_parse_date(start, tz, "start date"),
                end_date=_parse_date(end, tz, "end date"),
                location_id=location,
            )
        )
    except (SlotbookError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print()
    if not found:
        console.print("[yellow]⚠ No dates with free slots in this range.[/yellow]")
    else:
        for day in found:
            console.print(f"  {day}")
    console.print()


@app.command()
def check(
    start: Annotated[str, typer.Argument(help="Requested start (YYYY-MM-DD HH:mm)")],
    service: Annotated[str, typer.Option("--service", "-s", help="Service id")],
    location: LocationOption = None,
    business: BusinessOption = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a booking request can be accepted, suggesting alternatives if not.
    """
    try:
        business_config, service_layer = _load(config_file, business)
        settings = business_config.localization_settings()
        try:
            requested = pendulum.from_format(start, "YYYY-MM-DD HH:mm", tz=business_config.timezone)
        except ValueError as e:
            raise ValueError(f"Could not parse start '{start}', expected YYYY-MM-DD HH:mm") from e

        result = asyncio.run(
            service_layer.validate_booking_request(
                business_id=business_config.id,
                start=requested,
                service_id=service,
                location_id=location,
            )
        )
    except (SlotbookError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not result.has_conflict:
        console.print(Panel.fit(
            f"[bold green]✓ {settings.format_datetime(requested)} is available.[/bold green]",
            title="Booking check"
        ))
        return

    console.print(Panel.fit(
        f"[bold red]✗ {settings.format_datetime(requested)} is no longer available.[/bold red]\n"
        f"Conflicts with {len(result.conflicting_bookings)} existing booking(s).",
        title="Booking check"
    ))

    if result.alternatives:
        table = Table(title="Alternatives", show_header=True, header_style="bold cyan")
        table.add_column("Start", style="bold yellow")
        table.add_column("Reason")
        table.add_column("Score", justify="right", style="dim")

        for alternative in result.alternatives:
            table.add_row(
                settings.format_datetime(alternative.time_range.start),
                alternative.reason,
                f"{alternative.score:.1f}",
            )

        console.print(table)
    raise typer.Exit(2)


@app.command()
def schedule(
    business: BusinessOption = None,
    config_file: ConfigOption = None,
):
    """
    Show the weekly opening hours of a business.
    """
    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path)
        business_config = config.find_business(config.resolve_business_id(business))
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    if business_config is None:
        _fail(ValueError(f"Unknown business: '{business}'"))

    weekly = business_config.weekly_schedule()
    if weekly is None:
        console.print("[yellow]No availability configured for this business.[/yellow]")
        return

    table = Table(
        title=f"Opening hours - {business_config.display_name()}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")

    # Show Monday first, as businesses read their week
    for index in (1, 2, 3, 4, 5, 6, 0):
        hours = weekly.for_weekday(index)
        label = f"{hours.open} - {hours.close}" if hours else "[dim]closed[/dim]"
        table.add_row(WEEKDAY_NAMES[index].capitalize(), label)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
