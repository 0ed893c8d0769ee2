"""notical CLI - Notion calendar widget and relay."""

import json
import logging
import sys
import webbrowser

import click

from .adapters.notion_api import NotionAdapter, NotionError
from .config import load_config, load_relay_settings
from .core.calendar import WEEKDAY_HEADERS, DisplayedMonth, format_today, grid_rows
from .core.connection import ConnectionConfig
from .widget import CalendarWidget, describe_error


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def _parse_month(value: str | None) -> DisplayedMonth | None:
    if value is None:
        return None
    try:
        return DisplayedMonth.parse(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM, got {value!r}")


def _configured_widget(
    use_relay: bool | None = None,
    month: DisplayedMonth | None = None,
) -> CalendarWidget:
    """Build a widget from notical.conf and load ``month``, exiting on failure."""
    config = load_config()
    if use_relay is not None:
        config.use_relay = use_relay

    calendar_widget = CalendarWidget(config)
    if month is not None:
        calendar_widget.month = month

    calendar_widget.configure(config.notion_secret, config.database_id, config.use_relay)
    if calendar_widget.error:
        click.echo(f"Error: {calendar_widget.error}", err=True)
        sys.exit(1)
    return calendar_widget


def _show_grid(widget: CalendarWidget) -> None:
    """Print the month grid."""
    click.echo(f"{widget.month.label.capitalize():^35}")
    click.echo(f"TODAY IS {format_today(widget.now().date())}")
    click.echo("".join(f"{h:^5}" for h in WEEKDAY_HEADERS))

    # Each cell is 5 wide: " 12* " or "[12*]" for today
    for week in grid_rows(widget.grid()):
        line = []
        for cell in week:
            if cell.is_blank:
                line.append("     ")
                continue
            text = f"{cell.day:>2}{'*' if cell.has_entry else ' '}"
            line.append(f"[{text}]" if cell.is_today else f" {text} ")
        click.echo("".join(line).rstrip())

    for day, entry in sorted(widget.entries.items()):
        click.echo(f"  {day:2}  {entry.color:8} {widget.entry_url(day)}")


@click.group()
@click.version_option()
def main():
    """notical - Notion calendar widget."""
    pass


@main.command()
@click.option("--port", type=int, default=None, help="Port to listen on (default: PORT or 8787)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def relay(port: int | None, debug: bool):
    """Run the relay that forwards /api/* to Notion with the token attached."""
    from dataclasses import replace

    from .relay import run_relay

    _setup_logging(debug)
    settings = load_relay_settings()
    if port is not None:
        settings = replace(settings, port=port)

    click.echo("Press Ctrl+C to stop")
    try:
        run_relay(settings)
    except KeyboardInterrupt:
        click.echo("\nRelay stopped.")


@main.command()
@click.option("--port", type=int, default=None, help="Port to listen on")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def widget(port: int | None, debug: bool):
    """Serve the calendar widget in the browser."""
    from .web import run_widget

    _setup_logging(debug)
    config = load_config()
    calendar_widget = CalendarWidget(config)

    # Pre-fill from notical.conf when it has usable settings
    if config.database_id and (config.use_relay or config.notion_secret):
        calendar_widget.configure(config.notion_secret, config.database_id, config.use_relay)

    try:
        run_widget(calendar_widget, port or config.widget_port)
    except KeyboardInterrupt:
        click.echo("\nWidget stopped.")


@main.command()
def health():
    """Check that the relay is running."""
    config = load_config()
    adapter = NotionAdapter.from_config(
        ConnectionConfig(credential=None, database_id="", use_relay=True), config
    )
    try:
        ok = adapter.check_health()
    except NotionError as e:
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(1)

    if not ok:
        click.echo(f"Relay at {config.relay_url} is not healthy.", err=True)
        sys.exit(1)
    click.echo(f"✓ Relay at {config.relay_url} is up")


@main.command()
@click.option("--month", "-m", "month_str", default=None, help="Month to show (YYYY-MM)")
@click.option("--relay/--direct", "use_relay", default=None, help="Override USE_RELAY")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(month_str: str | None, use_relay: bool | None, as_json: bool):
    """Show a month of entries."""
    calendar_widget = _configured_widget(use_relay, _parse_month(month_str))

    if as_json:
        click.echo(
            json.dumps(
                {
                    "month": f"{calendar_widget.month.year}-{calendar_widget.month.month:02d}",
                    "entries": [
                        {
                            "day": e.day,
                            "id": e.id,
                            "date": e.date,
                            "color": e.color,
                        }
                        for e in sorted(calendar_widget.entries.values(), key=lambda e: e.day)
                    ],
                },
                indent=2,
            )
        )
        return

    _show_grid(calendar_widget)


@main.command()
@click.option("--open", "open_page", is_flag=True, help="Open the new page in the browser")
def add(open_page: bool):
    """Record an entry for today."""
    calendar_widget = _configured_widget()
    url = calendar_widget.add_entry()

    if url is None:
        click.echo(f"Error: {calendar_widget.error}", err=True)
        sys.exit(1)

    click.echo(f"✓ Created {url}")
    if open_page:
        webbrowser.open(url)


@main.command("open")
@click.argument("day", type=int)
@click.option("--month", "-m", "month_str", default=None, help="Month of the day (YYYY-MM)")
def open_day(day: int, month_str: str | None):
    """Open the entry recorded on DAY in the browser."""
    calendar_widget = _configured_widget(month=_parse_month(month_str))

    url = calendar_widget.entry_url(day)
    if url is None:
        click.echo(f"No entry on {calendar_widget.month.label} {day}.")
        return

    click.echo(url)
    webbrowser.open(url)


if __name__ == "__main__":
    main()
