"""System settings commands."""

from datetime import datetime

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.domain.day_boundary import business_date_for, day_end_from_settings
from exledger.domain.errors import DomainError
from exledger.domain.settings import SettingsService
from exledger.utils.date_parser import parse_time_of_day


@click.group()
def settings_group():
    """View and change shop settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current settings and the business date they imply right now."""
    service = SettingsService(ctx.obj["db"])
    settings = service.get_settings()
    click.echo(f"Day end: {service.day_end().strftime('%H:%M')}")
    current = business_date_for(datetime.now(), day_end_from_settings(settings))
    click.echo(f"Current business date: {current.isoformat()}")


@settings_group.command("set-day-end")
@click.argument("day_end", metavar="HH:MM")
@click.pass_context
def set_day_end(ctx, day_end: str):
    """Set the time the business day rolls over. Owners and managers only.

    A time before noon extends each day past midnight; a time from noon
    onwards ends the day early. 00:00 restores plain calendar days.

    Examples:
        exledger --role owner settings set-day-end 02:00
    """
    service = SettingsService(ctx.obj["db"])
    try:
        value = parse_time_of_day(day_end)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        service.set_day_end(ctx.obj["actor"], value.hour, value.minute)
        click.echo(f"Day end set to {value.strftime('%H:%M')}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
