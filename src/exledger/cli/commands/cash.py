"""Cash tracker commands."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import (
    parse_amount_or_exit,
    parse_counts_or_exit,
    resolve_date_or_exit,
)
from exledger.domain.cash_tracker import CashTrackerService
from exledger.domain.denominations import breakdown_for_currency
from exledger.domain.entities import CashTrackerRecord, Currency
from exledger.domain.errors import DomainError
from exledger.utils.denomination_parser import format_denominations

COUNT_HELP = 'Note counts, e.g. "1000=5,500=2" (INR also accepts coins=N)'


def _echo_record(record: CashTrackerRecord) -> None:
    status = "closed" if record.is_closed else "open"
    click.echo(f"Cash day {record.date.isoformat()} ({record.staff_id}, {status}):")
    for currency in Currency:
        closing = record.closing(currency)
        closing_str = f"{closing:,.2f}" if closing is not None else "not counted"
        click.echo(
            f"  {currency.value}: opening {record.opening(currency):,.2f} | closing {closing_str}"
        )


@click.group()
def cash_group():
    """Count the till at the start and end of the day."""
    pass


@cash_group.command("open")
@click.option("--npr", default="", help=COUNT_HELP)
@click.option("--inr", default="", help=COUNT_HELP)
@click.option("--date", help="Business date (default today)")
@click.option("--notes", help="Notes")
@click.pass_context
def open_day(ctx, npr: str, inr: str, date: str | None, notes: str | None):
    """Record the opening count for the day.

    Examples:
        exledger cash open --npr "1000=10" --inr "500=10"
    """
    db = ctx.obj["db"]
    service = CashTrackerService(db)
    day = resolve_date_or_exit(ctx, date)
    npr_counts = parse_counts_or_exit(ctx, npr, "NPR")
    inr_counts = parse_counts_or_exit(ctx, inr, "INR")

    previous = service.previous_closed(day, staff_id=ctx.obj["actor"].id)
    if previous is not None:
        click.echo(
            f"Previous close ({previous.date.isoformat()}): "
            f"NPR {previous.closing_npr:,.2f} | INR {previous.closing_inr:,.2f}"
        )

    try:
        record_id = service.open_day(ctx.obj["actor"], npr_counts, inr_counts, day=day, notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    record = db.get_cash_tracker_record_by_id(record_id)
    click.echo(f"Opened cash day {day.isoformat()} (ID: {record_id})")
    _echo_record(record)


@cash_group.command("close")
@click.option("--npr", default="", help=COUNT_HELP)
@click.option("--inr", default="", help=COUNT_HELP)
@click.option("--date", help="Business date (default today)")
@click.option("--notes", help="Notes")
@click.pass_context
def close_day(ctx, npr: str, inr: str, date: str | None, notes: str | None):
    """Record the closing count and close the day.

    Examples:
        exledger cash close --npr "1000=10,500=1,100=2,50=1" --inr "500=8,200=1,100=1,50=1,20=1,coins=5"
    """
    db = ctx.obj["db"]
    service = CashTrackerService(db)
    day = resolve_date_or_exit(ctx, date)
    npr_counts = parse_counts_or_exit(ctx, npr, "NPR")
    inr_counts = parse_counts_or_exit(ctx, inr, "INR")

    try:
        record = service.close_day(ctx.obj["actor"], npr_counts, inr_counts, day=day, notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Closed cash day {day.isoformat()}")
    _echo_record(record)


@cash_group.command("show")
@click.option("--date", help="Business date (default today)")
@click.option("--all-staff", is_flag=True, help="Show the first record of the day, whoever opened it")
@click.option("--counts", is_flag=True, help="Suggest note counts for the stored totals")
@click.pass_context
def show_day(ctx, date: str | None, all_staff: bool, counts: bool):
    """Show the cash record for a day.

    The suggested counts are a greedy split of the stored totals, handy as
    a starting point for an edit. They are not the notes actually counted.
    """
    db = ctx.obj["db"]
    service = CashTrackerService(db)
    day = resolve_date_or_exit(ctx, date)

    staff_id = None if all_staff else ctx.obj["actor"].id
    record = service.get_record(day, staff_id=staff_id)
    if record is None:
        click.echo(f"No cash record for {day.isoformat()}.")
        return
    _echo_record(record)
    if not counts:
        return

    for currency in Currency:
        for label, closing in (("opening", False), ("closing", True)):
            suggested = service.suggest_denominations(record, currency, closing=closing)
            if suggested:
                click.echo(f"  {currency.value} {label} counts: {format_denominations(suggested)}")


@cash_group.command("edit")
@click.option("--date", help="Business date (default today)")
@click.option("--staff-id", help="Whose record to edit (default the current staff member)")
@click.option("--opening-npr", help="Corrected NPR opening total")
@click.option("--opening-inr", help="Corrected INR opening total")
@click.option("--closing-npr", help="Corrected NPR closing total")
@click.option("--closing-inr", help="Corrected INR closing total")
@click.pass_context
def edit_day(
    ctx,
    date: str | None,
    staff_id: str | None,
    opening_npr: str | None,
    opening_inr: str | None,
    closing_npr: str | None,
    closing_inr: str | None,
):
    """Correct the stored totals of a cash day."""
    db = ctx.obj["db"]
    service = CashTrackerService(db)
    day = resolve_date_or_exit(ctx, date)

    values = {}
    for name, raw in (
        ("opening_npr", opening_npr),
        ("opening_inr", opening_inr),
        ("closing_npr", closing_npr),
        ("closing_inr", closing_inr),
    ):
        values[name] = parse_amount_or_exit(ctx, raw, name.replace("_", "-")) if raw is not None else None
    if all(v is None for v in values.values()):
        click.echo("Error: Nothing to change", err=True)
        ctx.exit(1)

    try:
        record = service.require_record(day, staff_id or ctx.obj["actor"].id)
        service.edit_record(ctx.obj["actor"], record.id, **values)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated cash day {day.isoformat()}")
    _echo_record(db.get_cash_tracker_record_by_id(record.id))


@cash_group.command("breakdown")
@click.argument("amount")
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    required=True,
)
@click.pass_context
def breakdown(ctx, amount: str, currency: str):
    """Suggest note counts for a total (best effort, not an audit record)."""
    total = parse_amount_or_exit(ctx, amount)
    try:
        counts = breakdown_for_currency(total, Currency(currency.upper()))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(format_denominations(counts) or "(nothing)")


@cash_group.command("delete")
@click.option("--date", help="Business date (default today)")
@click.option("--staff-id", help="Whose record to delete (default the current staff member)")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_day(ctx, date: str | None, staff_id: str | None, yes: bool):
    """Delete a cash day. Owners and managers, or staff with --permission manage_cash_days."""
    db = ctx.obj["db"]
    service = CashTrackerService(db)
    day = resolve_date_or_exit(ctx, date)
    staff_id = staff_id or ctx.obj["actor"].id

    if not yes and not click.confirm(f"Are you sure you want to delete the cash day {day.isoformat()} of '{staff_id}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_day(ctx.obj["actor"], day, staff_id=staff_id)
        click.echo(f"Deleted cash day {day.isoformat()}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register cash tracker commands with main CLI."""
    cli.add_command(cash_group, name="cash")
