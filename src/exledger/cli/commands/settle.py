"""Staff settlement command."""

import click
from exledger.cli.error_handling import handle_domain_error
from exledger.cli.input_parsing import resolve_date_or_exit
from exledger.domain.errors import DomainError
from exledger.domain.settlement import SettlementService


@click.command("settle")
@click.option("--date", help="Business date (default today)")
@click.option("--for", "staff_id", help="Settle only this staff member")
@click.option("--dry-run", is_flag=True, help="Show outstanding amounts without recording anything")
@click.option("--use-day-end", is_flag=True, help="Apply the configured day-end time to the day window")
@click.pass_context
def settle(ctx, date: str | None, staff_id: str | None, dry_run: bool, use_day_end: bool):
    """Settle online payments staff received into personal wallets.

    Without --for every staff member with an outstanding amount is settled,
    all or none. Owners and managers only. Pass --use-day-end to match a
    ledger shown with the same flag.

    Examples:
        exledger --role owner settle --dry-run
        exledger --role manager settle --date yesterday --for hari
    """
    db = ctx.obj["db"]
    service = SettlementService(db, use_day_end_setting=use_day_end)
    day = resolve_date_or_exit(ctx, date)

    balances = [b for b in service.balances(day, staff_id=staff_id) if not b.is_settled]
    if not balances:
        click.echo(f"Nothing outstanding for {day.isoformat()}.")
        return

    for balance in balances:
        click.echo(
            f"{balance.staff_id:<12} owes NPR {balance.outstanding_npr:,.2f} | "
            f"INR {balance.outstanding_inr:,.2f}"
        )
    if dry_run:
        return

    try:
        if staff_id is not None:
            settlement_ids = [service.settle(ctx.obj["actor"], staff_id, day)]
        else:
            settlement_ids = service.settle_day(ctx.obj["actor"], day)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Recorded {len(settlement_ids)} settlement(s) for {day.isoformat()}")


def register_commands(cli):
    """Register settle command with main CLI."""
    cli.add_command(settle, name="settle")
