"""Daily ledger report command."""

import json

import click
from exledger.cli.input_parsing import resolve_date_or_exit, resolve_month_or_exit
from exledger.domain.entities import LedgerSnapshot, PeriodSummary
from exledger.domain.ledger import LedgerService


def format_ledger(snapshot: LedgerSnapshot) -> list[str]:
    """Render a snapshot as a two-column NPR/INR table."""
    width = 62
    lines = [
        f"Daily ledger for {snapshot.date.isoformat()}",
        f"Window: {snapshot.window_start:%Y-%m-%d %H:%M} to {snapshot.window_end:%Y-%m-%d %H:%M}",
        "=" * width,
        f"{'':<26} {'NPR':>16} {'INR':>16}",
        "-" * width,
    ]
    for npr_row, inr_row in zip(snapshot.npr.rows(), snapshot.inr.rows()):
        if npr_row.key == "expected":
            lines.append("-" * width)
        if npr_row.key == "farak":
            lines.append(
                f"{'Actual (Cha)':<26} {snapshot.npr.actual:>16,.2f} {snapshot.inr.actual:>16,.2f}"
            )
        lines.append(f"{npr_row.label:<26} {npr_row.amount:>16,.2f} {inr_row.amount:>16,.2f}")
    lines.append("=" * width)

    if snapshot.npr.staff_owes_personal or snapshot.inr.staff_owes_personal:
        lines.append(
            f"{'Staff owes (personal)':<26} {snapshot.npr.staff_owes_personal:>16,.2f} "
            f"{snapshot.inr.staff_owes_personal:>16,.2f}"
        )
    if not snapshot.has_cash_record:
        lines.append("No cash record for this day; opening balances are zero.")
    if not snapshot.difference_is_reliable:
        lines.append("Day not closed yet; the difference is not meaningful until the closing count.")
    return lines


def format_period(summary: PeriodSummary) -> list[str]:
    """Render a period summary as a two-column NPR/INR table."""
    width = 62
    rows = [
        ("Received (exchange)", "received_via_exchange"),
        ("Paid Out (exchange)", "paid_out_via_exchange"),
        ("Expenses", "expenses"),
        ("Credit Given", "credit_given"),
        ("Credit Received", "credit_received"),
    ]
    lines = [
        f"Summary for {summary.start_date.isoformat()} to {summary.end_date.isoformat()}",
        f"Transactions: {summary.transaction_count}",
        "=" * width,
        f"{'':<26} {'NPR':>16} {'INR':>16}",
        "-" * width,
    ]
    for label, attr in rows:
        lines.append(
            f"{label:<26} {getattr(summary.npr, attr):>16,.2f} {getattr(summary.inr, attr):>16,.2f}"
        )
    lines.append("-" * width)
    lines.append(f"{'Net Flow':<26} {summary.npr.net_flow:>16,.2f} {summary.inr.net_flow:>16,.2f}")
    lines.append("=" * width)
    return lines


@click.group()
def ledger_group():
    """Daily reconciliation and monthly reports."""
    pass


@ledger_group.command("show")
@click.option("--date", help="Business date (default today)")
@click.option("--staff-id", help="Use this staff member's cash record")
@click.option("--use-day-end", is_flag=True, help="Apply the configured day-end time to the day window")
@click.option("--json", "as_json", is_flag=True, help="Print the ledger as JSON")
@click.pass_context
def show_ledger(ctx, date: str | None, staff_id: str | None, use_day_end: bool, as_json: bool):
    """Show the expected, actual and difference for each currency.

    Examples:
        exledger ledger show
        exledger ledger show --date yesterday --json
    """
    db = ctx.obj["db"]
    service = LedgerService(db, use_day_end_setting=use_day_end)
    day = resolve_date_or_exit(ctx, date)

    snapshot = service.build_daily_ledger(day, staff_id=staff_id)
    if as_json:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return
    for line in format_ledger(snapshot):
        click.echo(line)


@ledger_group.command("month")
@click.option("--month", help="Month to summarize, e.g. 2024-03 or 'last month' (default this month)")
@click.option("--use-day-end", is_flag=True, help="Apply the configured day-end time to the first and last day")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.pass_context
def month_summary(ctx, month: str | None, use_day_end: bool, as_json: bool):
    """Show a month's exchange, expense and credit totals.

    Examples:
        exledger ledger month
        exledger ledger month --month 2024-03 --json
    """
    db = ctx.obj["db"]
    service = LedgerService(db, use_day_end_setting=use_day_end)
    first_day = resolve_month_or_exit(ctx, month)

    summary = service.build_monthly_summary(first_day)
    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return
    for line in format_period(summary):
        click.echo(line)


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
