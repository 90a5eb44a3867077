"""CLI error handling helpers."""

import logging

import click

from exledger.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError) -> None:
    """Report a rejected operation on stderr and exit with status 1.

    The error class is logged at DEBUG so ``--log-level DEBUG`` shows which
    check refused the command.
    """
    logger.debug("%s rejected (%s): %s", ctx.command_path, type(error).__name__, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
