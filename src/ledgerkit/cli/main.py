"""Main CLI entry point."""

import click
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.logging_config import configure_logging, parse_level

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    adjustment,
    catalog,
    journal,
    report,
    transaction,
)


def _validate_log_level(ctx, param, value):
    try:
        parse_level(value)
    except ValueError as e:
        raise click.BadParameter(str(e))
    return value


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Database file path or SQLAlchemy URL (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--user",
    default="default",
    show_default=True,
    help="User the commands act as (overrides LEDGERKIT_USER environment variable)",
    envvar="LEDGERKIT_USER",
)
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    callback=_validate_log_level,
    help="Log level (overrides LEDGERKIT_LOG_LEVEL environment variable)",
    envvar="LEDGERKIT_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str, log_level: str):
    """Ledgerkit - double-entry bookkeeping for small-business finance.

    Record income, expenses, assets, liabilities and equity; every
    transaction is posted to a balanced journal, and the income statement,
    balance sheet and cash-flow statement are derived for any period.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user"] = user
        ctx.call_on_close(db.disconnect)


# Register all commands
transaction.register_commands(cli)
report.register_commands(cli)
adjustment.register_commands(cli)
catalog.register_commands(cli)
journal.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
