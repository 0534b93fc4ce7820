"""Journal commands."""

import click
from ledgerkit.cli.error_handling import format_amount
from ledgerkit.domain.chart_of_accounts import get_account_definition
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.transaction import TransactionService


@click.group()
def journal_group():
    """Inspect and maintain journal entries."""
    pass


@journal_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_journal(ctx, entry_id: int) -> None:
    """Show a journal entry and its lines."""
    entry = JournalService(ctx.obj["db"]).get_journal(entry_id, ctx.obj["user"])
    if entry is None:
        click.echo(f"Error: Journal entry {entry_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Journal entry {entry.id}")
    click.echo(f"  Date: {entry.date.date()}")
    if entry.memo:
        click.echo(f"  Memo: {entry.memo}")
    if entry.reference_id:
        click.echo(f"  Transaction: {entry.reference_id}")
    click.echo("-" * 80)
    click.echo(f"{'Code':<6} {'Account':<36} {'Debit':>18} {'Credit':>18}")
    click.echo("-" * 80)
    for line in entry.lines:
        account = get_account_definition(line.account_code)
        name = account.name if account else "Unknown"
        debit = format_amount(line.debit) if line.debit else ""
        credit = format_amount(line.credit) if line.credit else ""
        click.echo(f"{line.account_code:<6} {name:<36} {debit:>18} {credit:>18}")
    click.echo("-" * 80)
    click.echo(f"{'TOTAL':<43} {format_amount(entry.total_debit):>18} {format_amount(entry.total_credit):>18}")


@journal_group.command("backfill")
@click.pass_context
def backfill_journal(ctx) -> None:
    """Post journal entries for transactions that have none."""
    count = TransactionService(ctx.obj["db"]).backfill_journal_entries(ctx.obj["user"])
    click.echo(f"Backfilled {count} journal entr{'y' if count == 1 else 'ies'}")


def register_commands(cli: click.Group) -> None:
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
