"""Transaction management commands."""

import click
from ledgerkit.cli.error_handling import format_amount, handle_domain_error
from ledgerkit.domain.entities import CashFlowCategory, FinanceType, PeriodKey, TransactionStatus
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.presets import find_preset_key_by_label, is_transaction_preset_key
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

FINANCE_TYPES = click.Choice([item.value for item in FinanceType], case_sensitive=False)
STATUSES = click.Choice([item.value for item in TransactionStatus], case_sensitive=False)
CASH_FLOWS = click.Choice([item.value for item in CashFlowCategory], case_sensitive=False)
PERIODS = click.Choice([item.value for item in PeriodKey], case_sensitive=False)


def _resolve_preset(preset: str) -> str:
    """Accept a preset key or a preset label."""
    if is_transaction_preset_key(preset):
        return preset
    return find_preset_key_by_label(preset) or preset


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--type", "finance_type", type=FINANCE_TYPES, help="Finance type (optional with --preset)")
@click.option("--amount", required=True, help="Transaction amount (e.g., 45000000 or 'Rp 45,000,000')")
@click.option("--date", default="today", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Transaction description (used as journal memo)")
@click.option("--category", help="Category text (e.g., 'Sales - Produk A')")
@click.option("--status", type=STATUSES, default=TransactionStatus.POSTED.value, show_default=True)
@click.option("--cash-flow", "cash_flow", type=CASH_FLOWS, help="Cash-flow classification (default operating)")
@click.option("--counterparty", help="Customer or supplier name")
@click.option("--preset", help="Preset key or label (cash, cogs, purchase)")
@click.pass_context
def add_transaction(
    ctx,
    finance_type: str | None,
    amount: str,
    date: str,
    description: str | None,
    category: str | None,
    status: str,
    cash_flow: str | None,
    counterparty: str | None,
    preset: str | None,
) -> None:
    """Add a transaction and post its journal entry.

    Examples:
        ledgerkit transaction add --type income --amount 45000000 --category "Sales - Produk A"
        ledgerkit transaction add --preset cogs --amount 1500000 --date 2026-05-02
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn = service.create_transaction(
            user_id=ctx.obj["user"],
            amount=txn_amount,
            date=txn_date,
            finance_type=finance_type,
            description=description,
            category=category,
            status=status,
            cash_flow_type=cash_flow,
            counterparty=counterparty,
            preset_key=_resolve_preset(preset) if preset else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {txn.id} (journal entry {txn.journal_entry_id})")
    click.echo(f"  Date: {txn.date.date()}")
    click.echo(f"  Type: {txn.finance_type.value}")
    click.echo(f"  Amount: {format_amount(txn.amount)}")
    click.echo(f"  Category: {txn.category}")
    if txn.preset_label:
        click.echo(f"  Preset: {txn.preset_label}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "finance_type", type=FINANCE_TYPES, help="Finance type")
@click.option("--amount", help="Transaction amount")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category text")
@click.option("--status", type=STATUSES, help="posted or pending")
@click.option("--cash-flow", "cash_flow", type=CASH_FLOWS, help="Cash-flow classification")
@click.option("--counterparty", help="Customer or supplier name")
@click.option("--preset", help="Preset key or label")
@click.option("--clear-preset", is_flag=True, help="Remove the preset from the transaction")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    finance_type: str | None,
    amount: str | None,
    date: str | None,
    description: str | None,
    category: str | None,
    status: str | None,
    cash_flow: str | None,
    counterparty: str | None,
    preset: str | None,
    clear_preset: bool,
) -> None:
    """Update a transaction and re-derive its journal entry.

    Updates only the fields that are provided; the linked journal entry is
    replaced in place.

    Examples:
        ledgerkit transaction update 1 --amount 1500000
        ledgerkit transaction update 1 --status posted
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    changes = {}
    if amount is not None:
        try:
            changes["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if date is not None:
        try:
            changes["date"] = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    optional_fields = {
        "finance_type": finance_type,
        "description": description,
        "category": category,
        "status": status,
        "cash_flow_type": cash_flow,
        "counterparty": counterparty,
    }
    changes.update({name: value for name, value in optional_fields.items() if value is not None})
    if clear_preset:
        changes["preset_key"] = None
    elif preset is not None:
        changes["preset_key"] = _resolve_preset(preset)

    try:
        service.update_transaction(transaction_id, ctx.obj["user"], changes)
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--start-date", help="Start date, inclusive (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date, exclusive (YYYY-MM-DD or relative like 'today')")
@click.option("--category", help="Exact category text")
@click.option("--type", "finance_type", type=FINANCE_TYPES, help="Finance type")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    finance_type: str | None,
    limit: int | None,
):
    """View transactions, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    # Parse dates
    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    transactions = service.list_transactions(
        ctx.obj["user"], start=start, end=end, category=category, finance_type=finance_type
    )
    if limit is not None:
        transactions = transactions[:limit]

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<10} {'Amount':>18} {'Status':<8} {'Cash flow':<10} {'Category':<40}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {str(txn.date.date()):<12} {txn.finance_type.value:<10} "
            f"{format_amount(txn.amount):>18} {txn.status.value:<8} {txn.cash_flow_type.value:<10} "
            f"{txn.category[:40]:<40}"
        )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction and its journal entry.

    Examples:
        ledgerkit transaction delete 1
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    user_id = ctx.obj["user"]

    if service.get_transaction(transaction_id, user_id) is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    # Confirm deletion
    if not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id, user_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete-by-category")
@click.option("--category", required=True, help="Exact category text")
@click.option("--period", type=PERIODS, default=PeriodKey.CURRENT_MONTH.value, show_default=True)
@click.option("--type", "finance_type", type=FINANCE_TYPES, help="Only delete this finance type")
@click.pass_context
def delete_by_category(ctx, category: str, period: str, finance_type: str | None) -> None:
    """Delete every transaction of a category within a period."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    if not click.confirm(f"Delete all '{category}' transactions for {period}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        count = service.delete_transactions_by_category(
            ctx.obj["user"], category, period, finance_type=finance_type
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted {count} transaction(s)")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
