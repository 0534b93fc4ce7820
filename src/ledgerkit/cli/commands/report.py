"""Report commands."""

import click
from ledgerkit.cli.error_handling import format_amount, handle_domain_error
from ledgerkit.domain.entities import PeriodKey, ReportType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.reports import ReportService
from ledgerkit.utils.date_parser import get_period_range, parse_date

PERIODS = click.Choice([item.value for item in PeriodKey], case_sensitive=False)
REPORT_TYPES = click.Choice([item.value for item in ReportType], case_sensitive=False)

WIDTH = 72


def _echo_section(title: str, rows, total_label: str, total) -> None:
    click.echo(f"\n{title}")
    if not rows:
        click.echo("    (none)")
    for row in rows:
        marker = " *" if row.is_manual else ""
        click.echo(f"    {(row.label + marker)[:48]:<48} {format_amount(row.amount):>18}")
        if row.description:
            click.echo(f"        {row.description}")
    click.echo(f"  {total_label:<50} {format_amount(total):>18}")


def _echo_income_statement(statement) -> None:
    totals = statement.totals
    click.echo("\nINCOME STATEMENT")
    click.echo("=" * WIDTH)
    _echo_section("Revenue", statement.revenues, "Total Revenue", totals.revenue)
    _echo_section("Cost of Goods Sold", statement.cogs, "Total COGS", totals.cogs)
    click.echo(f"  {'Gross Profit':<50} {format_amount(totals.gross_profit):>18}")
    _echo_section("Operating Expenses", statement.expenses, "Total Operating Expenses", totals.operating_expenses)
    click.echo("-" * WIDTH)
    click.echo(f"  {'Net Income':<50} {format_amount(totals.net_income):>18}")


def _echo_balance_sheet(sheet) -> None:
    totals = sheet.totals
    click.echo("\nBALANCE SHEET")
    click.echo("=" * WIDTH)
    _echo_section("Assets", sheet.assets, "Total Assets", totals.assets)
    _echo_section("Liabilities", sheet.liabilities, "Total Liabilities", totals.liabilities)
    _echo_section("Equity", sheet.equity, "Total Equity", totals.equity)
    click.echo("-" * WIDTH)
    click.echo(
        f"  {'Total Liabilities and Equity':<50} {format_amount(totals.liabilities + totals.equity):>18}"
    )


def _echo_cash_flow(statement) -> None:
    totals = statement.totals
    click.echo("\nCASH FLOW STATEMENT")
    click.echo("=" * WIDTH)
    _echo_section("Operating Activities", statement.operating, "Net Cash from Operating", totals.operating)
    _echo_section("Investing Activities", statement.investing, "Net Cash from Investing", totals.investing)
    _echo_section("Financing Activities", statement.financing, "Net Cash from Financing", totals.financing)
    click.echo("-" * WIDTH)
    click.echo(f"  {'Net Change in Cash':<50} {format_amount(totals.net_change):>18}")


@click.group()
def report_group():
    """Financial statements and summaries."""
    pass


@report_group.command("show")
@click.option("--period", type=PERIODS, default=PeriodKey.CURRENT_MONTH.value, show_default=True)
@click.option("--type", "report_type", type=REPORT_TYPES, help="Show only one statement")
@click.pass_context
def show_report(ctx, period: str, report_type: str | None) -> None:
    """Show the income statement, balance sheet and cash-flow statement.

    Rows marked with * are manual adjustments.

    Examples:
        ledgerkit report show --period last-month
        ledgerkit report show --period year-to-date --type balance-sheet
    """
    service = ReportService(ctx.obj["db"])
    try:
        data = service.build_report_data(ctx.obj["user"], period)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nFinancial Report: {data.period.label}")
    click.echo(f"Generated: {data.generated_at:%Y-%m-%d %H:%M}")

    if report_type in (None, ReportType.INCOME_STATEMENT.value):
        _echo_income_statement(data.income_statement)
    if report_type in (None, ReportType.BALANCE_SHEET.value):
        _echo_balance_sheet(data.balance_sheet)
    if report_type in (None, ReportType.CASH_FLOW.value):
        _echo_cash_flow(data.cash_flow)

    check = data.net_income_check
    if not check.is_consistent:
        click.echo(
            f"\nWarning: net income from transactions ({format_amount(check.transaction_net_income)}) "
            f"differs from the journal ({format_amount(check.ledger_net_income)})"
        )


@report_group.command("dashboard")
@click.option("--period", type=PERIODS, default=PeriodKey.CURRENT_MONTH.value, show_default=True)
@click.pass_context
def show_dashboard(ctx, period: str) -> None:
    """Show headline metrics, the monthly trend and notifications."""
    service = ReportService(ctx.obj["db"])
    try:
        snapshot = service.build_dashboard_snapshot(ctx.obj["user"], period)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    metrics = snapshot.metrics
    click.echo(f"\nDashboard: {snapshot.period.label}")
    click.echo("=" * WIDTH)
    click.echo(f"  {'Income':<30} {format_amount(metrics.income_this_period):>18}")
    click.echo(f"  {'Expenses':<30} {format_amount(metrics.expenses_this_period):>18}")
    click.echo(f"  {'Cash Balance':<30} {format_amount(metrics.cash_balance):>18}")

    if snapshot.monthly_trend:
        click.echo("\nMonthly Trend")
        click.echo(f"  {'Month':<10} {'Income':>18} {'Expenses':>18}")
        for point in snapshot.monthly_trend:
            click.echo(f"  {point.label:<10} {format_amount(point.income):>18} {format_amount(point.expenses):>18}")

    if snapshot.notifications:
        click.echo("\nNotifications")
        for notification in snapshot.notifications:
            click.echo(f"  - {notification}")


@report_group.command("overview")
@click.pass_context
def show_overview(ctx) -> None:
    """Show cash, receivables, payables and recent transactions."""
    service = ReportService(ctx.obj["db"])
    overview = service.build_finance_overview(ctx.obj["user"])
    metrics = overview.metrics

    click.echo("\nFinance Overview")
    click.echo("=" * WIDTH)
    click.echo(f"  {'Cash Balance':<30} {format_amount(metrics.cash_balance):>18}")
    click.echo(f"  {'Accounts Receivable':<30} {format_amount(metrics.accounts_receivable):>18}")
    click.echo(f"  {'Accounts Payable':<30} {format_amount(metrics.accounts_payable):>18}")
    click.echo(f"  {'Net Income (MTD)':<30} {format_amount(metrics.net_income_mtd):>18}")

    if overview.recent_transactions:
        click.echo("\nRecent Transactions")
        for txn in overview.recent_transactions:
            click.echo(
                f"  {txn.id:<6} {str(txn.date.date()):<12} {txn.display_type[:24]:<24} "
                f"{format_amount(txn.amount):>18} {txn.status.value}"
            )

    for warning in overview.data_quality_warnings:
        click.echo(f"\nWarning: {warning}")


@report_group.command("trial-balance")
@click.option("--as-of", "as_of", help="Only include entries before this date")
@click.option("--period", type=PERIODS, help="Only include entries before the end of this period")
@click.pass_context
def show_trial_balance(ctx, as_of: str | None, period: str | None) -> None:
    """Show debit and credit totals per journal account."""
    end = None
    if as_of:
        try:
            end = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    elif period:
        end = get_period_range(period).end

    rows = JournalService(ctx.obj["db"]).trial_balance(ctx.obj["user"], end=end)
    if not rows:
        click.echo("No journal entries found.")
        return

    click.echo("\nTRIAL BALANCE")
    click.echo("-" * 84)
    click.echo(f"{'Code':<6} {'Account':<32} {'Type':<10} {'Debit':>16} {'Credit':>16}")
    click.echo("-" * 84)
    for row in rows:
        click.echo(
            f"{row.account_code:<6} {row.account_name[:32]:<32} {row.account_type.value:<10} "
            f"{format_amount(row.debit):>16} {format_amount(row.credit):>16}"
        )
    click.echo("-" * 84)
    total_debit = sum(row.debit for row in rows)
    total_credit = sum(row.credit for row in rows)
    click.echo(f"{'TOTAL':<50} {format_amount(total_debit):>16} {format_amount(total_credit):>16}")


def register_commands(cli: click.Group) -> None:
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
