"""Manual report adjustment commands."""

import click
from ledgerkit.cli.error_handling import format_amount, handle_domain_error
from ledgerkit.domain.adjustments import REPORT_ADJUSTMENT_SECTIONS, AdjustmentService
from ledgerkit.domain.entities import ReportType
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

REPORT_TYPES = click.Choice([item.value for item in ReportType], case_sensitive=False)


@click.group()
def adjustment_group():
    """Manage manual report adjustments."""
    pass


@adjustment_group.command("add")
@click.option("--type", "report_type", type=REPORT_TYPES, required=True, help="Report the adjustment belongs to")
@click.option("--section", required=True, help="Report section (e.g., revenues, assets, operating)")
@click.option("--label", required=True, help="Row label shown on the report")
@click.option("--amount", required=True, help="Signed amount (e.g., 2500000 or -150000)")
@click.option("--date", "effective_date", default="today", help="Effective date (YYYY-MM-DD or 'today')")
@click.option("--description", help="Optional description")
@click.pass_context
def add_adjustment(
    ctx,
    report_type: str,
    section: str,
    label: str,
    amount: str,
    effective_date: str,
    description: str | None,
) -> None:
    """Add a manual adjustment to a report.

    Valid sections:

    \b
        income-statement: revenues, expenses
        balance-sheet: assets, liabilities, equity
        cash-flow: operating, investing, financing

    Examples:
        ledgerkit adjustment add --type balance-sheet --section assets --label "Equipment" --amount 12000000
    """
    service = AdjustmentService(ctx.obj["db"])

    try:
        adj_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        adj_date = parse_date(effective_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        adjustment = service.create_adjustment(
            user_id=ctx.obj["user"],
            report_type=report_type,
            section=section,
            label=label,
            amount=adj_amount,
            effective_date=adj_date,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    section_label = dict(REPORT_ADJUSTMENT_SECTIONS[adjustment.report_type])[adjustment.section]
    click.echo(
        f"Created adjustment {adjustment.id}: {adjustment.label} "
        f"({adjustment.report_type.value} / {section_label}) {format_amount(adjustment.amount)}"
    )


@adjustment_group.command("list")
@click.option("--type", "report_type", type=REPORT_TYPES, help="Only show this report's adjustments")
@click.pass_context
def list_adjustments(ctx, report_type: str | None) -> None:
    """List manual adjustments."""
    service = AdjustmentService(ctx.obj["db"])
    adjustments = service.list_adjustments(ctx.obj["user"], report_type=report_type)

    if not adjustments:
        click.echo("No adjustments found.")
        return

    click.echo(f"{'ID':<6} {'Date':<12} {'Report':<18} {'Section':<12} {'Label':<30} {'Amount':>18}")
    click.echo("-" * 100)
    for adj in adjustments:
        click.echo(
            f"{adj.id:<6} {str(adj.effective_date.date()):<12} {adj.report_type.value:<18} "
            f"{adj.section:<12} {adj.label[:30]:<30} {format_amount(adj.amount):>18}"
        )


@adjustment_group.command("delete")
@click.argument("adjustment_id", type=int)
@click.pass_context
def delete_adjustment(ctx, adjustment_id: int) -> None:
    """Delete a manual adjustment."""
    service = AdjustmentService(ctx.obj["db"])
    try:
        service.delete_adjustment(adjustment_id, ctx.obj["user"])
        click.echo(f"Deleted adjustment {adjustment_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register adjustment commands with main CLI."""
    cli.add_command(adjustment_group, name="adjustment")
