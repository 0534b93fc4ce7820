"""Reference data commands: chart of accounts, presets and templates."""

import click
from ledgerkit.domain.chart_of_accounts import list_accounts
from ledgerkit.domain.entities import AccountType
from ledgerkit.domain.presets import TRANSACTION_PRESETS
from ledgerkit.domain.templates import TemplateService

ACCOUNT_TYPES = click.Choice([item.value for item in AccountType], case_sensitive=False)


@click.group()
def catalog_group():
    """Show the chart of accounts, presets and templates."""
    pass


@catalog_group.command("accounts")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, help="Only show this account type")
def show_accounts(account_type: str | None) -> None:
    """Show the chart of accounts."""
    accounts = list_accounts(AccountType(account_type) if account_type else None)
    click.echo(f"{'Code':<6} {'Name':<32} {'Type':<10} {'Cash flow':<10}")
    click.echo("-" * 62)
    for account in accounts:
        cash_flow = account.cash_flow_category.value if account.cash_flow_category else ""
        click.echo(f"{account.code:<6} {account.name:<32} {account.account_type.value:<10} {cash_flow:<10}")


@catalog_group.command("presets")
def show_presets() -> None:
    """Show transaction presets and their journal templates."""
    for preset in TRANSACTION_PRESETS.values():
        template = preset.journal_template
        click.echo(f"{preset.key} ({preset.label})")
        click.echo(f"  Type: {preset.finance_type.value}, category: {preset.category}")
        click.echo(f"  Debit {template.debit_account} / Credit {template.credit_account}")
        if template.description:
            click.echo(f"  {template.description}")


@catalog_group.command("templates")
@click.pass_context
def show_templates(ctx) -> None:
    """Show transaction templates, the user's own categories first."""
    templates = TemplateService(ctx.obj["db"]).list_templates(ctx.obj["user"])
    click.echo(f"{'Name':<28} {'Label':<28} {'Type':<10} {'Cash flow':<10} {'Source':<8}")
    click.echo("-" * 88)
    for template in templates:
        click.echo(
            f"{template.name[:28]:<28} {template.label[:28]:<28} {template.finance_type.value:<10} "
            f"{template.cash_flow_category.value:<10} {template.source:<8}"
        )


def register_commands(cli: click.Group) -> None:
    """Register catalog commands with main CLI."""
    cli.add_command(catalog_group, name="catalog")
