"""Static chart of accounts.

Codes are grouped by range: 1000-1999 assets, 2000-2999 liabilities,
3000-3999 equity, 4000-4999 revenue, 5000-5999 expenses.
"""

from typing import Optional

from ledgerkit.domain.entities import AccountDefinition, AccountType, CashFlowCategory
from ledgerkit.domain.errors import ConfigurationError, unknown_account

CASH = "1000"
ACCOUNTS_RECEIVABLE = "1100"
INVENTORY = "1200"
FIXED_ASSETS = "1500"
ACCUMULATED_DEPRECIATION = "1600"
ACCOUNTS_PAYABLE = "2100"
BANK_LOANS = "2200"
OWNERS_EQUITY = "3100"
RETAINED_EARNINGS = "3200"
SALES_REVENUE = "4000"
OTHER_REVENUE = "4100"
COST_OF_GOODS_SOLD = "5000"
OPERATING_EXPENSES = "5100"
DEPRECIATION_EXPENSE = "5200"
TAX_EXPENSE = "5300"


def _account(code: str, name: str, account_type: AccountType, **kwargs) -> tuple[str, AccountDefinition]:
    return code, AccountDefinition(code=code, name=name, account_type=account_type, **kwargs)


CHART_OF_ACCOUNTS: dict[str, AccountDefinition] = dict(
    [
        _account(
            CASH,
            "Cash & Cash Equivalents",
            AccountType.ASSET,
            cash_flow_category=CashFlowCategory.OPERATING,
            is_cash_account=True,
        ),
        _account(ACCOUNTS_RECEIVABLE, "Accounts Receivable", AccountType.ASSET),
        _account(INVENTORY, "Inventory", AccountType.ASSET),
        _account(
            FIXED_ASSETS,
            "Fixed Assets",
            AccountType.ASSET,
            cash_flow_category=CashFlowCategory.INVESTING,
        ),
        # Contra-asset, carries a credit balance
        _account(ACCUMULATED_DEPRECIATION, "Accumulated Depreciation", AccountType.ASSET),
        _account(ACCOUNTS_PAYABLE, "Accounts Payable", AccountType.LIABILITY),
        _account(
            BANK_LOANS,
            "Bank Loans",
            AccountType.LIABILITY,
            cash_flow_category=CashFlowCategory.FINANCING,
        ),
        _account(
            OWNERS_EQUITY,
            "Owner's Equity",
            AccountType.EQUITY,
            cash_flow_category=CashFlowCategory.FINANCING,
        ),
        _account(
            RETAINED_EARNINGS,
            "Retained Earnings",
            AccountType.EQUITY,
            is_retained_earnings=True,
        ),
        _account(SALES_REVENUE, "Sales Revenue", AccountType.REVENUE),
        _account(OTHER_REVENUE, "Other Revenue", AccountType.REVENUE),
        _account(COST_OF_GOODS_SOLD, "Cost of Goods Sold", AccountType.EXPENSE),
        _account(OPERATING_EXPENSES, "Operating Expenses", AccountType.EXPENSE),
        _account(
            DEPRECIATION_EXPENSE,
            "Depreciation Expense",
            AccountType.EXPENSE,
            cash_flow_category=CashFlowCategory.NON_CASH,
        ),
        _account(TAX_EXPENSE, "Tax Expense", AccountType.EXPENSE),
    ]
)


def get_account_definition(code: str) -> Optional[AccountDefinition]:
    """Look up an account by code, or None if the code is unknown."""
    return CHART_OF_ACCOUNTS.get(code)


def require_account(code: str) -> AccountDefinition:
    """Look up an account by code.

    Raises:
        ConfigurationError: If the code is not in the chart of accounts
    """
    account = CHART_OF_ACCOUNTS.get(code)
    if account is None:
        raise ConfigurationError(unknown_account(code))
    return account


def is_cash_account(code: str) -> bool:
    account = CHART_OF_ACCOUNTS.get(code)
    return bool(account and account.is_cash_account)


def list_accounts(account_type: Optional[AccountType] = None) -> list[AccountDefinition]:
    """List accounts ordered by code, optionally restricted to one type."""
    accounts = sorted(CHART_OF_ACCOUNTS.values(), key=lambda acc: acc.code)
    if account_type is None:
        return accounts
    return [acc for acc in accounts if acc.account_type == account_type]


def account_codes_by_type(account_type: AccountType) -> set[str]:
    return {acc.code for acc in CHART_OF_ACCOUNTS.values() if acc.account_type == account_type}
