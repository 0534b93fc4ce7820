"""Account selection for deriving journal drafts from transactions.

Transactions created from a preset use the preset's fixed account pair.
Everything else is classified from the finance type, status, cash-flow tag
and free-text category, which is matched by substring against Indonesian and
English keywords. Cash keywords must match a whole word, and a category that
also names equipment is not cash.
"""

import re
from typing import Optional

from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.entities import (
    CashFlowCategory,
    FinanceType,
    JournalDraft,
    JournalDraftLine,
    Transaction,
    TransactionStatus,
)
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.presets import get_preset

OTHER_REVENUE_KEYWORDS = ("lain", "jasa")
COGS_KEYWORDS = ("hpp", "cogs", "cost of goods")
TAX_KEYWORDS = ("pajak", "tax")
DEPRECIATION_KEYWORDS = ("penyusutan", "depreciation")
INVENTORY_KEYWORDS = ("persediaan", "inventory")
CASH_KEYWORDS = ("kas", "cash", "bank")
EQUIPMENT_KEYWORDS = ("equipment", "peralatan", "register", "mesin", "machine", "kendaraan", "vehicle", "furniture")
TRADE_PAYABLE_KEYWORDS = ("usaha", "supplier", "payable")
RETAINED_EARNINGS_KEYWORDS = ("laba ditahan", "retained")


def matches_any(text: Optional[str], keywords: tuple[str, ...]) -> bool:
    """Case-insensitive substring match of any keyword in text."""
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def matches_word(text: Optional[str], keywords: tuple[str, ...]) -> bool:
    """Case-insensitive whole-word match of any keyword in text."""
    if not text:
        return False
    pattern = r"\b(?:" + "|".join(re.escape(keyword) for keyword in keywords) + r")\b"
    return re.search(pattern, text, re.IGNORECASE) is not None


def is_cash_category(text: Optional[str]) -> bool:
    """Category naming cash itself: a whole cash word and no equipment word."""
    return matches_word(text, CASH_KEYWORDS) and not matches_any(text, EQUIPMENT_KEYWORDS)


def _income_accounts(txn: Transaction) -> tuple[str, str]:
    if txn.status == TransactionStatus.PENDING or txn.cash_flow_type == CashFlowCategory.NON_CASH:
        debit = coa.ACCOUNTS_RECEIVABLE
    else:
        debit = coa.CASH
    credit = coa.OTHER_REVENUE if matches_any(txn.category, OTHER_REVENUE_KEYWORDS) else coa.SALES_REVENUE
    return debit, credit


def _expense_accounts(txn: Transaction) -> tuple[str, str]:
    non_cash = txn.cash_flow_type == CashFlowCategory.NON_CASH

    if matches_any(txn.category, COGS_KEYWORDS):
        debit = coa.COST_OF_GOODS_SOLD
    elif matches_any(txn.category, TAX_KEYWORDS):
        debit = coa.TAX_EXPENSE
    elif matches_any(txn.category, DEPRECIATION_KEYWORDS) or non_cash:
        debit = coa.DEPRECIATION_EXPENSE
    else:
        debit = coa.OPERATING_EXPENSES

    if non_cash:
        credit = coa.ACCUMULATED_DEPRECIATION
    elif txn.status == TransactionStatus.PENDING:
        credit = coa.ACCOUNTS_PAYABLE
    else:
        credit = coa.CASH
    return debit, credit


def _asset_accounts(txn: Transaction) -> tuple[str, str]:
    # The balancing leg against owner's equity is a structural placeholder;
    # the balance sheet classifies asset transactions directly.
    if matches_any(txn.category, INVENTORY_KEYWORDS):
        asset = coa.INVENTORY
    elif matches_any(txn.category, DEPRECIATION_KEYWORDS):
        asset = coa.ACCUMULATED_DEPRECIATION
    elif is_cash_category(txn.category):
        asset = coa.CASH
    elif txn.cash_flow_type == CashFlowCategory.OPERATING:
        asset = coa.INVENTORY
    else:
        asset = coa.FIXED_ASSETS
    return asset, coa.OWNERS_EQUITY


def _liability_accounts(txn: Transaction) -> tuple[str, str]:
    if matches_any(txn.category, TRADE_PAYABLE_KEYWORDS):
        liability = coa.ACCOUNTS_PAYABLE
    else:
        liability = coa.BANK_LOANS
    return coa.OWNERS_EQUITY, liability


def _equity_accounts(txn: Transaction) -> tuple[str, str]:
    debit = coa.FIXED_ASSETS if txn.cash_flow_type == CashFlowCategory.NON_CASH else coa.CASH
    if matches_any(txn.category, RETAINED_EARNINGS_KEYWORDS):
        credit = coa.RETAINED_EARNINGS
    else:
        credit = coa.OWNERS_EQUITY
    return debit, credit


_HEURISTICS = {
    FinanceType.INCOME: _income_accounts,
    FinanceType.EXPENSE: _expense_accounts,
    FinanceType.ASSET: _asset_accounts,
    FinanceType.LIABILITY: _liability_accounts,
    FinanceType.EQUITY: _equity_accounts,
}


def select_accounts(transaction: Transaction) -> tuple[str, str]:
    """Choose the (debit, credit) account codes for a transaction."""
    preset = get_preset(transaction.preset_key)
    if preset is not None:
        template = preset.journal_template
        return template.debit_account, template.credit_account
    return _HEURISTICS[transaction.finance_type](transaction)


def derive_journal_draft(transaction: Transaction) -> JournalDraft:
    """Derive a balanced two-line journal draft from a transaction.

    Raises:
        ConfigurationError: If a selected account is missing from the chart
            of accounts
        ValidationError: If the transaction amount is zero
    """
    debit_code, credit_code = select_accounts(transaction)
    for code in (debit_code, credit_code):
        coa.require_account(code)

    amount = abs(transaction.amount)
    if amount <= 0:
        raise ValidationError(f"Transaction {transaction.id} has no amount to journal")

    preset = get_preset(transaction.preset_key)
    if preset is not None:
        line_description = preset.journal_template.description
        memo = transaction.description or preset.default_description
    else:
        line_description = transaction.category or None
        memo = transaction.description or transaction.category or None

    return JournalDraft(
        date=transaction.date,
        memo=memo,
        reference_id=str(transaction.id) if transaction.id else None,
        lines=(
            JournalDraftLine(account_code=debit_code, debit=amount, description=line_description),
            JournalDraftLine(account_code=credit_code, credit=amount, description=line_description),
        ),
    )
