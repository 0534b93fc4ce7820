"""Tests for account selection and journal draft derivation."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.account_selection import (
    derive_journal_draft,
    is_cash_category,
    matches_any,
    matches_word,
    select_accounts,
)
from ledgerkit.domain.entities import CashFlowCategory, FinanceType, Transaction, TransactionStatus
from ledgerkit.domain.errors import ValidationError


def make_transaction(
    finance_type=FinanceType.EXPENSE,
    category="General",
    status=TransactionStatus.POSTED,
    cash_flow_type=CashFlowCategory.OPERATING,
    amount="100000",
    description="",
    preset_key=None,
    transaction_id=1,
):
    return Transaction(
        id=transaction_id,
        user_id="user-1",
        finance_type=finance_type,
        amount=Decimal(amount),
        date=datetime(2026, 5, 2),
        description=description,
        category=category,
        status=status,
        cash_flow_type=cash_flow_type,
        preset_key=preset_key,
    )


def test_matches_any_is_case_insensitive_substring():
    assert matches_any("Beban PAJAK Tahunan", ("pajak",))
    assert not matches_any("Sewa", ("pajak",))
    assert not matches_any(None, ("pajak",))


def test_matches_word_requires_whole_words():
    assert matches_word("Saldo BANK BCA", ("bank",))
    assert not matches_word("Kasir", ("kas",))
    assert not matches_word(None, ("kas",))


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Kas Kecil", True),
        ("Cash at Bank", True),
        ("Kasir Counter", False),
        ("Cash Register Equipment", False),
        ("Peralatan Kas", False),
        (None, False),
    ],
)
def test_is_cash_category(category, expected):
    assert is_cash_category(category) is expected


@pytest.mark.parametrize(
    "category,status,cash_flow,expected",
    [
        ("Sales - Produk A", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.CASH, coa.SALES_REVENUE)),
        ("Sales - Produk A", TransactionStatus.PENDING, CashFlowCategory.OPERATING, (coa.ACCOUNTS_RECEIVABLE, coa.SALES_REVENUE)),
        ("Pendapatan Jasa", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.CASH, coa.OTHER_REVENUE)),
        ("Pendapatan Lain-lain", TransactionStatus.POSTED, CashFlowCategory.NON_CASH, (coa.ACCOUNTS_RECEIVABLE, coa.OTHER_REVENUE)),
    ],
)
def test_income_accounts(category, status, cash_flow, expected):
    txn = make_transaction(FinanceType.INCOME, category, status, cash_flow)
    assert select_accounts(txn) == expected


@pytest.mark.parametrize(
    "category,status,cash_flow,expected",
    [
        ("Cost of Goods Sold", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.COST_OF_GOODS_SOLD, coa.CASH)),
        ("HPP Produk", TransactionStatus.PENDING, CashFlowCategory.OPERATING, (coa.COST_OF_GOODS_SOLD, coa.ACCOUNTS_PAYABLE)),
        ("Pajak Penghasilan", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.TAX_EXPENSE, coa.CASH)),
        ("Penyusutan Mesin", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.DEPRECIATION_EXPENSE, coa.CASH)),
        ("Amortisation", TransactionStatus.POSTED, CashFlowCategory.NON_CASH, (coa.DEPRECIATION_EXPENSE, coa.ACCUMULATED_DEPRECIATION)),
        ("Rent Expense", TransactionStatus.POSTED, CashFlowCategory.OPERATING, (coa.OPERATING_EXPENSES, coa.CASH)),
        ("Rent Expense", TransactionStatus.PENDING, CashFlowCategory.OPERATING, (coa.OPERATING_EXPENSES, coa.ACCOUNTS_PAYABLE)),
    ],
)
def test_expense_accounts(category, status, cash_flow, expected):
    txn = make_transaction(FinanceType.EXPENSE, category, status, cash_flow)
    assert select_accounts(txn) == expected


@pytest.mark.parametrize(
    "category,cash_flow,expected",
    [
        ("Persediaan Barang", CashFlowCategory.INVESTING, coa.INVENTORY),
        ("Penyusutan Kendaraan", CashFlowCategory.INVESTING, coa.ACCUMULATED_DEPRECIATION),
        ("Kas Awal", CashFlowCategory.NON_CASH, coa.CASH),
        ("Petty Cash", CashFlowCategory.NON_CASH, coa.CASH),
        ("Cash Register Equipment", CashFlowCategory.INVESTING, coa.FIXED_ASSETS),
        ("Kasir Counter", CashFlowCategory.INVESTING, coa.FIXED_ASSETS),
        ("Bahan Baku", CashFlowCategory.OPERATING, coa.INVENTORY),
        ("Mesin Produksi", CashFlowCategory.INVESTING, coa.FIXED_ASSETS),
    ],
)
def test_asset_accounts_balance_against_owners_equity(category, cash_flow, expected):
    txn = make_transaction(FinanceType.ASSET, category, cash_flow_type=cash_flow)
    assert select_accounts(txn) == (expected, coa.OWNERS_EQUITY)


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Utang Usaha", coa.ACCOUNTS_PAYABLE),
        ("Supplier Credit", coa.ACCOUNTS_PAYABLE),
        ("Pinjaman Bank", coa.BANK_LOANS),
    ],
)
def test_liability_accounts(category, expected):
    txn = make_transaction(FinanceType.LIABILITY, category, cash_flow_type=CashFlowCategory.FINANCING)
    assert select_accounts(txn) == (coa.OWNERS_EQUITY, expected)


def test_equity_accounts():
    contribution = make_transaction(FinanceType.EQUITY, "Setoran Modal", cash_flow_type=CashFlowCategory.FINANCING)
    assert select_accounts(contribution) == (coa.CASH, coa.OWNERS_EQUITY)

    in_kind = make_transaction(FinanceType.EQUITY, "Laba Ditahan", cash_flow_type=CashFlowCategory.NON_CASH)
    assert select_accounts(in_kind) == (coa.FIXED_ASSETS, coa.RETAINED_EARNINGS)


def test_preset_bypasses_category_heuristics():
    # "Pajak" would select Tax Expense on the heuristic path
    txn = make_transaction(FinanceType.EXPENSE, "Pajak", preset_key="purchase")
    assert select_accounts(txn) == (coa.INVENTORY, coa.CASH)


def test_derive_journal_draft_heuristic_path():
    txn = make_transaction(
        FinanceType.INCOME, "Sales - Produk A", amount="45000000", description="Invoice 12", transaction_id=42
    )
    draft = derive_journal_draft(txn)

    assert draft.date == txn.date
    assert draft.memo == "Invoice 12"
    assert draft.reference_id == "42"
    debit, credit = draft.lines
    assert (debit.account_code, debit.debit, debit.credit) == (coa.CASH, Decimal("45000000"), None)
    assert (credit.account_code, credit.credit, credit.debit) == (coa.SALES_REVENUE, Decimal("45000000"), None)
    assert debit.description == "Sales - Produk A"


def test_derive_journal_draft_memo_falls_back_to_category():
    draft = derive_journal_draft(make_transaction(category="Rent Expense"))
    assert draft.memo == "Rent Expense"


def test_derive_journal_draft_preset_path():
    txn = make_transaction(FinanceType.EXPENSE, "Cost of Goods Sold", preset_key="cogs")
    draft = derive_journal_draft(txn)

    assert [line.account_code for line in draft.lines] == [coa.COST_OF_GOODS_SOLD, coa.INVENTORY]
    assert draft.memo == "Pembelian Bahan Baku"
    assert draft.lines[0].description == "Pengakuan HPP dari persediaan"


def test_derive_journal_draft_preset_memo_uses_transaction_description():
    txn = make_transaction(FinanceType.INCOME, "Cash Receipt", description="Toko Makmur", preset_key="cash")
    assert derive_journal_draft(txn).memo == "Toko Makmur"


def test_derive_journal_draft_rejects_zero_amount():
    with pytest.raises(ValidationError):
        derive_journal_draft(make_transaction(amount="0"))


def test_provisional_transaction_has_no_reference():
    draft = derive_journal_draft(make_transaction(transaction_id=0))
    assert draft.reference_id is None
