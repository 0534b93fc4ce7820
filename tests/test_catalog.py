"""Tests for the chart of accounts and the preset catalog."""

import pytest

from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.entities import AccountType, CashFlowCategory, FinanceType
from ledgerkit.domain.errors import ConfigurationError
from ledgerkit.domain.presets import (
    ADDITIONAL_TEMPLATES,
    TRANSACTION_PRESETS,
    find_preset_key_by_label,
    get_preset,
    is_transaction_preset_key,
    validate_catalog,
)


class TestChartOfAccounts:
    def test_account_types_follow_code_ranges(self):
        expected = {
            "1": AccountType.ASSET,
            "2": AccountType.LIABILITY,
            "3": AccountType.EQUITY,
            "4": AccountType.REVENUE,
            "5": AccountType.EXPENSE,
        }
        for code, account in coa.CHART_OF_ACCOUNTS.items():
            assert account.code == code
            assert account.account_type == expected[code[0]]

    def test_only_cash_is_a_cash_account(self):
        assert coa.is_cash_account(coa.CASH)
        assert not coa.is_cash_account(coa.ACCOUNTS_RECEIVABLE)
        assert not coa.is_cash_account("9999")

    def test_retained_earnings_flag(self):
        flagged = [acc.code for acc in coa.CHART_OF_ACCOUNTS.values() if acc.is_retained_earnings]
        assert flagged == [coa.RETAINED_EARNINGS]

    def test_get_account_definition_unknown_code(self):
        assert coa.get_account_definition("9999") is None

    def test_require_account_unknown_code_raises(self):
        with pytest.raises(ConfigurationError, match="9999"):
            coa.require_account("9999")

    def test_list_accounts_sorted_and_filtered(self):
        codes = [acc.code for acc in coa.list_accounts()]
        assert codes == sorted(codes)

        revenue = coa.list_accounts(AccountType.REVENUE)
        assert [acc.code for acc in revenue] == [coa.SALES_REVENUE, coa.OTHER_REVENUE]

    def test_account_codes_by_type(self):
        assert coa.account_codes_by_type(AccountType.LIABILITY) == {coa.ACCOUNTS_PAYABLE, coa.BANK_LOANS}


class TestPresets:
    def test_catalog_is_consistent(self):
        validate_catalog()

    def test_preset_keys(self):
        assert set(TRANSACTION_PRESETS) == {"cash", "cogs", "purchase"}

    def test_cash_preset_template(self):
        preset = get_preset("cash")
        assert preset.finance_type == FinanceType.INCOME
        assert preset.journal_template.debit_account == coa.CASH
        assert preset.journal_template.credit_account == coa.SALES_REVENUE

    def test_cogs_preset_is_non_cash(self):
        preset = get_preset("cogs")
        assert preset.journal_template.debit_account == coa.COST_OF_GOODS_SOLD
        assert preset.journal_template.credit_account == coa.INVENTORY
        assert preset.journal_template.cash_impact == CashFlowCategory.NON_CASH

    def test_unknown_and_missing_keys(self):
        assert get_preset(None) is None
        assert get_preset("payroll") is None
        assert not is_transaction_preset_key("payroll")
        assert not is_transaction_preset_key(None)

    def test_find_preset_key_by_label(self):
        assert find_preset_key_by_label("COGS") == "cogs"
        assert find_preset_key_by_label(" purchase ") == "purchase"
        assert find_preset_key_by_label("Payroll") is None
        assert find_preset_key_by_label(None) is None

    def test_additional_templates_have_distinct_names(self):
        names = [name for name, *_ in ADDITIONAL_TEMPLATES]
        assert len(names) == len(set(names))
