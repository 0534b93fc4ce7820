"""Transaction preset catalog.

Presets bind a transaction shape to a fixed journal template so that the
journal derivation does not depend on free-text category matching.
"""

from typing import Optional

from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.entities import (
    CashFlowCategory,
    FinanceType,
    JournalTemplate,
    TransactionPreset,
)
from ledgerkit.domain.errors import ConfigurationError, unknown_account

TRANSACTION_PRESETS: dict[str, TransactionPreset] = {
    "cash": TransactionPreset(
        key="cash",
        label="Cash",
        finance_type=FinanceType.INCOME,
        category="Cash Receipt",
        cash_flow_category=CashFlowCategory.OPERATING,
        default_description="Penerimaan Kas",
        journal_template=JournalTemplate(
            debit_account=coa.CASH,
            credit_account=coa.SALES_REVENUE,
            cash_impact=CashFlowCategory.OPERATING,
            description="Penerimaan kas dari penjualan",
        ),
    ),
    "cogs": TransactionPreset(
        key="cogs",
        label="COGS",
        finance_type=FinanceType.EXPENSE,
        category="Cost of Goods Sold",
        cash_flow_category=CashFlowCategory.OPERATING,
        default_description="Pembelian Bahan Baku",
        journal_template=JournalTemplate(
            debit_account=coa.COST_OF_GOODS_SOLD,
            credit_account=coa.INVENTORY,
            cash_impact=CashFlowCategory.NON_CASH,
            description="Pengakuan HPP dari persediaan",
        ),
    ),
    "purchase": TransactionPreset(
        key="purchase",
        label="Purchase",
        finance_type=FinanceType.EXPENSE,
        category="Purchase",
        cash_flow_category=CashFlowCategory.OPERATING,
        default_description="Pembelian Persediaan",
        journal_template=JournalTemplate(
            debit_account=coa.INVENTORY,
            credit_account=coa.CASH,
            cash_impact=CashFlowCategory.OPERATING,
            description="Pembelian persediaan tunai",
        ),
    ),
}

# (name, label, finance type, cash-flow category, default description)
ADDITIONAL_TEMPLATES: tuple[tuple[str, str, FinanceType, CashFlowCategory, str], ...] = (
    ("Sales - Produk A", "Penjualan Produk A", FinanceType.INCOME, CashFlowCategory.OPERATING, "Penjualan Produk A"),
    (
        "Consulting Revenue",
        "Penjualan Jasa Konsultasi",
        FinanceType.INCOME,
        CashFlowCategory.OPERATING,
        "Penjualan Jasa Konsultasi",
    ),
    ("Cash Receipt", "Penerimaan Kas Lainnya", FinanceType.INCOME, CashFlowCategory.OPERATING, "Penerimaan Kas"),
    (
        "Cost of Goods Sold",
        "Pembelian Bahan Baku",
        FinanceType.EXPENSE,
        CashFlowCategory.OPERATING,
        "Pembelian Bahan Baku",
    ),
    ("Payroll Expense", "Gaji Karyawan", FinanceType.EXPENSE, CashFlowCategory.OPERATING, "Pembayaran Gaji"),
    ("Rent Expense", "Sewa Kantor", FinanceType.EXPENSE, CashFlowCategory.OPERATING, "Pembayaran Sewa Kantor"),
    ("Utilities Expense", "Tagihan Utilitas", FinanceType.EXPENSE, CashFlowCategory.OPERATING, "Pembayaran Utilitas"),
    (
        "Equipment Purchase",
        "Pembelian Peralatan",
        FinanceType.EXPENSE,
        CashFlowCategory.INVESTING,
        "Pembelian Peralatan",
    ),
    (
        "Bank Loan Proceeds",
        "Pencairan Pinjaman Bank",
        FinanceType.INCOME,
        CashFlowCategory.FINANCING,
        "Pencairan Pinjaman Bank",
    ),
    (
        "Bank Loan Repayment",
        "Angsuran Pinjaman Bank",
        FinanceType.EXPENSE,
        CashFlowCategory.FINANCING,
        "Angsuran Pinjaman Bank",
    ),
    ("Owner Investment", "Setoran Modal Pemilik", FinanceType.INCOME, CashFlowCategory.FINANCING, "Setoran Modal Pemilik"),
)


def is_transaction_preset_key(value: Optional[str]) -> bool:
    return isinstance(value, str) and value in TRANSACTION_PRESETS


def get_preset(key: Optional[str]) -> Optional[TransactionPreset]:
    """Return the preset for a key, or None for a missing/unknown key."""
    if not is_transaction_preset_key(key):
        return None
    return TRANSACTION_PRESETS[key]


def find_preset_key_by_label(label: Optional[str]) -> Optional[str]:
    """Find a preset key by its label, case-insensitively."""
    if not label:
        return None
    wanted = label.strip().lower()
    for key, preset in TRANSACTION_PRESETS.items():
        if preset.label.lower() == wanted:
            return key
    return None


def validate_catalog() -> None:
    """Check that every preset references accounts in the chart of accounts.

    Raises:
        ConfigurationError: If a preset references an unknown account
    """
    for preset in TRANSACTION_PRESETS.values():
        template = preset.journal_template
        for code in (template.debit_account, template.credit_account):
            if coa.get_account_definition(code) is None:
                raise ConfigurationError(f"Preset '{preset.key}': {unknown_account(code)}")


validate_catalog()
