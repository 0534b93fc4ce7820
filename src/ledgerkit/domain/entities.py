"""Domain model entities for ledgerkit.

These are pure data classes representing business concepts, independent of
database schema. Services exchange these objects; the database layer maps
its ORM rows onto them (or, for transactions, onto raw documents that the
domain decodes itself).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Chart-of-accounts account classification."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class CashFlowCategory(str, Enum):
    """Cash-flow statement bucket a transaction affects."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"
    NON_CASH = "non-cash"


class FinanceType(str, Enum):
    """Kind of user-entered finance transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"


class TransactionStatus(str, Enum):
    """Settlement status of a transaction."""

    POSTED = "posted"
    PENDING = "pending"


class ReportType(str, Enum):
    """Financial statement a manual adjustment belongs to."""

    INCOME_STATEMENT = "income-statement"
    BALANCE_SHEET = "balance-sheet"
    CASH_FLOW = "cash-flow"


class PeriodKey(str, Enum):
    """Named reporting period relative to the invocation instant."""

    CURRENT_MONTH = "current-month"
    LAST_MONTH = "last-month"
    CURRENT_QUARTER = "current-quarter"
    LAST_QUARTER = "last-quarter"
    YEAR_TO_DATE = "year-to-date"
    LAST_YEAR = "last-year"
    ALL_TIME = "all-time"


@dataclass(frozen=True)
class AccountDefinition:
    """Chart-of-accounts entry."""

    code: str
    name: str
    account_type: AccountType
    cash_flow_category: Optional[CashFlowCategory] = None
    is_cash_account: bool = False
    is_retained_earnings: bool = False


@dataclass(frozen=True)
class JournalTemplate:
    """Fixed debit/credit account pair bound to a preset."""

    debit_account: str
    credit_account: str
    cash_impact: CashFlowCategory
    description: Optional[str] = None


@dataclass(frozen=True)
class TransactionPreset:
    """Named transaction shortcut with a fixed journal template."""

    key: str
    label: str
    finance_type: FinanceType
    category: str
    cash_flow_category: CashFlowCategory
    default_description: Optional[str]
    journal_template: JournalTemplate


@dataclass(frozen=True)
class Transaction:
    """User-entered financial transaction.

    ``amount`` is always an unsigned magnitude; direction is derived from
    ``finance_type`` and ``cash_flow_type`` when the transaction is read.
    """

    id: int
    user_id: str
    finance_type: FinanceType
    amount: Decimal
    date: datetime
    description: str
    category: str
    status: TransactionStatus
    cash_flow_type: CashFlowCategory
    counterparty: Optional[str] = None
    preset_key: Optional[str] = None
    preset_label: Optional[str] = None
    journal_entry_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class JournalLine:
    """Validated journal line. Exactly one of debit/credit is non-zero."""

    account_code: str
    debit: Decimal
    credit: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalDraftLine:
    """Unvalidated journal line as produced by callers."""

    account_code: str
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalDraft:
    """Journal posting request prior to validation."""

    date: datetime
    lines: tuple[JournalDraftLine, ...]
    memo: Optional[str] = None
    reference_id: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Persisted double-entry posting."""

    id: int
    user_id: str
    date: datetime
    lines: tuple[JournalLine, ...]
    memo: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class TrialBalanceRow:
    """Aggregated debit/credit totals for one account."""

    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal

    @property
    def balance(self) -> Decimal:
        """Balance on the account's normal side."""
        if self.account_type in (AccountType.ASSET, AccountType.EXPENSE):
            return self.debit - self.credit
        return self.credit - self.debit


@dataclass(frozen=True)
class ReportAdjustment:
    """Manual report line entered by the user."""

    id: int
    user_id: str
    report_type: ReportType
    section: str
    label: str
    amount: Decimal
    effective_date: datetime
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReportRow:
    """Single line of a financial statement section."""

    label: str
    amount: Decimal
    description: Optional[str] = None
    is_manual: bool = False
    adjustment_id: Optional[int] = None


@dataclass(frozen=True)
class PeriodRange:
    """Closed-open reporting window ``[start, end)``."""

    key: PeriodKey
    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class IncomeStatementAdjustments:
    revenues: tuple[ReportRow, ...] = ()
    expenses: tuple[ReportRow, ...] = ()


@dataclass(frozen=True)
class BalanceSheetAdjustments:
    assets: tuple[ReportRow, ...] = ()
    liabilities: tuple[ReportRow, ...] = ()
    equity: tuple[ReportRow, ...] = ()


@dataclass(frozen=True)
class CashFlowAdjustments:
    operating: tuple[ReportRow, ...] = ()
    investing: tuple[ReportRow, ...] = ()
    financing: tuple[ReportRow, ...] = ()


@dataclass(frozen=True)
class AdjustmentCollection:
    """Manual adjustments applicable to one reporting period, by section."""

    income_statement: IncomeStatementAdjustments = field(default_factory=IncomeStatementAdjustments)
    balance_sheet: BalanceSheetAdjustments = field(default_factory=BalanceSheetAdjustments)
    cash_flow: CashFlowAdjustments = field(default_factory=CashFlowAdjustments)


@dataclass(frozen=True)
class IncomeStatementTotals:
    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    expenses: Decimal
    net_income: Decimal


@dataclass(frozen=True)
class IncomeStatement:
    revenues: tuple[ReportRow, ...]
    cogs: tuple[ReportRow, ...]
    expenses: tuple[ReportRow, ...]
    totals: IncomeStatementTotals


@dataclass(frozen=True)
class BalanceSheetTotals:
    assets: Decimal
    liabilities: Decimal
    equity: Decimal


@dataclass(frozen=True)
class BalanceSheet:
    assets: tuple[ReportRow, ...]
    liabilities: tuple[ReportRow, ...]
    equity: tuple[ReportRow, ...]
    totals: BalanceSheetTotals


@dataclass(frozen=True)
class CashFlowTotals:
    operating: Decimal
    investing: Decimal
    financing: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class CashFlowStatement:
    operating: tuple[ReportRow, ...]
    investing: tuple[ReportRow, ...]
    financing: tuple[ReportRow, ...]
    totals: CashFlowTotals


@dataclass(frozen=True)
class NetIncomeCheck:
    """Transaction-based versus journal-based net income for one period."""

    transaction_net_income: Decimal
    ledger_net_income: Decimal
    difference: Decimal
    is_consistent: bool


@dataclass(frozen=True)
class ReportData:
    """The three financial statements for one period."""

    period: PeriodRange
    generated_at: datetime
    income_statement: IncomeStatement
    balance_sheet: BalanceSheet
    cash_flow: CashFlowStatement
    net_income_check: NetIncomeCheck


@dataclass(frozen=True)
class TrendPoint:
    label: str
    income: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class DashboardMetrics:
    income_this_period: Decimal
    expenses_this_period: Decimal
    cash_balance: Decimal


@dataclass(frozen=True)
class DashboardSnapshot:
    period: PeriodRange
    metrics: DashboardMetrics
    monthly_trend: tuple[TrendPoint, ...]
    notifications: tuple[str, ...]


@dataclass(frozen=True)
class RecentTransaction:
    """Transaction summary line for the finance overview."""

    id: int
    date: datetime
    description: str
    finance_type: FinanceType
    amount: Decimal
    status: TransactionStatus
    category: str
    cash_flow_type: CashFlowCategory
    display_type: str
    preset_key: Optional[str] = None
    preset_label: Optional[str] = None


@dataclass(frozen=True)
class FinanceOverviewMetrics:
    cash_balance: Decimal
    accounts_receivable: Decimal
    accounts_payable: Decimal
    net_income_mtd: Decimal


@dataclass(frozen=True)
class FinanceOverview:
    metrics: FinanceOverviewMetrics
    recent_transactions: tuple[RecentTransaction, ...]
    data_quality_warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransactionTemplate:
    """Suggested transaction shape offered when entering a transaction."""

    id: str
    name: str
    label: str
    finance_type: FinanceType
    cash_flow_category: CashFlowCategory
    source: str
    default_description: Optional[str] = None
    preset_key: Optional[str] = None
