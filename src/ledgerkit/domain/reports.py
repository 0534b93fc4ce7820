"""Financial report aggregation.

Statements are built from decoded transactions. The income statement and the
cash-flow statement cover the transactions inside the period; the balance
sheet is a cumulative position over every transaction dated before the
period end. Net income is computed a second time from journal account totals
and compared with the transaction figure.
"""

import logging
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from ledgerkit.database.base import Database
from ledgerkit.domain.account_selection import COGS_KEYWORDS, is_cash_category, matches_any
from ledgerkit.domain.adjustments import AdjustmentService
from ledgerkit.domain.entities import (
    BalanceSheet,
    BalanceSheetTotals,
    CashFlowCategory,
    CashFlowStatement,
    CashFlowTotals,
    DashboardMetrics,
    DashboardSnapshot,
    FinanceOverview,
    FinanceOverviewMetrics,
    FinanceType,
    IncomeStatement,
    IncomeStatementTotals,
    NetIncomeCheck,
    PeriodKey,
    PeriodRange,
    RecentTransaction,
    ReportData,
    ReportRow,
    Transaction,
    TransactionStatus,
    TrendPoint,
)
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.presets import get_preset
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.date_parser import get_period_range

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
RECONCILIATION_TOLERANCE = Decimal("0.01")
RESIDUAL_TOLERANCE = Decimal("0.02")
NET_INCOME_TOLERANCE = Decimal("0.01")
CASH_FLOW_MINIMUM = Decimal("0.01")
TREND_MONTHS = 6
RECENT_TRANSACTIONS_LIMIT = 10

CASH_LABEL = "Cash & Cash Equivalents"
RECEIVABLES_LABEL = "Accounts Receivable"
PAYABLES_LABEL = "Accounts Payable"
RETAINED_EARNINGS_LABEL = "Retained Earnings"
BALANCE_ADJUSTMENT_LABEL = "Balance Sheet Adjustment"

CASH_FLOW_FALLBACK_LABELS = {
    CashFlowCategory.OPERATING: "Operating Activities",
    CashFlowCategory.INVESTING: "Investing Activities",
    CashFlowCategory.FINANCING: "Financing Activities",
}


def sort_rows(rows: Iterable[ReportRow]) -> tuple[ReportRow, ...]:
    """Sort rows by descending absolute amount."""
    return tuple(sorted(rows, key=lambda row: abs(row.amount), reverse=True))


def total(rows: Iterable[ReportRow]) -> Decimal:
    return sum((row.amount for row in rows), ZERO)


def aggregate_by_category(transactions: Iterable[Transaction], fallback_label: str) -> list[ReportRow]:
    """Sum transaction amounts per category, in first-seen order."""
    sums: "OrderedDict[str, Decimal]" = OrderedDict()
    for txn in transactions:
        label = txn.category or fallback_label
        sums[label] = sums.get(label, ZERO) + txn.amount
    return [ReportRow(label=label, amount=amount) for label, amount in sums.items()]


def is_cogs(transaction: Transaction) -> bool:
    return matches_any(transaction.category, COGS_KEYWORDS)


def is_cash_asset(transaction: Transaction) -> bool:
    """Asset transaction that records cash itself (an opening cash position)."""
    return transaction.finance_type == FinanceType.ASSET and is_cash_category(transaction.category)


def cash_effect(transaction: Transaction) -> Decimal:
    """Signed effect of a transaction on the derived cash balance.

    Pending income and expenses have not moved cash yet; they are carried as
    receivables and payables instead. Non-cash transactions have no effect,
    except for cash-labelled assets.
    """
    if is_cash_asset(transaction):
        return transaction.amount
    if transaction.cash_flow_type == CashFlowCategory.NON_CASH:
        return ZERO

    finance_type = transaction.finance_type
    if finance_type in (FinanceType.INCOME, FinanceType.EXPENSE):
        if transaction.status == TransactionStatus.PENDING:
            return ZERO
        return transaction.amount if finance_type == FinanceType.INCOME else -transaction.amount
    if finance_type == FinanceType.ASSET:
        return -transaction.amount
    return transaction.amount


def cash_balance(transactions: Iterable[Transaction]) -> Decimal:
    return sum((cash_effect(txn) for txn in transactions), ZERO)


def cash_flow_amount(transaction: Transaction) -> Optional[Decimal]:
    """Signed cash-flow statement amount, or None if the transaction is excluded."""
    finance_type = transaction.finance_type
    if finance_type == FinanceType.EXPENSE:
        return -transaction.amount
    if finance_type == FinanceType.ASSET:
        if is_cash_asset(transaction):
            return None
        return -transaction.amount
    return transaction.amount


def pending_total(transactions: Iterable[Transaction], finance_type: FinanceType) -> Decimal:
    return sum(
        (
            txn.amount
            for txn in transactions
            if txn.finance_type == finance_type and txn.status == TransactionStatus.PENDING
        ),
        ZERO,
    )


def _has_label(rows: Sequence[ReportRow], label: str) -> bool:
    wanted = label.lower()
    return any(row.label.strip().lower() == wanted for row in rows)


def reconcile_equity(
    assets: Sequence[ReportRow], liabilities: Sequence[ReportRow], equity: Sequence[ReportRow]
) -> list[ReportRow]:
    """Make equity equal assets minus liabilities through Retained Earnings.

    An existing (non-manual) Retained Earnings row absorbs the difference;
    otherwise a new row is added. Differences within 0.01 are left alone.
    """
    rows = list(equity)
    difference = total(assets) - total(liabilities) - total(rows)
    if abs(difference) <= RECONCILIATION_TOLERANCE:
        return rows

    for index, row in enumerate(rows):
        if not row.is_manual and row.label.strip().lower() == RETAINED_EARNINGS_LABEL.lower():
            rows[index] = ReportRow(
                label=row.label,
                amount=row.amount + difference,
                description=row.description,
            )
            break
    else:
        rows.append(
            ReportRow(
                label=RETAINED_EARNINGS_LABEL,
                amount=difference,
                description="Derived from assets less liabilities",
            )
        )
    logger.info("Balance sheet equity reconciled through retained earnings by %s", difference)
    return rows


def balance_residual_row(
    assets: Sequence[ReportRow], liabilities: Sequence[ReportRow], equity: Sequence[ReportRow]
) -> Optional[ReportRow]:
    """Row closing a residual imbalance above 0.02, or None when balanced.

    A non-None result means transactions were classified into the wrong
    statement sections.
    """
    residual = total(assets) - total(liabilities) - total(equity)
    if abs(residual) <= RESIDUAL_TOLERANCE:
        return None
    logger.warning("Balance sheet still out of balance by %s; adding an adjustment row", residual)
    return ReportRow(
        label=BALANCE_ADJUSTMENT_LABEL,
        amount=residual,
        description="Residual difference between assets and liabilities plus equity",
    )


def _period_transactions(transactions: Iterable[Transaction], period: PeriodRange) -> list[Transaction]:
    return [txn for txn in transactions if period.contains(txn.date)]


def _sum_type(transactions: Iterable[Transaction], finance_type: FinanceType) -> Decimal:
    return sum((txn.amount for txn in transactions if txn.finance_type == finance_type), ZERO)


def _preset_label(transaction: Transaction) -> Optional[str]:
    if transaction.preset_label:
        return transaction.preset_label
    preset = get_preset(transaction.preset_key)
    return preset.label if preset is not None else None


class ReportService:
    """Service for building financial statements and summaries."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transactions = TransactionService(db)
        self.journal = JournalService(db)
        self.adjustments = AdjustmentService(db)

    def _period(self, period_key: Union[PeriodKey, str], now: Optional[datetime]) -> PeriodRange:
        try:
            return get_period_range(period_key, now)
        except ValueError as e:
            raise ValidationError(str(e))

    def build_report_data(
        self,
        user_id: str,
        period_key: Union[PeriodKey, str] = PeriodKey.CURRENT_MONTH,
        now: Optional[datetime] = None,
    ) -> ReportData:
        """Build the income statement, balance sheet and cash-flow statement.

        Args:
            user_id: Owner
            period_key: Reporting period key
            now: Moment the period is relative to (defaults to now)

        Returns:
            ReportData for the period

        Raises:
            ValidationError: If the period key is unknown
        """
        generated_at = now or datetime.now()
        period = self._period(period_key, generated_at)

        transactions = self.transactions.list_transactions(user_id)
        in_period = _period_transactions(transactions, period)
        up_to_end = [txn for txn in transactions if txn.date < period.end]
        adjustments = self.adjustments.fetch_adjustments_for_period(user_id, period)

        income_statement = self._income_statement(in_period, adjustments.income_statement)
        balance_sheet = self._balance_sheet(up_to_end, adjustments.balance_sheet)
        cash_flow = self._cash_flow(in_period, adjustments.cash_flow)
        net_income_check = self._net_income_check(user_id, period, in_period)

        return ReportData(
            period=period,
            generated_at=generated_at,
            income_statement=income_statement,
            balance_sheet=balance_sheet,
            cash_flow=cash_flow,
            net_income_check=net_income_check,
        )

    def _income_statement(self, transactions: Sequence[Transaction], adjustments) -> IncomeStatement:
        income = [txn for txn in transactions if txn.finance_type == FinanceType.INCOME]
        expense = [txn for txn in transactions if txn.finance_type == FinanceType.EXPENSE]

        revenues = aggregate_by_category(income, "Uncategorised Income")
        revenues.extend(adjustments.revenues)
        cogs = aggregate_by_category([txn for txn in expense if is_cogs(txn)], "Cost of Goods Sold")
        expenses = aggregate_by_category([txn for txn in expense if not is_cogs(txn)], "Uncategorised Expense")
        expenses.extend(adjustments.expenses)

        revenue_total = total(revenues)
        cogs_total = total(cogs)
        operating_total = total(expenses)
        gross_profit = revenue_total - cogs_total

        return IncomeStatement(
            revenues=sort_rows(revenues),
            cogs=sort_rows(cogs),
            expenses=sort_rows(expenses),
            totals=IncomeStatementTotals(
                revenue=revenue_total,
                cogs=cogs_total,
                gross_profit=gross_profit,
                operating_expenses=operating_total,
                expenses=cogs_total + operating_total,
                net_income=gross_profit - operating_total,
            ),
        )

    def _balance_sheet(self, transactions: Sequence[Transaction], adjustments) -> BalanceSheet:
        assets = aggregate_by_category(
            [txn for txn in transactions if txn.finance_type == FinanceType.ASSET], "Other Assets"
        )
        liabilities = aggregate_by_category(
            [txn for txn in transactions if txn.finance_type == FinanceType.LIABILITY], "Other Liabilities"
        )
        equity = aggregate_by_category(
            [txn for txn in transactions if txn.finance_type == FinanceType.EQUITY], "Other Equity"
        )

        if not any(is_cash_asset(txn) for txn in transactions):
            cash = cash_balance(transactions)
            if cash != 0:
                assets.append(ReportRow(label=CASH_LABEL, amount=cash))

        receivables = pending_total(transactions, FinanceType.INCOME)
        if receivables and not _has_label(assets, RECEIVABLES_LABEL):
            assets.append(ReportRow(label=RECEIVABLES_LABEL, amount=receivables))

        payables = pending_total(transactions, FinanceType.EXPENSE)
        if payables and not _has_label(liabilities, PAYABLES_LABEL):
            liabilities.append(ReportRow(label=PAYABLES_LABEL, amount=payables))

        assets.extend(adjustments.assets)
        liabilities.extend(adjustments.liabilities)
        equity.extend(adjustments.equity)

        equity = reconcile_equity(assets, liabilities, equity)
        residual = balance_residual_row(assets, liabilities, equity)
        if residual is not None:
            equity.append(residual)

        return BalanceSheet(
            assets=sort_rows(assets),
            liabilities=sort_rows(liabilities),
            equity=sort_rows(equity),
            totals=BalanceSheetTotals(
                assets=total(assets),
                liabilities=total(liabilities),
                equity=total(equity),
            ),
        )

    def _cash_flow(self, transactions: Sequence[Transaction], adjustments) -> CashFlowStatement:
        sections: dict[CashFlowCategory, list[ReportRow]] = {
            category: [] for category in CASH_FLOW_FALLBACK_LABELS
        }
        for txn in transactions:
            rows = sections.get(txn.cash_flow_type)
            if rows is None:
                continue
            amount = cash_flow_amount(txn)
            if amount is None or abs(amount) < CASH_FLOW_MINIMUM:
                continue
            label = txn.category or _preset_label(txn) or CASH_FLOW_FALLBACK_LABELS[txn.cash_flow_type]
            description = txn.description.strip() or None
            if description == label:
                description = None
            rows.append(ReportRow(label=label, amount=amount, description=description))

        sections[CashFlowCategory.OPERATING].extend(adjustments.operating)
        sections[CashFlowCategory.INVESTING].extend(adjustments.investing)
        sections[CashFlowCategory.FINANCING].extend(adjustments.financing)

        operating = total(sections[CashFlowCategory.OPERATING])
        investing = total(sections[CashFlowCategory.INVESTING])
        financing = total(sections[CashFlowCategory.FINANCING])

        return CashFlowStatement(
            operating=sort_rows(sections[CashFlowCategory.OPERATING]),
            investing=sort_rows(sections[CashFlowCategory.INVESTING]),
            financing=sort_rows(sections[CashFlowCategory.FINANCING]),
            totals=CashFlowTotals(
                operating=operating,
                investing=investing,
                financing=financing,
                net_change=operating + investing + financing,
            ),
        )

    def _net_income_check(
        self, user_id: str, period: PeriodRange, transactions: Sequence[Transaction]
    ) -> NetIncomeCheck:
        transaction_net_income = _sum_type(transactions, FinanceType.INCOME) - _sum_type(
            transactions, FinanceType.EXPENSE
        )
        ledger_net_income = self.journal.compute_net_income(user_id, period)
        difference = transaction_net_income - ledger_net_income
        is_consistent = abs(difference) <= NET_INCOME_TOLERANCE
        if not is_consistent:
            logger.warning(
                "Net income for %s differs between transactions (%s) and journal (%s)",
                period.label,
                transaction_net_income,
                ledger_net_income,
            )
        return NetIncomeCheck(
            transaction_net_income=transaction_net_income,
            ledger_net_income=ledger_net_income,
            difference=difference,
            is_consistent=is_consistent,
        )

    def build_dashboard_snapshot(
        self,
        user_id: str,
        period_key: Union[PeriodKey, str] = PeriodKey.CURRENT_MONTH,
        now: Optional[datetime] = None,
    ) -> DashboardSnapshot:
        """Headline metrics, a six-month trend and notifications.

        Raises:
            ValidationError: If the period key is unknown
        """
        now = now or datetime.now()
        period = self._period(period_key, now)
        transactions = self.transactions.list_transactions(user_id)
        in_period = _period_transactions(transactions, period)
        balance = cash_balance(transactions)

        return DashboardSnapshot(
            period=period,
            metrics=DashboardMetrics(
                income_this_period=_sum_type(in_period, FinanceType.INCOME),
                expenses_this_period=_sum_type(in_period, FinanceType.EXPENSE),
                cash_balance=balance,
            ),
            monthly_trend=build_monthly_trend(transactions),
            notifications=build_notifications(transactions, balance, now),
        )

    def build_finance_overview(self, user_id: str, now: Optional[datetime] = None) -> FinanceOverview:
        """Cash, receivables, payables, month-to-date net income and recent activity.

        Month-to-date net income comes from the journal; a disagreement with
        the transaction figure is reported in ``data_quality_warnings``.
        """
        now = now or datetime.now()
        period = get_period_range(PeriodKey.CURRENT_MONTH, now)
        transactions = self.transactions.list_transactions(user_id)
        check = self._net_income_check(user_id, period, _period_transactions(transactions, period))

        warnings = []
        if not check.is_consistent:
            warnings.append(
                f"Net income for {period.label} from transactions ({check.transaction_net_income}) "
                f"differs from the journal ({check.ledger_net_income}) by {check.difference}."
            )

        return FinanceOverview(
            metrics=FinanceOverviewMetrics(
                cash_balance=cash_balance(transactions),
                accounts_receivable=pending_total(transactions, FinanceType.INCOME),
                accounts_payable=pending_total(transactions, FinanceType.EXPENSE),
                net_income_mtd=check.ledger_net_income,
            ),
            recent_transactions=tuple(
                to_recent_transaction(txn) for txn in transactions[:RECENT_TRANSACTIONS_LIMIT]
            ),
            data_quality_warnings=tuple(warnings),
        )


def to_recent_transaction(transaction: Transaction) -> RecentTransaction:
    return RecentTransaction(
        id=transaction.id,
        date=transaction.date,
        description=transaction.description or transaction.category,
        finance_type=transaction.finance_type,
        amount=transaction.amount,
        status=transaction.status,
        category=transaction.category,
        cash_flow_type=transaction.cash_flow_type,
        display_type=_preset_label(transaction) or transaction.category or transaction.finance_type.value,
        preset_key=transaction.preset_key,
        preset_label=transaction.preset_label,
    )


def build_monthly_trend(transactions: Iterable[Transaction]) -> tuple[TrendPoint, ...]:
    """Income and expenses for the last six months with activity, oldest first."""
    months: dict[tuple[int, int], list[Decimal]] = {}
    for txn in transactions:
        if txn.finance_type not in (FinanceType.INCOME, FinanceType.EXPENSE):
            continue
        sums = months.setdefault((txn.date.year, txn.date.month), [ZERO, ZERO])
        if txn.finance_type == FinanceType.INCOME:
            sums[0] += txn.amount
        else:
            sums[1] += txn.amount

    recent = sorted(months.items())[-TREND_MONTHS:]
    return tuple(
        TrendPoint(label=datetime(year, month, 1).strftime("%b %Y"), income=income, expenses=expenses)
        for (year, month), (income, expenses) in recent
    )


def build_notifications(
    transactions: Sequence[Transaction], balance: Decimal, now: datetime
) -> tuple[str, ...]:
    notifications = []
    if balance < 0:
        notifications.append("Cash balance is negative. Review cash flow requirements.")

    pending_income = sum(
        1
        for txn in transactions
        if txn.finance_type == FinanceType.INCOME and txn.status == TransactionStatus.PENDING
    )
    if pending_income:
        notifications.append(f"{pending_income} income transaction(s) pending collection.")

    overdue_expenses = sum(
        1
        for txn in transactions
        if txn.finance_type == FinanceType.EXPENSE
        and txn.status == TransactionStatus.PENDING
        and txn.date < now
    )
    if overdue_expenses:
        notifications.append(f"{overdue_expenses} expense transaction(s) awaiting settlement.")
    return tuple(notifications)
