"""Manual report adjustment domain service."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    AdjustmentCollection,
    BalanceSheetAdjustments,
    CashFlowAdjustments,
    IncomeStatementAdjustments,
    PeriodRange,
    ReportAdjustment,
    ReportRow,
    ReportType,
)
from ledgerkit.domain.errors import NotFoundError, ValidationError, adjustment_not_found
from ledgerkit.utils.amount_parser import to_money
from ledgerkit.utils.date_parser import coerce_datetime

logger = logging.getLogger(__name__)

# Valid sections per report type, with their display labels
REPORT_ADJUSTMENT_SECTIONS: dict[ReportType, tuple[tuple[str, str], ...]] = {
    ReportType.INCOME_STATEMENT: (
        ("revenues", "Revenue"),
        ("expenses", "Operating Expenses"),
    ),
    ReportType.BALANCE_SHEET: (
        ("assets", "Assets"),
        ("liabilities", "Liabilities"),
        ("equity", "Equity"),
    ),
    ReportType.CASH_FLOW: (
        ("operating", "Operating Cash Flow"),
        ("investing", "Investing Cash Flow"),
        ("financing", "Financing Cash Flow"),
    ),
}


def parse_report_type(value: Union[ReportType, str]) -> ReportType:
    """Convert a report type string to ReportType.

    Raises:
        ValidationError: If the value is not a known report type
    """
    try:
        return ReportType(value.strip().lower() if isinstance(value, str) else value)
    except ValueError:
        supported = ", ".join(item.value for item in ReportType)
        raise ValidationError(f"Invalid report type '{value}'. Supported types: {supported}")


def is_valid_adjustment_section(report_type: ReportType, section: Any) -> bool:
    if not isinstance(section, str):
        return False
    return any(value == section for value, _ in REPORT_ADJUSTMENT_SECTIONS[report_type])


def to_report_row(adjustment: ReportAdjustment) -> ReportRow:
    """Present an adjustment as a manual report row."""
    return ReportRow(
        label=adjustment.label,
        amount=adjustment.amount,
        description=adjustment.description,
        is_manual=True,
        adjustment_id=adjustment.id,
    )


def applies_to_period(adjustment: ReportAdjustment, period: PeriodRange) -> bool:
    """Whether an adjustment belongs in a report for the given period.

    Balance-sheet adjustments are cumulative positions and apply whenever
    they take effect before the period end. Income-statement and cash-flow
    adjustments must fall inside the period.
    """
    if adjustment.effective_date >= period.end:
        return False
    if adjustment.report_type == ReportType.BALANCE_SHEET:
        return True
    return adjustment.effective_date >= period.start


class AdjustmentService:
    """Service for managing manual report adjustments."""

    def __init__(self, db: Database):
        """Initialize adjustment service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_adjustment(
        self,
        user_id: str,
        report_type: Union[ReportType, str],
        section: str,
        label: str,
        amount: Union[Decimal, int, str],
        effective_date: Union[datetime, str],
        description: Optional[str] = None,
    ) -> ReportAdjustment:
        """Create a manual adjustment.

        Args:
            user_id: Owner
            report_type: income-statement, balance-sheet or cash-flow
            section: Section valid for the report type (see REPORT_ADJUSTMENT_SECTIONS)
            label: Row label shown on the report
            amount: Signed amount
            effective_date: Date the adjustment takes effect
            description: Optional description

        Returns:
            Created adjustment

        Raises:
            ValidationError: If any input is invalid
        """
        report_type = parse_report_type(report_type)

        section = section.strip().lower() if isinstance(section, str) else section
        if not is_valid_adjustment_section(report_type, section):
            valid = ", ".join(value for value, _ in REPORT_ADJUSTMENT_SECTIONS[report_type])
            raise ValidationError(
                f"Invalid section '{section}' for {report_type.value}. Valid sections: {valid}"
            )

        label = label.strip() if isinstance(label, str) else ""
        if not label:
            raise ValidationError("Adjustment label is required")

        if isinstance(amount, bool):
            raise ValidationError(f"Invalid adjustment amount '{amount}'")
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
            if not value.is_finite():
                raise InvalidOperation
            amount = to_money(value)
        except InvalidOperation:
            raise ValidationError(f"Invalid adjustment amount '{amount}'")

        moment = coerce_datetime(effective_date)
        if moment is None:
            raise ValidationError("Invalid effective date")

        adjustment = self.db.insert_report_adjustment(
            user_id=user_id,
            report_type=report_type.value,
            section=section,
            label=label,
            amount=amount,
            effective_date=moment,
            description=(description or "").strip() or None,
        )
        logger.info(
            "Created %s adjustment %s (%s) for user %s",
            report_type.value,
            adjustment.id,
            section,
            user_id,
        )
        return adjustment

    def delete_adjustment(self, adjustment_id: int, user_id: str) -> None:
        """Delete an adjustment.

        Raises:
            NotFoundError: If the adjustment doesn't exist for this user
        """
        if not self.db.delete_report_adjustment(adjustment_id, user_id):
            raise NotFoundError(adjustment_not_found(adjustment_id))
        logger.info("Deleted adjustment %s for user %s", adjustment_id, user_id)

    def get_adjustment(self, adjustment_id: int, user_id: str) -> Optional[ReportAdjustment]:
        return self.db.get_report_adjustment(adjustment_id, user_id)

    def list_adjustments(
        self, user_id: str, report_type: Union[ReportType, str, None] = None
    ) -> list[ReportAdjustment]:
        """List adjustments, newest effective date first."""
        adjustments = self.db.list_report_adjustments(user_id)
        if report_type is not None:
            wanted = parse_report_type(report_type)
            adjustments = [adj for adj in adjustments if adj.report_type == wanted]
        return sorted(adjustments, key=lambda adj: (adj.effective_date, adj.id), reverse=True)

    def fetch_adjustments_for_period(self, user_id: str, period: PeriodRange) -> AdjustmentCollection:
        """Group the adjustments that apply to a period by report section.

        Adjustments whose section doesn't match their report type are ignored.
        """
        sections: dict[ReportType, dict[str, list[ReportRow]]] = {
            report_type: {value: [] for value, _ in options}
            for report_type, options in REPORT_ADJUSTMENT_SECTIONS.items()
        }

        for adjustment in self.db.list_report_adjustments(user_id, effective_before=period.end):
            if not applies_to_period(adjustment, period):
                continue
            bucket = sections[adjustment.report_type].get(adjustment.section)
            if bucket is None:
                continue
            bucket.append(to_report_row(adjustment))

        income = sections[ReportType.INCOME_STATEMENT]
        balance = sections[ReportType.BALANCE_SHEET]
        cash_flow = sections[ReportType.CASH_FLOW]
        return AdjustmentCollection(
            income_statement=IncomeStatementAdjustments(
                revenues=tuple(income["revenues"]),
                expenses=tuple(income["expenses"]),
            ),
            balance_sheet=BalanceSheetAdjustments(
                assets=tuple(balance["assets"]),
                liabilities=tuple(balance["liabilities"]),
                equity=tuple(balance["equity"]),
            ),
            cash_flow=CashFlowAdjustments(
                operating=tuple(cash_flow["operating"]),
                investing=tuple(cash_flow["investing"]),
                financing=tuple(cash_flow["financing"]),
            ),
        )
