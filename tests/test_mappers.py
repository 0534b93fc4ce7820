"""Tests for database mappers."""

from datetime import datetime
from decimal import Decimal

from ledgerkit.database.models import (
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
    ReportAdjustment as ORMReportAdjustment,
    Transaction as ORMTransaction,
)
from ledgerkit.database.mappers import (
    TRANSACTION_FIELDS,
    journal_entry_to_domain,
    journal_lines_to_orm,
    report_adjustment_to_domain,
    transaction_to_document,
)
from ledgerkit.domain.entities import JournalEntry, JournalLine, ReportAdjustment, ReportType


class TestTransactionMapper:
    """Tests for the transaction document mapper."""

    def test_transaction_to_document(self):
        """Test converting ORM Transaction to a raw document."""
        orm_transaction = ORMTransaction(
            id=3,
            user_id="user-1",
            finance_type="expense",
            amount=Decimal("99.50"),
            date=datetime(2026, 5, 2),
            category="Rent",
            status="pending",
            created_at=datetime(2026, 5, 2, 8),
            updated_at=datetime(2026, 5, 2, 9),
        )

        document = transaction_to_document(orm_transaction)

        assert set(document) == set(TRANSACTION_FIELDS) | {"id", "user_id", "created_at", "updated_at"}
        assert document["finance_type"] == "expense"
        assert document["amount"] == Decimal("99.50")
        assert document["preset_key"] is None


class TestJournalMapper:
    """Tests for the journal entry mappers."""

    def test_journal_entry_to_domain(self):
        """Test converting ORM JournalEntry (with lines) to domain JournalEntry."""
        orm_entry = ORMJournalEntry(
            id=5,
            user_id="user-1",
            reference_id="3",
            date=datetime(2026, 5, 2),
            memo="Rent",
        )
        orm_entry.lines = [
            ORMJournalLine(position=0, account_code="5200", debit=Decimal("99.50"), credit=Decimal("0")),
            ORMJournalLine(position=1, account_code="1000", debit=None, credit=Decimal("99.50")),
        ]

        entry = journal_entry_to_domain(orm_entry)

        assert isinstance(entry, JournalEntry)
        assert entry.id == 5
        assert entry.reference_id == "3"
        assert entry.lines[0] == JournalLine(account_code="5200", debit=Decimal("99.50"), credit=Decimal("0"))
        assert entry.lines[1].debit == Decimal("0")
        assert entry.total_debit == entry.total_credit

    def test_journal_lines_to_orm_keeps_order(self):
        """Test that line positions follow the input order."""
        lines = [
            JournalLine(account_code="1000", debit=Decimal("1"), credit=Decimal("0")),
            JournalLine(account_code="4000", debit=Decimal("0"), credit=Decimal("1"), description="Sale"),
        ]

        orm_lines = journal_lines_to_orm(lines)

        assert [(line.position, line.account_code) for line in orm_lines] == [(0, "1000"), (1, "4000")]
        assert orm_lines[1].description == "Sale"


class TestReportAdjustmentMapper:
    """Tests for the report adjustment mapper."""

    def test_report_adjustment_to_domain(self):
        """Test converting ORM ReportAdjustment to domain ReportAdjustment."""
        orm_adjustment = ORMReportAdjustment(
            id=1,
            user_id="user-1",
            report_type="balance-sheet",
            section="assets",
            label="Deposit",
            amount=Decimal("70"),
            effective_date=datetime(2026, 1, 3),
        )

        adjustment = report_adjustment_to_domain(orm_adjustment)

        assert isinstance(adjustment, ReportAdjustment)
        assert adjustment.report_type == ReportType.BALANCE_SHEET
        assert adjustment.amount == Decimal("70")
        assert adjustment.description is None
