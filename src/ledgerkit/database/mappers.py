"""Mapper functions to convert between domain models and SQLAlchemy models.

Transactions map onto raw documents rather than entities: the domain layer
decodes them (see ``ledgerkit.domain.transaction.normalize_transaction``) so
that malformed historical rows can be filtered instead of crashing reads.
"""

from decimal import Decimal
from typing import Any

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    Transaction as ORMTransaction,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
    ReportAdjustment as ORMReportAdjustment,
)

TRANSACTION_FIELDS = (
    "finance_type",
    "amount",
    "date",
    "description",
    "category",
    "status",
    "cash_flow_type",
    "counterparty",
    "preset_key",
    "preset_label",
    "journal_entry_id",
)


def transaction_to_document(orm_transaction: ORMTransaction) -> dict[str, Any]:
    """Convert SQLAlchemy Transaction model to a raw transaction document."""
    document: dict[str, Any] = {
        "id": orm_transaction.id,
        "user_id": orm_transaction.user_id,
        "created_at": orm_transaction.created_at,
        "updated_at": orm_transaction.updated_at,
    }
    for name in TRANSACTION_FIELDS:
        document[name] = getattr(orm_transaction, name)
    return document


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        account_code=orm_line.account_code,
        debit=Decimal(orm_line.debit or 0),
        credit=Decimal(orm_line.credit or 0),
        description=orm_line.description,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        user_id=orm_entry.user_id,
        date=orm_entry.date,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
        memo=orm_entry.memo,
        reference_id=orm_entry.reference_id,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
    )


def journal_lines_to_orm(lines) -> list[ORMJournalLine]:
    """Build SQLAlchemy JournalLine models from domain lines, keeping order."""
    return [
        ORMJournalLine(
            position=position,
            account_code=line.account_code,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
        )
        for position, line in enumerate(lines)
    ]


def report_adjustment_to_domain(orm_adjustment: ORMReportAdjustment) -> domain.ReportAdjustment:
    """Convert SQLAlchemy ReportAdjustment model to domain ReportAdjustment entity."""
    return domain.ReportAdjustment(
        id=orm_adjustment.id,
        user_id=orm_adjustment.user_id,
        report_type=domain.ReportType(orm_adjustment.report_type),
        section=orm_adjustment.section,
        label=orm_adjustment.label,
        amount=Decimal(orm_adjustment.amount or 0),
        effective_date=orm_adjustment.effective_date,
        description=orm_adjustment.description,
        created_at=orm_adjustment.created_at,
        updated_at=orm_adjustment.updated_at,
    )
