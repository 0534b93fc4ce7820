"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Sequence
from datetime import datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    JournalEntry,
    JournalLine,
    ReportAdjustment,
)


class Database(ABC):
    """Abstract document-store interface for ledgerkit.

    Every operation is scoped by ``user_id``. Transactions are returned as raw
    documents (dicts) because decoding them is a domain concern; journal
    entries and report adjustments are returned as domain entities.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction(self, user_id: str, fields: dict[str, Any]) -> int:
        """Insert a transaction document. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction_document(self, transaction_id: int, user_id: str) -> Optional[dict[str, Any]]:
        """Get raw transaction document by ID, or None if absent or not owned."""
        pass

    @abstractmethod
    def update_transaction(
        self, transaction_id: int, user_id: str, fields: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """Set the given fields on a transaction.

        Returns the document after the update, or None if no matching
        transaction exists.
        """
        pass

    @abstractmethod
    def set_transaction_journal_entry(
        self, transaction_id: int, user_id: str, journal_entry_id: Optional[int]
    ) -> bool:
        """Link a transaction to its journal entry. Returns False if absent."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int, user_id: str) -> bool:
        """Delete a transaction. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    def list_transaction_documents(
        self,
        user_id: str,
        category: Optional[str] = None,
        finance_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        unlinked_only: bool = False,
    ) -> list[dict[str, Any]]:
        """List raw transaction documents for a user.

        Args:
            user_id: Owner
            category: Optional exact category filter
            finance_type: Optional exact finance type filter
            start: Optional inclusive lower date bound
            end: Optional exclusive upper date bound
            unlinked_only: If True, only transactions without a journal entry
        """
        pass

    @abstractmethod
    def get_category_templates(self, user_id: str, limit: int = 100) -> list[dict[str, Any]]:
        """Group transactions by (category, finance type, cash-flow type).

        Returns dicts with category, finance_type, cash_flow_type, description
        (the most recent one) and updated_at, newest group first.
        """
        pass

    # Journal operations
    @abstractmethod
    def insert_journal_entry(
        self,
        user_id: str,
        date: datetime,
        lines: Sequence[JournalLine],
        memo: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> JournalEntry:
        """Insert a journal entry with its lines."""
        pass

    @abstractmethod
    def replace_journal_entry(
        self,
        entry_id: int,
        user_id: str,
        date: datetime,
        lines: Sequence[JournalLine],
        memo: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Optional[JournalEntry]:
        """Overwrite date, memo, reference and lines of an entry in place.

        Returns the updated entry, or None if no matching entry exists.
        """
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int, user_id: str) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        pass

    @abstractmethod
    def list_journal_entries(self, user_id: str, reference_id: Optional[str] = None) -> list[JournalEntry]:
        """List journal entries, optionally by reference ID."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int, user_id: str) -> bool:
        """Delete a journal entry and its lines. Returns False if absent."""
        pass

    @abstractmethod
    def get_journal_account_totals(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[dict[str, Any]]:
        """Sum journal line debits and credits per account code.

        Returns dicts with account_code, debit and credit (Decimal) for
        entries dated in ``[start, end)``.
        """
        pass

    # Report adjustment operations
    @abstractmethod
    def insert_report_adjustment(
        self,
        user_id: str,
        report_type: str,
        section: str,
        label: str,
        amount: Decimal,
        effective_date: datetime,
        description: Optional[str] = None,
    ) -> ReportAdjustment:
        """Insert a manual report adjustment."""
        pass

    @abstractmethod
    def get_report_adjustment(self, adjustment_id: int, user_id: str) -> Optional[ReportAdjustment]:
        """Get report adjustment by ID."""
        pass

    @abstractmethod
    def list_report_adjustments(
        self, user_id: str, effective_before: Optional[datetime] = None
    ) -> list[ReportAdjustment]:
        """List adjustments, optionally only those effective before a moment."""
        pass

    @abstractmethod
    def delete_report_adjustment(self, adjustment_id: int, user_id: str) -> bool:
        """Delete a report adjustment. Returns False if absent."""
        pass
