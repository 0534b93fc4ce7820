"""Journal ledger domain service."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ledgerkit.database.base import Database
from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.entities import (
    AccountType,
    JournalDraft,
    JournalDraftLine,
    JournalEntry,
    JournalLine,
    PeriodRange,
    TrialBalanceRow,
)
from ledgerkit.domain.errors import (
    NotFoundError,
    ValidationError,
    journal_not_found,
    journal_out_of_balance,
    unknown_account,
)
from ledgerkit.utils.amount_parser import to_money

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.005")
ZERO = Decimal("0")


def _to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid journal amount '{value}'")
    if not amount.is_finite():
        raise ValidationError(f"Invalid journal amount '{value}'")
    try:
        return to_money(amount)
    except InvalidOperation:
        raise ValidationError(f"Journal amount '{value}' is too large")


def validate_lines(lines: Sequence[JournalDraftLine]) -> tuple[JournalLine, ...]:
    """Validate draft lines and return normalized journal lines.

    Amounts are rounded to cents first. Each line must reference a known
    account and carry exactly one of a positive debit or a positive credit;
    the rounded debits and credits must balance within ``BALANCE_TOLERANCE``.

    Raises:
        ValidationError: If any of the invariants is violated
    """
    if not lines:
        raise ValidationError("Journal must contain at least one line")

    normalized = []
    for line in lines:
        if coa.get_account_definition(line.account_code) is None:
            raise ValidationError(unknown_account(line.account_code))

        debit = _to_decimal(line.debit)
        credit = _to_decimal(line.credit)

        if debit < 0 or credit < 0:
            raise ValidationError("Debit and credit amounts cannot be negative")
        if debit == 0 and credit == 0:
            raise ValidationError("Each line must contain a debit or credit")
        if debit > 0 and credit > 0:
            raise ValidationError("A single line cannot contain both debit and credit values")

        normalized.append(
            JournalLine(
                account_code=line.account_code,
                debit=debit,
                credit=credit,
                description=line.description,
            )
        )

    total_debit = sum((line.debit for line in normalized), ZERO)
    total_credit = sum((line.credit for line in normalized), ZERO)
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        raise ValidationError(journal_out_of_balance(total_debit, total_credit))

    return tuple(normalized)


def validate_draft(draft: JournalDraft) -> tuple[JournalLine, ...]:
    """Validate a whole draft. Returns the normalized lines."""
    if not isinstance(draft.date, datetime):
        raise ValidationError("Journal date must be a valid date")
    return validate_lines(draft.lines)


class JournalService:
    """Service for posting and maintaining double-entry journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def post_journal(self, user_id: str, draft: JournalDraft) -> JournalEntry:
        """Validate and persist a new journal entry.

        Args:
            user_id: Owner of the entry
            draft: Journal draft (lines, date, memo, optional reference)

        Returns:
            Persisted journal entry

        Raises:
            ValidationError: If the draft violates a journal invariant;
                nothing is written in that case
        """
        lines = validate_draft(draft)
        entry = self.db.insert_journal_entry(
            user_id=user_id,
            date=draft.date,
            lines=lines,
            memo=draft.memo,
            reference_id=draft.reference_id,
        )
        logger.info(
            "Posted journal entry %s for user %s (reference %s, amount %s)",
            entry.id,
            user_id,
            entry.reference_id,
            entry.total_debit,
        )
        return entry

    def replace_journal(self, entry_id: int, user_id: str, draft: JournalDraft) -> JournalEntry:
        """Overwrite an existing journal entry, keeping its identity.

        Raises:
            ValidationError: If the draft violates a journal invariant
            NotFoundError: If the entry doesn't exist for this user
        """
        lines = validate_draft(draft)
        entry = self.db.replace_journal_entry(
            entry_id=entry_id,
            user_id=user_id,
            date=draft.date,
            lines=lines,
            memo=draft.memo,
            reference_id=draft.reference_id,
        )
        if entry is None:
            raise NotFoundError(journal_not_found(entry_id))
        logger.info("Replaced journal entry %s for user %s", entry_id, user_id)
        return entry

    def delete_journal(self, entry_id: int, user_id: str) -> None:
        """Delete a journal entry.

        Raises:
            NotFoundError: If the entry doesn't exist for this user
        """
        if not self.db.delete_journal_entry(entry_id, user_id):
            raise NotFoundError(journal_not_found(entry_id))
        logger.info("Deleted journal entry %s for user %s", entry_id, user_id)

    def get_journal(self, entry_id: int, user_id: str) -> Optional[JournalEntry]:
        """Get a journal entry, or None if not found."""
        return self.db.get_journal_entry(entry_id, user_id)

    def list_journals(self, user_id: str, reference_id: Optional[str] = None) -> list[JournalEntry]:
        """List journal entries, optionally for one reference (transaction) ID."""
        return self.db.list_journal_entries(user_id, reference_id=reference_id)

    def trial_balance(self, user_id: str, end: Optional[datetime] = None) -> list[TrialBalanceRow]:
        """Aggregate debits and credits per account for entries before ``end``."""
        rows = []
        for total in self.db.get_journal_account_totals(user_id, end=end):
            account = coa.require_account(total["account_code"])
            rows.append(
                TrialBalanceRow(
                    account_code=account.code,
                    account_name=account.name,
                    account_type=account.account_type,
                    debit=total["debit"],
                    credit=total["credit"],
                )
            )
        return rows

    def compute_net_income(self, user_id: str, period: PeriodRange) -> Decimal:
        """Net income for a period from journal account aggregates.

        Revenue accounts contribute credit minus debit, expense accounts debit
        minus credit.
        """
        revenue = ZERO
        expenses = ZERO
        totals = self.db.get_journal_account_totals(user_id, start=period.start, end=period.end)
        for total in totals:
            account = coa.get_account_definition(total["account_code"])
            if account is None:
                continue
            if account.account_type == AccountType.REVENUE:
                revenue += total["credit"] - total["debit"]
            elif account.account_type == AccountType.EXPENSE:
                expenses += total["debit"] - total["credit"]
        return revenue - expenses
