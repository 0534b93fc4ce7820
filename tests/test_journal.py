"""Tests for the journal ledger."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledgerkit.domain import chart_of_accounts as coa
from ledgerkit.domain.entities import AccountType, JournalDraft, JournalDraftLine, PeriodKey
from ledgerkit.domain.errors import NotFoundError, ValidationError
from ledgerkit.domain.journal import validate_lines
from ledgerkit.utils.date_parser import get_period_range

DATE = datetime(2026, 5, 2)


def _draft(debit_code, credit_code, amount, date=DATE, **kwargs):
    return JournalDraft(
        date=date,
        lines=(
            JournalDraftLine(account_code=debit_code, debit=Decimal(amount)),
            JournalDraftLine(account_code=credit_code, credit=Decimal(amount)),
        ),
        **kwargs,
    )


class TestValidateLines:
    def test_balanced_lines_are_normalized(self):
        lines = validate_lines(
            (
                JournalDraftLine(account_code=coa.CASH, debit=Decimal("100")),
                JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("100")),
            )
        )
        assert lines[0].credit == Decimal("0")
        assert lines[1].debit == Decimal("0")

    def test_empty_lines_rejected(self):
        with pytest.raises(ValidationError, match="at least one line"):
            validate_lines(())

    def test_unknown_account_rejected(self):
        with pytest.raises(ValidationError, match="9999"):
            validate_lines(
                (
                    JournalDraftLine(account_code="9999", debit=Decimal("10")),
                    JournalDraftLine(account_code=coa.CASH, credit=Decimal("10")),
                )
            )

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            validate_lines(
                (
                    JournalDraftLine(account_code=coa.CASH, debit=Decimal("-10")),
                    JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("-10")),
                )
            )

    def test_line_without_amount_rejected(self):
        with pytest.raises(ValidationError, match="debit or credit"):
            validate_lines((JournalDraftLine(account_code=coa.CASH),))

    def test_line_with_both_sides_rejected(self):
        with pytest.raises(ValidationError, match="both"):
            validate_lines(
                (JournalDraftLine(account_code=coa.CASH, debit=Decimal("5"), credit=Decimal("5")),)
            )

    def test_unbalanced_rejected(self):
        with pytest.raises(ValidationError, match="out of balance"):
            validate_lines(
                (
                    JournalDraftLine(account_code=coa.CASH, debit=Decimal("100")),
                    JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("99.99")),
                )
            )

    def test_amounts_are_rounded_to_cents(self):
        lines = validate_lines(
            (
                JournalDraftLine(account_code=coa.CASH, debit=Decimal("100.004")),
                JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("100")),
            )
        )
        assert lines[0].debit == Decimal("100.00")

    def test_line_rounding_to_zero_rejected(self):
        with pytest.raises(ValidationError, match="debit or credit"):
            validate_lines(
                (
                    JournalDraftLine(account_code=coa.CASH, debit=Decimal("0.004")),
                    JournalDraftLine(account_code=coa.CASH, debit=Decimal("0.004")),
                    JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("0.008")),
                )
            )

    def test_balance_is_checked_on_rounded_amounts(self):
        with pytest.raises(ValidationError, match="out of balance"):
            validate_lines(
                (
                    JournalDraftLine(account_code=coa.CASH, debit=Decimal("0.005")),
                    JournalDraftLine(account_code=coa.INVENTORY, debit=Decimal("0.005")),
                    JournalDraftLine(account_code=coa.SALES_REVENUE, credit=Decimal("0.01")),
                )
            )


class TestJournalService:
    def test_post_journal_persists_entry(self, journal_service, user_id):
        entry = journal_service.post_journal(
            user_id, _draft(coa.CASH, coa.SALES_REVENUE, "250000", memo="Sale", reference_id="7")
        )

        stored = journal_service.get_journal(entry.id, user_id)
        assert stored is not None
        assert stored.memo == "Sale"
        assert stored.reference_id == "7"
        assert stored.total_debit == stored.total_credit == Decimal("250000")
        assert [line.account_code for line in stored.lines] == [coa.CASH, coa.SALES_REVENUE]

    def test_stored_entry_matches_validated_amounts(self, journal_service, user_id):
        entry = journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "12.345"))

        stored = journal_service.get_journal(entry.id, user_id)
        assert stored.total_debit == stored.total_credit == Decimal("12.35")
        assert entry.total_debit == stored.total_debit

    def test_post_invalid_journal_writes_nothing(self, journal_service, user_id):
        with pytest.raises(ValidationError):
            journal_service.post_journal(user_id, _draft(coa.CASH, "9999", "10"))
        assert journal_service.list_journals(user_id) == []

    def test_post_journal_requires_a_date(self, journal_service, user_id):
        with pytest.raises(ValidationError, match="date"):
            journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "10", date=None))

    def test_replace_journal_keeps_identity(self, journal_service, user_id):
        entry = journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "100"))

        replaced = journal_service.replace_journal(
            entry.id, user_id, _draft(coa.ACCOUNTS_RECEIVABLE, coa.OTHER_REVENUE, "300", memo="Edited")
        )

        assert replaced.id == entry.id
        assert replaced.memo == "Edited"
        assert [line.account_code for line in replaced.lines] == [coa.ACCOUNTS_RECEIVABLE, coa.OTHER_REVENUE]
        assert len(journal_service.list_journals(user_id)) == 1

    def test_replace_missing_journal(self, journal_service, user_id):
        with pytest.raises(NotFoundError):
            journal_service.replace_journal(999, user_id, _draft(coa.CASH, coa.SALES_REVENUE, "1"))

    def test_replace_with_invalid_draft_keeps_entry(self, journal_service, user_id):
        entry = journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "100"))
        with pytest.raises(ValidationError):
            journal_service.replace_journal(
                entry.id,
                user_id,
                JournalDraft(
                    date=DATE,
                    lines=(JournalDraftLine(account_code=coa.CASH, debit=Decimal("1")),),
                ),
            )
        assert journal_service.get_journal(entry.id, user_id).total_debit == Decimal("100")

    def test_delete_journal(self, journal_service, user_id):
        entry = journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "100"))
        journal_service.delete_journal(entry.id, user_id)
        assert journal_service.get_journal(entry.id, user_id) is None

        with pytest.raises(NotFoundError):
            journal_service.delete_journal(entry.id, user_id)

    def test_entries_are_scoped_by_user(self, journal_service, user_id):
        entry = journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "100"))
        assert journal_service.get_journal(entry.id, "someone-else") is None
        with pytest.raises(NotFoundError):
            journal_service.delete_journal(entry.id, "someone-else")

    def test_list_journals_by_reference(self, journal_service, user_id):
        journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "1", reference_id="1"))
        journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "2", reference_id="2"))

        entries = journal_service.list_journals(user_id, reference_id="2")
        assert len(entries) == 1
        assert entries[0].total_debit == Decimal("2")

    def test_trial_balance_is_balanced(self, journal_service, user_id):
        journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "1000"))
        journal_service.post_journal(user_id, _draft(coa.OPERATING_EXPENSES, coa.CASH, "400"))

        rows = journal_service.trial_balance(user_id)
        by_code = {row.account_code: row for row in rows}

        assert sum(row.debit for row in rows) == sum(row.credit for row in rows)
        assert by_code[coa.CASH].balance == Decimal("600")
        assert by_code[coa.SALES_REVENUE].account_type == AccountType.REVENUE
        assert by_code[coa.SALES_REVENUE].balance == Decimal("1000")

    def test_trial_balance_end_is_exclusive(self, journal_service, user_id):
        journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "1000", date=datetime(2026, 6, 1)))
        assert journal_service.trial_balance(user_id, end=datetime(2026, 6, 1)) == []

    def test_compute_net_income(self, journal_service, user_id, reference_date):
        journal_service.post_journal(user_id, _draft(coa.CASH, coa.SALES_REVENUE, "1000"))
        journal_service.post_journal(user_id, _draft(coa.COST_OF_GOODS_SOLD, coa.INVENTORY, "300"))
        journal_service.post_journal(user_id, _draft(coa.INVENTORY, coa.CASH, "500"))
        # Outside the period
        journal_service.post_journal(
            user_id, _draft(coa.CASH, coa.SALES_REVENUE, "999", date=datetime(2026, 4, 30))
        )

        period = get_period_range(PeriodKey.CURRENT_MONTH, reference_date)
        assert journal_service.compute_net_income(user_id, period) == Decimal("700")
