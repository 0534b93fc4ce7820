"""Transaction domain service.

Every write keeps the transaction and its journal entry in step: a created
transaction gets exactly one journal entry, an update replaces that entry in
place, and a delete removes it. The two writes are not atomic; a failed
journal post after the transaction insert is compensated by deleting the
transaction again.
"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Union

from ledgerkit.database.base import Database
from ledgerkit.domain.account_selection import derive_journal_draft
from ledgerkit.domain.entities import (
    CashFlowCategory,
    FinanceType,
    PeriodKey,
    Transaction,
    TransactionStatus,
)
from ledgerkit.domain.errors import (
    DecodeError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
    unknown_preset,
)
from ledgerkit.domain.journal import JournalService, validate_draft
from ledgerkit.domain.presets import get_preset
from ledgerkit.utils.amount_parser import to_money
from ledgerkit.utils.date_parser import coerce_datetime, get_period_range

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = {
    FinanceType.INCOME: "General Income",
    FinanceType.EXPENSE: "General Expense",
    FinanceType.ASSET: "General Asset",
    FinanceType.LIABILITY: "General Liability",
    FinanceType.EQUITY: "General Equity",
}

UPDATABLE_FIELDS = frozenset(
    {
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
    }
)


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _decode_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None


def _decode_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value)) if value is not None else Decimal("0")
    except InvalidOperation:
        return Decimal("0")
    return abs(amount) if amount.is_finite() else Decimal("0")


def decode_transaction(document: Mapping[str, Any]) -> Transaction:
    """Decode a raw transaction document into a Transaction.

    Missing category, status and cash-flow type fall back to defaults. The
    preset label is taken from the preset catalog whenever the preset key is
    known, overriding any stored label.

    Raises:
        DecodeError: If the date cannot be parsed or the finance type is unknown
    """
    transaction_id = document.get("id")
    date = coerce_datetime(document.get("date"))
    if date is None:
        raise DecodeError(f"Transaction {transaction_id} has an unparseable date {document.get('date')!r}")

    finance_type = _decode_enum(FinanceType, document.get("finance_type"))
    if finance_type is None:
        raise DecodeError(
            f"Transaction {transaction_id} has an unknown finance type {document.get('finance_type')!r}"
        )

    status_raw = document.get("status")
    status = (
        TransactionStatus.PENDING
        if isinstance(status_raw, str) and status_raw.strip().lower() == TransactionStatus.PENDING.value
        else TransactionStatus.POSTED
    )

    preset_key = _clean_text(document.get("preset_key"))
    preset = get_preset(preset_key)
    preset_label = preset.label if preset is not None else _clean_text(document.get("preset_label"))

    return Transaction(
        id=transaction_id,
        user_id=document.get("user_id"),
        finance_type=finance_type,
        amount=_decode_amount(document.get("amount")),
        date=date,
        description=document.get("description") if isinstance(document.get("description"), str) else "",
        category=_clean_text(document.get("category")) or DEFAULT_CATEGORIES[finance_type],
        status=status,
        cash_flow_type=_decode_enum(CashFlowCategory, document.get("cash_flow_type")) or CashFlowCategory.OPERATING,
        counterparty=_clean_text(document.get("counterparty")),
        preset_key=preset_key,
        preset_label=preset_label,
        journal_entry_id=document.get("journal_entry_id"),
        created_at=document.get("created_at"),
        updated_at=document.get("updated_at"),
    )


def normalize_transaction(document: Mapping[str, Any]) -> Optional[Transaction]:
    """Decode a raw document, or return None if it cannot be decoded."""
    try:
        return decode_transaction(document)
    except DecodeError as e:
        logger.debug("Dropping transaction document: %s", e)
        return None


def validate_amount(value: Any) -> Decimal:
    """Validate a user-supplied amount and round it to cents.

    The rounded amount must be a finite number above zero.
    """
    if isinstance(value, bool):
        raise ValidationError("Amount must be greater than zero")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if amount.is_finite():
            amount = to_money(amount)
    except InvalidOperation:
        raise ValidationError(f"Invalid amount '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def validate_date(value: Any) -> datetime:
    """Validate a user-supplied transaction date."""
    date = coerce_datetime(value)
    if date is None:
        raise ValidationError("Invalid transaction date")
    return date


def _require_enum(enum_cls, value: Any, field_name: str):
    decoded = _decode_enum(enum_cls, value)
    if decoded is None:
        raise ValidationError(f"Invalid {field_name} '{value}'")
    return decoded


class TransactionService:
    """Service for managing transactions and their journal entries."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.journal = JournalService(db)

    def create_transaction(
        self,
        user_id: str,
        amount: Union[Decimal, int, str],
        date: Union[datetime, str],
        finance_type: Union[FinanceType, str, None] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        status: Union[TransactionStatus, str] = TransactionStatus.POSTED,
        cash_flow_type: Union[CashFlowCategory, str, None] = None,
        counterparty: Optional[str] = None,
        preset_key: Optional[str] = None,
        preset_label: Optional[str] = None,
    ) -> Transaction:
        """Create a transaction and post its journal entry.

        A known preset supplies the finance type, category and cash-flow type
        when they are omitted, and always supplies the preset label.

        Args:
            user_id: Owner
            amount: Positive amount
            date: Transaction date
            finance_type: income, expense, asset, liability or equity
            description: Optional description (used as journal memo)
            category: Optional category text (defaults per finance type)
            status: posted or pending
            cash_flow_type: operating, investing, financing or non-cash
            counterparty: Optional counterparty name
            preset_key: Optional preset key (cash, cogs, purchase)
            preset_label: Optional label, ignored when the preset key is known

        Returns:
            The created transaction, linked to its journal entry

        Raises:
            ValidationError: If any input is invalid; nothing is persisted
            ConfigurationError: If the derived journal references an unknown account
        """
        preset = None
        preset_key = _clean_text(preset_key)
        if preset_key is not None:
            preset = get_preset(preset_key)
            if preset is None:
                raise ValidationError(unknown_preset(preset_key))

        if finance_type is None:
            if preset is None:
                raise ValidationError("Finance type is required")
            finance_type = preset.finance_type
        finance_type = _require_enum(FinanceType, finance_type, "finance type")

        if cash_flow_type is None:
            cash_flow_type = preset.cash_flow_category if preset is not None else CashFlowCategory.OPERATING

        fields = {
            "finance_type": finance_type.value,
            "amount": validate_amount(amount),
            "date": validate_date(date),
            "description": (description or "").strip(),
            "category": _clean_text(category)
            or (preset.category if preset is not None else DEFAULT_CATEGORIES[finance_type]),
            "status": _require_enum(TransactionStatus, status, "status").value,
            "cash_flow_type": _require_enum(CashFlowCategory, cash_flow_type, "cash flow type").value,
            "counterparty": _clean_text(counterparty),
            "preset_key": preset_key,
            "preset_label": preset.label if preset is not None else _clean_text(preset_label),
            "journal_entry_id": None,
        }

        # Derive and validate the journal before the first write
        provisional = decode_transaction({"id": 0, "user_id": user_id, **fields})
        draft = derive_journal_draft(provisional)
        validate_draft(draft)

        transaction_id = self.db.insert_transaction(user_id, fields)
        draft = replace(draft, reference_id=str(transaction_id))

        try:
            entry = self.journal.post_journal(user_id, draft)
        except Exception:
            logger.warning(
                "Journal post failed for transaction %s; deleting the transaction", transaction_id
            )
            self.db.delete_transaction(transaction_id, user_id)
            raise

        try:
            self.db.set_transaction_journal_entry(transaction_id, user_id, entry.id)
        except Exception:
            logger.warning(
                "Linking journal entry %s to transaction %s failed; rolling both back",
                entry.id,
                transaction_id,
            )
            self.db.delete_journal_entry(entry.id, user_id)
            self.db.delete_transaction(transaction_id, user_id)
            raise

        logger.info("Created transaction %s for user %s", transaction_id, user_id)
        return self._require_transaction(transaction_id, user_id)

    def _validate_changes(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown transaction field(s): {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("No valid fields provided for update")

        update: dict[str, Any] = {}
        if "amount" in changes:
            update["amount"] = validate_amount(changes["amount"])
        if "date" in changes:
            update["date"] = validate_date(changes["date"])
        if "finance_type" in changes:
            update["finance_type"] = _require_enum(FinanceType, changes["finance_type"], "finance type").value
        if "status" in changes:
            update["status"] = _require_enum(TransactionStatus, changes["status"], "status").value
        if "cash_flow_type" in changes:
            update["cash_flow_type"] = _require_enum(
                CashFlowCategory, changes["cash_flow_type"], "cash flow type"
            ).value
        if "description" in changes:
            update["description"] = (changes["description"] or "").strip()
        if "category" in changes:
            update["category"] = _clean_text(changes["category"])
        if "counterparty" in changes:
            update["counterparty"] = _clean_text(changes["counterparty"])
        if "preset_label" in changes:
            update["preset_label"] = _clean_text(changes["preset_label"])

        if "preset_key" in changes:
            preset_key = _clean_text(changes["preset_key"])
            if preset_key is None:
                update["preset_key"] = None
            else:
                preset = get_preset(preset_key)
                if preset is None:
                    raise ValidationError(unknown_preset(preset_key))
                update["preset_key"] = preset_key
                update["preset_label"] = preset.label
                update.setdefault("finance_type", preset.finance_type.value)
                update.setdefault("category", preset.category)
                update.setdefault("cash_flow_type", preset.cash_flow_category.value)
        return update

    def update_transaction(
        self, transaction_id: int, user_id: str, changes: Mapping[str, Any]
    ) -> Transaction:
        """Apply a partial update and re-derive the linked journal entry.

        The journal entry keeps its identity: an existing entry is replaced in
        place, otherwise a new one is posted and linked.

        Args:
            transaction_id: Transaction ID
            user_id: Owner
            changes: Mapping of field name to new value; only these fields change

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction doesn't exist for this user
            ValidationError: If a change is invalid or no change is given
        """
        document = self.db.get_transaction_document(transaction_id, user_id)
        if document is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        update = self._validate_changes(changes)

        try:
            merged = decode_transaction({**document, **update})
        except DecodeError as e:
            raise ValidationError(str(e))
        draft = derive_journal_draft(merged)
        validate_draft(draft)

        if self.db.update_transaction(transaction_id, user_id, update) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        entry_id = merged.journal_entry_id
        if entry_id is not None:
            try:
                self.journal.replace_journal(entry_id, user_id, draft)
            except NotFoundError:
                logger.warning(
                    "Journal entry %s linked to transaction %s is missing; posting a new one",
                    entry_id,
                    transaction_id,
                )
                entry_id = None
        if entry_id is None:
            entry = self.journal.post_journal(user_id, draft)
            self.db.set_transaction_journal_entry(transaction_id, user_id, entry.id)

        logger.info("Updated transaction %s for user %s", transaction_id, user_id)
        return self._require_transaction(transaction_id, user_id)

    def delete_transaction(self, transaction_id: int, user_id: str) -> None:
        """Delete a transaction and its linked journal entry.

        Raises:
            NotFoundError: If the transaction doesn't exist for this user
        """
        document = self.db.get_transaction_document(transaction_id, user_id)
        if document is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if not self.db.delete_transaction(transaction_id, user_id):
            raise NotFoundError(transaction_not_found(transaction_id))

        entry_id = document.get("journal_entry_id")
        if entry_id is not None:
            try:
                self.journal.delete_journal(entry_id, user_id)
            except NotFoundError:
                logger.warning(
                    "Journal entry %s linked to deleted transaction %s was already gone",
                    entry_id,
                    transaction_id,
                )
        logger.info("Deleted transaction %s for user %s", transaction_id, user_id)

    def get_transaction(self, transaction_id: int, user_id: str) -> Optional[Transaction]:
        """Get a transaction, or None if not found or undecodable."""
        document = self.db.get_transaction_document(transaction_id, user_id)
        if document is None:
            return None
        return normalize_transaction(document)

    def _require_transaction(self, transaction_id: int, user_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id, user_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def list_transactions(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        category: Optional[str] = None,
        finance_type: Union[FinanceType, str, None] = None,
    ) -> list[Transaction]:
        """List decodable transactions, newest first.

        Args:
            user_id: Owner
            start: Optional inclusive lower date bound
            end: Optional exclusive upper date bound
            category: Optional exact category filter
            finance_type: Optional finance type filter
        """
        if finance_type is not None:
            finance_type = _require_enum(FinanceType, finance_type, "finance type").value
        documents = self.db.list_transaction_documents(
            user_id, category=category, finance_type=finance_type, start=start, end=end
        )
        transactions = [txn for txn in map(normalize_transaction, documents) if txn is not None]
        transactions.sort(key=lambda txn: (txn.date, txn.id), reverse=True)
        return transactions

    def list_recent_transactions(self, user_id: str, limit: int = 10) -> list[Transaction]:
        """Return the ``limit`` most recent transactions by date."""
        return self.list_transactions(user_id)[:limit]

    def delete_transactions_by_category(
        self,
        user_id: str,
        category: str,
        period: Union[PeriodKey, str],
        finance_type: Union[FinanceType, str, None] = None,
        reference: Optional[datetime] = None,
    ) -> int:
        """Delete every transaction of a category within a period.

        Linked journal entries are deleted with their transactions.

        Returns:
            Number of deleted transactions

        Raises:
            ValidationError: If the category is empty or the period is unknown
        """
        if not _clean_text(category):
            raise ValidationError("Category is required")
        try:
            period_range = get_period_range(period, reference)
        except ValueError as e:
            raise ValidationError(str(e))
        if finance_type is not None:
            finance_type = _require_enum(FinanceType, finance_type, "finance type").value

        documents = self.db.list_transaction_documents(
            user_id,
            category=category,
            finance_type=finance_type,
            start=period_range.start,
            end=period_range.end,
        )
        for document in documents:
            self.delete_transaction(document["id"], user_id)
        return len(documents)

    def backfill_journal_entries(self, user_id: str) -> int:
        """Post and link journal entries for transactions that have none.

        Undecodable transactions are skipped.

        Returns:
            Number of transactions that received a journal entry
        """
        count = 0
        for document in self.db.list_transaction_documents(user_id, unlinked_only=True):
            transaction = normalize_transaction(document)
            if transaction is None or transaction.amount <= 0:
                continue
            entry = self.journal.post_journal(user_id, derive_journal_draft(transaction))
            self.db.set_transaction_journal_entry(transaction.id, user_id, entry.id)
            count += 1
        logger.info("Backfilled %s journal entries for user %s", count, user_id)
        return count
