"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or an invariant-violating journal."""


class NotFoundError(DomainError):
    """Requested record does not exist or is not owned by the user."""


class ConfigurationError(DomainError):
    """Static reference data is inconsistent (e.g. an unknown account code)."""


class DecodeError(DomainError):
    """A stored document could not be decoded into a domain entity."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def journal_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def adjustment_not_found(adjustment_id: int) -> str:
    """Return message for missing report adjustment."""
    return f"Report adjustment {adjustment_id} not found"


def unknown_account(account_code: str) -> str:
    """Return message for an account code absent from the chart of accounts."""
    return f"Account {account_code} is not defined in chart of accounts"


def unknown_preset(preset_key: str) -> str:
    """Return message for an unsupported transaction preset."""
    return f"Unsupported transaction preset '{preset_key}'"


def journal_out_of_balance(total_debit, total_credit) -> str:
    """Return message for a journal whose debits and credits disagree."""
    return f"Journal is out of balance. Debit {total_debit} vs Credit {total_credit}"
