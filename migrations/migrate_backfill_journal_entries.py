#!/usr/bin/env python3
"""Migration script to post journal entries for unjournaled transactions.

Transactions recorded before the journal existed (or left behind by an
interrupted write) have no journal_entry_id. This migration derives a
balanced journal entry for every such transaction, for every user, and links
it back onto the transaction.

Transactions whose date or finance type cannot be decoded are skipped and
reported.

Usage:
    python migrations/migrate_backfill_journal_entries.py [--db-path PATH] [--user USER]
"""

import sys
from pathlib import Path

# Add src to path so we can import ledgerkit modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import inspect
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.database.models import Transaction
from ledgerkit.domain.transaction import TransactionService


def get_users_with_unlinked_transactions(session) -> list[str]:
    """Get the IDs of users that own transactions without a journal entry.

    Args:
        session: SQLAlchemy session

    Returns:
        Sorted list of user IDs
    """
    rows = (
        session.query(Transaction.user_id)
        .filter(Transaction.journal_entry_id.is_(None))
        .distinct()
        .all()
    )
    return sorted(row.user_id for row in rows)


def migrate_database(database_path: str | None = None, user_id: str | None = None) -> int:
    """Backfill journal entries.

    Args:
        database_path: Path to database file. If None, uses default location.
        user_id: Only backfill this user's transactions. If None, all users.

    Returns:
        Number of journal entries posted

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
            if "transactions" not in inspect(engine).get_table_names():
                raise Exception("Table 'transactions' does not exist. Please initialize the database schema first.")
            users = [user_id] if user_id is not None else get_users_with_unlinked_transactions(session)
        finally:
            session.close()

        if not users:
            print("Nothing to migrate: every transaction has a journal entry")
            return 0

        print("Starting migration: backfilling journal entries...")
        service = TransactionService(db)
        total = 0
        for user in users:
            unlinked = len(db.list_transaction_documents(user, unlinked_only=True))
            count = service.backfill_journal_entries(user)
            total += count
            print(f"  User {user}: posted {count} journal entr{'y' if count == 1 else 'ies'}")
            if count < unlinked:
                print(f"    Skipped {unlinked - count} undecodable transaction(s)")

        print(f"\nMigration completed: {total} journal entries posted")
        return total
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Post journal entries for transactions that have none"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Database file path or SQLAlchemy URL (overrides LEDGERKIT_DB_PATH environment variable)",
    )
    parser.add_argument(
        "--user",
        type=str,
        help="Only migrate this user's transactions",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path, user_id=args.user)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
