"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
import time
from datetime import datetime
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.adjustments import AdjustmentService
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.reports import ReportService
from ledgerkit.domain.templates import TemplateService
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.logging_config import reset_logging

USER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def clean_logging():
    """Remove the CLI's log handler between tests."""
    yield
    reset_logging()


@pytest.fixture
def user_id():
    return USER


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def adjustment_service(temp_db):
    """Create an AdjustmentService with a temporary database."""
    return AdjustmentService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def template_service(temp_db):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db)


@pytest.fixture
def reference_date():
    """Fixed 'now' for period-relative tests."""
    return datetime(2026, 5, 15, 12, 0)


@pytest.fixture
def utc_plus_seven(monkeypatch):
    """Run the test with the local timezone set to UTC+7."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "WIB-7")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
