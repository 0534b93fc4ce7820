"""SQLAlchemy models for ledgerkit database."""

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    # Naive local time, same calendar the reporting periods use
    return datetime.now()


class Transaction(Base):
    """User-entered finance transaction.

    Enum-like columns are plain strings and ``date`` is nullable: rows are
    decoded by the domain layer, which drops rows it cannot read.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    finance_type = Column(String, nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    date = Column(DateTime, nullable=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    status = Column(String, nullable=True)
    cash_flow_type = Column(String, nullable=True)
    counterparty = Column(String, nullable=True)
    preset_key = Column(String, nullable=True)
    preset_label = Column(String, nullable=True)
    journal_entry_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)


class JournalEntry(Base):
    """Double-entry journal posting."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    reference_id = Column(String, nullable=True)
    date = Column(DateTime, nullable=False)
    memo = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.position",
    )

    __table_args__ = (Index("ix_journal_entries_user_reference", "user_id", "reference_id"),)


class JournalLine(Base):
    """Single debit or credit line of a journal entry."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    account_code = Column(String, nullable=False)
    debit = Column(Numeric(18, 2), nullable=False, default=0)
    credit = Column(Numeric(18, 2), nullable=False, default=0)
    description = Column(String, nullable=True)

    # Relationships
    entry = relationship("JournalEntry", back_populates="lines")


class ReportAdjustment(Base):
    """Manual line merged into a financial statement at read time."""

    __tablename__ = "report_adjustments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    report_type = Column(String, nullable=False)
    section = Column(String, nullable=False)
    label = Column(String, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    description = Column(String, nullable=True)
    effective_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
