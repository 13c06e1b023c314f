"""
Database schema and connection management.

Uses SQLite with SQLAlchemy as the local record store. Column names
match the remote jobs_closed table so rows look the same either way.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Boolean, Column, Date, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

from .schema import DRAFT_FIELDS

Base = declarative_base()


class ClosedJob(Base):
    """Closed job record."""

    __tablename__ = "jobs_closed"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_number = Column("jobNumber", String, nullable=False)
    client_name = Column("clientName", String, nullable=False)
    date_invoiced = Column("dateInvoiced", Date, nullable=True)
    invoice_number = Column("invoiceNumber", String, nullable=True)
    amount = Column(Float, nullable=True)
    job_closed = Column("jobClosed", Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    # remote column name -> attribute name
    FIELD_ATTRS = {
        "jobNumber": "job_number",
        "clientName": "client_name",
        "dateInvoiced": "date_invoiced",
        "invoiceNumber": "invoice_number",
        "amount": "amount",
        "jobClosed": "job_closed",
    }

    def apply(self, fields: dict) -> None:
        """Copy known job fields onto this row, ignoring anything else."""
        for key, value in fields.items():
            attr = self.FIELD_ATTRS.get(key)
            if attr is not None:
                setattr(self, attr, value)

    def to_record(self) -> dict:
        """Row as a job record dict keyed by remote column names."""
        record = {"id": self.id}
        for key in DRAFT_FIELDS:
            record[key] = getattr(self, self.FIELD_ATTRS[key])
        return record


def get_engine(db_path: Path):
    """SQLAlchemy engine for the SQLite file at db_path."""
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()

