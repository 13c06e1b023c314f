"""
Record store contract and the local SQLite implementation.

Every store speaks in job record dicts keyed by the remote column
names (see schema.DRAFT_FIELDS) plus the store-assigned "id".
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import ClosedJob, get_engine, init_database
from .env import Settings
from .logger import get_logger

logger = get_logger()


class StoreError(Exception):
    """Raised when a record store call fails or is rejected."""
    pass


class RecordStore(ABC):
    """One remote table of job records, keyed by an opaque id."""

    @abstractmethod
    def select_all(self) -> List[Dict[str, Any]]:
        """Every row, in the store's order."""

    @abstractmethod
    def select_count(self) -> int:
        """Total number of rows."""

    @abstractmethod
    def insert(self, fields: Dict[str, Any]) -> Any:
        """Insert one row; returns what the store sent back (normally a list of rows)."""

    @abstractmethod
    def update(self, record_id: Any, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Update the row with this id; returns the updated rows."""

    @abstractmethod
    def delete_by_id(self, record_id: Any) -> None:
        """Delete the row with this id."""

    @abstractmethod
    def delete_range(self, order_by: str, offset: int, limit: int) -> None:
        """Delete up to limit rows starting at offset, ordered ascending by order_by."""

    def close(self) -> None:
        """Release connections held by the store."""


class SqlRecordStore(RecordStore):
    """Record store over a local SQLite file via SQLAlchemy."""

    ORDER_COLUMNS = {"id": ClosedJob.id, "created_at": ClosedJob.created_at}

    def __init__(self, db_path: Path):
        init_database(db_path)
        self.db_path = db_path
        self.engine = get_engine(db_path)
        self.Session = sessionmaker(bind=self.engine)

    def _run(self, action: str, fn):
        logger.record_store_call()
        try:
            with self.Session() as session:
                return fn(session)
        except SQLAlchemyError as e:
            logger.debug(f"SQLite {action} failed", db=str(self.db_path), error=str(e))
            raise StoreError(f"{action} failed: {e}") from e

    def select_all(self) -> List[Dict[str, Any]]:
        def fn(session):
            rows = session.execute(select(ClosedJob).order_by(ClosedJob.id)).scalars().all()
            return [row.to_record() for row in rows]
        return self._run("select", fn)

    def select_count(self) -> int:
        def fn(session):
            return session.execute(select(func.count()).select_from(ClosedJob)).scalar_one()
        return self._run("count", fn)

    def insert(self, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
        def fn(session):
            row = ClosedJob()
            row.apply(fields)
            session.add(row)
            session.commit()
            return [row.to_record()]
        return self._run("insert", fn)

    def update(self, record_id: Any, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
        def fn(session):
            row = session.get(ClosedJob, record_id)
            if row is None:
                return []
            row.apply(fields)
            session.commit()
            return [row.to_record()]
        return self._run("update", fn)

    def delete_by_id(self, record_id: Any) -> None:
        def fn(session):
            session.execute(delete(ClosedJob).where(ClosedJob.id == record_id))
            session.commit()
        self._run("delete", fn)

    def delete_range(self, order_by: str, offset: int, limit: int) -> None:
        column = self.ORDER_COLUMNS.get(order_by)
        if column is None:
            raise StoreError(f"Cannot order by {order_by!r}")

        def fn(session):
            window = select(ClosedJob.id).order_by(column).offset(offset).limit(limit)
            ids = session.execute(window).scalars().all()
            if ids:
                session.execute(delete(ClosedJob).where(ClosedJob.id.in_(ids)))
                session.commit()
        self._run("range delete", fn)

    def close(self) -> None:
        self.engine.dispose()


def open_store(settings: Settings) -> RecordStore:
    """
    Build the record store named by settings.backend.

    Raises:
        ValueError: If the supabase backend is missing its URL or key
    """
    if settings.backend == "supabase":
        from .remote import RestRecordStore
        if not settings.supabase_url:
            raise ValueError("SUPABASE_URL not set. Set env var or add it to .env.")
        if not settings.supabase_key:
            raise ValueError("SUPABASE_KEY not set. Set env var or add it to .env.")
        return RestRecordStore(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.table,
            timeout=settings.timeout,
            retries=settings.retries,
        )
    return SqlRecordStore(settings.db_path)
