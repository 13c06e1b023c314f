"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import date
from typing import Any, Dict, List

from closedjobs.storage import RecordStore, SqlRecordStore, StoreError


class MemoryRecordStore(RecordStore):
    """In-memory record store that can be told to fail specific calls."""

    def __init__(self, rows: List[Dict[str, Any]] = None):
        self.rows = [dict(r) for r in (rows or [])]
        self.next_id = max([r["id"] for r in self.rows], default=0) + 1
        self.fail_on = set()
        self.insert_response = None
        self.fail_range_after = None
        self.range_calls = 0
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise StoreError(f"{name} failed")

    def select_all(self):
        self._check("select_all")
        return [dict(r) for r in self.rows]

    def select_count(self):
        self._check("select_count")
        return len(self.rows)

    def insert(self, fields):
        self._check("insert")
        if self.insert_response is not None:
            return self.insert_response
        row = {"id": self.next_id, **fields}
        self.next_id += 1
        self.rows.append(row)
        return [dict(row)]

    def update(self, record_id, fields):
        self._check("update")
        updated = []
        for row in self.rows:
            if row["id"] == record_id:
                row.update(fields)
                updated.append(dict(row))
        return updated

    def delete_by_id(self, record_id):
        self._check("delete_by_id")
        self.rows = [r for r in self.rows if r["id"] != record_id]

    def delete_range(self, order_by, offset, limit):
        self._check("delete_range")
        if self.fail_range_after is not None and self.range_calls >= self.fail_range_after:
            raise StoreError("range delete failed")
        self.range_calls += 1
        ordered = sorted(self.rows, key=lambda r: r[order_by])
        doomed = {r["id"] for r in ordered[offset:offset + limit]}
        self.rows = [r for r in self.rows if r["id"] not in doomed]


@pytest.fixture
def two_jobs() -> List[Dict[str, Any]]:
    """Two stored job rows."""
    return [
        {"id": 1, "jobNumber": "J1", "clientName": "Acme"},
        {"id": 2, "jobNumber": "J2", "clientName": "Beta"},
    ]


@pytest.fixture
def memory_store(two_jobs) -> MemoryRecordStore:
    return MemoryRecordStore(two_jobs)


@pytest.fixture
def empty_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def full_job_fields() -> Dict[str, Any]:
    """Every job field filled in."""
    return {
        "jobNumber": "J-100",
        "clientName": "Acme Corp",
        "dateInvoiced": date(2025, 3, 14),
        "invoiceNumber": "INV-0042",
        "amount": 1250.5,
        "jobClosed": True,
    }


@pytest.fixture
def sql_store(tmp_path):
    """SQLite-backed store in a temporary directory."""
    store = SqlRecordStore(tmp_path / "jobs.db")
    yield store
    store.close()
