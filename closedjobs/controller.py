"""
Job list controller.

Owns the in-memory list of closed jobs and the entry form draft, and
turns each user action into record store calls followed by a local
reconciliation of the list. The list is a cache of the remote table,
never the source of truth.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .cleanup import RecountError, purge_rows
from .logger import get_logger
from .schema import DRAFT_FIELDS, coerce_field, empty_draft, validate_job
from .storage import RecordStore, StoreError

logger = get_logger()

# Error kinds
FETCH_ERROR = "fetch"
WRITE_ERROR = "write"
DELETE_ERROR = "delete"
COUNT_ERROR = "count"
VALIDATION_ERROR = "validation"

MSG_LOADED = "Jobs loaded."
MSG_FETCH_FAILED = "Error fetching jobs. Please try again."
MSG_ADDED = "Job added successfully!"
MSG_ADD_FAILED = "Error adding job. Please try again."
MSG_UPDATED = "Job updated successfully!"
MSG_UPDATE_FAILED = "Error updating job. Please try again."
MSG_DELETED = "Job deleted successfully!"
MSG_DELETE_FAILED = "Error deleting job. Please try again."
MSG_ALL_DELETED = "All jobs deleted successfully!"
MSG_DELETE_ALL_FAILED = "Error deleting all jobs. Please try again."
MSG_COUNT_FAILED = "Error counting jobs. Please try again."


@dataclass
class JobListState:
    """Everything the job form shows: the list, the draft and the last status."""

    jobs: List[Dict[str, Any]] = field(default_factory=list)
    draft: Dict[str, Any] = field(default_factory=empty_draft)
    editing: Optional[Dict[str, Any]] = None
    message: str = ""
    error: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing is not None


class JobListController:
    """
    Drives a JobListState against a RecordStore.

    Every remote operation returns True on success and False on a
    reported failure; failures never raise. Observers registered with
    subscribe() are called with the state after each change.
    """

    def __init__(self, store: RecordStore, batch_size: int = 100):
        self.store = store
        self.batch_size = batch_size
        self._state = JobListState()
        self._observers: List[Callable[[JobListState], None]] = []

    @property
    def state(self) -> JobListState:
        return self._state

    @property
    def jobs(self) -> List[Dict[str, Any]]:
        return list(self._state.jobs)

    def subscribe(self, callback: Callable[[JobListState], None]) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._observers):
            callback(self._state)

    def _succeed(self, operation: str, message: str) -> bool:
        self._state.message = message
        self._state.error = None
        logger.record_operation_success(operation)
        self._notify()
        return True

    def _fail(self, operation: str, kind: str, message: str, cause: Any = None) -> bool:
        self._state.message = message
        self._state.error = kind
        logger.record_operation_failure(operation, kind)
        logger.error(f"{operation} failed", kind=kind, error=str(cause) if cause is not None else None)
        self._notify()
        return False

    # Local draft handling

    def set_draft_field(self, field_name: str, value: Any) -> None:
        """Set one draft field, coercing user text to the field's type."""
        self._state.draft[field_name] = coerce_field(field_name, value)
        self._notify()

    def begin_edit(self, record: Dict[str, Any]) -> None:
        """Load a record into the draft and make it the edit target."""
        draft = empty_draft()
        for key in DRAFT_FIELDS:
            if record.get(key) is not None:
                draft[key] = record[key]
        self._state.draft = draft
        self._state.editing = dict(record)
        self._notify()

    def cancel_edit(self) -> None:
        self._clear_draft()
        self._notify()

    def _clear_draft(self):
        self._state.draft = empty_draft()
        self._state.editing = None

    def find(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Local record whose id matches, compared as text."""
        for job in self._state.jobs:
            if str(job.get("id")) == str(record_id):
                return job
        return None

    # Remote operations

    def load_all(self) -> bool:
        """Replace the local list with every row in the store."""
        logger.record_operation_attempt("load_all")
        try:
            rows = self.store.select_all()
        except StoreError as e:
            return self._fail("load_all", FETCH_ERROR, MSG_FETCH_FAILED, e)
        self._state.jobs = list(rows)
        logger.debug("Jobs loaded", count=len(rows))
        return self._succeed("load_all", MSG_LOADED)

    def submit(self) -> bool:
        """
        Save the draft: update the edit target if one is set, else insert.

        A draft missing required fields is rejected before any store call
        and kept so it can be completed. Otherwise the draft and edit
        target are cleared once the store call completes, whatever the
        outcome.
        """
        draft = dict(self._state.draft)
        errors = validate_job(draft)
        if errors:
            logger.record_operation_attempt("submit")
            return self._fail("submit", VALIDATION_ERROR, "; ".join(errors), errors)

        if self._state.editing is not None:
            return self._submit_update(draft)
        return self._submit_insert(draft)

    def _submit_update(self, draft: Dict[str, Any]) -> bool:
        target = self._state.editing
        record_id = target.get("id")
        logger.record_operation_attempt("update")
        try:
            self.store.update(record_id, draft)
        except StoreError as e:
            self._clear_draft()
            return self._fail("update", WRITE_ERROR, MSG_UPDATE_FAILED, e)

        merged = {**target, **draft}
        self._state.jobs = [merged if job.get("id") == record_id else job for job in self._state.jobs]
        self._clear_draft()
        logger.info("Job updated", id=record_id, jobNumber=draft["jobNumber"])
        return self._succeed("update", MSG_UPDATED)

    def _submit_insert(self, draft: Dict[str, Any]) -> bool:
        logger.record_operation_attempt("insert")
        try:
            data = self.store.insert(draft)
        except StoreError as e:
            self._clear_draft()
            return self._fail("insert", WRITE_ERROR, MSG_ADD_FAILED, e)

        self._clear_draft()
        # The row may exist remotely even when the response is unusable
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            return self._fail("insert", WRITE_ERROR, MSG_ADD_FAILED, f"Response is not a list of rows: {data!r}")

        self._state.jobs = self._state.jobs + list(data)
        logger.info("Job added", ids=[row.get("id") for row in data], jobNumber=draft["jobNumber"])
        return self._succeed("insert", MSG_ADDED)

    def delete_one(self, record_id: Any) -> bool:
        """
        Delete one row by id and drop it from the local list.

        An id matching a local record as text is replaced by that
        record's stored id before the store call.
        """
        local = self.find(record_id)
        if local is not None:
            record_id = local.get("id")
        logger.record_operation_attempt("delete_one")
        try:
            self.store.delete_by_id(record_id)
        except StoreError as e:
            return self._fail("delete_one", DELETE_ERROR, MSG_DELETE_FAILED, e)

        self._state.jobs = [job for job in self._state.jobs if job.get("id") != record_id]
        if self._state.editing is not None and self._state.editing.get("id") == record_id:
            self._clear_draft()
        logger.info("Job deleted", id=record_id)
        return self._succeed("delete_one", MSG_DELETED)

    def delete_all(self) -> bool:
        """
        Delete every row in the store, then clear the local list.

        Not atomic: on a failed batch the rows already purged stay gone,
        the local list is left as it was and the error is reported.
        """
        logger.record_operation_attempt("delete_all")
        try:
            total = self.store.select_count()
        except StoreError as e:
            return self._fail("delete_all", COUNT_ERROR, MSG_COUNT_FAILED, e)

        try:
            purge_rows(self.store, total, self.batch_size)
        except RecountError as e:
            return self._fail("delete_all", COUNT_ERROR, MSG_COUNT_FAILED, e)
        except StoreError as e:
            return self._fail("delete_all", DELETE_ERROR, MSG_DELETE_ALL_FAILED, e)

        self._state.jobs = []
        if self._state.editing is not None:
            self._clear_draft()
        return self._succeed("delete_all", MSG_ALL_DELETED)
