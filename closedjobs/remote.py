"""Supabase (PostgREST) record store over plain HTTP."""

from typing import Any, Dict, List, Optional

import requests

from .logger import get_logger
from .retry import RetryError, exponential_backoff
from .schema import from_wire, to_wire
from .storage import RecordStore, StoreError

logger = get_logger()


class RestRecordStore(RecordStore):
    """
    Record store backed by a Supabase table through its REST endpoint.

    Args:
        base_url: Project URL, e.g. https://<ref>.supabase.co
        api_key: anon or service key, sent as apikey and bearer token
        table: Table name (default: jobs_closed)
        timeout: Per-request timeout in seconds
        retries: Extra attempts on connection errors and timeouts
        session: Optional requests.Session to reuse
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "jobs_closed",
        timeout: float = 15.0,
        retries: int = 0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.table = table
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        self._send = exponential_backoff(
            max_retries=retries,
            base_delay=1.0,
            exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError),
            on_retry=self._log_retry,
        )(self._send_once)

    def _log_retry(self, attempt, error, delay):
        logger.warning("Retrying record store request", table=self.table, attempt=attempt, delay=delay, error=str(error))

    def _send_once(self, method: str, params=None, json=None, headers=None) -> requests.Response:
        return self.session.request(
            method,
            self.endpoint,
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )

    def _request(self, method: str, params=None, json=None, headers=None) -> requests.Response:
        """Send one request, mapping every transport or HTTP failure to StoreError."""
        logger.record_store_call()
        try:
            resp = self._send(method, params=params, json=json, headers=headers)
            resp.raise_for_status()
            return resp
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            detail = e.response.text[:200] if e.response is not None else ""
            logger.debug("Record store rejected request", method=method, table=self.table, status=status, detail=detail)
            raise StoreError(f"{method} {self.table} failed ({status}): {detail}") from e
        except RetryError as e:
            raise StoreError(f"{method} {self.table} failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise StoreError(f"{method} {self.table} request error: {e}") from e

    def _rows(self, resp: requests.Response) -> Any:
        if not resp.content:
            return []
        try:
            body = resp.json()
        except ValueError as e:
            raise StoreError(f"Malformed response from {self.table}: {e}") from e
        if isinstance(body, list):
            try:
                return [from_wire(row) if isinstance(row, dict) else row for row in body]
            except ValueError as e:
                raise StoreError(f"Malformed row from {self.table}: {e}") from e
        return body

    def select_all(self) -> List[Dict[str, Any]]:
        rows = self._rows(self._request("GET", params={"select": "*"}))
        if not isinstance(rows, list):
            raise StoreError(f"Expected a list of rows from {self.table}, got {type(rows).__name__}")
        return rows

    def select_count(self) -> int:
        resp = self._request(
            "HEAD",
            params={"select": "id"},
            headers={"Prefer": "count=exact"},
        )
        content_range = resp.headers.get("Content-Range", "")
        total = content_range.rpartition("/")[2]
        if not total.isdigit():
            raise StoreError(f"No row count in response (Content-Range: {content_range!r})")
        return int(total)

    def insert(self, fields: Dict[str, Any]) -> Any:
        resp = self._request(
            "POST",
            json=[to_wire(fields)],
            headers={"Prefer": "return=representation"},
        )
        return self._rows(resp)

    def update(self, record_id: Any, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
        resp = self._request(
            "PATCH",
            params={"id": f"eq.{record_id}"},
            json=to_wire(fields),
            headers={"Prefer": "return=representation"},
        )
        return self._rows(resp)

    def delete_by_id(self, record_id: Any) -> None:
        self._request("DELETE", params={"id": f"eq.{record_id}"})

    def delete_range(self, order_by: str, offset: int, limit: int) -> None:
        window = self._rows(self._request(
            "GET",
            params={
                "select": "id",
                "order": f"{order_by}.asc",
                "offset": str(offset),
                "limit": str(limit),
            },
        ))
        ids = [str(row["id"]) for row in window if isinstance(row, dict) and "id" in row]
        if not ids:
            return
        self._request("DELETE", params={"id": f"in.({','.join(ids)})"})

    def close(self) -> None:
        self.session.close()
