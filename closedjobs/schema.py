from datetime import date
from typing import Any, Dict, List, Optional

REQUIRED_STR_FIELDS = ["jobNumber", "clientName"]
OPTIONAL_STR_FIELDS = ["invoiceNumber"]
DATE_FIELDS = ["dateInvoiced"]
NUMBER_FIELDS = ["amount"]
BOOL_FIELDS = ["jobClosed"]

DRAFT_FIELDS = [
    "jobNumber",
    "clientName",
    "dateInvoiced",
    "invoiceNumber",
    "amount",
    "jobClosed",
]

TRUE_WORDS = {"1", "true", "yes", "y", "on", "closed"}
FALSE_WORDS = {"0", "false", "no", "n", "off", "open", ""}


def empty_draft() -> Dict[str, Any]:
    """Field values of a blank job entry form."""
    return {
        "jobNumber": "",
        "clientName": "",
        "dateInvoiced": None,
        "invoiceNumber": "",
        "amount": None,
        "jobClosed": False,
    }


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Presence checks only, the same as the form's required inputs.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    return errors


def _parse_date(field: str, value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        # Remote stores may hand back a full timestamp
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Field '{field}' must be a date (YYYY-MM-DD), got {value!r}")


def _parse_amount(field: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Field '{field}' must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "").lstrip("$")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"Field '{field}' must be a number, got {value!r}")


def _parse_bool(field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in TRUE_WORDS:
        return True
    if text in FALSE_WORDS:
        return False
    raise ValueError(f"Field '{field}' must be yes/no, got {value!r}")


def coerce_field(field: str, value: Any) -> Any:
    """
    Convert a user-supplied value to the type stored for a job field.

    Raises:
        ValueError: Unknown field or a value that cannot be converted
    """
    if field not in DRAFT_FIELDS:
        raise ValueError(f"Unknown job field: {field}")
    if field in DATE_FIELDS:
        return _parse_date(field, value)
    if field in NUMBER_FIELDS:
        return _parse_amount(field, value)
    if field in BOOL_FIELDS:
        return _parse_bool(field, value)
    return "" if value is None else str(value)


def to_wire(fields: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-safe copy of job fields (dates as ISO strings)."""
    wire = {}
    for k, v in fields.items():
        wire[k] = v.isoformat() if isinstance(v, date) else v
    return wire


def from_wire(row: Dict[str, Any]) -> Dict[str, Any]:
    """Typed copy of a row returned by a remote store."""
    record = dict(row)
    for f in DATE_FIELDS:
        if isinstance(record.get(f), str):
            record[f] = _parse_date(f, record[f])
    for f in NUMBER_FIELDS:
        if isinstance(record.get(f), str):
            record[f] = _parse_amount(f, record[f])
    return record
