"""Printable and CSV renderings of the job list."""

import csv
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

COLUMNS: List[Tuple[str, str]] = [
    ("id", "ID"),
    ("jobNumber", "Job Number"),
    ("clientName", "Client Name"),
    ("dateInvoiced", "Date Invoiced"),
    ("invoiceNumber", "Invoice Number"),
    ("amount", "Amount"),
    ("jobClosed", "Closed"),
]


def format_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if key == "amount":
        try:
            return f"{float(value):.2f}"
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _cells(jobs: Iterable[Dict[str, Any]]) -> List[List[str]]:
    return [[format_value(key, job.get(key)) for key, _ in COLUMNS] for job in jobs]


def render_table(jobs: Iterable[Dict[str, Any]], title: str = "Closed Jobs") -> str:
    """Fixed-width text table suitable for printing."""
    headers = [label for _, label in COLUMNS]
    rows = _cells(jobs)
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells):
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    out = [title, "", line(headers), line("-" * w for w in widths)]
    if rows:
        out.extend(line(row) for row in rows)
    else:
        out.append("No jobs.")
    return "\n".join(out) + "\n"


def write_csv(jobs: Iterable[Dict[str, Any]], path: Path) -> int:
    """
    Write jobs to a CSV file with a header row.

    Returns:
        Number of job rows written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = _cells(jobs)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([label for _, label in COLUMNS])
        writer.writerows(rows)
    return len(rows)
