"""
Bulk purge of the closed jobs table.

Rows are removed in fixed-size windows ordered by id, always starting at
offset 0, and the store is re-counted after every window. Each delete
shifts the remaining rows forward, so the window never advances.
"""

import math
from typing import Tuple

from .logger import get_logger
from .storage import RecordStore, StoreError

logger = get_logger()


class RecountError(StoreError):
    """Raised when the row count between batches cannot be read."""
    pass


def purge_rows(store: RecordStore, total: int, batch_size: int = 100) -> Tuple[int, int]:
    """
    Delete every row of the store in batches.

    Args:
        store: Record store to empty
        total: Row count taken before the purge started
        batch_size: Rows per delete window

    Returns:
        Tuple of (rows_before, batches_issued)

    Raises:
        RecountError: If the count after a batch fails
        StoreError: On the first failed batch, or if rows keep
            appearing after the expected number of batches
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    max_batches = math.ceil(total / batch_size) + 1
    remaining = total
    batches = 0

    while remaining > 0:
        if batches >= max_batches:
            raise StoreError(
                f"{remaining} rows still present after {batches} batches of {batch_size}"
            )
        store.delete_range("id", 0, batch_size)
        batches += 1
        try:
            remaining = store.select_count()
        except StoreError as e:
            raise RecountError(f"Count after batch {batches} failed: {e}") from e
        logger.debug("Purge batch complete", batch=batches, remaining=remaining)

    logger.info(
        f"Purge complete: {total} rows removed in {batches} batches",
        rows_before=total,
        batches=batches,
        batch_size=batch_size,
    )
    return (total, batches)
