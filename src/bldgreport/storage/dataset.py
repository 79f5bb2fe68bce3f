"""Spreadsheet-backed in-memory dataset.

The whole first sheet of the workbook is read into a tuple of row dicts.
A reload replaces the tuple in one assignment; a failed reload leaves the
previous tuple in place.
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from bldgreport.core.errors import SourceUnreadableError
from bldgreport.core.types import LoadResult, RowRecord

logger = logging.getLogger(__name__)

ADDRESS_KEY = "Address"


def _to_native(value: Any) -> Any:
    """Convert a pandas/numpy cell into a plain Python scalar, or None if empty."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def read_first_sheet(path: str | Path) -> list[RowRecord]:
    """Read the first sheet of a workbook into row dicts.

    Header cells become keys verbatim. Empty cells are left out of the row
    rather than stored as NaN, and date cells come back as datetime.

    Raises:
        SourceUnreadableError: file missing, not a workbook, or unreadable.
    """
    path = Path(path)
    if not path.exists():
        raise SourceUnreadableError(f"spreadsheet not found: {path}")
    try:
        df = pd.read_excel(path, sheet_name=0)
    except Exception as e:
        raise SourceUnreadableError(f"cannot read spreadsheet {path}: {e}") from e

    rows: list[RowRecord] = []
    columns = [str(c) for c in df.columns]
    for raw in df.itertuples(index=False, name=None):
        row: RowRecord = {}
        for col, val in zip(columns, raw):
            native = _to_native(val)
            if native is not None:
                row[col] = native
        if row:
            rows.append(row)
    return rows


class DatasetStore:
    """Owns the process-wide dataset. Pass it by reference to whoever reads it."""

    def __init__(self, records: Iterable[RowRecord] = ()):
        self._records: tuple[RowRecord, ...] = tuple(records)
        self.source: str | None = None
        self.loaded_at: datetime | None = None
        self.last_error: str | None = None

    @classmethod
    def from_records(cls, records: Iterable[RowRecord]) -> "DatasetStore":
        store = cls(records)
        store.loaded_at = datetime.now(timezone.utc)
        return store

    def __len__(self) -> int:
        return len(self._records)

    def load(self, source: str | Path) -> LoadResult:
        """Replace the dataset with the first sheet of `source`.

        Never raises: a failure is logged, recorded in last_error, and the
        previous dataset stays in place.
        """
        try:
            records = read_first_sheet(source)
        except SourceUnreadableError as e:
            self.last_error = str(e)
            logger.error("Failed to load Excel: %s", e, extra={"source": str(source)})
            return LoadResult(ok=False, record_count=len(self._records))

        self._records = tuple(records)
        self.source = str(source)
        self.loaded_at = datetime.now(timezone.utc)
        self.last_error = None
        logger.info(
            "Excel data loaded: %d records", len(records),
            extra={"source": str(source), "record_count": len(records)},
        )
        return LoadResult(ok=True, record_count=len(records))

    def snapshot(self) -> tuple[RowRecord, ...]:
        """Return the current dataset. Rows are shared, not copied."""
        return self._records

    def find_by_address(self, address: str) -> RowRecord | None:
        """Case-insensitive, trimmed exact match on the Address column."""
        wanted = address.strip().lower()
        for row in self._records:
            candidate = row.get(ADDRESS_KEY)
            if isinstance(candidate, str) and candidate.strip().lower() == wanted:
                return row
        return None
