"""FISP compliance determination for a single building row.

Rules are checked in order and the first match wins:

1. Status "UNSAFE" or "No Report Filed"             -> Non-Compliant
2. Status "SWARMP", or last filing mentions SWARMP  -> In Compliance
3. Filing due date strictly before now              -> Non-Compliant
4. Anything else                                    -> In Compliance

A due date that cannot be read as a date never satisfies rule 3. Whether
such rows land on rule 4 or are flagged Non-Compliant is an explicit
policy (UnparseableDuePolicy) rather than an accident of date parsing.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from bldgreport.core.types import ComplianceStatus, RowRecord, UnparseableDuePolicy

logger = logging.getLogger(__name__)

STATUS_FIELD = "FISP Compliance Status"
LAST_FILING_FIELD = "FISP Last Filing Status"
DUE_FIELD = "FISP Filing Due"

NON_COMPLIANT_STATUSES = frozenset({"UNSAFE", "No Report Filed"})
SWARMP = "SWARMP"


def parse_due_date(value: Any) -> datetime | None:
    """Read a due-date cell as a naive datetime, or None if it is not a date.

    Spreadsheet date cells arrive as datetime already. Strings are parsed
    leniently ("2024-01-15", "01/15/2024", "Jan 15 2024") over the full
    datetime range, so "1500-01-01" is a past date rather than garbage.
    Numbers, booleans and anything else are not treated as dates.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def evaluate(
    row: RowRecord,
    now: datetime | None = None,
    unparseable_policy: UnparseableDuePolicy | str = UnparseableDuePolicy.IN_COMPLIANCE,
) -> ComplianceStatus:
    """Classify one building row as In Compliance or Non-Compliant."""
    status = row.get(STATUS_FIELD)
    last_filing = row.get(LAST_FILING_FIELD)

    if status in NON_COMPLIANT_STATUSES:
        return ComplianceStatus.NON_COMPLIANT

    if status == SWARMP or (isinstance(last_filing, str) and SWARMP in last_filing):
        return ComplianceStatus.IN_COMPLIANCE

    raw_due = row.get(DUE_FIELD)
    due = parse_due_date(raw_due)
    if due is None:
        policy = UnparseableDuePolicy(unparseable_policy)
        if raw_due is not None and str(raw_due).strip():
            logger.debug(
                "Unparseable %s %r for %s, applying policy %s",
                DUE_FIELD, raw_due, row.get("Address"), policy.value,
            )
        if policy is UnparseableDuePolicy.NON_COMPLIANT:
            return ComplianceStatus.NON_COMPLIANT
        return ComplianceStatus.IN_COMPLIANCE

    if due < (now or datetime.now()):
        return ComplianceStatus.NON_COMPLIANT
    return ComplianceStatus.IN_COMPLIANCE
