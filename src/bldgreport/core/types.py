"""Domain types for the bldgreport compliance service.

Shared dataclasses live here so the storage, pipeline and API layers
import from a single place.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# A spreadsheet row: column header -> scalar (str, int, float, datetime).
RowRecord = dict[str, Any]

SENTINEL = "N/A"


# ---------------------------------------------------------------------------
# Compliance labels
# ---------------------------------------------------------------------------

class ComplianceStatus(str, Enum):
    """Output of the FISP compliance evaluator."""

    IN_COMPLIANCE = "In Compliance"
    NON_COMPLIANT = "Non-Compliant"


class UnparseableDuePolicy(str, Enum):
    """What to do when "FISP Filing Due" cannot be read as a date."""

    IN_COMPLIANCE = "in_compliance"
    NON_COMPLIANT = "non_compliant"


# ---------------------------------------------------------------------------
# Field value variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Present:
    """A source value that exists and is a usable scalar."""

    value: Any


@dataclass(frozen=True)
class Absent:
    """The source row has no value for the field."""


@dataclass(frozen=True)
class Invalid:
    """The source value is a numeric that is not a number (NaN, NaT)."""

    raw: Any = None


FieldValue = Present | Absent | Invalid


# ---------------------------------------------------------------------------
# Dataset types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LoadResult:
    """Outcome of a dataset (re)load."""

    ok: bool
    record_count: int
