"""Core domain types shared across all bldgreport modules."""

from bldgreport.core.errors import (
    AddressMissingError,
    AddressNotFoundError,
    BldgReportError,
    ReportRenderError,
    SourceUnreadableError,
)
from bldgreport.core.types import (
    SENTINEL,
    Absent,
    ComplianceStatus,
    FieldValue,
    Invalid,
    LoadResult,
    Present,
    RowRecord,
    UnparseableDuePolicy,
)

__all__ = [
    "SENTINEL",
    "Absent",
    "AddressMissingError",
    "AddressNotFoundError",
    "BldgReportError",
    "ComplianceStatus",
    "FieldValue",
    "Invalid",
    "LoadResult",
    "Present",
    "ReportRenderError",
    "RowRecord",
    "SourceUnreadableError",
    "UnparseableDuePolicy",
]
