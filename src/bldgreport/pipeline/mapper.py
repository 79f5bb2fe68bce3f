"""Project a raw spreadsheet row onto the fixed report schema."""

import math
from typing import Any

import pandas as pd

from bldgreport.config import DEFAULT_CONTACT_EMAIL, DEFAULT_CONTACT_PHONE
from bldgreport.core.types import (
    Absent,
    ComplianceStatus,
    FieldValue,
    Invalid,
    Present,
    RowRecord,
    UnparseableDuePolicy,
)
from bldgreport.pipeline.compliance import STATUS_FIELD, evaluate

# Report fields, in template order. Keys are the «placeholder» names.
OUTPUT_FIELDS: tuple[str, ...] = (
    "Address",
    "Building_OwnerManager",
    "Use Type",
    "Block",
    "BIN",
    "Borough",
    "Year Built",
    "M Floors",
    "Approx_Sq_Ft",
    "Landmark",
    "Parking Garage (Yes/No)",
    "FISP Compliance Status",
    "Sub",
    "FISP Filing Due",
    "FISP Last Filing Status",
    "FISP Cycle Filing Window",
    "LL126 Compliance Status",
    "LL126 Cycle",
    "LL126 Previous Filing Status",
    "LL126 SREM Recommended Date",
    "LL126 Filing Window",
    "LL126 Filing Due",
    "LL126 Next Steps",
    "LL126 Parapet Compliance Status",
    "LL84 Compliance Status",
    "LL84 Filing Due",
    "LL84 Next Steps",
    "LL87 Compliance Status",
    "LL87 Filing Due",
    "LL87 Compliance Year",
    "LL87 Next Steps",
    "LL88 Compliance Status",
    "LL88 Filing Due",
    "LL88 Notes",
    "LL97 Compliance Status",
    "LL97 Filing Due",
    "LL97 Next Steps",
    "Contact Email",
    "Contact Phone",
)

# Placeholder names that differ from the spreadsheet header they read.
SOURCE_ALIASES: dict[str, str] = {
    "Building_OwnerManager": "Building Owner/Manager",
    "Approx_Sq_Ft": "Approx Sq Ft",
}

CONTACT_EMAIL_FIELD = "Contact Email"
CONTACT_PHONE_FIELD = "Contact Phone"


def _is_not_a_number(value: Any) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    return value is pd.NaT


def classify(value: Any) -> FieldValue:
    """Wrap a raw cell value as Present, Absent or Invalid."""
    if isinstance(value, (Present, Absent, Invalid)):
        return value
    if value is None:
        return Absent()
    if _is_not_a_number(value):
        return Invalid(value)
    return Present(value)


def _is_falsy(value: Any) -> bool:
    """Missing, None, empty string, zero or NaN."""
    if value is None or _is_not_a_number(value):
        return True
    return not value


def _with_default(value: Any, default: str) -> Any:
    return default if _is_falsy(value) else value


def map_record(
    row: RowRecord,
    *,
    contact_email: str = DEFAULT_CONTACT_EMAIL,
    contact_phone: str = DEFAULT_CONTACT_PHONE,
    compliance: ComplianceStatus | str | None = None,
    unparseable_policy: UnparseableDuePolicy | str = UnparseableDuePolicy.IN_COMPLIANCE,
) -> dict[str, FieldValue]:
    """Build the report record for one row.

    Every key in OUTPUT_FIELDS is present in the result. The compliance
    status is always computed, never copied from the sheet, and missing
    contact details fall back to the configured defaults.
    """
    if compliance is None:
        compliance = evaluate(row, unparseable_policy=unparseable_policy)
    compliance_label = compliance.value if isinstance(compliance, ComplianceStatus) else compliance

    mapped: dict[str, FieldValue] = {}
    for field in OUTPUT_FIELDS:
        value = row.get(SOURCE_ALIASES.get(field, field))
        if field == STATUS_FIELD:
            mapped[field] = Present(compliance_label)
        elif field == CONTACT_EMAIL_FIELD:
            mapped[field] = classify(_with_default(value, contact_email))
        elif field == CONTACT_PHONE_FIELD:
            mapped[field] = classify(_with_default(value, contact_phone))
        else:
            mapped[field] = classify(value)
    return mapped
