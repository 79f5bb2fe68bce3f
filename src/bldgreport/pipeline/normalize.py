"""Replace empty-like report values with the "N/A" sentinel."""

from collections.abc import Mapping
from typing import Any

from bldgreport.core.types import SENTINEL, Absent, FieldValue, Invalid, Present
from bldgreport.pipeline.mapper import classify

EMPTY_LIKE = frozenset({"", "undefined", "null", "nan"})


def normalize_value(value: FieldValue) -> Any:
    """Resolve one field variant to its report value."""
    if isinstance(value, Present):
        if str(value.value).strip().lower() in EMPTY_LIKE:
            return SENTINEL
        return value.value
    if isinstance(value, (Absent, Invalid)):
        return SENTINEL
    raise TypeError(f"unexpected field value: {value!r}")


def normalize(mapped: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize every field of a mapped record.

    Values may be FieldValue variants (from map_record) or raw scalars,
    which are classified first.
    """
    return {key: normalize_value(classify(value)) for key, value in mapped.items()}
