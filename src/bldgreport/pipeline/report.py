"""Report pipeline: raw row -> mapped record -> normalized values -> .docx bytes."""

import logging
import time
from typing import Any

from bldgreport.config import Settings, settings as default_settings
from bldgreport.core.types import SENTINEL, RowRecord
from bldgreport.observability.tracing import start_span, trace
from bldgreport.pipeline.compliance import evaluate
from bldgreport.pipeline.mapper import map_record
from bldgreport.pipeline.normalize import normalize
from bldgreport.pipeline.render import ReportRenderer

logger = logging.getLogger(__name__)


def prepare_report_values(row: RowRecord, settings: Settings | None = None) -> dict[str, Any]:
    """Map and normalize one row into the flat values the template expects."""
    settings = settings or default_settings
    with start_span("compliance") as span:
        status = evaluate(row, unparseable_policy=settings.unparseable_due_policy)
        span.set_inputs({"address": row.get("Address")})
        span.set_outputs({"status": status.value})
    with start_span("map_normalize") as span:
        mapped = map_record(
            row,
            contact_email=settings.contact_email,
            contact_phone=settings.contact_phone,
            compliance=status,
        )
        values = normalize(mapped)
        span.set_outputs({"na_fields": sum(1 for v in values.values() if v == SENTINEL)})
    return values


@trace(name="build_report", span_type="CHAIN")
def build_report(row: RowRecord, renderer: ReportRenderer, settings: Settings | None = None) -> bytes:
    """Run Map -> Normalize -> Render for one row.

    Raises:
        ReportRenderError: the template could not be filled.
    """
    t0 = time.monotonic()
    values = prepare_report_values(row, settings)
    with start_span("render") as span:
        span.set_inputs({"template": str(renderer.template_path)})
        document = renderer.render(values)
        span.set_outputs({"size_bytes": len(document)})
    logger.info(
        "Report rendered for %s (%d bytes)", row.get("Address"), len(document),
        extra={"address": row.get("Address"), "duration_ms": round((time.monotonic() - t0) * 1000, 1)},
    )
    return document
