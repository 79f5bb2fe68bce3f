"""API route handlers for bldgreport.

GET  /refresh          — reload the spreadsheet into memory
POST /search           — raw dataset row for an address
POST /generate-report  — filled compliance report (.docx) for an address
"""

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import PlainTextResponse, Response

from bldgreport.api.dependencies import get_renderer, get_store
from bldgreport.api.schemas import AddressRequest, ErrorResponse
from bldgreport.config import settings
from bldgreport.core.errors import AddressMissingError, AddressNotFoundError, ReportRenderError
from bldgreport.core.types import RowRecord
from bldgreport.pipeline.render import DOCX_MEDIA_TYPE, ReportRenderer
from bldgreport.pipeline.report import build_report
from bldgreport.storage.dataset import DatasetStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


def _require_address(request: AddressRequest | None) -> str:
    if request is None or not request.address or not request.address.strip():
        raise AddressMissingError()
    return request.address


def _lookup(store: DatasetStore, address: str) -> RowRecord:
    row = store.find_by_address(address)
    if row is None:
        logger.info("No record for address: %s", address, extra={"address": address})
        raise AddressNotFoundError(address)
    return row


@router.get("/refresh", response_class=PlainTextResponse)
async def refresh(store: DatasetStore = Depends(get_store)):
    """Reload the dataset from the configured spreadsheet."""
    result = store.load(settings.data_path)
    if result.ok:
        return PlainTextResponse("Excel refreshed")
    return PlainTextResponse("Failed to refresh Excel", status_code=500)


@router.post(
    "/search",
    responses={
        400: {"model": ErrorResponse, "description": "Address missing"},
        404: {"model": ErrorResponse, "description": "Address not found"},
    },
)
async def search(
    request: AddressRequest | None = Body(default=None),
    store: DatasetStore = Depends(get_store),
):
    """Return the dataset row for an address, exactly as loaded."""
    address = _require_address(request)
    return _lookup(store, address)


@router.post(
    "/generate-report",
    response_class=Response,
    responses={
        200: {"content": {DOCX_MEDIA_TYPE: {}}, "description": "Compliance report"},
        400: {"model": ErrorResponse, "description": "Address missing"},
        404: {"model": ErrorResponse, "description": "Address not found"},
        500: {"model": ErrorResponse, "description": "Report rendering failed"},
    },
)
async def generate_report(
    request: AddressRequest | None = Body(default=None),
    store: DatasetStore = Depends(get_store),
    renderer: ReportRenderer = Depends(get_renderer),
):
    """Render the compliance report for an address."""
    address = _require_address(request)
    row = _lookup(store, address)

    try:
        document = build_report(row, renderer, settings)
    except ReportRenderError:
        logger.exception("Report rendering failed for: %s", address)
        raise
    except Exception as e:
        logger.exception("Report pipeline error for: %s", address)
        raise ReportRenderError(f"Failed to generate report: {e}") from e

    return Response(
        content=document,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={settings.report_filename}"},
    )
