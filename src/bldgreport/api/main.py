"""bldgreport API — FastAPI application for building compliance reports.

Run:
    uvicorn bldgreport.api.main:app --reload
    # or
    bldgreport-api
"""

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bldgreport import __version__
from bldgreport.api.dependencies import get_renderer, get_store
from bldgreport.api.routes import router
from bldgreport.api.schemas import HealthResponse
from bldgreport.config import settings
from bldgreport.core.errors import AddressMissingError, BldgReportError
from bldgreport.observability.logging import correlation_id, setup_logging
from bldgreport.observability.tracing import init_tracing
from bldgreport.pipeline.render import ReportRenderer
from bldgreport.storage.dataset import DatasetStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the spreadsheet on startup."""
    setup_logging(json_format=settings.log_json, level=settings.log_level)
    init_tracing(settings.mlflow_tracking_uri, settings.mlflow_experiment_name)

    result = app.state.store.load(settings.data_path)
    if not result.ok:
        logger.error("Initial data load failed: API will start with an empty dataset")
    if not app.state.renderer.template_exists():
        logger.warning("Report template not found at %s", settings.template_path)
    logger.info("bldgreport API ready")
    yield
    logger.info("Shutting down")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Set correlation ID from X-Request-ID header or generate a new one."""

    async def dispatch(self, request: Request, call_next):
        cid = request.headers.get("x-request-id", str(uuid.uuid4()))
        token = correlation_id.set(cid)
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = cid
            return response
        finally:
            correlation_id.reset(token)


app = FastAPI(
    title="bldgreport",
    description="Building compliance lookup and Word report generation "
    "(FISP, LL84, LL87, LL88, LL97, LL126).",
    version=__version__,
    lifespan=lifespan,
)

app.state.store = DatasetStore()
app.state.renderer = ReportRenderer(settings.template_path, strict=settings.strict_placeholders)

app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(BldgReportError)
async def bldgreport_error_handler(request: Request, exc: BldgReportError):
    """Turn domain errors into {"detail", "error_type"} bodies with their status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error_type": exc.error_type},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """A body that is not an {"address": ...} object is a missing address."""
    if any(tuple(error.get("loc", ()))[:1] == ("body",) for error in exc.errors()):
        logger.info("Malformed request body on %s", request.url.path)
        return await bldgreport_error_handler(request, AddressMissingError())
    return await request_validation_exception_handler(request, exc)


@app.get("/health", response_model=HealthResponse)
async def health(
    store: DatasetStore = Depends(get_store),
    renderer: ReportRenderer = Depends(get_renderer),
):
    """Health check — dataset freshness and template availability."""
    template_ok = renderer.template_exists()
    healthy = len(store) > 0 and store.last_error is None and template_ok
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        record_count=len(store),
        source=store.source,
        loaded_at=store.loaded_at.isoformat() if store.loaded_at else None,
        last_error=store.last_error,
        template="ok" if template_ok else f"missing: {renderer.template_path}",
    )


def run():
    """Entry point for bldgreport-api console script."""
    uvicorn.run("bldgreport.api.main:app", host=settings.host, port=settings.port)
