"""Shared test fixtures."""

from datetime import datetime

import mlflow
import pytest
from httpx import ASGITransport, AsyncClient

from bldgreport.api.main import app
from bldgreport.pipeline.render import ReportRenderer
from bldgreport.storage.dataset import DatasetStore
from tests.helpers import build_template, make_row


@pytest.fixture(autouse=True)
def _disable_mlflow_tracing():
    """Disable MLflow tracing during tests — no side effects, no mlruns/ writes."""
    mlflow.tracing.disable()
    yield
    mlflow.tracing.enable()


@pytest.fixture
def sample_rows() -> list[dict]:
    return [
        make_row(),
        make_row(**{
            "Address": "123 Main St",
            "Building Owner/Manager": "Main Street Holdings",
            "FISP Compliance Status": "No Report Filed",
            "Contact Email": "",
            "Contact Phone": 0,
        }),
        make_row(**{
            "Address": "  77 Water Street ",
            "FISP Compliance Status": "SWARMP",
            "FISP Filing Due": datetime(2001, 1, 1),
        }),
    ]


@pytest.fixture
def store(sample_rows) -> DatasetStore:
    return DatasetStore.from_records(sample_rows)


@pytest.fixture
def template_path(tmp_path):
    path = tmp_path / "template.docx"
    build_template(path)
    return path


@pytest.fixture
def renderer(template_path) -> ReportRenderer:
    return ReportRenderer(template_path)


@pytest.fixture
async def client(store, renderer):
    """API client over ASGI with the test dataset and template installed on app.state."""
    saved = (app.state.store, app.state.renderer)
    app.state.store = store
    app.state.renderer = renderer
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.state.store, app.state.renderer = saved
