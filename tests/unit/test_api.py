"""Unit tests for the bldgreport API endpoints.

Uses httpx.AsyncClient with ASGITransport to test the FastAPI app
without starting a real server. The dataset and template are installed
on app.state by the `client` fixture.
"""

from datetime import datetime
from unittest.mock import patch

import pandas as pd
import pytest

from bldgreport.api.main import app
from bldgreport.config import settings
from bldgreport.core.errors import ReportRenderError
from bldgreport.pipeline.render import DOCX_MEDIA_TYPE, ReportRenderer
from tests.helpers import docx_lines


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

def test_each_route_registered_once():
    paths = app.openapi()["paths"]
    for path, method in [("/refresh", "get"), ("/search", "post"), ("/generate-report", "post")]:
        assert list(paths[path]) == [method]


# ---------------------------------------------------------------------------
# GET /refresh
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_refresh_success(client, tmp_path):
    path = tmp_path / "data.xlsx"
    pd.DataFrame([{"Address": "9 New Rd", "FISP Filing Due": datetime(2030, 1, 1)}]).to_excel(path, index=False)

    with patch.object(settings, "data_path", str(path)):
        resp = await client.post("/search", json={"address": "9 New Rd"})
        assert resp.status_code == 404
        resp = await client.get("/refresh")
        assert resp.status_code == 200
        assert resp.text == "Excel refreshed"
        resp = await client.post("/search", json={"address": "9 new rd"})

    assert resp.status_code == 200
    assert resp.json()["FISP Filing Due"] == "2030-01-01T00:00:00"


@pytest.mark.asyncio
async def test_refresh_failure_keeps_dataset(client, tmp_path):
    with patch.object(settings, "data_path", str(tmp_path / "missing.xlsx")):
        resp = await client.get("/refresh")
    assert resp.status_code == 500
    assert resp.text == "Failed to refresh Excel"

    resp = await client.post("/search", json={"address": "123 Main St"})
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# POST /search
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_returns_raw_row(client, sample_rows):
    resp = await client.post("/search", json={"address": "123 main st "})
    assert resp.status_code == 200
    data = resp.json()
    assert data["Address"] == "123 Main St"
    # Raw record, not the mapped/normalized one
    assert data["FISP Compliance Status"] == "No Report Filed"
    assert data["Building Owner/Manager"] == "Main Street Holdings"
    assert "Building_OwnerManager" not in data
    assert data["Contact Email"] == ""
    assert set(data) == set(sample_rows[1])


@pytest.mark.asyncio
async def test_search_not_found(client):
    resp = await client.post("/search", json={"address": "nonexistent address"})
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Address not found", "error_type": "address_not_found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"address": ""}, {"address": "   "}, {"address": None}])
async def test_search_missing_address(client, body):
    resp = await client.post("/search", json=body)
    assert resp.status_code == 400
    assert resp.json()["error_type"] == "address_missing"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/search", "/generate-report"])
async def test_missing_body_is_missing_address(client, path):
    resp = await client.post(path)
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Address required", "error_type": "address_missing"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [["123 Main St"], "123 Main St", 42, {"address": ["123 Main St"]}])
async def test_non_object_body_is_missing_address(client, body):
    resp = await client.post("/search", json=body)
    assert resp.status_code == 400
    assert resp.json()["error_type"] == "address_missing"


@pytest.mark.asyncio
async def test_invalid_json_is_missing_address(client):
    resp = await client.post(
        "/search", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json()["error_type"] == "address_missing"


@pytest.mark.asyncio
async def test_search_empty_dataset(client):
    from bldgreport.storage.dataset import DatasetStore

    app.state.store = DatasetStore()
    resp = await client.post("/search", json={"address": "123 Main St"})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# POST /generate-report
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_report_success(client):
    resp = await client.post("/generate-report", json={"address": "123 main st "})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == DOCX_MEDIA_TYPE
    assert resp.headers["content-disposition"] == "attachment; filename=Compliance_Report.docx"

    lines = docx_lines(resp.content)
    assert "FISP Compliance Status: Non-Compliant" in lines
    assert "Contact Email: Chelsea.Coppinger@socotec.us" in lines
    assert "Contact Phone: +1 646 549 6045" in lines
    assert "Building_OwnerManager: Main Street Holdings" in lines


@pytest.mark.asyncio
async def test_generate_report_swarmp_overdue_is_compliant(client):
    resp = await client.post("/generate-report", json={"address": "77 Water Street"})
    assert resp.status_code == 200
    assert "FISP Compliance Status: In Compliance" in docx_lines(resp.content)


@pytest.mark.asyncio
async def test_generate_report_not_found(client):
    resp = await client.post("/generate-report", json={"address": "1 Nowhere Ln"})
    assert resp.status_code == 404
    assert resp.json()["error_type"] == "address_not_found"


@pytest.mark.asyncio
async def test_generate_report_missing_address(client):
    resp = await client.post("/generate-report", json={})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Address required", "error_type": "address_missing"}


@pytest.mark.asyncio
async def test_generate_report_missing_template(client, tmp_path):
    app.state.renderer = ReportRenderer(tmp_path / "missing.docx")
    resp = await client.post("/generate-report", json={"address": "123 Main St"})
    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json()["error_type"] == "render_failure"


@pytest.mark.asyncio
async def test_generate_report_render_error(client):
    with patch("bldgreport.api.routes.build_report", side_effect=ReportRenderError("bad tag")):
        resp = await client.post("/generate-report", json={"address": "123 Main St"})
    assert resp.status_code == 500
    assert resp.json() == {"detail": "bad tag", "error_type": "render_failure"}


@pytest.mark.asyncio
async def test_generate_report_unexpected_error(client):
    """Anything else that blows up in the pipeline is still a render failure."""
    with patch("bldgreport.api.routes.build_report", side_effect=RuntimeError("disk full")):
        resp = await client.post("/generate-report", json={"address": "123 Main St"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["error_type"] == "render_failure"
    assert "disk full" in body["detail"]


# ---------------------------------------------------------------------------
# Health + middleware
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health_healthy(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["record_count"] == 3
    assert data["template"] == "ok"


@pytest.mark.asyncio
async def test_health_degraded_without_template(client, tmp_path):
    app.state.renderer = ReportRenderer(tmp_path / "missing.docx")
    resp = await client.get("/health")
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["template"].startswith("missing")


@pytest.mark.asyncio
async def test_correlation_id_echoed(client):
    resp = await client.get("/health", headers={"X-Request-ID": "req-42"})
    assert resp.headers["x-request-id"] == "req-42"


@pytest.mark.asyncio
async def test_correlation_id_generated(client):
    resp = await client.get("/health")
    assert resp.headers["x-request-id"]
