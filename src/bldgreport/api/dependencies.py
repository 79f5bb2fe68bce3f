"""Request-scoped access to the objects the app owns."""

from fastapi import Request

from bldgreport.pipeline.render import ReportRenderer
from bldgreport.storage.dataset import DatasetStore


def get_store(request: Request) -> DatasetStore:
    return request.app.state.store


def get_renderer(request: Request) -> ReportRenderer:
    return request.app.state.renderer
