"""Observability — structured logging and MLflow tracing helpers."""

from bldgreport.observability.logging import get_correlation_id, setup_logging
from bldgreport.observability.tracing import init_tracing

__all__ = ["get_correlation_id", "init_tracing", "setup_logging"]
