"""Thin MLflow tracing helpers for the report pipeline.

Usage:

    from bldgreport.observability.tracing import trace, start_span

    @trace(name="build_report", span_type="CHAIN")
    def build_report(...): ...

    with start_span("render") as span:
        span.set_inputs({...})
"""

import logging
from contextlib import contextmanager

import mlflow

logger = logging.getLogger(__name__)


def trace(name: str | None = None, **kwargs):
    """Decorator: wraps a function in an MLflow trace."""
    return mlflow.trace(name=name, **kwargs) if name else mlflow.trace(**kwargs)


@contextmanager
def start_span(name: str = "span", **kwargs):
    """Context manager: MLflow span around one pipeline step."""
    with mlflow.start_span(name=name, **kwargs) as span:
        yield span


def set_tracking_uri(uri: str) -> None:
    mlflow.set_tracking_uri(uri)


def set_experiment(name: str) -> None:
    mlflow.set_experiment(name)


def enable_async_logging() -> None:
    mlflow.config.enable_async_logging()


def init_tracing(tracking_uri: str, experiment_name: str) -> bool:
    """Point MLflow at the tracking store. Returns False if it is unreachable."""
    try:
        set_tracking_uri(tracking_uri)
        set_experiment(experiment_name)
        enable_async_logging()
    except Exception as e:
        logger.error("MLflow tracing setup failed: %s; continuing without a tracking store", e)
        return False
    logger.info("MLflow tracing enabled: %s", tracking_uri)
    return True
