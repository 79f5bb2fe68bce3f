"""Pydantic request/response models for the bldgreport API.

Row records are returned as-is (free-form spreadsheet columns), so only
the request bodies and the error/health envelopes are modelled here.
"""

from pydantic import BaseModel, Field


class AddressRequest(BaseModel):
    """Request body for POST /search and POST /generate-report.

    `address` is optional at the schema level so a missing or blank value
    reaches the handler and is reported as address_missing (400) rather
    than a generic validation error.
    """

    address: str | None = Field(
        default=None,
        max_length=300,
        examples=["123 Main St"],
        description="Building address as it appears in the dataset (case and surrounding spaces ignored)",
    )


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
    error_type: str


class HealthResponse(BaseModel):
    status: str
    record_count: int
    source: str | None = None
    loaded_at: str | None = None
    last_error: str | None = None
    template: str
