"""Error kinds surfaced by the dataset, pipeline and HTTP layers."""


class BldgReportError(Exception):
    """Base class — carries the error_type and HTTP status reported to callers."""

    error_type = "internal_error"
    status_code = 500


class SourceUnreadableError(BldgReportError):
    """The spreadsheet could not be read; the previous dataset is kept."""

    error_type = "source_unreadable"
    status_code = 500


class AddressMissingError(BldgReportError):
    """The request did not include a non-empty address."""

    error_type = "address_missing"
    status_code = 400

    def __init__(self, message: str = "Address required"):
        super().__init__(message)


class AddressNotFoundError(BldgReportError):
    """No dataset row matches the requested address."""

    error_type = "address_not_found"
    status_code = 404

    def __init__(self, address: str, message: str = "Address not found"):
        super().__init__(message)
        self.address = address


class ReportRenderError(BldgReportError):
    """Filling the template or assembling the document failed."""

    error_type = "render_failure"
    status_code = 500
