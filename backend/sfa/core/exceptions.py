"""
Service-layer exceptions.

Services raise these; routers translate them into HTTP responses.
"""


class NotFoundError(ValueError):
    """Referenced entity does not exist."""

    def __init__(self, resource: str, identifier):
        super().__init__(f"{resource} '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier


class ValidationError(ValueError):
    """Required input missing or inconsistent; caught before any write."""


class UploadFormatError(ValueError):
    """Bulk upload file cannot be processed at all (more rows than allowed)."""


class BulkUploadError(RuntimeError):
    """The insert phase of a bulk upload failed; nothing from the file was saved."""
