"""Domain exceptions, converted to HTTP responses in src.main."""


class NoorError(Exception):
    """Base class for service errors."""

    status_code = 500

    def __init__(self, message: str, detail: object | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class StorageUnavailableError(NoorError):
    """The database could not be reached or rejected the query."""

    status_code = 503


class DuplicateRecordError(NoorError):
    """A unique constraint was violated."""

    status_code = 409


class UpstreamServiceError(NoorError):
    """A third-party API (AI provider, content API) failed."""

    status_code = 500


class ServiceNotConfiguredError(NoorError):
    """A feature was called without the credentials it needs."""

    status_code = 500


class LocationNotFoundError(NoorError):
    """Geocoding returned no match."""

    status_code = 404
