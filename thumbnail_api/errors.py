"""
Exceptions raised by the thumbnail service.

Absence of a thumbnail in a single storage is never an exception; storages
return None for that. Everything here maps to an HTTP status.
"""


class ThumbnailError(Exception):
    """Base error for the thumbnail service."""

    status = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    @property
    def do_log(self) -> bool:
        """Whether this error should be logged at all."""
        return True

    @property
    def log_stacktrace(self) -> bool:
        """Whether a logged error should include the traceback."""
        return True


class InvalidInputError(ThumbnailError):
    """Malformed url, id, size or upload content."""

    status = 400

    @property
    def log_stacktrace(self) -> bool:
        return False


class ThumbnailNotFoundError(ThumbnailError):
    """No storage in the fallback chain holds the requested thumbnail."""

    status = 404

    def __init__(self, message: str = "Media file not found"):
        super().__init__(message)

    @property
    def do_log(self) -> bool:
        return False


class UploadAuthenticationError(ThumbnailError):
    """Raised by an authorization hook to refuse an upload."""

    status = 401

    @property
    def do_log(self) -> bool:
        return False


class ImageProcessingError(ThumbnailError):
    """An uploaded image could not be decoded, resized or stored."""

    status = 500


class TransportError(ThumbnailError):
    """A storage backend could not be reached or answered with an error."""

    status = 502


class ConfigurationError(ThumbnailError):
    """Invalid route or storage configuration. Fatal at start-up."""

    status = 500
