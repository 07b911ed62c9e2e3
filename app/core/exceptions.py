class AppException(Exception):
    """Custom application exception with message, status code, and optional data."""

    status_code: int = 400
    # Seconds a client should wait before retrying; sent as Retry-After when set
    retry_after: int | None = None

    def __init__(self, message: str, status_code: int | None = None, data: dict = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data or {}
        super().__init__(self.message)


class ModelUnavailableError(AppException):
    """The language-model service failed, timed out, or returned an unusable reply."""
    status_code = 503
    retry_after = 30


class ValidationError(AppException):
    """Action parameters or payload failed schema validation."""
    status_code = 422


class NotFoundError(AppException):
    """Referenced record does not exist or belongs to another account."""
    status_code = 404


class RateLimitError(AppException):
    """Too many chat messages from one client inside the limiter window."""
    status_code = 429
    retry_after = 60
