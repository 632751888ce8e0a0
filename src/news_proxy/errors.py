"""Domain errors raised by the query layer and rendered by the HTTP layer."""


class NewsProxyError(Exception):
    """Base error carrying a client-safe message and an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(NewsProxyError):
    """A required query parameter is missing or malformed."""

    status_code = 400


class UpstreamError(NewsProxyError):
    """The GNews API could not be reached or answered with an error.

    The message is intentionally generic; the underlying cause is logged
    and chained, never shown to clients.
    """

    status_code = 500

    def __init__(self, message: str = "Failed to fetch news from GNews API"):
        super().__init__(message)
