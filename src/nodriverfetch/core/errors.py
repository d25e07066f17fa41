"""error taxonomy for resource fetching.

every failure a fetch can end in is a `FetchError` subclass so callers can
`except FetchError` broadly or pick out one kind. none of them are retried
internally.
"""


class FetchError(Exception):
    """base class for every fetch failure."""


class NotEnabledError(FetchError):
    """`fetch_resource()` was called before `enable()`."""

    def __init__(self, message: str = "Must call `enable` before using fetch_resource"):
        super().__init__(message)


class FrameUnresolvedError(FetchError):
    """no active top-level frame could be read from the frame tree."""

    def __init__(self, message: str = "could not resolve the active top-level frame"):
        super().__init__(message)


class ResourceLoadFailedError(FetchError):
    """the browser reported the load as failed or with a rejected status.

    :param url: the url that failed to load.
    :param status: reported http status (`None` on structural failures).
    """

    url: str
    status: int | None

    def __init__(self, url: str, status: int | None = None):
        self.url = url
        self.status = status
        super().__init__(f"Loading network resource failed (url={url}, status={status})")


class TransportFailureError(FetchError):
    """the session could not deliver a command or stream read, or the
    response broke the protocol contract.

    the underlying exception (if any) is chained as `__cause__`.
    """


class FetchTimeoutError(FetchError):
    """the resource was not observed before the strategy's own timeout."""

    url: str
    timeout: float

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Timed out fetching resource {url} after {timeout}s")


__all__ = [
    "FetchError",
    "NotEnabledError",
    "FrameUnresolvedError",
    "ResourceLoadFailedError",
    "TransportFailureError",
    "FetchTimeoutError",
]
