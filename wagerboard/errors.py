from typing import Optional


class UpstreamError(Exception):
    """Base class for failures talking to an affiliate API."""


class UpstreamTransportError(UpstreamError):
    """Network failure or non-2xx status from the upstream API."""


class UpstreamShapeError(UpstreamError):
    """The upstream answered, but not with the payload we expect."""


class PaginationAbort(UpstreamError):
    """A page failed mid-sequence; the whole aggregation is discarded."""

    def __init__(self, page: int, cause: Optional[Exception] = None):
        super().__init__(f"Pagination aborted at page {page}: {cause}")
        self.page = page
        self.cause = cause
