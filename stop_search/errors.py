"""Exceptions raised while fetching and flattening stop & search data."""


class StopSearchError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(StopSearchError, ValueError):
    """Bad input detected before any request is sent."""


class UpstreamUnavailable(StopSearchError):
    """The police API could not be reached or answered with something unusable."""

    def __init__(self, message, period=None):
        super().__init__(message)
        self.period = period


class RetrievalFailed(UpstreamUnavailable):
    """A month failed part way through a window.

    ``completed`` lists the months fetched before the failure and ``table``
    holds their flattened rows.
    """

    def __init__(self, message, period, completed, table):
        super().__init__(message, period=period)
        self.completed = list(completed)
        self.table = table


class RetrievalCancelled(StopSearchError):
    def __init__(self, message, completed, table):
        super().__init__(message)
        self.completed = list(completed)
        self.table = table


class MalformedRecord(StopSearchError):
    """A record does not have the nesting the flattener tolerates."""

    def __init__(self, message, index=None, path=None):
        super().__init__(message)
        self.index = index
        self.path = path
