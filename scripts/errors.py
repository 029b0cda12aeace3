"""Error types raised or recorded while collecting GitHub stats."""


class ConfigurationError(ValueError):
    """Token or account login missing; collection never starts."""


class UpstreamError(RuntimeError):
    """A GraphQL call failed. Fatal for the whole run."""

    def __init__(self, message: str, status: int | None = None, errors: list | None = None):
        super().__init__(message)
        self.status = status
        self.errors = errors or []


class DegradedFetchWarning(UserWarning):
    """A REST search call failed; its counts fall back to zero.

    Recorded and logged, never raised to the caller.
    """

    def __init__(self, query: str, status: int | None = None, reason: str = ""):
        self.query = query
        self.status = status
        self.reason = reason
        if status is not None:
            detail = f"status {status}: {reason}" if reason else f"status {status}"
        else:
            detail = reason or "request failed"
        super().__init__(f"Search '{query}' failed ({detail}), counting it as empty")
