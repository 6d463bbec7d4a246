class CacheError(Exception):
    """Base class for cache-layer failures. Never leaves the cache facade."""

    pass


class CacheConnectionError(CacheError):
    """A connect attempt (or health probe) against the remote cache failed."""

    def __init__(self, attempt: int, cause: BaseException) -> None:
        super().__init__(f"connect attempt {attempt} failed: {cause!r}")
        self.attempt = attempt
        self.cause = cause


class ConnectionExhausted(CacheError):
    """Retry budget used up; the remote cache is given up for this process."""

    pass


class CacheOperationError(CacheError):
    """A single remote command failed while the connection was considered ready."""

    def __init__(self, operation: str, key: str, cause: BaseException) -> None:
        super().__init__(f"{operation} {key!r} failed: {cause!r}")
        self.operation = operation
        self.key = key
        self.cause = cause
