"""Cache error types."""


class CacheError(Exception):
    """Base error of the caching layer."""

    def __init__(self, message: str = "Cache error"):
        self.message = message
        super().__init__(self.message)


class StorageError(CacheError):
    """Persistent store write failed."""

    def __init__(self, message: str = "Storage error"):
        super().__init__(message)


class FetchError(CacheError):
    """Dataset endpoint answered with an unusable body."""

    def __init__(self, message: str = "Fetch error"):
        super().__init__(message)


class UnknownDatasetError(CacheError):
    """Dataset name is not in the catalogue."""

    def __init__(self, name: str):
        super().__init__(f"Unknown dataset: {name!r}")
        self.name = name
