"""Custom exceptions raised by the geo index."""


class GeoDynamoError(Exception):
    """Base class for every error raised by geodynamo."""
    pass


class ConfigurationError(GeoDynamoError, ValueError):
    """Raised when the index is configured or invoked with invalid settings."""
    pass


class InvalidLimitError(ConfigurationError):
    """Raised when a paginated query is given a page budget of zero."""
    pass


class MarshalingError(GeoDynamoError):
    """Raised when a user payload or a stored attribute cannot be (de)serialized."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidItemError(MarshalingError):
    """Raised when a scanned item has no usable geoJson attribute."""
    pass


class ScanError(GeoDynamoError):
    """Raised when a partition scan fails and the strict error policy is set."""

    def __init__(self, message: str, hash_key: int, range_min: int, range_max: int):
        super().__init__(message)
        self.hash_key = hash_key
        self.range_min = range_min
        self.range_max = range_max


class QueryCancelledError(GeoDynamoError):
    """Raised when the caller cancels a query before the fan-out completed."""
    pass
