class ValidationError(ValueError):
    """
    Raised when a request payload (config patch, new bin) is malformed

    The whole operation is rejected; nothing is merged or persisted.
    """


class StorageError(Exception):
    """
    Raised when the storage backend is unavailable or a query fails

    Wraps the backend-specific exception so callers only depend on this type.
    """
