"""Lock errors - raised by stores, handled by the CLI."""


class LockError(Exception):
    """Base class for lock failures."""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class LockContentionError(LockError):
    """Raised when the conditional insert is rejected because the key is held."""

    def __init__(self, key: str):
        super().__init__(key, f"Lock {key!r} is already held")


class LockStoreError(LockError):
    """Raised when the backing store cannot be reached or refuses the request."""
