from typing import Optional


class PhrasecoreError(Exception):
    """Base exception for phrasecore errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StoreError(PhrasecoreError):
    """Base exception for phrase store errors."""

    pass


class StoreConnectionError(StoreError):
    """Raised for errors opening the backing store."""

    pass


class SchemaInitializationError(StoreError):
    """Raised for errors during schema setup."""

    pass


class StoreReadError(StoreError):
    """Indicates the phrase collection could not be read."""

    pass


class StoreWriteError(StoreError):
    """Indicates the phrase collection could not be written."""

    pass


class MarshallingError(StoreError):
    """Indicates an error during data conversion between application models
    and the stored format."""

    pass
