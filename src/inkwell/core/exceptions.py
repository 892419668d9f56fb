"""
Inkwell exception hierarchy.

All inkwell exceptions inherit from InkwellError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class InkwellError(Exception):
    """Base exception class for all inkwell errors."""


class ConfigurationError(InkwellError):
    """Raised for configuration errors (missing keys, invalid values)."""


class StorageError(InkwellError):
    """Base class for diary storage errors."""


class StorageUnavailable(StorageError):
    """Raised when the diary directory cannot be created or written to."""


class IOFailure(StorageError):
    """Raised when a single read, write or delete of an entry fails."""


class DecodeSkipped(InkwellError, ValueError):
    """Raised when a file name does not decode to a date; callers skip the file."""
