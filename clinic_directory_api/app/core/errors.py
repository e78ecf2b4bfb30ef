"""
Domain errors raised by the service layer and the document store.

The API layer maps these onto HTTP responses in ``main.py``; services
themselves never deal with status codes.
"""


class ClinicDirectoryError(Exception):
    """Base class for every error the service layer raises on purpose."""


class ValidationError(ClinicDirectoryError):
    """Input is well formed but not acceptable (empty or duplicate name)."""


class NotFoundError(ClinicDirectoryError):
    """A referenced clinic, doctor or health service does not exist."""


class StorageError(ClinicDirectoryError):
    """The underlying database failed to execute an operation."""


class DuplicateKeyError(StorageError):
    """A unique index rejected an insert or update."""
