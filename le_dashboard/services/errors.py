# le_dashboard/services/errors.py
"""Exceptions raised by the storage layer and translated to JSON errors by the routes."""


class StorageError(Exception):
    """Base class for storage failures."""


class NotFoundError(StorageError):
    """The requested record does not exist."""


class ValidationError(StorageError):
    """The request payload was rejected before anything was written."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        data = {'message': self.message}
        if self.field:
            data['field'] = self.field
        return data


class AllocationPersistenceError(StorageError):
    """The job counter could not be read or written."""
