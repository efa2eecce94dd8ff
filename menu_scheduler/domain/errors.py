"""Typed errors raised by the entity store and the repositories."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every error the store layer raises."""

    kind = "store"


class NotFoundError(StoreError):
    """No entity with the requested id exists in the collection."""

    kind = "not_found"


class ValidationError(StoreError):
    """Caller-supplied value or reference is invalid."""

    kind = "validation"


class StorageError(StoreError):
    """A snapshot file could not be read, written or parsed."""

    kind = "storage"


class StorageIOError(StorageError):
    kind = "io"


class SerializationError(StorageError):
    kind = "serialization"


class LockCorruptedError(StoreError):
    """The collection lost integrity after a failure inside its critical section.

    Not recoverable: every further operation on the collection raises this.
    """

    kind = "lock_corrupted"
