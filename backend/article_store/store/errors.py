"""
Store error taxonomy.

Validation errors propagate to callers; blob reads fail loudly with
``BlobNotFoundError``. ``MigrationFailure`` and ``MalformedUpstreamPayload``
are raised internally and contained where they occur.
"""


class StoreError(Exception):
    """Base class for persistence-layer errors."""


class ValidationError(StoreError, ValueError):
    """A write is missing identifying fields or carries an unusable body."""


class NotFoundError(StoreError, LookupError):
    """A key that must exist is absent."""


class BlobNotFoundError(NotFoundError):
    """An indexed blob reference has no backing bytes on disk."""

    def __init__(self, relative_path: str):
        super().__init__(f"Blob not found: {relative_path}")
        self.relative_path = relative_path


class MigrationFailure(StoreError):
    """Importing a legacy JSON snapshot failed."""


class MalformedUpstreamPayload(StoreError):
    """An embedded ``publish_info`` document could not be parsed."""
