"""
Error taxonomy for the book catalog.

ValidationError and BookNotFoundError are terminal and surface directly to
the caller. Asset and store errors are downstream failures; the lifecycle
service runs its compensating cleanup before letting them propagate.
"""


class CatalogError(Exception):
    """Base class for all catalog errors."""


class ValidationError(CatalogError):
    """Missing or invalid fields, or an unacceptable cover image."""


class BookNotFoundError(CatalogError):
    def __init__(self, book_id: str):
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class StoreError(CatalogError):
    """The record store failed to persist or read a book."""


class AssetError(CatalogError):
    """The asset store failed."""


class AssetUploadError(AssetError):
    pass


class AssetRemovalError(AssetError):
    def __init__(self, handle: str, reason: str):
        super().__init__(f"Failed to remove asset {handle}: {reason}")
        self.handle = handle
        self.reason = reason


class AssetStoreConfigError(CatalogError):
    """The configured asset backend is unknown or missing credentials."""
