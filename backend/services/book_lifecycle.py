"""
Book lifecycle: keeps book records and their cover images in step.

The record store and the asset store share no transaction, so every write
is a fixed two-step sequence:

- create/update: upload the new cover first, then write the record. If the
  record write fails, the fresh upload is removed again (best effort).
- update: the previous cover is removed only after the record points at the
  new one.
- delete: delete the record first, then its cover. A failed cover removal is
  logged; the delete still succeeds.

A crash between steps can therefore leak an unreferenced cover, but a record
never points at a cover that was never uploaded or was already removed.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from domain.errors import AssetUploadError
from domain.models import Book, BookFields, CoverImage, StoredAsset
from repositories import BooksRepository
from storage.base import AssetStore

logger = logging.getLogger(__name__)


class BookLifecycleService:
    def __init__(
        self,
        books_repo: BooksRepository,
        asset_store: AssetStore,
        session_factory: Callable[[], Session],
    ):
        self.books_repo = books_repo
        self.asset_store = asset_store
        self.session_factory = session_factory

    def list_books(self) -> List[Book]:
        """All books, newest first."""
        with self.session_factory() as session:
            return self.books_repo.list_books(session)

    def get(self, book_id: str) -> Book:
        with self.session_factory() as session:
            return self.books_repo.get_book(session, book_id)

    def create(self, fields: BookFields, cover: Optional[CoverImage] = None) -> Book:
        fields = fields.validate()
        asset = self._upload(cover) if cover else None

        try:
            with self.session_factory() as session:
                book = self.books_repo.insert_book(session, fields, asset)
        except Exception:
            if asset:
                self._discard(asset.handle, reason="insert failed")
            raise

        logger.info("Created book %s (cover=%s)", book.id, book.has_cover)
        return book

    def update(self, book_id: str, fields: BookFields, cover: Optional[CoverImage] = None) -> Book:
        fields = fields.validate()
        with self.session_factory() as session:
            existing = self.books_repo.get_book(session, book_id)

        asset = self._upload(cover) if cover else None

        try:
            with self.session_factory() as session:
                book = self.books_repo.update_book(session, book_id, fields, asset)
        except Exception:
            # The old cover is still referenced by the unchanged record
            if asset:
                self._discard(asset.handle, reason="update failed")
            raise

        if asset and existing.asset_handle and existing.asset_handle != asset.handle:
            self._discard(existing.asset_handle, reason="superseded")

        logger.info("Updated book %s (cover replaced=%s)", book.id, asset is not None)
        return book

    def delete(self, book_id: str) -> Book:
        with self.session_factory() as session:
            deleted = self.books_repo.delete_book(session, book_id)

        if deleted.asset_handle:
            self._discard(deleted.asset_handle, reason="book deleted")

        logger.info("Deleted book %s", deleted.id)
        return deleted

    def _upload(self, cover: CoverImage) -> StoredAsset:
        try:
            asset = self.asset_store.upload(cover.data, cover.content_type)
        except AssetUploadError:
            raise
        except Exception as e:
            raise AssetUploadError(f"Cover upload failed: {e}") from e
        if not asset.url or not asset.handle:
            raise AssetUploadError("Asset store returned an incomplete result")
        return asset

    def _discard(self, handle: str, reason: str) -> None:
        """Best-effort removal of a cover nothing should reference any more."""
        try:
            self.asset_store.remove(handle)
        except Exception:
            logger.warning("Could not remove cover %s (%s); leaving it orphaned", handle, reason, exc_info=True)
        else:
            logger.debug("Removed cover %s (%s)", handle, reason)
