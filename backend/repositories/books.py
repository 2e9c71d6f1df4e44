"""
Book repository backed by SQLAlchemy/SQLite.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import BookNotFoundError, StoreError
from domain.models import Book, BookFields, StoredAsset
from repositories.models import BookORM

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


def _book_from_orm(orm: BookORM) -> Book:
    return Book(
        id=orm.id,
        title=orm.title,
        author=orm.author,
        description=orm.description or "",
        cover_image_url=orm.cover_image_url or "",
        asset_handle=orm.asset_handle or "",
        created_at=orm.created_at,
    )


@contextmanager
def _store_errors(session: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise driver failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Record store failed to %s: %s", action, e)
        raise StoreError(f"Failed to {action}") from e


class BooksRepository:
    """
    CRUD operations for books.

    Every call is a single commit, so each one is atomic on its own; nothing
    here spans more than one statement batch.
    """

    def list_books(self, session: Session) -> List[Book]:
        with _store_errors(session, "list books"):
            books = (
                session.query(BookORM)
                .order_by(BookORM.created_at.desc(), BookORM.seq.desc())
                .all()
            )
            return [_book_from_orm(b) for b in books]

    def get_book(self, session: Session, book_id: str) -> Book:
        orm = self._load(session, book_id)
        return _book_from_orm(orm)

    def insert_book(
        self,
        session: Session,
        fields: BookFields,
        asset: Optional[StoredAsset] = None,
    ) -> Book:
        orm = BookORM(
            id=Book.generate_id(),
            title=fields.title,
            author=fields.author,
            description=fields.description,
            cover_image_url=asset.url if asset else "",
            asset_handle=asset.handle if asset else "",
            created_at=_utcnow(),
        )
        with _store_errors(session, "insert book"):
            session.add(orm)
            session.commit()
            session.refresh(orm)
            return _book_from_orm(orm)

    def update_book(
        self,
        session: Session,
        book_id: str,
        fields: BookFields,
        asset: Optional[StoredAsset] = None,
    ) -> Book:
        """Replace the text fields, and the cover url/handle pair when given."""
        orm = self._load(session, book_id)
        with _store_errors(session, "update book"):
            orm.title = fields.title
            orm.author = fields.author
            orm.description = fields.description
            if asset is not None:
                orm.cover_image_url = asset.url
                orm.asset_handle = asset.handle
            session.add(orm)
            session.commit()
            session.refresh(orm)
            return _book_from_orm(orm)

    def delete_book(self, session: Session, book_id: str) -> Book:
        """Delete a book and return it as it was, so callers can clean up its cover."""
        orm = self._load(session, book_id)
        deleted = _book_from_orm(orm)
        with _store_errors(session, "delete book"):
            session.delete(orm)
            session.commit()
        return deleted

    def _load(self, session: Session, book_id: str) -> BookORM:
        with _store_errors(session, "load book"):
            orm = session.query(BookORM).filter(BookORM.id == book_id).one_or_none()
        if not orm:
            raise BookNotFoundError(book_id)
        return orm
