"""
Books API routes.
"""
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from db import SessionLocal
from domain.errors import (
    AssetError,
    BookNotFoundError,
    CatalogError,
    StoreError,
    ValidationError,
)
from domain.models import Book, BookFields, CoverImage
from repositories import BooksRepository
from services.book_lifecycle import BookLifecycleService
from services.cover_images import validate_cover_image
from settings import settings
from storage.factory import build_asset_store

router = APIRouter()
logger = logging.getLogger(__name__)


class BookResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    author: str
    description: str
    cover_image_url: str
    created_at: str


class DeleteResponse(BaseModel):
    message: str
    id: str


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a trailing Z; naive values are stored as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


def book_to_response(book: Book) -> BookResponse:
    """Convert domain Book to API response. The asset handle stays server-side."""
    return BookResponse(
        id=book.id,
        title=book.title,
        author=book.author,
        description=book.description,
        cover_image_url=book.cover_image_url,
        created_at=format_timestamp(book.created_at),
    )


@lru_cache(maxsize=1)
def get_lifecycle_service() -> BookLifecycleService:
    return BookLifecycleService(
        books_repo=BooksRepository(),
        asset_store=build_asset_store(settings),
        session_factory=SessionLocal,
    )


def _read_cover(upload: Union[UploadFile, str, None]) -> Optional[CoverImage]:
    """Validate the optional cover part; an empty part means no cover."""
    if upload is None or upload == "":
        return None
    if isinstance(upload, str):
        raise ValidationError("coverImage must be an uploaded file")
    # Read one byte past the limit so oversize uploads are detected without buffering them whole
    data = upload.file.read(settings.MAX_COVER_BYTES + 1)
    if not data and not upload.filename:
        return None
    return validate_cover_image(
        data,
        upload.content_type,
        max_bytes=settings.MAX_COVER_BYTES,
    )


def _to_http_error(e: CatalogError, action: str) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, BookNotFoundError):
        return HTTPException(status_code=404, detail="Book not found")
    if isinstance(e, AssetError):
        logger.error("%s failed in the asset store: %s", action, e)
        return HTTPException(status_code=500, detail=f"{action} failed: cover image storage error")
    if isinstance(e, StoreError):
        logger.error("%s failed in the record store: %s", action, e)
        return HTTPException(status_code=500, detail=f"{action} failed: storage error")
    logger.error("%s failed: %s", action, e)
    return HTTPException(status_code=500, detail=f"{action} failed")


@router.get("", response_model=List[BookResponse])
def list_books(service: BookLifecycleService = Depends(get_lifecycle_service)):
    """List all books, newest first."""
    try:
        books = service.list_books()
    except CatalogError as e:
        raise _to_http_error(e, "Fetching books")
    return [book_to_response(b) for b in books]


@router.post("", response_model=BookResponse, status_code=201)
def create_book(
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    description: str = Form(""),
    cover_image: Union[UploadFile, str, None] = File(None, alias="coverImage"),
    service: BookLifecycleService = Depends(get_lifecycle_service),
):
    """Create a new book, uploading its cover first when one is attached."""
    try:
        fields = BookFields(title=title or "", author=author or "", description=description).validate()
        cover = _read_cover(cover_image)
        book = service.create(fields, cover)
    except CatalogError as e:
        raise _to_http_error(e, "Create book")
    return book_to_response(book)


@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: str, service: BookLifecycleService = Depends(get_lifecycle_service)):
    """Get a book by ID."""
    try:
        book = service.get(book_id)
    except CatalogError as e:
        raise _to_http_error(e, "Fetching book")
    return book_to_response(book)


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    book_id: str,
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    description: str = Form(""),
    cover_image: Union[UploadFile, str, None] = File(None, alias="coverImage"),
    service: BookLifecycleService = Depends(get_lifecycle_service),
):
    """Replace a book's fields; a new cover replaces the old one."""
    try:
        fields = BookFields(title=title or "", author=author or "", description=description).validate()
        cover = _read_cover(cover_image)
        book = service.update(book_id, fields, cover)
    except CatalogError as e:
        raise _to_http_error(e, "Update book")
    return book_to_response(book)


@router.delete("/{book_id}", response_model=DeleteResponse)
def delete_book(book_id: str, service: BookLifecycleService = Depends(get_lifecycle_service)):
    """Delete a book; its cover is removed afterwards on a best-effort basis."""
    try:
        deleted = service.delete(book_id)
    except CatalogError as e:
        raise _to_http_error(e, "Delete book")
    return DeleteResponse(message="Book deleted", id=deleted.id)
