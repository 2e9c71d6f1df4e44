from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from domain.errors import BookNotFoundError, StoreError
from domain.models import BookFields, StoredAsset
from repositories import books as books_module


def _fields(title="Dune", author="Frank Herbert", description="Spice"):
    return BookFields(title=title, author=author, description=description)


def test_insert_assigns_id_and_created_at(books_repo, session_factory):
    with session_factory() as session:
        book = books_repo.insert_book(session, _fields())

    assert book.id
    assert book.created_at is not None
    assert book.cover_image_url == ""
    assert book.asset_handle == ""


def test_insert_with_asset_stores_url_and_handle(books_repo, session_factory):
    asset = StoredAsset(url="https://cdn.example.test/a.png", handle="book-covers/a")
    with session_factory() as session:
        book = books_repo.insert_book(session, _fields(), asset)
    with session_factory() as session:
        loaded = books_repo.get_book(session, book.id)

    assert loaded.cover_image_url == asset.url
    assert loaded.asset_handle == asset.handle


def test_ids_are_unique(books_repo, session_factory):
    with session_factory() as session:
        ids = {books_repo.insert_book(session, _fields(title=f"T{i}")).id for i in range(5)}
    assert len(ids) == 5


def test_list_orders_newest_first(books_repo, session_factory):
    with session_factory() as session:
        for title in ("A", "B", "C"):
            books_repo.insert_book(session, _fields(title=title))
        books = books_repo.list_books(session)

    assert [b.title for b in books] == ["C", "B", "A"]


def test_list_empty(books_repo, session_factory):
    with session_factory() as session:
        assert books_repo.list_books(session) == []


def test_get_unknown_raises_not_found(books_repo, session_factory):
    with session_factory() as session:
        with pytest.raises(BookNotFoundError):
            books_repo.get_book(session, "missing")


def test_update_without_asset_keeps_cover(books_repo, session_factory):
    asset = StoredAsset(url="https://cdn.example.test/a.png", handle="book-covers/a")
    with session_factory() as session:
        book = books_repo.insert_book(session, _fields(), asset)
        updated = books_repo.update_book(session, book.id, _fields(title="Dune Messiah", description=""))

    assert updated.title == "Dune Messiah"
    assert updated.description == ""
    assert updated.cover_image_url == asset.url
    assert updated.asset_handle == asset.handle
    assert updated.created_at == book.created_at


def test_update_with_asset_swaps_url_and_handle(books_repo, session_factory):
    old = StoredAsset(url="https://cdn.example.test/a.png", handle="book-covers/a")
    new = StoredAsset(url="https://cdn.example.test/b.png", handle="book-covers/b")
    with session_factory() as session:
        book = books_repo.insert_book(session, _fields(), old)
        updated = books_repo.update_book(session, book.id, _fields(), new)

    assert (updated.cover_image_url, updated.asset_handle) == (new.url, new.handle)


def test_update_unknown_raises_not_found(books_repo, session_factory):
    with session_factory() as session:
        with pytest.raises(BookNotFoundError):
            books_repo.update_book(session, "missing", _fields())


def test_delete_returns_deleted_record(books_repo, session_factory):
    asset = StoredAsset(url="https://cdn.example.test/a.png", handle="book-covers/a")
    with session_factory() as session:
        book = books_repo.insert_book(session, _fields(), asset)
        deleted = books_repo.delete_book(session, book.id)

    assert deleted.id == book.id
    assert deleted.asset_handle == "book-covers/a"
    with session_factory() as session:
        with pytest.raises(BookNotFoundError):
            books_repo.get_book(session, book.id)
        with pytest.raises(BookNotFoundError):
            books_repo.delete_book(session, book.id)


def test_driver_failure_becomes_store_error(books_repo, session_factory):
    with session_factory() as session:
        with patch.object(session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            with pytest.raises(StoreError):
                books_repo.insert_book(session, _fields())
        assert books_repo.list_books(session) == []


def test_list_orders_by_insertion_when_timestamps_tie(books_repo, session_factory, monkeypatch):
    monkeypatch.setattr(books_module, "_utcnow", lambda: datetime(2025, 1, 1, 12, 0, 0))
    with session_factory() as session:
        for title in ("A", "B", "C"):
            books_repo.insert_book(session, _fields(title=title))
        books = books_repo.list_books(session)

    assert [b.title for b in books] == ["C", "B", "A"]
