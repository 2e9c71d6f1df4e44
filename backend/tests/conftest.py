import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from db import init_db, make_engine  # noqa: E402
from domain.errors import AssetRemovalError, AssetUploadError  # noqa: E402
from domain.models import StoredAsset  # noqa: E402
from repositories import BooksRepository  # noqa: E402
from services.book_lifecycle import BookLifecycleService  # noqa: E402
from storage.base import AssetStore  # noqa: E402


def make_image_bytes(fmt: str = "PNG", color: str = "red", size=(8, 8)) -> bytes:
    img = Image.new("RGB", size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeAssetStore(AssetStore):
    """In-memory asset store that records calls and can be told to fail."""

    def __init__(self):
        self.assets = {}
        self.uploads = []
        self.removals = []
        self.fail_upload = False
        self.fail_remove = False
        self._counter = 0

    def upload(self, data: bytes, content_type: str) -> StoredAsset:
        self.require_supported_format(data, content_type)
        self.uploads.append(content_type)
        if self.fail_upload:
            raise AssetUploadError("provider unavailable")
        self._counter += 1
        handle = f"book-covers/cover{self._counter}"
        self.assets[handle] = data
        return StoredAsset(url=f"https://cdn.example.test/{handle}.png", handle=handle)

    def remove(self, handle: str) -> None:
        self.removals.append(handle)
        if self.fail_remove:
            raise AssetRemovalError(handle, "provider unavailable")
        self.assets.pop(handle, None)


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG", "red")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", "blue")


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'books.sqlite'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def books_repo():
    return BooksRepository()


@pytest.fixture
def asset_store():
    return FakeAssetStore()


@pytest.fixture
def lifecycle(books_repo, asset_store, session_factory):
    return BookLifecycleService(books_repo, asset_store, session_factory)
