"""
Core domain models for the book catalog.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from domain.errors import ValidationError

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000


class ImageFormat(str, Enum):
    """Cover image formats accepted by the asset stores."""
    JPEG = "JPEG"
    PNG = "PNG"

    @property
    def content_type(self) -> str:
        return "image/jpeg" if self is ImageFormat.JPEG else "image/png"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else ".png"

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> Optional["ImageFormat"]:
        normalized = (content_type or "").split(";", 1)[0].strip().lower()
        if normalized in ("image/jpeg", "image/jpg", "image/pjpeg"):
            return cls.JPEG
        if normalized == "image/png":
            return cls.PNG
        return None


@dataclass(frozen=True)
class StoredAsset:
    """A cover image held by an asset store."""
    url: str
    handle: str


@dataclass(frozen=True)
class CoverImage:
    """Validated cover upload, ready to hand to an asset store."""
    data: bytes
    content_type: str


@dataclass
class BookFields:
    """The editable text fields of a book."""
    title: str
    author: str
    description: str = ""

    def normalized(self) -> "BookFields":
        return BookFields(
            title=(self.title or "").strip(),
            author=(self.author or "").strip(),
            description=(self.description or "").strip(),
        )

    def validate(self) -> "BookFields":
        """Return the normalized fields, raising ValidationError if unusable."""
        fields = self.normalized()
        problems = []
        if not fields.title:
            problems.append("title is required")
        elif len(fields.title) > TITLE_MAX_LENGTH:
            problems.append(f"title must be at most {TITLE_MAX_LENGTH} characters")
        if not fields.author:
            problems.append("author is required")
        elif len(fields.author) > AUTHOR_MAX_LENGTH:
            problems.append(f"author must be at most {AUTHOR_MAX_LENGTH} characters")
        if len(fields.description) > DESCRIPTION_MAX_LENGTH:
            problems.append(f"description must be at most {DESCRIPTION_MAX_LENGTH} characters")
        if problems:
            raise ValidationError("; ".join(problems))
        return fields


@dataclass
class Book:
    """
    A catalog entry.

    cover_image_url and asset_handle are either both empty (no cover) or
    both set; asset_handle is internal and never leaves the backend.
    """
    id: str
    title: str
    author: str
    description: str = ""
    cover_image_url: str = ""
    asset_handle: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())

    @property
    def has_cover(self) -> bool:
        return bool(self.asset_handle)
