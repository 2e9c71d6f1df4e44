"""
Cover image checks shared by the API layer and the asset stores.

Only JPEG and PNG are accepted. The declared content type is not trusted on
its own: the bytes are sniffed with Pillow and must agree with it.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from domain.errors import ValidationError
from domain.models import CoverImage, ImageFormat

logger = logging.getLogger(__name__)


def detect_image_format(data: bytes) -> Optional[ImageFormat]:
    """Return the sniffed format of ``data`` if it is an accepted image, else None."""
    if not data:
        return None
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.debug("Image sniffing failed: %s", e)
        return None
    try:
        return ImageFormat(fmt)
    except ValueError:
        return None


def validate_cover_image(
    data: bytes,
    content_type: Optional[str],
    max_bytes: int = 5 * 1024 * 1024,
) -> CoverImage:
    """
    Validate an uploaded cover.

    Args:
        data: Raw upload bytes
        content_type: Content type declared by the client
        max_bytes: Size limit in bytes

    Returns:
        CoverImage whose content type reflects the sniffed format.

    Raises:
        ValidationError: empty, too large, wrong declared type, or bytes that
            are not a JPEG/PNG matching the declared type.
    """
    declared = ImageFormat.from_content_type(content_type)
    if declared is None:
        raise ValidationError("Invalid image format. Only JPG and PNG are allowed.")
    if not data:
        raise ValidationError("Cover image is empty")
    if len(data) > max_bytes:
        raise ValidationError(f"Cover image exceeds the size limit of {max_bytes} bytes")

    sniffed = detect_image_format(data)
    if sniffed is None:
        raise ValidationError("Cover image is not a valid JPG or PNG file")
    if sniffed is not declared:
        raise ValidationError(
            f"Cover image content ({sniffed.value}) does not match declared type {content_type}"
        )
    return CoverImage(data=data, content_type=sniffed.content_type)
