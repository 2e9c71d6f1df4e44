"""
Asset store interface.

An asset store keeps cover images outside the record store. Uploading
returns a public URL plus an opaque handle; the handle is the only thing
needed to remove the image again.
"""
from abc import ABC, abstractmethod

from domain.errors import AssetUploadError
from domain.models import ImageFormat, StoredAsset
from services.cover_images import detect_image_format


class AssetStore(ABC):

    @abstractmethod
    def upload(self, data: bytes, content_type: str) -> StoredAsset:
        """
        Store an image and return its url and removal handle.

        Raises AssetUploadError on provider/network failure or when the bytes
        are not a JPEG or PNG. Never returns a partial result.
        """

    @abstractmethod
    def remove(self, handle: str) -> None:
        """
        Delete a previously uploaded image.

        A handle the provider no longer knows is treated as already removed.
        Raises AssetRemovalError when the provider rejects the request.
        """

    @staticmethod
    def require_supported_format(data: bytes, content_type: str) -> ImageFormat:
        """Sniff ``data`` and check it against the declared ``content_type``."""
        fmt = detect_image_format(data)
        if fmt is None:
            raise AssetUploadError("Unsupported image format; only JPEG and PNG are accepted")
        declared = ImageFormat.from_content_type(content_type)
        if declared is not fmt:
            raise AssetUploadError(f"Image content ({fmt.value}) does not match content type {content_type!r}")
        return fmt
