"""
File storage abstraction.

Local filesystem implementation of the asset store, used for development
and single-host deployments. Files are served by the API under the media
mount, so the public URL is just the media base URL plus the handle.
"""
import logging
import os
import uuid
from pathlib import Path

from domain.errors import AssetRemovalError, AssetUploadError
from domain.models import StoredAsset
from storage.base import AssetStore

logger = logging.getLogger(__name__)


class LocalAssetStore(AssetStore):
    """
    Local file storage implementation.

    Files are organized as:
    - media/covers/{uuid}.jpg|.png  - Uploaded book covers
    """

    COVERS_DIR = "covers"

    def __init__(self, media_root: str = "media", base_url: str = "/media"):
        self.media_root = Path(media_root)
        self.media_root.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def get_covers_dir(self) -> Path:
        """Get the covers directory."""
        path = self.media_root / self.COVERS_DIR
        path.mkdir(parents=True, exist_ok=True)
        return path

    def upload(self, data: bytes, content_type: str) -> StoredAsset:
        fmt = self.require_supported_format(data, content_type)
        filename = f"{uuid.uuid4()}{fmt.extension}"
        file_path = self.get_covers_dir() / filename
        tmp_path = file_path.with_suffix(file_path.suffix + ".part")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, file_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise AssetUploadError(f"Failed to write cover image: {e}") from e

        handle = f"{self.COVERS_DIR}/{filename}"
        logger.debug("Stored cover %s (%d bytes)", handle, len(data))
        return StoredAsset(url=f"{self.base_url}/{handle}", handle=handle)

    def remove(self, handle: str) -> None:
        path = self.get_absolute_path(handle)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Cover %s already removed", handle)
        except OSError as e:
            raise AssetRemovalError(handle, str(e)) from e

    def get_absolute_path(self, handle: str) -> Path:
        """Convert a handle to an absolute path inside the media root."""
        root = self.media_root.resolve()
        path = (root / handle).resolve()
        if root not in path.parents:
            raise AssetRemovalError(handle, "handle points outside the media root")
        return path

