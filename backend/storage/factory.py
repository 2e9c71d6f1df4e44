"""
Build the asset store selected by configuration.
"""
from domain.errors import AssetStoreConfigError
from settings import Settings
from storage.base import AssetStore
from storage.cloudinary_storage import CloudinaryAssetStore
from storage.file_storage import LocalAssetStore


def build_asset_store(config: Settings) -> AssetStore:
    backend = config.ASSET_BACKEND
    if backend == "local":
        return LocalAssetStore(media_root=config.MEDIA_ROOT, base_url=config.MEDIA_BASE_URL)
    if backend == "cloudinary":
        missing = [
            name
            for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET")
            if not getattr(config, name)
        ]
        if missing:
            raise AssetStoreConfigError(f"Cloudinary backend requires {', '.join(missing)}")
        return CloudinaryAssetStore(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET,
            folder=config.CLOUDINARY_FOLDER,
            timeout=config.ASSET_TIMEOUT_SECONDS,
        )
    raise AssetStoreConfigError(f"Unknown ASSET_BACKEND: {backend!r}")
