"""
Cloudinary-backed asset store using the signed REST upload API.

Only two endpoints are needed: image/upload and image/destroy. Requests are
signed with the API secret (SHA-1 over the sorted parameters), so no SDK is
required; a shared requests.Session keeps connections warm.
"""
from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict, Optional

import requests

from domain.errors import AssetRemovalError, AssetUploadError
from domain.models import StoredAsset
from storage.base import AssetStore

CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"
logger = logging.getLogger(__name__)

# destroy reports "not found" for handles that are already gone
_REMOVED_RESULTS = {"ok", "not found"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Return the Cloudinary signature for ``params``.

    Parameters are sorted by name, joined as ``key=value`` pairs with ``&``,
    the secret is appended, and the result is SHA-1 hashed.
    """
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryAssetStore(AssetStore):
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "book-covers",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        base_url: str = CLOUDINARY_API_BASE_URL,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self._api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = f"{base_url.rstrip('/')}/{cloud_name}/image"

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(params)
        payload["timestamp"] = int(time.time())
        payload["signature"] = sign_params(payload, self._api_secret)
        payload["api_key"] = self.api_key
        return payload

    def upload(self, data: bytes, content_type: str) -> StoredAsset:
        fmt = self.require_supported_format(data, content_type)
        payload = self._signed({"folder": self.folder, "allowed_formats": "jpg,png"})
        files = {"file": (f"cover{fmt.extension}", data, fmt.content_type)}

        logger.debug("Uploading cover to Cloudinary folder %s (%d bytes)", self.folder, len(data))
        try:
            resp = self.session.post(
                f"{self.base_url}/upload", data=payload, files=files, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AssetUploadError(f"Cloudinary upload request failed: {e}") from e

        body = self._json(resp)
        if resp.status_code >= 400:
            raise AssetUploadError(
                f"Cloudinary upload rejected ({resp.status_code}): {self._error_message(body)}"
            )
        url = body.get("secure_url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise AssetUploadError("Cloudinary upload response is missing secure_url or public_id")
        return StoredAsset(url=url, handle=public_id)

    def remove(self, handle: str) -> None:
        payload = self._signed({"public_id": handle})

        logger.debug("Removing Cloudinary asset %s", handle)
        try:
            resp = self.session.post(f"{self.base_url}/destroy", data=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise AssetRemovalError(handle, f"request failed: {e}") from e

        body = self._json(resp)
        if resp.status_code >= 400:
            raise AssetRemovalError(handle, f"HTTP {resp.status_code}: {self._error_message(body)}")
        result = body.get("result")
        if result not in _REMOVED_RESULTS:
            raise AssetRemovalError(handle, f"unexpected result {result!r}")
        if result == "not found":
            logger.info("Cloudinary asset %s was already gone", handle)

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _error_message(body: Dict[str, Any]) -> str:
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return "no error message"
