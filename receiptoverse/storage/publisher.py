"""
Metadata publisher — uploads receipt documents to IPFS through Pinata.

One upload per call, no retries. Upstream error bodies are preserved on
StorageUploadError so operators can see what Pinata said.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from receiptoverse.errors import StorageUploadError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.pinata.cloud"
DEFAULT_GATEWAY_URL = "https://gateway.pinata.cloud"
METADATA_KIND = "receipt_nft_metadata"


class MetadataPublisher:
    """Pins JSON documents and returns gateway URLs for them.

    Args:
        jwt: Pinata API JWT.
        api_url: Pinata API base URL.
        gateway_url: Gateway base URL used to build resolvable URIs.
        timeout_s: Upload timeout in seconds.
    """

    def __init__(
        self,
        *,
        jwt: str,
        api_url: str = DEFAULT_API_URL,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        timeout_s: float = 30.0,
    ) -> None:
        self._jwt = jwt
        self._api_url = api_url.rstrip("/")
        self._gateway_url = gateway_url.rstrip("/")
        self._timeout_s = timeout_s

    def gateway_uri(self, content_id: str) -> str:
        return f"{self._gateway_url}/ipfs/{content_id}"

    async def publish(self, document: Any, filename: str) -> str:
        """Upload ``document`` as a pretty-printed JSON file named ``filename``.

        Args:
            document: JSON-serializable object, or an object with ``to_dict()``.
            filename: Non-empty file name hint.

        Returns:
            Gateway URL resolving to the pinned content.

        Raises:
            ValueError: If filename is empty.
            StorageUploadError: On timeout, transport failure, non-2xx
                status, or a response without a content hash.
        """
        if not filename:
            raise ValueError("filename must be non-empty")

        if hasattr(document, "to_dict"):
            document = document.to_dict()
        body = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

        url = f"{self._api_url}/pinning/pinFileToIPFS"
        data = {
            "pinataMetadata": json.dumps(
                {"name": filename, "keyvalues": {"type": METADATA_KIND}}
            ),
            "pinataOptions": json.dumps({"cidVersion": 0}),
        }
        files = {"file": (filename, body, "application/json")}

        try:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.post(
                    url,
                    data=data,
                    files=files,
                    headers={"Authorization": f"Bearer {self._jwt}"},
                )
        except httpx.TimeoutException as exc:
            raise StorageUploadError(
                f"Pinata upload timed out after {self._timeout_s}s",
                code="TIMEOUT",
                details={"url": url},
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageUploadError(
                f"Pinata upload failed: {exc}",
                code="CONNECTION_FAILED",
                details={"url": url},
            ) from exc

        if response.status_code >= 400:
            logger.error("Pinata upload error: %s %s", response.status_code, response.text)
            raise StorageUploadError(
                response.text or f"HTTP {response.status_code}",
                code=f"HTTP_{response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            content_id = response.json()["IpfsHash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageUploadError(
                "Pinata response did not include IpfsHash",
                code="INVALID_RESPONSE",
                details={"body_preview": response.text[:200]},
            ) from exc

        uri = self.gateway_uri(content_id)
        logger.info("Pinned %s at %s", filename, uri)
        return uri
