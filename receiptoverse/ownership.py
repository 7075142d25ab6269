"""
Ownership resolver — the read path.

Lists the receipt NFTs an account owns via the Hedera mirror node and
rebuilds each one into an OwnedAssetView:

    mirror node row → base64 payload → UTF-8 string
        → "http..."  : fetch the document (5 s), metadata = JSON body
        → otherwise  : metadata = inline JSON

A single unreachable or malformed document only degrades its own item
to ``metadata=None``; it never fails the listing. Metadata fetches run
concurrently and are joined before returning. The indexer listing as a
whole (all pages) is bounded separately (10 s). Nothing is cached.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from receiptoverse.errors import IndexerQueryError, MetadataFetchError

logger = logging.getLogger(__name__)

LISTING_TIMEOUT_S = 10.0
METADATA_TIMEOUT_S = 5.0

MIRROR_NODE_URLS = {
    "mainnet": "https://mainnet-public.mirrornode.hedera.com",
    "testnet": "https://testnet.mirrornode.hedera.com",
    "previewnet": "https://previewnet.mirrornode.hedera.com",
}


# =========================================================================
# Address formats
# =========================================================================


class AddressFormat(StrEnum):
    """Account identifier formats accepted on the read path."""

    NATIVE = "native"  # shard.realm.num, e.g. 0.0.1001
    ALTERNATE_HEX = "alternate_hex"  # EVM-style 0x-prefixed address


def detect_address_format(account: str) -> AddressFormat:
    if account.strip().lower().startswith("0x"):
        return AddressFormat.ALTERNATE_HEX
    return AddressFormat.NATIVE


def normalize_address(account: str, address_format: AddressFormat) -> str:
    if address_format is AddressFormat.ALTERNATE_HEX:
        return account.strip().lower()
    return account.strip()


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class OwnedAssetView:
    collection_id: str
    serial: int
    created_at: str | None
    metadata_uri: str | None
    metadata: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokenId": self.collection_id,
            "serial": self.serial,
            "created": self.created_at,
            "metadataUrl": self.metadata_uri,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class OwnershipListing:
    account: str
    original_account: str
    address_format: AddressFormat
    assets: tuple[OwnedAssetView, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "success",
            "account": self.account,
            "originalAccount": self.original_account,
            "count": len(self.assets),
            "nfts": [asset.to_dict() for asset in self.assets],
        }


# =========================================================================
# Payload decoding (pure)
# =========================================================================


def decode_payload(raw: str | None) -> str | None:
    """Decode a mirror node base64 metadata field into a UTF-8 string.

    Returns None for an empty field or bytes that are not valid
    base64/UTF-8.
    """
    if not raw:
        return None
    try:
        return base64.b64decode(raw, validate=True).decode("utf-8")
    except ValueError:
        return None


def is_uri(decoded: str) -> bool:
    return decoded.startswith("http")


# =========================================================================
# Resolver
# =========================================================================


class OwnershipResolver:
    """Rebuilds receipt views for the receipt NFTs an account holds.

    Args:
        mirror_url: Mirror node base URL.
        collection_id: Receipt NFT collection token id to filter on.
        listing_timeout_s: Bound for the whole indexer listing.
        metadata_timeout_s: Bound for each metadata document fetch.
    """

    def __init__(
        self,
        *,
        mirror_url: str,
        collection_id: str,
        listing_timeout_s: float = LISTING_TIMEOUT_S,
        metadata_timeout_s: float = METADATA_TIMEOUT_S,
    ) -> None:
        self._mirror_url = mirror_url.rstrip("/")
        self._collection_id = collection_id
        self._listing_timeout_s = listing_timeout_s
        self._metadata_timeout_s = metadata_timeout_s

    async def list_owned(self, account_id: str) -> OwnershipListing:
        """List receipt NFTs owned by ``account_id``, in indexer order.

        Raises:
            IndexerQueryError: If the mirror node cannot be queried.
        """
        address_format = detect_address_format(account_id)
        account = normalize_address(account_id, address_format)
        logger.info("Fetching NFTs for account %s (%s)", account, address_format)

        rows = await self._query_indexer(account)
        logger.info("Found %d NFTs for account %s", len(rows), account)

        async with httpx.AsyncClient(timeout=self._metadata_timeout_s) as client:
            assets = await asyncio.gather(*(self._resolve(client, row) for row in rows))

        return OwnershipListing(
            account=account,
            original_account=account_id,
            address_format=address_format,
            assets=tuple(assets),
        )

    # -----------------------------------------------------------------
    # Indexer
    # -----------------------------------------------------------------

    async def _query_indexer(self, account: str) -> list[dict[str, Any]]:
        url = f"{self._mirror_url}/api/v1/accounts/{account}/nfts"
        params: dict[str, str] | None = {"token.id": self._collection_id}
        rows: list[dict[str, Any]] = []

        try:
            async with asyncio.timeout(self._listing_timeout_s):
                async with httpx.AsyncClient(timeout=self._listing_timeout_s) as client:
                    while url:
                        response = await client.get(url, params=params)
                        if response.status_code >= 400:
                            raise IndexerQueryError(
                                f"Mirror node returned HTTP {response.status_code}",
                                code=f"HTTP_{response.status_code}",
                                api_error=_body_or_text(response),
                            )
                        page = response.json()
                        rows.extend(page.get("nfts") or [])
                        next_link = (page.get("links") or {}).get("next")
                        # The next link already carries the query string.
                        url = f"{self._mirror_url}{next_link}" if next_link else ""
                        params = None
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise IndexerQueryError(
                f"Mirror node listing timed out after {self._listing_timeout_s}s",
                code="TIMEOUT",
                api_error=str(exc) or None,
            ) from exc
        except httpx.HTTPError as exc:
            raise IndexerQueryError(
                f"Mirror node request failed: {exc}",
                code="CONNECTION_FAILED",
                api_error=str(exc),
            ) from exc
        except ValueError as exc:
            raise IndexerQueryError(
                "Mirror node response was not valid JSON",
                code="INVALID_JSON",
                api_error=str(exc),
            ) from exc

        return rows

    # -----------------------------------------------------------------
    # Per-item resolution
    # -----------------------------------------------------------------

    async def _resolve(self, client: httpx.AsyncClient, row: dict[str, Any]) -> OwnedAssetView:
        decoded = decode_payload(row.get("metadata"))
        metadata_uri = decoded if decoded is not None and is_uri(decoded) else None

        metadata = None
        if decoded is not None:
            try:
                if metadata_uri is not None:
                    metadata = await self._fetch_metadata(client, metadata_uri)
                else:
                    metadata = _parse_inline(decoded)
            except MetadataFetchError as exc:
                logger.warning(
                    "Could not resolve metadata for NFT %s/%s: %s",
                    row.get("token_id"), row.get("serial_number"), exc,
                )

        return OwnedAssetView(
            collection_id=row.get("token_id", self._collection_id),
            serial=int(row.get("serial_number", 0)),
            created_at=row.get("created_timestamp"),
            metadata_uri=metadata_uri,
            metadata=metadata,
        )

    async def _fetch_metadata(self, client: httpx.AsyncClient, uri: str) -> Any:
        try:
            response = await client.get(uri, follow_redirects=True)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise MetadataFetchError(str(exc) or type(exc).__name__, details={"uri": uri}) from exc
        except ValueError as exc:
            raise MetadataFetchError(
                "metadata document is not valid JSON", details={"uri": uri}
            ) from exc


def _parse_inline(decoded: str) -> Any:
    try:
        return json.loads(decoded)
    except ValueError as exc:
        raise MetadataFetchError("inline metadata is not valid JSON") from exc


def _body_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
