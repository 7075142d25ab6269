"""
Receipt NFT minting.

Mints exactly one serial under the receipt collection, with the metadata
URI bytes as the serial's on-ledger payload. Either one serial is created
and returned, or MintError is raised and none is reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from receiptoverse.errors import MintError
from receiptoverse.ledger.client import LedgerClient
from receiptoverse.ledger.errors import classify_exception
from receiptoverse.ledger.tx import plan_mint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintedAsset:
    """One receipt NFT serial, created by a successful mint.

    Owned by the treasury account at creation.
    """

    collection_id: str
    serial: int
    metadata_uri: str

    @property
    def nft_id(self) -> str:
        return f"{self.collection_id}::{self.serial}"


class ReceiptMinter:
    def __init__(self, client: LedgerClient) -> None:
        self._client = client

    async def mint(self, collection_id: str, payload: bytes) -> MintedAsset:
        """Mint one NFT carrying ``payload`` and return the new serial.

        Args:
            collection_id: Receipt NFT collection token id.
            payload: UTF-8 bytes of the metadata URI.

        Raises:
            MintError: On oversized payload, submission failure, a
                non-SUCCESS receipt, or a receipt without exactly one serial.
        """
        try:
            recipe = plan_mint(collection_id, payload)
        except ValueError as exc:
            raise MintError(str(exc), code="METADATA_TOO_LARGE") from exc

        try:
            receipt = await self._client.execute(recipe)
        except Exception as exc:
            raise MintError(
                f"mint submit failed: {exc}", code=classify_exception(exc)
            ) from exc

        if not receipt.success:
            raise MintError(
                receipt.detail or f"mint rejected: {receipt.status}",
                code=receipt.status,
                details={"transaction_id": receipt.transaction_id},
            )

        if len(receipt.serials) != 1:
            raise MintError(
                f"expected exactly one serial, got {len(receipt.serials)}",
                code="UNEXPECTED_SERIALS",
                details={"transaction_id": receipt.transaction_id},
            )

        asset = MintedAsset(
            collection_id=collection_id,
            serial=receipt.serials[0],
            metadata_uri=payload.decode("utf-8"),
        )
        logger.info("Minted receipt NFT %s", asset.nft_id)
        return asset
