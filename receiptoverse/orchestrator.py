"""
Mint orchestrator — the write path.

Runs one purchase through an explicit state machine:

    START → ASSOCIATING → PUBLISHING → MINTING → TRANSFERRING → DONE
                                    ↘ FAILED   ↘ FAILED       ↘ PARTIAL

Failure policy:
    - ASSOCIATING: best effort. A FAILED association is logged and the
      run continues; the customer may have associated out-of-band, and
      the transfer step surfaces a hard failure if not.
    - PUBLISHING: fatal. No mint without a metadata URI.
    - MINTING: fatal.
    - TRANSFERRING: never rolled back. A failed transfer after a
      successful mint ends in PARTIAL, which still reports the minted
      asset together with the transfer failure.

When the customer is the treasury, TRANSFERRING is skipped and the run
goes from MINTING straight to DONE with no reward (test mode).

Nothing is deduplicated: a retried request mints a second serial.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable

from receiptoverse import schema
from receiptoverse.errors import ReceiptsError, TransferError
from receiptoverse.ledger.associate import AssociationResult, TokenAssociator
from receiptoverse.ledger.mint import MintedAsset, ReceiptMinter
from receiptoverse.ledger.transfer import RewardTransferExecutor, TransferOutcome
from receiptoverse.receipt import LineItem, ReceiptDocument, build_receipt_document
from receiptoverse.storage.publisher import MetadataPublisher

logger = logging.getLogger(__name__)

EXPLORER_URL = "https://hashscan.io"


class MintState(StrEnum):
    START = "START"
    ASSOCIATING = "ASSOCIATING"
    PUBLISHING = "PUBLISHING"
    MINTING = "MINTING"
    TRANSFERRING = "TRANSFERRING"
    DONE = "DONE"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({MintState.DONE, MintState.PARTIAL, MintState.FAILED})


# =========================================================================
# Request
# =========================================================================


@dataclass(frozen=True)
class MintRequest:
    merchant: str
    items: tuple[LineItem, ...]
    total: float
    customer_account: str

    @classmethod
    def from_json(cls, body: Any) -> "MintRequest":
        """Validate and convert a ``POST /mint-receipt`` body.

        Raises:
            ValidationError: If the body does not match the request schema.
        """
        schema.validate(body, schema.MINT_REQUEST)
        return cls(
            merchant=body["merchant"],
            items=tuple(
                LineItem(name=i["name"], price=i["price"], quantity=i["quantity"])
                for i in body["items"]
            ),
            total=body["total"],
            customer_account=body["customerWallet"].strip(),
        )


# =========================================================================
# Run record
# =========================================================================


@dataclass
class MintRun:
    """Everything one orchestration run produced, step by step."""

    request: MintRequest
    state: MintState = MintState.START
    trail: list[MintState] = field(default_factory=lambda: [MintState.START])
    association: AssociationResult | None = None
    document: ReceiptDocument | None = None
    metadata_uri: str | None = None
    asset: MintedAsset | None = None
    transfer: TransferOutcome | None = None
    transfer_error: TransferError | None = None
    error: ReceiptsError | None = None

    def advance(self, state: MintState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"run already finished in {self.state}")
        self.state = state
        self.trail.append(state)

    @property
    def test_mode(self) -> bool:
        return self.transfer is not None and not self.transfer.executed


# =========================================================================
# Orchestrator
# =========================================================================


class MintOrchestrator:
    """Sequences association, publishing, minting and delivery.

    Args:
        associator: Token associator.
        publisher: Metadata publisher.
        minter: Receipt minter.
        transfer_executor: Reward transfer executor.
        treasury_account: Operator account that owns new serials.
        association_key: Key that signs customer associations.
        collection_id: Receipt NFT collection.
        reward_token_id: Fungible reward token.
        reward_amount: Reward tokens per receipt.
        reward_symbol: Display symbol for the reward.
        network: Network name used in explorer links.
        clock: Returns epoch seconds; used for upload file names.
    """

    def __init__(
        self,
        *,
        associator: TokenAssociator,
        publisher: MetadataPublisher,
        minter: ReceiptMinter,
        transfer_executor: RewardTransferExecutor,
        treasury_account: str,
        association_key: str | None,
        collection_id: str,
        reward_token_id: str,
        reward_amount: int,
        reward_symbol: str = "RECV",
        network: str = "testnet",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._associator = associator
        self._publisher = publisher
        self._minter = minter
        self._transfer_executor = transfer_executor
        self._treasury_account = treasury_account
        self._association_key = association_key
        self._collection_id = collection_id
        self._reward_token_id = reward_token_id
        self._reward_amount = reward_amount
        self._reward_symbol = reward_symbol
        self._network = network
        self._clock = clock

    @property
    def token_ids(self) -> list[str]:
        return [self._reward_token_id, self._collection_id]

    async def run(self, request: MintRequest) -> MintRun:
        """Run the pipeline for one purchase.

        Never raises for pipeline errors; the returned run ends in DONE,
        PARTIAL or FAILED.
        """
        run = MintRun(request=request)
        logger.info("Creating receipt for %s, total %s", request.merchant, request.total)

        # ASSOCIATING: best effort
        run.advance(MintState.ASSOCIATING)
        run.association = await self._associator.ensure_associated(
            request.customer_account, self._association_key, self.token_ids
        )
        if not run.association.ok:
            logger.warning(
                "Token association failed for %s (continuing): %s",
                request.customer_account, run.association.detail,
            )

        # PUBLISHING: fatal
        run.advance(MintState.PUBLISHING)
        run.document = build_receipt_document(request.merchant, list(request.items), request.total)
        try:
            run.metadata_uri = await self._publisher.publish(
                run.document, f"receipt-{int(self._clock() * 1000)}.json"
            )
        except ReceiptsError as exc:
            return self._fail(run, exc)

        # MINTING: fatal
        run.advance(MintState.MINTING)
        try:
            run.asset = await self._minter.mint(
                self._collection_id, run.metadata_uri.encode("utf-8")
            )
        except ReceiptsError as exc:
            return self._fail(run, exc)

        # TRANSFERRING: reported, never rolled back; skipped in test mode
        if request.customer_account != self._treasury_account:
            run.advance(MintState.TRANSFERRING)
        try:
            run.transfer = await self._transfer_executor.transfer(
                self._collection_id,
                run.asset.serial,
                self._treasury_account,
                request.customer_account,
                self._reward_token_id,
                self._reward_amount,
            )
        except TransferError as exc:
            run.transfer_error = exc
            run.advance(MintState.PARTIAL)
            logger.error(
                "Minted %s but transfer to %s failed: %s [%s]",
                run.asset.nft_id, request.customer_account, exc.message, exc.code,
            )
            return run

        run.advance(MintState.DONE)
        logger.info("Receipt %s completed (%s)", run.asset.nft_id, run.transfer.status)
        return run

    def _fail(self, run: MintRun, exc: ReceiptsError) -> MintRun:
        failed_in = run.state
        run.error = exc
        run.advance(MintState.FAILED)
        logger.error("Receipt pipeline failed in %s: %s [%s]", failed_in, exc.message, exc.code)
        return run

    # -----------------------------------------------------------------
    # Response composition
    # -----------------------------------------------------------------

    def nft_view_url(self, asset: MintedAsset) -> str:
        return f"{EXPLORER_URL}/{self._network}/token/{asset.collection_id}/{asset.serial}"

    def compose_response(self, run: MintRun) -> tuple[dict[str, Any], int]:
        """Build the ``POST /mint-receipt`` body and HTTP status for a run."""
        if run.state is MintState.FAILED:
            if run.error is None:
                raise RuntimeError("failed run carries no error")
            return run.error.to_dict(), 500

        if run.state not in (MintState.DONE, MintState.PARTIAL):
            raise RuntimeError(f"run is not finished: {run.state}")

        if run.asset is None or run.document is None:
            raise RuntimeError(f"{run.state} run carries no minted asset")
        body: dict[str, Any] = {
            "status": "success",
            "receiptNFT": run.asset.nft_id,
            "metadataUrl": run.metadata_uri,
            "metadata": run.document.to_dict(),
            "nftViewUrl": self.nft_view_url(run.asset),
            "testMode": run.test_mode,
        }

        if run.state is MintState.PARTIAL:
            if run.transfer_error is None:
                raise RuntimeError("partial run carries no transfer error")
            body.update(
                reward="No reward (transfer failed)",
                txStatus="TRANSFER_FAILED",
                transferError={
                    "code": run.transfer_error.code,
                    "message": run.transfer_error.message,
                },
            )
            return body, 200

        if run.transfer is None:
            raise RuntimeError("finished run carries no transfer outcome")
        if run.transfer.reward_amount > 0:
            body["reward"] = f"{run.transfer.reward_amount} {self._reward_symbol}"
        else:
            body["reward"] = "No reward (testing mode)"
        body["txStatus"] = run.transfer.status
        return body, 200
