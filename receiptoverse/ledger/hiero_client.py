"""
Hedera implementation of LedgerClient, backed by hiero-sdk-python.

Turns recipes from ``receiptoverse.ledger.tx`` into SDK transactions,
signs them with the operator (and an optional extra key), executes them
and waits for the receipt. The SDK is synchronous; each execution runs
in a worker thread and is bounded by ``timeout_s``.

Lazily imports hiero_sdk_python so the rest of the package (and its
tests) never needs the SDK loaded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from receiptoverse.ledger.client import LedgerReceipt

logger = logging.getLogger(__name__)

DEFAULT_MAX_FEE_HBAR = 100


class HieroLedgerClient:
    """LedgerClient bound to one operator account on one Hedera network.

    Args:
        network: "testnet", "mainnet" or "previewnet".
        operator_id: Operator (treasury) account id, e.g. "0.0.500".
        operator_key: Operator private key (ECDSA, hex or DER string).
        default_max_fee_hbar: Fee ceiling for recipes that carry none.
        timeout_s: Upper bound for submit + receipt wait.
    """

    def __init__(
        self,
        *,
        network: str,
        operator_id: str,
        operator_key: str,
        default_max_fee_hbar: int = DEFAULT_MAX_FEE_HBAR,
        timeout_s: float = 60.0,
    ) -> None:
        from hiero_sdk_python import AccountId, Client, Network, PrivateKey

        self._operator_id = operator_id
        self._default_max_fee_hbar = default_max_fee_hbar
        self._timeout_s = timeout_s
        self._client = Client(Network(network=network))
        self._client.set_operator(
            AccountId.from_string(operator_id),
            PrivateKey.from_string_ecdsa(operator_key),
        )
        logger.info("Ledger client ready on %s for operator %s", network, operator_id)

    @property
    def operator_account(self) -> str:
        return self._operator_id

    async def execute(
        self,
        recipe: dict[str, object],
        *,
        signing_key: str | None = None,
    ) -> LedgerReceipt:
        return await asyncio.wait_for(
            asyncio.to_thread(self._execute_sync, recipe, signing_key),
            timeout=self._timeout_s,
        )

    # -----------------------------------------------------------------
    # SDK plumbing (runs in a worker thread)
    # -----------------------------------------------------------------

    def _execute_sync(
        self,
        recipe: dict[str, object],
        signing_key: str | None,
    ) -> LedgerReceipt:
        from hiero_sdk_python import Hbar, PrivateKey

        tx = self._build(recipe)
        max_fee = recipe.get("max_fee_hbar", self._default_max_fee_hbar)
        tx.transaction_fee = Hbar(max_fee).to_tinybars()
        if "valid_duration_s" in recipe:
            tx.transaction_valid_duration = recipe["valid_duration_s"]
        if "memo" in recipe:
            tx.set_transaction_memo(recipe["memo"])

        tx.freeze_with(self._client)
        if signing_key is not None:
            tx.sign(PrivateKey.from_string_ecdsa(signing_key))

        try:
            receipt = tx.execute(self._client)
        except Exception as exc:
            # Precheck and receipt errors carry a ledger status; anything
            # else is a transport problem for the caller to classify.
            status = getattr(exc, "status", None)
            if status is None:
                raise
            return LedgerReceipt(status=_status_name(status), detail=str(exc))

        transaction_id = getattr(receipt, "transaction_id", None)
        return LedgerReceipt(
            status=_status_name(receipt.status),
            transaction_id=str(transaction_id) if transaction_id is not None else None,
            serials=tuple(int(s) for s in getattr(receipt, "serial_numbers", None) or ()),
        )

    def _build(self, recipe: dict[str, object]) -> Any:
        from hiero_sdk_python import (
            AccountId,
            NftId,
            TokenAssociateTransaction,
            TokenId,
            TokenMintTransaction,
            TransferTransaction,
        )

        kind = recipe["type"]
        if kind == "TokenAssociate":
            tx = TokenAssociateTransaction().set_account_id(
                AccountId.from_string(recipe["account_id"])
            )
            for token_id in recipe["token_ids"]:
                tx.add_token_id(TokenId.from_string(token_id))
            return tx

        if kind == "TokenMint":
            return (
                TokenMintTransaction()
                .set_token_id(TokenId.from_string(recipe["token_id"]))
                .set_metadata(list(recipe["metadata"]))
            )

        if kind == "CryptoTransfer":
            tx = TransferTransaction()
            for leg in recipe["nft_transfers"]:
                tx.add_nft_transfer(
                    NftId(TokenId.from_string(leg["token_id"]), leg["serial"]),
                    AccountId.from_string(leg["sender"]),
                    AccountId.from_string(leg["receiver"]),
                )
            for leg in recipe["token_transfers"]:
                tx.add_token_transfer(
                    TokenId.from_string(leg["token_id"]),
                    AccountId.from_string(leg["account_id"]),
                    leg["amount"],
                )
            return tx

        raise ValueError(f"unsupported recipe type: {kind!r}")


def _status_name(status: Any) -> str:
    from hiero_sdk_python import ResponseCode

    if isinstance(status, str):
        return status
    return ResponseCode(status).name
