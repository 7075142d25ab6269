"""
Ledger layer for receipt NFTs.

Public API:

    Pure layer (no I/O):
        - Recipes: ``plan_association``, ``plan_mint``, ``plan_reward_transfer``.
        - Status predicates: ``is_success``, ``is_already_associated``.

    Impure layer (network I/O):
        - ``TokenAssociator`` — ensure an account can hold the receipt tokens.
        - ``ReceiptMinter`` — mint exactly one receipt serial.
        - ``RewardTransferExecutor`` — atomic NFT + reward delivery.

    Protocol (for dependency injection):
        - ``LedgerClient`` — network boundary (execute recipe, wait for receipt).

    Result types:
        - ``LedgerReceipt``, ``AssociationResult``, ``MintedAsset``,
          ``TransferOutcome``.

    Concrete client:
        - ``HieroLedgerClient`` — Hedera via hiero-sdk-python (imported lazily).
"""

from receiptoverse.ledger.associate import (
    AssociationResult,
    AssociationStatus,
    TokenAssociator,
)
from receiptoverse.ledger.client import LedgerClient, LedgerReceipt
from receiptoverse.ledger.errors import is_already_associated, is_success
from receiptoverse.ledger.hiero_client import HieroLedgerClient
from receiptoverse.ledger.mint import MintedAsset, ReceiptMinter
from receiptoverse.ledger.transfer import (
    MINTED_ONLY_STATUS,
    RewardTransferExecutor,
    TransferOutcome,
)
from receiptoverse.ledger.tx import (
    MAX_NFT_METADATA_BYTES,
    plan_association,
    plan_mint,
    plan_reward_transfer,
)

__all__ = [
    "AssociationResult",
    "AssociationStatus",
    "HieroLedgerClient",
    "LedgerClient",
    "LedgerReceipt",
    "MAX_NFT_METADATA_BYTES",
    "MINTED_ONLY_STATUS",
    "MintedAsset",
    "ReceiptMinter",
    "RewardTransferExecutor",
    "TokenAssociator",
    "TransferOutcome",
    "is_already_associated",
    "is_success",
    "plan_association",
    "plan_mint",
    "plan_reward_transfer",
]
