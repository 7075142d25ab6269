"""
Ledger transaction recipes.

Builds plain transaction dicts for the three transaction types the
receipt pipeline submits. A recipe is pure and deterministic: no
network state, no secrets. Node selection, transaction ids and
signatures are submit-time concerns of the concrete ledger client.

Recipes carry:
    - ``type``: "TokenAssociate", "TokenMint" or "CryptoTransfer"
    - ``max_fee_hbar``: fee ceiling for this transaction
    - ``valid_duration_s``: validity window (mint and transfer)
    - type-specific fields (see each builder)
"""

from __future__ import annotations

# Hedera limits NFT metadata to 100 bytes per serial.
MAX_NFT_METADATA_BYTES = 100

ASSOCIATE_MAX_FEE_HBAR = 20
MINT_MAX_FEE_HBAR = 50
TRANSFER_MAX_FEE_HBAR = 50
VALID_DURATION_S = 180

TRANSFER_MEMO = "Receipt NFT + Reward"


def plan_association(account_id: str, token_ids: list[str]) -> dict[str, object]:
    """Build a TokenAssociate recipe.

    Raises:
        ValueError: If account_id is empty or token_ids is empty.
    """
    if not account_id:
        raise ValueError("account_id must be non-empty")
    if not token_ids:
        raise ValueError("token_ids must contain at least one token id")

    return {
        "type": "TokenAssociate",
        "account_id": account_id,
        "token_ids": list(token_ids),
        "max_fee_hbar": ASSOCIATE_MAX_FEE_HBAR,
    }


def plan_mint(collection_id: str, payload: bytes) -> dict[str, object]:
    """Build a TokenMint recipe for exactly one NFT serial.

    Args:
        collection_id: Token id of the receipt NFT collection.
        payload: Opaque metadata bytes stored on the new serial.

    Raises:
        ValueError: If payload is empty or larger than
            MAX_NFT_METADATA_BYTES. Oversized payloads are refused, not
            truncated, so a stored URI is never silently corrupted.
    """
    if not collection_id:
        raise ValueError("collection_id must be non-empty")
    if not payload:
        raise ValueError("payload must be non-empty")
    if len(payload) > MAX_NFT_METADATA_BYTES:
        raise ValueError(
            f"payload exceeds {MAX_NFT_METADATA_BYTES} bytes "
            f"(got {len(payload)} bytes)"
        )

    return {
        "type": "TokenMint",
        "token_id": collection_id,
        "metadata": [payload],
        "max_fee_hbar": MINT_MAX_FEE_HBAR,
        "valid_duration_s": VALID_DURATION_S,
    }


def plan_reward_transfer(
    collection_id: str,
    serial: int,
    sender: str,
    receiver: str,
    reward_token_id: str,
    reward_amount: int,
    memo: str = TRANSFER_MEMO,
) -> dict[str, object]:
    """Build one CryptoTransfer moving an NFT serial plus a reward.

    Both legs live in the same recipe, so the ledger applies them
    atomically or not at all. Token legs sum to zero.

    Raises:
        ValueError: If sender == receiver, serial < 1 or reward_amount < 1.
    """
    if sender == receiver:
        raise ValueError("sender and receiver must differ")
    if serial < 1:
        raise ValueError(f"serial must be >= 1, got: {serial}")
    if reward_amount < 1:
        raise ValueError(f"reward_amount must be >= 1, got: {reward_amount}")

    return {
        "type": "CryptoTransfer",
        "nft_transfers": [
            {
                "token_id": collection_id,
                "serial": serial,
                "sender": sender,
                "receiver": receiver,
            }
        ],
        "token_transfers": [
            {"token_id": reward_token_id, "account_id": sender, "amount": -reward_amount},
            {"token_id": reward_token_id, "account_id": receiver, "amount": reward_amount},
        ],
        "memo": memo,
        "max_fee_hbar": TRANSFER_MAX_FEE_HBAR,
        "valid_duration_s": VALID_DURATION_S,
    }
