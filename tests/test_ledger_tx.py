"""
Tests for ledger transaction recipes.

Test plan:
- Association: type, account, token ids, fee ceiling, empty inputs rejected
- Mint: exactly one metadata entry, fee ceiling, validity window,
  100-byte payload limit (boundary accepted, overflow refused)
- Transfer: NFT leg + balanced reward legs in one recipe, memo,
  self-transfer and non-positive amounts rejected
"""

import pytest

from receiptoverse.ledger.tx import (
    ASSOCIATE_MAX_FEE_HBAR,
    MAX_NFT_METADATA_BYTES,
    MINT_MAX_FEE_HBAR,
    TRANSFER_MEMO,
    VALID_DURATION_S,
    plan_association,
    plan_mint,
    plan_reward_transfer,
)

COLLECTION = "0.0.700"
REWARD_TOKEN = "0.0.600"
TREASURY = "0.0.500"
CUSTOMER = "0.0.1001"
URI = "https://gateway.pinata.cloud/ipfs/QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


class TestPlanAssociation:
    def test_recipe_shape(self) -> None:
        recipe = plan_association(CUSTOMER, [REWARD_TOKEN, COLLECTION])
        assert recipe == {
            "type": "TokenAssociate",
            "account_id": CUSTOMER,
            "token_ids": [REWARD_TOKEN, COLLECTION],
            "max_fee_hbar": ASSOCIATE_MAX_FEE_HBAR,
        }

    def test_token_ids_are_copied(self) -> None:
        tokens = [COLLECTION]
        recipe = plan_association(CUSTOMER, tokens)
        tokens.append("0.0.999")
        assert recipe["token_ids"] == [COLLECTION]

    def test_empty_account_rejected(self) -> None:
        with pytest.raises(ValueError, match="account_id"):
            plan_association("", [COLLECTION])

    def test_empty_token_ids_rejected(self) -> None:
        with pytest.raises(ValueError, match="token_ids"):
            plan_association(CUSTOMER, [])


class TestPlanMint:
    def test_single_metadata_entry(self) -> None:
        recipe = plan_mint(COLLECTION, URI.encode())
        assert recipe["type"] == "TokenMint"
        assert recipe["token_id"] == COLLECTION
        assert recipe["metadata"] == [URI.encode()]

    def test_fee_and_validity_bounded(self) -> None:
        recipe = plan_mint(COLLECTION, URI.encode())
        assert recipe["max_fee_hbar"] == MINT_MAX_FEE_HBAR
        assert recipe["valid_duration_s"] == VALID_DURATION_S

    def test_payload_at_limit_accepted(self) -> None:
        payload = b"h" * MAX_NFT_METADATA_BYTES
        assert plan_mint(COLLECTION, payload)["metadata"] == [payload]

    def test_payload_over_limit_rejected(self) -> None:
        with pytest.raises(ValueError, match="exceeds 100 bytes"):
            plan_mint(COLLECTION, b"h" * (MAX_NFT_METADATA_BYTES + 1))

    def test_empty_payload_rejected(self) -> None:
        with pytest.raises(ValueError, match="payload"):
            plan_mint(COLLECTION, b"")


class TestPlanRewardTransfer:
    def test_nft_leg(self) -> None:
        recipe = plan_reward_transfer(COLLECTION, 7, TREASURY, CUSTOMER, REWARD_TOKEN, 10)
        assert recipe["nft_transfers"] == [
            {"token_id": COLLECTION, "serial": 7, "sender": TREASURY, "receiver": CUSTOMER}
        ]

    def test_reward_legs_balance(self) -> None:
        recipe = plan_reward_transfer(COLLECTION, 7, TREASURY, CUSTOMER, REWARD_TOKEN, 10)
        legs = recipe["token_transfers"]
        assert sum(leg["amount"] for leg in legs) == 0
        assert {leg["account_id"]: leg["amount"] for leg in legs} == {
            TREASURY: -10,
            CUSTOMER: 10,
        }
        assert all(leg["token_id"] == REWARD_TOKEN for leg in legs)

    def test_single_recipe_carries_both_legs(self) -> None:
        recipe = plan_reward_transfer(COLLECTION, 7, TREASURY, CUSTOMER, REWARD_TOKEN, 10)
        assert recipe["type"] == "CryptoTransfer"
        assert len(recipe["nft_transfers"]) == 1
        assert len(recipe["token_transfers"]) == 2

    def test_default_memo(self) -> None:
        recipe = plan_reward_transfer(COLLECTION, 7, TREASURY, CUSTOMER, REWARD_TOKEN, 10)
        assert recipe["memo"] == TRANSFER_MEMO == "Receipt NFT + Reward"

    def test_self_transfer_rejected(self) -> None:
        with pytest.raises(ValueError, match="differ"):
            plan_reward_transfer(COLLECTION, 7, TREASURY, TREASURY, REWARD_TOKEN, 10)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_reward_rejected(self, amount: int) -> None:
        with pytest.raises(ValueError, match="reward_amount"):
            plan_reward_transfer(COLLECTION, 7, TREASURY, CUSTOMER, REWARD_TOKEN, amount)

    def test_zero_serial_rejected(self) -> None:
        with pytest.raises(ValueError, match="serial"):
            plan_reward_transfer(COLLECTION, 0, TREASURY, CUSTOMER, REWARD_TOKEN, 10)
