"""
Receipt delivery — moves a freshly minted serial and the purchase reward
to the customer in one atomic transfer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from receiptoverse.errors import TransferError
from receiptoverse.ledger.client import LedgerClient
from receiptoverse.ledger.errors import classify_exception
from receiptoverse.ledger.tx import TRANSFER_MEMO, plan_reward_transfer

logger = logging.getLogger(__name__)

# Reported when the customer is the treasury and nothing was transferred.
MINTED_ONLY_STATUS = "NFT_MINTED_ONLY"


@dataclass(frozen=True)
class TransferOutcome:
    """Result of the delivery step.

    ``executed`` is False (and ``reward_amount`` 0) only for a skipped
    self-transfer.
    """

    executed: bool
    status: str
    reward_amount: int


class RewardTransferExecutor:
    def __init__(self, client: LedgerClient, *, memo: str = TRANSFER_MEMO) -> None:
        self._client = client
        self._memo = memo

    async def transfer(
        self,
        collection_id: str,
        serial: int,
        sender: str,
        receiver: str,
        reward_token_id: str,
        reward_amount: int,
    ) -> TransferOutcome:
        """Transfer ``collection_id::serial`` and ``reward_amount`` tokens.

        Returns without submitting when ``sender == receiver``.

        Raises:
            TransferError: On submission failure or a non-SUCCESS receipt.
            ValueError: If reward_amount or serial is not positive.
        """
        if sender == receiver:
            logger.info(
                "Customer is the treasury (%s); %s::%s stays with treasury",
                sender, collection_id, serial,
            )
            return TransferOutcome(executed=False, status=MINTED_ONLY_STATUS, reward_amount=0)

        recipe = plan_reward_transfer(
            collection_id,
            serial,
            sender,
            receiver,
            reward_token_id,
            reward_amount,
            memo=self._memo,
        )

        try:
            receipt = await self._client.execute(recipe)
        except Exception as exc:
            raise TransferError(
                f"transfer submit failed: {exc}", code=classify_exception(exc)
            ) from exc

        if not receipt.success:
            raise TransferError(
                receipt.detail or f"transfer rejected: {receipt.status}",
                code=receipt.status,
                details={"transaction_id": receipt.transaction_id},
            )

        logger.info(
            "Transferred %s::%s and %s reward to %s",
            collection_id, serial, reward_amount, receiver,
        )
        return TransferOutcome(executed=True, status=receipt.status, reward_amount=reward_amount)
