"""
Token association — registers an account to hold the receipt tokens.

Association is idempotent from the caller's perspective: when the
ledger reports that the association already exists, the result is
ALREADY_ASSOCIATED rather than an error. The outcome is a tagged result
so the non-fatal cases are explicit; ``raise_for_status()`` converts
a FAILED result into AssociationError for callers that need a hard
prerequisite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from receiptoverse.errors import AssociationError
from receiptoverse.ledger.client import LedgerClient
from receiptoverse.ledger.errors import classify_exception, is_already_associated
from receiptoverse.ledger.tx import plan_association

logger = logging.getLogger(__name__)


class AssociationStatus(StrEnum):
    ASSOCIATED = "ASSOCIATED"
    ALREADY_ASSOCIATED = "ALREADY_ASSOCIATED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AssociationResult:
    """Outcome of one association attempt.

    Attributes:
        account_id: Account the association was requested for.
        token_ids: Token ids requested.
        status: Tagged outcome.
        ledger_status: Raw ledger status name, or a transport error code.
        detail: Upstream message for diagnostics (FAILED only).
    """

    account_id: str
    token_ids: tuple[str, ...]
    status: AssociationStatus
    ledger_status: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not AssociationStatus.FAILED

    def raise_for_status(self) -> None:
        if self.ok:
            return
        raise AssociationError(
            self.detail or f"token association failed for {self.account_id}",
            code=self.ledger_status,
            details={"account_id": self.account_id, "token_ids": list(self.token_ids)},
        )


class TokenAssociator:
    def __init__(self, client: LedgerClient) -> None:
        self._client = client

    async def ensure_associated(
        self,
        account_id: str,
        signing_key: str | None,
        token_ids: list[str],
    ) -> AssociationResult:
        """Associate ``token_ids`` with ``account_id`` and wait for the receipt.

        Never raises for ledger or transport failures; those come back as
        a FAILED result.
        """
        recipe = plan_association(account_id, token_ids)
        tokens = tuple(token_ids)
        logger.info("Associating tokens %s with account %s", list(tokens), account_id)

        try:
            receipt = await self._client.execute(recipe, signing_key=signing_key)
        except Exception as exc:
            return AssociationResult(
                account_id=account_id,
                token_ids=tokens,
                status=AssociationStatus.FAILED,
                ledger_status=classify_exception(exc),
                detail=f"association submit failed: {exc}",
            )

        if receipt.success:
            logger.info("Tokens associated with %s", account_id)
            return AssociationResult(
                account_id=account_id,
                token_ids=tokens,
                status=AssociationStatus.ASSOCIATED,
                ledger_status=receipt.status,
            )

        if is_already_associated(receipt.status, receipt.detail):
            logger.info("Tokens already associated with %s", account_id)
            return AssociationResult(
                account_id=account_id,
                token_ids=tokens,
                status=AssociationStatus.ALREADY_ASSOCIATED,
                ledger_status=receipt.status,
            )

        return AssociationResult(
            account_id=account_id,
            token_ids=tokens,
            status=AssociationStatus.FAILED,
            ledger_status=receipt.status,
            detail=receipt.detail or f"association rejected: {receipt.status}",
        )
