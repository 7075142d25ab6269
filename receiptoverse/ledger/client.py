"""
Ledger client protocol — the network boundary.

Defines the interface that the associator, minter and transfer executor
depend on, not a concrete implementation. This keeps those components
testable and keeps SDK calls out of business logic.

Concrete implementations:
    - HieroLedgerClient (Hedera network via hiero-sdk-python)
    - FakeLedgerClient (tests)

The protocol has one operation:
    - execute(recipe, signing_key=None) → LedgerReceipt

``execute`` submits the transaction and waits for its confirmation
record. Expected ledger failures (a non-SUCCESS status) come back inside
the receipt; exceptions are reserved for transport-level problems
(connection refused, timeout, SDK errors that carry no status).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Status name the ledger reports for a successfully applied transaction.
SUCCESS_STATUS = "SUCCESS"


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class LedgerReceipt:
    """Confirmation record of one submitted transaction.

    Attributes:
        status: Ledger status name (e.g. "SUCCESS",
            "TOKEN_ALREADY_ASSOCIATED_TO_ACCOUNT", "INSUFFICIENT_PAYER_BALANCE").
        transaction_id: Ledger transaction id, when one was assigned.
        serials: Serial numbers created by a mint. Empty for other
            transaction types.
        detail: Human-readable detail for diagnostics.
    """

    status: str
    transaction_id: str | None = None
    serials: tuple[int, ...] = ()
    detail: str | None = None

    @property
    def success(self) -> bool:
        return self.status == SUCCESS_STATUS


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class LedgerClient(Protocol):
    """Interface for ledger network operations.

    One instance is built at process start, bound to the operator
    (treasury) account and a default fee ceiling, and shared read-only
    by every request.
    """

    @property
    def operator_account(self) -> str:
        """Account id of the operator (treasury) that pays fees."""
        ...

    async def execute(
        self,
        recipe: dict[str, object],
        *,
        signing_key: str | None = None,
    ) -> LedgerReceipt:
        """Submit a transaction recipe and wait for its confirmation.

        Args:
            recipe: Transaction recipe built by ``receiptoverse.ledger.tx``.
            signing_key: Extra private key that must co-sign the
                transaction (e.g. the account being associated). The
                operator always signs.

        Returns:
            LedgerReceipt. Never raises for a ledger-reported status.
        """
        ...
