"""
Ledger status mapping.

Keeps knowledge of specific Hedera status names in one place. The only
status with domain meaning beyond success/failure is the association
conflict, which the pipeline treats as an idempotent no-op.

Reference:
    https://docs.hedera.com/hedera/sdks-and-apis/hedera-api/miscellaneous/responsecode
"""

from __future__ import annotations

from receiptoverse.ledger.client import SUCCESS_STATUS

ALREADY_ASSOCIATED_STATUS = "TOKEN_ALREADY_ASSOCIATED_TO_ACCOUNT"

# Code used when the ledger was never reached or never answered.
UNAVAILABLE = "LEDGER_UNAVAILABLE"
TIMEOUT = "LEDGER_TIMEOUT"


def is_success(status: str | None) -> bool:
    return status == SUCCESS_STATUS


def is_already_associated(status: str | None, detail: str | None = None) -> bool:
    """True when the ledger reports that the association already exists.

    Some SDK paths only surface the status name inside an error message,
    so ``detail`` is checked as well.
    """
    if status == ALREADY_ASSOCIATED_STATUS:
        return True
    return detail is not None and ALREADY_ASSOCIATED_STATUS in detail


def classify_exception(exc: BaseException) -> str:
    """Map a transport-level exception to an error code."""
    if isinstance(exc, TimeoutError):
        return TIMEOUT
    return UNAVAILABLE
