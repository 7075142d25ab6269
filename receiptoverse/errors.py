"""
Error taxonomy for the receipt minting core.

Every error carries a machine-readable ``code`` and optional ``details``
so the upstream service's error code/message survives verbatim up to the
HTTP layer.

Propagation policy:
    - ``ValidationError`` — local, surfaced as HTTP 400.
    - ``AssociationError`` — recovered by the orchestrator (logged, ignored);
      surfaced only by the explicit association endpoint.
    - ``StorageUploadError``, ``MintError`` — abort the mint pipeline (HTTP 500).
    - ``TransferError`` — after a successful mint, reported in-band as a
      partial success rather than raised to the caller.
    - ``MetadataFetchError`` — per-item on the read path, always degraded
      to ``metadata=None``.
    - ``IndexerQueryError`` — the read path's upstream listing failed.
"""

from __future__ import annotations

from typing import Any


class ReceiptsError(Exception):
    """Base class for all receipt pipeline errors.

    Args:
        message: Human-readable message.
        code: Machine-readable error category or upstream status name.
        details: Optional structured diagnostics (never secrets).
    """

    default_code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.code}


class ConfigError(ReceiptsError):
    """Process configuration is missing or invalid."""

    default_code = "CONFIG_INVALID"

    def __init__(self, problems: list[str]) -> None:
        super().__init__(
            "; ".join(problems),
            details={"problems": list(problems)},
        )
        self.problems = list(problems)


class ValidationError(ReceiptsError):
    default_code = "VALIDATION_FAILED"


class StorageUploadError(ReceiptsError):
    default_code = "STORAGE_UPLOAD_FAILED"


class AssociationError(ReceiptsError):
    default_code = "ASSOCIATION_FAILED"


class MintError(ReceiptsError):
    default_code = "MINT_FAILED"


class TransferError(ReceiptsError):
    default_code = "TRANSFER_FAILED"


class MetadataFetchError(ReceiptsError):
    default_code = "METADATA_UNAVAILABLE"


class IndexerQueryError(ReceiptsError):
    """The mirror node listing failed.

    ``api_error`` holds the upstream response body (or transport message)
    for diagnostics.
    """

    default_code = "INDEXER_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        api_error: Any = None,
    ) -> None:
        super().__init__(message, code=code, details={"api_error": api_error})
        self.api_error = api_error
