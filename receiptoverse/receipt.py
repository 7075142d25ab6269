"""
Receipt document — the off-ledger metadata of one receipt NFT.

A ReceiptDocument is built once per mint from the purchase (merchant,
items, total), published to content-addressable storage, and never
mutated afterwards. Its storage URI is what goes on the ledger.

Shape (NFT metadata convention):
    {
      "name", "description", "image",
      "attributes": [{"trait_type", "value"}, ...],
      "properties": {"merchant", "items", "total", "date", "type"}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x300/f8f9fa/333?text=Receipt"
RECEIPT_TYPE = "purchase_receipt"


@dataclass(frozen=True)
class LineItem:
    name: str
    price: float
    quantity: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "price": self.price, "quantity": self.quantity}


@dataclass(frozen=True)
class ReceiptDocument:
    name: str
    description: str
    image: str
    merchant: str
    items: tuple[LineItem, ...]
    total: float
    date: str
    attributes: tuple[tuple[str, Any], ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "attributes": [
                {"trait_type": trait, "value": value} for trait, value in self.attributes
            ],
            "properties": {
                "merchant": self.merchant,
                "items": [item.to_dict() for item in self.items],
                "total": self.total,
                "date": self.date,
                "type": RECEIPT_TYPE,
            },
        }

    def to_json(self) -> str:
        """Pretty-printed JSON, as uploaded to storage."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def _format_total(total: float) -> str:
    return f"${int(total)}" if float(total).is_integer() else f"${total}"


def build_receipt_document(
    merchant: str,
    items: list[LineItem],
    total: float,
    *,
    now: datetime | None = None,
    image: str = PLACEHOLDER_IMAGE,
) -> ReceiptDocument:
    """Build the metadata document for one purchase."""
    now = now or datetime.now(timezone.utc)
    total_text = _format_total(total)
    return ReceiptDocument(
        name=f"Receipt from {merchant}",
        description=f"Purchase receipt - Total: {total_text}",
        image=image,
        merchant=merchant,
        items=tuple(items),
        total=total,
        date=now.isoformat(),
        attributes=(
            ("Merchant", merchant),
            ("Total", total_text),
            ("Date", now.date().isoformat()),
            ("Items Count", len(items)),
        ),
    )
