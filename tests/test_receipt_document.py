"""
Tests for the receipt metadata document and request schema.

Test plan:
- Document: name/description, attributes, properties.type, date stamping
- Total formatting: whole amounts without decimals
- JSON: pretty-printed, round-trips through json.loads
- Schema: valid body passes; wrong types carry the offending field
"""

import json
from datetime import datetime, timezone

import pytest

from receiptoverse import schema
from receiptoverse.errors import ValidationError
from receiptoverse.receipt import PLACEHOLDER_IMAGE, LineItem, build_receipt_document

NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)
ITEMS = [LineItem("Latte", 4.5, 1), LineItem("Croissant", 3.0, 2)]


def _document(total: float = 10.5):
    return build_receipt_document("Cafe X", ITEMS, total, now=NOW)


class TestReceiptDocument:
    def test_name_and_description(self) -> None:
        doc = _document()
        assert doc.name == "Receipt from Cafe X"
        assert doc.description == "Purchase receipt - Total: $10.5"
        assert doc.image == PLACEHOLDER_IMAGE

    def test_whole_total_has_no_decimals(self) -> None:
        assert _document(total=10.0).description == "Purchase receipt - Total: $10"

    def test_attributes(self) -> None:
        attributes = _document().to_dict()["attributes"]
        assert attributes == [
            {"trait_type": "Merchant", "value": "Cafe X"},
            {"trait_type": "Total", "value": "$10.5"},
            {"trait_type": "Date", "value": "2025-03-14"},
            {"trait_type": "Items Count", "value": 2},
        ]

    def test_properties(self) -> None:
        properties = _document().to_dict()["properties"]
        assert properties["type"] == "purchase_receipt"
        assert properties["merchant"] == "Cafe X"
        assert properties["total"] == 10.5
        assert properties["date"] == NOW.isoformat()
        assert properties["items"][1] == {"name": "Croissant", "price": 3.0, "quantity": 2}

    def test_json_is_indented(self) -> None:
        text = _document().to_json()
        assert text.startswith("{\n  ")
        assert json.loads(text) == _document().to_dict()


class TestMintRequestSchema:
    def test_valid(self) -> None:
        schema.validate(
            {
                "merchant": "Cafe X",
                "items": [{"name": "Latte", "price": 4.5, "quantity": 1}],
                "total": 4.5,
                "customerWallet": "0.0.1001",
            },
            schema.MINT_REQUEST,
        )

    def test_field_reported(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            schema.validate(
                {
                    "merchant": "Cafe X",
                    "items": [{"name": "Latte", "price": -1, "quantity": 1}],
                    "total": 4.5,
                    "customerWallet": "0.0.1001",
                },
                schema.MINT_REQUEST,
            )
        assert exc_info.value.details["field"] == "items.0.price"
        assert exc_info.value.code == "VALIDATION_FAILED"
