from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict, cast

import jsonschema  # type: ignore[import-untyped]

from receiptoverse.errors import ValidationError

MINT_REQUEST = "mint-receipt.request.json"

_SCHEMAS: Dict[str, Dict[str, Any]] = {}


def load_schema(name: str) -> Dict[str, Any]:
    if name not in _SCHEMAS:
        with resources.files("receiptoverse").joinpath(f"schemas/{name}").open(
            "r", encoding="utf-8"
        ) as f:
            _SCHEMAS[name] = cast(Dict[str, Any], json.load(f))
    return _SCHEMAS[name]


def validate(instance: Any, name: str) -> None:
    """Validate a request body against a bundled schema.

    Raises:
        ValidationError: With the offending field path in ``details``.
    """
    try:
        jsonschema.validate(instance=instance, schema=load_schema(name))
    except jsonschema.ValidationError as exc:
        field = ".".join(str(p) for p in exc.absolute_path) or None
        raise ValidationError(
            exc.message,
            details={"field": field, "schema": name},
        ) from exc
