"""
HTTP surface (Flask).

Routes:
    POST /mint-receipt           — mint a receipt NFT and deliver it + reward
    POST /associate-tokens       — associate the receipt tokens with an account
    GET  /get-nfts/<accountId>   — list receipt NFTs owned by an account
    GET  /api/health             — liveness

Views are async (Flask's async support); each request runs its pipeline
independently, sharing only the services built at startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from receiptoverse.errors import (
    AssociationError,
    IndexerQueryError,
    ReceiptsError,
    ValidationError,
)
from receiptoverse.ledger.associate import TokenAssociator
from receiptoverse.orchestrator import MintOrchestrator, MintRequest
from receiptoverse.ownership import OwnershipResolver

logger = logging.getLogger(__name__)

EXTENSION_KEY = "receiptoverse"

bp = Blueprint("receipts", __name__)


@dataclass(frozen=True)
class Services:
    orchestrator: MintOrchestrator
    associator: TokenAssociator
    resolver: OwnershipResolver
    association_key: str | None
    network: str


def _services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


@bp.errorhandler(ValidationError)
def _validation_failed(exc: ValidationError):
    return jsonify(exc.to_dict()), 400


@bp.errorhandler(ReceiptsError)
def _pipeline_failed(exc: ReceiptsError):
    logger.error("Request failed: %s [%s]", exc.message, exc.code)
    return jsonify(exc.to_dict()), 500


@bp.get("/api/health")
def health():
    return jsonify(
        status="healthy",
        network=_services().network,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@bp.post("/mint-receipt")
async def mint_receipt():
    services = _services()
    mint_request = MintRequest.from_json(request.get_json(silent=True))
    run = await services.orchestrator.run(mint_request)
    body, status = services.orchestrator.compose_response(run)
    return jsonify(body), status


@bp.post("/associate-tokens")
async def associate_tokens():
    services = _services()
    body = request.get_json(silent=True) or {}
    account_id = body.get("accountId") if isinstance(body, dict) else None
    if not account_id or not isinstance(account_id, str):
        return jsonify(error="accountId is required"), 400

    token_ids = services.orchestrator.token_ids
    result = await services.associator.ensure_associated(
        account_id.strip(), services.association_key, token_ids
    )
    try:
        result.raise_for_status()
    except AssociationError as exc:
        logger.error("Association error for %s: %s [%s]", account_id, exc.message, exc.code)
        return jsonify(exc.to_dict()), 500

    return jsonify(
        status="success",
        message=f"Tokens associated with account {result.account_id}",
        association=str(result.status),
        tokens=token_ids,
    )


@bp.get("/get-nfts/<account_id>")
async def get_nfts(account_id: str):
    try:
        listing = await _services().resolver.list_owned(account_id)
    except IndexerQueryError as exc:
        logger.error("Error fetching NFTs for %s: %s [%s]", account_id, exc.message, exc.code)
        return (
            jsonify(
                error=exc.message,
                details="Failed to fetch NFTs from Hedera network",
                apiError=exc.api_error,
            ),
            500,
        )
    return jsonify(listing.to_dict())


def create_app(services: Services) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = services

    CORS(app, resources={r"/*": {"origins": "*"}})
    app.register_blueprint(bp)
    return app
