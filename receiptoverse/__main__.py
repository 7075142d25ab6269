"""
Entry point: ``python -m receiptoverse`` (or the ``receiptoverse`` script).

Validates configuration, builds the shared ledger client and the
pipeline components once, then serves the Flask app. Exits with status 1
when configuration is incomplete.
"""

from __future__ import annotations

import logging
import sys

from receiptoverse.api import Services, create_app
from receiptoverse.config import Settings
from receiptoverse.errors import ConfigError
from receiptoverse.ledger import (
    HieroLedgerClient,
    LedgerClient,
    ReceiptMinter,
    RewardTransferExecutor,
    TokenAssociator,
)
from receiptoverse.orchestrator import MintOrchestrator
from receiptoverse.ownership import OwnershipResolver
from receiptoverse.storage import MetadataPublisher

logger = logging.getLogger("receiptoverse")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_services(settings: Settings, ledger: LedgerClient) -> Services:
    associator = TokenAssociator(ledger)
    orchestrator = MintOrchestrator(
        associator=associator,
        publisher=MetadataPublisher(
            jwt=settings.pinata_jwt,
            api_url=settings.pinata_api_url,
            gateway_url=settings.pinata_gateway_url,
        ),
        minter=ReceiptMinter(ledger),
        transfer_executor=RewardTransferExecutor(ledger),
        treasury_account=settings.operator_id,
        # Customer associations are co-signed with the operator key.
        association_key=settings.operator_key,
        collection_id=settings.receipt_collection_id,
        reward_token_id=settings.reward_token_id,
        reward_amount=settings.reward_amount,
        reward_symbol=settings.reward_symbol,
        network=settings.network,
    )
    return Services(
        orchestrator=orchestrator,
        associator=associator,
        resolver=OwnershipResolver(
            mirror_url=settings.mirror_node_url,
            collection_id=settings.receipt_collection_id,
        ),
        association_key=settings.operator_key,
        network=settings.network,
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        logger.error("Configuration errors:")
        for problem in exc.problems:
            logger.error("  - %s", problem)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    logger.info("Configuration: %s", settings.describe())

    ledger = HieroLedgerClient(
        network=settings.network,
        operator_id=settings.operator_id,
        operator_key=settings.operator_key,
        timeout_s=settings.ledger_timeout_s,
    )
    app = create_app(build_services(settings, ledger))
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
