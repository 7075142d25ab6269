"""
Process configuration, read once from the environment at startup.

Settings is immutable; components receive the values they need at
construction time. Every problem is collected before failing, so a
misconfigured deployment reports all missing variables at once.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from receiptoverse.errors import ConfigError
from receiptoverse.ownership import MIRROR_NODE_URLS
from receiptoverse.storage.publisher import DEFAULT_API_URL, DEFAULT_GATEWAY_URL

NETWORKS = frozenset(MIRROR_NODE_URLS)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """Immutable application settings.

    Attributes:
        operator_id: Operator (treasury) account id.
        operator_key: Operator private key. Never logged.
        reward_token_id: Fungible reward token id (RECV).
        receipt_collection_id: Receipt NFT collection token id.
        pinata_jwt: Pinata API credential. Never logged.
        port: HTTP listening port.
        network: Hedera network name.
        mirror_node_url: Mirror node base URL.
        pinata_api_url: Pinata API base URL.
        pinata_gateway_url: IPFS gateway base URL.
        reward_amount: Reward tokens granted per receipt.
        reward_symbol: Display symbol of the reward token.
        ledger_timeout_s: Bound for one ledger submission + receipt wait.
        log_level: Root log level.
    """

    operator_id: str
    operator_key: str
    reward_token_id: str
    receipt_collection_id: str
    pinata_jwt: str
    port: int
    network: str = "testnet"
    mirror_node_url: str = MIRROR_NODE_URLS["testnet"]
    pinata_api_url: str = DEFAULT_API_URL
    pinata_gateway_url: str = DEFAULT_GATEWAY_URL
    reward_amount: int = 10
    reward_symbol: str = "RECV"
    ledger_timeout_s: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigError: Listing every missing or invalid variable.
        """
        env = os.environ if environ is None else environ
        problems: list[str] = []

        def required(*names: str) -> str:
            for name in names:
                value = env.get(name, "").strip()
                if value:
                    return value
            problems.append(f"{names[0]} is required")
            return ""

        def number(name: str, default: Any, kind: type) -> Any:
            raw = env.get(name, "").strip()
            if not raw:
                return default
            try:
                return kind(raw)
            except ValueError:
                problems.append(f"{name} must be a {kind.__name__}, got {raw!r}")
                return default

        operator_id = required("OPERATOR_ID")
        operator_key = required("OPERATOR_KEY")
        reward_token_id = required("RECV_TOKEN_ID", "HTS_POINTS_TOKEN_ID")
        receipt_collection_id = required("RNFT_TOKEN_ID")
        pinata_jwt = required("PINATA_JWT")

        port = number("PORT", None, int) if required("PORT") else None
        if port is not None and not 0 < port < 65536:
            problems.append(f"PORT must be between 1 and 65535, got {port}")

        network = env.get("HEDERA_NETWORK", "testnet").strip().lower() or "testnet"
        if network not in NETWORKS:
            problems.append(
                f"HEDERA_NETWORK must be one of {sorted(NETWORKS)}, got {network!r}"
            )
            network = "testnet"

        reward_amount = number("REWARD_AMOUNT", 10, int)
        if reward_amount < 1:
            problems.append(f"REWARD_AMOUNT must be positive, got {reward_amount}")

        ledger_timeout_s = number("LEDGER_TIMEOUT_S", 60.0, float)
        if ledger_timeout_s <= 0:
            problems.append(f"LEDGER_TIMEOUT_S must be positive, got {ledger_timeout_s}")

        log_level = env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if log_level not in _LOG_LEVELS:
            problems.append(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

        if problems:
            raise ConfigError(problems)

        return cls(
            operator_id=operator_id,
            operator_key=operator_key,
            reward_token_id=reward_token_id,
            receipt_collection_id=receipt_collection_id,
            pinata_jwt=pinata_jwt,
            port=port or 0,
            network=network,
            mirror_node_url=env.get("MIRROR_NODE_URL", "").strip() or MIRROR_NODE_URLS[network],
            pinata_api_url=env.get("PINATA_API_URL", "").strip() or DEFAULT_API_URL,
            pinata_gateway_url=env.get("PINATA_GATEWAY_URL", "").strip() or DEFAULT_GATEWAY_URL,
            reward_amount=reward_amount,
            reward_symbol=env.get("REWARD_SYMBOL", "").strip() or "RECV",
            ledger_timeout_s=ledger_timeout_s,
            log_level=log_level,
        )

    def describe(self) -> dict[str, Any]:
        """Secret-free summary for startup logging."""
        return {
            "network": self.network,
            "operator_id": self.operator_id,
            "reward_token_id": self.reward_token_id,
            "receipt_collection_id": self.receipt_collection_id,
            "mirror_node_url": self.mirror_node_url,
            "reward": f"{self.reward_amount} {self.reward_symbol}",
            "port": self.port,
        }
