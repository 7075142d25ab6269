"""
Tests for Settings.from_env.

Test plan:
- Complete environment → defaults filled in (testnet, 10 RECV, mirror URL)
- All missing variables reported together
- HTS_POINTS_TOKEN_ID accepted when RECV_TOKEN_ID is absent
- Invalid PORT / network / reward / log level rejected
- describe() never includes secrets
"""

import pytest

from receiptoverse.config import Settings
from receiptoverse.errors import ConfigError

ENV = {
    "OPERATOR_ID": "0.0.500",
    "OPERATOR_KEY": "302e020100300506032b657004220420deadbeef",
    "RECV_TOKEN_ID": "0.0.600",
    "RNFT_TOKEN_ID": "0.0.700",
    "PINATA_JWT": "pinata-secret-jwt",
    "PORT": "3001",
}


def _env(**overrides: str) -> dict[str, str]:
    env = dict(ENV)
    env.update(overrides)
    return env


class TestComplete:
    def test_values_and_defaults(self) -> None:
        settings = Settings.from_env(ENV)
        assert settings.operator_id == "0.0.500"
        assert settings.reward_token_id == "0.0.600"
        assert settings.receipt_collection_id == "0.0.700"
        assert settings.port == 3001
        assert settings.network == "testnet"
        assert settings.mirror_node_url == "https://testnet.mirrornode.hedera.com"
        assert settings.reward_amount == 10
        assert settings.reward_symbol == "RECV"
        assert settings.log_level == "INFO"

    def test_network_selects_mirror(self) -> None:
        settings = Settings.from_env(_env(HEDERA_NETWORK="Mainnet"))
        assert settings.network == "mainnet"
        assert settings.mirror_node_url == "https://mainnet-public.mirrornode.hedera.com"

    def test_mirror_override(self) -> None:
        settings = Settings.from_env(_env(MIRROR_NODE_URL="http://localhost:5551"))
        assert settings.mirror_node_url == "http://localhost:5551"

    def test_points_token_fallback(self) -> None:
        env = _env()
        del env["RECV_TOKEN_ID"]
        env["HTS_POINTS_TOKEN_ID"] = "0.0.601"
        assert Settings.from_env(env).reward_token_id == "0.0.601"

    def test_frozen(self) -> None:
        settings = Settings.from_env(ENV)
        with pytest.raises(AttributeError):
            settings.port = 1  # type: ignore[misc]


class TestInvalid:
    def test_all_missing_reported_together(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_env({})
        problems = exc_info.value.problems
        for name in ("OPERATOR_ID", "OPERATOR_KEY", "RECV_TOKEN_ID", "RNFT_TOKEN_ID", "PINATA_JWT", "PORT"):
            assert any(p.startswith(name) for p in problems), name

    def test_blank_counts_as_missing(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_env(_env(PINATA_JWT="   "))
        assert exc_info.value.problems == ["PINATA_JWT is required"]

    @pytest.mark.parametrize("port", ["abc", "0", "70000"])
    def test_bad_port(self, port: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_env(_env(PORT=port))
        assert len(exc_info.value.problems) == 1
        assert exc_info.value.problems[0].startswith("PORT")

    def test_unknown_network(self) -> None:
        with pytest.raises(ConfigError, match="HEDERA_NETWORK"):
            Settings.from_env(_env(HEDERA_NETWORK="devnet"))

    def test_non_positive_reward(self) -> None:
        with pytest.raises(ConfigError, match="REWARD_AMOUNT"):
            Settings.from_env(_env(REWARD_AMOUNT="0"))

    def test_bad_log_level(self) -> None:
        with pytest.raises(ConfigError, match="LOG_LEVEL"):
            Settings.from_env(_env(LOG_LEVEL="chatty"))


def test_describe_has_no_secrets() -> None:
    summary = repr(Settings.from_env(ENV).describe())
    assert ENV["OPERATOR_KEY"] not in summary
    assert ENV["PINATA_JWT"] not in summary
    assert "0.0.500" in summary
