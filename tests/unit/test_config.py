"""Unit tests for environment configuration."""

from pathlib import Path

import pytest

from starknet_deployments.config import load_config
from starknet_deployments.constants import DEFAULT_FEE_MULTIPLIER_PERCENT
from starknet_deployments.exceptions import ConfigurationError, NetworkNotFoundError

SEPOLIA_ENV = {
    "NETWORK": "sepolia",
    "RPC_URL_SEPOLIA": "https://sepolia.example.com/rpc",
    "ACCOUNT_ADDRESS_SEPOLIA": "0x1234",
    "PRIVATE_KEY_SEPOLIA": "0xabcd",
}


class TestNetworkSelection:
    """Test how the network is chosen."""

    def test_devnet_is_default(self):
        """Test that devnet works with an empty environment."""
        config = load_config(environ={})

        assert config.network == "devnet"
        assert config.rpc_url == "http://127.0.0.1:5050"
        assert config.account_address > 0

    def test_network_from_environment(self):
        """Test that $NETWORK selects the profile."""
        config = load_config(environ=SEPOLIA_ENV)

        assert config.network == "sepolia"
        assert config.rpc_url == "https://sepolia.example.com/rpc"
        assert config.account_address == 0x1234
        assert config.private_key == 0xABCD

    def test_explicit_network_overrides_environment(self):
        """Test that the network argument wins over $NETWORK."""
        env = dict(SEPOLIA_ENV, NETWORK="mainnet")
        config = load_config("sepolia", environ=env)
        assert config.network == "sepolia"

    def test_unknown_network(self):
        """Test that an unknown network raises NetworkNotFoundError."""
        with pytest.raises(NetworkNotFoundError) as exc_info:
            load_config("goerli", environ={})

        assert "goerli" in str(exc_info.value)


class TestRequiredVariables:
    """Test validation of credentials and endpoint."""

    @pytest.mark.parametrize(
        "missing", ["RPC_URL_SEPOLIA", "ACCOUNT_ADDRESS_SEPOLIA", "PRIVATE_KEY_SEPOLIA"]
    )
    def test_missing_variable(self, missing: str):
        """Test that sepolia requires endpoint and credentials."""
        env = {k: v for k, v in SEPOLIA_ENV.items() if k != missing}

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(environ=env)

        assert missing in str(exc_info.value)

    def test_invalid_address(self):
        """Test that a non-numeric address is rejected."""
        env = dict(SEPOLIA_ENV, ACCOUNT_ADDRESS_SEPOLIA="not-an-address")

        with pytest.raises(ConfigurationError):
            load_config(environ=env)


class TestOptionalSettings:
    """Test overrides of defaults."""

    def test_default_fee_multiplier(self):
        """Test that the fee ceiling doubles the estimate by default."""
        config = load_config(environ=SEPOLIA_ENV)
        assert config.fee_multiplier_percent == DEFAULT_FEE_MULTIPLIER_PERCENT == 200

    def test_fee_multiplier_override(self):
        """Test that $FEE_MULTIPLIER_PERCENT overrides the margin."""
        config = load_config(environ=dict(SEPOLIA_ENV, FEE_MULTIPLIER_PERCENT="150"))
        assert config.fee_multiplier_percent == 150

    def test_fee_multiplier_below_estimate_rejected(self):
        """Test that a ceiling below the estimate is refused."""
        with pytest.raises(ConfigurationError):
            load_config(environ=dict(SEPOLIA_ENV, FEE_MULTIPLIER_PERCENT="90"))

    def test_fee_multiplier_must_be_integer(self):
        """Test that a non-integer multiplier is refused."""
        with pytest.raises(ConfigurationError):
            load_config(environ=dict(SEPOLIA_ENV, FEE_MULTIPLIER_PERCENT="1.5"))

    def test_inclusion_timeout_must_be_positive(self):
        """Test that a zero timeout is refused."""
        with pytest.raises(ConfigurationError):
            load_config(environ=dict(SEPOLIA_ENV, INCLUSION_TIMEOUT_SECONDS="0"))

    def test_directories(self, tmp_path: Path):
        """Test that build and manifest directories can be overridden."""
        env = dict(SEPOLIA_ENV, BUILD_DIR=str(tmp_path / "build"), MANIFEST_DIR=str(tmp_path / "m"))
        config = load_config(environ=env)

        assert config.build_dir == tmp_path / "build"
        assert config.manifest_dir == tmp_path / "m"

    def test_repr_hides_private_key(self):
        """Test that the private key never shows up in logs."""
        config = load_config(environ=SEPOLIA_ENV)
        assert "abcd" not in repr(config).lower()
