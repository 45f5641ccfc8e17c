"""Environment-sourced configuration for starknet-deployments library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .constants import (
    DEFAULT_FEE_MULTIPLIER_PERCENT,
    DEFAULT_INCLUSION_TIMEOUT_SECONDS,
    NETWORK_CONFIG,
)
from .exceptions import ConfigurationError, NetworkNotFoundError
from .paths import get_default_build_dir, get_default_manifest_dir


@dataclass(frozen=True)
class DeployConfig:
    """Validated settings for one deployment run."""

    network: str
    rpc_url: str
    account_address: int
    private_key: int
    fee_multiplier_percent: int = DEFAULT_FEE_MULTIPLIER_PERCENT
    inclusion_timeout: float = DEFAULT_INCLUSION_TIMEOUT_SECONDS
    build_dir: Path = field(default_factory=get_default_build_dir)
    manifest_dir: Path = field(default_factory=get_default_manifest_dir)

    def __repr__(self) -> str:
        # Keep the private key out of logs and tracebacks
        return (
            f"DeployConfig(network={self.network!r}, rpc_url={self.rpc_url!r}, "
            f"account_address={hex(self.account_address)}, "
            f"fee_multiplier_percent={self.fee_multiplier_percent})"
        )


def _parse_int(value: str, variable: str) -> int:
    try:
        return int(value, 0)
    except ValueError as e:
        raise ConfigurationError(f"{variable} must be an integer, got '{value}'") from e


def load_config(
    network: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeployConfig:
    """
    Build a DeployConfig from environment variables.

    Args:
        network: Network name (defaults to $NETWORK, then "devnet")
        environ: Environment mapping (defaults to os.environ)

    Returns:
        DeployConfig for the selected network

    Raises:
        NetworkNotFoundError: If the network is not configured
        ConfigurationError: If a required variable is missing or invalid
    """
    if environ is None:
        environ = os.environ

    if network is None:
        network = environ.get("NETWORK", "devnet")

    if network not in NETWORK_CONFIG:
        raise NetworkNotFoundError(
            f"Network '{network}' not configured; expected one of {sorted(NETWORK_CONFIG)}"
        )
    network_config = NETWORK_CONFIG[network]

    rpc_url = environ.get(network_config["rpc_env"], network_config.get("default_rpc_url"))
    account_address = environ.get(
        network_config["account_env"], network_config.get("default_account_address")
    )
    private_key = environ.get(
        network_config["private_key_env"], network_config.get("default_private_key")
    )

    # Need RPC endpoint and credentials for non-local networks
    for variable, value in (
        (network_config["rpc_env"], rpc_url),
        (network_config["account_env"], account_address),
        (network_config["private_key_env"], private_key),
    ):
        if not value:
            raise ConfigurationError(f"{variable} must be set to deploy on '{network}'")

    multiplier = _parse_int(
        environ.get("FEE_MULTIPLIER_PERCENT", str(DEFAULT_FEE_MULTIPLIER_PERCENT)),
        "FEE_MULTIPLIER_PERCENT",
    )
    if multiplier < 100:
        raise ConfigurationError(
            f"FEE_MULTIPLIER_PERCENT must be at least 100, got {multiplier}"
        )

    timeout = _parse_int(
        environ.get("INCLUSION_TIMEOUT_SECONDS", str(DEFAULT_INCLUSION_TIMEOUT_SECONDS)),
        "INCLUSION_TIMEOUT_SECONDS",
    )
    if timeout <= 0:
        raise ConfigurationError("INCLUSION_TIMEOUT_SECONDS must be positive")

    build_dir = environ.get("BUILD_DIR")
    manifest_dir = environ.get("MANIFEST_DIR")

    return DeployConfig(
        network=network,
        rpc_url=rpc_url,
        account_address=_parse_int(account_address, network_config["account_env"]),
        private_key=_parse_int(private_key, network_config["private_key_env"]),
        fee_multiplier_percent=multiplier,
        inclusion_timeout=timeout,
        build_dir=Path(build_dir) if build_dir else get_default_build_dir(),
        manifest_dir=Path(manifest_dir) if manifest_dir else get_default_manifest_dir(),
    )
