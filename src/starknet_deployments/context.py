"""Per-run runtime context for starknet-deployments library."""

import logging
from dataclasses import dataclass

from .config import DeployConfig
from .constants import NETWORK_CONFIG
from .exceptions import ConfigurationError
from .manifest import ManifestStore
from .network import NetworkClient, Signer, StarknetNetworkClient
from .rpc import get_chain_id

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """Everything a deployment run needs, built once and passed explicitly."""

    config: DeployConfig
    client: NetworkClient
    signer: Signer
    manifest: ManifestStore

    @property
    def network(self) -> str:
        return self.config.network

    @classmethod
    def from_config(cls, config: DeployConfig, verify_chain: bool = True) -> "RuntimeContext":
        """
        Connect to the configured network.

        Runs before any deployment starts; the chain id check is a blocking
        JSON-RPC call.

        Args:
            config: Validated configuration
            verify_chain: Check the endpoint serves the network's chain id

        Raises:
            ConfigurationError: If the endpoint serves another chain
            NetworkError: If the endpoint cannot be reached
        """
        if verify_chain:
            expected = NETWORK_CONFIG[config.network]["chain_id"]
            actual = get_chain_id(config.rpc_url)
            if actual != expected:
                raise ConfigurationError(
                    f"{config.rpc_url} serves chain {actual}, expected {expected} for '{config.network}'"
                )

        client = StarknetNetworkClient.from_config(config)
        logger.info("Using account %s as deployer on %s", hex(client.address), config.network)

        return cls(
            config=config,
            client=client,
            signer=client,
            manifest=ManifestStore(config.manifest_dir),
        )
