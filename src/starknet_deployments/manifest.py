"""Per-network deployment manifest for starknet-deployments library."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from filelock import FileLock, Timeout

from .exceptions import PersistenceError
from .paths import get_manifest_paths
from .types import DeploymentRecord, Manifest

logger = logging.getLogger(__name__)

# Seconds to wait for another run holding the manifest lock
LOCK_TIMEOUT = 30


def record_to_json(record: DeploymentRecord) -> Dict[str, Any]:
    """Serialize a record to the manifest file schema (hex strings, camelCase)."""
    entry: Dict[str, Any] = {
        "address": hex(record.address),
        "classHash": hex(record.class_hash),
        "abi": record.abi,
        "timestamp": record.timestamp,
    }

    if record.transaction_hash is not None:
        entry["transactionHash"] = hex(record.transaction_hash)
    if record.block_number is not None:
        entry["blockNumber"] = record.block_number

    return entry


def record_from_json(network: str, name: str, entry: Dict[str, Any]) -> DeploymentRecord:
    """
    Parse a manifest file entry.

    Raises:
        KeyError: If a required field is missing
        ValueError: If an address or hash is not a hex string
    """
    transaction_hash = entry.get("transactionHash")
    return DeploymentRecord(
        network=network,
        name=name,
        address=int(entry["address"], 16),
        class_hash=int(entry["classHash"], 16),
        abi=entry.get("abi", []),
        timestamp=entry.get("timestamp", 0),
        transaction_hash=int(transaction_hash, 16) if transaction_hash else None,
        block_number=entry.get("blockNumber"),
    )


class ManifestStore:
    """
    Durable record of what has been deployed where.

    One JSON file per network; the in-memory manifests are mutated by
    record_success() and written back by persist().
    """

    def __init__(self, manifest_dir: Optional[Union[Path, str]] = None):
        """
        Initialize the store.

        Args:
            manifest_dir: Directory of <network>.json files (defaults to ./deployments)
        """
        self._manifest_dir = manifest_dir
        self._manifests: Dict[str, Manifest] = {}

    def path_for(self, network: str) -> Path:
        return get_manifest_paths(network, self._manifest_dir)[0]

    def load(self, network: str) -> Manifest:
        """
        Load the manifest of a network, reading the file on first access.

        Args:
            network: Network name

        Returns:
            Manifest, empty when no file exists yet

        Raises:
            PersistenceError: If the file exists but cannot be read or parsed
        """
        if network in self._manifests:
            return self._manifests[network]

        manifest_path = self.path_for(network)
        try:
            with open(manifest_path) as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No manifest for %s yet, starting empty", network)
            manifest = Manifest(network=network)
            self._manifests[network] = manifest
            return manifest
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read manifest {manifest_path}: {e}") from e

        try:
            contracts = {
                name: record_from_json(network, name, entry)
                for name, entry in data.get("contracts", {}).items()
            }
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed manifest {manifest_path}: {e}") from e

        manifest = Manifest(network=network, contracts=contracts)
        self._manifests[network] = manifest
        return manifest

    def record_success(self, record: DeploymentRecord) -> None:
        """Store a record, replacing any previous record for (network, name)."""
        manifest = self.load(record.network)
        if record.name in manifest.contracts:
            logger.info("Replacing manifest entry for %s on %s", record.name, record.network)
        manifest.contracts[record.name] = record

    def lookup(self, network: str, name: str) -> Optional[DeploymentRecord]:
        return self.load(network).contracts.get(name)

    def persist(self, network: Optional[str] = None) -> None:
        """
        Write manifests to disk atomically.

        The JSON is written to a temporary file in the target directory,
        flushed to disk, then renamed over the previous manifest, all while
        holding an advisory lock on <network>.json.lock.

        Args:
            network: Network to write (defaults to every loaded network)

        Raises:
            PersistenceError: If the lock cannot be taken or the write fails
        """
        networks = [network] if network is not None else list(self._manifests)
        for name in networks:
            self._persist_one(self.load(name))

    def _persist_one(self, manifest: Manifest) -> None:
        manifest_path, lock_path = get_manifest_paths(manifest.network, self._manifest_dir)
        data = {
            "network": manifest.network,
            "contracts": {
                name: record_to_json(record)
                for name, record in sorted(manifest.contracts.items())
            },
        }

        try:
            manifest_path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(str(lock_path), timeout=LOCK_TIMEOUT):
                self._atomic_write(manifest_path, data)
        except Timeout as e:
            raise PersistenceError(
                f"Manifest {manifest_path} is locked by another deployment run"
            ) from e
        except OSError as e:
            raise PersistenceError(f"Cannot write manifest {manifest_path}: {e}") from e

        logger.info("Wrote %d contract(s) to %s", len(manifest.contracts), manifest_path)

    @staticmethod
    def _atomic_write(path: Path, data: Dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
