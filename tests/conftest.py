"""Shared pytest fixtures for starknet-deployments tests."""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from starknet_deployments.artifacts import ArtifactResolver
from starknet_deployments.batcher import CallBatcher
from starknet_deployments.config import DeployConfig
from starknet_deployments.context import RuntimeContext
from starknet_deployments.declarations import DeclarationTracker
from starknet_deployments.manifest import ManifestStore
from starknet_deployments.planner import DeploymentPlanner
from starknet_deployments.types import CallKind, FeeEstimate, PendingCall, Receipt

DEPLOYER_ADDRESS = 0x39EF101F5D04A6679575799C4973CE68173AA789B1DB7FBF148053C4665775D
BLOCK_TIMESTAMP = 1700000000


def fake_class_hasher(sierra: str, casm: str) -> Tuple[int, int]:
    """Content-derived stand-in for the real class hash (fits in a felt)."""
    return (
        int(hashlib.sha256(sierra.encode()).hexdigest()[:60], 16),
        int(hashlib.sha256(casm.encode()).hexdigest()[:60], 16),
    )


def write_artifact(
    build_dir: Path,
    name: str,
    abi: Optional[List[Dict[str, Any]]] = None,
    package: str = "contracts",
) -> Path:
    """Write Scarb-style Sierra and CASM outputs for a contract."""
    build_dir.mkdir(parents=True, exist_ok=True)
    sierra_path = build_dir / f"{package}_{name}.contract_class.json"
    casm_path = build_dir / f"{package}_{name}.compiled_contract_class.json"
    sierra_path.write_text(json.dumps({"abi": abi or [], "sierra_program": [name]}))
    casm_path.write_text(json.dumps({"bytecode": [name]}))
    return sierra_path


class FakeNetworkClient:
    """
    In-memory NetworkClient.

    Multicalls are atomic: deployed addresses are only added to `deployed`
    when the whole transaction is included.
    """

    def __init__(self, address: int = DEPLOYER_ADDRESS, overall_fee: int = 1000):
        self.address = address
        self.overall_fee = overall_fee
        self.nonce = 0
        self.declared: set = set()
        self.deployed: set = set()
        self.invoked: List[Tuple[int, int]] = []
        self.is_declared_calls: List[int] = []
        self.estimates: List[Tuple[List[PendingCall], int]] = []
        self.submissions: List[Dict[str, Any]] = []

        # Set to an exception instance to make the matching step fail
        self.estimate_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self.inclusion_error: Optional[Exception] = None
        self.timestamp_error: Optional[Exception] = None
        self.blocks_fetched: List[int] = []

    async def get_nonce(self) -> int:
        return self.nonce

    async def is_declared(self, class_hash: int) -> bool:
        self.is_declared_calls.append(class_hash)
        return class_hash in self.declared

    async def estimate_fee(self, calls: Sequence[PendingCall], nonce: int) -> FeeEstimate:
        self.estimates.append((list(calls), nonce))
        if self.estimate_error is not None:
            raise self.estimate_error
        return FeeEstimate(overall_fee=self.overall_fee)

    async def submit(
        self, calls: Sequence[PendingCall], nonce: int, estimate: FeeEstimate, max_fee: int
    ) -> int:
        if self.submit_error is not None:
            raise self.submit_error
        assert nonce == self.nonce
        self.nonce += 1
        transaction_hash = 0xABC000 + len(self.submissions)
        self.submissions.append(
            {"calls": list(calls), "nonce": nonce, "max_fee": max_fee, "hash": transaction_hash}
        )
        return transaction_hash

    async def wait_for_inclusion(self, transaction_hash: int, timeout: float) -> Receipt:
        if self.inclusion_error is not None:
            raise self.inclusion_error
        submission = next(s for s in self.submissions if s["hash"] == transaction_hash)
        for call in submission["calls"]:
            if call.kind is CallKind.DECLARE:
                self.declared.add(call.class_hash)
            elif call.kind is CallKind.DEPLOY:
                self.deployed.add(call.address)
            else:
                self.invoked.append((call.payload.to_addr, call.payload.selector))
        return Receipt(transaction_hash=transaction_hash, block_number=100 + len(self.submissions))

    async def get_block_timestamp(self, block_number: int) -> int:
        self.blocks_fetched.append(block_number)
        if self.timestamp_error is not None:
            raise self.timestamp_error
        return BLOCK_TIMESTAMP


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """Build directory holding the contracts used across tests."""
    directory = tmp_path / "target" / "dev"
    for name in ["Loomi", "Gem", "SBT", "Quest", "QuestFactory"]:
        write_artifact(directory, name)
    return directory


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "deployments"
    directory.mkdir()
    return directory


@pytest.fixture
def client() -> FakeNetworkClient:
    return FakeNetworkClient()


@pytest.fixture
def resolver(build_dir: Path) -> ArtifactResolver:
    return ArtifactResolver(build_dir, class_hasher=fake_class_hasher)


@pytest.fixture
def manifest(manifest_dir: Path) -> ManifestStore:
    return ManifestStore(manifest_dir)


@pytest.fixture
def batcher(client: FakeNetworkClient) -> CallBatcher:
    return CallBatcher(client, fee_multiplier_percent=200, inclusion_timeout=5)


@pytest.fixture
def tracker(client: FakeNetworkClient, batcher: CallBatcher) -> DeclarationTracker:
    return DeclarationTracker(client, batcher)


@pytest.fixture
def planner(
    resolver: ArtifactResolver,
    tracker: DeclarationTracker,
    batcher: CallBatcher,
    manifest: ManifestStore,
) -> DeploymentPlanner:
    return DeploymentPlanner("sepolia", DEPLOYER_ADDRESS, resolver, tracker, batcher, manifest)


@pytest.fixture
def ctx(
    client: FakeNetworkClient, build_dir: Path, manifest_dir: Path, manifest: ManifestStore
) -> RuntimeContext:
    config = DeployConfig(
        network="sepolia",
        rpc_url="http://rpc.example.com",
        account_address=DEPLOYER_ADDRESS,
        private_key=0x1,
        build_dir=build_dir,
        manifest_dir=manifest_dir,
    )
    return RuntimeContext(
        config=config,
        client=client,
        signer=client,
        manifest=manifest,
    )
