"""Named deployment pipelines for starknet-deployments library."""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .artifacts import ArtifactResolver
from .batcher import CallBatcher
from .context import RuntimeContext
from .declarations import DeclarationTracker
from .exceptions import NetworkError, UnresolvedReferenceError
from .network import NetworkClient
from .planner import DeploymentPlanner
from .types import (
    CallKind,
    DeclareRequest,
    DeploymentRecord,
    DeploymentRequest,
    InvokeRequest,
)

logger = logging.getLogger(__name__)

Step = Union[DeploymentRequest, DeclareRequest, InvokeRequest]


async def stamp_block_times(client: NetworkClient, records: List[DeploymentRecord]) -> bool:
    """
    Replace the local timestamps of records with their inclusion block's time.

    A block whose time cannot be fetched keeps the local timestamp.

    Args:
        client: Network client
        records: Records to update in place

    Returns:
        True if any record changed
    """
    block_times: Dict[int, int] = {}
    for block_number in sorted({r.block_number for r in records if r.block_number is not None}):
        try:
            block_times[block_number] = await client.get_block_timestamp(block_number)
        except NetworkError as e:
            logger.warning("Keeping local time for block %d: %s", block_number, e)

    changed = False
    for record in records:
        timestamp = block_times.get(record.block_number)
        if timestamp is not None and timestamp != record.timestamp:
            record.timestamp = timestamp
            changed = True
    return changed


@dataclass
class Pipeline:
    """
    An ordered, independent list of declare/deploy/invoke steps.

    Steps may reference results of earlier steps (AddressOf, ClassHashOf) or
    contracts already in the network's manifest. The caller supplies the
    order; it is checked, never rearranged.
    """

    name: str
    steps: List[Step] = field(default_factory=list)

    def validate(self) -> None:
        """
        Check that no step references a step defined after it.

        Raises:
            UnresolvedReferenceError: For a reference to a later step
            TypeError: For a step that is not a request
        """
        positions = {}
        for position, step in enumerate(self.steps):
            if not isinstance(step, (DeploymentRequest, DeclareRequest, InvokeRequest)):
                raise TypeError(f"Unsupported pipeline step: {step!r}")
            if not isinstance(step, InvokeRequest):
                positions.setdefault(step.name, position)

        for position, step in enumerate(self.steps):
            for name in step.depends_on:
                if positions.get(name, -1) > position:
                    raise UnresolvedReferenceError(
                        name,
                        f"Step {position} of pipeline '{self.name}' references '{name}', "
                        f"which is only produced by step {positions[name]}",
                    )

    async def run(
        self, ctx: RuntimeContext, resolver: Optional[ArtifactResolver] = None
    ) -> List[DeploymentRecord]:
        """
        Plan every step, submit the batch and record the deployments.

        Nothing is submitted unless every step plans successfully. Records are
        persisted to the manifest before returning.

        Args:
            ctx: Runtime context of this run
            resolver: Artifact resolver (defaults to one over ctx.config.build_dir)

        Returns:
            Records of the contracts deployed by this run

        Raises:
            DeploymentError: Any failure; the run stops at the first one
        """
        self.validate()

        network = ctx.network
        ctx.manifest.load(network)

        if resolver is None:
            resolver = ArtifactResolver(ctx.config.build_dir)
        batcher = CallBatcher(
            ctx.client,
            fee_multiplier_percent=ctx.config.fee_multiplier_percent,
            inclusion_timeout=ctx.config.inclusion_timeout,
        )
        tracker = DeclarationTracker(ctx.client, batcher)
        planner = DeploymentPlanner(
            network, ctx.signer.address, resolver, tracker, batcher, ctx.manifest
        )

        logger.info("Running pipeline '%s' on %s (%d steps)", self.name, network, len(self.steps))
        for step in self.steps:
            if isinstance(step, DeploymentRequest):
                await planner.plan(step)
            elif isinstance(step, DeclareRequest):
                await planner.plan_declare(step)
            else:
                planner.plan_invoke(step)

        try:
            outcomes = await batcher.flush()
        except NetworkError:
            tracker.forget_pending()
            raise
        tracker.confirm(outcomes)

        records = []
        for outcome in outcomes:
            if outcome.call.kind is not CallKind.DEPLOY:
                continue
            record = DeploymentRecord(
                network=network,
                name=outcome.call.name,
                address=outcome.address,
                class_hash=outcome.class_hash,
                abi=outcome.call.abi or [],
                timestamp=int(time.time()),
                transaction_hash=outcome.transaction_hash,
                block_number=outcome.block_number,
            )
            ctx.manifest.record_success(record)
            records.append(record)
            logger.info("Deployed %s at %s", record.name, hex(record.address))

        # Confirmed deployments are on disk before anything else can fail
        ctx.manifest.persist(network)

        # Records are the objects held by the manifest store
        if records and await stamp_block_times(ctx.client, records):
            ctx.manifest.persist(network)

        logger.info("Pipeline '%s' done: %d contract(s) deployed", self.name, len(records))
        return records
