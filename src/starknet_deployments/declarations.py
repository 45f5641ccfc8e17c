"""Once-per-run class declaration for starknet-deployments library."""

import logging
from typing import Dict, Iterable, Optional

from .batcher import CallBatcher
from .network import NetworkClient
from .types import (
    CallKind,
    CallOutcome,
    ContractArtifact,
    DeclarationState,
    DeclaredClass,
    PendingCall,
)

logger = logging.getLogger(__name__)


class DeclarationTracker:
    """
    Ensures each contract class is declared at most once per run.

    Entries are keyed by the locally computed class hash. An entry starts
    UNDECLARED when its declare call is queued and becomes DECLARED once the
    batch carrying it is confirmed.
    """

    def __init__(self, client: NetworkClient, batcher: CallBatcher):
        self._client = client
        self._batcher = batcher
        self._classes: Dict[int, DeclaredClass] = {}

    async def declare(self, artifact: ContractArtifact) -> int:
        """
        Get the class hash of an artifact, queuing a declare call if needed.

        Args:
            artifact: Compiled contract

        Returns:
            Class hash, known before the declaration is confirmed
        """
        entry = self._classes.get(artifact.class_hash)
        if entry is not None:
            return entry.class_hash

        entry = DeclaredClass(name=artifact.name, class_hash=artifact.class_hash)

        if await self._client.is_declared(artifact.class_hash):
            logger.info("%s already declared (%s), skipping", artifact.name, hex(artifact.class_hash))
            entry.state = DeclarationState.DECLARED
        else:
            logger.info("Queuing declaration of %s (%s)", artifact.name, hex(artifact.class_hash))
            self._batcher.enqueue(
                PendingCall(
                    kind=CallKind.DECLARE,
                    name=artifact.name,
                    payload=artifact,
                    class_hash=artifact.class_hash,
                    abi=artifact.abi,
                )
            )

        self._classes[artifact.class_hash] = entry
        return entry.class_hash

    def state(self, class_hash: int) -> Optional[DeclarationState]:
        entry = self._classes.get(class_hash)
        return entry.state if entry is not None else None

    def confirm(self, outcomes: Iterable[CallOutcome]) -> None:
        """Mark classes declared by a confirmed batch."""
        for outcome in outcomes:
            if outcome.call.kind is CallKind.DECLARE:
                self._classes[outcome.class_hash].state = DeclarationState.DECLARED

    def forget_pending(self) -> None:
        """Drop entries whose declare call was discarded by a failed flush."""
        self._classes = {
            class_hash: entry
            for class_hash, entry in self._classes.items()
            if entry.state is DeclarationState.DECLARED
        }
