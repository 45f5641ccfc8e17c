"""Unit tests for the declaration tracker."""

import asyncio

from conftest import FakeNetworkClient
from starknet_deployments.artifacts import ArtifactResolver
from starknet_deployments.batcher import CallBatcher
from starknet_deployments.declarations import DeclarationTracker
from starknet_deployments.types import CallKind, DeclarationState


class TestDeclare:
    """Test DeclarationTracker.declare()."""

    def test_queues_declare_for_new_class(
        self, resolver: ArtifactResolver, tracker: DeclarationTracker, batcher: CallBatcher
    ):
        """Test that an unknown class gets a declare call and its local hash."""
        artifact = resolver.resolve("Gem")

        class_hash = asyncio.run(tracker.declare(artifact))

        assert class_hash == artifact.class_hash
        assert [call.kind for call in batcher.pending] == [CallKind.DECLARE]
        assert batcher.pending[0].payload is artifact
        assert tracker.state(class_hash) is DeclarationState.UNDECLARED

    def test_declare_twice_queues_once(
        self,
        resolver: ArtifactResolver,
        tracker: DeclarationTracker,
        batcher: CallBatcher,
        client: FakeNetworkClient,
    ):
        """Test that the second declare of an artifact is served from the cache."""
        artifact = resolver.resolve("Gem")

        first = asyncio.run(tracker.declare(artifact))
        second = asyncio.run(tracker.declare(artifact))

        assert first == second
        assert len(batcher) == 1
        # Only the first call asked the network
        assert client.is_declared_calls == [artifact.class_hash]

    def test_declare_twice_across_flush_issues_one_transaction(
        self,
        resolver: ArtifactResolver,
        tracker: DeclarationTracker,
        batcher: CallBatcher,
        client: FakeNetworkClient,
    ):
        """Test that a class declared by an earlier flush is not declared again."""
        artifact = resolver.resolve("Gem")

        async def run():
            await tracker.declare(artifact)
            tracker.confirm(await batcher.flush())
            await tracker.declare(artifact)
            return await batcher.flush()

        assert asyncio.run(run()) == []
        assert len(client.submissions) == 1
        assert tracker.state(artifact.class_hash) is DeclarationState.DECLARED

    def test_skips_class_known_to_network(
        self,
        resolver: ArtifactResolver,
        tracker: DeclarationTracker,
        batcher: CallBatcher,
        client: FakeNetworkClient,
    ):
        """Test that a class declared by a previous run is not declared again."""
        artifact = resolver.resolve("Gem")
        client.declared.add(artifact.class_hash)

        class_hash = asyncio.run(tracker.declare(artifact))

        assert class_hash == artifact.class_hash
        assert len(batcher) == 0
        assert tracker.state(class_hash) is DeclarationState.DECLARED


class TestConfirmation:
    """Test confirm() and forget_pending()."""

    def test_confirm_marks_declared(
        self, resolver: ArtifactResolver, tracker: DeclarationTracker, batcher: CallBatcher
    ):
        """Test that a confirmed batch moves the entry to DECLARED."""
        artifact = resolver.resolve("Quest")

        async def run():
            await tracker.declare(artifact)
            tracker.confirm(await batcher.flush())

        asyncio.run(run())

        assert tracker.state(artifact.class_hash) is DeclarationState.DECLARED

    def test_forget_pending_drops_unconfirmed_only(
        self,
        resolver: ArtifactResolver,
        tracker: DeclarationTracker,
        client: FakeNetworkClient,
    ):
        """Test that a failed flush lets the next attempt declare again."""
        gem = resolver.resolve("Gem")
        loomi = resolver.resolve("Loomi")
        client.declared.add(loomi.class_hash)

        async def run():
            await tracker.declare(gem)
            await tracker.declare(loomi)

        asyncio.run(run())
        tracker.forget_pending()

        assert tracker.state(gem.class_hash) is None
        assert tracker.state(loomi.class_hash) is DeclarationState.DECLARED

    def test_unknown_class_has_no_state(self, tracker: DeclarationTracker):
        assert tracker.state(0x1234) is None
