"""Network client and signer interfaces, plus the starknet-py adapter."""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import ResourceBoundsMapping
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair
from starknet_py.transaction_errors import (
    TransactionFailedError,
    TransactionNotReceivedError,
    TransactionRevertedError,
)

from .config import DeployConfig
from .exceptions import (
    EstimationFailedError,
    InclusionTimeoutError,
    NetworkError,
    SubmissionRejectedError,
)
from .types import CallKind, FeeEstimate, PendingCall, Receipt

logger = logging.getLogger(__name__)

# JSON-RPC error code for an unknown class hash
CLASS_HASH_NOT_FOUND = 28

HEX_PATTERN = re.compile(r"0x[0-9a-fA-F]+")

# Keys of an execution error frame that hold felts, not nested errors
FRAME_KEYS = ("contract_address", "class_hash", "selector")


class Signer(Protocol):
    """The deploying identity."""

    @property
    def address(self) -> int: ...


class NetworkClient(Protocol):
    """Blockchain endpoint used by the orchestration core."""

    @property
    def address(self) -> int: ...

    async def get_nonce(self) -> int: ...

    async def is_declared(self, class_hash: int) -> bool: ...

    async def estimate_fee(self, calls: Sequence[PendingCall], nonce: int) -> FeeEstimate: ...

    async def submit(
        self, calls: Sequence[PendingCall], nonce: int, estimate: FeeEstimate, max_fee: int
    ) -> int: ...

    async def wait_for_inclusion(self, transaction_hash: int, timeout: float) -> Receipt: ...

    async def get_block_timestamp(self, block_number: int) -> int: ...


def _felt(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and HEX_PATTERN.fullmatch(value):
        return int(value, 16)
    return None


def execution_frames(detail: Any) -> List[Tuple[int, Optional[int]]]:
    """
    Collect (contract address, selector) pairs from an execution error.

    Structured errors nest one frame per called contract; plain-text revert
    reasons only name contracts by address, so every hex number in them is
    taken as a candidate address.

    Args:
        detail: ClientError data, revert reason or message

    Returns:
        Frames, outermost call first
    """
    frames: List[Tuple[int, Optional[int]]] = []

    if isinstance(detail, dict):
        address = _felt(detail.get("contract_address"))
        if address is not None:
            frames.append((address, _felt(detail.get("selector"))))
        for key, value in detail.items():
            if key not in FRAME_KEYS:
                frames.extend(execution_frames(value))
    elif isinstance(detail, (list, tuple)):
        for value in detail:
            frames.extend(execution_frames(value))
    elif isinstance(detail, str):
        frames.extend((int(match, 16), None) for match in HEX_PATTERN.findall(detail))

    return frames


def _is_target(call: PendingCall, address: int, selector: Optional[int]) -> bool:
    if call.kind is CallKind.DEPLOY:
        # Deploys all go through the UDC; the constructor frame names the new contract
        return address == call.address
    if call.kind is CallKind.INVOKE:
        return address == call.payload.to_addr and selector in (None, call.payload.selector)
    return False


def find_failing_call(calls: Sequence[PendingCall], *details: Any) -> Optional[int]:
    """
    Find which call of a multicall an execution error comes from.

    The outermost frame naming exactly one call wins, so a constructor that
    reverts inside a nested call is still blamed on its own deploy.

    Returns:
        Index into calls, or None if no frame names a single call
    """
    for detail in details:
        for address, selector in execution_frames(detail):
            matches = [i for i, call in enumerate(calls) if _is_target(call, address, selector)]
            if len(matches) == 1:
                return matches[0]
    return None


def _chain_for(network: str) -> StarknetChainId:
    if network == "mainnet":
        return StarknetChainId.MAINNET
    # devnet serves the sepolia chain id
    return StarknetChainId.SEPOLIA


class StarknetNetworkClient:
    """
    NetworkClient backed by a starknet-py Account.

    A batch is either a single declare call or any number of deploy/invoke
    calls sent as one multicall invoke transaction.
    """

    def __init__(self, account: Account):
        self.account = account
        self.client = account.client
        # Calls of each submitted transaction, to attribute reverts
        self._submitted: Dict[int, List[PendingCall]] = {}

    @classmethod
    def from_config(cls, config: DeployConfig) -> "StarknetNetworkClient":
        """Connect the configured account to the configured RPC endpoint."""
        client = FullNodeClient(node_url=config.rpc_url)
        account = Account(
            client=client,
            address=config.account_address,
            key_pair=KeyPair.from_private_key(config.private_key),
            chain=_chain_for(config.network),
        )
        return cls(account)

    @property
    def address(self) -> int:
        return self.account.address

    async def get_nonce(self) -> int:
        try:
            return await self.account.get_nonce()
        except ClientError as e:
            raise EstimationFailedError(f"Cannot fetch account nonce: {e.message}") from e

    async def is_declared(self, class_hash: int) -> bool:
        try:
            await self.client.get_class_by_hash(class_hash)
        except ClientError as e:
            if e.code == CLASS_HASH_NOT_FOUND:
                return False
            raise EstimationFailedError(
                f"Cannot check declaration of {hex(class_hash)}: {e.message}"
            ) from e
        return True

    async def get_block_timestamp(self, block_number: int) -> int:
        try:
            block = await self.client.get_block(block_number=block_number)
        except ClientError as e:
            raise NetworkError(f"Cannot fetch block {block_number}: {e.message}") from e
        return block.timestamp

    async def _sign(
        self, calls: Sequence[PendingCall], nonce: int, resource_bounds: ResourceBoundsMapping
    ):
        if calls[0].kind is CallKind.DECLARE:
            artifact = calls[0].payload
            return await self.account.sign_declare_v3(
                compiled_contract=artifact.sierra,
                compiled_class_hash=artifact.compiled_class_hash,
                nonce=nonce,
                resource_bounds=resource_bounds,
            )
        return await self.account.sign_invoke_v3(
            calls=[call.payload for call in calls],
            nonce=nonce,
            resource_bounds=resource_bounds,
        )

    async def estimate_fee(self, calls: Sequence[PendingCall], nonce: int) -> FeeEstimate:
        try:
            transaction = await self._sign(calls, nonce, ResourceBoundsMapping.init_with_zeros())
            estimated = await self.account.estimate_fee(transaction)
        except ClientError as e:
            raise EstimationFailedError(
                f"Fee estimation failed: {e.message}",
                call_index=find_failing_call(calls, e.data, e.message),
            ) from e

        if isinstance(estimated, list):
            estimated = estimated[0]
        return FeeEstimate(overall_fee=estimated.overall_fee, raw=estimated)

    async def submit(
        self, calls: Sequence[PendingCall], nonce: int, estimate: FeeEstimate, max_fee: int
    ) -> int:
        # Scale unit prices so the total never exceeds max_fee
        factor = max_fee / estimate.overall_fee if estimate.overall_fee else 1.0
        resource_bounds = estimate.raw.to_resource_bounds(
            amount_multiplier=1.0, unit_price_multiplier=factor
        )

        try:
            transaction = await self._sign(calls, nonce, resource_bounds)
            if calls[0].kind is CallKind.DECLARE:
                response = await self.client.declare(transaction=transaction)
            else:
                response = await self.client.send_transaction(transaction)
        except ClientError as e:
            raise SubmissionRejectedError(
                f"Transaction rejected: {e.message}",
                call_index=find_failing_call(calls, e.data, e.message),
            ) from e

        self._submitted[response.transaction_hash] = list(calls)
        logger.debug(
            "Sent %s (%d call(s), nonce %d, max fee %d)",
            hex(response.transaction_hash),
            len(calls),
            nonce,
            max_fee,
        )
        return response.transaction_hash

    async def wait_for_inclusion(self, transaction_hash: int, timeout: float) -> Receipt:
        calls = self._submitted.pop(transaction_hash, [])
        try:
            receipt = await asyncio.wait_for(self.client.wait_for_tx(transaction_hash), timeout)
        except asyncio.TimeoutError as e:
            raise InclusionTimeoutError(
                f"Transaction {hex(transaction_hash)} not included after {timeout}s"
            ) from e
        except TransactionNotReceivedError as e:
            raise InclusionTimeoutError(
                f"Transaction {hex(transaction_hash)} was not received: {e}"
            ) from e
        except TransactionRevertedError as e:
            raise SubmissionRejectedError(
                f"Transaction {hex(transaction_hash)} reverted: {e}",
                call_index=find_failing_call(calls, e.message),
            ) from e
        except (TransactionFailedError, ClientError) as e:
            raise SubmissionRejectedError(
                f"Transaction {hex(transaction_hash)} failed: {e}"
            ) from e

        return Receipt(transaction_hash=transaction_hash, block_number=receipt.block_number)
