"""Call batching and submission for starknet-deployments library."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import DEFAULT_FEE_MULTIPLIER_PERCENT, DEFAULT_INCLUSION_TIMEOUT_SECONDS
from .exceptions import DeclarationFailedError, NetworkError, SubmissionRejectedError
from .network import NetworkClient
from .types import CallKind, CallOutcome, PendingCall, Receipt

logger = logging.getLogger(__name__)

# (positions in the flushed queue, calls) of one transaction
Transaction = Tuple[List[int], List[PendingCall]]


def group_transactions(calls: Sequence[PendingCall]) -> List[Transaction]:
    """
    Split queued calls into transactions.

    Declares cannot be part of a multicall, so each gets its own transaction,
    submitted first. All deploy and invoke calls share one multicall, which
    executes atomically.

    Args:
        calls: Queued calls in enqueue order

    Returns:
        Transactions in submission order
    """
    transactions: List[Transaction] = []
    multicall: Transaction = ([], [])

    for index, call in enumerate(calls):
        if call.kind is CallKind.DECLARE:
            transactions.append(([index], [call]))
        else:
            multicall[0].append(index)
            multicall[1].append(call)

    if multicall[1]:
        transactions.append(multicall)
    return transactions


class CallBatcher:
    """Accumulates calls and flushes them as few transactions as possible."""

    def __init__(
        self,
        client: NetworkClient,
        fee_multiplier_percent: int = DEFAULT_FEE_MULTIPLIER_PERCENT,
        inclusion_timeout: float = DEFAULT_INCLUSION_TIMEOUT_SECONDS,
    ):
        """
        Initialize the batcher.

        Args:
            client: Network client used for nonce, estimation and submission
            fee_multiplier_percent: Fee ceiling as a percentage of the estimate
            inclusion_timeout: Seconds to wait for each transaction to be included
        """
        self._client = client
        self.fee_multiplier_percent = fee_multiplier_percent
        self.inclusion_timeout = inclusion_timeout
        self._queue: List[PendingCall] = []

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> Tuple[PendingCall, ...]:
        return tuple(self._queue)

    def enqueue(self, call: PendingCall) -> None:
        self._queue.append(call)

    async def flush(self) -> List[CallOutcome]:
        """
        Submit every queued call and wait for inclusion.

        The queue is emptied whatever the outcome; failed calls are not
        retried.

        Returns:
            One CallOutcome per call, in enqueue order

        Raises:
            EstimationFailedError: If the node cannot estimate a transaction
            SubmissionRejectedError: If a transaction is refused or reverts
            InclusionTimeoutError: If a transaction is not confirmed in time
            DeclarationFailedError: If any of the above hit a declare transaction
        """
        calls, self._queue = self._queue, []
        if not calls:
            return []

        transactions = group_transactions(calls)
        logger.info(
            "Flushing %d call(s) in %d transaction(s)", len(calls), len(transactions)
        )

        nonce = await self._client.get_nonce()
        outcomes: Dict[int, CallOutcome] = {}

        for indices, tx_calls in transactions:
            try:
                receipt = await self._send(tx_calls, nonce)
            except NetworkError as e:
                raise self._attribute(e, indices, tx_calls) from e
            nonce += 1

            for index, call in zip(indices, tx_calls):
                outcomes[index] = CallOutcome(
                    call=call,
                    transaction_hash=receipt.transaction_hash,
                    block_number=receipt.block_number,
                )

        return [outcomes[index] for index in range(len(calls))]

    async def _send(self, calls: List[PendingCall], nonce: int) -> Receipt:
        estimate = await self._client.estimate_fee(calls, nonce)
        max_fee = estimate.ceiling(self.fee_multiplier_percent)

        # Request-level ceilings can only lower the computed one
        caps = [call.max_fee for call in calls if call.max_fee is not None]
        if caps:
            cap = min(caps)
            if cap < estimate.overall_fee:
                raise SubmissionRejectedError(
                    f"Estimated fee {estimate.overall_fee} exceeds max fee {cap}"
                )
            max_fee = min(max_fee, cap)

        logger.info("Estimated fee: %d, max fee (with buffer): %d", estimate.overall_fee, max_fee)

        transaction_hash = await self._client.submit(calls, nonce, estimate, max_fee)
        logger.info(
            "Waiting for transaction %s to be included in a block...", hex(transaction_hash)
        )
        receipt = await self._client.wait_for_inclusion(transaction_hash, self.inclusion_timeout)
        logger.info("Transaction %s included in block %s", hex(transaction_hash), receipt.block_number)
        return receipt

    @staticmethod
    def _attribute(
        error: NetworkError, indices: List[int], calls: List[PendingCall]
    ) -> NetworkError:
        """Rebuild a transaction error so it names the failing queue position."""
        call_index: Optional[int] = None
        if error.call_index is not None and error.call_index < len(indices):
            call_index = indices[error.call_index]
        elif len(indices) == 1:
            call_index = indices[0]

        if calls[0].kind is CallKind.DECLARE:
            return DeclarationFailedError(
                f"Declaration of {calls[0].name} failed: {error}", call_index=call_index
            )

        if call_index is not None:
            failed = calls[indices.index(call_index)]
            message = f"Call #{call_index} ({failed.kind.value} {failed.name}) failed: {error}"
        else:
            message = f"Multicall of {len(calls)} call(s) failed: {error}"
        return type(error)(message, call_index=call_index)
