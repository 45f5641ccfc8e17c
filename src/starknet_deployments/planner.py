"""Deployment planning for starknet-deployments library."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from starknet_py.hash.address import compute_address
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.hash.utils import pedersen_hash
from starknet_py.net.client_models import Call
from starknet_py.utils.constructor_args_translator import translate_constructor_args

from .artifacts import ArtifactResolver
from .batcher import CallBatcher
from .constants import UDC_ADDRESS
from .declarations import DeclarationTracker
from .exceptions import UnresolvedReferenceError
from .manifest import ManifestStore
from .types import (
    DEPLOYER,
    AddressOf,
    Arguments,
    CallKind,
    ClassHashOf,
    DeclareRequest,
    DeploymentRequest,
    InvokeRequest,
    PendingCall,
)

logger = logging.getLogger(__name__)


def is_raw_calldata(args: Any) -> bool:
    return isinstance(args, (list, tuple)) and all(isinstance(arg, int) for arg in args)


def serialize_constructor_args(abi: List[Dict[str, Any]], args: Optional[Arguments]) -> List[int]:
    """
    Turn resolved constructor arguments into calldata.

    A list of ints is taken as raw calldata; anything else is serialized
    against the constructor in the ABI.
    """
    if not args:
        return []
    if is_raw_calldata(args):
        return list(args)
    if not any(entry.get("type") == "constructor" for entry in abi):
        raise ValueError(f"ABI has no constructor to take arguments {args!r}")
    return translate_constructor_args(abi=abi, constructor_args=args, cairo_version=1)


def compute_deployment(
    class_hash: int, calldata: List[int], salt: int, deployer_address: int
) -> tuple[int, Call]:
    """
    Compute the address and UDC call of a unique deployment.

    With unique=1 the UDC salts with the caller's address, so the address only
    depends on (deployer, class hash, calldata, salt).

    Returns:
        Tuple of (contract_address, udc_call)
    """
    address = compute_address(
        class_hash=class_hash,
        constructor_calldata=calldata,
        salt=pedersen_hash(deployer_address, salt),
        deployer_address=UDC_ADDRESS,
    )
    call = Call(
        to_addr=UDC_ADDRESS,
        selector=get_selector_from_name("deployContract"),
        calldata=[class_hash, salt, 1, len(calldata), *calldata],
    )
    return address, call


class DeploymentPlanner:
    """Turns requests into pending calls, resolving references to earlier results."""

    def __init__(
        self,
        network: str,
        deployer_address: int,
        resolver: ArtifactResolver,
        tracker: DeclarationTracker,
        batcher: CallBatcher,
        manifest: ManifestStore,
    ):
        self.network = network
        self.deployer_address = deployer_address
        self._resolver = resolver
        self._tracker = tracker
        self._batcher = batcher
        self._manifest = manifest

        # Results planned in this run take precedence over the manifest
        self._addresses: Dict[str, int] = {}
        self._class_hashes: Dict[str, int] = {}

    def address_of(self, name: str) -> int:
        """
        Get the address of a contract planned in this run or found in the manifest.

        Raises:
            UnresolvedReferenceError: If the contract is unknown
        """
        if name in self._addresses:
            return self._addresses[name]

        record = self._manifest.lookup(self.network, name)
        if record is None:
            raise UnresolvedReferenceError(
                name, f"Address of '{name}' is not known on {self.network}; deploy it first"
            )
        return record.address

    def class_hash_of(self, name: str) -> int:
        """
        Get the class hash of a contract declared in this run or found in the manifest.

        Raises:
            UnresolvedReferenceError: If the contract is unknown
        """
        if name in self._class_hashes:
            return self._class_hashes[name]

        record = self._manifest.lookup(self.network, name)
        if record is None:
            raise UnresolvedReferenceError(
                name, f"Class hash of '{name}' is not known on {self.network}; declare it first"
            )
        return record.class_hash

    def resolve_args(self, args: Any) -> Any:
        """Replace AddressOf, ClassHashOf and DEPLOYER placeholders, recursively."""
        if args is DEPLOYER:
            return self.deployer_address
        if isinstance(args, AddressOf):
            return self.address_of(args.name)
        if isinstance(args, ClassHashOf):
            return self.class_hash_of(args.name)
        if isinstance(args, Mapping):
            return {key: self.resolve_args(value) for key, value in args.items()}
        if isinstance(args, (list, tuple)):
            return [self.resolve_args(value) for value in args]
        return args

    async def plan(self, request: DeploymentRequest) -> Optional[PendingCall]:
        """
        Plan a deployment and queue its deploy call.

        Args:
            request: Deployment request

        Returns:
            The queued deploy call, or None when the manifest already holds
            a deployment with the same address and class hash

        Raises:
            UnresolvedReferenceError: If an argument references an unknown contract
            ArtifactError: If the contract cannot be loaded
            ValueError: If the arguments do not fit the constructor
        """
        # Resolve references before queuing anything
        args = self.resolve_args(request.constructor_args)

        artifact = self._resolver.resolve(request.contract)
        calldata = serialize_constructor_args(artifact.abi, args)

        class_hash = await self._tracker.declare(artifact)
        salt = request.salt if request.salt is not None else self.deployer_address
        address, udc_call = compute_deployment(class_hash, calldata, salt, self.deployer_address)
        self._class_hashes[request.name] = class_hash
        self._addresses[request.name] = address

        existing = self._manifest.lookup(self.network, request.name)
        if existing is not None and existing.address == address and existing.class_hash == class_hash:
            logger.info("%s already deployed at %s, skipping", request.name, hex(address))
            return None

        logger.info("Planned %s at %s", request.name, hex(address))
        call = PendingCall(
            kind=CallKind.DEPLOY,
            name=request.name,
            payload=udc_call,
            class_hash=class_hash,
            address=address,
            abi=artifact.abi,
            max_fee=request.max_fee,
        )
        self._batcher.enqueue(call)
        return call

    async def plan_declare(self, request: DeclareRequest) -> int:
        """Declare a class without deploying it; returns its class hash."""
        artifact = self._resolver.resolve(request.contract)
        class_hash = await self._tracker.declare(artifact)
        self._class_hashes[request.name] = class_hash
        return class_hash

    def plan_invoke(self, request: InvokeRequest) -> PendingCall:
        """
        Queue a call to an external function of a deployed contract.

        Arguments must resolve to felts (ints).

        Raises:
            UnresolvedReferenceError: If the target or an argument is unknown
            ValueError: If an argument does not resolve to an int
        """
        address = self.address_of(request.contract_name)
        args = self.resolve_args(request.args) if request.args is not None else []
        if isinstance(args, Mapping):
            args = list(args.values())
        if not is_raw_calldata(args):
            raise ValueError(
                f"Arguments of {request.contract_name}.{request.function} must be felts, got {args!r}"
            )

        logger.info("Planned %s.%s(%s)", request.contract_name, request.function,
                    ", ".join(hex(arg) for arg in args))
        call = PendingCall(
            kind=CallKind.INVOKE,
            name=request.contract_name,
            payload=Call(
                to_addr=address,
                selector=get_selector_from_name(request.function),
                calldata=list(args),
            ),
            address=address,
            max_fee=request.max_fee,
        )
        self._batcher.enqueue(call)
        return call
