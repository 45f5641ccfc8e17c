"""Data types and dataclasses for starknet-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


@dataclass(frozen=True, eq=False)
class ContractArtifact:
    """Compiled contract class loaded from the build directory."""

    name: str  # Logical name, e.g. "Gem"
    sierra: str  # Raw Sierra contract class JSON
    casm: str  # Raw CASM compiled class JSON
    abi: List[Dict[str, Any]]
    class_hash: int
    compiled_class_hash: int


class DeclarationState(Enum):
    """Declare-then-deploy state of a contract class within a run."""

    UNDECLARED = "undeclared"
    DECLARED = "declared"


@dataclass
class DeclaredClass:
    """Declaration tracker cache entry."""

    name: str
    class_hash: int
    state: DeclarationState = DeclarationState.UNDECLARED


@dataclass(frozen=True)
class AddressOf:
    """Argument placeholder for the address of a deployed contract."""

    name: str


@dataclass(frozen=True)
class ClassHashOf:
    """Argument placeholder for the class hash of a declared contract."""

    name: str


class _Deployer:
    def __repr__(self) -> str:
        return "DEPLOYER"


# Argument placeholder for the deploying account's address
DEPLOYER = _Deployer()

Arguments = Union[Sequence[Any], Mapping[str, Any]]


def referenced_names(args: Optional[Arguments]) -> List[str]:
    """
    Collect contract names referenced by (possibly nested) arguments.

    Args:
        args: Ordered or named call arguments

    Returns:
        Referenced names in first-seen order, without duplicates
    """
    names: List[str] = []

    def visit(value: Any) -> None:
        if isinstance(value, (AddressOf, ClassHashOf)):
            if value.name not in names:
                names.append(value.name)
        elif isinstance(value, Mapping):
            for item in value.values():
                visit(item)
        elif isinstance(value, (list, tuple)):
            for item in value:
                visit(item)

    if args is not None:
        visit(args)
    return names


@dataclass
class DeploymentRequest:
    """Deploy an instance of a compiled contract."""

    contract: str  # Artifact name
    constructor_args: Optional[Arguments] = None
    contract_name: Optional[str] = None  # Manifest key, defaults to contract
    salt: Optional[int] = None  # Defaults to the deployer address
    max_fee: Optional[int] = None

    @property
    def name(self) -> str:
        return self.contract_name or self.contract

    @property
    def depends_on(self) -> List[str]:
        return referenced_names(self.constructor_args)


@dataclass
class DeclareRequest:
    """Declare a compiled contract class without deploying it."""

    contract: str

    @property
    def name(self) -> str:
        return self.contract

    @property
    def depends_on(self) -> List[str]:
        return []


@dataclass
class InvokeRequest:
    """Call an external function of an already deployed contract."""

    contract_name: str
    function: str
    args: Optional[Arguments] = None
    max_fee: Optional[int] = None

    @property
    def name(self) -> str:
        return self.contract_name

    @property
    def depends_on(self) -> List[str]:
        names = [self.contract_name]
        for name in referenced_names(self.args):
            if name not in names:
                names.append(name)
        return names


class CallKind(Enum):
    """Kind of a queued call; declares cannot share a multicall."""

    DECLARE = "declare"
    DEPLOY = "deploy"
    INVOKE = "invoke"


@dataclass
class PendingCall:
    """A declare, deploy or invoke call held by the batcher until flush."""

    kind: CallKind
    name: str
    payload: Any  # ContractArtifact for declares, starknet_py Call otherwise
    class_hash: Optional[int] = None
    address: Optional[int] = None
    abi: Optional[List[Dict[str, Any]]] = None
    max_fee: Optional[int] = None


@dataclass
class FeeEstimate:
    """Fee estimate for one transaction, in the fee token's base unit."""

    overall_fee: int
    raw: Any = None  # SDK estimate object, used by the client to derive bounds

    def ceiling(self, multiplier_percent: int) -> int:
        return self.overall_fee * multiplier_percent // 100


@dataclass
class Receipt:
    """Confirmation of an included transaction."""

    transaction_hash: int
    block_number: Optional[int] = None


@dataclass
class CallOutcome:
    """Result of one flushed call."""

    call: PendingCall
    transaction_hash: int
    block_number: Optional[int] = None

    @property
    def class_hash(self) -> Optional[int]:
        return self.call.class_hash

    @property
    def address(self) -> Optional[int]:
        return self.call.address


@dataclass
class DeploymentRecord:
    """Information about a deployed contract, the unit of manifest persistence."""

    # Required fields
    network: str  # "devnet", "sepolia" or "mainnet"
    name: str  # Logical contract name, e.g. "Gem"
    address: int
    class_hash: int
    abi: List[Dict[str, Any]]
    timestamp: int  # Unix timestamp

    # Optional fields
    transaction_hash: Optional[int] = None
    block_number: Optional[int] = None


@dataclass
class Manifest:
    """Deployments of one network keyed by contract name."""

    network: str
    contracts: Dict[str, DeploymentRecord] = field(default_factory=dict)
