"""
starknet-deployments: declare, deploy and wire up Starknet contracts, keeping a per-network manifest
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactResolver
from .batcher import CallBatcher
from .config import DeployConfig, load_config
from .context import RuntimeContext
from .declarations import DeclarationTracker
from .exceptions import (
    ArtifactCorruptError,
    ArtifactError,
    ArtifactNotFoundError,
    ConfigurationError,
    DeclarationFailedError,
    DeploymentError,
    EstimationFailedError,
    InclusionTimeoutError,
    NetworkError,
    NetworkNotFoundError,
    PersistenceError,
    SubmissionRejectedError,
    UnresolvedReferenceError,
)
from .manifest import ManifestStore
from .pipelines import Pipeline
from .planner import DeploymentPlanner
from .types import (
    DEPLOYER,
    AddressOf,
    ClassHashOf,
    DeclareRequest,
    DeploymentRecord,
    DeploymentRequest,
    InvokeRequest,
    Manifest,
)

try:
    __version__ = version("starknet-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "ArtifactResolver",
    "CallBatcher",
    "DeclarationTracker",
    "DeploymentPlanner",
    "ManifestStore",
    "Pipeline",
    "RuntimeContext",
    "DeployConfig",
    "load_config",
    "AddressOf",
    "ClassHashOf",
    "DEPLOYER",
    "DeclareRequest",
    "DeploymentRequest",
    "InvokeRequest",
    "DeploymentRecord",
    "Manifest",
    "DeploymentError",
    "ArtifactError",
    "ArtifactNotFoundError",
    "ArtifactCorruptError",
    "UnresolvedReferenceError",
    "NetworkError",
    "EstimationFailedError",
    "SubmissionRejectedError",
    "InclusionTimeoutError",
    "DeclarationFailedError",
    "PersistenceError",
    "ConfigurationError",
    "NetworkNotFoundError",
]
