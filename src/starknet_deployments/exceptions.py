"""Custom exception classes for starknet-deployments library."""

from typing import Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ArtifactError(DeploymentError):
    """Raised when a compiled contract cannot be used."""

    pass


class ArtifactNotFoundError(ArtifactError, FileNotFoundError):
    """Raised when no compiled output matches a contract name."""

    pass


class ArtifactCorruptError(ArtifactError, ValueError):
    """Raised when compiled output exists but cannot be parsed or hashed."""

    pass


class UnresolvedReferenceError(DeploymentError, LookupError):
    """Raised when a request references a contract that is not deployed yet."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Reference to '{name}' could not be resolved")


class NetworkError(DeploymentError, RuntimeError):
    """
    Base exception for estimation, submission and inclusion failures.

    Attributes:
        call_index: Index of the failing call in the flushed batch, if known
    """

    def __init__(self, message: str, call_index: Optional[int] = None):
        self.call_index = call_index
        super().__init__(message)


class EstimationFailedError(NetworkError):
    """Raised when the node is unreachable or the simulation reverts."""

    pass


class SubmissionRejectedError(NetworkError):
    """Raised when the node refuses a signed transaction."""

    pass


class InclusionTimeoutError(NetworkError, TimeoutError):
    """Raised when a submitted transaction is not confirmed in time."""

    pass


class DeclarationFailedError(NetworkError):
    """Raised when a declare transaction did not produce its class."""

    pass


class PersistenceError(DeploymentError, OSError):
    """Raised when the manifest cannot be read or durably written."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when environment configuration is missing or invalid."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not configured."""

    pass
